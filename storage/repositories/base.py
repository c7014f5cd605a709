"""
Base Repository Class.

============================================================
PURPOSE
============================================================
Common functionality of the block and event repositories:

- Session injection
- Error wrapping into repository exceptions
- Conflict-ignoring bulk inserts (PostgreSQL, SQLite)
- Deletion of every row of an orphaned block

============================================================
USAGE
============================================================
Repositories never commit; the caller owns the transaction
(see `storage.database.Database.session_scope`).

============================================================
"""

import logging
from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import (
    IntegrityError as SQLAlchemyIntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session

from storage.models.base import Base
from storage.repositories.exceptions import (
    ConnectionError,
    IntegrityError,
    QueryError,
    UnsupportedDialectError,
)


T = TypeVar("T", bound=Base)

INSERT_BUILDERS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}

# Rows per INSERT statement
INSERT_CHUNK_SIZE = 500


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base class for all repositories.

    ============================================================
    USAGE
    ============================================================
    class BlockRepository(BaseRepository[BlockRecord]):
        def __init__(self, session: Session):
            super().__init__(session, BlockRecord, "blocks")

    ============================================================
    """

    def __init__(
        self,
        session: Session,
        model_class: Type[T],
        repository_name: str
    ) -> None:
        self._session = session
        self._model_class = model_class
        self._repository_name = repository_name
        self._logger = logging.getLogger(f"repository.{repository_name}")

    @property
    def session(self) -> Session:
        return self._session

    @property
    def model_class(self) -> Type[T]:
        return self._model_class

    @property
    def repository_name(self) -> str:
        return self._repository_name

    # =========================================================
    # PROTECTED HELPER METHODS
    # =========================================================

    def _handle_db_error(
        self,
        error: Exception,
        operation: str,
        context: Optional[dict] = None
    ) -> None:
        """
        Wrap a database error in a repository exception.

        Raises:
            RepositoryException: Always
        """
        context = context or {}
        self._logger.error(
            f"Database error in {operation}: {error}",
            extra={"context": context},
            exc_info=True
        )

        if isinstance(error, OperationalError):
            raise ConnectionError(
                repository_name=self._repository_name,
                operation=operation,
                original_error=str(error)
            ) from error

        if isinstance(error, SQLAlchemyIntegrityError):
            raise IntegrityError(
                repository_name=self._repository_name,
                operation=operation,
                message=str(error)
            ) from error

        raise QueryError(
            repository_name=self._repository_name,
            operation=operation,
            original_error=str(error)
        ) from error

    def _insert_ignore(self, rows: Sequence[Dict[str, Any]]) -> int:
        """
        Insert rows, silently skipping those whose key already exists.

        Rows are keyed by column name.

        Returns:
            Number of rows actually inserted
        """
        if not rows:
            return 0

        dialect = self._session.get_bind().dialect.name
        builder = INSERT_BUILDERS.get(dialect)
        if builder is None:
            raise UnsupportedDialectError(self._repository_name, dialect)

        inserted = 0
        try:
            for start in range(0, len(rows), INSERT_CHUNK_SIZE):
                chunk = rows[start:start + INSERT_CHUNK_SIZE]
                stmt = builder(self._model_class.__table__).values(list(chunk)).on_conflict_do_nothing()
                result = self._session.execute(stmt)
                inserted += max(result.rowcount, 0)
        except SQLAlchemyError as e:
            self._handle_db_error(e, "insert", {"rows": len(rows)})
            raise

        self._logger.debug(f"Inserted {inserted}/{len(rows)} rows")
        return inserted

    def _count(self) -> int:
        try:
            stmt = select(func.count()).select_from(self._model_class)
            return self._session.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            self._handle_db_error(e, "count")
            raise

    def _execute_query(self, stmt: Any) -> List[T]:
        try:
            result = self._session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self._handle_db_error(e, "query")
            raise

    def _delete_where(self, operation: str, *criteria: Any) -> int:
        """Delete matching rows, returning how many were removed."""
        try:
            result = self._session.execute(
                delete(self._model_class).where(*criteria).execution_options(synchronize_session=False)
            )
            return max(result.rowcount, 0)
        except SQLAlchemyError as e:
            self._handle_db_error(e, operation)
            raise
