"""
Repository Layer Exceptions.

============================================================
PURPOSE
============================================================
Every SQLAlchemy / driver error raised while reading or writing
blocks and event records is wrapped in one of these, so the sync
engine only ever has to catch RepositoryException.

============================================================
"""

from typing import Optional


class RepositoryException(Exception):
    """Base exception for all repository operations."""

    def __init__(
        self,
        message: str,
        repository_name: str,
        operation: str,
        details: Optional[dict] = None
    ) -> None:
        self.message = message
        self.repository_name = repository_name
        self.operation = operation
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return f"[{self.repository_name}] {self.operation}: {self.message}"


class ConnectionError(RepositoryException):
    """The database could not be reached (timeouts, pool exhaustion)."""

    def __init__(self, repository_name: str, operation: str, original_error: str) -> None:
        super().__init__(
            message=f"Database connection failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": original_error}
        )


class IntegrityError(RepositoryException):
    """
    A constraint was violated.

    Inserts of event records ignore conflicts on their natural key,
    so reaching this means a NOT NULL or type constraint failed.
    """

    def __init__(self, repository_name: str, operation: str, message: str) -> None:
        super().__init__(
            message=f"Integrity constraint violated: {message}",
            repository_name=repository_name,
            operation=operation,
        )


class QueryError(RepositoryException):
    """A statement failed for any other reason."""

    def __init__(self, repository_name: str, operation: str, original_error: str) -> None:
        super().__init__(
            message=f"Query failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"original_error": original_error}
        )


class UnsupportedDialectError(RepositoryException):
    """Conflict-ignoring inserts are only implemented for some dialects."""

    def __init__(self, repository_name: str, dialect: str) -> None:
        super().__init__(
            message=f"Dialect '{dialect}' does not support insert-ignore",
            repository_name=repository_name,
            operation="insert",
            details={"dialect": dialect}
        )
        self.dialect = dialect


class TransactionError(RepositoryException):
    """Commit or rollback failed."""

    def __init__(
        self,
        repository_name: str,
        operation: str,
        phase: str,
        original_error: str
    ) -> None:
        super().__init__(
            message=f"Transaction {phase} failed: {original_error}",
            repository_name=repository_name,
            operation=operation,
            details={"phase": phase, "original_error": original_error}
        )
        self.phase = phase
