"""
Storage Repositories.

Submodules are imported directly (`storage.repositories.events`,
`storage.repositories.blocks`); this package only re-exports the
exceptions, which the sync engine catches.
"""

from storage.repositories.exceptions import (
    ConnectionError,
    IntegrityError,
    QueryError,
    RepositoryException,
    TransactionError,
    UnsupportedDialectError,
)

__all__ = [
    "ConnectionError",
    "IntegrityError",
    "QueryError",
    "RepositoryException",
    "TransactionError",
    "UnsupportedDialectError",
]
