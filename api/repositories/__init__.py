"""Repository layer for database operations.

Repositories are the only code that builds SQL. Each one owns the
soft-delete visibility rule and the filter-to-predicate mapping for its
model; storage failures leave this layer as ``PersistenceError``.
"""

from repositories.base import CrudRepository
from repositories.client_repository import ClientRepository
from repositories.document_repository import DocumentRepository
from repositories.property_repository import PropertyRepository
from repositories.user_repository import UserRepository
from repositories.utils import repository_operation

__all__ = [
    "ClientRepository",
    "CrudRepository",
    "DocumentRepository",
    "PropertyRepository",
    "UserRepository",
    "repository_operation",
]
