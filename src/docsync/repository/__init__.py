"""
Document repository contract and store adapters.
"""

from .base import DocumentRepository, Pagination, QueryParams
from .connection import DatabaseConnectionPool
from .memory import InMemoryDocumentRepository
from .postgres import PostgresDocumentRepository

__all__ = [
    "DocumentRepository",
    "Pagination",
    "QueryParams",
    "DatabaseConnectionPool",
    "InMemoryDocumentRepository",
    "PostgresDocumentRepository",
]
