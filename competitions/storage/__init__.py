"""
Storage module for competitions.

Provides a unified interface for the repository backends:
- SQLite (default, persistent)
- Memory (tests, throwaway instances)

Usage:
    from competitions.storage import get_repository

    repo = get_repository()  # Uses DB_TYPE env var
    competition = repo.get_competition("spring-open")
"""

from .base import CompetitionRepository
from .factory import get_repository, reset_repository
from .memory_db import MemoryRepository
from .sqlite_db import SQLiteRepository
from .exceptions import (
    DatabaseError,
    ConfigurationError,
    SchemaError,
    QueryError
)

__all__ = [
    'CompetitionRepository',
    'MemoryRepository',
    'SQLiteRepository',
    'get_repository',
    'reset_repository',
    'DatabaseError',
    'ConfigurationError',
    'SchemaError',
    'QueryError'
]
