"""
Custom exceptions for the storage layer.

These exceptions provide clear error categories for repository operations:
- DatabaseError: Base exception for all storage errors
- ConfigurationError: Missing or invalid configuration
- SchemaError: Schema initialization issues
- QueryError: Query execution or decoding failures
"""


class DatabaseError(Exception):
    """Base exception for all database errors."""
    pass


class ConfigurationError(DatabaseError):
    """Missing or invalid database configuration."""
    pass


class SchemaError(DatabaseError):
    """Error initializing or migrating schema."""
    pass


class QueryError(DatabaseError):
    """Error executing a query or decoding a stored row."""
    pass
