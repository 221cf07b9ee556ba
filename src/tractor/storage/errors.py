"""Storage resource errors."""


class StorageError(Exception):
    """Base exception for storage resource operations."""


class ResourceError(StorageError):
    """Raised when a storage resource cannot be opened or created."""


class ContainsError(StorageError):
    """Raised when containment of a file cannot be decided."""


class PostError(StorageError):
    """Raised when a file cannot be ingested into a resource."""
