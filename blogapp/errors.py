"""
Error kinds raised by the catalog and publishing services.

Every service operation either returns its entity or raises exactly one of
these. The web layer maps each kind to an HTTP status.
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""

    kind = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def image_reference(self) -> Optional[str]:
        # Set when an upload was stored before the failing write
        return self.details.get("image_reference")

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message, "details": self.details}


class ValidationError(CatalogError):
    """Malformed or missing input."""

    kind = "validation_error"


class ConflictError(CatalogError):
    """Slug uniqueness violation."""

    kind = "conflict"


class NotFoundError(CatalogError):
    """Referenced entity does not exist."""

    kind = "not_found"


class DependencyError(CatalogError):
    """Missing foreign key target, or delete blocked by live references."""

    kind = "dependency_error"


class StorageError(CatalogError):
    """Underlying store failure."""

    kind = "storage_error"
