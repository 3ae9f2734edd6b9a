"""
Content store error taxonomy.

Raised inside accessors and converted to failed results at the accessor
boundary (see utils.results.accessor).
"""


class ContentError(Exception):
    """Base class for content store failures."""

    status_code = 500
    error_type = "error"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(ContentError):
    """Malformed or out-of-bound input, detected before any store call."""

    status_code = 422
    error_type = "validation"


class NotFoundError(ContentError):
    status_code = 404
    error_type = "not_found"


class ConflictError(ContentError):
    """Unique constraint (slug, name) would be violated."""

    status_code = 409
    error_type = "conflict"


class ReferentialError(ContentError):
    """Delete blocked by a live reference."""

    status_code = 409
    error_type = "referential"


class StoreError(ContentError):
    """Store unreachable or rejected the query."""

    status_code = 503
    error_type = "store"
