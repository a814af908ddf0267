# app/core/exceptions.py
"""Service-level exceptions. Routers translate these into HTTP responses."""


class NotFoundError(ValueError):
    """Raised when a class or student record does not exist."""


class ConflictError(ValueError):
    """Raised when a request clashes with existing state, e.g. a duplicate name or an existing report."""
