"""Typed failures raised by the canvassing core.

Every failure carries a machine-readable ``code`` and an HTTP-style
``status_code`` so the API layer can render it without inspecting messages.
"""

from typing import Any


class CanvassError(Exception):
    """Base class for all core failures."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class RecordNotFoundError(CanvassError):
    """A referenced address or person id does not exist."""

    code = "RECORD_NOT_FOUND"
    status_code = 404

    def __init__(self, resource_type: str, resource_id: object) -> None:
        super().__init__(
            f"{resource_type} {resource_id} not found",
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class GeocodeUnavailableError(CanvassError):
    """Reverse geocoding produced no coordinates for a visit."""

    code = "GEOCODE_UNAVAILABLE"
    status_code = 502


class ValidationFailedError(CanvassError, ValueError):
    """An entity invariant was violated.

    Args:
        errors: Mapping of field name to a human-readable problem.
    """

    code = "VALIDATION_FAILED"
    status_code = 422

    def __init__(self, errors: dict[str, str]) -> None:
        fields = ", ".join(sorted(errors))
        super().__init__(f"Validation failed for: {fields}", details={"fields": errors})
        self.errors = errors


class ConcurrentAddressConflictError(CanvassError):
    """Concurrent visits kept invalidating the same address update."""

    code = "CONCURRENT_ADDRESS_CONFLICT"
    status_code = 409

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Address was modified concurrently; gave up after {attempts} attempts",
            details={"attempts": attempts},
        )
        self.attempts = attempts


class NotAuthorizedError(CanvassError):
    """The request carried no valid credentials."""

    code = "NOT_AUTHORIZED"
    status_code = 401
