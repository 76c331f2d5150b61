from __future__ import annotations


class BackofficeError(Exception):
    """
    Base class for business-rule failures raised by the service layer.

    Write endpoints answer every subclass with 400 and the to_dict() body.
    status_code is the natural HTTP code for the failure; only plain lookups
    such as GET /api/items/<id> return it. Anything else that escapes a
    service is treated as an internal error.
    """
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(BackofficeError):
    """User, item, sale or open attendance session is absent (404 on lookups)."""
    status_code = 404


class ValidationError(BackofficeError):
    """Malformed or out-of-range input."""
    status_code = 400


class ConflictError(BackofficeError):
    """Business rule conflict, e.g. insufficient stock or a duplicate username."""
    status_code = 409
