from typing import Any


class HelpdeskError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(HelpdeskError):
    """Missing or duplicate field; the caller can fix the request."""
    status_code = 400


class NotFoundError(HelpdeskError):
    status_code = 404


class ConflictError(HelpdeskError):
    """Delete/deactivate blocked by dependent tickets."""
    status_code = 400


class InfrastructureError(HelpdeskError):
    status_code = 500
