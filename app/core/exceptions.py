"""Domain errors raised by the workflow services.

Every error carries a short ``kind`` and an HTTP ``status_code`` so the API
layer can render it without knowing about individual services.
"""

from typing import List, Optional


class TPOError(Exception):
    """Base class for caller-facing workflow errors."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class NotFoundError(TPOError):
    """A coordinator, student, application or job posting lookup failed."""

    kind = "not_found"
    status_code = 404

    def __init__(self, entity: str, message: Optional[str] = None):
        self.entity = entity
        super().__init__(message or f"{entity.capitalize()} not found")


class PermissionDeniedError(TPOError):
    """Missing capability flag or target outside the actor's department scope."""

    kind = "permission_denied"
    status_code = 403


class ValidationError(TPOError):
    """Missing justification text or malformed request."""

    kind = "validation_error"
    status_code = 400


class BatchTooLargeError(ValidationError):
    """Batch exceeded its per-call cap."""

    def __init__(self, size: int, limit: int, noun: str, verb: str):
        self.size = size
        self.limit = limit
        super().__init__(f"Cannot {verb} more than {limit} {noun} at once (got {size})")


class PreconditionFailedError(TPOError):
    """Business rule not satisfied (completion, verification, eligibility, state)."""

    kind = "precondition_failed"
    status_code = 409

    def __init__(self, message: str, failures: Optional[List[str]] = None):
        super().__init__(message)
        self.failures = failures or []

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.failures:
            data["failures"] = self.failures
        return data


class RateLimitExceededError(TPOError):
    """Too many requests inside the current window."""

    kind = "rate_limited"
    status_code = 429

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded. Try again in {retry_after} seconds")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["retry_after"] = self.retry_after
        return data
