"""Error kinds raised by the user service.

Each error carries the message shown to the caller and the HTTP status the
API layer should answer with.  ``legacy_status_code`` holds the status the
previous backend used for the same condition, when it differed.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for failures surfaced to API callers."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str, legacy_status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.legacy_status_code = legacy_status_code

    def http_status(self, legacy: bool = False) -> int:
        if legacy and self.legacy_status_code is not None:
            return self.legacy_status_code
        return self.status_code


class InvalidInput(ServiceError):
    kind = "invalid_input"
    status_code = 400


class Conflict(ServiceError):
    kind = "conflict"
    status_code = 409


class NotFound(ServiceError):
    kind = "not_found"
    status_code = 404


class Unauthorized(ServiceError):
    kind = "unauthorized"
    status_code = 401


class PersistenceError(ServiceError):
    kind = "persistence_error"
    status_code = 500

    def __init__(self, message: str, legacy_status_code: Optional[int] = 400):
        super().__init__(message, legacy_status_code)
