"""
Error taxonomy for the feedback service.

Each error carries the HTTP status it maps to at the route boundary and the
message that is safe to return to the client. Anything else about the failure
(the chained cause, remote responses) is for the server log only.
"""
from typing import Optional


class FeedbackError(Exception):
    """Base class for errors raised by the feedback service"""

    status_code = 500
    public_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)

    @property
    def client_message(self) -> str:
        return self.public_message


class ValidationError(FeedbackError):
    """Client input broke a domain rule (rating range, message length, image size)"""

    status_code = 400

    @property
    def client_message(self) -> str:
        # Validation messages are written for the client and returned as-is.
        return str(self)


class UploadError(FeedbackError):
    """The object storage upload failed; nothing was persisted"""


class StoreError(FeedbackError):
    """The database was unreachable or rejected the write"""


class AuthError(FeedbackError):
    """Admin secret mismatch"""

    status_code = 401
    public_message = "Invalid password"
