"""
Custom exceptions for the waitlist service.

Every error carries the HTTP status it renders as and, for form errors,
the request field it belongs to.
"""
from typing import Optional


class WaitlistError(Exception):
    """Base application exception"""
    status_code: int = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class InvalidEmailError(WaitlistError):
    """Raised when the submitted email is not a valid address"""
    def __init__(self, message: str = "Please provide a valid email address"):
        super().__init__(message, field="email")


class InvalidHandleError(WaitlistError):
    """Raised when the submitted handle is malformed"""
    def __init__(
        self,
        message: str = "Please provide a valid Twitter handle (3-15 characters, letters, numbers, and underscores only)",
    ):
        super().__init__(message, field="username")


class DuplicateEmailError(WaitlistError):
    """Raised when the email is already on the waitlist"""
    status_code = 409

    def __init__(self, message: str = "This email is already on our waitlist"):
        super().__init__(message, field="email")


class DuplicateHandleError(WaitlistError):
    """Raised when the handle is already on the waitlist"""
    status_code = 409

    def __init__(self, message: str = "This Twitter handle is already on our waitlist"):
        super().__init__(message, field="username")


class InvalidStatusError(WaitlistError):
    """Raised when a status value is outside the allowed set"""
    def __init__(self, message: str = "Invalid status value"):
        super().__init__(message, field="status")


class NotFoundError(WaitlistError):
    """Raised when a resource is not found"""
    status_code = 404

    def __init__(self, message: str = "Entry not found"):
        super().__init__(message)


class UnauthorizedError(WaitlistError):
    """Raised when the admin credential is missing or wrong"""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class MethodNotSupportedError(WaitlistError):
    status_code = 405

    def __init__(self, message: str = "Method Not Allowed"):
        super().__init__(message)


class RateLimitedError(WaitlistError):
    status_code = 429

    def __init__(self, message: str = "Too many requests. Please try again in a minute."):
        super().__init__(message)


class StorageError(WaitlistError):
    """Raised when database operations fail"""
    status_code = 500

    def __init__(self, message: str = "An error occurred while processing your request. Please try again later."):
        super().__init__(message)


class UnavailableError(StorageError):
    """Raised when the database cannot be reached"""
    status_code = 503

    def __init__(self, message: str = "The service is temporarily unavailable. Please try again later."):
        super().__init__(message)
