from typing import List, Optional


class ServiceError(Exception):
    """
    Base class for errors surfaced to HTTP callers.

    `message` is logged, `public_message` is what the caller sees.
    """
    status_code = 500
    default_public_message = "Internal server error"

    def __init__(self, message: str, public_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.public_message = public_message or self.default_public_message


class ValidationError(ServiceError):
    status_code = 400
    default_public_message = "Invalid request body"

    def __init__(self, message: str, public_message: Optional[str] = None):
        # Validation messages are safe to show as-is
        super().__init__(message, public_message or message)


class NotFoundError(ServiceError):
    status_code = 404
    default_public_message = "Not found"

    def __init__(self, message: str, public_message: Optional[str] = None):
        super().__init__(message, public_message or message)


class UpstreamError(ServiceError):
    status_code = 500
    default_public_message = "Upstream service error"


class StoreError(UpstreamError):
    default_public_message = "Failed to access the data store"


class SendError(UpstreamError):
    default_public_message = "Failed to send email"

    def __init__(self, message: str, failed: Optional[List[str]] = None, public_message: Optional[str] = None):
        super().__init__(message, public_message)
        self.failed = failed or []


class ConfigError(ServiceError):
    status_code = 500
    default_public_message = "Service is not configured"
