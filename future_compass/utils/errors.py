"""
Error Taxonomy

Every failure raised by FutureCompass derives from FutureCompassError so the
coordinator can turn it into a user notice in one place.

    ValidationError    - required profile field or user input missing (no network call made)
    ProviderError      - provider/proxy unreachable or returned non-2xx
    SchemaError        - provider reply is not the declared structured shape
    StorageError       - transcript storage unavailable (non-fatal for sessions)
    SessionStateError  - operation not allowed in the session's current state
    SessionBusyError   - a send/finish/reset is already in flight on the session
    ConfigurationError - settings or profile file invalid
"""

from typing import Optional


class FutureCompassError(Exception):
    """Base class for all FutureCompass errors."""

    pass


class ValidationError(FutureCompassError):
    """Raised when required input is missing before any network call."""

    def __init__(self, message: str, missing_fields: Optional[list[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class ProviderError(FutureCompassError):
    """Raised when the LLM provider call fails or returns a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderTimeoutError(ProviderError, TimeoutError):
    """Raised when the provider does not answer within the configured timeout."""

    pass


class SchemaError(FutureCompassError):
    """Raised when a provider reply cannot be parsed as the expected shape."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class StorageError(FutureCompassError):
    """Raised when the transcript store cannot be written."""

    pass


class SessionStateError(FutureCompassError):
    """Raised when an interview operation is called in the wrong state."""

    pass


class SessionBusyError(SessionStateError):
    """Raised when a second call overlaps an in-flight call on one session."""

    pass


class ConfigurationError(FutureCompassError):
    """Raised when configuration validation fails."""

    pass
