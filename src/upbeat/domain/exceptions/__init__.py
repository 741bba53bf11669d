"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so the API exception handlers can return it
    # without parsing str(exception). Never raise this directly - always raise a subclass so
    # callers (and exception_handlers.py) can map it to the right HTTP status.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when a referenced playlist or song does not exist.

    HTTP Status: 404
    """

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(DomainException):
    """Input validation failed.

    HTTP Status: 422

    Example:
        raise ValidationError("Track external_id cannot be empty")
    """

    pass


class ConfigurationError(DomainException):
    """Provider credentials or other required configuration are missing.

    Fatal only for the operations of the affected provider - the other
    provider keeps working.

    HTTP Status: 503 (Service Unavailable)

    Example:
        raise ConfigurationError("Spotify credentials not configured")
    """

    pass


class AuthenticationError(DomainException):
    """No caller identity was supplied.

    HTTP Status: 401
    """

    pass


class AuthorizationError(DomainException):
    """Caller does not own the playlist targeted by a mutating operation.

    The message stays generic ("not found or unauthorized") so a foreign
    private playlist cannot be probed for existence.

    HTTP Status: 403
    """

    def __init__(self, message: str = "Playlist not found or unauthorized") -> None:
        super().__init__(message)


class NotConnectedError(DomainException):
    """Export attempted without a linked Spotify account.

    HTTP Status: 409
    """

    def __init__(
        self,
        message: str = "Not connected to Spotify. Please connect your account first.",
    ) -> None:
        super().__init__(message)


class ExternalProviderError(DomainException):
    """Spotify/iTunes HTTP call failed (network, auth, 4xx/5xx).

    HTTP Status: 502 (Bad Gateway)

    Example:
        raise ExternalProviderError("Spotify API error: 503", provider="spotify", status_code=503)
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class RateLimitExceededError(ExternalProviderError):
    """Provider answered 429 Too Many Requests.

    HTTP Status: 429
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message, provider=provider, status_code=429)
        self.retry_after = retry_after


class RecommendationFailedError(DomainException):
    """Any adapter failure during recommendation, surfaced as one condition.

    The original adapter exception is chained as ``__cause__``.

    HTTP Status: 502
    """

    def __init__(self, provider: str, reason: str | None = None) -> None:
        message = f"Could not generate recommendations from {provider}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.provider = provider


class TokenRefreshException(DomainException):
    """Raised when the user's Spotify refresh token is no longer accepted.

    Hey future me - Spotify answers 400 invalid_grant when the user revoked our app, and
    401/403 when access is denied. Either way the stored credential is useless and the user
    has to connect again.

    HTTP Status: 401
    """

    def __init__(
        self,
        message: str = "Spotify token refresh failed. Please reconnect your Spotify account.",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.http_status = http_status


__all__ = [
    "DomainException",
    "EntityNotFoundException",
    "ValidationError",
    "ConfigurationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotConnectedError",
    "ExternalProviderError",
    "RateLimitExceededError",
    "RecommendationFailedError",
    "TokenRefreshException",
]
