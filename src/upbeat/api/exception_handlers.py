"""Custom exception handlers for FastAPI application.

Converts domain exceptions into JSON responses of the form {"detail": message}
with the matching HTTP status code.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from upbeat.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    DomainException,
    EntityNotFoundException,
    ExternalProviderError,
    NotConnectedError,
    RateLimitExceededError,
    RecommendationFailedError,
    TokenRefreshException,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, exc: DomainException) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


# Hey future me, Starlette resolves handlers along the exception's MRO, so RateLimitExceededError
# gets its own 429 even though it IS an ExternalProviderError. The DomainException catch-all at the
# bottom is a safety net for subclasses added later without a handler - they become 500 with their
# message instead of a bare "Internal Server Error".
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for all domain exceptions.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        logger.warning(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={"path": request.url.path},
        )
        return _error_response(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        logger.info(
            "Authentication required at %s",
            request.url.path,
            extra={"path": request.url.path},
        )
        return _error_response(status.HTTP_401_UNAUTHORIZED, exc)

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(
        request: Request, exc: AuthorizationError
    ) -> JSONResponse:
        logger.warning(
            "Authorization denied at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return _error_response(status.HTTP_403_FORBIDDEN, exc)

    @app.exception_handler(NotConnectedError)
    async def not_connected_handler(
        request: Request, exc: NotConnectedError
    ) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(TokenRefreshException)
    async def token_refresh_handler(
        request: Request, exc: TokenRefreshException
    ) -> JSONResponse:
        logger.warning(
            "Spotify token refresh failed at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error_code": exc.error_code},
        )
        return _error_response(status.HTTP_401_UNAUTHORIZED, exc)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc)

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_handler(
        request: Request, exc: RateLimitExceededError
    ) -> JSONResponse:
        logger.warning(
            "Provider rate limit at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": exc.message},
            headers=headers,
        )

    @app.exception_handler(ExternalProviderError)
    async def external_provider_handler(
        request: Request, exc: ExternalProviderError
    ) -> JSONResponse:
        logger.error(
            "External provider error at %s: %s",
            request.url.path,
            exc.message,
            extra={
                "path": request.url.path,
                "provider": exc.provider,
                "upstream_status": exc.status_code,
            },
        )
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc)

    @app.exception_handler(RecommendationFailedError)
    async def recommendation_failed_handler(
        request: Request, exc: RecommendationFailedError
    ) -> JSONResponse:
        logger.error(
            "Recommendation failed at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "provider": exc.provider},
        )
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request, exc: DomainException
    ) -> JSONResponse:
        logger.error(
            "Unhandled domain error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)
