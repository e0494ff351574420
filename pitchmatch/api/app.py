"""FastAPI application factory and error mapping.

Every error response has the body ``{"error": message}``. Exception families
map to status codes here and nowhere else.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pitchmatch.campaigns import (
    CampaignAlreadyQueuedError,
    CampaignNotFoundError,
    NoActiveOpportunitiesError,
    PreconditionMissingError,
    TemplateRenderError,
)
from pitchmatch.config.environment import EnvironmentConfig
from pitchmatch.config.models import AppConfig
from pitchmatch.logging import get_logger
from pitchmatch.persistence import DataIntegrityError, PersistenceError, RecordNotFoundError
from pitchmatch.sender import BatchSender, SenderNotConfiguredError
from pitchmatch.verification import NeverBounceClient, VerificationConfigurationError

from . import automation, campaigns, contacts, library, misc
from .deps import AuthFailure

logger = get_logger(__name__, component="api")

NOT_FOUND_ERRORS = (CampaignNotFoundError, NoActiveOpportunitiesError, RecordNotFoundError)


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _validation_messages(errors) -> list:
    messages = []
    for error in errors:
        field_path = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{field_path}: {error['msg']}" if field_path else error["msg"])
    return messages


def create_app(
    app_config: Optional[AppConfig] = None,
    env_config: Optional[EnvironmentConfig] = None,
    batch_sender: Optional[BatchSender] = None,
    verification_client: Optional[NeverBounceClient] = None,
) -> FastAPI:
    """Build the API.

    The database must already be initialized with ``init_database``.

    Args:
        app_config: Validated application config (defaults when None)
        env_config: Environment config (empty environment when None)
        batch_sender: Sender shared with the scheduler, so both honour one lock
        verification_client: NeverBounce client; built lazily from the API key when None
    """
    app_config = app_config or AppConfig()
    env_config = env_config or EnvironmentConfig()

    app = FastAPI(title="PitchMatch API")
    app.state.app_config = app_config
    app.state.env_config = env_config
    app.state.batch_sender = batch_sender or BatchSender(env_config, app_config.sender)
    app.state.verification_client = verification_client

    app.include_router(misc.router)
    app.include_router(contacts.router)
    app.include_router(library.router)
    app.include_router(campaigns.router)
    app.include_router(automation.router)

    _register_error_handlers(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthFailure)
    async def handle_auth_failure(request: Request, exc: AuthFailure):
        return _error_response(status.HTTP_401_UNAUTHORIZED, str(exc) or "Unauthorized")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request",
            details=_validation_messages(exc.errors()),
        )

    @app.exception_handler(ValidationError)
    async def handle_model_validation(request: Request, exc: ValidationError):
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request",
            details=_validation_messages(exc.errors()),
        )

    @app.exception_handler(PreconditionMissingError)
    async def handle_precondition(request: Request, exc: PreconditionMissingError):
        if isinstance(exc, NOT_FOUND_ERRORS):
            return _error_response(status.HTTP_404_NOT_FOUND, str(exc))
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(CampaignAlreadyQueuedError)
    async def handle_already_queued(request: Request, exc: CampaignAlreadyQueuedError):
        return _error_response(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(TemplateRenderError)
    async def handle_template_error(request: Request, exc: TemplateRenderError):
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(RecordNotFoundError)
    async def handle_not_found(request: Request, exc: RecordNotFoundError):
        return _error_response(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(DataIntegrityError)
    async def handle_integrity(request: Request, exc: DataIntegrityError):
        return _error_response(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(PersistenceError)
    async def handle_persistence(request: Request, exc: PersistenceError):
        logger.error(
            f"Persistence failure on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
            extra={"event": "api.persistence_error", "path": request.url.path},
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(SenderNotConfiguredError)
    async def handle_sender_not_configured(request: Request, exc: SenderNotConfiguredError):
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))

    @app.exception_handler(VerificationConfigurationError)
    async def handle_verification_not_configured(request: Request, exc: VerificationConfigurationError):
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))
