"""FastAPI app creation, CORS, global state, error mapping and dependencies."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Dict, Optional, Type

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..app import ChinaTrack
from ..errors import (
    ChinaTrackError,
    ConfigError,
    DuplicateActiveError,
    DuplicateTrashedError,
    EmailExistsError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    PermissionDeniedError,
    RegistrationDisabledError,
    ShipmentNotFoundError,
    TrackingLookupError,
    ValidationError,
)
from ..models import User

logger = logging.getLogger(__name__)

_config_path = os.getenv("CHINATRACK_CONFIG", "config.yaml")

_app: Optional[ChinaTrack] = None

# Most specific class first; the first isinstance match wins
ERROR_STATUS: Dict[Type[ChinaTrackError], int] = {
    DuplicateActiveError: 409,
    DuplicateTrashedError: 409,
    EmailExistsError: 409,
    ValidationError: 400,
    InvalidCredentialsError: 401,
    NotAuthenticatedError: 401,
    PermissionDeniedError: 403,
    RegistrationDisabledError: 403,
    ShipmentNotFoundError: 404,
    TrackingLookupError: 502,
    ConfigError: 503,
}


def status_for(error: ChinaTrackError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 400


def _try_load_app() -> None:
    """Attempt to load ChinaTrack from config. Logs and leaves _app unset on failure."""
    global _app
    if not os.path.exists(_config_path):
        logger.warning(f"Config not found: {_config_path}")
        return
    try:
        _app = ChinaTrack(_config_path)
        logger.info(f"ChinaTrack loaded from {_config_path}")
    except (ChinaTrackError, ValueError, OSError) as e:
        logger.error(f"Failed to load config: {e}")
        _app = None


async def require_app() -> ChinaTrack:
    """Return the initialized app. Lazy-loads on first call; 503 if not configured."""
    if _app is None:
        _try_load_app()
    if _app is None:
        raise ConfigError(f"Not configured. Provide a config file at {_config_path}.")
    await _app.initialize()
    return _app


def bearer_token(request: Request) -> Optional[str]:
    """Token from an ``Authorization: Bearer <token>`` header, or None."""
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


async def require_user(
    app: ChinaTrack = Depends(require_app),
    token: Optional[str] = Depends(bearer_token),
) -> User:
    return await app.users.authenticate(token)


async def require_admin(user: User = Depends(require_user)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError()
    return user


def set_app(new_app: Optional[ChinaTrack]) -> None:
    """Replace the global app instance (tests, embedding)."""
    global _app
    _app = new_app


def get_app_instance() -> Optional[ChinaTrack]:
    return _app


async def _handle_chinatrack_error(request: Request, exc: ChinaTrackError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@asynccontextmanager
async def _lifespan(_api: FastAPI):
    yield
    if _app is not None:
        await _app.close()


def _create_api() -> FastAPI:
    """Create and configure the FastAPI app with routes."""
    _api = FastAPI(title="ChinaTrack", version="0.1.0", lifespan=_lifespan)

    allowed_origins_str = os.getenv(
        "CHINATRACK_ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    )
    allowed_origins = [o.strip() for o in allowed_origins_str.split(",") if o.strip()]
    _api.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _api.add_exception_handler(ChinaTrackError, _handle_chinatrack_error)

    from .routes import register_routes
    register_routes(_api)
    return _api


api = _create_api()
