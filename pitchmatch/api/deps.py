"""Request dependencies: caller identity, database session, cron secret, config."""

import hmac
from typing import Generator, Optional

from fastapi import Header, Request
from sqlalchemy.orm import Session

from pitchmatch.config.environment import EnvironmentConfig
from pitchmatch.config.models import AppConfig
from pitchmatch.domain.models import AuthContext
from pitchmatch.persistence import get_session


class AuthFailure(Exception):
    """The request carries no usable identity or secret."""

    pass


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.app_config


def get_env_config(request: Request) -> EnvironmentConfig:
    return request.app.state.env_config


def get_auth_context(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
) -> AuthContext:
    """Resolve the caller once per request.

    In ``header`` mode the ``X-User-Id`` header is required. In ``dev`` mode a
    missing header falls back to ``DEV_USER_ID``.

    Raises:
        AuthFailure: If no user id can be resolved
    """
    env_config = get_env_config(request)
    user_id = (x_user_id or "").strip()
    if not user_id:
        if env_config.auth_mode != "dev":
            raise AuthFailure("Unauthorized")
        user_id = env_config.dev_user_id

    email = (x_user_email or "").strip() or None
    return AuthContext(user_id=user_id, email=email)


def get_db_session() -> Generator[Session, None, None]:
    """One session per request; committed when the handler returns normally."""
    with get_session() as session:
        yield session


def require_cron_secret(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> None:
    """Check ``Authorization: Bearer <CRON_SECRET>``.

    Raises:
        AuthFailure: If the header is missing or the token does not match
    """
    expected = get_env_config(request).cron_secret
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip().encode(), expected.encode()):
        raise AuthFailure("Unauthorized")
