"""HTTP layer: FastAPI routes over the campaign, sender and verification services."""

from .app import create_app
from .deps import AuthFailure, get_auth_context, get_db_session, require_cron_secret

__all__ = [
    "create_app",
    "AuthFailure",
    "get_auth_context",
    "get_db_session",
    "require_cron_secret",
]
