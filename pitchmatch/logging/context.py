"""Scoped logging context backed by contextvars.

Fields pushed here (user_id, campaign_id, batch_id, queue_id, ...) are merged
into every record emitted inside the scope by ``ContextualFilter``. Because
the storage is a ContextVar, concurrent requests served from the API thread
pool never see each other's fields.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("pitchmatch_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current context."""
    return dict(LogContextVar.get())


def push_log_context(**fields) -> Token:
    """Layer ``fields`` over the active context.

    Returns:
        Token to hand back to ``pop_log_context``
    """
    merged = {**LogContextVar.get(), **fields}
    return LogContextVar.set(merged)


def pop_log_context(token: Token) -> None:
    """Restore the context that was active before ``push_log_context``."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Drop every context field. Mostly useful in tests."""
    LogContextVar.set({})


class log_context:
    """Context manager form of push/pop.

    Example:
        >>> with log_context(user_id="u1", campaign_id=7):
        ...     logger.info("Preview generated")
    """

    def __init__(self, **fields):
        self.fields = fields
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
            self.token = None
        return False
