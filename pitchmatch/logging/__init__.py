"""Structured logging helpers shared by every PitchMatch component."""

import logging
from typing import Optional

from .context import (
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
)


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that stamps a component name onto each record.

    Fields passed through ``extra`` at the call site win over the adapter's
    own fields, so a call may still override ``component`` explicitly.
    """

    def process(self, msg, kwargs):
        call_extra = kwargs.get("extra") or {}
        kwargs["extra"] = {**self.extra, **call_extra}
        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None):
    """Return a module logger, optionally bound to a component.

    Args:
        name: Logger name (normally ``__name__``)
        component: Component label added to every record (e.g. "sender")

    Returns:
        A plain ``logging.Logger`` or a ``ComponentLoggerAdapter``

    Example:
        >>> logger = get_logger(__name__, component="campaigns")
        >>> logger.info("Campaign started", extra={"event": "campaign.started"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger


__all__ = [
    "ComponentLoggerAdapter",
    "get_logger",
    "log_context",
    "get_log_context",
    "push_log_context",
    "pop_log_context",
    "clear_log_context",
]
