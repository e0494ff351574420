"""Failure classification and bounded retry policy.

A failed row either goes back to ``pending`` with a later ``scheduled_for``
or is dead-lettered as ``failed``. Validation and permanent failures are
never retried; everything else is retried at most ``max_retries`` times
with exponential backoff.
"""

import smtplib
import socket
from typing import Optional

from pitchmatch.config.models import SenderConfig

from .models import ErrorType, RetryDecision, SMTPDeliveryError

NO_RETRY_TYPES = frozenset({ErrorType.VALIDATION, ErrorType.PERMANENT})

_RATE_LIMIT_MARKERS = ("rate limit", "too many", "try again later")
_AUTH_MARKERS = ("unauthorized", "authentication", "token expired", "auth failed")
_VALIDATION_MARKERS = ("invalid email", "validation", "syntax error in parameters", "bad address")
_PERMANENT_MARKERS = (
    "recipient not found",
    "user unknown",
    "no such user",
    "mailbox unavailable",
    "blocked",
    "bounced",
)


def _classify_code(code: int, message: str) -> Optional[ErrorType]:
    if code in (530, 534, 535):
        return ErrorType.AUTHENTICATION
    if any(marker in message for marker in _RATE_LIMIT_MARKERS) or code == 452:
        return ErrorType.RATE_LIMIT
    if code in (501, 553):
        return ErrorType.VALIDATION
    if 400 <= code < 500:
        return ErrorType.TRANSIENT
    if 500 <= code < 600:
        return ErrorType.PERMANENT
    return None


def classify_error(exc: BaseException) -> ErrorType:
    """Map a delivery failure to an ``ErrorType``.

    SMTP reply codes decide first (4xx transient, 5xx permanent, with
    authentication, rate-limit and bad-address codes singled out); otherwise
    the exception type and message are inspected.
    """
    cause = exc.cause if isinstance(exc, SMTPDeliveryError) and exc.cause else exc
    message = str(exc).lower()

    code = getattr(exc, "smtp_code", None) or getattr(cause, "smtp_code", None)
    if isinstance(cause, smtplib.SMTPRecipientsRefused) and cause.recipients:
        code, _ = next(iter(cause.recipients.values()))
    if code:
        classified = _classify_code(int(code), message)
        if classified is not None:
            return classified

    if isinstance(cause, smtplib.SMTPAuthenticationError):
        return ErrorType.AUTHENTICATION
    if isinstance(cause, (socket.timeout, TimeoutError, ConnectionError, smtplib.SMTPServerDisconnected)):
        return ErrorType.TRANSIENT

    if any(marker in message for marker in _RATE_LIMIT_MARKERS):
        return ErrorType.RATE_LIMIT
    if any(marker in message for marker in _AUTH_MARKERS):
        return ErrorType.AUTHENTICATION
    if any(marker in message for marker in _VALIDATION_MARKERS):
        return ErrorType.VALIDATION
    if any(marker in message for marker in _PERMANENT_MARKERS):
        return ErrorType.PERMANENT

    if isinstance(cause, ValueError):
        return ErrorType.VALIDATION
    if isinstance(cause, OSError):
        return ErrorType.TRANSIENT
    return ErrorType.UNKNOWN


class RetryPolicy:
    """Bounded exponential backoff.

    The n-th retry waits ``initial_delay * multiplier ** (n - 1)`` seconds,
    capped at ``max_delay``. Authentication failures get a single retry since
    they rarely clear on their own.
    """

    def __init__(
        self,
        max_retries: int = 3,
        initial_delay: int = 60,
        multiplier: float = 2.0,
        max_delay: int = 3600,
    ):
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.multiplier = multiplier
        self.max_delay = max_delay

    @classmethod
    def from_config(cls, config: SenderConfig) -> "RetryPolicy":
        return cls(
            max_retries=config.max_retries,
            initial_delay=config.retry_initial_delay,
            multiplier=config.retry_backoff_multiplier,
            max_delay=config.retry_max_delay,
        )

    def budget(self, error_type: ErrorType) -> int:
        """Retries allowed for this kind of failure."""
        if error_type in NO_RETRY_TYPES:
            return 0
        if error_type == ErrorType.AUTHENTICATION:
            return min(self.max_retries, 1)
        return self.max_retries

    def delay_for(self, retry_number: int) -> int:
        """Seconds to wait before retry number ``retry_number`` (1-based)."""
        delay = self.initial_delay * (self.multiplier ** (retry_number - 1))
        return int(min(delay, self.max_delay))

    def decide(self, error_type: ErrorType, retry_count: int) -> RetryDecision:
        """Decide what to do after a failure.

        Args:
            error_type: Classified failure
            retry_count: Retries already made for this row

        Returns:
            RetryDecision; ``retry`` is False once the budget is spent
        """
        if error_type in NO_RETRY_TYPES:
            return RetryDecision(retry=False, reason=f"{error_type.value} errors are not retried")

        if retry_count >= self.budget(error_type):
            return RetryDecision(retry=False, reason=f"retries exhausted after {retry_count}")

        return RetryDecision(retry=True, delay_seconds=self.delay_for(retry_count + 1))
