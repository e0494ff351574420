"""Data models and exceptions for the batch email sender."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class SenderError(Exception):
    """Base exception for sender errors."""

    pass


class SenderNotConfiguredError(SenderError):
    """Raised when a batch is requested but SMTP settings are missing."""

    pass


class SMTPDeliveryError(SenderError):
    """Raised when a single message could not be delivered.

    Attributes:
        smtp_code: SMTP reply code when the server gave one
        cause: The underlying exception
    """

    def __init__(self, message: str, smtp_code: Optional[int] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.smtp_code = smtp_code
        self.cause = cause


class ErrorType(str, Enum):
    """How a delivery failure should be treated."""

    TRANSIENT = "transient"
    RATE_LIMIT = "rate_limit"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RetryDecision:
    """Whether to retry a failed row and after how long."""

    retry: bool
    delay_seconds: int = 0
    reason: str = ""


@dataclass
class BatchResult:
    """Outcome of one batch run.

    Attributes:
        batch_id: Short id used to correlate the run's log lines
        skipped: True when another run held the lock and nothing was done
        fetched: Due rows fetched
        sent: Rows delivered
        retried: Rows put back to pending for another attempt
        failed: Rows dead-lettered
        errors: Rows whose status update failed
        not_claimed: Rows another worker claimed first
        released: Rows dead-lettered after being stuck in sending
        failures: Per-row error messages, for the API response
    """

    batch_id: str = ""
    skipped: bool = False
    fetched: int = 0
    sent: int = 0
    retried: int = 0
    failed: int = 0
    errors: int = 0
    not_claimed: int = 0
    released: int = 0
    duration_seconds: float = 0.0
    failures: List[dict] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.sent + self.retried + self.failed

    @property
    def has_errors(self) -> bool:
        return self.errors > 0 or self.failed > 0
