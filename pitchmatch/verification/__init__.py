"""Email address verification via NeverBounce."""

from .exceptions import (
    VerificationConfigurationError,
    VerificationError,
    VerificationHTTPError,
    VerificationResponseError,
    VerificationTimeoutError,
)
from .neverbounce import NEVERBOUNCE_CHECK_URL, NeverBounceClient

__all__ = [
    "NeverBounceClient",
    "NEVERBOUNCE_CHECK_URL",
    "VerificationError",
    "VerificationConfigurationError",
    "VerificationHTTPError",
    "VerificationResponseError",
    "VerificationTimeoutError",
]
