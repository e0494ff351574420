"""Batch email sender with bounded retries.

This module provides:
- BatchSender: Delivers due queue rows one at a time
- RetryPolicy / classify_error: Retry or dead-letter decisions
- SMTPClient: smtplib wrapper returning the Message-ID
- queue_stats: Queue counts for the health endpoint
"""

from .batch import BatchSender, queue_stats
from .models import (
    BatchResult,
    ErrorType,
    RetryDecision,
    SenderError,
    SenderNotConfiguredError,
    SMTPDeliveryError,
)
from .retry import RetryPolicy, classify_error
from .smtp_client import SMTPClient, build_message, build_sender_address

__all__ = [
    "BatchSender",
    "queue_stats",
    "BatchResult",
    "ErrorType",
    "RetryDecision",
    "SenderError",
    "SenderNotConfiguredError",
    "SMTPDeliveryError",
    "RetryPolicy",
    "classify_error",
    "SMTPClient",
    "build_message",
    "build_sender_address",
]
