"""Soft configuration checks that warn instead of failing."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """Inspect the raw YAML mapping for settings that are legal but risky.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages (empty when nothing looks off)
    """
    messages = []

    sender = config_dict.get("sender") or {}
    if isinstance(sender, dict):
        delay = sender.get("inter_send_delay_ms")
        if isinstance(delay, int) and delay == 0:
            messages.append(
                "sender.inter_send_delay_ms is 0; consecutive sends may hit provider rate limits"
            )
        if sender.get("max_retries") == 0:
            messages.append("sender.max_retries is 0; every failed send is dead-lettered immediately")
        batch_size = sender.get("batch_size")
        if isinstance(batch_size, int) and batch_size > 200:
            messages.append(f"Large sender.batch_size ({batch_size}) may outlast the batch interval")

    campaign = config_dict.get("campaign") or {}
    if isinstance(campaign, dict):
        per_day = campaign.get("max_emails_per_day")
        if isinstance(per_day, int) and per_day > 50:
            messages.append(
                f"campaign.max_emails_per_day of {per_day} is high for a single cold-outreach mailbox"
            )
        if campaign.get("skip_weekends") is False:
            messages.append("campaign.skip_weekends is false; emails will be scheduled on weekends")

    return messages


def emit_warnings(messages: List[str]) -> None:
    """Emit each message through the ``warnings`` module."""
    for message in messages:
        warnings.warn(message, UserWarning, stacklevel=2)
