"""Parsing for interval settings such as ``sender.batch_interval``."""

import re

_HUMAN_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_HUMAN_PATTERN = re.compile(r"^(\d+)\s*([smhd])$", re.IGNORECASE)
_ISO_PATTERN = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$")


class DurationParseError(ValueError):
    """A duration string could not be understood."""


def parse_duration(value: str) -> int:
    """Convert ``"5m"``, ``"1h"``, ``"PT5M"`` or ``"P1D"`` style strings to seconds.

    Raises:
        DurationParseError: If the string is empty, malformed or zero
    """
    text = (value or "").strip()
    if not text:
        raise DurationParseError("Duration string cannot be empty")

    if text.upper().startswith("P"):
        match = _ISO_PATTERN.match(text.upper())
        if not match or text.upper() in ("P", "PT") or text.upper().endswith("T"):
            raise DurationParseError(
                f"Invalid ISO-8601 duration: '{value}'. Expected e.g. 'PT5M', 'PT1H', 'P1D'"
            )
        days, hours, minutes, seconds = (int(part or 0) for part in match.groups())
        total = days * 86400 + hours * 3600 + minutes * 60 + seconds
    else:
        match = _HUMAN_PATTERN.match(text)
        if not match:
            raise DurationParseError(
                f"Invalid duration: '{value}'. Expected e.g. '30s', '5m', '1h', '1d'"
            )
        total = int(match.group(1)) * _HUMAN_UNITS[match.group(2).lower()]

    if total <= 0:
        raise DurationParseError(f"Duration must be positive, got: '{value}'")
    return total


def validate_duration_range(seconds: int, min_seconds: int = 60, max_seconds: int = 86400) -> None:
    """Reject intervals outside ``[min_seconds, max_seconds]``."""
    if seconds < min_seconds:
        raise DurationParseError(f"Duration {seconds}s is shorter than the minimum of {min_seconds}s")
    if seconds > max_seconds:
        raise DurationParseError(f"Duration {seconds}s is longer than the maximum of {max_seconds}s")
