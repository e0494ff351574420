"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from pitchmatch.matching.policy import INDUSTRY_MATCHERS

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MatchingConfig(BaseModel):
    """Industry matching and preview settings."""

    policy: str = Field("exact", description="Industry matching policy name")
    preview_sample_size: int = Field(
        3, ge=1, le=50, description="Number of matched pairs shown in a preview"
    )

    @field_validator("policy")
    @classmethod
    def normalize_policy(cls, v: str) -> str:
        """Lowercase the policy name and check it is registered."""
        stripped = v.strip().lower()
        if not stripped:
            raise ValueError("policy cannot be empty")
        if stripped not in INDUSTRY_MATCHERS:
            raise ValueError(
                f"Unknown matching policy '{v}'. Available: {', '.join(sorted(INDUSTRY_MATCHERS))}"
            )
        return stripped


class CampaignConfig(BaseModel):
    """Defaults used when a campaign is started."""

    timezone: str = Field("UTC", description="IANA timezone for sending hours")
    max_emails_per_day: int = Field(28, ge=1, le=100)
    sending_start_hour: int = Field(9, ge=0, le=23)
    sending_end_hour: int = Field(17, ge=1, le=24)
    follow_up_delay_days: int = Field(3, ge=1, le=30)
    skip_weekends: bool = True
    max_follow_ups: int = Field(
        3, ge=1, le=10, description="Highest template number queued for a contact"
    )
    queue_unmatched_contacts: bool = Field(
        True,
        description="Queue contacts without a matching opportunity using contact-only rendering",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone name resolves."""
        try:
            ZoneInfo(v.strip())
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v.strip()

    @model_validator(mode="after")
    def validate_sending_window(self):
        """Sending window must be non-empty."""
        if self.sending_end_hour <= self.sending_start_hour:
            raise ValueError(
                "campaign.sending_end_hour must be greater than campaign.sending_start_hour"
            )
        return self


class SenderConfig(BaseModel):
    """Batch sender and retry settings."""

    batch_size: int = Field(50, ge=1, le=500, description="Maximum rows per batch")
    batch_interval: str = Field("5m", description="How often the batch sender runs")
    inter_send_delay_ms: int = Field(
        100, ge=0, le=60000, description="Fixed pause between consecutive sends"
    )
    use_tls: bool = Field(True, description="Use STARTTLS for non-465 ports")
    max_retries: int = Field(3, ge=0, le=10, description="Retries before a row is dead-lettered")
    retry_initial_delay: int = Field(60, ge=1, le=3600, description="First retry delay (seconds)")
    retry_backoff_multiplier: float = Field(2.0, ge=1.0, le=10.0)
    retry_max_delay: int = Field(3600, ge=1, le=86400, description="Retry delay cap (seconds)")
    claim_timeout: int = Field(
        900, ge=60, le=86400, description="Seconds a row may stay in sending before it is dead-lettered"
    )

    # Computed field
    batch_interval_seconds: Optional[int] = None

    @field_validator("batch_interval")
    @classmethod
    def validate_batch_interval(cls, v: str) -> str:
        """Batch interval must parse and sit between 1 minute and 24 hours."""
        try:
            validate_duration_range(parse_duration(v), min_seconds=60, max_seconds=86400)
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_interval(self):
        """Store the parsed interval and check delay bounds."""
        self.batch_interval_seconds = parse_duration(self.batch_interval)
        if self.retry_max_delay < self.retry_initial_delay:
            raise ValueError("sender.retry_max_delay must be >= sender.retry_initial_delay")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(LogFormat.KEY_VALUE, description="json or key-value")

    model_config = {"use_enum_values": True}


class ApiConfig(BaseModel):
    """HTTP server settings."""

    host: str = Field("127.0.0.1", min_length=1)
    port: int = Field(8000, ge=1, le=65535)
    verify_timeout: int = Field(
        30, ge=5, le=300, description="Timeout for email verification calls (seconds)"
    )


class AppConfig(BaseModel):
    """Root configuration object for PitchMatch."""

    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    campaign: CampaignConfig = Field(default_factory=CampaignConfig)
    sender: SenderConfig = Field(default_factory=SenderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
