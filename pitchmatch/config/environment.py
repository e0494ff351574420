"""Environment variable loading and validation."""

import os
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from .exceptions import ConfigurationError

AUTH_MODES = ("header", "dev")
DEFAULT_DATABASE_URL = "sqlite:///./data/pitchmatch.db"
DEFAULT_CRON_SECRET = "dev-secret-change-in-production"


class EnvironmentConfig:
    """Secrets and deployment settings taken from the environment."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        smtp_sender_name: Optional[str] = None,
        smtp_from_email: Optional[str] = None,
        database_url: Optional[str] = None,
        cron_secret: Optional[str] = None,
        auth_mode: str = "header",
        dev_user_id: Optional[str] = None,
        log_level: Optional[str] = None,
        neverbounce_api_key: Optional[str] = None,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port or 587
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.smtp_sender_name = smtp_sender_name or "PitchMatch"
        self.smtp_from_email = smtp_from_email
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.cron_secret = cron_secret or DEFAULT_CRON_SECRET
        self.auth_mode = auth_mode
        self.dev_user_id = dev_user_id or "dev-user"
        self.log_level = log_level
        self.neverbounce_api_key = neverbounce_api_key

    @property
    def smtp_configured(self) -> bool:
        """True when enough SMTP settings exist to deliver mail."""
        return bool(self.smtp_host)


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - DATABASE_URL: SQLAlchemy URL (default: sqlite:///./data/pitchmatch.db)
    - SMTP_HOST / SMTP_PORT: outbound mail server (port defaults to 587)
    - SMTP_USER / SMTP_PASS: SMTP credentials, both or neither
    - SMTP_SENDER_NAME / SMTP_FROM_EMAIL: From header parts
    - CRON_SECRET: bearer token required by the send-batch endpoint
    - AUTH_MODE: "header" (X-User-Id required) or "dev" (falls back to DEV_USER_ID)
    - DEV_USER_ID: user id used in dev mode
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
    - NEVERBOUNCE_API_KEY: enables the /api/verify endpoint

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If any variable is invalid
    """
    errors = []

    smtp_host = os.getenv("SMTP_HOST")
    smtp_port_str = os.getenv("SMTP_PORT")
    smtp_user = os.getenv("SMTP_USER")
    smtp_pass = os.getenv("SMTP_PASS")
    smtp_from_email = os.getenv("SMTP_FROM_EMAIL")
    auth_mode = (os.getenv("AUTH_MODE") or "header").strip().lower()
    log_level = os.getenv("LOG_LEVEL")

    smtp_port = None
    if smtp_port_str:
        try:
            smtp_port = int(smtp_port_str)
            if not 1 <= smtp_port <= 65535:
                errors.append(f"Invalid SMTP_PORT: {smtp_port}. Must be between 1 and 65535.")
        except ValueError:
            errors.append(f"Invalid SMTP_PORT: '{smtp_port_str}'. Must be a valid integer.")

    if smtp_user and not smtp_pass:
        errors.append("SMTP_USER is set but SMTP_PASS is not. Both must be set for authentication.")
    elif smtp_pass and not smtp_user:
        errors.append("SMTP_PASS is set but SMTP_USER is not. Both must be set for authentication.")

    if smtp_from_email:
        try:
            validate_email(smtp_from_email, check_deliverability=False)
        except EmailNotValidError as e:
            errors.append(f"Invalid SMTP_FROM_EMAIL: '{smtp_from_email}' - {e}")

    if auth_mode not in AUTH_MODES:
        errors.append(f"Invalid AUTH_MODE: '{auth_mode}'. Must be one of: {', '.join(AUTH_MODES)}")

    if log_level:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "Set SMTP_USER and SMTP_PASS together or not at all",
                "Verify SMTP_PORT is a number between 1 and 65535",
            ],
        )

    return EnvironmentConfig(
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_user=smtp_user,
        smtp_pass=smtp_pass,
        smtp_sender_name=os.getenv("SMTP_SENDER_NAME"),
        smtp_from_email=smtp_from_email,
        database_url=os.getenv("DATABASE_URL"),
        cron_secret=os.getenv("CRON_SECRET"),
        auth_mode=auth_mode,
        dev_user_id=os.getenv("DEV_USER_ID"),
        log_level=log_level.upper() if log_level else None,
        neverbounce_api_key=os.getenv("NEVERBOUNCE_API_KEY"),
    )
