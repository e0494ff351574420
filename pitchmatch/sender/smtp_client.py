"""SMTP client wrapper for outreach email delivery.

Thin wrapper around smtplib with TLS/SSL, optional authentication and
connection cleanup. Factories are injectable so tests never open sockets.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Callable, Optional

from pitchmatch.config.environment import EnvironmentConfig
from pitchmatch.domain.models import QueuedEmail

from .models import SMTPDeliveryError

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class SMTPClient:
    """Sends one message per connection and returns its Message-ID."""

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
        timeout: int = 30,
    ):
        """Initialize SMTP client with optional factory injection.

        Args:
            smtp_factory: Factory for SMTP instances (for mocking)
            smtp_ssl_factory: Factory for SMTP_SSL instances (for mocking)
            timeout: Socket timeout in seconds
        """
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL
        self.timeout = timeout

    def send(self, message: EmailMessage, env_config: EnvironmentConfig, use_tls: bool = True) -> str:
        """Deliver a message.

        Port 465 uses implicit TLS; other ports use STARTTLS when ``use_tls``.

        Returns:
            The message's Message-ID header

        Raises:
            SMTPDeliveryError: If delivery fails, carrying the SMTP code when known
        """
        if not message["Message-ID"]:
            message["Message-ID"] = make_msgid(domain=_sender_domain(env_config))

        smtp = None
        try:
            if env_config.smtp_port == IMPLICIT_TLS_PORT:
                logger.debug(f"Connecting to {env_config.smtp_host}:{env_config.smtp_port} with implicit TLS")
                smtp = self.smtp_ssl_factory(
                    env_config.smtp_host,
                    env_config.smtp_port,
                    context=ssl.create_default_context(),
                    timeout=self.timeout,
                )
            else:
                logger.debug(f"Connecting to {env_config.smtp_host}:{env_config.smtp_port}")
                smtp = self.smtp_factory(
                    env_config.smtp_host, env_config.smtp_port, timeout=self.timeout
                )
                if use_tls:
                    smtp.starttls(context=ssl.create_default_context())

            if env_config.smtp_user and env_config.smtp_pass:
                smtp.login(env_config.smtp_user, env_config.smtp_pass)

            smtp.send_message(message)
            logger.debug(f"Message sent to {message['To']}")
            return message["Message-ID"]

        except smtplib.SMTPResponseException as e:
            raise SMTPDeliveryError(
                f"SMTP error {e.smtp_code}: {_decode(e.smtp_error)}", smtp_code=e.smtp_code, cause=e
            ) from e
        except smtplib.SMTPRecipientsRefused as e:
            code = None
            if e.recipients:
                code, _ = next(iter(e.recipients.values()))
            raise SMTPDeliveryError(f"Recipient refused: {e}", smtp_code=code, cause=e) from e
        except smtplib.SMTPException as e:
            raise SMTPDeliveryError(f"SMTP error during message delivery: {e}", cause=e) from e
        except OSError as e:
            raise SMTPDeliveryError(f"Network error during SMTP connection: {e}", cause=e) from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def _decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _sender_email(env_config: EnvironmentConfig) -> str:
    return env_config.smtp_from_email or env_config.smtp_user or f"noreply@{env_config.smtp_host}"


def _sender_domain(env_config: EnvironmentConfig) -> str:
    return _sender_email(env_config).rsplit("@", 1)[-1]


def build_sender_address(env_config: EnvironmentConfig) -> str:
    """Build the From address.

    Uses SMTP_FROM_EMAIL, then SMTP_USER, then noreply@<SMTP_HOST>, under
    SMTP_SENDER_NAME.

    Example:
        >>> build_sender_address(EnvironmentConfig(smtp_host="mail.example.com", smtp_user="me@example.com"))
        'PitchMatch <me@example.com>'
    """
    return formataddr((env_config.smtp_sender_name, _sender_email(env_config)))


def build_message(email: QueuedEmail, sender_address: str) -> EmailMessage:
    """Build a plain-text message for a queued email."""
    message = EmailMessage()
    message["From"] = sender_address
    message["To"] = email.recipient_email
    message["Subject"] = email.subject
    message.set_content(email.body)
    return message
