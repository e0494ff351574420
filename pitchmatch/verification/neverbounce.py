"""NeverBounce single-check client.

Calls ``POST /v4/single/check`` with the API key and address, and returns the
verdict string (``valid``, ``invalid``, ``disposable``, ``catchall``,
``unknown``, ...).
"""

import logging
from typing import Dict, Iterable, Optional

import requests

from pitchmatch.logging import get_logger

from .exceptions import (
    VerificationConfigurationError,
    VerificationError,
    VerificationHTTPError,
    VerificationResponseError,
    VerificationTimeoutError,
)

logger = get_logger(__name__, component="verification")

NEVERBOUNCE_CHECK_URL = "https://api.neverbounce.com/v4/single/check"
ERROR_RESULT = "error"


class NeverBounceClient:
    """Thin wrapper around the NeverBounce single-check endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        url: str = NEVERBOUNCE_CHECK_URL,
    ) -> None:
        if not api_key:
            raise VerificationConfigurationError("NEVERBOUNCE_API_KEY is not set")
        self.api_key = api_key
        self.timeout = timeout
        self.url = url
        self._session = session or requests.Session()

    def verify(self, email: str) -> str:
        """Verify one address.

        Returns:
            The ``result`` field, falling back to ``verdict`` then ``status``

        Raises:
            VerificationHTTPError: On 4xx or 5xx responses
            VerificationTimeoutError: On timeout
            VerificationResponseError: On unparseable responses or network errors
        """
        try:
            response = self._session.post(
                self.url,
                json={"key": self.api_key, "email": email},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise VerificationTimeoutError(f"NeverBounce timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise VerificationResponseError(f"NeverBounce request failed: {e}") from e

        if response.status_code >= 400:
            level = logging.WARNING if response.status_code >= 500 else logging.ERROR
            logger.log(
                level,
                f"NeverBounce HTTP {response.status_code}",
                extra={"event": "verification.http_error", "status_code": response.status_code},
            )
            raise VerificationHTTPError(
                f"NeverBounce {response.status_code}", status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise VerificationResponseError(f"Invalid JSON from NeverBounce: {e}") from e

        if not isinstance(data, dict):
            raise VerificationResponseError("Unexpected NeverBounce response shape")

        verdict = data.get("result") or data.get("verdict") or data.get("status")
        if not verdict:
            raise VerificationResponseError("NeverBounce response has no result")
        return str(verdict)

    def verify_many(self, emails: Iterable[str]) -> Dict[str, str]:
        """Verify addresses one by one; a failed check maps to ``"error"``."""
        results: Dict[str, str] = {}
        for email in emails:
            try:
                results[email] = self.verify(email)
            except VerificationError as e:
                logger.warning(
                    f"Verification failed for {email}: {e}",
                    extra={"event": "verification.failed", "error_type": type(e).__name__},
                )
                results[email] = ERROR_RESULT

        logger.info(
            f"Verified {len(results)} addresses",
            extra={
                "event": "verification.completed",
                "count": len(results),
                "errors": sum(1 for v in results.values() if v == ERROR_RESULT),
            },
        )
        return results
