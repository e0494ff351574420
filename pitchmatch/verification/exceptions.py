"""Exceptions for the email verification client."""


class VerificationError(Exception):
    """Base exception for verification failures."""

    pass


class VerificationConfigurationError(VerificationError):
    """The verification API key is missing."""

    pass


class VerificationHTTPError(VerificationError):
    """The verification API answered with a 4xx or 5xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class VerificationTimeoutError(VerificationError):
    """The verification API did not answer in time."""

    pass


class VerificationResponseError(VerificationError):
    """The verification API answered with something unparseable."""

    pass
