"""
Error types raised by the currency tracker.

Every failure carries the underlying exception on ``cause`` so the CLI and
Lambda handler can log a single descriptive message per failure kind.
"""

from enum import Enum
from typing import Optional


class TrackerError(Exception):
    """Base class for all tracker failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(TrackerError):
    """Required configuration is missing or invalid."""

    pass


class NoAPIKeyError(ConfigurationError):
    """An API credential is empty or not set."""

    def __init__(self, key_name: str):
        super().__init__(f"No API key is set for {key_name}. Set it via the environment or .env file.")
        self.key_name = key_name


class TransportError(TrackerError):
    """A data provider could not be reached or answered with an HTTP error."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(f"Error while fetching data from {provider}: {message}", cause)
        self.provider = provider
        self.status_code = status_code


class DecodeError(TrackerError):
    """A provider response did not match the expected JSON shape."""

    def __init__(self, provider: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"Unexpected response from {provider}: {message}", cause)
        self.provider = provider


class QuoteLookupError(TrackerError, LookupError):
    """A requested symbol or its pricing currency quote is absent."""

    def __init__(self, symbol: str, currency: Optional[str] = None):
        if currency:
            message = f"No {currency} quote available for {symbol}"
        else:
            message = f"Symbol {symbol} not present in market snapshot"
        super().__init__(message)
        self.symbol = symbol
        self.currency = currency


class CredentialFileError(TrackerError):
    """The service account credentials could not be read or are invalid."""

    pass


class RemoteFailureKind(str, Enum):
    """Categories of failure reported by the spreadsheet write API."""

    TRANSPORT = "transport"
    MISSING_CREDENTIAL = "missing_credential"
    CANCELLED = "cancelled"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    FAILURE = "failure"
    BAD_REQUEST = "bad_request"
    FIELD_CONFLICT = "field_conflict"
    DECODE_ERROR = "decode_error"


class RemoteFailure(TrackerError):
    """A spreadsheet write failed. Reported, never retried."""

    def __init__(
        self,
        kind: RemoteFailureKind,
        target_range: str,
        message: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(f"Failed to update {target_range} ({kind.value}): {message}", cause)
        self.kind = kind
        self.target_range = target_range
