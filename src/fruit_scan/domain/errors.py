"""Error taxonomy for the capture, classify and enrich pipeline."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-level error categories exposed to the presentation layer."""

    CAPTURE = "capture"
    NETWORK = "network"
    SERVICE = "service"
    MALFORMED_RESPONSE = "malformed_response"
    CONFIGURATION = "configuration"
    PRECONDITION = "precondition"


class FruitScanError(Exception):
    """Base exception for all pipeline errors."""

    kind: ErrorKind


class CaptureError(FruitScanError):
    """Raised when a photo cannot be captured or read back."""

    kind = ErrorKind.CAPTURE


class NetworkError(FruitScanError):
    """Raised on transport failures and timeouts."""

    kind = ErrorKind.NETWORK


class ServiceError(FruitScanError):
    """Raised when a remote service answers with a non-success status."""

    kind = ErrorKind.SERVICE

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Service responded with HTTP {status_code}")


class MalformedResponseError(FruitScanError):
    """Raised when a response parses but lacks the expected structure."""

    kind = ErrorKind.MALFORMED_RESPONSE


class ConfigurationError(FruitScanError):
    """Raised when required configuration is missing."""

    kind = ErrorKind.CONFIGURATION


class PreconditionError(FruitScanError):
    """Raised when an operation is invoked in the wrong state."""

    kind = ErrorKind.PRECONDITION
