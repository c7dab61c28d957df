"""
Error kinds raised while resolving a request path against the bucket.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for errors surfaced to the HTTP boundary."""

    status_code = 500

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(message)


class InvalidPath(GatewayError):
    """Raised when a request path is malformed or escapes the bucket root."""

    status_code = 400

    def __init__(self, path: str):
        super().__init__(path, f"Invalid path: {path!r}")


class NotFound(GatewayError):
    """Raised when neither an object nor a prefix exists at the path."""

    status_code = 404

    def __init__(self, path: str):
        super().__init__(path, f"Object not found: {path!r}")


class StoreUnavailable(GatewayError):
    """Raised when the store is unreachable or answers unexpectedly."""

    status_code = 502

    def __init__(self, path: str, reason: str):
        self.reason = reason
        super().__init__(path, f"Unable to reach the S3 bucket: {reason}")


class StoreError(Exception):
    """Raised by the store client on transport or protocol failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
