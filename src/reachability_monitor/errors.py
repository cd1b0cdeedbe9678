"""
Exceptions and error messages shared by the probe and its callers.

The probe itself never raises: every failure is folded into a blocked
ProbeResult. The only exception type is raised by the URL normalizer and
caught by the probe and by the HTTP boundary.
"""

INVALID_URL_ERROR = "invalid url"
TIMEOUT_ERROR = "timeout"


class ProbeError(Exception):
    """Base class for reachability probe errors."""


class InvalidInputError(ProbeError):
    """Raised when a URL is empty or cannot be parsed as an absolute HTTP(S) URL."""


def http_error_message(status: int) -> str:
    return f"HTTP {status}"
