"""
URL normalization for probe targets.

Turns free-text input such as "example.com" into a canonical absolute URL
("https://example.com/") using yarl, the URL library aiohttp is built on.
"""

import ipaddress
import re

from yarl import URL

from reachability_monitor.errors import InvalidInputError

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

# Characters a registered host name may not contain once it is on the wire
_FORBIDDEN_HOST_CHARS = frozenset(" #/:<>?@[\\]^|%")


def normalize_url(raw: str) -> str:
    """
    Normalize raw user input into an absolute HTTP(S) URL.

    Args:
        raw: The URL text as typed by a user or stored in the database.

    Returns:
        str: The canonical form of the URL.

    Raises:
        InvalidInputError: If the input is empty or does not parse as an
            absolute URL with a host.
    """
    if raw is None or not raw.strip():
        raise InvalidInputError("URL must not be empty.")

    candidate = raw.strip()
    if not _SCHEME_PATTERN.match(candidate):
        candidate = f"https://{candidate}"

    try:
        url = URL(candidate)
        host = url.raw_host
    except (ValueError, UnicodeError) as err:
        raise InvalidInputError(f"Invalid URL: {raw!r}") from err

    if not url.is_absolute() or not host or not _is_valid_host(host):
        raise InvalidInputError(f"Invalid URL: {raw!r}")

    return _with_root_path(url)


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host.partition("%")[0])
    except ValueError:
        return False
    return True


def _is_valid_host(host: str) -> bool:
    """
    Check a host as it will be sent: IP literals pass, other hosts must not
    contain delimiters, percent escapes, whitespace or control characters.
    """
    if _is_ip_literal(host):
        return True
    return not any(
        char in _FORBIDDEN_HOST_CHARS or char.isspace() or ord(char) < 0x20 or ord(char) == 0x7F
        for char in host
    )


def _with_root_path(url: URL) -> str:
    """
    Render the URL, inserting "/" when the path after the authority is empty.

    yarl renders "https://example.com" without the trailing slash, while the
    canonical form of an origin URL carries one.
    """
    text = str(url)
    authority_end = len(url.scheme) + len("://")
    rest = text[authority_end:]
    path_start = next((i for i, char in enumerate(rest) if char in "/?#"), len(rest))
    if path_start == len(rest) or rest[path_start] != "/":
        split_at = authority_end + path_start
        text = f"{text[:split_at]}/{text[split_at:]}"
    return text
