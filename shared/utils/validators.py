"""
Shared validators for input sanitization and security.

Functions raise ValueError so they can be used directly inside pydantic
field validators (which turn them into 422 responses).
"""

import re
from typing import Optional
from urllib.parse import urlparse

from shared.config.constants import HEX_COLOR_PATTERN, IMAGE_CONTENT_TYPES, Limits
from shared.config.settings import settings

# Blocked internal domains/IPs that should never be in image URLs (SSRF prevention)
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "172.16.",
    "172.17.",
    "172.18.",
    "172.19.",
    "172.20.",
    "172.21.",
    "172.22.",
    "172.23.",
    "172.24.",
    "172.25.",
    "172.26.",
    "172.27.",
    "172.28.",
    "172.29.",
    "172.30.",
    "172.31.",
    "192.168.",
    "169.254.",  # Link-local, cloud metadata
    "[::1]",
    "metadata.google",
]

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}

_HEX_COLOR_RE = re.compile(HEX_COLOR_PATTERN)

# {restaurant_id}/{folder}/{uuid hex}{ext} below the media URL path
_MEDIA_FILE_RE = re.compile(
    r"^\d+/[a-z-]+/[0-9a-f]{32}("
    + "|".join(re.escape(ext) for ext in IMAGE_CONTENT_TYPES.values())
    + r")$"
)


def is_uploaded_media_path(url: str) -> bool:
    """True for the path of an image uploaded to this API."""
    prefix = settings.media_url_path.rstrip("/") + "/"
    return url.startswith(prefix) and _MEDIA_FILE_RE.match(url[len(prefix):]) is not None


def validate_image_url(url: Optional[str]) -> Optional[str]:
    """
    Validate and sanitize an image URL (logos, backgrounds, dish photos).

    Args:
        url: The URL to validate (can be None)

    Returns:
        The validated URL or None if empty

    Raises:
        ValueError: If the URL is invalid or points to an internal host
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    if len(url) > Limits.MAX_URL_LENGTH:
        raise ValueError(f"URL too long (max {Limits.MAX_URL_LENGTH} characters)")

    if is_uploaded_media_path(url):
        return url

    parsed = urlparse(url)

    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES:
        raise ValueError(f"URL scheme not allowed: {scheme}")

    if scheme not in ("http", "https"):
        raise ValueError("Only HTTP/HTTPS URLs are allowed")

    host = parsed.netloc.lower()
    if not host:
        raise ValueError("URL has no valid host")

    # SSRF prevention: block internal IPs and hostnames
    hostname = host.rsplit("@", 1)[-1]
    for blocked in BLOCKED_HOSTS:
        if hostname.startswith(blocked) or hostname == blocked.rstrip("."):
            raise ValueError("Internal URLs are not allowed")

    return url


def validate_hex_color(value: Optional[str]) -> Optional[str]:
    """
    Validate a CSS hex color (#RGB or #RRGGBB).

    Raises:
        ValueError: If the value is not a hex color
    """
    if value is None:
        return None
    value = value.strip()
    if not _HEX_COLOR_RE.match(value):
        raise ValueError("Invalid color, expected #RGB or #RRGGBB")
    return value


def normalize_whatsapp_number(value: Optional[str]) -> Optional[str]:
    """
    Strip a phone number down to the digits wa.me expects.

    "+56 9 1234-5678" -> "56912345678"
    """
    if value is None:
        return None
    digits = re.sub(r"[^0-9]", "", value)
    return digits or None

