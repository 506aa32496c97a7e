"""
INFT - Locator Handling

This module builds and parses the locators returned for stored metadata:
0g:// references to remote storage and data: URIs that embed the payload
directly when remote storage is unavailable.
"""

import base64
import binascii
from enum import Enum
from typing import Tuple

from inft_crypto.exceptions import DecodeError


FALLBACK_URI_PREFIX = "data:application/json;base64,"


class UnsupportedLocatorError(DecodeError):
    """Raised when a locator scheme or format is not recognised."""
    pass


class LocatorScheme(str, Enum):
    """Supported locator schemes."""
    ZEROG = "0g"
    DATA = "data"


def create_zerog_uri(root_hash: str) -> str:
    """Create a 0g:// locator for a storage root hash."""
    return f"{LocatorScheme.ZEROG.value}://{root_hash}"


def create_fallback_uri(data: bytes) -> str:
    """Embed an encoded payload in a data: URI."""
    return FALLBACK_URI_PREFIX + base64.b64encode(data).decode('ascii')


def retrieve_from_fallback(uri: str) -> bytes:
    """
    Extract the payload embedded in a fallback data: URI.

    Args:
        uri: Locator produced by create_fallback_uri()

    Returns:
        Embedded payload bytes

    Raises:
        UnsupportedLocatorError: If the URI is not a base64 JSON data: URI
    """
    if not uri.startswith(FALLBACK_URI_PREFIX):
        raise UnsupportedLocatorError(f"Unsupported fallback URI format: {uri[:40]}")

    try:
        return base64.b64decode(uri[len(FALLBACK_URI_PREFIX):], validate=True)
    except (binascii.Error, ValueError) as e:
        raise UnsupportedLocatorError(f"Malformed fallback URI payload: {e}")


def parse_locator(uri: str) -> Tuple[LocatorScheme, str]:
    """
    Split a locator into its scheme and scheme-specific payload.

    For 0g:// locators the payload is the root hash; for data: URIs it is the
    full URI.

    Raises:
        UnsupportedLocatorError: If the scheme is not recognised
    """
    if not isinstance(uri, str) or not uri:
        raise UnsupportedLocatorError(f"Invalid locator: {uri!r}")

    zerog_prefix = f"{LocatorScheme.ZEROG.value}://"
    if uri.startswith(zerog_prefix):
        root_hash = uri[len(zerog_prefix):]
        if not root_hash:
            raise UnsupportedLocatorError(f"Locator has no root hash: {uri}")
        return LocatorScheme.ZEROG, root_hash

    if uri.startswith(f"{LocatorScheme.DATA.value}:"):
        return LocatorScheme.DATA, uri

    raise UnsupportedLocatorError(f"Unsupported locator scheme: {uri.split(':', 1)[0]}")
