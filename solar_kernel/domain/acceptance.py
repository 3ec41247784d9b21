"""
Server-side checks for a customer's acceptance submission.

Pure functions: each returns the normalized value or raises a typed
``AcceptanceError`` subclass.  The signature pad itself lives in the
front end; only the submitted data URI is checked here.
"""

from __future__ import annotations

import re

from solar_kernel.exceptions import InvalidCustomerDetailsError, InvalidSignatureError

SIGNATURE_PREFIXES = ("data:image/png;base64,", "data:image/jpeg;base64,")

# Base64 inflates by ~33%, so a 5 MB image is roughly 6.7 MB encoded.
MAX_SIGNATURE_LENGTH = 7 * 1024 * 1024

_UNSAFE_MARKERS = ("<script", "javascript:")

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_signature_image(data_uri: str | None) -> str:
    """Check a base64 PNG/JPEG data URI and return it unchanged."""
    if not data_uri:
        raise InvalidSignatureError("signature is required")
    if not data_uri.startswith(SIGNATURE_PREFIXES):
        raise InvalidSignatureError("unsupported format")
    if len(data_uri) > MAX_SIGNATURE_LENGTH:
        raise InvalidSignatureError("image too large")
    lowered = data_uri.lower()
    if any(marker in lowered for marker in _UNSAFE_MARKERS):
        raise InvalidSignatureError("unsafe content")
    return data_uri


def validate_customer_name(name: str | None) -> str:
    """Return the stripped name; at least two characters are required."""
    stripped = (name or "").strip()
    if len(stripped) < 2:
        raise InvalidCustomerDetailsError("customer_name", "full name required")
    return stripped


def validate_customer_email(email: str | None) -> str:
    """Return the email stripped and lower-cased."""
    normalized = (email or "").strip().lower()
    if not _EMAIL_PATTERN.match(normalized):
        raise InvalidCustomerDetailsError("customer_email", "not a valid address")
    return normalized
