"""
Module: signing.py
Description: HMAC-SHA256 signatures for delivered payloads.

The signature covers the exact canonical bytes sent as the request
body and travels in the X-Webhook-Signature header as 64 lowercase
hex characters.

Key Components:
- sign(): compute the signature for a body
- verify(): constant-time check for receivers
- ensure_secret(): startup validation of the shared secret

Dependencies: hmac, hashlib
"""

import hashlib
import hmac
from typing import Optional

from sheethook.errors import ConfigurationError

SIGNATURE_HEADER = "X-Webhook-Signature"


def ensure_secret(secret: Optional[str]) -> str:
    """
    Validate the shared signing secret.

    Args:
        secret: Configured secret

    Returns:
        The secret, unchanged

    Raises:
        ConfigurationError: If the secret is unset, empty or whitespace
    """
    if not secret or not isinstance(secret, str) or not secret.strip():
        raise ConfigurationError("webhook secret must be a non-empty string")
    return secret


def sign(body: bytes, secret: str) -> str:
    """
    Compute the hex HMAC-SHA256 of body keyed with secret.

    Args:
        body: Canonical payload bytes
        secret: Shared secret (UTF-8 encoded for the key)

    Returns:
        64-character lowercase hex digest

    Raises:
        ConfigurationError: If the secret is unset or empty
    """
    ensure_secret(secret)
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify(body: bytes, secret: str, signature: Optional[str]) -> bool:
    """
    Check a received signature against the body.

    Returns False for a missing or malformed signature rather than raising.
    """
    if not signature or not isinstance(signature, str) or not signature.isascii():
        return False
    expected = sign(body, secret)
    return hmac.compare_digest(expected, signature.strip().lower())
