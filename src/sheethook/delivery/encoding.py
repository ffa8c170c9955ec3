"""
Module: encoding.py
Description: Canonical JSON encoding of payloads.

The bytes produced here are both the HTTP request body and the input
of the signature, so this is the only serializer a delivery may use.

Output is compact JSON in payload insertion order. Characters with a
code point of 128 or above are written as lowercase \\uXXXX escapes;
characters outside the Basic Multilingual Plane become a UTF-16
surrogate pair. ASCII is left as the JSON encoder emits it.
"""

import json
import re
from typing import Any, Dict, Mapping, Union

from sheethook.models.payload import Payload

_NON_ASCII = re.compile(r"[^\x00-\x7f]")


def _escape_non_ascii(match: "re.Match[str]") -> str:
    units = match.group(0).encode("utf-16-be", "surrogatepass")
    return "".join(
        "\\u%04x" % int.from_bytes(units[i:i + 2], "big")
        for i in range(0, len(units), 2)
    )


def encode(payload: Union[Payload, Mapping[str, Any]]) -> bytes:
    """
    Serialize a payload to its canonical byte form.

    Args:
        payload: Payload (or plain ordered mapping) to encode

    Returns:
        ASCII-only UTF-8 bytes of the JSON object

    Raises:
        ValueError: If a value is NaN or infinite
        TypeError: If a value is not JSON serializable
    """
    fields = payload.data if isinstance(payload, Payload) else payload
    text = json.dumps(
        dict(fields),
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
    )
    # Non-ASCII can only appear inside JSON strings, so escaping it
    # here never touches structural characters.
    return _NON_ASCII.sub(_escape_non_ascii, text).encode("ascii")


def decode(body: Union[bytes, str]) -> Dict[str, Any]:
    """Parse a canonical body back into an ordered dict."""
    if isinstance(body, bytes):
        body = body.decode("ascii")
    return json.loads(body)
