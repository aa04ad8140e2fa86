"""
Helpers for `data:<mime>;base64,<payload>` strings.

Audio recordings arrive from the browser as data URIs and generated images
leave the backend as data URIs, so both directions live here.
"""

import base64
import binascii
import re
from typing import NamedTuple

_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w.+-]+=[\w.+-]+)*;base64,(?P<data>[A-Za-z0-9+/=\s]*)$",
    re.DOTALL,
)


class DecodedDataUri(NamedTuple):
    mime_type: str
    data: bytes


def decode_data_uri(value: str) -> DecodedDataUri:
    """
    Split a base64 data URI into its MIME type and raw bytes.

    Raises:
        ValueError: The string is not a base64 data URI or the payload is
            not valid base64.
    """
    match = _DATA_URI_RE.match(value.strip()) if value else None
    if match is None:
        raise ValueError("Not a base64 data URI")
    try:
        data = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc
    return DecodedDataUri(mime_type=match.group("mime").lower(), data=data)


def encode_data_uri(data: bytes, mime_type: str) -> str:
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{b64}"
