"""
Deterministic encoding primitives for world roots and reports.

Contract public state is normalized before encoding: raw bytes become
`0x`-prefixed hex strings and tuples become lists, so two worlds holding the
same state always encode to the same bytes.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


CANONICAL_ENCODING_VERSION = 1

_DOMAIN_PREFIX = b"batchcall:"


def normalize_state(value: Any) -> Any:
    """
    Map a public-state value onto plain JSON types.

    Raises:
        TypeError: On floats, non-str dict keys, or unsupported types
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [normalize_state(item) for item in value]
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"state keys must be str, got {type(k).__name__}")
            out[k] = normalize_state(v)
        return out
    raise TypeError(f"unsupported type in canonical encoding: {type(value).__name__}")


def canonical_json_bytes(value: Any) -> bytes:
    """Sorted-key, whitespace-free UTF-8 JSON of `normalize_state(value)`."""
    text = json.dumps(
        normalize_state(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    # Lone surrogates fail here (UnicodeEncodeError).
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = CANONICAL_ENCODING_VERSION) -> bytes:
    """`batchcall:<label>:v<version>` followed by NUL."""
    if not isinstance(label, str) or not label.isascii() or not label or "\x00" in label:
        raise ValueError(f"label must be a non-empty ASCII string without NUL: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return _DOMAIN_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"


def encode_uvarint(value: int) -> bytes:
    """Unsigned LEB128."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"uvarint must be a non-negative int, got {value!r}")
    out = bytearray([value & 0x7F])
    value >>= 7
    while value:
        out[-1] |= 0x80
        out.append(value & 0x7F)
        value >>= 7
    return bytes(out)


def encode_bytes(value: bytes) -> bytes:
    """Length-prefixed bytes."""
    return encode_uvarint(len(value)) + bytes(value)
