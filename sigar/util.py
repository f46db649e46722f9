"""Small helpers for turning raw kernel buffers into Python values."""

from __future__ import annotations

import sys
from collections.abc import Iterable


def byte_list_to_string(raw: Iterable[int]) -> str:
    """Decode a NUL-terminated array of signed or unsigned bytes to text.

    Everything from the first NUL byte onwards is ignored.
    """
    collected = bytearray()
    for value in raw:
        if value == 0:
            break
        collected.append(value & 0xFF)
    return bytes(collected).strip(b"\x00").decode("utf-8", errors="replace")


def chop(buf: bytes) -> bytes:
    """Return ``buf`` without its last byte."""
    if not buf:
        raise ValueError("cannot chop an empty buffer")
    return buf[:-1]


def bytes_to_string(data: bytes) -> str:
    """Strip leading and trailing NUL bytes and decode the rest as text."""
    return bytes(data).strip(b"\x00").decode("utf-8", errors="replace")


def native_byte_order() -> str:
    """Return the byte order of this machine: ``"little"`` or ``"big"``."""
    probe = (1).to_bytes(4, sys.byteorder)
    return "big" if probe[0] == 0 else "little"