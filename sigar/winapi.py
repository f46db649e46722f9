"""Windows API constants, drive types and decoding of UTF-16 buffers."""

from __future__ import annotations

import enum
import struct
from collections.abc import Iterable

# Process-specific access rights.
PROCESS_QUERY_LIMITED_INFORMATION = 0x1000
PROCESS_VM_READ = 0x0010

# Error codes returned by GetVolumeInformation.
ERROR_INVALID_FUNCTION = 1
ERROR_NOT_READY = 21

# Maximum length of a path on Windows.
MAX_PATH = 260

# Flags for CreateToolhelp32Snapshot.
TH32CS_INHERIT = 0x80000000
TH32CS_SNAPHEAPLIST = 0x00000001
TH32CS_SNAPMODULE = 0x00000008
TH32CS_SNAPMODULE32 = 0x00000010
TH32CS_SNAPPROCESS = 0x00000002
TH32CS_SNAPTHREAD = 0x00000004

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1
_UNKNOWN_DRIVE_TYPE = "unknown DriveType value"


class DriveType(enum.IntEnum):
    """Type of a drive as returned by GetDriveType."""

    UNKNOWN = 0
    NO_ROOT_DIR = 1
    REMOVABLE = 2
    FIXED = 3
    REMOTE = 4
    CDROM = 5
    RAMDISK = 6

    def __str__(self) -> str:
        return _drive_type_name(self)


_DRIVE_TYPE_NAMES = {
    DriveType.UNKNOWN: "unknown",
    DriveType.NO_ROOT_DIR: "invalid",
    DriveType.REMOVABLE: "removable",
    DriveType.FIXED: "fixed",
    DriveType.REMOTE: "remote",
    DriveType.CDROM: "cdrom",
    DriveType.RAMDISK: "ramdisk",
}


def _drive_type_name(value: int) -> str:
    try:
        return _DRIVE_TYPE_NAMES[DriveType(value)]
    except ValueError:
        return _UNKNOWN_DRIVE_TYPE


def _signed64(value: int) -> int:
    value &= _MASK64
    return value - (1 << 64) if value >> 63 else value


def filetime_to_nanoseconds(high: int, low: int) -> int:
    """Convert a FILETIME interval (units of 100 ns) to nanoseconds.

    This gives a duration, not a clock time; the result wraps as a signed
    64-bit value.
    """
    intervals = _signed64(((high & _MASK32) << 32) + (low & _MASK32))
    return _signed64(intervals * 100)


def _utf16_to_string(units: list[int]) -> str:
    raw = struct.pack(f"<{len(units)}H", *units)
    return raw.decode("utf-16-le", errors="replace")


def utf16_slice_to_strings(buffer: Iterable[int]) -> list[str]:
    """Split a list of NUL-terminated UTF-16 code units into strings.

    Empty strings and any unterminated trailing piece are left out.
    """
    result: list[str] = []
    current: list[int] = []
    for unit in buffer:
        if unit == 0:
            if current:
                result.append(_utf16_to_string(current))
            current = []
        else:
            current.append(unit & 0xFFFF)
    return result