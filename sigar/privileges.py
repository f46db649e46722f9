"""Token privileges, account information and debug reports for Windows."""

from __future__ import annotations

import json
import struct
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from sigar.windows import Version

SE_DEBUG_PRIVILEGE = "SeDebugPrivilege"

# Returned by AdjustTokenPrivileges when some privileges were not assigned.
ERROR_NOT_ALL_ASSIGNED = 1300

SE_PRIVILEGE_ENABLED_BY_DEFAULT = 0x00000001
SE_PRIVILEGE_ENABLED = 0x00000002
SE_PRIVILEGE_REMOVED = 0x00000004
SE_PRIVILEGE_USED_FOR_ACCESS = 0x80000000

_COUNT = struct.Struct("<I")
_LUID = struct.Struct("<q")
_ATTRIBUTES = struct.Struct("<I")


@dataclass
class Privilege:
    """One privilege held by a token."""

    luid: int = 0
    name: str = ""
    enabled_by_default: bool = False
    enabled: bool = False
    removed: bool = False
    used: bool = False

    @classmethod
    def from_attributes(cls, luid: int, name: str, attributes: int) -> Privilege:
        """Build a privilege from its LUID, name and attribute bits."""
        return cls(
            luid=luid,
            name=name,
            enabled_by_default=bool(attributes & SE_PRIVILEGE_ENABLED_BY_DEFAULT),
            enabled=bool(attributes & SE_PRIVILEGE_ENABLED),
            removed=bool(attributes & SE_PRIVILEGE_REMOVED),
            used=bool(attributes & SE_PRIVILEGE_USED_FOR_ACCESS),
        )

    def __str__(self) -> str:
        opts = []
        if self.enabled_by_default:
            opts.append("Default")
        if self.enabled:
            opts.append("Enabled")
        if not self.enabled_by_default and not self.enabled:
            opts.append("Disabled")
        if self.removed:
            opts.append("Removed")
        if self.used:
            opts.append("Used")
        return f"{self.name}=({', '.join(opts)})"

    def to_json(self) -> dict[str, bool]:
        """JSON-ready flags; false optional flags are left out."""
        doc: dict[str, bool] = {}
        if self.enabled_by_default:
            doc["enabled_by_default"] = True
        doc["enabled"] = self.enabled
        if self.removed:
            doc["removed"] = True
        if self.used:
            doc["used"] = True
        return doc


@dataclass
class User:
    """A Windows account."""

    sid: str = ""
    account: str = ""
    domain: str = ""
    type: int = 0

    def __str__(self) -> str:
        return f"User:{self.domain}\\{self.account}, SID:{self.sid}, Type:{self.type}"


@dataclass
class DebugInfo:
    """General debug information about a process."""

    os_version: Version = field(default_factory=Version)
    arch: str = ""
    num_cpu: int = 0
    user: User = field(default_factory=User)
    process_privs: dict[str, Privilege] = field(default_factory=dict)

    def _document(self) -> dict[str, Any]:
        return {
            "OSVersion": {
                "Major": self.os_version.major,
                "Minor": self.os_version.minor,
                "Build": self.os_version.build,
            },
            "Arch": self.arch,
            "NumCPU": self.num_cpu,
            "User": {
                "SID": self.user.sid,
                "Account": self.user.account,
                "Domain": self.user.domain,
                "Type": self.user.type,
            },
            "ProcessPrivs": {
                name: self.process_privs[name].to_json()
                for name in sorted(self.process_privs)
            },
        }

    def __str__(self) -> str:
        return json.dumps(self._document(), separators=(",", ":"), ensure_ascii=False)


def parse_token_privileges(
    data: bytes, lookup_name: Callable[[int], str]
) -> dict[str, Privilege]:
    """Decode a TOKEN_PRIVILEGES buffer into privileges keyed by name.

    ``lookup_name`` maps each LUID to the privilege's name.
    """
    view = memoryview(bytes(data))
    if len(view) < _COUNT.size:
        raise ValueError("failed to read PrivilegeCount")
    (count,) = _COUNT.unpack_from(view)
    offset = _COUNT.size
    privileges: dict[str, Privilege] = {}
    for _ in range(count):
        if len(view) - offset < _LUID.size:
            raise ValueError("failed to read LUID value")
        (luid,) = _LUID.unpack_from(view, offset)
        offset += _LUID.size
        if len(view) - offset < _ATTRIBUTES.size:
            raise ValueError("failed to read attributes")
        (attributes,) = _ATTRIBUTES.unpack_from(view, offset)
        offset += _ATTRIBUTES.size
        name = lookup_name(luid)
        privileges[name] = Privilege.from_attributes(luid, name, attributes)
    return privileges


def encode_enable_privileges(luids: Iterable[int]) -> bytes:
    """Encode a TOKEN_PRIVILEGES buffer that enables each of ``luids``."""
    values = list(luids)
    parts = [_COUNT.pack(len(values))]
    for luid in values:
        parts.append(_LUID.pack(luid))
        parts.append(_ATTRIBUTES.pack(SE_PRIVILEGE_ENABLED))
    return b"".join(parts)