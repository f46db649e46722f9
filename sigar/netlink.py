"""Netlink error codes and decoding of NLMSG_ERROR payloads."""

from __future__ import annotations

import enum

from sigar.util import native_byte_order


class NetlinkErrno(enum.IntEnum):
    """Error codes carried in a netlink message of type NLMSG_ERROR."""

    SUCCESS = 0
    FAILURE = 1
    INTR = 2
    BAD_SOCK = 3
    AGAIN = 4
    NOMEM = 5
    EXIST = 6
    INVAL = 7
    RANGE = 8
    MSGSIZE = 9
    OPNOTSUPP = 10
    AF_NOSUPPORT = 11
    OBJ_NOTFOUND = 12
    NOATTR = 13
    MISSING_ATTR = 14
    AF_MISMATCH = 15
    SEQ_MISMATCH = 16
    MSG_OVERFLOW = 17
    MSG_TRUNC = 18
    NOADDR = 19
    SRCRT_NOSUPPORT = 20
    MSG_TOOSHORT = 21
    MSGTYPE_NOSUPPORT = 22
    OBJ_MISMATCH = 23
    NOCACHE = 24
    BUSY = 25
    PROTO_MISMATCH = 26
    NOACCESS = 27
    PERM = 28
    PKTLOC_FILE = 29
    PARSE_ERR = 30
    NODEV = 31
    IMMUTABLE = 32
    DUMP_INTR = 33
    ATTRSIZE = 34

    def message(self) -> str:
        """Human readable description of the error code."""
        return _MESSAGES[self]


_MESSAGES = {
    NetlinkErrno.SUCCESS: "Success",
    NetlinkErrno.FAILURE: "Unspecific failure",
    NetlinkErrno.INTR: "Interrupted system call",
    NetlinkErrno.BAD_SOCK: "Bad socket",
    NetlinkErrno.AGAIN: "Try again",
    NetlinkErrno.NOMEM: "Out of memory",
    NetlinkErrno.EXIST: "Object exists",
    NetlinkErrno.INVAL: "Invalid input data or parameter",
    NetlinkErrno.RANGE: "Input data out of range",
    NetlinkErrno.MSGSIZE: "Message size not sufficient",
    NetlinkErrno.OPNOTSUPP: "Operation not supported",
    NetlinkErrno.AF_NOSUPPORT: "Address family not supported",
    NetlinkErrno.OBJ_NOTFOUND: "Object not found",
    NetlinkErrno.NOATTR: "Attribute not available",
    NetlinkErrno.MISSING_ATTR: "Missing attribute",
    NetlinkErrno.AF_MISMATCH: "Address family mismatch",
    NetlinkErrno.SEQ_MISMATCH: "Message sequence number mismatch",
    NetlinkErrno.MSG_OVERFLOW: "Kernel reported message overflow",
    NetlinkErrno.MSG_TRUNC: "Kernel reported truncated message",
    NetlinkErrno.NOADDR: "Invalid address for specified address family",
    NetlinkErrno.SRCRT_NOSUPPORT: "Source based routing not supported",
    NetlinkErrno.MSG_TOOSHORT: "Netlink message is too short",
    NetlinkErrno.MSGTYPE_NOSUPPORT: "Netlink message type is not supported",
    NetlinkErrno.OBJ_MISMATCH: "Object type does not match cache",
    NetlinkErrno.NOCACHE: "Unknown or invalid cache type",
    NetlinkErrno.BUSY: "Object busy",
    NetlinkErrno.PROTO_MISMATCH: "Protocol mismatch",
    NetlinkErrno.NOACCESS: "No Access",
    NetlinkErrno.PERM: "Operation not permitted",
    NetlinkErrno.PKTLOC_FILE: "Unable to open packet location file",
    NetlinkErrno.PARSE_ERR: "Unable to parse object",
    NetlinkErrno.NODEV: "No such device",
    NetlinkErrno.IMMUTABLE: "Immutable attribute",
    NetlinkErrno.DUMP_INTR: "Dump inconsistency detected, interrupted",
    NetlinkErrno.ATTRSIZE: "Attribute max length exceeded",
}

_TOO_SHORT = "received netlink error (data too short to read errno)"


class NetlinkError(Exception):
    """An error reported by the kernel over a netlink socket.

    ``errno`` is a :class:`NetlinkErrno` for known codes, a plain ``int`` for
    unknown ones, and ``None`` when the payload was too short to hold one.
    """

    def __init__(self, errno: NetlinkErrno | int | None, message: str) -> None:
        super().__init__(message)
        self.errno = errno
        self.message = message

    def __str__(self) -> str:
        return self.message


def parse_netlink_error(data: bytes) -> NetlinkError:
    """Build the error described by the payload of an NLMSG_ERROR message."""
    if len(data) < 4:
        return NetlinkError(None, _TOO_SHORT)
    raw = int.from_bytes(data[:4], native_byte_order(), signed=False)
    code = (-raw) & 0xFFFFFFFF
    try:
        errno = NetlinkErrno(code)
    except ValueError:
        return NetlinkError(code, NetlinkErrno.FAILURE.message())
    return NetlinkError(errno, errno.message())