"""Socket diagnostics (inet_diag) over netlink: requests, replies and transport."""

from __future__ import annotations

import enum
import errno
import ipaddress
import mmap
import socket
import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from sigar.netlink import parse_netlink_error

ALL_TCP_STATES = 0xFFFFFFFF
TCPDIAG_GETSOCK = 18
SOCK_DIAG_BY_FAMILY = 20

INET_DIAG_NONE = 0
INET_DIAG_MEMINFO = 1 << 1
INET_DIAG_INFO = 1 << 2
INET_DIAG_VEGASINFO = 1 << 3
INET_DIAG_CONG = 1 << 4
INET_DIAG_TOS = 1 << 5
INET_DIAG_TCLASS = 1 << 6
INET_DIAG_SKMEMINFO = 1 << 7
INET_DIAG_SHUTDOWN = 1 << 8
INET_DIAG_DCTCPINFO = 1 << 9
INET_DIAG_PROTOCOL = 1 << 10
INET_DIAG_SKV6ONLY = 1 << 11
INET_DIAG_LOCALS = 1 << 12
INET_DIAG_PEERS = 1 << 13
INET_DIAG_PAD = 1 << 14
INET_DIAG_MARK = 1 << 15

NLMSG_HDRLEN = 16
NLMSG_ERROR = 2
NLMSG_DONE = 3
NLM_F_REQUEST = 0x1
NLM_F_DUMP = 0x300
NETLINK_INET_DIAG = 4
IPPROTO_TCP = 6

_HEADER = struct.Struct("=IHHII")
_SOCK_ID = struct.Struct("=2s2s16s16sI2I")
_REQ_HEAD = struct.Struct("=BBBB")
_REQ_TAIL = struct.Struct("=II")
_REQ_V2_HEAD = struct.Struct("=BBBBI")
_MSG_HEAD = struct.Struct("=BBBB")
_MSG_TAIL = struct.Struct("=5I")
INET_DIAG_MSG_SIZE = _MSG_HEAD.size + _SOCK_ID.size + _MSG_TAIL.size


class AddressFamily(enum.IntEnum):
    """Address family of a socket."""

    INET = 2
    INET6 = 10

    def __str__(self) -> str:
        return _family_name(self)


def _family_name(value: int) -> str:
    if value == AddressFamily.INET:
        return "ipv4"
    if value == AddressFamily.INET6:
        return "ipv6"
    return f"UNKNOWN ({int(value)})"


class TCPState(enum.IntEnum):
    """State of a TCP connection."""

    ESTABLISHED = 1
    SYN_SENT = 2
    SYN_RECV = 3
    FIN_WAIT1 = 4
    FIN_WAIT2 = 5
    TIME_WAIT = 6
    CLOSE = 7
    CLOSE_WAIT = 8
    LAST_ACK = 9
    LISTEN = 10
    CLOSING = 11

    def __str__(self) -> str:
        return _TCP_STATE_NAMES[self]


_TCP_STATE_NAMES = {
    TCPState.ESTABLISHED: "ESTAB",
    TCPState.SYN_SENT: "SYN-SENT",
    TCPState.SYN_RECV: "SYN-RECV",
    TCPState.FIN_WAIT1: "FIN-WAIT-1",
    TCPState.FIN_WAIT2: "FIN-WAIT-2",
    TCPState.TIME_WAIT: "TIME-WAIT",
    TCPState.CLOSE: "UNCONN",
    TCPState.CLOSE_WAIT: "CLOSE-WAIT",
    TCPState.LAST_ACK: "LAST-ACK",
    TCPState.LISTEN: "LISTEN",
    TCPState.CLOSING: "CLOSING",
}


@dataclass
class NetlinkHeader:
    """A netlink message header (nlmsghdr)."""

    length: int = 0
    type: int = 0
    flags: int = 0
    seq: int = 0
    pid: int = 0


@dataclass
class NetlinkMessage:
    """A netlink message: header plus payload."""

    header: NetlinkHeader = field(default_factory=NetlinkHeader)
    data: bytes = b""

    def serialize(self) -> bytes:
        """Encode the message in native byte order, filling in its length."""
        length = NLMSG_HDRLEN + len(self.data)
        h = self.header
        return _HEADER.pack(length, h.type, h.flags, h.seq, h.pid) + bytes(self.data)


def _align(length: int) -> int:
    return (length + 3) & ~3


def parse_netlink_messages(data: bytes) -> list[NetlinkMessage]:
    """Split a buffer read from a netlink socket into messages."""
    messages = []
    rest = memoryview(bytes(data))
    while len(rest) >= NLMSG_HDRLEN:
        length, mtype, flags, seq, pid = _HEADER.unpack_from(rest)
        if length < NLMSG_HDRLEN or length > len(rest):
            raise ValueError(f"invalid netlink message length {length}")
        header = NetlinkHeader(length, mtype, flags, seq, pid)
        messages.append(NetlinkMessage(header, bytes(rest[NLMSG_HDRLEN:length])))
        rest = rest[_align(length):]
    return messages


def _fixed(value: bytes, size: int, name: str) -> bytes:
    value = bytes(value)
    if len(value) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(value)}")
    return value


@dataclass
class InetDiagSockID:
    """Socket identity (inet_diag_sockid). Ports are stored big-endian."""

    sport: bytes = bytes(2)
    dport: bytes = bytes(2)
    src: bytes = bytes(16)
    dst: bytes = bytes(16)
    interface: int = 0
    cookie: tuple[int, int] = (0, 0)

    def __post_init__(self) -> None:
        self.sport = _fixed(self.sport, 2, "sport")
        self.dport = _fixed(self.dport, 2, "dport")
        self.src = _fixed(self.src, 16, "src")
        self.dst = _fixed(self.dst, 16, "dst")
        self.cookie = tuple(self.cookie)
        if len(self.cookie) != 2:
            raise ValueError("cookie must hold two values")

    def pack(self) -> bytes:
        """Encode the identity in its wire layout."""
        return _SOCK_ID.pack(
            self.sport, self.dport, self.src, self.dst, self.interface, *self.cookie
        )

    @classmethod
    def unpack(cls, data: bytes) -> InetDiagSockID:
        """Decode an identity from the start of ``data``."""
        if len(data) < _SOCK_ID.size:
            raise ValueError("data too short for inet_diag_sockid")
        sport, dport, src, dst, interface, c0, c1 = _SOCK_ID.unpack_from(data)
        return cls(sport, dport, src, dst, interface, (c0, c1))


@dataclass
class InetDiagReq:
    """Request for diagnostic data from older kernels (inet_diag_req)."""

    family: int = 0
    src_len: int = 0
    dst_len: int = 0
    ext: int = 0
    id: InetDiagSockID = field(default_factory=InetDiagSockID)
    states: int = 0
    dbs: int = 0

    def to_bytes(self) -> bytes:
        return (
            _REQ_HEAD.pack(self.family, self.src_len, self.dst_len, self.ext)
            + self.id.pack()
            + _REQ_TAIL.pack(self.states, self.dbs)
        )


@dataclass
class InetDiagReqV2:
    """Request for diagnostic data (inet_diag_req_v2)."""

    family: int = 0
    protocol: int = 0
    ext: int = 0
    pad: int = 0
    states: int = 0
    id: InetDiagSockID = field(default_factory=InetDiagSockID)

    def to_bytes(self) -> bytes:
        return (
            _REQ_V2_HEAD.pack(self.family, self.protocol, self.ext, self.pad, self.states)
            + self.id.pack()
        )


def new_inet_diag_req() -> NetlinkMessage:
    """A dump request for all TCP sockets, IPv4 and IPv6, in every state."""
    header = NetlinkHeader(type=TCPDIAG_GETSOCK, flags=NLM_F_DUMP | NLM_F_REQUEST)
    req = InetDiagReq(family=AddressFamily.INET, states=ALL_TCP_STATES)
    return NetlinkMessage(header, req.to_bytes())


def new_inet_diag_req_v2(family: int) -> NetlinkMessage:
    """A dump request for all TCP sockets of one address family."""
    header = NetlinkHeader(type=SOCK_DIAG_BY_FAMILY, flags=NLM_F_DUMP | NLM_F_REQUEST)
    req = InetDiagReqV2(family=int(family), protocol=IPPROTO_TCP, states=ALL_TCP_STATES)
    return NetlinkMessage(header, req.to_bytes())


_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3
_MASK64 = (1 << 64) - 1


def _fnv1_64(*chunks: bytes) -> int:
    value = _FNV64_OFFSET
    for chunk in chunks:
        for byte in chunk:
            value = (value * _FNV64_PRIME) & _MASK64
            value ^= byte
    return value


@dataclass
class InetDiagMsg:
    """Socket information returned by the kernel (inet_diag_msg)."""

    family: int = 0
    state: int = 0
    timer: int = 0
    retrans: int = 0
    id: InetDiagSockID = field(default_factory=InetDiagSockID)
    expires: int = 0
    rqueue: int = 0
    wqueue: int = 0
    uid: int = 0
    inode: int = 0

    @classmethod
    def parse(cls, data: bytes) -> InetDiagMsg:
        """Decode a message from the start of a netlink payload."""
        if len(data) < INET_DIAG_MSG_SIZE:
            raise ValueError("failed to unmarshal inet_diag_msg: data too short")
        family, state, timer, retrans = _MSG_HEAD.unpack_from(data)
        sock_id = InetDiagSockID.unpack(data[_MSG_HEAD.size:])
        tail = _MSG_TAIL.unpack_from(data, _MSG_HEAD.size + _SOCK_ID.size)
        return cls(family, state, timer, retrans, sock_id, *tail)

    def src_port(self) -> int:
        return int.from_bytes(self.id.sport, "big")

    def dst_port(self) -> int:
        return int.from_bytes(self.id.dport, "big")

    def src_ip(self) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
        return _ip(self.id.src, self.family)

    def dst_ip(self) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
        return _ip(self.id.dst, self.family)

    def fast_hash(self) -> int:
        """FNV-1 64-bit hash of the source and destination addresses and ports."""
        return _fnv1_64(
            _ip_bytes(self.id.src, self.family),
            _ip_bytes(self.id.dst, self.family),
            self.id.sport,
            self.id.dport,
        )


def _ip(data: bytes, family: int) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    if family == AddressFamily.INET:
        return ipaddress.IPv4Address(data[:4])
    return ipaddress.IPv6Address(data)


def _ip_bytes(data: bytes, family: int) -> bytes:
    # IPv4 buffers may carry garbage after the first four bytes.
    return data[:4] if family == AddressFamily.INET else data


def netlink_inet_diag(
    request: NetlinkMessage,
    read_size: int | None = None,
    dump: BinaryIO | None = None,
) -> list[InetDiagMsg]:
    """Send ``request`` to the kernel and collect the inet_diag replies.

    ``read_size`` bounds each read (a page by default); ``dump``, if given,
    receives a copy of every byte read.
    """
    if not hasattr(socket, "AF_NETLINK"):
        raise OSError(errno.EAFNOSUPPORT, "netlink sockets are not available")
    size = read_size or mmap.PAGESIZE
    results: list[InetDiagMsg] = []
    with socket.socket(socket.AF_NETLINK, socket.SOCK_RAW, NETLINK_INET_DIAG) as sock:
        sock.sendto(request.serialize(), (0, 0))
        while True:
            buf = sock.recv(size)
            if len(buf) < NLMSG_HDRLEN:
                raise OSError(errno.EINVAL, "short netlink read")
            if dump is not None:
                dump.write(buf)
            for message in parse_netlink_messages(buf):
                if message.header.type == NLMSG_DONE:
                    return results
                if message.header.type == NLMSG_ERROR:
                    raise parse_netlink_error(message.data)
                results.append(InetDiagMsg.parse(message.data))