import struct

import pytest

from sigar.netlink import NetlinkErrno, NetlinkError, parse_netlink_error


def test_parse_netlink_error_data_too_short():
    err = parse_netlink_error(b"")
    assert isinstance(err, NetlinkError)
    assert err.errno is None
    assert "too short" in str(err)


def test_parse_netlink_error_three_bytes_is_too_short():
    err = parse_netlink_error(b"\x01\x02\x03")
    assert err.errno is None


def test_parse_netlink_error_errno():
    data = struct.pack("=i", -1 * int(NetlinkErrno.MSG_TOOSHORT))
    err = parse_netlink_error(data)
    assert err.errno == NetlinkErrno.MSG_TOOSHORT
    assert str(err) == "Netlink message is too short"


def test_parse_netlink_error_extra_bytes_ignored():
    data = struct.pack("=i", -int(NetlinkErrno.PERM)) + b"\xff" * 16
    err = parse_netlink_error(data)
    assert err.errno is NetlinkErrno.PERM
    assert str(err) == "Operation not permitted"


def test_parse_netlink_error_unknown_code():
    err = parse_netlink_error(struct.pack("=i", -1000))
    assert err.errno == 1000
    assert str(err) == "Unspecific failure"


def test_errno_messages():
    assert NetlinkErrno.SUCCESS.message() == "Success"
    assert NetlinkErrno.ATTRSIZE.message() == "Attribute max length exceeded"
    assert NetlinkErrno.ATTRSIZE == 34


@pytest.mark.parametrize("code", list(NetlinkErrno))
def test_every_errno_round_trips_through_parse(code):
    err = parse_netlink_error(struct.pack("=i", -int(code)))
    assert err.errno == code
    assert str(err) == code.message()
    assert str(err) != ""