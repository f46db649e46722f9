import sys

import pytest

from sigar.util import byte_list_to_string, bytes_to_string, chop, native_byte_order


def test_byte_array_to_string():
    raw = [97, 112, 102, 115, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0]
    assert byte_list_to_string(raw) == "apfs"


def test_byte_array_stops_at_first_nul():
    raw = [97, 98, 0, 99, 100]
    assert byte_list_to_string(raw) == "ab"


def test_byte_array_without_terminator():
    assert byte_list_to_string([104, 105]) == "hi"


def test_byte_array_empty():
    assert byte_list_to_string([0, 0, 0]) == ""


def test_chop_removes_last_byte():
    assert chop(b"arg\x00") == b"arg"


def test_chop_single_byte():
    assert chop(b"\x00") == b""


def test_chop_empty_raises():
    with pytest.raises(ValueError):
        chop(b"")


def test_bytes_to_string_trims_nuls():
    assert bytes_to_string(b"\x00\x00ext4\x00\x00") == "ext4"


def test_bytes_to_string_keeps_inner_nul():
    assert bytes_to_string(b"a\x00b\x00") == "a\x00b"


def test_native_byte_order_matches_interpreter():
    order = native_byte_order()
    assert order in ("little", "big")
    assert order == sys.byteorder