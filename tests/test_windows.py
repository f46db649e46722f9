import struct

import pytest

from sigar.windows import (
    PROCESSOR_PERFORMANCE_RECORD_SIZE,
    ProcessorPerformance,
    Version,
    read_processor_performance_buffer,
)


def _record(idle, kernel, user):
    return struct.pack("<QQQ", idle, kernel, user) + bytes(
        PROCESSOR_PERFORMANCE_RECORD_SIZE - 24
    )


@pytest.mark.parametrize(
    "major,minor,build",
    [(6, 2, 9200), (5, 1, 2600), (10, 0, 19041), (0, 0, 0)],
)
def test_version_from_packed_round_trip(major, minor, build):
    packed = (build << 16) | (minor << 8) | major
    assert Version.from_packed(packed) == Version(major, minor, build)


def test_version_from_packed_ignores_high_byte_bits_in_minor():
    version = Version.from_packed((7 << 16) | (0x01 << 8) | 0x06)
    assert (version.major, version.minor, version.build) == (6, 1, 7)


@pytest.mark.parametrize(
    "version,expected",
    [
        (Version(6, 0, 6000), True),
        (Version(10, 0, 19041), True),
        (Version(5, 2, 3790), False),
        (Version(5, 1, 2600), False),
    ],
)
def test_is_windows_vista_or_greater(version, expected):
    assert version.is_windows_vista_or_greater() is expected


def test_read_buffer_empty():
    assert read_processor_performance_buffer(b"") == []


def test_read_buffer_one_record():
    records = read_processor_performance_buffer(_record(10, 30, 5))
    assert records == [
        ProcessorPerformance(idle_time=1000, kernel_time=2000, user_time=500)
    ]


def test_read_buffer_counts_whole_records_only():
    data = _record(1, 2, 3) + _record(4, 5, 6) + bytes(20)
    records = read_processor_performance_buffer(data)
    assert len(records) == 2


def test_read_buffer_kernel_excludes_idle():
    data = _record(7, 7, 0) + _record(3, 9, 1)
    records = read_processor_performance_buffer(data)
    assert records[0].kernel_time == 0
    assert records[1].kernel_time + records[1].idle_time == 9 * 100
    assert records[1].user_time == 1 * 100


def test_read_buffer_ignores_reserved_fields():
    plain = _record(2, 4, 6)
    noisy = plain[:24] + b"\xff" * (PROCESSOR_PERFORMANCE_RECORD_SIZE - 24)
    assert read_processor_performance_buffer(plain) == read_processor_performance_buffer(noisy)