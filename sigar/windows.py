"""Windows version numbers and processor performance records."""

from __future__ import annotations

import struct
from dataclasses import dataclass

# NtQuerySystemInformation lays out one record per processor in 48 bytes on
# both 32-bit and 64-bit systems.
PROCESSOR_PERFORMANCE_RECORD_SIZE = 48

_TIMES = struct.Struct("<QQQ")
_MASK64 = (1 << 64) - 1


@dataclass(frozen=True)
class Version:
    """A Windows version given by major, minor and build number."""

    major: int = 0
    minor: int = 0
    build: int = 0

    @classmethod
    def from_packed(cls, value: int) -> Version:
        """Decode the packed value returned by GetVersion."""
        return cls(
            major=value & 0xFF,
            minor=(value >> 8) & 0xFF,
            build=value >> 16,
        )

    def is_windows_vista_or_greater(self) -> bool:
        """True for Windows Vista (6.0) and later."""
        return self.major >= 6 and self.minor >= 0


@dataclass(frozen=True)
class ProcessorPerformance:
    """CPU times of one processor, in nanoseconds.

    ``kernel_time`` does not include the time spent idle.
    """

    idle_time: int = 0
    kernel_time: int = 0
    user_time: int = 0


def _ticks_to_nanoseconds(ticks: int) -> int:
    # Intervals are counted in units of 100 ns; wrap as signed 64-bit.
    value = (ticks * 100) & _MASK64
    return value - (1 << 64) if value >> 63 else value


def read_processor_performance_buffer(data: bytes) -> list[ProcessorPerformance]:
    """Decode SYSTEM_PROCESSOR_PERFORMANCE_INFORMATION records, one per CPU.

    A trailing partial record is ignored.
    """
    view = memoryview(bytes(data))
    count = len(view) // PROCESSOR_PERFORMANCE_RECORD_SIZE
    records = []
    for offset in range(0, count * PROCESSOR_PERFORMANCE_RECORD_SIZE,
                        PROCESSOR_PERFORMANCE_RECORD_SIZE):
        idle, kernel, user = (
            _ticks_to_nanoseconds(value) for value in _TIMES.unpack_from(view, offset)
        )
        records.append(
            ProcessorPerformance(
                idle_time=idle,
                kernel_time=kernel - idle,
                user_time=user,
            )
        )
    return records