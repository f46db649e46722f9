"""System and process statistics read from a Linux procfs tree."""

from __future__ import annotations

import enum
import errno
import os
import time
from dataclasses import dataclass
from pathlib import Path

try:
    import pwd
except ImportError:  # pragma: no cover - platforms without a passwd database
    pwd = None

_MASK64 = (1 << 64) - 1
_PAGE_SHIFT = 12


def _u64(value: int) -> int:
    """Wrap ``value`` the way unsigned 64-bit arithmetic does."""
    return value & _MASK64


def _parse_uint(text: str) -> int | None:
    if text.isascii() and text.isdigit():
        value = int(text)
        if value <= _MASK64:
            return value
    return None


def _uint(text: str) -> int:
    value = _parse_uint(text)
    return 0 if value is None else value


def _float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class RunState(str, enum.Enum):
    """Scheduling state of a process, as the one-letter code the kernel uses."""

    SLEEP = "S"
    RUN = "R"
    STOP = "T"
    ZOMBIE = "Z"
    IDLE = "D"
    UNKNOWN = "?"


def _run_state(code: str) -> RunState | str:
    try:
        return RunState(code)
    except ValueError:
        return code


@dataclass
class Cpu:
    """CPU time counters, in clock ticks."""

    user: int = 0
    nice: int = 0
    sys: int = 0
    idle: int = 0
    wait: int = 0
    irq: int = 0
    soft_irq: int = 0
    stolen: int = 0


@dataclass
class Mem:
    """Physical memory usage in bytes."""

    total: int = 0
    used: int = 0
    free: int = 0
    cached: int = 0
    actual_free: int = 0
    actual_used: int = 0


@dataclass
class Swap:
    """Swap usage in bytes."""

    total: int = 0
    used: int = 0
    free: int = 0


@dataclass
class HugeTLBPages:
    """Huge page counts; sizes in bytes."""

    total: int = 0
    free: int = 0
    reserved: int = 0
    surplus: int = 0
    default_size: int = 0
    total_allocated_size: int = 0


@dataclass
class FDUsage:
    """System-wide file descriptor usage."""

    open: int = 0
    unused: int = 0
    max: int = 0


@dataclass
class LoadAverage:
    """Load averages over one, five and fifteen minutes."""

    one: float = 0.0
    five: float = 0.0
    fifteen: float = 0.0


@dataclass
class FileSystem:
    """One entry of the mount table."""

    dir_name: str = ""
    dev_name: str = ""
    type_name: str = ""
    sys_type_name: str = ""
    options: str = ""


@dataclass
class ProcState:
    """Identity and scheduling state of a process."""

    name: str = ""
    username: str = ""
    state: RunState | str = RunState.UNKNOWN
    ppid: int = 0
    pgid: int = 0
    tty: int = 0
    priority: int = 0
    nice: int = 0
    processor: int = 0


@dataclass
class ProcMem:
    """Memory usage of a process; sizes in bytes."""

    size: int = 0
    resident: int = 0
    share: int = 0
    minor_faults: int = 0
    major_faults: int = 0
    page_faults: int = 0


@dataclass
class ProcTime:
    """CPU times of a process in milliseconds; start time in epoch milliseconds."""

    start_time: int = 0
    user: int = 0
    sys: int = 0
    total: int = 0


@dataclass
class ProcExe:
    """Executable, working directory and root directory of a process."""

    name: str = ""
    cwd: str = ""
    root: str = ""


@dataclass
class ProcFDUsage:
    """Open file descriptors of a process and its limits."""

    open: int = 0
    soft_limit: int = 0
    hard_limit: int = 0


def parse_meminfo(text: str) -> dict[str, int]:
    """Parse the contents of ``meminfo`` into a table of values in bytes.

    Values given in kB are converted to bytes; malformed lines are skipped.
    """
    table: dict[str, int] = {}
    for line in _split_lines(text):
        parts = line.split(":")
        if len(parts) != 2:
            continue
        value_unit = parts[1].split()
        if not value_unit:
            continue
        value = _parse_uint(value_unit[0])
        if value is None:
            continue
        if len(value_unit) > 1 and value_unit[1] == "kB":
            value = _u64(value * 1024)
        table[parts[0]] = value
    return table


def parse_cpu_stat(line: str) -> Cpu:
    """Parse one ``cpu`` line of ``stat``."""
    fields = line.split()
    if len(fields) < 9:
        raise ValueError(f"cpu line has too few fields: {line!r}")
    return Cpu(*(_uint(value) for value in fields[1:9]))


def parse_uids(status: dict[str, str]) -> list[str]:
    """Return the real, effective, saved and filesystem UIDs from a status table."""
    try:
        uid_line = status["Uid"]
    except KeyError:
        raise ValueError("Uid not found in proc status") from None
    uids = uid_line.split()
    if len(uids) != 4:
        raise ValueError(f"Uid line ('{uid_line}') did not contain four values")
    return uids


def _lookup_username(uid: str) -> str:
    if pwd is None:
        return uid
    try:
        return pwd.getpwuid(int(uid)).pw_name
    except (KeyError, ValueError, OverflowError):
        return uid


class ProcFS:
    """Reader of system and process statistics below a procfs root."""

    def __init__(
        self,
        root: str | os.PathLike[str] = "/proc",
        mount_table: str | os.PathLike[str] = "/etc/mtab",
        clock_ticks: int = 100,
    ) -> None:
        if clock_ticks <= 0:
            raise ValueError("clock_ticks must be positive")
        self.root = Path(root)
        self.mount_table = Path(mount_table)
        self.clock_ticks = clock_ticks
        self._boot_time: int | None = None

    def _read_lines(self, path: Path) -> list[str]:
        return _split_lines(_decode(path.read_bytes()))

    def _pid_path(self, pid: int, name: str) -> Path:
        return self.root / str(pid) / name

    def _read_proc_file(self, pid: int, name: str) -> bytes:
        path = self._pid_path(pid, name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise ProcessLookupError(errno.ESRCH, f"no such process: {pid}", str(path)) from None

    def boot_time(self) -> int:
        """System boot time in seconds since the epoch, or 0 if unknown."""
        if self._boot_time is None:
            self._boot_time = 0
            try:
                lines = self._read_lines(self.root / "stat")
            except OSError:
                lines = []
            for line in lines:
                if line.startswith("btime"):
                    self._boot_time = _uint(line[6:])
                    break
        return self._boot_time

    def uptime(self) -> float:
        """Seconds since the system booted, in whole seconds."""
        clock = getattr(time, "CLOCK_BOOTTIME", None)
        if clock is None:
            raise OSError(errno.ENOSYS, "boot time clock is not available")
        return float(int(time.clock_gettime(clock)))

    def load_average(self) -> LoadAverage:
        """Load averages; zeros if ``loadavg`` cannot be read."""
        try:
            text = _decode((self.root / "loadavg").read_bytes())
        except OSError:
            return LoadAverage()
        fields = text.split()
        if len(fields) < 3:
            raise ValueError(f"unexpected loadavg contents: {text!r}")
        return LoadAverage(_float(fields[0]), _float(fields[1]), _float(fields[2]))

    def _meminfo(self) -> dict[str, int]:
        return parse_meminfo(_decode((self.root / "meminfo").read_bytes()))

    def mem(self) -> Mem:
        table = self._meminfo()
        total = table.get("MemTotal", 0)
        free = table.get("MemFree", 0)
        buffers = table.get("Buffers", 0)
        cached = table.get("Cached", 0)
        if "MemAvailable" in table:
            actual_free = table["MemAvailable"]
        else:
            actual_free = _u64(free + buffers + cached)
        return Mem(
            total=total,
            used=_u64(total - free),
            free=free,
            cached=cached,
            actual_free=actual_free,
            actual_used=_u64(total - actual_free),
        )

    def swap(self) -> Swap:
        table = self._meminfo()
        total = table.get("SwapTotal", 0)
        free = table.get("SwapFree", 0)
        return Swap(total=total, used=_u64(total - free), free=free)

    def huge_tlb_pages(self) -> HugeTLBPages:
        table = self._meminfo()
        pages = HugeTLBPages(
            total=table.get("HugePages_Total", 0),
            free=table.get("HugePages_Free", 0),
            reserved=table.get("HugePages_Rsvd", 0),
            surplus=table.get("HugePages_Surp", 0),
            default_size=table.get("Hugepagesize", 0),
        )
        if "Hugetlb" in table:
            pages.total_allocated_size = table["Hugetlb"]
        else:
            # Inaccurate when pages of several sizes are in use.
            pages.total_allocated_size = _u64(
                (pages.total - pages.free + pages.reserved) * pages.default_size
            )
        return pages

    def fd_usage(self) -> FDUsage:
        usage = FDUsage()
        lines = self._read_lines(self.root / "sys" / "fs" / "file-nr")
        if lines:
            fields = lines[0].split()
            if len(fields) == 3:
                usage = FDUsage(*(_uint(value) for value in fields))
        return usage

    def cpu(self) -> Cpu:
        """Aggregate CPU counters of all processors."""
        for line in self._read_lines(self.root / "stat"):
            if len(line) > 4 and line.startswith("cpu "):
                return parse_cpu_stat(line)
        return Cpu()

    def cpu_list(self) -> list[Cpu]:
        """CPU counters of each processor."""
        return [
            parse_cpu_stat(line)
            for line in self._read_lines(self.root / "stat")
            if len(line) > 3 and line.startswith("cpu") and line[3] != " "
        ]

    def file_system_list(self) -> list[FileSystem]:
        filesystems = []
        for line in self._read_lines(self.mount_table):
            fields = line.split()
            if len(fields) < 4:
                continue
            filesystems.append(
                FileSystem(
                    dev_name=fields[0],
                    dir_name=fields[1],
                    sys_type_name=fields[2],
                    options=fields[3],
                )
            )
        return filesystems

    def proc_list(self) -> list[int]:
        """Identifiers of all processes."""
        return [
            int(name)
            for name in os.listdir(self.root)
            if name.isascii() and name.isdigit()
        ]

    def proc_state(self, pid: int) -> ProcState:
        data = self._read_proc_file(pid, "stat")
        left = data.find(b"(")
        right = data.rfind(b")")
        if left < 0 or right < 0 or left >= right or right + 2 >= len(data):
            raise ValueError(
                f"failed to extract comm for pid {pid} from '{_decode(data)}'"
            )
        state = ProcState(name=_decode(data[left + 1 : right]))

        fields = [_decode(value) for value in data[right + 2 :].split()]
        if len(fields) <= 36:
            raise ValueError(
                f"expected more stat fields for pid {pid} from '{_decode(data)}'"
            )
        try:
            state.ppid = int(fields[1])
            state.pgid = int(fields[2])
            state.tty = int(fields[4])
            state.priority = int(fields[15])
            state.nice = int(fields[16])
            state.processor = int(fields[36])
        except ValueError as exc:
            raise ValueError(
                f"failed to parse stat fields for pid {pid} from '{_decode(data)}': {exc}"
            ) from exc
        state.state = _run_state(fields[0][0])

        uids = parse_uids(self.proc_status(pid))
        state.username = _lookup_username(uids[0])
        return state

    def proc_mem(self, pid: int) -> ProcMem:
        statm = _decode(self._read_proc_file(pid, "statm")).split()
        stat = _decode(self._read_proc_file(pid, "stat")).split()
        minor = _uint(stat[10])
        major = _uint(stat[12])
        return ProcMem(
            size=_u64(_uint(statm[0]) << _PAGE_SHIFT),
            resident=_u64(_uint(statm[1]) << _PAGE_SHIFT),
            share=_u64(_uint(statm[2]) << _PAGE_SHIFT),
            minor_faults=minor,
            major_faults=major,
            page_faults=_u64(minor + major),
        )

    def proc_time(self, pid: int) -> ProcTime:
        fields = _decode(self._read_proc_file(pid, "stat")).split()
        per_tick = 1000 // self.clock_ticks
        user = _u64(_uint(fields[13]) * per_tick)
        sys_time = _u64(_uint(fields[14]) * per_tick)
        start = _uint(fields[21]) // self.clock_ticks
        start = _u64((start + self.boot_time()) * 1000)
        return ProcTime(start_time=start, user=user, sys=sys_time, total=_u64(user + sys_time))

    def proc_args(self, pid: int) -> list[str]:
        """Command-line arguments; a trailing unterminated piece is dropped."""
        contents = self._read_proc_file(pid, "cmdline")
        return [_decode(arg) for arg in contents.split(b"\0")[:-1]]

    def proc_env(self, pid: int) -> dict[str, str]:
        contents = self._read_proc_file(pid, "environ")
        env: dict[str, str] = {}
        for pair in contents.split(b"\0"):
            parts = pair.split(b"=", 1)
            if len(parts) != 2:
                continue
            key = _decode(parts[0].strip())
            if not key:
                continue
            env[key] = _decode(parts[1].strip())
        return env

    def proc_exe(self, pid: int) -> ProcExe:
        return ProcExe(
            name=os.readlink(self._pid_path(pid, "exe")),
            cwd=os.readlink(self._pid_path(pid, "cwd")),
            root=os.readlink(self._pid_path(pid, "root")),
        )

    def proc_fd_usage(self, pid: int) -> ProcFDUsage:
        usage = ProcFDUsage()
        for line in self._read_lines(self._pid_path(pid, "limits")):
            if line.startswith("Max open files"):
                fields = line.split()
                if len(fields) == 6:
                    usage.soft_limit = _uint(fields[3])
                    usage.hard_limit = _uint(fields[4])
                break
        usage.open = len(os.listdir(self._pid_path(pid, "fd")))
        return usage

    def proc_status(self, pid: int) -> dict[str, str]:
        """The ``status`` file of a process as a table of trimmed values."""
        status: dict[str, str] = {}
        for line in self._read_lines(self._pid_path(pid, "status")):
            parts = line.split(":", 1)
            if len(parts) == 2:
                status[parts[0]] = parts[1].strip()
        return status