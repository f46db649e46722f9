"""File system and resource usage on Unix-like systems."""

from __future__ import annotations

import errno
import os
from dataclasses import dataclass
from datetime import timedelta

try:
    import resource
except ImportError:  # pragma: no cover - platforms without getrusage
    resource = None

_DEFAULT_CLOCK_TICKS = 100


@dataclass
class FileSystemUsage:
    """Space and inode usage of a mounted file system; sizes in bytes."""

    total: int = 0
    used: int = 0
    free: int = 0
    avail: int = 0
    files: int = 0
    free_files: int = 0


@dataclass
class Rusage:
    """Resource usage as reported by getrusage."""

    utime: timedelta = timedelta()
    stime: timedelta = timedelta()
    maxrss: int = 0
    ixrss: int = 0
    idrss: int = 0
    isrss: int = 0
    minflt: int = 0
    majflt: int = 0
    nswap: int = 0
    inblock: int = 0
    oublock: int = 0
    msgsnd: int = 0
    msgrcv: int = 0
    nsignals: int = 0
    nvcsw: int = 0
    nivcsw: int = 0


def file_system_usage(path: str | os.PathLike[str]) -> FileSystemUsage:
    """Usage of the file system that holds ``path``."""
    stat = os.statvfs(path)
    total = stat.f_blocks * stat.f_bsize
    free = stat.f_bfree * stat.f_bsize
    return FileSystemUsage(
        total=total,
        used=total - free,
        free=free,
        avail=stat.f_bavail * stat.f_bsize,
        files=stat.f_files,
        free_files=stat.f_ffree,
    )


def resource_usage(who: int) -> Rusage:
    """Resource usage of ``who`` (a ``resource.RUSAGE_*`` value)."""
    if resource is None:
        raise OSError(errno.ENOSYS, "getrusage is not available")
    usage = resource.getrusage(who)
    return Rusage(
        utime=timedelta(seconds=usage.ru_utime),
        stime=timedelta(seconds=usage.ru_stime),
        maxrss=usage.ru_maxrss,
        ixrss=usage.ru_ixrss,
        idrss=usage.ru_idrss,
        isrss=usage.ru_isrss,
        minflt=usage.ru_minflt,
        majflt=usage.ru_majflt,
        nswap=usage.ru_nswap,
        inblock=usage.ru_inblock,
        oublock=usage.ru_oublock,
        msgsnd=usage.ru_msgsnd,
        msgrcv=usage.ru_msgrcv,
        nsignals=usage.ru_nsignals,
        nvcsw=usage.ru_nvcsw,
        nivcsw=usage.ru_nivcsw,
    )


def clock_ticks() -> int:
    """Clock ticks per second, or 100 where the system cannot say."""
    sysconf = getattr(os, "sysconf", None)
    if sysconf is None:
        return _DEFAULT_CLOCK_TICKS
    try:
        ticks = sysconf("SC_CLK_TCK")
    except (ValueError, OSError):
        return _DEFAULT_CLOCK_TICKS
    return ticks if ticks > 0 else _DEFAULT_CLOCK_TICKS