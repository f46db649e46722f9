# sigar

Gathers system information on Linux: CPU times, memory and swap, huge
pages, file descriptor usage, load averages, mounted file systems, and the
state, memory, CPU times, arguments, environment and open files of each
process. It also reports file system and resource usage on Unix systems,
lists TCP sockets through the kernel's socket diagnostics over netlink, and
decodes several binary layouts used by Windows system calls.

## Installation

```
pip install .
```

## Reading /proc

`sigar.procfs.ProcFS` reads a procfs tree. Its root is `/proc` and its
mount table `/etc/mtab` by default; both can point elsewhere, which makes it
easy to work from captured files. `clock_ticks` (100 by default) is used to
turn tick counts into milliseconds.

```python
from sigar.procfs import ProcFS

fs = ProcFS()
mem = fs.mem()
print(mem.total, mem.free, mem.actual_free)

cpu = fs.cpu()
print(cpu.user, cpu.sys, cpu.idle)

for pid in fs.proc_list():
    state = fs.proc_state(pid)
    print(pid, state.name, state.username, state.state)
```

Other readings: `swap()`, `huge_tlb_pages()`, `fd_usage()`,
`load_average()`, `cpu_list()`, `file_system_list()`, `boot_time()`,
`uptime()`, and per process `proc_mem(pid)`, `proc_time(pid)`,
`proc_args(pid)`, `proc_env(pid)`, `proc_exe(pid)`, `proc_fd_usage(pid)`
and `proc_status(pid)`. Memory sizes are in bytes; values given in kB are
converted.

When a process's `stat`, `statm`, `cmdline` or `environ` file is missing,
the reading raises `ProcessLookupError`. Other problems reading files raise
`OSError`, and malformed content raises `ValueError`. `load_average()`
returns zeros when `loadavg` cannot be read.

The parsers also work on plain text: `parse_meminfo`, `parse_cpu_stat` and
`parse_uids`.

## Disk and resource usage

```python
import resource

from sigar.unix import clock_ticks, file_system_usage, resource_usage

usage = file_system_usage("/")
print(usage.total, usage.used, usage.avail, usage.free_files)

ru = resource_usage(resource.RUSAGE_SELF)
print(ru.utime, ru.stime, ru.maxrss)

print(clock_ticks())
```

`clock_ticks()` falls back to 100 where the system cannot say.

## TCP socket diagnostics

```python
from sigar.inetdiag import new_inet_diag_req, netlink_inet_diag

for msg in netlink_inet_diag(new_inet_diag_req()):
    print(msg.src_ip(), msg.src_port(), msg.dst_ip(), msg.dst_port(), msg.state)
```

`new_inet_diag_req_v2(family)` builds a request for one address family
(`AddressFamily.INET` or `AddressFamily.INET6`). `netlink_inet_diag` takes
an optional `read_size` and a binary `dump` stream that receives every byte
read. Replies can be parsed without a socket with `parse_netlink_messages`
and `InetDiagMsg.parse`.

A netlink error reply is raised as `sigar.netlink.NetlinkError`. Its
`errno` attribute is a `sigar.netlink.NetlinkErrno` for known codes, a
plain integer for unknown ones, and `None` when the reply was too short to
hold a code.

## Windows data layouts

These modules decode and encode bytes; they make no system calls and run
on any platform.

- `sigar.windows`: `Version.from_packed` for the packed version word, and
  `read_processor_performance_buffer` for per-processor CPU times.
- `sigar.privileges`: `parse_token_privileges` and
  `encode_enable_privileges` for token privilege lists, with `Privilege`,
  `User` and `DebugInfo`.
- `sigar.winapi`: `DriveType`, `filetime_to_nanoseconds` and
  `utf16_slice_to_strings`.
- `sigar.cmdline`: `unicode_string_buffer` and `split_utf16_bytes`, which
  splits a UTF-16 command line by the Windows quoting rules.

`sigar.util` holds small helpers for NUL-terminated buffers and the
machine's byte order.

## What it does not do

The package does not collect live statistics on Windows, macOS or the BSDs:
on those systems only the decoders above and, where available,
`sigar.unix` are of use. It has no command-line tool and does not sample
statistics over time; callers read values when they need them.

## Tests

```
pip install .[test]
pytest
```