"""System information from procfs, Unix resource usage, TCP socket diagnostics and Windows data decoders."""

__version__ = "0.1.0"
__all__ = ["cmdline", "inetdiag", "netlink", "privileges", "procfs", "unix", "util", "winapi", "windows"]