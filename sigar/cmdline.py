"""Buffers of UTF-16 text read from another process, and command-line splitting."""

from __future__ import annotations

_MAX_UNICODE_STRING_SIZE = 0xFFFF
_WHITESPACE = " \t"


def unicode_string_buffer(data: bytes, size: int) -> bytes:
    """Copy the first ``size`` bytes of ``data`` into a NUL-terminated buffer.

    ``size`` is the byte length of a UNICODE_STRING. The result always ends
    with a UTF-16 NUL and has an even length: two NUL bytes are appended, or
    three when ``size`` is odd. A ``data`` shorter than ``size`` is a short
    read and raises :class:`ValueError`.
    """
    if not 0 <= size <= _MAX_UNICODE_STRING_SIZE:
        raise ValueError(f"unicode string size out of range: {size}")
    content = bytes(data[:size])
    if len(content) != size:
        raise ValueError(f"unicode string: short read: ({len(content)}/{size})")
    extra = 3 if size & 1 else 2
    return content + bytes(extra)


def _decode_until_nul(data: bytes) -> str:
    units = len(data) // 2
    end = units * 2
    for offset in range(0, units * 2, 2):
        if data[offset] == 0 and data[offset + 1] == 0:
            end = offset
            break
    return data[:end].decode("utf-16-le", errors="replace")


def _program_name(line: str) -> tuple[str, int]:
    """Read the first token, which takes no escapes, and return it with the next index."""
    if line.startswith('"'):
        end = line.find('"', 1)
        if end < 0:
            return line[1:], len(line)
        return line[1:end], end + 1
    end = len(line)
    for index, char in enumerate(line):
        if char in _WHITESPACE:
            end = index
            break
    return line[:end], end


def _skip_whitespace(line: str, index: int) -> int:
    while index < len(line) and line[index] in _WHITESPACE:
        index += 1
    return index


def _split_command_line(line: str) -> list[str]:
    if not line:
        return []
    name, index = _program_name(line)
    args = [name]
    index = _skip_whitespace(line, index)
    length = len(line)
    started = index < length
    current: list[str] = []
    quotes = 0
    backslashes = 0
    while index < length:
        char = line[index]
        if char in _WHITESPACE and quotes == 0:
            args.append("".join(current))
            current = []
            backslashes = 0
            index = _skip_whitespace(line, index)
            started = index < length
            continue
        if char == "\\":
            current.append(char)
            backslashes += 1
            index += 1
        elif char == '"':
            if backslashes % 2 == 0:
                # 2n backslashes and a quote: n backslashes, the quote toggles.
                del current[len(current) - backslashes // 2:]
                quotes += 1
            else:
                # 2n+1 backslashes and a quote: n backslashes and a literal quote.
                del current[len(current) - backslashes // 2 - 1:]
                current.append('"')
            index += 1
            backslashes = 0
            while index < length and line[index] == '"':
                quotes += 1
                if quotes == 3:
                    current.append('"')
                    quotes = 0
                index += 1
            if quotes == 2:
                quotes = 0
        else:
            current.append(char)
            backslashes = 0
            index += 1
    if started:
        args.append("".join(current))
    return args


def split_utf16_bytes(data: bytes) -> list[str]:
    """Split a UTF-16LE command line into its arguments.

    A trailing odd byte is dropped and the text ends at the first UTF-16 NUL.
    The first argument is the program name, taken verbatim; the others follow
    the Windows rules for quotes and backslashes. Empty input yields an empty
    list.
    """
    raw = bytes(data)
    if len(raw) & 1:
        raw = raw[:-1]
    if not raw:
        return []
    return _split_command_line(_decode_until_nul(raw))