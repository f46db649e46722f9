import pytest

from sigar.cmdline import split_utf16_bytes, unicode_string_buffer

HELLO = bytes([ord("H"), 0, ord("E"), 0, ord("L"), 0, ord("L"), 0, ord("O"), 0, 0, 0])


def utf16(text):
    return text.encode("utf-16-le")


@pytest.mark.parametrize("size", range(len(HELLO), -1, -1))
def test_unicode_string_buffer_terminator(size):
    read = unicode_string_buffer(HELLO, size)
    assert len(read) >= size
    assert read[:size] == HELLO[:size]
    assert len(read) % 2 == 0
    assert len(read) >= 2
    assert read[-1] == 0
    assert read[-2] == 0


def test_unicode_string_buffer_odd_size_gets_three_nuls():
    assert unicode_string_buffer(b"abc", 3) == b"abc\x00\x00\x00"


def test_unicode_string_buffer_even_size_gets_two_nuls():
    assert unicode_string_buffer(b"abcdXX", 4) == b"abcd\x00\x00"


def test_unicode_string_buffer_short_read():
    with pytest.raises(ValueError, match="short read"):
        unicode_string_buffer(b"ab", 5)


def test_unicode_string_buffer_size_out_of_range():
    with pytest.raises(ValueError):
        unicode_string_buffer(b"", -1)


def test_split_empty_bytes():
    assert split_utf16_bytes(b"") == []


def test_split_not_terminated():
    assert split_utf16_bytes(utf16("Hello World")) == ["Hello", "World"]


def test_split_odd_size_drops_last_byte():
    assert split_utf16_bytes(utf16("BAD")[:5]) == ["BA"]


def test_split_stops_at_terminator():
    data = utf16("prog one") + b"\x00\x00" + utf16("ignored")
    assert split_utf16_bytes(data) == ["prog", "one"]


def test_split_single_character_command():
    assert split_utf16_bytes(utf16("H")) == ["H"]


def test_split_quoted_program_name_keeps_backslashes():
    assert split_utf16_bytes(utf16('"C:\\Program Files\\app.exe" -v')) == [
        "C:\\Program Files\\app.exe",
        "-v",
    ]


@pytest.mark.parametrize(
    "line, expected",
    [
        ('prog "abc" d e', ["prog", "abc", "d", "e"]),
        ('prog a\\\\\\b d"e f"g h', ["prog", "a\\\\\\b", "de fg", "h"]),
        ('prog a\\\\\\"b c d', ["prog", 'a\\"b', "c", "d"]),
        ('prog a\\\\\\\\"b c" d e', ["prog", "a\\\\b c", "d", "e"]),
    ],
)
def test_split_quote_and_backslash_rules(line, expected):
    assert split_utf16_bytes(utf16(line)) == expected


def test_split_empty_quoted_argument():
    assert split_utf16_bytes(utf16('prog "" x')) == ["prog", "", "x"]


def test_split_collapses_whitespace_and_ignores_trailing():
    assert split_utf16_bytes(utf16("prog  \t a   b  ")) == ["prog", "a", "b"]


def test_split_non_ascii():
    assert split_utf16_bytes(utf16("prog \u00e9t\u00e9")) == ["prog", "\u00e9t\u00e9"]


def test_buffer_round_trip_through_split():
    text = utf16("tool --flag value")
    buffer = unicode_string_buffer(text, len(text))
    assert split_utf16_bytes(buffer) == ["tool", "--flag", "value"]