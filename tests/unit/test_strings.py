import pytest

import toml_parser as tp


@pytest.mark.parametrize("source, expected", [
    (rb'"\\"', 0x5C),
    (rb'"\""', 0x22),
    (rb'"\b"', 0x08),
    (rb'"\t"', 0x09),
    (rb'"\n"', 0x0A),
    (rb'"\f"', 0x0C),
    (rb'"\r"', 0x0D),
])
def test_each_escape_yields_one_standard_byte(source, expected):
    rest, value = tp.parse_quoted_string(source)
    assert rest == b""
    assert len(value) == 1
    assert ord(value) == expected


def test_backspace_and_form_feed_are_single_bytes():
    assert tp.parse_quoted_string(rb'"ab\bde"') == (b"", "ab\x08de")
    assert tp.parse_quoted_string(rb'"ab\fde"') == (b"", "ab\x0cde")


@pytest.mark.parametrize("text", ["abcde", "with spaces", "ünïcödé", ""])
def test_plain_content_is_returned_unchanged(text):
    data = ('"' + text + '"').encode("utf-8")
    assert tp.parse_quoted_string(data) == (b"", text)


def test_remainder_after_closing_quote_is_untouched():
    assert tp.parse_quoted_string(b'"a" = 1') == (b" = 1", "a")


def test_accepts_str_input():
    assert tp.parse_quoted_string('"x"\n') == (b"\n", "x")


@pytest.mark.parametrize("source", [rb'"\u0041"', rb'"\U00000041"'])
def test_unicode_escapes_are_rejected_not_passed_through(source):
    with pytest.raises(tp.ParseError) as ei:
        tp.parse_quoted_string(source)
    assert ei.value.kind is tp.ErrorKind.UNSUPPORTED_ESCAPE
    assert ei.value.offset == 1


def test_invalid_escape_reports_byte_and_offset():
    with pytest.raises(tp.ParseError) as ei:
        tp.parse_quoted_string(rb'"ab\qde"')
    assert ei.value.kind is tp.ErrorKind.INVALID_ESCAPE
    assert ei.value.byte == ord("q")
    assert ei.value.offset == 3
    assert "offset 3" in str(ei.value)


def test_missing_closing_quote():
    with pytest.raises(tp.ParseError) as ei:
        tp.parse_quoted_string(b'"abc')
    assert ei.value.kind is tp.ErrorKind.UNTERMINATED_STRING
    assert ei.value.offset == 4


def test_line_ending_before_closing_quote():
    with pytest.raises(tp.ParseError) as ei:
        tp.parse_quoted_string(b'"abc\n"')
    assert ei.value.kind is tp.ErrorKind.UNTERMINATED_STRING
    assert ei.value.offset == 4


def test_trailing_backslash_is_unterminated():
    with pytest.raises(tp.ParseError) as ei:
        tp.parse_quoted_string(b'"abc\\')
    assert ei.value.kind is tp.ErrorKind.UNTERMINATED_STRING
    assert ei.value.offset == 5


def test_invalid_utf8_points_at_bad_byte():
    with pytest.raises(tp.ParseError) as ei:
        tp.parse_quoted_string(b'"a\xff"')
    assert ei.value.kind is tp.ErrorKind.INVALID_UTF8
    assert ei.value.offset == 2


def test_missing_opening_quote():
    with pytest.raises(tp.ParseError) as ei:
        tp.parse_quoted_string(b"abc")
    assert ei.value.kind is tp.ErrorKind.EXPECTED_DELIMITER
    assert ei.value.recoverable


def test_failure_leaves_scanner_where_it_started():
    scanner = tp.Scanner(rb'"ab\qde"')
    with pytest.raises(tp.ParseError):
        tp.scan_quoted_string(scanner)
    assert scanner.pos == 0


def test_escape_decoder_stops_before_delimiter():
    scanner = tp.Scanner(b'ab\\tc"rest')
    assert tp.scan_escaped(scanner, ord('"')) == b"ab\tc"
    assert scanner.pos == 5
    assert scanner.peek() == ord('"')


def test_escape_decoder_stops_before_line_ending():
    scanner = tp.Scanner(b"ab\r\ncd")
    assert tp.scan_escaped(scanner, ord('"')) == b"ab"
    assert scanner.remaining() == b"\r\ncd"


def test_escaped_quote_does_not_end_the_body():
    scanner = tp.Scanner(b'a\\"b"')
    assert tp.scan_escaped(scanner, ord('"')) == b'a"b'
    assert scanner.remaining() == b'"'


def test_escaped_line_ending_keeps_message_on_one_line():
    with pytest.raises(tp.ParseError) as ei:
        tp.parse_quoted_string(b'"ab\\\n"')
    assert ei.value.kind is tp.ErrorKind.INVALID_ESCAPE
    assert ei.value.byte == ord("\n")
    assert ei.value.offset == 3
    assert "\n" not in str(ei.value)
