# toml_parser.py
# Hand-rolled scanner and primitive parsers for a TOML-like config format
#
# =============================================================================
#  PARSER IMPLEMENTATION: RECURSIVE DESCENT OVER RAW BYTES
# =============================================================================
#
# Three layers, leaves first:
# 1. Scanner - a byte cursor with peek / match / take-while / take-until.
# 2. Lexical primitives - bare keys, escape decoding, delimited slices.
# 3. Constructs - table headers, comments and quoted strings.
#
# Every parser is a plain function taking a Scanner. A parser either returns
# its value with the scanner moved past what it consumed, or raises
# ParseError with the scanner back where it started. That contract lets
# first_of() try alternatives in order without saving positions by hand.
#
# Offsets are byte offsets into the original buffer; line_col() turns them
# into 1-based line/column pairs for diagnostics.
#
# Document assembly (dotted key paths, duplicate tables, typed values) lives
# above this layer and is not handled here.
# =============================================================================

import argparse
import sys
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
BARE_KEY_CHARS = frozenset(
    b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"
)
HORIZONTAL_SPACE = frozenset(b" \t")
LINE_ENDINGS = b"\r\n"

ESCAPE_INTRODUCER = ord("\\")
ESCAPES = {
    ord("\\"): b"\\",
    ord('"'): b'"',
    ord("b"): b"\x08",
    ord("t"): b"\t",
    ord("n"): b"\n",
    ord("f"): b"\x0c",
    ord("r"): b"\r",
}
UNICODE_ESCAPES = frozenset(b"uU")

# ---------------------------------------------------------------------------
# ERRORS
# ---------------------------------------------------------------------------
class ErrorKind(Enum):
    EMPTY_KEY = "empty key"
    UNTERMINATED_STRING = "unterminated string"
    UNTERMINATED_TABLE_HEADER = "unterminated table header"
    UNTERMINATED_SPAN = "unterminated span"
    INVALID_ESCAPE = "invalid escape"
    UNSUPPORTED_ESCAPE = "unsupported escape"
    EXPECTED_DELIMITER = "expected delimiter"
    INVALID_UTF8 = "invalid utf-8"
    UNEXPECTED_CHARACTER = "unexpected character"

    def __str__(self) -> str:
        return self.value


# Failures that happen before a parser has committed to its construct.
_UNCOMMITTED = frozenset({ErrorKind.EMPTY_KEY, ErrorKind.EXPECTED_DELIMITER})


class ParseError(SyntaxError):
    """
    Failure to parse at a byte offset.

    `offset` is the 0-based byte offset into the buffer handed to the entry
    point, `kind` says what went wrong and `byte` holds the offending byte
    for INVALID_ESCAPE and UNEXPECTED_CHARACTER.
    """

    def __init__(self, kind: ErrorKind, offset: int, detail: str = "", byte: Optional[int] = None):
        message = f"{kind} at offset {offset}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.kind = kind
        self.offset = offset
        self.detail = detail
        self.byte = byte

    def __reduce__(self):
        return (self.__class__, (self.kind, self.offset, self.detail, self.byte))

    @property
    def recoverable(self) -> bool:
        """True when nothing was committed, so an alternative may be tried."""
        return self.kind in _UNCOMMITTED

    def describe(self, data: bytes) -> str:
        line, column = line_col(data, self.offset)
        return f"{self.msg} (line {line}, column {column})"


def line_col(data: bytes, offset: int) -> Tuple[int, int]:
    """
    Map a byte offset to a 1-based (line, column) pair. Columns count bytes.

    Line breaks follow the scanner: CRLF, a lone CR and LF each end a line.
    """
    if offset < 0 or offset > len(data):
        raise ValueError(f"offset {offset} outside buffer of length {len(data)}")
    head = data[:offset]
    line = head.count(b"\n") + head.count(b"\r") - head.count(b"\r\n") + 1
    line_start = max(head.rfind(b"\n"), head.rfind(b"\r")) + 1
    return line, offset - line_start + 1

# ---------------------------------------------------------------------------
# BYTE SCANNER
# ---------------------------------------------------------------------------
class Scanner:
    """
    Forward-only cursor over an immutable byte buffer.

    Every method either consumes exactly what it reports or leaves `pos`
    alone. Nothing here looks at bytes behind the cursor.
    """
    __slots__ = ("data", "pos")

    def __init__(self, data: bytes, pos: int = 0):
        self.data = data
        self.pos = pos

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def peek(self) -> Optional[int]:
        if self.pos < len(self.data):
            return self.data[self.pos]
        return None

    def match_literal(self, literal: bytes) -> bool:
        if self.data.startswith(literal, self.pos):
            self.pos += len(literal)
            return True
        return False

    def take_while(self, predicate: Callable[[int], bool]) -> bytes:
        start = end = self.pos
        data = self.data
        while end < len(data) and predicate(data[end]):
            end += 1
        self.pos = end
        return data[start:end]

    def take_until(self, delimiter: int, stop: bytes = b"") -> bytes:
        """
        Consume up to, not including, `delimiter`.

        Raises UNTERMINATED_SPAN at the offset where the scan gave up, which
        is either end of input or the first byte found in `stop`.
        """
        start = end = self.pos
        data = self.data
        while end < len(data):
            byte = data[end]
            if byte == delimiter:
                self.pos = end
                return data[start:end]
            if byte in stop:
                break
            end += 1
        raise ParseError(ErrorKind.UNTERMINATED_SPAN, end, f"no {chr(delimiter)!r} found")

    def remaining(self) -> bytes:
        return self.data[self.pos:]


def _decode(raw: bytes, offset: int) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(ErrorKind.INVALID_UTF8, offset + exc.start) from None


def _describe_byte(byte: Optional[int]) -> str:
    return "end of input" if byte is None else repr(chr(byte))

# ---------------------------------------------------------------------------
# LEXICAL PRIMITIVES
# ---------------------------------------------------------------------------
def scan_bare_key(scanner: Scanner) -> str:
    """Maximal run of letters, digits, '_' and '-'. Case is kept as written."""
    raw = scanner.take_while(BARE_KEY_CHARS.__contains__)
    if not raw:
        byte = scanner.peek()
        raise ParseError(ErrorKind.EMPTY_KEY, scanner.pos, f"found {_describe_byte(byte)}", byte=byte)
    return raw.decode("ascii")


def scan_escaped(scanner: Scanner, delimiter: int) -> bytes:
    """
    Decode backslash escapes up to an unescaped line ending or `delimiter`.

    The stopping byte is left unconsumed. The scanner only moves once the
    whole body has decoded, so a failure leaves it untouched.
    """
    data = scanner.data
    out = bytearray()
    pos = scanner.pos
    while pos < len(data):
        byte = data[pos]
        if byte == delimiter or byte in LINE_ENDINGS:
            break
        if byte != ESCAPE_INTRODUCER:
            out.append(byte)
            pos += 1
            continue
        if pos + 1 >= len(data):
            raise ParseError(ErrorKind.UNTERMINATED_STRING, pos + 1, "input ends after escape introducer")
        code = data[pos + 1]
        if code in UNICODE_ESCAPES:
            raise ParseError(ErrorKind.UNSUPPORTED_ESCAPE, pos, f"\\{chr(code)} escapes are not supported", byte=code)
        replacement = ESCAPES.get(code)
        if replacement is None:
            raise ParseError(ErrorKind.INVALID_ESCAPE, pos, f"backslash followed by {_describe_byte(code)}", byte=code)
        out += replacement
        pos += 2
    scanner.pos = pos
    return bytes(out)


def scan_delimited(scanner: Scanner, delimiter: int, stop: bytes = b"") -> bytes:
    """Raw slice up to `delimiter`; escapes are not interpreted."""
    return scanner.take_until(delimiter, stop)


def scan_line(scanner: Scanner) -> bytes:
    """Rest of the current line; the line ending is not consumed."""
    return scanner.take_while(lambda byte: byte not in LINE_ENDINGS)

# ---------------------------------------------------------------------------
# CONSTRUCT PARSERS
# ---------------------------------------------------------------------------
def _expect_open(scanner: Scanner, literal: bytes, construct: str) -> None:
    if not scanner.match_literal(literal):
        byte = scanner.peek()
        raise ParseError(ErrorKind.EXPECTED_DELIMITER, scanner.pos,
                         f"{construct} must start with {literal.decode()!r}, found {_describe_byte(byte)}",
                         byte=byte)


def scan_table_header(scanner: Scanner) -> str:
    """
    `[label]` followed by optional spaces or tabs.

    The label is returned verbatim. A header may not span lines.
    """
    start = scanner.pos
    _expect_open(scanner, b"[", "table header")
    body_start = scanner.pos
    try:
        raw = scan_delimited(scanner, ord("]"), stop=LINE_ENDINGS)
    except ParseError as exc:
        scanner.pos = start
        raise ParseError(ErrorKind.UNTERMINATED_TABLE_HEADER, exc.offset,
                         f"missing ']' for header opened at offset {start}") from None
    try:
        label = _decode(raw, body_start)
    except ParseError:
        scanner.pos = start
        raise
    scanner.match_literal(b"]")
    scanner.take_while(HORIZONTAL_SPACE.__contains__)
    return label


def scan_comment(scanner: Scanner) -> str:
    """`#` and the rest of the line, verbatim."""
    start = scanner.pos
    _expect_open(scanner, b"#", "comment")
    body_start = scanner.pos
    raw = scan_line(scanner)
    try:
        return _decode(raw, body_start)
    except ParseError:
        scanner.pos = start
        raise


def scan_quoted_string(scanner: Scanner) -> str:
    """Basic string: `"`, escaped body, `"`. Decoder errors pass through as-is."""
    start = scanner.pos
    _expect_open(scanner, b'"', "string")
    body_start = scanner.pos
    try:
        raw = scan_escaped(scanner, ord('"'))
        if not scanner.match_literal(b'"'):
            raise ParseError(ErrorKind.UNTERMINATED_STRING, scanner.pos,
                             f"missing closing quote for string opened at offset {start}")
        # Escapes only emit ASCII, so checking the source slice locates bad bytes exactly.
        _decode(scanner.data[body_start:scanner.pos - 1], body_start)
        return raw.decode("utf-8")
    except ParseError:
        scanner.pos = start
        raise

# ---------------------------------------------------------------------------
# COMBINATORS
# ---------------------------------------------------------------------------
Parser = Callable[[Scanner], T]


def run(parser: Parser, data: Union[bytes, str]) -> Tuple[bytes, T]:
    """Apply `parser` to a fresh scanner; return (remaining, value)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    scanner = Scanner(data)
    value = parser(scanner)
    return scanner.remaining(), value


def first_of(*parsers: Parser) -> Parser:
    """
    Try each parser in turn at the same position.

    Only uncommitted failures fall through to the next alternative; a parser
    that got past its opening delimiter owns the error it raises.
    """
    def parse(scanner: Scanner):
        for parser in parsers:
            try:
                return parser(scanner)
            except ParseError as exc:
                if not exc.recoverable:
                    raise
        byte = scanner.peek()
        raise ParseError(ErrorKind.UNEXPECTED_CHARACTER, scanner.pos, _describe_byte(byte), byte=byte)
    return parse


def map_value(parser: Parser, fn: Callable[[T], U]) -> Parser:
    def parse(scanner: Scanner) -> U:
        return fn(parser(scanner))
    return parse

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def parse_bare_key(data: Union[bytes, str]) -> Tuple[bytes, str]:
    return run(scan_bare_key, data)


def parse_quoted_string(data: Union[bytes, str]) -> Tuple[bytes, str]:
    return run(scan_quoted_string, data)


def parse_table_header(data: Union[bytes, str]) -> Tuple[bytes, str]:
    return run(scan_table_header, data)


def parse_comment(data: Union[bytes, str]) -> Tuple[bytes, str]:
    return run(scan_comment, data)

# ---------------------------------------------------------------------------
# TOKEN STREAM
# ---------------------------------------------------------------------------
class Token(Tuple[str, str, int]):
    """Immutable token record: (kind, value, absolute_offset)."""
    pass


def _punct(literal: bytes) -> Parser:
    def parse(scanner: Scanner) -> str:
        _expect_open(scanner, literal, "punctuation")
        return literal.decode()
    return parse


_TOKEN_PARSERS = (
    ("TABLE_HEADER", scan_table_header),
    ("COMMENT", scan_comment),
    ("STRING", scan_quoted_string),
    ("BARE_KEY", scan_bare_key),
    ("EQUALS", _punct(b"=")),
    ("DOT", _punct(b".")),
)


def _tagged(kind: str, parser: Parser) -> Parser:
    return map_value(parser, lambda value: (kind, value))


_any_token = first_of(*(_tagged(kind, parser) for kind, parser in _TOKEN_PARSERS))


def lex(text: Union[bytes, str]) -> Iterator[Token]:
    """
    Flat token stream over a whole document.

    Whitespace and line endings are skipped. Numbers and booleans surface
    as BARE_KEY tokens; giving them types is the assembler's job.
    """
    if isinstance(text, str):
        text = text.encode("utf-8")
    scanner = Scanner(text)
    skippable = HORIZONTAL_SPACE | frozenset(LINE_ENDINGS)
    while True:
        scanner.take_while(skippable.__contains__)
        if scanner.at_end:
            return
        start = scanner.pos
        kind, value = _any_token(scanner)
        yield Token((kind, value, start))

# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _cli(argv: List[str]):
    """
    Command-line checker: 0 when the whole file lexes, 1 on ParseError.
    """
    ap = argparse.ArgumentParser(description="TOML-like config token checker")
    ap.add_argument("file", help="config file to verify")
    ap.add_argument("--debug", action="store_true", help="dump token stream and exit")
    args = ap.parse_args(argv)

    with open(args.file, "rb") as fh:
        data = fh.read()

    try:
        if args.debug:
            for tok in lex(data):
                print(tok)
            return 0
        for _ in lex(data):
            pass
        print("OK")
        return 0
    except ParseError as exc:
        print(f"ParseError: {exc.describe(data)}", file=sys.stderr)
        return 1

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(_cli(sys.argv[1:]))
