"""
Line-oriented key/value ("properties") reader used for package metadata and
generation parameter sources.

Supported subset of the Java properties format:
    key=value | key: value | key value
    # or ! comment lines, blank lines
    trailing backslash continues the logical line
    escapes: \\t \\n \\r \\f \\\\ \\uXXXX (any other escaped char is literal)

Duplicate keys: the last value wins, the key keeps its first position.
"""
from __future__ import annotations

import io
from typing import IO, Dict, Iterable, List, Mapping, Union

PropertiesSource = Union[str, bytes, IO[str], IO[bytes]]

_SEPARATORS = "=:"
_WHITESPACE = " \t\f"
_SIMPLE_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class PropertiesSyntaxError(ValueError):
    def __init__(self, message: str, *, line_no: int):
        super().__init__(f"line {line_no}: {message}")
        self.line_no = line_no


def read_source_text(source: PropertiesSource, *, encoding: str = "utf-8") -> str:
    if isinstance(source, bytes):
        return source.decode(encoding)
    if isinstance(source, str):
        return source
    if hasattr(source, "read"):
        data = source.read()
        if isinstance(data, bytes):
            return data.decode(encoding)
        if isinstance(data, str):
            return data
    raise TypeError(f"unsupported properties source: {type(source).__name__}")


def _logical_lines(text: str) -> Iterable[tuple[int, str]]:
    buf: List[str] = []
    start = 0
    for i, raw in enumerate(io.StringIO(text), start=1):
        line = raw.rstrip("\r\n")
        if buf:
            line = line.lstrip(_WHITESPACE)
        else:
            start = i
            stripped = line.lstrip(_WHITESPACE)
            if not stripped or stripped[0] in "#!":
                continue
            line = stripped

        # odd number of trailing backslashes => continuation
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buf.append(line[:-1])
            continue

        buf.append(line)
        yield start, "".join(buf)
        buf = []

    if buf:
        yield start, "".join(buf)


def _unescape(s: str, *, line_no: int) -> str:
    out: List[str] = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        i += 1
        if i >= len(s):
            break
        esc = s[i]
        if esc == "u":
            hex_digits = s[i + 1:i + 5]
            if len(hex_digits) != 4:
                raise PropertiesSyntaxError(f"truncated \\u escape: {s[i - 1:i + 5]!r}", line_no=line_no)
            try:
                out.append(chr(int(hex_digits, 16)))
            except ValueError as e:
                raise PropertiesSyntaxError(f"invalid \\u escape: \\u{hex_digits}", line_no=line_no) from e
            i += 5
            continue
        out.append(_SIMPLE_ESCAPES.get(esc, esc))
        i += 1
    return "".join(out)


def _split_key_value(line: str) -> tuple[str, str]:
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _SEPARATORS or ch in _WHITESPACE:
            break
        i += 1

    key = line[:i]
    rest = line[i:].lstrip(_WHITESPACE)
    if rest[:1] and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def parse_properties(source: PropertiesSource) -> Dict[str, str]:
    text = read_source_text(source)
    out: Dict[str, str] = {}
    for line_no, line in _logical_lines(text):
        raw_key, raw_value = _split_key_value(line)
        key = _unescape(raw_key, line_no=line_no)
        if not key:
            raise PropertiesSyntaxError(f"missing key in {line!r}", line_no=line_no)
        out[key] = _unescape(raw_value, line_no=line_no)
    return out


def split_values(value: str) -> List[str]:
    """
    'a , b,c' -> ['a', 'b', 'c']

    Trailing empty values are dropped ('a, b,' -> ['a', 'b']); a value with
    no comma is returned as is, even when empty.
    """
    parts = [v.strip() for v in value.strip().split(",")]
    if len(parts) == 1:
        return parts
    while parts and not parts[-1]:
        parts.pop()
    return parts


def _escape(s: str, *, is_key: bool) -> str:
    out: List[str] = []
    for i, ch in enumerate(s):
        if ch == "\\":
            out.append("\\\\")
        elif ch in "\t\n\r\f":
            out.append("\\" + {"\t": "t", "\n": "n", "\r": "r", "\f": "f"}[ch])
        elif ch in "=:#!" or (ch == " " and (is_key or i == 0)):
            out.append("\\" + ch)
        else:
            out.append(ch)
    return "".join(out)


def dump_properties(values: Mapping[str, Union[str, Iterable[str]]]) -> str:
    lines: List[str] = []
    for k, v in values.items():
        rendered = v if isinstance(v, str) else ",".join(v)
        lines.append(f"{_escape(k, is_key=True)}={_escape(rendered, is_key=False)}")
    return "\n".join(lines) + ("\n" if lines else "")
