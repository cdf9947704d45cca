"""Best-effort extraction of declared identifiers from a declaration body.

This is a heuristic, not a grammar. The body is scanned character by
character: ``/ ... /`` data lists are dropped, parentheses and quoted strings
are kept intact, and top-level commas, line breaks and ``;`` separate items.
Each item contributes its leading identifier, an optional parenthesized
dimension list and an optional quoted description. A line that inline-comment
stripping cut short closes any data list it opened.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DIMENSIONS_RE = re.compile(r"\s*(\([^)]*\))")
_DESCRIPTION_RE = re.compile(r"""\s*(?:'([^']*)'|"([^"]*)"|([^'"]*))""")


@dataclass(frozen=True)
class BodySegment:
    """Declaration text from one source line; ``column`` is its start in the raw line."""

    line: int
    column: int
    text: str
    truncated: bool = False


@dataclass(frozen=True)
class DeclaredItem:
    name: str
    line: int
    start_character: int
    end_character: int
    dimensions: str = ""
    description: str = ""


@dataclass
class _Piece:
    line: int
    column: int
    chars: list[str]

    def text(self) -> str:
        return "".join(self.chars)


def _split_pieces(segments: list[BodySegment]) -> list[_Piece]:
    pieces: list[_Piece] = []
    current: _Piece | None = None
    depth = 0
    quote = ""
    in_data = False
    done = False

    def flush() -> None:
        nonlocal current
        if current is not None and current.text().strip():
            pieces.append(current)
        current = None

    for segment in segments:
        if done:
            break
        for offset, char in enumerate(segment.text):
            if quote:
                if char == quote:
                    quote = ""
            elif in_data:
                if char == "/":
                    in_data = False
                continue
            elif char == "/":
                in_data = True
                continue
            elif char in "'\"":
                quote = char
            elif char == "(":
                depth += 1
            elif char == ")":
                depth = max(depth - 1, 0)
            elif depth == 0 and char == ",":
                flush()
                continue
            elif depth == 0 and char == ";":
                flush()
                done = True
                break
            if current is None:
                if char.isspace():
                    continue
                current = _Piece(line=segment.line, column=segment.column + offset, chars=[])
            current.chars.append(char)
        # Quotes never span lines; data lists and dimension lists may, unless
        # comment stripping cut the line short.
        quote = ""
        if segment.truncated:
            in_data = False
        if not in_data and depth == 0:
            flush()
    flush()
    return pieces


def _item_from_piece(piece: _Piece) -> DeclaredItem | None:
    text = piece.text()
    match = _IDENTIFIER_RE.match(text)
    if match is None:
        return None
    rest = text[match.end():]
    dimensions = ""
    dims_match = _DIMENSIONS_RE.match(rest)
    if dims_match is not None:
        dimensions = dims_match.group(1)
        rest = rest[dims_match.end():]
    description = ""
    desc_match = _DESCRIPTION_RE.match(rest)
    if desc_match is not None:
        description = next((group for group in desc_match.groups() if group), "").strip()
    return DeclaredItem(
        name=match.group(0),
        line=piece.line,
        start_character=piece.column + match.start(),
        end_character=piece.column + match.end(),
        dimensions=dimensions,
        description=description,
    )


def extract_items(segments: list[BodySegment], *, header_only: bool = False) -> list[DeclaredItem]:
    if header_only and segments:
        first_line = segments[0].line
        segments = [segment for segment in segments if segment.line == first_line]
    items: list[DeclaredItem] = []
    for piece in _split_pieces(segments):
        item = _item_from_piece(piece)
        if item is not None:
            items.append(item)
    return items
