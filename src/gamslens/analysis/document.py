from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol
import re

from gamslens.invariants import never

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class LineDocument(Protocol):
    """Line-addressable view of an editor document."""

    @property
    def uri(self) -> str: ...

    @property
    def version(self) -> int: ...

    @property
    def line_count(self) -> int: ...

    def line_at(self, index: int) -> str: ...


def split_lines(text: str) -> list[str]:
    # A trailing newline opens one more (empty) line, as editors count them.
    return _LINE_BREAK_RE.split(text)


@dataclass(frozen=True)
class SourceDocument:
    uri: str
    lines: tuple[str, ...]
    version: int = 0

    @classmethod
    def from_text(cls, uri: str, text: str, version: int | None = None) -> "SourceDocument":
        return cls(uri=uri, lines=tuple(split_lines(text)), version=int(version or 0))

    @classmethod
    def from_lines(
        cls, uri: str, lines: Sequence[str], version: int | None = None
    ) -> "SourceDocument":
        return cls(uri=uri, lines=tuple(lines), version=int(version or 0))

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_at(self, index: int) -> str:
        if index < 0 or index >= len(self.lines):
            never("line index out of range", index=index, line_count=len(self.lines))
        return self.lines[index]


@dataclass(frozen=True)
class LineEdit:
    """One replacement of the old lines ``[start_line, end_line]``.

    ``text`` is the replacement text; it occupies ``text.count("\\n") + 1``
    lines starting at ``start_line`` once applied. A whole-document edit has
    no range and forces a full reclassification.
    """

    start_line: int
    end_line: int
    text: str
    whole_document: bool = False

    @classmethod
    def replace_all(cls, text: str) -> "LineEdit":
        return cls(start_line=0, end_line=0, text=text, whole_document=True)

    @property
    def new_line_count(self) -> int:
        return len(split_lines(self.text))


def apply_edits(lines: Sequence[str], edits: Sequence["TextChange"]) -> list[str]:
    """Apply character-precise changes in order, as an editor would."""
    current = list(lines)
    for change in edits:
        if change.whole_document:
            current = split_lines(change.text)
            continue
        head = current[change.start_line][: change.start_character]
        tail = current[change.end_line][change.end_character :]
        replacement = split_lines(head + change.text + tail)
        current[change.start_line : change.end_line + 1] = replacement
    return current


@dataclass(frozen=True)
class TextChange:
    """Character-precise change as delivered by an LSP ``didChange``."""

    start_line: int
    start_character: int
    end_line: int
    end_character: int
    text: str
    whole_document: bool = False

    def as_line_edit(self) -> LineEdit:
        if self.whole_document:
            return LineEdit.replace_all(self.text)
        return LineEdit(start_line=self.start_line, end_line=self.end_line, text=self.text)
