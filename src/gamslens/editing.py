"""Text edits for the section-banner and line-comment commands."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from gamslens.analysis.keywords import COMMENT_MARKER
from gamslens.config import DEFAULT_SECTION_WIDTH
from gamslens.invariants import never, require_line_index
from gamslens.json_types import JSONObject

MIN_BANNER_DASHES = 3


@dataclass(frozen=True)
class TextEdit:
    start_line: int
    start_character: int
    end_line: int
    end_character: int
    new_text: str

    @classmethod
    def insert(cls, line: int, character: int, text: str) -> "TextEdit":
        return cls(line, character, line, character, text)

    @classmethod
    def delete(cls, line: int, start: int, end: int) -> "TextEdit":
        return cls(line, start, line, end, "")

    def as_payload(self) -> JSONObject:
        return {
            "start": {"line": self.start_line, "character": self.start_character},
            "end": {"line": self.end_line, "character": self.end_character},
            "new_text": self.new_text,
        }


def section_banner(name: str, *, level: int = 1, width: int = DEFAULT_SECTION_WIDTH) -> str:
    if level < 1:
        never("invalid section level", level=level)
    dashes = max(width - len(name), MIN_BANNER_DASHES)
    return f"{COMMENT_MARKER * level} {name} {'-' * dashes}"


def insert_section_edit(
    line: int,
    character: int,
    name: str,
    *,
    level: int = 1,
    width: int = DEFAULT_SECTION_WIDTH,
) -> TextEdit:
    require_line_index(line)
    banner = section_banner(name, level=level, width=width)
    return TextEdit.insert(line, max(character, 0), f"\n{banner}\n")


def _is_blank(text: str) -> bool:
    return not text.strip()


def toggle_line_comment(
    lines: Sequence[str],
    start_line: int,
    end_line: int,
    *,
    insert_space: bool = True,
    ignore_empty_lines: bool = True,
) -> list[TextEdit]:
    """Comment or uncomment ``lines[start_line:end_line + 1]`` as one group.

    The group is commented when any non-blank line lacks the marker or when
    every line is blank; otherwise the marker (and the space after it) is
    removed from column 0.
    """
    require_line_index(start_line, name="start_line")
    if end_line < start_line:
        start_line, end_line = end_line, start_line
    end_line = min(end_line, len(lines) - 1)
    selected = range(start_line, end_line + 1)
    marker = COMMENT_MARKER + (" " if insert_space else "")

    non_blank = [index for index in selected if not _is_blank(lines[index])]
    commenting = not non_blank or any(
        not lines[index].strip().startswith(COMMENT_MARKER) for index in non_blank
    )

    edits: list[TextEdit] = []
    for index in selected:
        text = lines[index]
        if ignore_empty_lines and _is_blank(text):
            continue
        if commenting:
            edits.append(TextEdit.insert(index, 0, marker))
        elif text.startswith(marker):
            edits.append(TextEdit.delete(index, 0, len(marker)))
        elif text.startswith(COMMENT_MARKER):
            edits.append(TextEdit.delete(index, 0, len(COMMENT_MARKER)))
    return edits

