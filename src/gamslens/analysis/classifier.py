from __future__ import annotations

from collections.abc import Iterable

from gamslens.analysis.keywords import (
    BLOCK_COMMENT_END,
    BLOCK_COMMENT_START,
    normalize_dashes,
    parse_declaration,
    parse_section_header,
    strip_inline_comment,
)
from gamslens.analysis.tokens import (
    BlockCommentEnd,
    BlockCommentStart,
    DeclarationToken,
    NormalToken,
    SectionToken,
    Token,
)
from gamslens.invariants import require_line_index


def classify_line(text: str, line: int) -> Token:
    """Classify one raw line.

    The result depends only on ``text``; ``line`` is carried along as a label.
    Every string maps to exactly one token.
    """
    line = require_line_index(line)
    trimmed = text.strip()
    lower = trimmed.lower()

    if lower.startswith(BLOCK_COMMENT_START):
        return BlockCommentStart(line=line, raw=text, processed=trimmed, normalized=trimmed)
    if lower.startswith(BLOCK_COMMENT_END):
        return BlockCommentEnd(line=line, raw=text, processed=trimmed, normalized=trimmed)

    processed = strip_inline_comment(trimmed)
    normalized = normalize_dashes(processed)
    if not processed:
        return NormalToken(line=line, raw=text, processed=processed, normalized=normalized)

    section = parse_section_header(normalized)
    if section is not None:
        return SectionToken(
            line=line,
            raw=text,
            processed=processed,
            normalized=normalized,
            level=section.level,
            title=section.title,
        )

    declaration = parse_declaration(normalized)
    if declaration is not None:
        # Locate the keyword in the un-normalized text so highlight ranges
        # line up with what the editor shows.
        keyword_index = processed.lower().find(declaration.full.lower())
        return DeclarationToken(
            line=line,
            raw=text,
            processed=processed,
            normalized=normalized,
            full=declaration.full,
            base_keyword=declaration.base_keyword,
            keyword_index=max(keyword_index, 0),
            keyword_length=len(declaration.full.strip()),
        )

    return NormalToken(line=line, raw=text, processed=processed, normalized=normalized)


def classify_lines(lines: Iterable[str], start: int = 0) -> list[Token]:
    return [classify_line(text, index) for index, text in enumerate(lines, start)]
