"""Lexical rules for GAMS lines: comment markers, section banners, keywords."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import re

COMMENT_MARKER = "*"
BLOCK_COMMENT_START = "$ontext"
BLOCK_COMMENT_END = "$offtext"
STATEMENT_TERMINATOR = ";"
EMPTY_SECTION_TITLE = "(empty)"

VARIABLE_MODIFIERS: tuple[str, ...] = (
    "free",
    "positive",
    "nonnegative",
    "negative",
    "binary",
    "integer",
    "sos1",
    "sos2",
    "semicont",
    "semiint",
)

_SECTION_RE = re.compile(r"^\s*(\*+)\s*(.*?)\s+-{3,}")
_DECLARATION_RE = re.compile(
    r"^\s*("
    r"ACRONYM(S)?"
    r"|ALIAS(ES)?"
    r"|EQUATION(S)?"
    r"|FILE(S)?"
    r"|FUNCTION(S)?"
    r"|MODEL(S)?"
    r"|PARAMETER(S)?"
    r"|SCALAR(S)?"
    r"|(SINGLETON)?\s*SET(S)?"
    r"|TABLE(S)?"
    r"|(" + "|".join(m.upper() for m in VARIABLE_MODIFIERS) + r")?\s*VARIABLE(S)?"
    r")\b",
    re.IGNORECASE,
)

_DASH_TRANSLATION = {
    0x2010: "-",
    0x2011: "-",
    0x2012: "-",
    0x2013: "-",
    0x2014: "-",
    0x2212: "-",
    0x200B: None,
    0xFEFF: None,
}


class DeclarationCategory(StrEnum):
    SET = "SET"
    PARAMETER = "PARAMETER"
    VARIABLE = "VARIABLE"
    EQUATION = "EQUATION"
    MODEL = "MODEL"
    ACRONYM = "ACRONYM"
    FILE = "FILE"
    FUNCTION = "FUNCTION"


# Checked in order; the first fragment found in the keyword wins.
_CATEGORY_RULES: tuple[tuple[tuple[str, ...], DeclarationCategory], ...] = (
    (("VARIABLE",), DeclarationCategory.VARIABLE),
    (("EQUATION",), DeclarationCategory.EQUATION),
    (("MODEL",), DeclarationCategory.MODEL),
    (("PARAMETER", "SCALAR", "TABLE"), DeclarationCategory.PARAMETER),
    (("SET", "ALIAS"), DeclarationCategory.SET),
    (("ACRONYM",), DeclarationCategory.ACRONYM),
    (("FILE",), DeclarationCategory.FILE),
    (("FUNCTION",), DeclarationCategory.FUNCTION),
)


@dataclass(frozen=True)
class SectionHeader:
    level: int
    title: str


@dataclass(frozen=True)
class ParsedDeclaration:
    full: str
    base_keyword: DeclarationCategory


def normalize_dashes(text: str) -> str:
    """Map Unicode dash variants to '-' and drop zero-width characters."""
    if not text:
        return text
    return text.translate(_DASH_TRANSLATION)


def strip_inline_comment(trimmed: str) -> str:
    # The first marker wins even inside a quoted description string.
    if trimmed.startswith(COMMENT_MARKER):
        return trimmed
    index = trimmed.find(COMMENT_MARKER)
    if index == -1:
        return trimmed
    return trimmed[:index].strip()


def is_full_line_comment(processed: str) -> bool:
    return processed.startswith(COMMENT_MARKER)


def parse_section_header(text: str) -> SectionHeader | None:
    if not text:
        return None
    match = _SECTION_RE.match(text)
    if match is None:
        return None
    title = (match.group(2) or "").strip() or EMPTY_SECTION_TITLE
    return SectionHeader(level=len(match.group(1)), title=title)


def canonical_category(keyword: str) -> DeclarationCategory | None:
    upper = keyword.upper()
    for fragments, category in _CATEGORY_RULES:
        if any(fragment in upper for fragment in fragments):
            return category
    return None


def parse_declaration(text: str) -> ParsedDeclaration | None:
    if not text:
        return None
    match = _DECLARATION_RE.match(text)
    if match is None:
        return None
    category = canonical_category(match.group(1))
    if category is None:
        return None
    return ParsedDeclaration(full=match.group(0).strip(), base_keyword=category)


def is_table_keyword(full: str) -> bool:
    return full.strip().upper().startswith("TABLE")
