"""Per-line token model shared by the cache and the block builders.

A token describes exactly one source line and depends on nothing but that
line's text, so it can be cached, reused and relabeled to another line index
independently of its neighbours.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import ClassVar, TypeAlias

from gamslens.analysis.keywords import DeclarationCategory
from gamslens.json_types import JSONObject


class TokenKind(StrEnum):
    BLOCK_COMMENT_START = "blockCommentStart"
    BLOCK_COMMENT_END = "blockCommentEnd"
    SECTION = "section"
    DECLARATION = "declaration"
    NORMAL = "normal"


@dataclass(frozen=True)
class _LineToken:
    kind: ClassVar[TokenKind]

    line: int
    raw: str
    processed: str
    normalized: str

    @property
    def indent(self) -> int:
        """Column in ``raw`` where ``processed`` begins."""
        return len(self.raw) - len(self.raw.lstrip())

    def relabel(self, line: int):
        if line == self.line:
            return self
        return replace(self, line=line)

    def as_payload(self) -> JSONObject:
        return {
            "kind": self.kind.value,
            "line": self.line,
            "raw": self.raw,
            "processed": self.processed,
        }


@dataclass(frozen=True)
class BlockCommentStart(_LineToken):
    kind: ClassVar[TokenKind] = TokenKind.BLOCK_COMMENT_START


@dataclass(frozen=True)
class BlockCommentEnd(_LineToken):
    kind: ClassVar[TokenKind] = TokenKind.BLOCK_COMMENT_END


@dataclass(frozen=True)
class SectionToken(_LineToken):
    kind: ClassVar[TokenKind] = TokenKind.SECTION

    level: int = 1
    title: str = ""

    def as_payload(self) -> JSONObject:
        payload = super().as_payload()
        payload["level"] = self.level
        payload["title"] = self.title
        return payload


@dataclass(frozen=True)
class DeclarationToken(_LineToken):
    kind: ClassVar[TokenKind] = TokenKind.DECLARATION

    full: str = ""
    base_keyword: DeclarationCategory = DeclarationCategory.SET
    keyword_index: int = 0
    keyword_length: int = 0

    @property
    def keyword_column(self) -> int:
        return self.indent + self.keyword_index

    @property
    def body_offset(self) -> int:
        """Offset in ``processed`` of the text following the keyword."""
        return self.keyword_index + self.keyword_length

    def as_payload(self) -> JSONObject:
        payload = super().as_payload()
        payload["full"] = self.full
        payload["base_keyword"] = self.base_keyword.value
        payload["keyword_index"] = self.keyword_index
        payload["keyword_length"] = self.keyword_length
        return payload


@dataclass(frozen=True)
class NormalToken(_LineToken):
    kind: ClassVar[TokenKind] = TokenKind.NORMAL


Token: TypeAlias = (
    BlockCommentStart | BlockCommentEnd | SectionToken | DeclarationToken | NormalToken
)
