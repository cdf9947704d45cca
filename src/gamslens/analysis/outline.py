from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from gamslens.analysis.cancellation import CancellationToken
from gamslens.analysis.hierarchy import BlockKind, OpenBlock, walk_blocks
from gamslens.analysis.items import extract_items
from gamslens.analysis.keywords import EMPTY_SECTION_TITLE, is_table_keyword
from gamslens.analysis.symbol_kinds import SECTION_KIND, PresentationKind, presentation_kind
from gamslens.analysis.tokens import DeclarationToken, SectionToken, Token
from gamslens.invariants import never
from gamslens.json_types import JSONObject


@dataclass(frozen=True)
class SourceRange:
    start_line: int
    start_character: int
    end_line: int
    end_character: int

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> "SourceRange":
        return cls(line, start, line, max(start, end))

    def contains(self, other: "SourceRange") -> bool:
        return (self.start_line, self.start_character) <= (
            other.start_line,
            other.start_character,
        ) and (other.end_line, other.end_character) <= (self.end_line, self.end_character)

    def as_payload(self) -> JSONObject:
        return {
            "start": {"line": self.start_line, "character": self.start_character},
            "end": {"line": self.end_line, "character": self.end_character},
        }


@dataclass
class OutlineNode:
    name: str
    kind: PresentationKind
    range: SourceRange
    selection_range: SourceRange
    detail: str = ""
    level: int | None = None
    children: list["OutlineNode"] = field(default_factory=list)

    def iter_nodes(self) -> Iterator["OutlineNode"]:
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def as_payload(self) -> JSONObject:
        payload: JSONObject = {
            "name": self.name,
            "kind": self.kind.value,
            "detail": self.detail,
            "range": self.range.as_payload(),
            "selection_range": self.selection_range.as_payload(),
            "children": [child.as_payload() for child in self.children],
        }
        if self.level is not None:
            payload["level"] = self.level
        return payload


class OutlineVisitor:
    """Builds the outline forest while the walker opens and closes blocks."""

    def __init__(self, raw_lines: dict[int, str], *, extract_items: bool = True) -> None:
        self.raw_lines = raw_lines
        self.extract_items = extract_items
        self.roots: list[OutlineNode] = []

    def _line_length(self, line: int) -> int:
        return len(self.raw_lines.get(line, ""))

    def _attach(self, node: OutlineNode, parent: OpenBlock | None) -> None:
        if parent is not None and isinstance(parent.node, OutlineNode):
            parent.node.children.append(node)
        else:
            self.roots.append(node)

    def open_block(self, block: OpenBlock, parent: OpenBlock | None) -> None:
        token = block.token
        if block.kind is BlockKind.COMMENT:
            return
        if block.kind is BlockKind.SECTION:
            if not isinstance(token, SectionToken):
                never("section block without section token", line=block.start_line)
            selection = _title_selection(token)
            block.node = OutlineNode(
                name=token.title,
                kind=SECTION_KIND,
                range=SourceRange.on_line(token.line, 0, len(token.raw)),
                selection_range=selection,
                level=token.level,
            )
        else:
            if not isinstance(token, DeclarationToken):
                never("declaration block without declaration token", line=block.start_line)
            column = token.keyword_column
            block.node = OutlineNode(
                name=token.full,
                kind=presentation_kind(token.base_keyword),
                range=SourceRange.on_line(token.line, 0, len(token.raw)),
                selection_range=SourceRange.on_line(
                    token.line, column, column + token.keyword_length
                ),
                detail=token.base_keyword.value,
            )
        self._attach(block.node, parent)

    def close_block(self, block: OpenBlock, end_line: int) -> None:
        node = block.node
        if not isinstance(node, OutlineNode):
            return
        node.range = SourceRange(block.start_line, 0, end_line, self._line_length(end_line))
        if block.kind is not BlockKind.DECLARATION or not self.extract_items:
            return
        token = block.token
        header_only = isinstance(token, DeclarationToken) and is_table_keyword(token.full)
        for item in extract_items(block.body, header_only=header_only):
            detail = " ".join(part for part in (item.dimensions, item.description) if part)
            selection = SourceRange.on_line(item.line, item.start_character, item.end_character)
            node.children.append(
                OutlineNode(
                    name=item.name,
                    kind=node.kind,
                    range=selection,
                    selection_range=selection,
                    detail=detail,
                )
            )


def _title_selection(token: SectionToken) -> SourceRange:
    start = token.indent
    if token.title != EMPTY_SECTION_TITLE:
        found = token.raw.find(token.title)
        if found >= 0:
            return SourceRange.on_line(token.line, found, found + len(token.title))
    return SourceRange.on_line(token.line, start, start + token.level)


def build_outline(
    tokens: Sequence[Token],
    cancel: CancellationToken | None = None,
    *,
    extract_items: bool = True,
    line_count: int | None = None,
) -> list[OutlineNode]:
    raw_lines = {token.line: token.raw for token in tokens}
    visitor = OutlineVisitor(raw_lines, extract_items=extract_items)
    if not walk_blocks(tokens, visitor, cancel=cancel, line_count=line_count):
        return []
    return visitor.roots
