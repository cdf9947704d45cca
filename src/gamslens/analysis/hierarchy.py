"""Open-block stack walker shared by the outline and folding projections.

The walker owns all nesting decisions: which block a line belongs to, when a
section or declaration ends, and how block comments shield their contents.
Projections only observe blocks opening and closing through a visitor.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from gamslens.analysis.cancellation import CancellationToken, resolve_cancellation
from gamslens.analysis.items import BodySegment
from gamslens.analysis.keywords import STATEMENT_TERMINATOR, is_full_line_comment
from gamslens.analysis.tokens import (
    BlockCommentEnd,
    BlockCommentStart,
    DeclarationToken,
    NormalToken,
    SectionToken,
    Token,
)


class BlockKind(StrEnum):
    COMMENT = "commentBlock"
    SECTION = "section"
    DECLARATION = "declaration"


@dataclass
class OpenBlock:
    kind: BlockKind
    start_line: int
    token: Token
    level: int = 0
    end_line: int = -1
    body: list[BodySegment] = field(default_factory=list)
    node: object = None

    def __post_init__(self) -> None:
        if self.end_line < self.start_line:
            self.end_line = self.start_line


class BlockVisitor(Protocol):
    def open_block(self, block: OpenBlock, parent: OpenBlock | None) -> None: ...

    def close_block(self, block: OpenBlock, end_line: int) -> None: ...


def _body_segment(token: Token, offset: int) -> BodySegment:
    text = token.processed[offset:]
    stripped = text.lstrip()
    return BodySegment(
        line=token.line,
        column=token.indent + offset + (len(text) - len(stripped)),
        text=stripped,
        truncated=len(token.processed) < len(token.raw.strip()),
    )


def _terminates(segment: BodySegment) -> bool:
    return segment.text.rstrip().endswith(STATEMENT_TERMINATOR)


class _Walk:
    def __init__(self, visitor: BlockVisitor) -> None:
        self.visitor = visitor
        self.stack: list[OpenBlock] = []

    def top(self) -> OpenBlock | None:
        return self.stack[-1] if self.stack else None

    def enclosing_section(self) -> OpenBlock | None:
        for block in reversed(self.stack):
            if block.kind is BlockKind.SECTION:
                return block
        return None

    def push(self, block: OpenBlock, parent: OpenBlock | None) -> None:
        self.stack.append(block)
        self.visitor.open_block(block, parent)

    def pop(self, end_line: int) -> OpenBlock:
        block = self.stack.pop()
        block.end_line = max(block.start_line, end_line)
        self.visitor.close_block(block, block.end_line)
        return block

    def comment_start(self, token: BlockCommentStart) -> None:
        self.push(OpenBlock(BlockKind.COMMENT, token.line, token), self.top())

    def comment_end(self, token: BlockCommentEnd) -> None:
        # An unmatched marker closes every open block.
        while self.stack:
            if self.stack[-1].kind is BlockKind.COMMENT:
                self.pop(token.line)
                return
            self.pop(token.line - 1)

    def section(self, token: SectionToken) -> None:
        while self.stack:
            top = self.stack[-1]
            if top.kind is BlockKind.DECLARATION or (
                top.kind is BlockKind.SECTION and top.level >= token.level
            ):
                self.pop(token.line - 1)
                continue
            break
        block = OpenBlock(BlockKind.SECTION, token.line, token, level=token.level)
        self.push(block, self.enclosing_section())

    def declaration(self, token: DeclarationToken) -> None:
        top = self.top()
        if top is not None and top.kind is BlockKind.DECLARATION:
            self.pop(token.line - 1)
        block = OpenBlock(BlockKind.DECLARATION, token.line, token)
        self.push(block, self.enclosing_section())
        segment = _body_segment(token, token.body_offset)
        block.body.append(segment)
        if _terminates(segment):
            self.pop(token.line)

    def normal(self, token: NormalToken) -> None:
        top = self.top()
        if top is None or top.kind is not BlockKind.DECLARATION:
            return
        top.end_line = token.line
        if not token.processed or is_full_line_comment(token.processed):
            return
        segment = _body_segment(token, 0)
        top.body.append(segment)
        if _terminates(segment):
            self.pop(token.line)

    def finish(self, last_line: int) -> None:
        while self.stack:
            self.pop(last_line)


def walk_blocks(
    tokens: Sequence[Token],
    visitor: BlockVisitor,
    *,
    cancel: CancellationToken | None = None,
    line_count: int | None = None,
) -> bool:
    """Feed ``tokens`` through the open-block stack, reporting to ``visitor``.

    Returns False as soon as ``cancel`` reports cancellation; the visitor's
    state is then incomplete and should be discarded.
    """
    cancel = resolve_cancellation(cancel)
    walk = _Walk(visitor)
    for token in tokens:
        if cancel.is_cancelled():
            return False
        if isinstance(token, BlockCommentStart):
            walk.comment_start(token)
            continue
        if isinstance(token, BlockCommentEnd):
            walk.comment_end(token)
            continue
        top = walk.top()
        if top is not None and top.kind is BlockKind.COMMENT:
            continue
        if isinstance(token, SectionToken):
            walk.section(token)
        elif isinstance(token, DeclarationToken):
            walk.declaration(token)
        else:
            walk.normal(token)
    if line_count is None:
        line_count = tokens[-1].line + 1 if tokens else 0
    walk.finish(line_count - 1)
    return True
