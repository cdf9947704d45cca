from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from gamslens.analysis.cancellation import CancellationToken
from gamslens.analysis.hierarchy import BlockKind, OpenBlock, walk_blocks
from gamslens.analysis.tokens import Token
from gamslens.json_types import JSONObject


class FoldKind(StrEnum):
    REGION = "region"
    COMMENT = "comment"


@dataclass(frozen=True)
class FoldingRegion:
    start_line: int
    end_line: int
    kind: FoldKind

    def as_payload(self) -> JSONObject:
        return {
            "start_line": self.start_line,
            "end_line": self.end_line,
            "kind": self.kind.value,
        }


class FoldingVisitor:
    def __init__(self) -> None:
        self.regions: list[FoldingRegion] = []

    def open_block(self, block: OpenBlock, parent: OpenBlock | None) -> None:
        return

    def close_block(self, block: OpenBlock, end_line: int) -> None:
        # A single line has nothing to fold.
        if end_line <= block.start_line:
            return
        kind = FoldKind.COMMENT if block.kind is BlockKind.COMMENT else FoldKind.REGION
        self.regions.append(FoldingRegion(block.start_line, end_line, kind))


def build_folding_ranges(
    tokens: Sequence[Token],
    cancel: CancellationToken | None = None,
    *,
    line_count: int | None = None,
) -> list[FoldingRegion]:
    visitor = FoldingVisitor()
    if not walk_blocks(tokens, visitor, cancel=cancel, line_count=line_count):
        return []
    return sorted(visitor.regions, key=lambda region: (region.start_line, -region.end_line))
