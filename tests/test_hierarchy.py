from __future__ import annotations

import random

from gamslens.analysis.classifier import classify_lines
from gamslens.analysis.hierarchy import BlockKind, OpenBlock, walk_blocks


class _Recorder:
    def __init__(self) -> None:
        self.opened: list[tuple[BlockKind, int, int | None]] = []
        self.closed: list[tuple[BlockKind, int, int]] = []

    def open_block(self, block: OpenBlock, parent: OpenBlock | None) -> None:
        self.opened.append((block.kind, block.start_line, parent.start_line if parent else None))

    def close_block(self, block: OpenBlock, end_line: int) -> None:
        self.closed.append((block.kind, block.start_line, end_line))


def _walk(lines: list[str]) -> _Recorder:
    recorder = _Recorder()
    assert walk_blocks(classify_lines(lines), recorder, line_count=len(lines))
    return recorder


def test_declaration_parent_is_nearest_section() -> None:
    recorder = _walk(["* A ---", "** B ---", "Set i;", "$ontext", "$offtext", "Set j;"])
    assert recorder.opened == [
        (BlockKind.SECTION, 0, None),
        (BlockKind.SECTION, 1, 0),
        (BlockKind.DECLARATION, 2, 1),
        (BlockKind.COMMENT, 3, 1),
        (BlockKind.DECLARATION, 5, 1),
    ]


def test_section_does_not_pop_shallower_sections() -> None:
    recorder = _walk(["* A ---", "** B ---", "** C ---", "* D ---"])
    assert recorder.closed == [
        (BlockKind.SECTION, 1, 1),
        (BlockKind.SECTION, 2, 2),
        (BlockKind.SECTION, 0, 2),
        (BlockKind.SECTION, 3, 3),
    ]


def test_block_comment_leaves_enclosing_declaration_open() -> None:
    recorder = _walk(["Set i", "$ontext", "Set j;", "$offtext", "  k;"])
    assert recorder.closed == [
        (BlockKind.COMMENT, 1, 3),
        (BlockKind.DECLARATION, 0, 4),
    ]


def test_unmatched_block_comment_end_pops_whole_stack() -> None:
    recorder = _walk(["* A ---", "** B ---", "Set i", "  k", "$offtext", "x = 1;"])
    assert recorder.closed == [
        (BlockKind.DECLARATION, 2, 3),
        (BlockKind.SECTION, 1, 3),
        (BlockKind.SECTION, 0, 3),
    ]


def test_unmatched_block_comment_end_closes_at_own_start() -> None:
    recorder = _walk(["* A ---", "$offtext"])
    assert recorder.closed == [(BlockKind.SECTION, 0, 0)]


def test_orphan_terminator_is_absorbed() -> None:
    recorder = _walk([";", "* A ---", ";", "x = 1;"])
    assert recorder.opened == [(BlockKind.SECTION, 1, None)]
    assert recorder.closed == [(BlockKind.SECTION, 1, 3)]


def test_full_line_comment_extends_but_does_not_terminate() -> None:
    recorder = _walk(["Parameter p", "* note;", "  q;", "x = 1;"])
    assert recorder.closed == [(BlockKind.DECLARATION, 0, 2)]


def test_empty_stream() -> None:
    recorder = _Recorder()
    assert walk_blocks([], recorder)
    assert recorder.opened == []
    assert recorder.closed == []


_FRAGMENTS = [
    "* Top ---",
    "** Mid ---",
    "*** Low ---",
    "Sets",
    "  i / a, b /",
    "  j;",
    "Parameter p(i) 'price';",
    "Variables x",
    "$ontext",
    "$offtext",
    "x.lo = 0;",
    "",
    "* plain comment",
    ";",
]


def test_random_documents_close_every_block_in_order() -> None:
    rng = random.Random(7)
    for _ in range(200):
        lines = [rng.choice(_FRAGMENTS) for _ in range(rng.randint(1, 25))]
        recorder = _walk(lines)
        assert len(recorder.closed) == len(recorder.opened)
        for kind, start, end in recorder.closed:
            assert start <= end <= len(lines) - 1
        sections = [(start, end) for kind, start, end in recorder.closed if kind is BlockKind.SECTION]
        for start, end in sections:
            for other_start, other_end in sections:
                overlapping = start < other_start <= end
                if overlapping:
                    assert other_end <= end
