from __future__ import annotations

import random

import pytest

from gamslens.analysis import token_cache as token_cache_module
from gamslens.analysis.classifier import classify_lines
from gamslens.analysis.document import LineEdit, SourceDocument, TextChange, apply_edits
from gamslens.analysis.token_cache import EditRegion, TokenCache, default_cache, merge_edits

URI = "file:///model.gms"


def _document(lines: list[str], version: int) -> SourceDocument:
    return SourceDocument.from_lines(URI, lines, version=version)


def _counting_classifier(monkeypatch: pytest.MonkeyPatch) -> list[int]:
    calls: list[int] = []
    original = token_cache_module.classify_line

    def _classify(text: str, line: int):
        calls.append(line)
        return original(text, line)

    monkeypatch.setattr(token_cache_module, "classify_line", _classify)
    return calls


def test_get_tokens_classifies_once_per_version(monkeypatch: pytest.MonkeyPatch, scenario_lines) -> None:
    cache = TokenCache()
    calls = _counting_classifier(monkeypatch)
    document = _document(scenario_lines, 1)
    first = cache.get_tokens(document)
    second = cache.get_tokens(document)
    assert first == second
    assert len(calls) == len(scenario_lines)
    assert cache.last_stats.full_rebuild is True


def test_blank_line_insert_relabels_tail_without_reclassifying(
    monkeypatch: pytest.MonkeyPatch, scenario_lines
) -> None:
    cache = TokenCache()
    before = cache.get_tokens(_document(scenario_lines, 1))
    calls = _counting_classifier(monkeypatch)

    change = TextChange(1, len(scenario_lines[1]), 1, len(scenario_lines[1]), "\n")
    edited = apply_edits(scenario_lines, [change])
    after = cache.update(_document(edited, 2), [change.as_line_edit()])

    assert edited[2] == ""
    assert calls == [2]
    assert cache.last_stats.full_rebuild is False
    assert cache.last_stats.reused == 1
    assert cache.last_stats.relabeled == 3
    assert after[:2] == before[:2]
    for old, new in zip(before[2:], after[3:]):
        assert new.line == old.line + 1
        assert new.raw == old.raw
        assert new.kind is old.kind
    assert after == classify_lines(edited)


def test_update_without_entry_rebuilds(scenario_lines) -> None:
    cache = TokenCache()
    tokens = cache.update(_document(scenario_lines, 3), [LineEdit(0, 0, "x")])
    assert tokens == classify_lines(scenario_lines)
    assert cache.last_stats.full_rebuild is True
    assert cache.entry(URI).version == 3


def test_whole_document_change_rebuilds(scenario_lines) -> None:
    cache = TokenCache()
    cache.get_tokens(_document(scenario_lines, 1))
    replacement = ["Set k;", "Parameter p;"]
    tokens = cache.update(_document(replacement, 2), [LineEdit.replace_all("\n".join(replacement))])
    assert tokens == classify_lines(replacement)
    assert cache.last_stats.full_rebuild is True


def test_line_count_mismatch_rebuilds(scenario_lines) -> None:
    cache = TokenCache()
    cache.get_tokens(_document(scenario_lines, 1))
    shorter = scenario_lines[:3]
    # The edit claims one line changed in place, but two lines disappeared.
    tokens = cache.update(_document(shorter, 2), [LineEdit(0, 0, "* Header ---")])
    assert tokens == classify_lines(shorter)
    assert cache.last_stats.full_rebuild is True


def test_edit_past_cached_end_rebuilds(scenario_lines) -> None:
    cache = TokenCache()
    cache.get_tokens(_document(scenario_lines, 1))
    longer = scenario_lines + ["Set k;"]
    tokens = cache.update(_document(longer, 2), [LineEdit(5, 5, "Set k;")])
    assert tokens == classify_lines(longer)
    assert cache.last_stats.full_rebuild is True


def test_empty_batch_only_bumps_version(monkeypatch: pytest.MonkeyPatch, scenario_lines) -> None:
    cache = TokenCache()
    cache.get_tokens(_document(scenario_lines, 1))
    calls = _counting_classifier(monkeypatch)
    tokens = cache.update(_document(scenario_lines, 2), [])
    assert calls == []
    assert tokens == classify_lines(scenario_lines)
    assert cache.entry(URI).version == 2


def test_entries_are_snapshots(scenario_lines) -> None:
    cache = TokenCache()
    cache.get_tokens(_document(scenario_lines, 1))
    held = cache.entry(URI)
    change = TextChange(0, 0, 0, 0, "Set z;\n")
    cache.update(_document(apply_edits(scenario_lines, [change]), 2), [change.as_line_edit()])
    assert held.version == 1
    assert held.line_count == len(scenario_lines)
    assert [token.raw for token in held.assemble()] == scenario_lines


def test_invalidate_and_clear(scenario_lines) -> None:
    cache = TokenCache()
    cache.get_tokens(_document(scenario_lines, 1))
    cache.get_tokens(SourceDocument.from_lines("file:///other.gms", ["Set a;"]))
    assert URI in cache
    assert len(cache) == 2
    cache.invalidate(URI)
    assert URI not in cache
    cache.invalidate(URI)
    cache.clear()
    assert len(cache) == 0


def test_default_cache_is_shared() -> None:
    assert default_cache() is default_cache()


def test_merge_edits_single_insert() -> None:
    assert merge_edits([LineEdit(3, 3, "a\nb\nc")]) == EditRegion(3, 3, 5)


def test_merge_edits_sequential_edits_grow_region() -> None:
    # Insert two lines at 2, then edit line 10 of the resulting document
    # (line 8 of the original).
    region = merge_edits([LineEdit(2, 2, "x\ny\nz"), LineEdit(10, 10, "w")])
    assert region == EditRegion(2, 8, 10)
    assert region.delta == 2


def test_merge_edits_rejects_unpatchable_batches() -> None:
    assert merge_edits([]) is None
    assert merge_edits([LineEdit.replace_all("x")]) is None
    assert merge_edits([LineEdit(4, 2, "x")]) is None


def _random_change(rng: random.Random, lines: list[str]) -> TextChange:
    start_line = rng.randrange(len(lines))
    end_line = min(len(lines) - 1, start_line + rng.choice([0, 0, 1, 2]))
    start_character = rng.randint(0, len(lines[start_line]))
    if end_line == start_line:
        end_character = rng.randint(start_character, len(lines[end_line]))
    else:
        end_character = rng.randint(0, len(lines[end_line]))
    text = rng.choice(
        [
            "",
            "\n",
            "x",
            ";",
            "Set k;",
            "\nParameter p;\n",
            "* Block ---\n",
            "$ontext\n",
            "\n$offtext",
            "** Sub ---",
            " / 1*2 /",
        ]
    )
    return TextChange(start_line, start_character, end_line, end_character, text)


def test_incremental_updates_match_full_classification() -> None:
    rng = random.Random(20240611)
    lines = [
        "* Header ---",
        "Sets",
        "  i 'plants' / a, b /",
        "  j / 1*3 /;",
        "$ontext",
        "notes",
        "$offtext",
        "Parameter p(i);",
        "** Data ---",
        "Variables x, y",
        "  z;",
    ]
    cache = TokenCache()
    version = 1
    cache.get_tokens(_document(lines, version))
    for _ in range(300):
        changes: list[TextChange] = []
        for _ in range(rng.choice([1, 1, 2, 3])):
            change = _random_change(rng, lines)
            lines = apply_edits(lines, [change])
            changes.append(change)
        version += 1
        tokens = cache.update(_document(lines, version), [change.as_line_edit() for change in changes])
        assert tokens == classify_lines(lines)
        assert cache.entry(URI).line_count == len(lines)


def test_skipped_notification_rebuilds() -> None:
    cache = TokenCache()
    cache.get_tokens(_document(["Set i;", "x = 1;", "y = 2;"], 1))
    # Version 2 changed line 1 but was never reported; version 3 edits line 2.
    current = ["Set i;", "* S ---", "Set z;"]
    tokens = cache.update(_document(current, 3), [LineEdit(2, 2, "Set z;")])
    assert cache.last_stats.full_rebuild is True
    assert tokens == classify_lines(current)


def test_replayed_version_rebuilds(scenario_lines) -> None:
    cache = TokenCache()
    cache.get_tokens(_document(scenario_lines, 4))
    change = TextChange(0, 0, 0, 0, "Set z;\n")
    edited = apply_edits(scenario_lines, [change])
    tokens = cache.update(_document(edited, 4), [change.as_line_edit()])
    assert cache.last_stats.full_rebuild is True
    assert tokens == classify_lines(edited)
    assert cache.entry(URI).version == 4


def test_empty_batch_with_changed_text_rebuilds(scenario_lines) -> None:
    cache = TokenCache()
    cache.get_tokens(_document(scenario_lines, 1))
    changed = ["Parameter p;"] + scenario_lines[1:]
    tokens = cache.update(_document(changed, 2), [])
    assert cache.last_stats.full_rebuild is True
    assert tokens == classify_lines(changed)
