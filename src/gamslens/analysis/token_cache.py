"""Per-document token cache with incremental repair.

Entries are keyed by document URI and replaced wholesale on every update, so a
caller holding an older entry keeps a consistent snapshot. Repairs only
reclassify the lines an edit batch touched; everything after the edited region
is relabeled by the line delta.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
import logging

from gamslens.analysis.classifier import classify_line
from gamslens.analysis.document import LineDocument, LineEdit
from gamslens.analysis.tokens import Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    version: int
    line_count: int
    per_line: Mapping[int, tuple[Token, ...]]

    def assemble(self) -> list[Token]:
        tokens: list[Token] = []
        for index in sorted(self.per_line):
            tokens.extend(self.per_line[index])
        return tokens


@dataclass(frozen=True)
class EditRegion:
    """A batch of edits collapsed into one contiguous replacement.

    Old lines ``[old_start, old_end]`` of the cached document became lines
    ``[old_start, new_end]`` of the edited document.
    """

    old_start: int
    old_end: int
    new_end: int

    @property
    def delta(self) -> int:
        return (self.new_end - self.old_start) - (self.old_end - self.old_start)


@dataclass
class UpdateStats:
    full_rebuild: bool = False
    classified: int = 0
    reused: int = 0
    relabeled: int = 0


def _same_lines(cached: CacheEntry, document: LineDocument) -> bool:
    if cached.line_count != document.line_count:
        return False
    return all(
        all(token.raw == document.line_at(index) for token in cached.per_line[index])
        for index in range(cached.line_count)
    )


def merge_edits(edits: Sequence[LineEdit]) -> EditRegion | None:
    """Collapse sequentially applied edits into one region.

    Each edit is expressed against the document produced by the edits before
    it. Returns None for an empty batch, a whole-document edit, or an edit
    with an inverted range.
    """
    region: EditRegion | None = None
    for edit in edits:
        if edit.whole_document:
            return None
        start, end = edit.start_line, edit.end_line
        if start < 0 or end < start:
            return None
        added = edit.new_line_count - (end - start + 1)
        if region is None:
            region = EditRegion(old_start=start, old_end=end, new_end=end + added)
            continue
        # Lines after the region are shifted by ``shift`` relative to the
        # cached document; lines before it are untouched.
        shift = region.new_end - region.old_end
        low = min(start, region.old_start)
        old_end = region.old_end if end <= region.new_end else end - shift
        high = max(end, region.new_end)
        region = EditRegion(old_start=low, old_end=old_end, new_end=high + added)
    return region


class TokenCache:
    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self.last_stats = UpdateStats()

    def __contains__(self, uri: object) -> bool:
        return uri in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, uri: str) -> CacheEntry | None:
        return self._entries.get(uri)

    def get_tokens(self, document: LineDocument) -> list[Token]:
        cached = self._entries.get(document.uri)
        if cached is not None and cached.version == document.version:
            return cached.assemble()
        return self._rebuild(document).assemble()

    def update(self, document: LineDocument, edits: Iterable[LineEdit]) -> list[Token]:
        """Repair the cached tokens of ``document`` after ``edits``.

        ``document`` is the already-edited document. Anything that does not
        line up with the cached entry falls back to a full rebuild.
        """
        cached = self._entries.get(document.uri)
        if cached is None:
            logger.debug("no cache entry for %s; classifying whole document", document.uri)
            return self._rebuild(document).assemble()
        if document.version != cached.version + 1:
            # Edits only apply on top of the immediately preceding version.
            logger.debug(
                "version gap for %s (cached %d, document %d); rebuilding",
                document.uri,
                cached.version,
                document.version,
            )
            return self._rebuild(document).assemble()
        batch = list(edits)
        if not batch:
            if _same_lines(cached, document):
                entry = CacheEntry(document.version, cached.line_count, cached.per_line)
                self._entries[document.uri] = entry
                self.last_stats = UpdateStats()
                return entry.assemble()
            return self._rebuild(document).assemble()
        region = merge_edits(batch)
        if region is None or region.old_end >= cached.line_count:
            logger.debug("edit batch for %s not patchable; rebuilding", document.uri)
            return self._rebuild(document).assemble()
        if cached.line_count + region.delta != document.line_count:
            logger.debug(
                "line count mismatch for %s (cached %d%+d, document %d); rebuilding",
                document.uri,
                cached.line_count,
                region.delta,
                document.line_count,
            )
            return self._rebuild(document).assemble()
        return self._patch(document, cached, region).assemble()

    def invalidate(self, uri: str) -> None:
        self._entries.pop(uri, None)

    def clear(self) -> None:
        self._entries.clear()

    def _rebuild(self, document: LineDocument) -> CacheEntry:
        per_line = {
            index: (classify_line(document.line_at(index), index),)
            for index in range(document.line_count)
        }
        entry = CacheEntry(
            version=document.version,
            line_count=document.line_count,
            per_line=MappingProxyType(per_line),
        )
        self._entries[document.uri] = entry
        self.last_stats = UpdateStats(full_rebuild=True, classified=document.line_count)
        return entry

    def _patch(
        self, document: LineDocument, cached: CacheEntry, region: EditRegion
    ) -> CacheEntry:
        stats = UpdateStats()
        per_line: dict[int, tuple[Token, ...]] = {}
        for index in range(region.old_start):
            per_line[index] = cached.per_line[index]
        for index in range(region.old_start, region.new_end + 1):
            text = document.line_at(index)
            previous = cached.per_line.get(index)
            if previous and all(token.raw == text for token in previous):
                per_line[index] = previous
                stats.reused += 1
            else:
                per_line[index] = (classify_line(text, index),)
                stats.classified += 1
        delta = region.delta
        for index in range(region.old_end + 1, cached.line_count):
            per_line[index + delta] = tuple(
                token.relabel(index + delta) for token in cached.per_line[index]
            )
            stats.relabeled += 1
        entry = CacheEntry(
            version=document.version,
            line_count=document.line_count,
            per_line=MappingProxyType(per_line),
        )
        self._entries[document.uri] = entry
        self.last_stats = stats
        logger.debug(
            "patched %s lines %d..%d (delta %+d): %d classified, %d reused, %d relabeled",
            document.uri,
            region.old_start,
            region.new_end,
            delta,
            stats.classified,
            stats.reused,
            stats.relabeled,
        )
        return entry


_DEFAULT_CACHE = TokenCache()


def default_cache() -> TokenCache:
    return _DEFAULT_CACHE
