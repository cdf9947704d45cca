from gamslens.analysis.cancellation import (
    CancellationFlag,
    CancellationToken,
    Deadline,
    NEVER_CANCELLED,
    cancellation_scope,
)
from gamslens.analysis.classifier import classify_line, classify_lines
from gamslens.analysis.document import LineDocument, LineEdit, SourceDocument, TextChange
from gamslens.analysis.folding import FoldKind, FoldingRegion, build_folding_ranges
from gamslens.analysis.hierarchy import BlockKind, BlockVisitor, OpenBlock, walk_blocks
from gamslens.analysis.items import BodySegment, DeclaredItem, extract_items
from gamslens.analysis.keywords import DeclarationCategory, canonical_category
from gamslens.analysis.outline import OutlineNode, SourceRange, build_outline
from gamslens.analysis.symbol_kinds import PresentationKind, presentation_kind
from gamslens.analysis.token_cache import CacheEntry, TokenCache, default_cache
from gamslens.analysis.tokens import (
    BlockCommentEnd,
    BlockCommentStart,
    DeclarationToken,
    NormalToken,
    SectionToken,
    Token,
    TokenKind,
)

__all__ = [
    "BlockCommentEnd",
    "BlockCommentStart",
    "BlockKind",
    "BlockVisitor",
    "BodySegment",
    "CacheEntry",
    "CancellationFlag",
    "CancellationToken",
    "Deadline",
    "DeclarationCategory",
    "DeclarationToken",
    "DeclaredItem",
    "FoldKind",
    "FoldingRegion",
    "LineDocument",
    "LineEdit",
    "NEVER_CANCELLED",
    "NormalToken",
    "OpenBlock",
    "OutlineNode",
    "PresentationKind",
    "SectionToken",
    "SourceDocument",
    "SourceRange",
    "TextChange",
    "Token",
    "TokenCache",
    "TokenKind",
    "build_folding_ranges",
    "build_outline",
    "canonical_category",
    "cancellation_scope",
    "classify_line",
    "classify_lines",
    "default_cache",
    "extract_items",
    "presentation_kind",
    "walk_blocks",
]
