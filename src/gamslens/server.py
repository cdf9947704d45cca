from __future__ import annotations

from collections.abc import Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Callable
import logging

from pydantic import ValidationError
from pygls.lsp.server import LanguageServer
from lsprotocol import types

from gamslens import __version__
from gamslens.analysis.cancellation import Deadline, cancellation_scope
from gamslens.analysis.document import SourceDocument, TextChange
from gamslens.analysis.folding import FoldKind, FoldingRegion, build_folding_ranges
from gamslens.analysis.outline import OutlineNode, SourceRange, build_outline
from gamslens.analysis.token_cache import TokenCache, default_cache
from gamslens.analysis.tokens import Token
from gamslens.config import (
    DEFAULT_SECTION_WIDTH,
    analysis_timeout_ms,
    config_bool,
    config_int,
    editing_defaults,
    extract_items_enabled,
    merge_payload,
    outline_defaults,
    server_defaults,
)
from gamslens.editing import TextEdit, insert_section_edit, toggle_line_comment
from gamslens.invariants import never
from gamslens.schema import (
    EditResponse,
    InsertSectionRequest,
    TextEditDTO,
    ToggleLineCommentRequest,
)

logger = logging.getLogger(__name__)

server = LanguageServer("gamslens", __version__)
INSERT_SECTION_COMMAND = "gamslens.insertSection"
TOGGLE_LINE_COMMENT_COMMAND = "gamslens.toggleLineComment"


def _require_payload(payload: object, *, command: str) -> dict[str, object]:
    if payload is None:
        never("missing command payload", command=command)
    if not isinstance(payload, dict):
        never(
            "invalid command payload type",
            command=command,
            payload_type=type(payload).__name__,
        )
    return payload


def _payload_uri(payload: dict[str, object]) -> str | None:
    uri = payload.get("uri")
    return uri if isinstance(uri, str) else None


def _workspace_root(ls: LanguageServer) -> Path | None:
    workspace = getattr(ls, "workspace", None)
    root_path = getattr(workspace, "root_path", None)
    return Path(root_path) if root_path else None


def _cache() -> TokenCache:
    return default_cache()


def _snapshot(ls: LanguageServer, uri: str) -> SourceDocument:
    doc = ls.workspace.get_text_document(uri)
    return SourceDocument.from_text(uri, doc.source, doc.version)


@contextmanager
def _request_deadline(ls: LanguageServer):
    timeout_ms = analysis_timeout_ms(server_defaults(root=_workspace_root(ls)))
    with cancellation_scope(Deadline.from_timeout_ms(timeout_ms)) as cancel:
        yield cancel


def _position(line: int, character: int) -> types.Position:
    return types.Position(line=line, character=character)


def _range(source: SourceRange) -> types.Range:
    return types.Range(
        start=_position(source.start_line, source.start_character),
        end=_position(source.end_line, source.end_character),
    )


def _document_symbol(node: OutlineNode) -> types.DocumentSymbol:
    return types.DocumentSymbol(
        name=node.name,
        detail=node.detail or None,
        kind=types.SymbolKind[node.kind.value],
        range=_range(node.range),
        selection_range=_range(node.selection_range),
        children=[_document_symbol(child) for child in node.children],
    )


def _folding_range(region: FoldingRegion) -> types.FoldingRange:
    kind = (
        types.FoldingRangeKind.Comment
        if region.kind is FoldKind.COMMENT
        else types.FoldingRangeKind.Region
    )
    return types.FoldingRange(
        start_line=region.start_line,
        end_line=region.end_line,
        kind=kind,
    )


def _text_changes(changes: Sequence[object]) -> list[TextChange]:
    converted: list[TextChange] = []
    for change in changes:
        text = getattr(change, "text", "")
        change_range = getattr(change, "range", None)
        if change_range is None:
            converted.append(
                TextChange(0, 0, 0, 0, text=text, whole_document=True)
            )
            continue
        converted.append(
            TextChange(
                start_line=change_range.start.line,
                start_character=change_range.start.character,
                end_line=change_range.end.line,
                end_character=change_range.end.character,
                text=text,
            )
        )
    return converted


def _tokens_for(ls: LanguageServer, uri: str) -> tuple[SourceDocument, list[Token]]:
    document = _snapshot(ls, uri)
    return document, _cache().get_tokens(document)


def _text_edit_dto(edit: TextEdit) -> TextEditDTO:
    return TextEditDTO(
        start=(edit.start_line, edit.start_character),
        end=(edit.end_line, edit.end_character),
        replacement=edit.new_text,
    )


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: types.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    _cache().invalidate(uri)
    document, tokens = _tokens_for(ls, uri)
    logger.debug("opened %s: %d lines, %d tokens", uri, document.line_count, len(tokens))


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: types.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    document = _snapshot(ls, uri)
    edits = [change.as_line_edit() for change in _text_changes(params.content_changes)]
    _cache().update(document, edits)


@server.feature(types.TEXT_DOCUMENT_DID_SAVE)
def did_save(ls: LanguageServer, params: types.DidSaveTextDocumentParams) -> None:
    _tokens_for(ls, params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: LanguageServer, params: types.DidCloseTextDocumentParams) -> None:
    uri = params.text_document.uri
    _cache().invalidate(uri)
    logger.debug("closed %s", uri)


@server.feature(types.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(
    ls: LanguageServer, params: types.DocumentSymbolParams
) -> list[types.DocumentSymbol]:
    uri = params.text_document.uri
    document, tokens = _tokens_for(ls, uri)
    extract = extract_items_enabled(outline_defaults(root=_workspace_root(ls)))
    with _request_deadline(ls) as cancel:
        nodes = build_outline(tokens, extract_items=extract, line_count=document.line_count)
        if not nodes and cancel.is_cancelled():
            logger.info("outline for %s cancelled", uri)
    return [_document_symbol(node) for node in nodes]


@server.feature(types.TEXT_DOCUMENT_FOLDING_RANGE)
def folding_range(
    ls: LanguageServer, params: types.FoldingRangeParams
) -> list[types.FoldingRange]:
    uri = params.text_document.uri
    document, tokens = _tokens_for(ls, uri)
    with _request_deadline(ls) as cancel:
        regions = build_folding_ranges(tokens, line_count=document.line_count)
        if not regions and cancel.is_cancelled():
            logger.info("folding ranges for %s cancelled", uri)
    return [_folding_range(region) for region in regions]


@server.command(INSERT_SECTION_COMMAND)
def execute_insert_section(ls: LanguageServer, payload: dict | None = None) -> dict:
    payload = _require_payload(payload, command=INSERT_SECTION_COMMAND)
    defaults = editing_defaults(root=_workspace_root(ls))
    try:
        request = InsertSectionRequest.model_validate(payload)
    except ValidationError as exc:
        return EditResponse(uri=_payload_uri(payload), errors=[str(exc)]).model_dump()
    width = request.width
    if width is None:
        width = config_int(defaults.get("section_width"), default=DEFAULT_SECTION_WIDTH)
    edit = insert_section_edit(
        request.line, request.character, request.name, level=request.level, width=width
    )
    return EditResponse(uri=request.uri, edits=[_text_edit_dto(edit)]).model_dump()


@server.command(TOGGLE_LINE_COMMENT_COMMAND)
def execute_toggle_line_comment(ls: LanguageServer, payload: dict | None = None) -> dict:
    payload = _require_payload(payload, command=TOGGLE_LINE_COMMENT_COMMAND)
    defaults = editing_defaults(root=_workspace_root(ls))
    merged = merge_payload(
        payload,
        {
            "insert_space": config_bool(defaults.get("comment_insert_space"), default=True),
            "ignore_empty_lines": config_bool(
                defaults.get("comment_ignore_empty_lines"), default=True
            ),
        },
    )
    try:
        request = ToggleLineCommentRequest.model_validate(merged)
    except ValidationError as exc:
        return EditResponse(uri=_payload_uri(payload), errors=[str(exc)]).model_dump()
    document = _snapshot(ls, request.uri)
    warnings: list[str] = []
    if request.start_line >= document.line_count:
        warnings.append(f"start_line {request.start_line} is past the end of the document")
        return EditResponse(uri=request.uri, warnings=warnings).model_dump()
    edits = toggle_line_comment(
        document.lines,
        request.start_line,
        request.end_line,
        insert_space=bool(request.insert_space),
        ignore_empty_lines=bool(request.ignore_empty_lines),
    )
    return EditResponse(
        uri=request.uri,
        edits=[_text_edit_dto(edit) for edit in edits],
        warnings=warnings,
    ).model_dump()


def start(start_fn: Callable[[], None] | None = None) -> None:
    """Start the language server on stdio."""
    (start_fn or server.start_io)()


if __name__ == "__main__":  # pragma: no cover
    start()  # pragma: no cover
