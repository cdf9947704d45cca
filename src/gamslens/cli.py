from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import json
import logging

import typer

from gamslens.analysis.document import SourceDocument
from gamslens.analysis.folding import build_folding_ranges
from gamslens.analysis.outline import OutlineNode, build_outline
from gamslens.analysis.token_cache import TokenCache
from gamslens.analysis.tokens import Token
from gamslens.config import (
    DEFAULT_SECTION_WIDTH,
    config_int,
    editing_defaults,
    extract_items_enabled,
    outline_defaults,
)
from gamslens.editing import section_banner
from gamslens.json_types import JSONObject
from gamslens.schema import FoldingResponse, OutlineResponse, TokenDTO

app = typer.Typer(add_completion=False, help="Outline and folding analysis for GAMS sources.")

_INPUT_ERROR_EXIT = 2


@dataclass(frozen=True)
class CliSettings:
    config: Optional[Path]
    verbose: bool


def _settings(ctx: typer.Context) -> CliSettings:
    settings = ctx.obj
    if isinstance(settings, CliSettings):
        return settings
    return CliSettings(config=None, verbose=False)


def _load_document(path: Path) -> SourceDocument:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        typer.echo(f"gamslens: cannot read {path}: {exc.strerror or exc}", err=True)
        raise typer.Exit(code=_INPUT_ERROR_EXIT)
    return SourceDocument.from_text(path.resolve().as_uri(), text)


def _tokens(document: SourceDocument) -> list[Token]:
    # Files on disk carry no editor version; never reuse another run's entry.
    return TokenCache().get_tokens(document)


def _emit_json(payload: JSONObject) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _render_outline(nodes: list[OutlineNode], depth: int = 0) -> list[str]:
    rendered: list[str] = []
    for node in nodes:
        span = f"{node.range.start_line + 1}-{node.range.end_line + 1}"
        detail = f" [{node.detail}]" if node.detail else ""
        rendered.append(f"{'  ' * depth}{node.name} ({node.kind.value}, {span}){detail}")
        rendered.extend(_render_outline(node.children, depth + 1))
    return rendered


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Path to gamslens.toml."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = CliSettings(config=config, verbose=verbose)


@app.command()
def tokens(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="GAMS source file."),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Print the token assigned to every line."""
    document = _load_document(path)
    line_tokens = _tokens(document)
    if as_json:
        payload = [TokenDTO.model_validate(token.as_payload()).model_dump() for token in line_tokens]
        _emit_json({"uri": document.uri, "tokens": payload})
        return
    for token in line_tokens:
        typer.echo(f"{token.line + 1:>5} {token.kind.value:<18} {token.processed}")


@app.command()
def outline(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="GAMS source file."),
    as_json: bool = typer.Option(False, "--json"),
    items: Optional[bool] = typer.Option(
        None, "--items/--no-items", help="List declared identifiers under each declaration."
    ),
) -> None:
    """Print the section and declaration outline."""
    settings = _settings(ctx)
    document = _load_document(path)
    if items is None:
        items = extract_items_enabled(outline_defaults(config_path=settings.config))
    nodes = build_outline(_tokens(document), extract_items=items, line_count=document.line_count)
    if as_json:
        response = OutlineResponse(
            uri=document.uri, symbols=[node.as_payload() for node in nodes]
        )
        _emit_json(response.model_dump())
        return
    for line in _render_outline(nodes):
        typer.echo(line)


@app.command()
def folding(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="GAMS source file."),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Print foldable line ranges."""
    document = _load_document(path)
    regions = build_folding_ranges(_tokens(document), line_count=document.line_count)
    if as_json:
        response = FoldingResponse(
            uri=document.uri, ranges=[region.as_payload() for region in regions]
        )
        _emit_json(response.model_dump())
        return
    for region in regions:
        typer.echo(f"{region.start_line + 1}-{region.end_line + 1} {region.kind.value}")


@app.command()
def section(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Section title."),
    level: int = typer.Option(1, "--level", min=1),
    width: Optional[int] = typer.Option(None, "--width", min=0),
) -> None:
    """Print a section banner line."""
    settings = _settings(ctx)
    if width is None:
        defaults = editing_defaults(config_path=settings.config)
        width = config_int(defaults.get("section_width"), default=DEFAULT_SECTION_WIDTH)
    typer.echo(section_banner(name, level=level, width=width))


@app.command()
def lsp(ctx: typer.Context) -> None:
    """Run the language server on stdio."""
    from gamslens.server import start

    start()


def run() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    run()
