"""Invariant markers for gamslens."""

from __future__ import annotations

from typing import NoReturn

from gamslens.exceptions import NeverPayload, NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as unreachable for well-behaved callers.

    The env payload is attached to the raised exception as metadata for the
    caller; it is not evaluated.
    """
    raise NeverThrown(
        reason or "never() marker reached",
        payload=NeverPayload(reason=reason or "never() marker reached", env=dict(env)),
    )


def require_line_index(line: int, *, name: str = "line") -> int:
    value = int(line)
    if value < 0:
        never("negative line index", name=name, line=line)
    return value
