"""Exception types raised by gamslens invariant markers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NeverPayload:
    reason: str
    env: dict[str, object] = field(default_factory=dict)

    def as_payload(self) -> dict[str, object]:
        return {
            "reason": self.reason,
            "env": {key: repr(value) for key, value in sorted(self.env.items())},
        }


class NeverRaise(RuntimeError):
    """Sentinel exception for code paths that callers must never reach.

    Text analysis itself never raises: malformed input always has a defined
    fallback. Reaching one of these means a caller broke an API contract
    (negative line index, negative timeout, and so on).
    """

    def __init__(self, message: str, *, payload: NeverPayload | None = None):
        super().__init__(message)
        self.payload = payload or NeverPayload(reason=message)

    @property
    def env(self) -> dict[str, object]:
        return dict(self.payload.env)


class NeverThrown(NeverRaise):
    """Alias for NeverRaise used by the explicit never() marker."""
