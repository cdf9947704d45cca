from __future__ import annotations

from collections.abc import Callable
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Protocol
import time

from gamslens.invariants import never


class CancellationToken(Protocol):
    def is_cancelled(self) -> bool:
        """Return True once the caller no longer wants the result."""


@dataclass(frozen=True)
class NeverCancelled:
    def is_cancelled(self) -> bool:
        return False


@dataclass
class CancellationFlag:
    """Explicitly cancelled token, e.g. from a ``$/cancelRequest``."""

    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def is_cancelled(self) -> bool:
        return self.cancelled


@dataclass(frozen=True)
class Deadline:
    deadline_ns: int
    clock: Callable[[], int] = field(default=time.monotonic_ns, compare=False)

    @classmethod
    def from_timeout_ms(
        cls, milliseconds: int, *, clock: Callable[[], int] = time.monotonic_ns
    ) -> "Deadline":
        value = int(milliseconds)
        if value < 0:
            never("invalid timeout milliseconds", milliseconds=milliseconds)
        return cls(deadline_ns=clock() + value * 1_000_000, clock=clock)

    def is_cancelled(self) -> bool:
        return self.clock() >= self.deadline_ns


NEVER_CANCELLED = NeverCancelled()

_cancellation_var: ContextVar[CancellationToken] = ContextVar(
    "gamslens_cancellation", default=NEVER_CANCELLED
)


def current_cancellation() -> CancellationToken:
    return _cancellation_var.get()


def set_cancellation(token: CancellationToken) -> Token[CancellationToken]:
    return _cancellation_var.set(token)


def reset_cancellation(token: Token[CancellationToken]) -> None:
    _cancellation_var.reset(token)


@contextmanager
def cancellation_scope(cancel: CancellationToken):
    token = set_cancellation(cancel)
    try:
        yield cancel
    finally:
        reset_cancellation(token)


def resolve_cancellation(cancel: CancellationToken | None) -> CancellationToken:
    return cancel if cancel is not None else current_cancellation()
