"""Per-run token accounting for analyzer calls.

Analyzers report what each call cost with ``record_tokens``. Callers open a
``metered()`` block around the work they want to account for. The active meter
lives in a context variable, so tasks spawned by ``asyncio.gather`` inside the
block report to it while concurrent runs elsewhere keep their own meters.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar


class TokenMeter:
    """Running token count for one metered block; nested meters roll up."""

    def __init__(self, parent: TokenMeter | None = None):
        self.tokens = 0
        self.parent = parent

    def add(self, tokens: int) -> None:
        self.tokens += tokens
        if self.parent is not None:
            self.parent.add(tokens)


_active_meter: ContextVar[TokenMeter | None] = ContextVar("token_meter", default=None)


@contextmanager
def metered() -> Iterator[TokenMeter]:
    """Count the tokens recorded by the current task and the tasks it spawns."""
    meter = TokenMeter(parent=_active_meter.get())
    reset_token = _active_meter.set(meter)
    try:
        yield meter
    finally:
        _active_meter.reset(reset_token)


def record_tokens(tokens: int) -> None:
    """Charge ``tokens`` to the active meter, if any."""
    meter = _active_meter.get()
    if meter is not None and tokens:
        meter.add(int(tokens))
