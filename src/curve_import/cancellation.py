"""Caller-owned cancellation for long-running imports."""

from __future__ import annotations


class CancellationToken:
    """Signal that an operation should stop.

    Only the caller that started the operation calls :meth:`cancel`; the
    operation itself only reads :attr:`is_cancelled`. Cancelling twice is
    harmless.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"
