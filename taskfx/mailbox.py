"""Append-only message log shared by one root invocation."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from taskfx.errors import MailboxClosedError


class Mailbox:
    """Ordered record of every message sent by a root task and its descendants.

    Only drivers append, one message at a time on the scheduler's thread, so
    the append order is the interpretation order. ``freeze`` closes the
    mailbox and hands out the final tuple.
    """

    def __init__(self) -> None:
        self._messages: list[Any] = []
        self._frozen: tuple[Any, ...] | None = None

    @property
    def closed(self) -> bool:
        return self._frozen is not None

    def append(self, message: Any) -> None:
        if self._frozen is not None:
            raise MailboxClosedError(f"cannot send {message!r}: the mailbox is frozen")
        self._messages.append(message)

    def snapshot(self) -> tuple[Any, ...]:
        if self._frozen is not None:
            return self._frozen
        return tuple(self._messages)

    def freeze(self) -> tuple[Any, ...]:
        if self._frozen is None:
            self._frozen = tuple(self._messages)
        return self._frozen

    def __iter__(self) -> Iterator[Any]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._messages)

    def __repr__(self) -> str:
        state = "frozen" if self.closed else "open"
        return f"Mailbox({len(self)} message(s), {state})"


__all__ = ["Mailbox"]
