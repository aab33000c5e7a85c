"""Store interfaces consumed by the retention scanner.

The scanner never looks inside the store. It lists mailboxes, lists the
messages of each mailbox and asks individual messages to delete themselves.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable


class StoreError(Exception):
    """Raised by store adapters when a read or delete fails."""


@runtime_checkable
class Message(Protocol):
    """A timestamped, deletable message."""

    @property
    def id(self) -> Hashable: ...

    @property
    def received_at(self) -> datetime: ...

    async def delete(self) -> None:
        """Delete the message from the store; raise on failure."""
        ...


@runtime_checkable
class Mailbox(Protocol):
    """A named group of messages."""

    @property
    def name(self) -> str: ...

    async def list_messages(self) -> Sequence[Message]: ...


@runtime_checkable
class MessageStore(Protocol):
    """Entry point to the store."""

    async def list_mailboxes(self) -> Sequence[Mailbox]: ...
