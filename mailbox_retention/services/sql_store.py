"""SQLAlchemy-backed message store."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mailbox_retention.models.message import StoredMessage
from mailbox_retention.services.store import StoreError


class SqlMessage:
    """Detached view of a stored message that can delete its own row."""

    def __init__(
        self,
        store: SqlMessageStore,
        message_id: UUID,
        received_at: datetime,
    ):
        self._store = store
        self._id = message_id
        self._received_at = received_at

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def received_at(self) -> datetime:
        return self._received_at

    async def delete(self) -> None:
        await self._store.delete_message(self._id)

    def __repr__(self) -> str:
        return f"<SqlMessage(id={self._id})>"


class SqlMailbox:
    """A mailbox is the set of rows sharing a `mailbox` value."""

    def __init__(self, store: SqlMessageStore, name: str):
        self._store = store
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def list_messages(self) -> list[SqlMessage]:
        return await self._store.messages_for(self._name)

    def __repr__(self) -> str:
        return f"<SqlMailbox(name={self._name})>"


class SqlMessageStore:
    """Message store backed by the `messages` table.

    Each operation runs in its own short session so a failed delete never
    poisons the listing of the next mailbox.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_mailboxes(self) -> list[SqlMailbox]:
        query = select(StoredMessage.mailbox).distinct().order_by(StoredMessage.mailbox)
        try:
            async with self.session_factory() as session:
                names = (await session.scalars(query)).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to list mailboxes: {exc}") from exc
        return [SqlMailbox(self, name) for name in names]

    async def messages_for(self, mailbox: str) -> list[SqlMessage]:
        query = (
            select(StoredMessage.id, StoredMessage.received_at)
            .where(StoredMessage.mailbox == mailbox)
            .order_by(StoredMessage.received_at)
        )
        try:
            async with self.session_factory() as session:
                rows = (await session.execute(query)).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to list messages for {mailbox!r}: {exc}") from exc
        return [SqlMessage(self, row.id, row.received_at) for row in rows]

    async def delete_message(self, message_id: UUID) -> None:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    delete(StoredMessage).where(StoredMessage.id == message_id)
                )
                deleted = result.rowcount
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError(f"failed to delete message {message_id}: {exc}") from exc
        if deleted == 0:
            raise StoreError(f"message {message_id} not found")

    async def add_message(self, mailbox: str, received_at: datetime) -> UUID:
        """Store a message and return its id."""
        message = StoredMessage(mailbox=mailbox, received_at=received_at)
        async with self.session_factory() as session:
            try:
                session.add(message)
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError(f"failed to store message in {mailbox!r}: {exc}") from exc
        return message.id
