"""Stored mailbox message."""

from sqlalchemy import Column, Index, String

from mailbox_retention.models.base import BaseModel, UtcDateTime


class StoredMessage(BaseModel):
    """A message delivered to a mailbox; only the fields retention needs."""

    __tablename__ = "messages"

    mailbox = Column(
        String(255),
        nullable=False,
    )
    received_at = Column(
        UtcDateTime(),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_messages_mailbox_received", "mailbox", "received_at"),
    )

    def __repr__(self) -> str:
        return f"<StoredMessage(id={self.id}, mailbox={self.mailbox})>"
