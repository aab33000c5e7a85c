"""SQLAlchemy models."""

from mailbox_retention.models.base import Base, BaseModel
from mailbox_retention.models.message import StoredMessage

__all__ = [
    "Base",
    "BaseModel",
    "StoredMessage",
]
