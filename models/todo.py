"""
Todo Model - one short text item owned by a single user.

Rows are serialized with the table's column names (``to_row``); that row
image is what the REST API returns and what the change stream carries.
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User


def _new_todo_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    # Microsecond precision; created_at is the only ordering key
    return datetime.utcnow()


class Todo(Base):
    """
    Task item. ``id`` and ``created_at`` are assigned here, never by the client.
    Only ``completed`` is mutable after insert.
    """
    __tablename__ = "todos"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_todo_id)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    owner: Mapped[Optional["User"]] = relationship(back_populates="todos")

    __table_args__ = (
        # Owner list ordered newest first
        Index('ix_todos_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f'<Todo {self.id}: {self.text[:30]}>'

    def to_row(self):
        """Row image with table column names."""
        return {
            'id': self.id,
            'text': self.text,
            'completed': self.completed,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'user_id': self.user_id,
        }
