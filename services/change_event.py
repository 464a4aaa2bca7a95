"""
Change events received from the ``todos`` change stream.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class ChangeType(enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """
    One row change. ``new`` holds the row image after INSERT/UPDATE and
    ``old`` at least the ``id`` of a DELETEd row.
    """
    change_type: ChangeType
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)
    table: str = "todos"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ChangeEvent":
        """
        Parse a ``todo_change`` payload.

        Raises:
            ValueError: unknown event type or no row id in the payload.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Change payload must be an object, got {type(payload).__name__}")

        raw_type = payload.get('eventType') or payload.get('event_type')
        try:
            change_type = ChangeType(str(raw_type).upper())
        except ValueError:
            raise ValueError(f"Unknown change event type: {raw_type!r}")

        event = cls(
            change_type=change_type,
            new=dict(payload.get('new') or {}),
            old=dict(payload.get('old') or {}),
            table=payload.get('table', 'todos'),
        )
        if event.todo_id is None:
            raise ValueError(f"{change_type.value} event without a row id")
        return event

    @property
    def todo_id(self) -> Optional[str]:
        row_id = self.new.get('id', self.old.get('id'))
        return None if row_id is None else str(row_id)

    @property
    def owner_id(self):
        return self.new.get('user_id', self.old.get('user_id'))
