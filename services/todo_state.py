"""
Local Todo State - in-memory mirror of the current user's ``todos`` rows
plus ephemeral UI state (input text, active filter, loading flag).
"""

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, List, Dict, Any


class FilterMode(enum.Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value) -> "FilterMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown filter mode: {value!r}")


def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace('Z', '+00:00'))


@dataclass(frozen=True)
class TodoItem:
    """One todo as held locally. Immutable; updates produce a new item."""
    id: str
    text: str
    completed: bool = False
    created_at: Optional[datetime] = None
    owner_id: Optional[Any] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TodoItem":
        """Map a ``todos`` row image (column names) to a TodoItem."""
        return cls(
            id=str(row['id']),
            text=row.get('text') or '',
            completed=bool(row.get('completed', False)),
            created_at=_parse_timestamp(row.get('created_at')),
            owner_id=row.get('user_id'),
        )

    def with_changes(self, **changes) -> "TodoItem":
        return replace(self, **changes)


@dataclass
class TodoState:
    todos: List[TodoItem] = field(default_factory=list)
    input_text: str = ""
    filter: FilterMode = FilterMode.ALL
    loading: bool = False

    def index_of(self, todo_id) -> int:
        """Position of ``todo_id`` or -1."""
        todo_id = str(todo_id)
        for i, todo in enumerate(self.todos):
            if todo.id == todo_id:
                return i
        return -1

    def get(self, todo_id) -> Optional[TodoItem]:
        i = self.index_of(todo_id)
        return self.todos[i] if i >= 0 else None

    def contains(self, todo_id) -> bool:
        return self.index_of(todo_id) >= 0

    def prepend(self, todo: TodoItem) -> bool:
        """Insert at the head unless the id is already present."""
        if self.contains(todo.id):
            return False
        self.todos.insert(0, todo)
        return True

    def replace_fields(self, todo_id, **changes) -> bool:
        """Update fields in place, keeping the entry's position."""
        i = self.index_of(todo_id)
        if i < 0:
            return False
        self.todos[i] = self.todos[i].with_changes(**changes)
        return True

    def remove(self, todo_id) -> bool:
        i = self.index_of(todo_id)
        if i < 0:
            return False
        del self.todos[i]
        return True

    def reset(self) -> None:
        """Discard everything mirrored for the previous session."""
        self.todos = []
        self.input_text = ""
        self.filter = FilterMode.ALL
        self.loading = False
