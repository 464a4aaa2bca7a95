"""
Filter - pure derived views over Local Todo State.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from services.todo_state import FilterMode, TodoItem

EMPTY_MESSAGES = {
    FilterMode.ALL: "Add your first todo",
    FilterMode.ACTIVE: "All todos are done!",
    FilterMode.COMPLETED: "No completed todos yet",
}


@dataclass(frozen=True)
class TodoCounts:
    total: int
    active: int
    completed: int


def filter_todos(todos: Iterable[TodoItem], mode) -> List[TodoItem]:
    """Subsequence of ``todos`` matching ``mode``, relative order kept."""
    mode = FilterMode.parse(mode)
    if mode is FilterMode.ACTIVE:
        return [todo for todo in todos if not todo.completed]
    if mode is FilterMode.COMPLETED:
        return [todo for todo in todos if todo.completed]
    return list(todos)


def count_todos(todos: Iterable[TodoItem]) -> TodoCounts:
    """Counts over the full set, independent of the selected filter."""
    total = 0
    completed = 0
    for todo in todos:
        total += 1
        if todo.completed:
            completed += 1
    return TodoCounts(total=total, active=total - completed, completed=completed)


def summary_line(counts: TodoCounts) -> Optional[str]:
    """Footer text; None when there is nothing to summarize."""
    if counts.total == 0:
        return None
    return f"{counts.completed} of {counts.total} todos completed"


def empty_message(mode) -> str:
    return EMPTY_MESSAGES[FilterMode.parse(mode)]
