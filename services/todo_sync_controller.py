"""
TodoSyncController - keeps Local Todo State a deduplicated mirror of the
current user's rows in the remote ``todos`` table.

Lifecycle:
1. start(): subscribe to the change stream, then load all rows
2. add/toggle/delete: remote call first, local state only on success
3. drain_events(): merge queued change events (INSERT/UPDATE/DELETE)
4. stop() / sign_out(): tear down the subscription

Guarantees:
- No two local entries share an id (Add's own result and the realtime
  INSERT for the same row converge on one entry)
- Merging the same change event twice equals merging it once
- Local order is created_at descending; updates never reorder
- Remote failures become notifications and never raise out of here
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union, Dict, Any

from services.auth_context import AuthContext
from services.change_event import ChangeEvent, ChangeType
from services.notifier import Notifier, NotificationKind
from services.todo_filter import TodoCounts, filter_todos, count_todos, summary_line, empty_message
from services.todo_state import TodoState, TodoItem, FilterMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodoView:
    """Snapshot of everything the presentation layer renders."""
    todos: List[TodoItem]
    counts: TodoCounts
    filter: FilterMode
    input_text: str
    loading: bool
    summary: Optional[str]
    empty_message: str


class TodoSyncController:

    def __init__(self, store, auth: Optional[AuthContext] = None,
                 notifier: Optional[Notifier] = None,
                 subscription=None,
                 state: Optional[TodoState] = None):
        """
        Args:
            store: Table client (select_todos, insert_todo,
                update_completed, delete_todo)
            auth: Current user and sign-out capability
            notifier: Sink for user-visible notifications
            subscription: Optional realtime subscription (subscribe,
                unsubscribe, drain)
            state: Initial local state (mainly for tests)
        """
        self.store = store
        self.auth = auth or AuthContext.anonymous()
        self.notifier = notifier or Notifier()
        self.subscription = subscription
        self.state = state or TodoState()
        self._active = False
        # Bumped on every start/stop; a completion whose generation no longer
        # matches belongs to a torn-down session and is dropped.
        self._generation = 0

    @property
    def active(self) -> bool:
        return self._active

    # Session lifecycle

    def start(self) -> None:
        """Subscribe to changes and run the initial load. No-op if started."""
        if self._active:
            return
        self._active = True
        self._generation += 1

        if self.subscription is not None:
            try:
                self.subscription.subscribe()
            except Exception as e:
                logger.error(f"Realtime subscription unavailable: {e}", exc_info=True)

        self.load()

    def stop(self) -> None:
        """Tear down the subscription; late completions are ignored afterwards."""
        if not self._active:
            return
        self._active = False
        self._generation += 1

        if self.subscription is not None:
            try:
                self.subscription.unsubscribe()
            except Exception as e:
                logger.error(f"Failed to close realtime subscription: {e}", exc_info=True)

    def change_session(self, auth: AuthContext, subscription=None) -> None:
        """Switch to another viewing session: discard state and refetch."""
        self.stop()
        self.auth = auth
        if subscription is not None:
            self.subscription = subscription
        self.state.reset()
        self.start()

    def sign_out(self) -> bool:
        if self.auth.sign_out is None:
            self.notifier.warning(NotificationKind.SIGN_OUT_FAILED, "You are not signed in")
            return False
        try:
            self.auth.sign_out()
        except Exception as e:
            self.notifier.error(NotificationKind.SIGN_OUT_FAILED, "Failed to sign out", str(e))
            return False

        self.stop()
        self.state.reset()
        self.auth = AuthContext.anonymous()
        return True

    # Initial load

    def load(self) -> bool:
        """
        Replace local todos with the user's rows, newest first.

        On failure the list stays empty and a notification is raised;
        there is no automatic retry.
        """
        generation = self._generation
        self.state.todos = []
        self.state.loading = True

        if not self.auth.is_authenticated:
            self.state.loading = False
            return False

        try:
            rows = self.store.select_todos()
            todos = self._rows_to_todos(rows)
        except Exception as e:
            if generation != self._generation:
                logger.info(f"Discarding todo load failure after the session changed: {e}")
                return False
            self.state.loading = False
            self.notifier.error(NotificationKind.LOAD_FAILED, "Failed to load todos", str(e))
            return False

        if generation != self._generation:
            logger.info("Discarding todo load that finished after the session changed")
            return False

        self.state.todos = todos
        self.state.loading = False
        logger.info(f"Loaded {len(todos)} todos for user {self.auth.user_id}")
        return True

    @staticmethod
    def _rows_to_todos(rows) -> List[TodoItem]:
        todos = []
        seen = set()
        for row in rows:
            todo = TodoItem.from_row(row)
            if todo.id in seen:
                continue
            seen.add(todo.id)
            todos.append(todo)
        return todos

    # Intents

    def set_input(self, text: str) -> None:
        self.state.input_text = text or ""

    def set_filter(self, mode) -> FilterMode:
        self.state.filter = FilterMode.parse(mode)
        return self.state.filter

    def add(self, text: Optional[str] = None) -> Optional[TodoItem]:
        """
        Insert a todo from ``text`` (or the current input) and prepend the
        confirmed row. Nothing is shown locally before the insert succeeds.
        """
        raw = self.state.input_text if text is None else text
        trimmed = (raw or "").strip()

        if not trimmed:
            self.notifier.warning(NotificationKind.ADD_FAILED, "Please enter a todo")
            return None
        if not self.auth.is_authenticated:
            self.notifier.warning(NotificationKind.ADD_FAILED, "Sign in to add todos")
            return None

        generation = self._generation
        try:
            row = self.store.insert_todo(trimmed, self.auth.user_id)
            todo = TodoItem.from_row(row)
        except Exception as e:
            self.notifier.error(NotificationKind.ADD_FAILED, "Failed to add todo", str(e))
            return None

        if generation != self._generation:
            logger.info(f"Ignoring insert of todo {todo.id} confirmed after the session changed")
            return None

        # The realtime INSERT may already have mirrored this row
        self.state.prepend(todo)
        self.state.input_text = ""
        self.notifier.success(NotificationKind.TODO_ADDED, "Todo added")
        return self.state.get(todo.id)

    def toggle(self, todo_id) -> bool:
        """Flip ``completed`` remotely, then locally once confirmed."""
        current = self.state.get(todo_id)
        if current is None:
            logger.debug(f"Toggle for unknown todo {todo_id} ignored")
            return False
        if not self.auth.is_authenticated:
            self.notifier.warning(NotificationKind.TOGGLE_FAILED, "Sign in to update todos")
            return False

        completed = not current.completed
        generation = self._generation
        try:
            self.store.update_completed(current.id, completed)
        except Exception as e:
            self.notifier.error(NotificationKind.TOGGLE_FAILED, "Failed to update todo", str(e))
            return False

        if generation != self._generation:
            return False
        return self.state.replace_fields(current.id, completed=completed)

    def delete(self, todo_id) -> bool:
        """Delete remotely, then drop the local entry once confirmed."""
        if not self.auth.is_authenticated:
            self.notifier.warning(NotificationKind.DELETE_FAILED, "Sign in to delete todos")
            return False

        generation = self._generation
        try:
            self.store.delete_todo(todo_id)
        except Exception as e:
            self.notifier.error(NotificationKind.DELETE_FAILED, "Failed to delete todo", str(e))
            return False

        if generation != self._generation:
            return False
        self.state.remove(todo_id)
        self.notifier.success(NotificationKind.TODO_DELETED, "Todo deleted")
        return True

    # Realtime merge

    def apply_event(self, event: Union[ChangeEvent, Dict[str, Any]]) -> bool:
        """
        Merge one change event. Returns True if local state changed.

        INSERT prepends unless the id is present, UPDATE replaces text and
        completed in place, DELETE removes. Unknown ids are ignored.
        """
        if not isinstance(event, ChangeEvent):
            try:
                event = ChangeEvent.from_payload(event)
            except ValueError as e:
                logger.warning(f"Ignoring malformed change event: {e}")
                return False

        if event.table != "todos" or not self.auth.is_authenticated:
            return False
        # Rows of other users are dropped even if the stream delivers them
        if event.owner_id is not None and str(event.owner_id) != str(self.auth.user_id):
            logger.debug(f"Ignoring {event.change_type.value} for another owner")
            return False

        if event.change_type is ChangeType.INSERT:
            try:
                todo = TodoItem.from_row(event.new)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Ignoring INSERT with unreadable row {event.todo_id}: {e}")
                return False
            return self.state.prepend(todo)

        if event.change_type is ChangeType.UPDATE:
            current = self.state.get(event.todo_id)
            if current is None:
                return False
            changes = {}
            if 'text' in event.new:
                changes['text'] = event.new['text'] or ''
            if 'completed' in event.new:
                completed = event.new['completed']
                if not isinstance(completed, bool):
                    logger.warning(f"Ignoring UPDATE of todo {event.todo_id} with non-boolean completed: {completed!r}")
                    return False
                changes['completed'] = completed
            updated = current.with_changes(**changes)
            if updated == current:
                return False
            return self.state.replace_fields(event.todo_id, **changes)

        return self.state.remove(event.todo_id)

    def drain_events(self) -> int:
        """Apply every queued change event in arrival order.

        A failing event is logged and skipped; the rest of the batch is
        still applied.
        """
        if self.subscription is None:
            return 0
        events = self.subscription.drain()
        for event in events:
            try:
                self.apply_event(event)
            except Exception as e:
                logger.error(f"Failed to apply change event: {e}", exc_info=True)
        return len(events)

    # Derived view

    def view(self) -> TodoView:
        counts = count_todos(self.state.todos)
        return TodoView(
            todos=filter_todos(self.state.todos, self.state.filter),
            counts=counts,
            filter=self.state.filter,
            input_text=self.state.input_text,
            loading=self.state.loading,
            summary=summary_line(counts),
            empty_message=empty_message(self.state.filter),
        )
