"""
Todos API Routes
REST endpoints over the ``todos`` table. Every query is scoped to the
signed-in user, so rows owned by someone else behave as if they do not exist.
"""

from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from sqlalchemy import select
import logging

from models import db, Todo
from services.change_broadcaster import change_broadcaster, INSERT, UPDATE, DELETE

logger = logging.getLogger(__name__)

api_todos_bp = Blueprint('api_todos', __name__, url_prefix='/api/todos')


def _owned_todo(todo_id):
    stmt = select(Todo).where(Todo.id == todo_id, Todo.user_id == current_user.id)
    return db.session.execute(stmt).scalar_one_or_none()


@api_todos_bp.route('/', methods=['GET'])
@login_required
def list_todos():
    """All todos of the current user, newest first."""
    try:
        stmt = (
            select(Todo)
            .where(Todo.user_id == current_user.id)
            .order_by(Todo.created_at.desc())
        )
        todos = db.session.execute(stmt).scalars().all()
        return jsonify({
            'success': True,
            'todos': [todo.to_row() for todo in todos],
        })
    except Exception as e:
        logger.error(f"Error listing todos for user {current_user.id}: {e}", exc_info=True)
        return jsonify({'success': False, 'message': 'Failed to load todos'}), 500


@api_todos_bp.route('/', methods=['POST'])
@login_required
def create_todo():
    """Insert one todo owned by the current user and return the created row."""
    data = request.get_json(silent=True) or {}
    text = data.get('text')
    if not isinstance(text, str) or not text.strip():
        return jsonify({'success': False, 'message': 'Text is required'}), 400

    try:
        # user_id always comes from the session, never from the body
        todo = Todo(text=text.strip(), completed=False, user_id=current_user.id)
        db.session.add(todo)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating todo for user {current_user.id}: {e}", exc_info=True)
        return jsonify({'success': False, 'message': 'Failed to create todo'}), 500

    row = todo.to_row()
    logger.info(f"Todo {todo.id} created by user {current_user.id}")
    change_broadcaster.broadcast_change(INSERT, current_user.id, new_row=row)
    return jsonify({'success': True, 'todo': row}), 201


@api_todos_bp.route('/<todo_id>', methods=['PATCH', 'PUT'])
@login_required
def update_todo(todo_id):
    """Set the completed flag of one todo."""
    data = request.get_json(silent=True) or {}
    completed = data.get('completed')
    if not isinstance(completed, bool):
        return jsonify({'success': False, 'message': 'completed must be a boolean'}), 400

    try:
        todo = _owned_todo(todo_id)
        if not todo:
            return jsonify({'success': False, 'message': 'Todo not found'}), 404

        todo.completed = completed
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating todo {todo_id}: {e}", exc_info=True)
        return jsonify({'success': False, 'message': 'Failed to update todo'}), 500

    row = todo.to_row()
    change_broadcaster.broadcast_change(
        UPDATE, current_user.id,
        new_row=row,
        old_row={'id': todo.id, 'user_id': todo.user_id},
    )
    return jsonify({'success': True, 'todo': row})


@api_todos_bp.route('/<todo_id>', methods=['DELETE'])
@login_required
def delete_todo(todo_id):
    """Hard delete one todo."""
    try:
        todo = _owned_todo(todo_id)
        if not todo:
            return jsonify({'success': False, 'message': 'Todo not found'}), 404

        old_row = {'id': todo.id, 'user_id': todo.user_id}
        db.session.delete(todo)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting todo {todo_id}: {e}", exc_info=True)
        return jsonify({'success': False, 'message': 'Failed to delete todo'}), 500

    logger.info(f"Todo {todo_id} deleted by user {current_user.id}")
    change_broadcaster.broadcast_change(DELETE, current_user.id, old_row=old_row)
    return jsonify({'success': True, 'id': todo_id})
