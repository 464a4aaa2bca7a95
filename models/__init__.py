"""
Database models for the todo backend.
"""

from flask_sqlalchemy import SQLAlchemy

from .base import Base

db = SQLAlchemy(model_class=Base)

from .user import User  # noqa: E402
from .todo import Todo  # noqa: E402

__all__ = ["db", "Base", "User", "Todo"]
