"""
Authentication helpers shared by the REST and WebSocket handlers.
"""


def user_room(user_id) -> str:
    """Socket.IO room that receives a single user's todo changes."""
    return f"user_{user_id}"
