"""
Explicit authentication context handed to the sync controller.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class AuthContext:
    """
    Current user identity plus the sign-out capability.
    ``user_id`` of None means "unauthenticated".
    """
    user_id: Optional[Any] = None
    email: Optional[str] = None
    sign_out: Optional[Callable[[], None]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def from_client(cls, client) -> "AuthContext":
        """
        Build a context from a signed-in ``TodoStoreClient``; anonymous if
        the client has no user.
        """
        user = client.current_user()
        if not user:
            return cls.anonymous()
        return cls(user_id=user.get('id'), email=user.get('email'), sign_out=client.sign_out)
