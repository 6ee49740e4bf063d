"""
User Repository.

Usage:
    repo = UserRepository(db)
    user = repo.upsert("auth0|123", email="fan@example.com")
    admins = repo.where(User.role == "admin")
"""
from datetime import datetime
from typing import Any, List, Optional

from picks_api.models import User
from picks_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db):
        super().__init__(User, db)

    def list_users(self, limit: int = 100) -> List[User]:
        """Most recently created users first."""
        return self.find_all(limit=limit, order_by="-created_at")

    def upsert(self, id: str, **fields: Any) -> User:
        """
        Insert the user, or update the supplied fields on an id conflict.

        ``None`` values are not written on update so that a token without an
        email claim does not wipe a stored email.

        Returns:
            The inserted or updated user
        """
        user = self.find_by_id(id)
        if user is None:
            return self.create(id=id, **{k: v for k, v in fields.items() if v is not None})

        for key, value in fields.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)
        user.updated_at = datetime.utcnow()
        self.db.flush()
        return user

    def set_subscription(self, id: str, tier: str, expiry: Optional[datetime]) -> Optional[User]:
        return self.update(id, {"subscription_tier": tier, "subscription_expiry": expiry})

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        """True if another user already owns ``email``."""
        criterion = [User.email == email]
        if exclude_id is not None:
            criterion.append(User.id != exclude_id)
        return self.exists_where(*criterion)
