"""
Per-prediction access grants.

A grant lets one user see one premium prediction regardless of their
subscription tier. Grants are never updated; they disappear with their user
or prediction.
"""
from typing import List, Optional

from sqlalchemy import desc

from picks_api.models import UserPredictionAccess
from picks_api.repositories.base import BaseRepository


class AccessGrantRepository(BaseRepository[UserPredictionAccess]):
    """Repository for user/prediction access grants."""

    def __init__(self, db):
        super().__init__(UserPredictionAccess, db)

    def find_grant(self, user_id: str, prediction_id: int) -> Optional[UserPredictionAccess]:
        return self.where_first(
            UserPredictionAccess.user_id == user_id,
            UserPredictionAccess.prediction_id == prediction_id,
        )

    def has_grant(self, user_id: str, prediction_id: int) -> bool:
        return self.exists_where(
            UserPredictionAccess.user_id == user_id,
            UserPredictionAccess.prediction_id == prediction_id,
        )

    def grant(self, user_id: str, prediction_id: int) -> UserPredictionAccess:
        """Create a grant. Raises IntegrityError if the pair already exists."""
        return self.create(user_id=user_id, prediction_id=prediction_id)

    def list_for_user(self, user_id: str) -> List[UserPredictionAccess]:
        return (
            self.query()
            .filter(UserPredictionAccess.user_id == user_id)
            .order_by(desc(UserPredictionAccess.purchased_at))
            .all()
        )

    def granted_prediction_ids(self, user_id: str, prediction_ids: List[int]) -> set:
        """Subset of ``prediction_ids`` the user holds a grant for, in one query."""
        if not prediction_ids:
            return set()
        rows = (
            self.db.query(UserPredictionAccess.prediction_id)
            .filter(
                UserPredictionAccess.user_id == user_id,
                UserPredictionAccess.prediction_id.in_(prediction_ids),
            )
            .all()
        )
        return {row[0] for row in rows}
