"""
Prediction Repository for match prediction data access.

Usage:
    repo = PredictionRepository(db)
    latest = repo.list_predictions(limit=10)
    premium = repo.list_predictions(is_premium=True)
    stats = repo.get_stats()
"""
import math
from typing import Dict, List, Optional

from sqlalchemy import case, desc, func

from picks_api.models import Prediction, User, RESOLVED_STATUSES
from picks_api.repositories.base import BaseRepository


class PredictionRepository(BaseRepository[Prediction]):
    """Repository for match predictions."""

    def __init__(self, db):
        super().__init__(Prediction, db)

    # ========================================================================
    # Listing
    # ========================================================================

    def list_predictions(
        self,
        is_premium: Optional[bool] = None,
        limit: int = 50
    ) -> List[Prediction]:
        """
        List predictions, latest match first.

        Args:
            is_premium: Restrict to premium (True) or free (False) rows; None for both
            limit: Maximum number of predictions
        """
        query = self.query()
        if is_premium is not None:
            query = query.filter(Prediction.is_premium.is_(is_premium))
        return query.order_by(desc(Prediction.match_date), desc(Prediction.id)).limit(limit).all()

    # ========================================================================
    # Aggregates
    # ========================================================================

    def get_accuracy(self) -> int:
        """
        Win rate over resolved predictions, as a rounded percentage.

        won / (won + lost) * 100; 0 when nothing has been resolved yet.
        """
        total, won = self.db.query(
            func.count(Prediction.id),
            func.sum(case((Prediction.status == "won", 1), else_=0)),
        ).filter(Prediction.status.in_(RESOLVED_STATUSES)).one()

        if not total:
            return 0
        # half-up, so 62.5 reports as 63
        return math.floor((won or 0) / total * 100 + 0.5)

    def count_championships(self) -> int:
        return self.db.query(func.count(func.distinct(Prediction.championship))).scalar() or 0

    def get_stats(self) -> Dict[str, int]:
        """Public counters shown on the landing page."""
        return {
            "accuracy": self.get_accuracy(),
            "total_predictions": self.count(),
            "active_users": self.db.query(func.count(User.id)).scalar() or 0,
            "leagues": self.count_championships(),
        }
