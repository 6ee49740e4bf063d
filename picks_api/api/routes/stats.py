"""
Public statistics.

Base path: /api/stats
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from picks_api.api.schemas import StatsResponse
from picks_api.core.database import get_db
from picks_api.repositories import PredictionRepository

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
def get_stats(db: Session = Depends(get_db)) -> StatsResponse:
    """
    Landing-page counters.

    - accuracy: won / (won + lost) as a rounded percentage, 0 with no resolved picks
    - totalPredictions: all predictions
    - activeUsers: registered users
    - leagues: distinct championships covered
    """
    return StatsResponse(**PredictionRepository(db).get_stats())
