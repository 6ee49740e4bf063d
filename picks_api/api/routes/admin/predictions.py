"""
Admin prediction routes.

Base path: /api/admin/predictions
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from picks_api.api.schemas import MessageResponse
from picks_api.core.auth import RequestContext, require_admin
from picks_api.core.database import get_db
from picks_api.core.metrics import record_admin_action
from picks_api.repositories import PredictionRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/predictions", tags=["admin"])


@router.delete("/{prediction_id}", response_model=MessageResponse)
def delete_prediction(
    prediction_id: int,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Delete a prediction together with every access grant on it."""
    repo = PredictionRepository(db)
    if not repo.delete(prediction_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Prediction not found")
    repo.save()

    record_admin_action("prediction", "delete")
    logger.info(f"Prediction {prediction_id} deleted", extra={"prediction_id": prediction_id})
    return MessageResponse(message="Prediction deleted successfully")
