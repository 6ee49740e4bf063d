"""
Prediction API routes.

Provides endpoints for:
- Listing predictions (public; premium picks are locked for non-entitled requesters)
- Reading a single prediction (403 when premium-gated)
- Creating and updating predictions
- Granting the caller access to one premium prediction

Base path: /api/predictions
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from picks_api.api.schemas import (
    AccessGrantResponse,
    PredictionCreate,
    PredictionResponse,
    PredictionUpdate,
)
from picks_api.core import metrics
from picks_api.core.auth import (
    RequestContext,
    get_request_context,
    require_content_editor,
    require_user,
)
from picks_api.core.config import settings
from picks_api.core.database import get_db
from picks_api.models import Prediction
from picks_api.repositories import AccessGrantRepository, PredictionRepository
from picks_api.services.access_policy import (
    LOCKED_FIELDS,
    can_view_prediction,
    visible_prediction_ids,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/predictions", tags=["predictions"])


def to_response(prediction: Prediction, visible: bool = True) -> PredictionResponse:
    """Serialize a prediction, withholding the pick when it is not visible."""
    response = PredictionResponse.model_validate(prediction)
    if visible:
        return response
    return response.model_copy(update={**{name: None for name in LOCKED_FIELDS}, "locked": True})


def _get_or_404(repo: PredictionRepository, prediction_id: int) -> Prediction:
    prediction = repo.find_by_id(prediction_id)
    if prediction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Prediction not found")
    return prediction


@router.get("", response_model=List[PredictionResponse])
def list_predictions(
    premium: Optional[bool] = Query(None, description="Only premium (true) or free (false) predictions"),
    limit: Optional[int] = Query(None, ge=1, description="Max number of predictions to return"),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
) -> List[PredictionResponse]:
    """
    List predictions, latest match first.

    Without ``premium`` both free and premium rows are returned, not only
    free ones. Premium rows the requester is not entitled to come back with
    ``locked: true`` and no pick or analysis.
    """
    repo = PredictionRepository(db)
    predictions = repo.list_predictions(
        is_premium=premium,
        limit=settings.clamp_limit(limit, settings.DEFAULT_PREDICTION_LIMIT),
    )
    visible = visible_prediction_ids(ctx.user, predictions, AccessGrantRepository(db))
    return [to_response(p, p.id in visible) for p in predictions]


@router.get("/{prediction_id}", response_model=PredictionResponse)
def get_prediction(
    prediction_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
) -> PredictionResponse:
    """Full prediction detail; 403 when premium-gated for this requester."""
    prediction = _get_or_404(PredictionRepository(db), prediction_id)

    if not can_view_prediction(ctx.user, prediction, AccessGrantRepository(db)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Premium subscription required"
        )
    return to_response(prediction)


@router.post("", response_model=PredictionResponse, status_code=status.HTTP_201_CREATED)
def create_prediction(
    payload: PredictionCreate,
    ctx: RequestContext = Depends(require_content_editor),
    db: Session = Depends(get_db),
) -> PredictionResponse:
    repo = PredictionRepository(db)
    try:
        prediction = repo.create(**payload.model_dump())
        repo.save()
    except SQLAlchemyError:
        repo.rollback()
        logger.exception("Failed to create prediction")
        raise

    logger.info(
        f"Prediction {prediction.id} created: {prediction.team1} vs {prediction.team2}",
        extra={"prediction_id": prediction.id, "premium": prediction.is_premium},
    )
    return to_response(repo.refresh(prediction))


@router.put("/{prediction_id}", response_model=PredictionResponse)
def update_prediction(
    prediction_id: int,
    payload: PredictionUpdate,
    ctx: RequestContext = Depends(require_content_editor),
    db: Session = Depends(get_db),
) -> PredictionResponse:
    """Partial update; status moves (scheduled -> ongoing -> won/lost) happen here."""
    repo = PredictionRepository(db)
    changes = payload.model_dump(exclude_unset=True)
    try:
        prediction = repo.update(prediction_id, changes)
        if prediction is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Prediction not found")
        repo.save()
    except SQLAlchemyError:
        repo.rollback()
        logger.exception(f"Failed to update prediction {prediction_id}")
        raise

    if "status" in changes:
        logger.info(
            f"Prediction {prediction_id} status set to {changes['status']}",
            extra={"prediction_id": prediction_id},
        )
    return to_response(repo.refresh(prediction))


@router.post(
    "/{prediction_id}/access",
    response_model=AccessGrantResponse,
    status_code=status.HTTP_201_CREATED,
)
def grant_prediction_access(
    prediction_id: int,
    ctx: RequestContext = Depends(require_user),
    db: Session = Depends(get_db),
) -> AccessGrantResponse:
    """Grant the caller standing access to one prediction."""
    _get_or_404(PredictionRepository(db), prediction_id)

    grants = AccessGrantRepository(db)
    if grants.has_grant(ctx.user_id, prediction_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Access already granted")

    try:
        grant = grants.grant(ctx.user_id, prediction_id)
        grants.save()
    except IntegrityError:
        # a concurrent request created the same grant
        grants.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Access already granted")

    metrics.prediction_access_grants_total.inc()
    logger.info(
        f"Access to prediction {prediction_id} granted",
        extra={"prediction_id": prediction_id},
    )
    return AccessGrantResponse.model_validate(grants.refresh(grant))
