"""
Current-user routes.

Base path: /api/auth
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from picks_api.api.schemas import GrantedPredictionsResponse, UserResponse
from picks_api.core.auth import RequestContext, require_user
from picks_api.core.database import get_db
from picks_api.repositories import AccessGrantRepository

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/user", response_model=UserResponse)
def get_current_user(ctx: RequestContext = Depends(require_user)) -> UserResponse:
    """Profile of the authenticated caller, created on first sight."""
    return UserResponse.model_validate(ctx.user)


@router.get("/user/access", response_model=GrantedPredictionsResponse)
def get_granted_predictions(
    ctx: RequestContext = Depends(require_user),
    db: Session = Depends(get_db),
) -> GrantedPredictionsResponse:
    """Ids of the predictions the caller holds an individual grant for."""
    grants = AccessGrantRepository(db).list_for_user(ctx.user_id)
    return GrantedPredictionsResponse(prediction_ids=[g.prediction_id for g in grants])
