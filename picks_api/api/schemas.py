"""
Request and response models.

Field names are snake_case in Python and camelCase on the wire
(``is_premium`` <-> ``isPremium``); request bodies accept either form.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SubscriptionTier = Literal["free", "pro", "expert"]
UserRole = Literal["user", "admin"]
PredictionStatus = Literal["scheduled", "ongoing", "won", "lost"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StrictCamelModel(CamelModel):
    """Request body base: unknown fields are a validation error."""
    model_config = ConfigDict(extra="forbid")


def _reject_null(value, info):
    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value


# ==================== PREDICTIONS ====================

class PredictionCreate(StrictCamelModel):
    """Body of POST /api/predictions."""
    match_date: datetime
    team1: str = Field(..., min_length=1, max_length=255)
    team2: str = Field(..., min_length=1, max_length=255)
    venue: Optional[str] = Field(None, max_length=255)
    championship: str = Field(..., min_length=1, max_length=255)
    prediction_type: str = Field(..., min_length=1, max_length=64, description="1N2, Over/Under, ...")
    prediction: str = Field(..., min_length=1, max_length=255)
    odds: Optional[float] = Field(None, gt=0, lt=100)
    confidence: Optional[int] = Field(None, ge=1, le=5, description="1-5 stars")
    analysis: Optional[str] = None
    status: PredictionStatus = "scheduled"
    actual_result: Optional[str] = Field(None, max_length=255)
    is_premium: bool = False


class PredictionUpdate(StrictCamelModel):
    """Body of PUT /api/predictions/{id}; only supplied fields change."""
    match_date: Optional[datetime] = None
    team1: Optional[str] = Field(None, min_length=1, max_length=255)
    team2: Optional[str] = Field(None, min_length=1, max_length=255)
    venue: Optional[str] = Field(None, max_length=255)
    championship: Optional[str] = Field(None, min_length=1, max_length=255)
    prediction_type: Optional[str] = Field(None, min_length=1, max_length=64)
    prediction: Optional[str] = Field(None, min_length=1, max_length=255)
    odds: Optional[float] = Field(None, gt=0, lt=100)
    confidence: Optional[int] = Field(None, ge=1, le=5)
    analysis: Optional[str] = None
    status: Optional[PredictionStatus] = None
    actual_result: Optional[str] = Field(None, max_length=255)
    is_premium: Optional[bool] = None

    check_not_null = field_validator(
        "match_date", "team1", "team2", "championship", "prediction_type",
        "prediction", "status", "is_premium",
    )(_reject_null)


class PredictionResponse(CamelModel):
    id: int
    match_date: datetime
    team1: str
    team2: str
    venue: Optional[str] = None
    championship: str
    prediction_type: str
    prediction: Optional[str] = None
    odds: Optional[float] = None
    confidence: Optional[int] = None
    analysis: Optional[str] = None
    status: str
    actual_result: Optional[str] = None
    is_premium: bool
    locked: bool = Field(False, description="Pick and analysis withheld from this requester")
    created_at: datetime
    updated_at: datetime


class AccessGrantResponse(CamelModel):
    id: int
    user_id: str
    prediction_id: int
    purchased_at: datetime


# ==================== BLOG ====================

class BlogPostCreate(StrictCamelModel):
    """Body of POST /api/blog. A missing slug is derived from the title."""
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    excerpt: Optional[str] = None
    content: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=64)
    author: Optional[str] = Field(None, max_length=255, description="Defaults to the requester's name")
    reading_time: Optional[int] = Field(None, ge=1, description="Minutes")
    featured_image: Optional[str] = Field(None, max_length=1024)
    published: bool = False


class BlogPostUpdate(StrictCamelModel):
    """Body of PUT /api/admin/blog/{id}."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    excerpt: Optional[str] = None
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1, max_length=64)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    reading_time: Optional[int] = Field(None, ge=1)
    featured_image: Optional[str] = Field(None, max_length=1024)
    published: Optional[bool] = None

    check_not_null = field_validator(
        "title", "slug", "content", "category", "author", "published",
    )(_reject_null)


class BlogPostResponse(CamelModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    category: str
    author: str
    reading_time: Optional[int] = None
    featured_image: Optional[str] = None
    published: bool
    created_at: datetime
    updated_at: datetime


# ==================== USERS ====================

class UserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    subscription_tier: str
    subscription_expiry: Optional[datetime] = None
    role: str
    created_at: datetime
    updated_at: datetime


class AdminUserUpdate(StrictCamelModel):
    """Body of PUT /api/admin/users/{id}."""
    email: Optional[str] = Field(None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    profile_image_url: Optional[str] = Field(None, max_length=1024)
    subscription_tier: Optional[SubscriptionTier] = None
    subscription_expiry: Optional[datetime] = None
    role: Optional[UserRole] = None

    check_not_null = field_validator("subscription_tier", "role")(_reject_null)


class SubscriptionUpgradeRequest(CamelModel):
    tier: str = Field(..., description="pro or expert")


# ==================== MISC ====================

class StatsResponse(CamelModel):
    accuracy: int = Field(..., description="Win rate over resolved predictions (%)")
    total_predictions: int
    active_users: int
    leagues: int


class MessageResponse(BaseModel):
    message: str


class GrantedPredictionsResponse(CamelModel):
    prediction_ids: List[int]
