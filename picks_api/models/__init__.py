"""
ORM models.

Usage:
    from picks_api.models import User, Prediction, BlogPost, UserPredictionAccess
"""
from picks_api.models.models import (
    Base,
    User,
    Prediction,
    BlogPost,
    UserPredictionAccess,
    SUBSCRIPTION_TIERS,
    PAID_TIERS,
    USER_ROLES,
    PREDICTION_STATUSES,
    RESOLVED_STATUSES,
)

__all__ = [
    "Base",
    "User",
    "Prediction",
    "BlogPost",
    "UserPredictionAccess",
    "SUBSCRIPTION_TIERS",
    "PAID_TIERS",
    "USER_ROLES",
    "PREDICTION_STATUSES",
    "RESOLVED_STATUSES",
]
