"""
Repository layer for data access.

Usage:
    from picks_api.repositories import PredictionRepository
    from picks_api.core.database import SessionLocal

    db = SessionLocal()
    repo = PredictionRepository(db)
    latest = repo.list_predictions(limit=10)
    db.close()
"""

from picks_api.repositories.base import BaseRepository
from picks_api.repositories.user_repository import UserRepository
from picks_api.repositories.prediction_repository import PredictionRepository
from picks_api.repositories.blog_repository import BlogPostRepository
from picks_api.repositories.access_repository import AccessGrantRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PredictionRepository",
    "BlogPostRepository",
    "AccessGrantRepository",
]
