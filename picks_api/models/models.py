"""
Database models for the sports picks API.
"""
from datetime import datetime
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()

SUBSCRIPTION_TIERS = ("free", "pro", "expert")
PAID_TIERS = ("pro", "expert")
USER_ROLES = ("user", "admin")
PREDICTION_STATUSES = ("scheduled", "ongoing", "won", "lost")
RESOLVED_STATUSES = ("won", "lost")


class User(Base):
    """Account mirrored from the identity provider; `id` is the token subject."""
    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), unique=True, nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    profile_image_url = Column(String(1024), nullable=True)
    subscription_tier = Column(String(16), nullable=False, default="free")  # free, pro, expert
    subscription_expiry = Column(DateTime, nullable=True)  # stored, not enforced
    role = Column(String(16), nullable=False, default="user")  # user, admin
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    prediction_access = relationship(
        "UserPredictionAccess", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Prediction(Base):
    """A match forecast with its betting pick and outcome lifecycle."""
    __tablename__ = "predictions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_date = Column(DateTime, nullable=False, index=True)
    team1 = Column(String(255), nullable=False)
    team2 = Column(String(255), nullable=False)
    venue = Column(String(255), nullable=True)
    championship = Column(String(255), nullable=False, index=True)
    prediction_type = Column(String(64), nullable=False)  # 1N2, Over/Under, BTTS...
    prediction = Column(String(255), nullable=False)
    odds = Column(Numeric(4, 2, asdecimal=False), nullable=True)
    confidence = Column(Integer, nullable=True)  # 1-5 stars
    analysis = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="scheduled", index=True)
    actual_result = Column(String(255), nullable=True)
    is_premium = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user_access = relationship(
        "UserPredictionAccess", back_populates="prediction", cascade="all, delete-orphan"
    )


class BlogPost(Base):
    """Editorial article; listed publicly only once published."""
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    category = Column(String(64), nullable=False)
    author = Column(String(255), nullable=False)
    reading_time = Column(Integer, nullable=True)  # minutes
    featured_image = Column(String(1024), nullable=True)
    published = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class UserPredictionAccess(Base):
    """One user's standing permission to view one premium prediction."""
    __tablename__ = "user_prediction_access"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    prediction_id = Column(Integer, ForeignKey("predictions.id", ondelete="CASCADE"), nullable=False)
    purchased_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="prediction_access")
    prediction = relationship("Prediction", back_populates="user_access")

    __table_args__ = (
        UniqueConstraint("user_id", "prediction_id", name="uq_user_prediction_access"),
        Index("ix_user_prediction_access_user", "user_id"),
    )
