"""Shared pytest fixtures for the sports picks API tests."""
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Generator

# Settings are read at import time: point them at test values first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-signing-secret"
os.environ["AUTH_JWKS_URL"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_JSON"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import jwt
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

TEST_JWT_SECRET = os.environ["AUTH_JWT_SECRET"]


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite database per test."""
    from picks_api.models import Base

    # StaticPool keeps the single in-memory connection shared with the
    # TestClient worker threads
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture(scope="function")
def test_client(db_session):
    """
    FastAPI TestClient bound to the per-test database.

    Created without the context manager so the lifespan (table creation on
    the configured engine) does not run.
    """
    from fastapi.testclient import TestClient
    from picks_api.main import app
    from picks_api.core.database import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


# =============================================================================
# AUTH HELPERS
# =============================================================================

def make_token(sub: str, secret: str = TEST_JWT_SECRET, **claims) -> str:
    """Mint an HS256 bearer token the way the identity provider would."""
    payload = {
        "sub": sub,
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + timedelta(hours=1),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Build an Authorization header for a subject: auth_headers("user-1", role="admin")."""
    def _headers(sub: str, **claims) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(sub, **claims)}"}
    return _headers


# =============================================================================
# SAMPLE DATA
# =============================================================================

@pytest.fixture
def sample_users(db_session: Session):
    """One user per tier plus an admin, keyed by name."""
    from picks_api.models import User

    now = datetime.utcnow()
    users = {
        "free": User(id="user-free", email="free@example.com", first_name="Fanny",
                     subscription_tier="free", role="user",
                     created_at=now - timedelta(days=3), updated_at=now),
        "pro": User(id="user-pro", email="pro@example.com", first_name="Paul",
                    subscription_tier="pro", subscription_expiry=now + timedelta(days=20),
                    role="user", created_at=now - timedelta(days=2), updated_at=now),
        "expert": User(id="user-expert", email="expert@example.com",
                       subscription_tier="expert", role="user",
                       created_at=now - timedelta(days=1), updated_at=now),
        "admin": User(id="user-admin", email="admin@example.com", first_name="Ada", last_name="Min",
                      subscription_tier="free", role="admin",
                      created_at=now, updated_at=now),
    }
    db_session.add_all(users.values())
    db_session.commit()
    return users


def build_prediction(**overrides):
    """Prediction with sensible defaults for the required columns."""
    from picks_api.models import Prediction

    now = datetime.utcnow()
    values = {
        "match_date": now + timedelta(days=1),
        "team1": "PSG",
        "team2": "Marseille",
        "venue": "Parc des Princes",
        "championship": "Ligue 1",
        "prediction_type": "1N2",
        "prediction": "1",
        "odds": 1.85,
        "confidence": 4,
        "analysis": "PSG unbeaten at home this season.",
        "status": "scheduled",
        "is_premium": False,
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return Prediction(**values)


@pytest.fixture
def sample_predictions(db_session: Session):
    """Two free and two premium predictions across three championships."""
    now = datetime.utcnow()
    predictions = {
        "free_recent": build_prediction(match_date=now + timedelta(days=2)),
        "free_old": build_prediction(
            match_date=now - timedelta(days=5), team1="Arsenal", team2="Chelsea",
            championship="Premier League", status="won", actual_result="2-0",
        ),
        "premium_recent": build_prediction(
            match_date=now + timedelta(days=1), team1="Real Madrid", team2="Barcelona",
            championship="La Liga", prediction_type="Over/Under", prediction="Over 2.5",
            analysis="Both sides average three goals per Clasico.", is_premium=True,
        ),
        "premium_old": build_prediction(
            match_date=now - timedelta(days=3), team1="Inter", team2="Milan",
            championship="La Liga", prediction="X", status="lost", actual_result="2-1",
            is_premium=True,
        ),
    }
    db_session.add_all(predictions.values())
    db_session.commit()
    return predictions


def build_post(**overrides):
    from picks_api.models import BlogPost

    now = datetime.utcnow()
    values = {
        "title": "Five rules for value betting",
        "slug": "five-rules-for-value-betting",
        "excerpt": "Stop chasing long odds.",
        "content": "Value betting means backing outcomes priced above their probability.",
        "category": "strategy",
        "author": "Ada Min",
        "reading_time": 4,
        "published": True,
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return BlogPost(**values)


@pytest.fixture
def sample_posts(db_session: Session):
    """Two published posts and one draft."""
    now = datetime.utcnow()
    posts = {
        "newest": build_post(created_at=now),
        "older": build_post(
            title="Reading the Ligue 1 table", slug="reading-the-ligue-1-table",
            category="analysis", created_at=now - timedelta(days=7),
        ),
        "draft": build_post(
            title="Champions League preview", slug="champions-league-preview",
            published=False, created_at=now - timedelta(days=1),
        ),
    }
    db_session.add_all(posts.values())
    db_session.commit()
    return posts
