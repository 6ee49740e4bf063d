"""
HTTP endpoint integration tests for the sports picks API.

These tests verify that FastAPI endpoints:
- Return correct HTTP status codes
- Apply the premium access policy to lists and detail views
- Enforce authentication on member-only routes
- Report errors in the ``{"message": ...}`` shape

Uses FastAPI TestClient for in-memory HTTP testing.
"""
from datetime import datetime, timedelta

import pytest

# Add project root to path
import sys
from pathlib import Path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(PROJECT_ROOT / "tests"))
from conftest import make_token

from picks_api.core.config import settings
from picks_api.models import User, UserPredictionAccess
from picks_api.repositories import BlogPostRepository, UserRepository


# =============================================================================
# SERVICE ENDPOINTS
# =============================================================================

class TestServiceEndpoints:
    """Root, health and metrics."""

    def test_root(self, test_client):
        response = test_client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "running"
        assert data["endpoints"]["predictions"] == "/api/predictions"

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_correlation_id_is_echoed(self, test_client):
        response = test_client.get("/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_correlation_id_generated_when_missing(self, test_client):
        response = test_client.get("/health")
        assert response.headers.get("X-Correlation-ID")

    def test_metrics_exposed(self, test_client):
        response = test_client.get("/metrics")
        assert response.status_code == 200
        assert "premium_access_decisions_total" in response.text

    def test_unknown_route_uses_message_shape(self, test_client):
        response = test_client.get("/api/nothing-here")
        assert response.status_code == 404
        assert "message" in response.json()


# =============================================================================
# AUTH
# =============================================================================

class TestAuthEndpoints:

    def test_user_requires_token(self, test_client):
        response = test_client.get("/api/auth/user")
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized"}

    def test_invalid_token_is_rejected(self, test_client):
        token = make_token("user-free", secret="some-other-secret")
        response = test_client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_first_request_creates_user(self, test_client, db_session, auth_headers):
        response = test_client.get(
            "/api/auth/user",
            headers=auth_headers("new-user", email="New@Example.com", given_name="Nina"),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "new-user"
        assert data["email"] == "new@example.com"
        assert data["firstName"] == "Nina"
        assert data["subscriptionTier"] == "free"
        assert data["role"] == "user"
        assert db_session.get(User, "new-user") is not None

    def test_existing_user_profile(self, test_client, sample_users, auth_headers):
        response = test_client.get("/api/auth/user", headers=auth_headers("user-pro"))
        assert response.status_code == 200
        data = response.json()
        assert data["subscriptionTier"] == "pro"
        assert data["subscriptionExpiry"] is not None

    def test_granted_predictions(self, test_client, db_session, sample_users, sample_predictions, auth_headers):
        premium_id = sample_predictions["premium_old"].id
        db_session.add(UserPredictionAccess(user_id="user-free", prediction_id=premium_id))
        db_session.commit()

        response = test_client.get("/api/auth/user/access", headers=auth_headers("user-free"))
        assert response.status_code == 200
        assert response.json() == {"predictionIds": [premium_id]}

    def test_email_claim_owned_by_another_user_on_first_login(
        self, test_client, sample_users, sample_predictions, auth_headers
    ):
        headers = auth_headers("new-subject", email="free@example.com")

        listing = test_client.get("/api/predictions", headers=headers)
        assert listing.status_code == 200

        profile = test_client.get("/api/auth/user", headers=headers)
        assert profile.status_code == 200
        assert profile.json()["id"] == "new-subject"
        assert profile.json()["email"] is None

    def test_email_claim_owned_by_another_user_on_refresh(self, test_client, db_session, sample_users, auth_headers):
        response = test_client.get("/api/auth/user", headers=auth_headers("user-pro", email="free@example.com"))
        assert response.status_code == 200
        assert response.json()["email"] == "pro@example.com"

        db_session.expire_all()
        assert db_session.get(User, "user-free").email == "free@example.com"

    def test_email_taken_between_check_and_write(self, test_client, sample_users, auth_headers, monkeypatch):
        """The unique constraint still fires when the pre-check misses it."""
        monkeypatch.setattr(UserRepository, "email_taken", lambda self, email, exclude_id=None: False)

        response = test_client.get(
            "/api/auth/user", headers=auth_headers("new-subject", email="free@example.com")
        )
        assert response.status_code == 200
        assert response.json()["id"] == "new-subject"
        assert response.json()["email"] is None


# =============================================================================
# PREDICTIONS
# =============================================================================

class TestPredictionList:
    """GET /api/predictions"""

    def test_anonymous_sees_premium_rows_locked(self, test_client, sample_predictions):
        response = test_client.get("/api/predictions")
        assert response.status_code == 200
        rows = {row["id"]: row for row in response.json()}
        assert len(rows) == 4

        locked = rows[sample_predictions["premium_recent"].id]
        assert locked["locked"] is True
        assert locked["prediction"] is None
        assert locked["analysis"] is None
        assert locked["team1"] == "Real Madrid"

        free = rows[sample_predictions["free_recent"].id]
        assert free["locked"] is False
        assert free["prediction"] == "1"

    def test_locked_rows_keep_the_result(self, test_client, sample_predictions):
        rows = {row["id"]: row for row in test_client.get("/api/predictions").json()}
        assert rows[sample_predictions["premium_old"].id]["actualResult"] == "2-1"

    def test_pro_sees_everything(self, test_client, sample_users, sample_predictions, auth_headers):
        response = test_client.get("/api/predictions", headers=auth_headers("user-pro"))
        assert not any(row["locked"] for row in response.json())

    def test_ordered_by_match_date(self, test_client, sample_predictions):
        dates = [row["matchDate"] for row in test_client.get("/api/predictions").json()]
        assert dates == sorted(dates, reverse=True)

    @pytest.mark.parametrize("flag, expected", [("true", True), ("false", False)])
    def test_premium_filter(self, test_client, sample_predictions, flag, expected):
        rows = test_client.get(f"/api/predictions?premium={flag}").json()
        assert len(rows) == 2
        assert all(row["isPremium"] is expected for row in rows)

    def test_limit(self, test_client, sample_predictions):
        rows = test_client.get("/api/predictions?limit=2").json()
        assert len(rows) == 2

    def test_invalid_limit(self, test_client):
        response = test_client.get("/api/predictions?limit=0")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid data"

    def test_bad_token_is_treated_as_anonymous(self, test_client, sample_predictions):
        response = test_client.get("/api/predictions", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 200
        assert any(row["locked"] for row in response.json())


class TestPredictionDetail:
    """GET /api/predictions/{id}"""

    def test_free_prediction_is_public(self, test_client, sample_predictions):
        response = test_client.get(f"/api/predictions/{sample_predictions['free_old'].id}")
        assert response.status_code == 200
        data = response.json()
        assert data["team1"] == "Arsenal"
        assert data["status"] == "won"
        assert data["locked"] is False

    def test_premium_denied_to_anonymous(self, test_client, sample_predictions):
        response = test_client.get(f"/api/predictions/{sample_predictions['premium_recent'].id}")
        assert response.status_code == 403
        assert response.json() == {"message": "Premium subscription required"}

    def test_premium_denied_to_free_user(self, test_client, sample_users, sample_predictions, auth_headers):
        response = test_client.get(
            f"/api/predictions/{sample_predictions['premium_recent'].id}",
            headers=auth_headers("user-free"),
        )
        assert response.status_code == 403

    @pytest.mark.parametrize("sub", ["user-pro", "user-expert"])
    def test_premium_allowed_to_paid_tiers(self, test_client, sample_users, sample_predictions, auth_headers, sub):
        response = test_client.get(
            f"/api/predictions/{sample_predictions['premium_recent'].id}",
            headers=auth_headers(sub),
        )
        assert response.status_code == 200
        assert response.json()["prediction"] == "Over 2.5"

    def test_not_found(self, test_client):
        response = test_client.get("/api/predictions/9999")
        assert response.status_code == 404
        assert response.json() == {"message": "Prediction not found"}


class TestPredictionWrites:
    """POST and PUT /api/predictions"""

    @pytest.fixture
    def payload(self):
        return {
            "matchDate": (datetime.utcnow() + timedelta(days=3)).isoformat(),
            "team1": "Lyon",
            "team2": "Monaco",
            "championship": "Ligue 1",
            "predictionType": "Over/Under",
            "prediction": "Over 2.5",
            "odds": 1.72,
            "confidence": 3,
            "isPremium": True,
        }

    def test_create_requires_auth(self, test_client, payload):
        assert test_client.post("/api/predictions", json=payload).status_code == 401

    def test_create(self, test_client, sample_users, payload, auth_headers):
        response = test_client.post("/api/predictions", json=payload, headers=auth_headers("user-admin"))
        assert response.status_code == 201
        data = response.json()
        assert data["id"] > 0
        assert data["status"] == "scheduled"
        assert data["isPremium"] is True
        assert data["odds"] == pytest.approx(1.72)

    def test_create_open_to_members_by_default(self, test_client, sample_users, payload, auth_headers):
        response = test_client.post("/api/predictions", json=payload, headers=auth_headers("user-free"))
        assert response.status_code == 201

    def test_create_restricted_to_admins_when_configured(
        self, test_client, sample_users, payload, auth_headers, monkeypatch
    ):
        monkeypatch.setattr(settings, "REQUIRE_ADMIN_FOR_CONTENT", True)

        denied = test_client.post("/api/predictions", json=payload, headers=auth_headers("user-free"))
        allowed = test_client.post("/api/predictions", json=payload, headers=auth_headers("user-admin"))
        assert denied.status_code == 403
        assert allowed.status_code == 201

    @pytest.mark.parametrize("field, value", [
        ("confidence", 6),
        ("odds", 0),
        ("status", "void"),
        ("team1", ""),
    ])
    def test_create_rejects_invalid_fields(self, test_client, sample_users, payload, auth_headers, field, value):
        payload[field] = value
        response = test_client.post("/api/predictions", json=payload, headers=auth_headers("user-admin"))
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid data"

    def test_create_rejects_missing_required_field(self, test_client, sample_users, payload, auth_headers):
        del payload["championship"]
        response = test_client.post("/api/predictions", json=payload, headers=auth_headers("user-admin"))
        assert response.status_code == 400

    def test_create_rejects_unknown_field(self, test_client, sample_users, payload, auth_headers):
        payload["bookmaker"] = "somewhere"
        response = test_client.post("/api/predictions", json=payload, headers=auth_headers("user-admin"))
        assert response.status_code == 400

    def test_partial_update(self, test_client, sample_users, sample_predictions, auth_headers):
        prediction = sample_predictions["free_recent"]
        response = test_client.put(
            f"/api/predictions/{prediction.id}",
            json={"status": "won", "actualResult": "3-0"},
            headers=auth_headers("user-admin"),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "won"
        assert data["actualResult"] == "3-0"
        assert data["team1"] == "PSG"
        assert data["prediction"] == "1"

    def test_update_rejects_null_on_required_field(self, test_client, sample_users, sample_predictions, auth_headers):
        response = test_client.put(
            f"/api/predictions/{sample_predictions['free_recent'].id}",
            json={"team1": None},
            headers=auth_headers("user-admin"),
        )
        assert response.status_code == 400

    def test_update_missing(self, test_client, sample_users, auth_headers):
        response = test_client.put(
            "/api/predictions/9999", json={"status": "won"}, headers=auth_headers("user-admin")
        )
        assert response.status_code == 404


class TestPredictionAccessGrant:
    """POST /api/predictions/{id}/access"""

    def test_requires_auth(self, test_client, sample_predictions):
        response = test_client.post(f"/api/predictions/{sample_predictions['premium_recent'].id}/access")
        assert response.status_code == 401

    def test_grant_unlocks_prediction(self, test_client, sample_users, sample_predictions, auth_headers):
        premium_id = sample_predictions["premium_recent"].id
        headers = auth_headers("user-free")

        response = test_client.post(f"/api/predictions/{premium_id}/access", headers=headers)
        assert response.status_code == 201
        data = response.json()
        assert data["userId"] == "user-free"
        assert data["predictionId"] == premium_id
        assert data["purchasedAt"]

        detail = test_client.get(f"/api/predictions/{premium_id}", headers=headers)
        assert detail.status_code == 200

    def test_duplicate_grant(self, test_client, sample_users, sample_predictions, auth_headers):
        premium_id = sample_predictions["premium_recent"].id
        headers = auth_headers("user-free")

        test_client.post(f"/api/predictions/{premium_id}/access", headers=headers)
        response = test_client.post(f"/api/predictions/{premium_id}/access", headers=headers)
        assert response.status_code == 400
        assert response.json() == {"message": "Access already granted"}

    def test_unknown_prediction(self, test_client, db_session, sample_users, auth_headers):
        response = test_client.post("/api/predictions/9999/access", headers=auth_headers("user-free"))
        assert response.status_code == 404
        assert db_session.query(UserPredictionAccess).count() == 0


# =============================================================================
# BLOG
# =============================================================================

class TestBlogEndpoints:

    def test_list_published_only(self, test_client, sample_posts):
        response = test_client.get("/api/blog")
        assert response.status_code == 200
        assert [p["slug"] for p in response.json()] == [
            "five-rules-for-value-betting",
            "reading-the-ligue-1-table",
        ]

    def test_drafts_hidden_from_non_admins(self, test_client, sample_users, sample_posts, auth_headers):
        response = test_client.get("/api/blog?published=false", headers=auth_headers("user-pro"))
        assert "champions-league-preview" not in [p["slug"] for p in response.json()]

    def test_drafts_listed_for_admins(self, test_client, sample_users, sample_posts, auth_headers):
        response = test_client.get("/api/blog?published=false", headers=auth_headers("user-admin"))
        assert len(response.json()) == 3

    def test_limit(self, test_client, sample_posts):
        assert len(test_client.get("/api/blog?limit=1").json()) == 1

    def test_detail_requires_auth(self, test_client, sample_posts):
        response = test_client.get("/api/blog/five-rules-for-value-betting")
        assert response.status_code == 401

    def test_detail(self, test_client, sample_users, sample_posts, auth_headers):
        response = test_client.get("/api/blog/reading-the-ligue-1-table", headers=auth_headers("user-free"))
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Reading the Ligue 1 table"
        assert data["readingTime"] == 4

    def test_draft_detail_is_not_found_for_members(self, test_client, sample_users, sample_posts, auth_headers):
        response = test_client.get("/api/blog/champions-league-preview", headers=auth_headers("user-free"))
        assert response.status_code == 404

    def test_unknown_slug(self, test_client, sample_users, auth_headers):
        response = test_client.get("/api/blog/nope", headers=auth_headers("user-free"))
        assert response.status_code == 404
        assert response.json() == {"message": "Blog post not found"}

    def test_create_derives_slug_and_author(self, test_client, sample_users, auth_headers):
        response = test_client.post(
            "/api/blog",
            json={
                "title": "Derby Day: What To Expect",
                "content": "A look at the weekend derby.",
                "category": "preview",
                "published": True,
            },
            headers=auth_headers("user-admin"),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "derby-day-what-to-expect"
        assert data["author"] == "Ada Min"
        assert data["published"] is True

    def test_create_with_duplicate_slug(self, test_client, sample_users, sample_posts, auth_headers):
        response = test_client.post(
            "/api/blog",
            json={
                "title": "Five rules for value betting",
                "content": "Again.",
                "category": "strategy",
            },
            headers=auth_headers("user-admin"),
        )
        assert response.status_code == 409

    def test_create_slug_taken_concurrently(self, test_client, sample_users, sample_posts, auth_headers, monkeypatch):
        """A slug claimed after the existence check is still a conflict."""
        monkeypatch.setattr(BlogPostRepository, "slug_exists", lambda self, slug, exclude_id=None: False)

        response = test_client.post(
            "/api/blog",
            json={
                "title": "Five rules for value betting",
                "content": "Again.",
                "category": "strategy",
            },
            headers=auth_headers("user-admin"),
        )
        assert response.status_code == 409
        assert response.json() == {
            "message": "A blog post with slug 'five-rules-for-value-betting' already exists"
        }
        assert len(test_client.get("/api/blog").json()) == 2

    def test_create_requires_auth(self, test_client):
        response = test_client.post("/api/blog", json={"title": "x", "content": "y", "category": "z"})
        assert response.status_code == 401


# =============================================================================
# STATS & SUBSCRIPTION
# =============================================================================

class TestStatsEndpoint:

    def test_stats(self, test_client, sample_users, sample_predictions):
        response = test_client.get("/api/stats")
        assert response.status_code == 200
        assert response.json() == {
            "accuracy": 50,
            "totalPredictions": 4,
            "activeUsers": 4,
            "leagues": 3,
        }

    def test_stats_on_empty_database(self, test_client):
        assert test_client.get("/api/stats").json() == {
            "accuracy": 0,
            "totalPredictions": 0,
            "activeUsers": 0,
            "leagues": 0,
        }


class TestSubscriptionUpgrade:

    def test_requires_auth(self, test_client):
        response = test_client.post("/api/subscription/upgrade", json={"tier": "pro"})
        assert response.status_code == 401

    @pytest.mark.parametrize("tier", ["pro", "expert"])
    def test_upgrade(self, test_client, db_session, sample_users, auth_headers, tier):
        response = test_client.post(
            "/api/subscription/upgrade", json={"tier": tier}, headers=auth_headers("user-free")
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Subscription updated successfully"
        assert data["subscriptionTier"] == tier

        expiry = datetime.fromisoformat(data["subscriptionExpiry"])
        assert timedelta(days=27) < expiry - datetime.utcnow() <= timedelta(days=31)

        db_session.refresh(sample_users["free"])
        assert sample_users["free"].subscription_tier == tier

    def test_upgrade_unlocks_premium(self, test_client, sample_users, sample_predictions, auth_headers):
        headers = auth_headers("user-free")
        premium_id = sample_predictions["premium_recent"].id
        assert test_client.get(f"/api/predictions/{premium_id}", headers=headers).status_code == 403

        test_client.post("/api/subscription/upgrade", json={"tier": "pro"}, headers=headers)
        assert test_client.get(f"/api/predictions/{premium_id}", headers=headers).status_code == 200

    @pytest.mark.parametrize("tier", ["free", "platinum"])
    def test_invalid_tier(self, test_client, sample_users, auth_headers, tier):
        response = test_client.post(
            "/api/subscription/upgrade", json={"tier": tier}, headers=auth_headers("user-free")
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid subscription tier"}
