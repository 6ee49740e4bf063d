"""
Bearer token authentication and the per-request context.

Tokens are issued by the external identity provider and verified here with
PyJWT, either against a shared HS256 secret (AUTH_JWT_SECRET) or against the
provider's RS256 key set (AUTH_JWKS_URL). The first authenticated request of
a subject creates the local user row; later requests refresh profile fields
from the claims.

Handlers never read global session state: they declare one of the
dependencies below and receive a ``RequestContext``.

    @router.get("/me")
    def me(ctx: RequestContext = Depends(require_user)):
        return ctx.user
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import InvalidTokenError, PyJWKClient
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from picks_api.core.config import settings
from picks_api.core.database import get_db
from picks_api.core.logging import get_logger, set_user_id
from picks_api.models import User, USER_ROLES
from picks_api.repositories.user_repository import UserRepository

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_jwk_client: Optional[PyJWKClient] = None


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_jwk_client() -> PyJWKClient:
    global _jwk_client
    if _jwk_client is None:
        logger.info(f"Initializing JWKS client for {settings.AUTH_JWKS_URL}")
        _jwk_client = PyJWKClient(settings.AUTH_JWKS_URL)
    return _jwk_client


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token and return its claims.

    Raises:
        HTTPException: 401 if the token is invalid, or if no verification
            key is configured
    """
    decode_kwargs: Dict[str, Any] = {"options": {"verify_aud": False, "require": ["sub"]}}
    if settings.AUTH_JWT_AUDIENCE:
        decode_kwargs["audience"] = settings.AUTH_JWT_AUDIENCE
        decode_kwargs["options"]["verify_aud"] = True
    if settings.AUTH_JWT_ISSUER:
        decode_kwargs["issuer"] = settings.AUTH_JWT_ISSUER

    try:
        if settings.AUTH_JWKS_URL:
            signing_key = _get_jwk_client().get_signing_key_from_jwt(token)
            return jwt.decode(token, signing_key.key, algorithms=["RS256"], **decode_kwargs)
        if settings.AUTH_JWT_SECRET:
            return jwt.decode(token, settings.AUTH_JWT_SECRET, algorithms=["HS256"], **decode_kwargs)
    except InvalidTokenError as exc:
        logger.warning(f"Rejected bearer token: {exc}")
        raise _unauthorized("Invalid token") from exc

    logger.error("No token verification key configured (AUTH_JWT_SECRET / AUTH_JWKS_URL)")
    raise _unauthorized("Authentication is not configured")


def _profile_from_claims(claims: Dict[str, Any]) -> Dict[str, Any]:
    email = claims.get("email")
    return {
        "email": email.lower() if isinstance(email, str) else None,
        "first_name": claims.get("first_name") or claims.get("given_name"),
        "last_name": claims.get("last_name") or claims.get("family_name"),
        "profile_image_url": claims.get("profile_image_url") or claims.get("picture"),
    }


def sync_user(db: Session, claims: Dict[str, Any]) -> User:
    """
    Create or refresh the local user row for the token subject.

    An email claim already owned by another user is not copied. A write that
    still hits a unique constraint (a concurrent first login, or an email
    taken in between) is rolled back and the row is re-read, or created
    without the email.
    """
    users = UserRepository(db)
    subject = str(claims["sub"])
    profile = _profile_from_claims(claims)
    role = claims.get("role")
    role = role if role in USER_ROLES else None

    if profile["email"] and users.email_taken(profile["email"], exclude_id=subject):
        logger.warning(
            "Email claim belongs to another user, not synced",
            extra={"subject": subject},
        )
        profile["email"] = None

    user = users.find_by_id(subject)
    try:
        if user is None:
            user = users.upsert(subject, role=role, **profile)
            users.save()
            logger.info("Created user from identity claims", extra={"subject": subject})
        elif any(value is not None and getattr(user, key) != value for key, value in profile.items()):
            users.upsert(subject, **profile)
            users.save()
    except IntegrityError:
        users.rollback()
        logger.warning("User sync conflicted, retrying without email", extra={"subject": subject})
        user = users.find_by_id(subject)
        if user is None:
            user = users.upsert(subject, role=role, **{**profile, "email": None})
            users.save()
    return user


@dataclass
class RequestContext:
    """Everything a handler may know about who is calling."""
    correlation_id: str = ""
    claims: Dict[str, Any] = field(default_factory=dict)
    user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user is not None else None

    @property
    def is_admin(self) -> bool:
        if self.user is None:
            return False
        return self.user.is_admin or self.claims.get("role") == "admin"


def _base_context(request: Request) -> RequestContext:
    return RequestContext(correlation_id=getattr(request.state, "correlation_id", ""))


def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db),
) -> RequestContext:
    """
    Soft auth for public endpoints.

    No token, or a token that fails verification, yields an anonymous
    context; a valid token yields the synced user.
    """
    ctx = _base_context(request)
    if credentials is None:
        return ctx
    try:
        claims = decode_token(credentials.credentials)
    except HTTPException:
        return ctx

    ctx.claims = claims
    ctx.user = sync_user(db, claims)
    set_user_id(ctx.user.id)
    return ctx


def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db),
) -> RequestContext:
    """Strict auth: 401 unless a valid bearer token is presented."""
    if credentials is None:
        raise _unauthorized()

    ctx = _base_context(request)
    ctx.claims = decode_token(credentials.credentials)
    ctx.user = sync_user(db, ctx.claims)
    set_user_id(ctx.user.id)
    return ctx


def require_admin(ctx: RequestContext = Depends(require_user)) -> RequestContext:
    """Strict auth plus the admin role: 403 for authenticated non-admins."""
    if not ctx.is_admin:
        logger.warning("Admin route refused", extra={"subject": ctx.user_id})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return ctx


def require_content_editor(ctx: RequestContext = Depends(require_user)) -> RequestContext:
    """
    Guard for creating predictions and blog posts.

    Any authenticated user passes unless REQUIRE_ADMIN_FOR_CONTENT is set,
    in which case the admin role is required.
    """
    if settings.REQUIRE_ADMIN_FOR_CONTENT and not ctx.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return ctx
