"""
Auth endpoints — magic link, verify, refresh, me, logout.

Sign-in flow:
- POST /api/auth/magic-link → email on the allow-list gets a single-use link
  (an active access code instead gets a session straight away)
- POST /api/auth/verify → link token exchanged for access + refresh tokens
- Requesting another link inside the cooldown returns 429
"""

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import models
from ..auth import (
    AccessPolicy,
    MagicLinkSender,
    create_access_token,
    create_magic_link_token,
    create_refresh_token,
    decode_token,
    get_access_policy,
    get_current_user,
    get_magic_link_sender,
    hash_token,
    store_refresh_token,
    store_token,
)
from ..config import settings
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

ACCESS_CODE_PRINCIPAL = "master@access-code.local"

RATE_LIMIT_MESSAGE = "Too many attempts. Please wait 60 seconds before sending another link."
ACCESS_DENIED_MESSAGE = "Access Denied: This email is not authorized to access Leocalc."


# --- Request/Response schemas ---

class MagicLinkRequest(BaseModel):
    email: str  # an email address, or an access code


class VerifyRequest(BaseModel):
    token: str


class RefreshRequest(BaseModel):
    refresh_token: str


def _user_to_response(user: models.User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "is_master": user.is_master,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "last_login_at": user.last_login_at.isoformat() if user.last_login_at else None,
    }


def _get_or_create_user(db: Session, email: str, is_master: bool = False) -> models.User:
    user = db.query(models.User).filter(models.User.email == email).first()
    if not user:
        user = models.User(email=email, is_master=is_master)
        db.add(user)
    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


def _issue_tokens(user: models.User, db: Session) -> dict:
    """Create access + refresh tokens for a user. Stores refresh token hash in DB."""
    access_token = create_access_token(user.id)
    refresh_token = create_refresh_token(user.id)
    store_refresh_token(db, user, refresh_token)
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user_id": user.id,
    }


# --- Endpoints ---

@router.post("/magic-link")
def request_magic_link(
    request: MagicLinkRequest,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
    sender: MagicLinkSender = Depends(get_magic_link_sender),
):
    """
    Send a sign-in link to an authorized email.

    An active access code skips the email step and returns tokens directly.
    """
    value = request.email.strip()

    if policy.matches_access_code(value):
        logger.warning("Access-code sign-in — no email verification performed")
        user = _get_or_create_user(db, ACCESS_CODE_PRINCIPAL, is_master=True)
        tokens = _issue_tokens(user, db)
        return {**tokens, "user": _user_to_response(user)}

    email = value.lower()
    if not policy.is_authorized(email):
        logger.warning("Rejected sign-in request for unauthorized email %s", email)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED_MESSAGE)

    cooldown_start = datetime.utcnow() - timedelta(seconds=settings.MAGIC_LINK_COOLDOWN_SECONDS)
    recent = db.query(models.AuthToken).filter(
        models.AuthToken.email == email,
        models.AuthToken.token_type == models.TokenType.MAGIC_LINK.value,
        models.AuthToken.created_at > cooldown_start,
    ).first()
    if recent:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=RATE_LIMIT_MESSAGE)

    token = create_magic_link_token(email)
    expires_at = datetime.utcnow() + timedelta(minutes=settings.MAGIC_LINK_EXPIRE_MINUTES)
    store_token(db, email, token, models.TokenType.MAGIC_LINK.value, expires_at)

    link = f"{settings.MAGIC_LINK_BASE_URL.rstrip('/')}/login?token={token}"
    sender.send(email, link)
    logger.info("Magic link issued for %s", email)
    return {"message": "Login link sent! Please check your email inbox."}


@router.post("/verify")
def verify_magic_link(
    request: VerifyRequest,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_access_policy),
):
    """Exchange a magic-link token for access + refresh tokens. Each link works once."""
    payload = decode_token(request.token)

    if payload.get("type") != models.TokenType.MAGIC_LINK.value:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type — expected a sign-in link",
        )

    db_token = db.query(models.AuthToken).filter(
        models.AuthToken.token_hash == hash_token(request.token),
        models.AuthToken.token_type == models.TokenType.MAGIC_LINK.value,
    ).first()

    if not db_token or db_token.used_at is not None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign-in link not found or already used",
        )

    if db_token.expires_at < datetime.utcnow():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign-in link expired")

    email = payload.get("sub", "")
    # Allow-list is re-checked so removing an address also kills its pending links
    if not policy.is_authorized(email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED_MESSAGE)

    user = _get_or_create_user(db, email)
    db_token.used_at = datetime.utcnow()
    db_token.user_id = user.id
    db.commit()

    logger.info("User %s signed in", email)
    tokens = _issue_tokens(user, db)
    return {**tokens, "user": _user_to_response(user)}


@router.post("/refresh")
def refresh(request: RefreshRequest, db: Session = Depends(get_db)):
    """Exchange a valid refresh token for a new access token."""
    payload = decode_token(request.refresh_token)

    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type — expected refresh token",
        )

    db_token = db.query(models.AuthToken).filter(
        models.AuthToken.token_hash == hash_token(request.refresh_token),
        models.AuthToken.token_type == models.TokenType.REFRESH.value,
    ).first()

    if not db_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token not found — it may have been revoked",
        )

    if db_token.expires_at < datetime.utcnow():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token expired")

    user = db.query(models.User).filter(models.User.id == int(payload["sub"])).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    return {
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user_id": user.id,
    }


@router.get("/me")
def me(current_user: models.User = Depends(get_current_user)):
    """Return the current authenticated user."""
    return _user_to_response(current_user)


@router.post("/logout")
def logout(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Revoke every refresh token the user holds. Access tokens expire on their own."""
    revoked = db.query(models.AuthToken).filter(
        models.AuthToken.user_id == current_user.id,
        models.AuthToken.token_type == models.TokenType.REFRESH.value,
    ).delete()
    db.commit()
    logger.info("User %s signed out (%d refresh tokens revoked)", current_user.email, revoked)
    return {"ok": True, "revoked": revoked}
