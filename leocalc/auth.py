"""
Sign-in policy, magic-link tokens and JWT sessions.

Who may sign in is decided by an AccessPolicy built from settings:
- AUTHORIZED_EMAILS — addresses that may request a magic link
- ACCESS_CODE_HASHES — bcrypt hashes of shared access codes

Access codes are a weak gate: typing a code grants a session with no proof
of email ownership. They exist for parity with the shop-floor login and are
logged on every use. Remove a hash from configuration (or call
AccessPolicy.revoke_access_code) to shut one off.

Libraries: python-jose[cryptography] for JWT, passlib[bcrypt] for access codes.
"""

import hashlib
import logging
import uuid
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from . import models

logger = logging.getLogger(__name__)

# --- Access codes ---

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_access_code(code: str) -> str:
    return pwd_context.hash(code)


class AccessPolicy:
    """Authorized principals plus revocable access codes."""

    def __init__(self, authorized_emails=None, access_code_hashes=None):
        self.authorized_emails = {e.strip().lower() for e in (authorized_emails or []) if e.strip()}
        self.access_code_hashes = list(access_code_hashes or [])

    @classmethod
    def from_settings(cls) -> "AccessPolicy":
        return cls(settings.AUTHORIZED_EMAILS, settings.ACCESS_CODE_HASHES)

    def is_authorized(self, email: str) -> bool:
        return (email or "").strip().lower() in self.authorized_emails

    def _matching_hash(self, code: str):
        if not code:
            return None
        for code_hash in self.access_code_hashes:
            try:
                if pwd_context.verify(code, code_hash):
                    return code_hash
            except ValueError:
                logger.warning("Ignoring malformed access code hash in configuration")
        return None

    def matches_access_code(self, code: str) -> bool:
        return self._matching_hash((code or "").strip()) is not None

    def revoke_access_code(self, code: str) -> bool:
        """Stop accepting a code. Returns False if it was not active."""
        code_hash = self._matching_hash((code or "").strip())
        if code_hash is None:
            return False
        self.access_code_hashes.remove(code_hash)
        logger.info("Access code revoked")
        return True


_policy = None


def get_access_policy() -> AccessPolicy:
    """FastAPI dependency — the process-wide policy, built from settings on first use."""
    global _policy
    if _policy is None:
        _policy = AccessPolicy.from_settings()
    return _policy


# --- Magic link delivery ---

class MagicLinkSender:
    """Delivers sign-in links. The default just logs them for the operator to forward."""

    def send(self, email: str, link: str) -> None:
        logger.info("Magic link for %s: %s", email, link)


def get_magic_link_sender() -> MagicLinkSender:
    return MagicLinkSender()


# --- JWT tokens ---

security = HTTPBearer(auto_error=False)


def _get_jwt_secret() -> str:
    """Get JWT secret, failing loudly if not configured."""
    secret = settings.JWT_SECRET
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT_SECRET not configured — set it in environment variables",
        )
    return secret


def create_access_token(user_id: int) -> str:
    """Create a short-lived access token."""
    expire = datetime.utcnow() + timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(user_id: int) -> str:
    """Create a long-lived refresh token. Raw token returned; hash stored in DB."""
    expire = datetime.utcnow() + timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)
    payload = {
        "sub": str(user_id),
        "exp": expire,
        "type": "refresh",
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def create_magic_link_token(email: str) -> str:
    """Single-use sign-in token for an email address."""
    expire = datetime.utcnow() + timedelta(minutes=settings.MAGIC_LINK_EXPIRE_MINUTES)
    payload = {
        "sub": email,
        "exp": expire,
        "type": models.TokenType.MAGIC_LINK.value,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def hash_token(token: str) -> str:
    """SHA-256 hash of a token for storage."""
    return hashlib.sha256(token.encode()).hexdigest()


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Raises HTTPException on failure."""
    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def store_token(db: Session, email: str, token: str, token_type: str,
                expires_at: datetime, user_id: int = None) -> models.AuthToken:
    """Store a hashed magic-link or refresh token."""
    db_token = models.AuthToken(
        user_id=user_id,
        email=email,
        token_hash=hash_token(token),
        token_type=token_type,
        expires_at=expires_at,
    )
    db.add(db_token)
    db.commit()
    return db_token


def store_refresh_token(db: Session, user: models.User, token: str) -> models.AuthToken:
    expire = datetime.utcnow() + timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)
    return store_token(db, user.email, token, models.TokenType.REFRESH.value, expire, user_id=user.id)


# --- FastAPI dependency: get current user from JWT ---

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> models.User:
    """FastAPI dependency — extracts and validates JWT, returns User object."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type — use an access token",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    user = db.query(models.User).filter(models.User.id == int(user_id)).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user
