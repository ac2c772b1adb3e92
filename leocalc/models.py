from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
import enum


class ArchiveType(str, enum.Enum):
    CALCULATOR = "calculator"
    SCHEDULE = "schedule"
    QUANTITIES = "quantities"


class TokenType(str, enum.Enum):
    MAGIC_LINK = "magic_link"
    REFRESH = "refresh"


# Namespaced workspace keys — one JSON document per screen.
WORKSPACE_KEYS = {
    "po_details": "leocalc_poDetails",
    "vendors": "leocalc_vendors",
    "supplies": "leocalc_supplies",
    "products": "leocalc_products",
}


class User(Base):
    """Signed-in principals. Created on first successful magic-link or access-code sign-in."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False)
    is_master = Column(Boolean, default=False)  # signed in with an access code, not an email proof
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login_at = Column(DateTime, nullable=True)

    auth_tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")


class AuthToken(Base):
    """Magic-link and refresh tokens, stored hashed. Access tokens are stateless."""
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # null until a magic link is used
    email = Column(String, nullable=False, index=True)
    token_hash = Column(String, nullable=False, index=True)
    token_type = Column(String, default=TokenType.REFRESH.value)
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="auth_tokens")


class Archive(Base):
    """Saved snapshot of a calculator, schedule or quantities screen.

    DECISION: the legacy `calculations` table is folded in here as type="calculator".
    """
    __tablename__ = "archives"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False, index=True)  # ArchiveType value
    company_name = Column(String, nullable=False, index=True)
    record_name = Column(String, nullable=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class WorkspaceEntry(Base):
    """Key/value store for live screen state. Last write wins."""
    __tablename__ = "workspace_entries"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
