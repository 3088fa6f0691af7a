"""
User, linked identity-provider Account and Session models
"""
from enum import Enum
from typing import Any, Dict

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer, String,
                        Text, UniqueConstraint)
from sqlalchemy.orm import relationship

from visionsprint.core.database import Base
from visionsprint.models.base import generate_id, isoformat, utcnow


class Discipline(str, Enum):
    """What a participant does day to day"""
    DEV = "DEV"
    PRODUCT = "PRODUCT"
    DATA = "DATA"
    DESIGNER = "DESIGNER"


DISCIPLINE_LABELS = {
    Discipline.DEV: "Developer",
    Discipline.PRODUCT: "Product",
    Discipline.DATA: "Data",
    Discipline.DESIGNER: "Designer",
}


class User(Base):
    """Hackathon participant"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=True, index=True)
    email_verified = Column(DateTime, nullable=True)
    image = Column(String(1024), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    access_verified = Column(Boolean, default=False, nullable=False)
    discipline = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, admin={self.is_admin})>"

    def to_public_dict(self) -> Dict[str, Any]:
        """Fields safe to show next to votes, joins and team members"""
        return {"id": self.id, "name": self.name, "image": self.image}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "image": self.image,
            "is_admin": self.is_admin,
            "access_verified": self.access_verified,
            "discipline": self.discipline,
            "created_at": isoformat(self.created_at),
        }


class Account(Base):
    """Identity-provider account linked to a user (one per provider identity)"""
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("provider", "provider_account_id", name="uq_accounts_provider_identity"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False, default="oauth")
    provider = Column(String(50), nullable=False)
    provider_account_id = Column(String(255), nullable=False)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    expires_at = Column(Integer, nullable=True)
    token_type = Column(String(50), nullable=True)
    scope = Column(Text, nullable=True)
    id_token = Column(Text, nullable=True)

    user = relationship("User", back_populates="accounts")

    def __repr__(self):
        return f"<Account(provider={self.provider}, user_id={self.user_id})>"


class Session(Base):
    """Browser session backed by an opaque cookie token"""
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(255), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_activity = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")

    def __repr__(self):
        return f"<Session(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"
