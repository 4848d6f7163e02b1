"""SQLAlchemy models for Skill Barter."""
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)

from skillbarter.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_SKILL_NAME_LENGTH,
    MAX_TITLE_LENGTH,
    MAX_USERNAME_LENGTH,
)
from skillbarter.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BarterMode(str, enum.Enum):
    """Where the exchange takes place."""
    ONLINE = "online"
    OFFLINE = "offline"


class RequestStatus(str, enum.Enum):
    """Barter request lifecycle statuses."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"


ACTIVE_REQUEST_STATUSES = (RequestStatus.PENDING.value, RequestStatus.ACCEPTED.value)
TERMINAL_REQUEST_STATUSES = (
    RequestStatus.ACCEPTED.value,
    RequestStatus.DECLINED.value,
    RequestStatus.CANCELLED.value,
)

_ACTIVE_STATUS_CLAUSE = "status IN ('pending', 'accepted')"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(MAX_SKILL_NAME_LENGTH), nullable=False, unique=True)


class Subcategory(Base):
    __tablename__ = "subcategories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(MAX_SKILL_NAME_LENGTH), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)


class Skill(Base):
    """Immutable reference data."""
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(MAX_SKILL_NAME_LENGTH), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    subcategory_id = Column(Integer, ForeignKey("subcategories.id"), nullable=True, index=True)


class User(Base):
    """Profile row. The id is issued by the auth provider."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    username = Column(String(MAX_USERNAME_LENGTH), nullable=True)
    email = Column(String(MAX_EMAIL_LENGTH), nullable=True)
    skills_selected = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class UserSkill(Base):
    """Skills a user picked during onboarding."""
    __tablename__ = "user_skills"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "skill_id", name="uq_user_skills_user_skill"),)


class Barter(Base):
    """A posting offering one skill in exchange for learning another."""
    __tablename__ = "barters"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(MAX_TITLE_LENGTH), nullable=False)
    description = Column(String(MAX_DESCRIPTION_LENGTH), nullable=False)
    mode = Column(String(20), default=BarterMode.ONLINE.value, nullable=False)
    teach_skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    learn_skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    skill_rating = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)


class Bookmark(Base):
    __tablename__ = "bookmarks"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    barter_id = Column(Integer, ForeignKey("barters.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (UniqueConstraint("user_id", "barter_id", name="uq_bookmarks_user_barter"),)


class BarterRequest(Base):
    """A proposal from one user to exchange with a barter's owner."""
    __tablename__ = "barter_requests"

    id = Column(Integer, primary_key=True, index=True)
    barter_id = Column(Integer, ForeignKey("barters.id"), nullable=False)
    requester_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    # Copy of the barter's owner at creation time
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), default=RequestStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    __table_args__ = (
        # At most one pending/accepted request per (barter, requester)
        Index(
            "uq_barter_requests_active",
            "barter_id",
            "requester_id",
            unique=True,
            sqlite_where=text(_ACTIVE_STATUS_CLAUSE),
            postgresql_where=text(_ACTIVE_STATUS_CLAUSE),
        ),
        Index("ix_barter_requests_barter_requester", "barter_id", "requester_id"),
    )
