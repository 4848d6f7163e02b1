"""Shared business logic for barter postings."""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from skillbarter.auth import Auth, require_caller
from skillbarter.constants import (
    ALL_CATEGORIES,
    BARTER_EXPIRY_DAYS,
    DEFAULT_PAGE_SIZE,
    PROFILE_NOT_FOUND,
)
from skillbarter.database import storage_call
from skillbarter.errors import ConflictError, NotFoundError, ValidationError
from skillbarter.models import Barter, BarterMode, Category, Skill, User, utcnow
from skillbarter.schemas import BarterCreate, BarterResponse
from skillbarter.services.skill_catalog import SkillCatalog
from skillbarter.utils import ensure_utc

logger = logging.getLogger(__name__)

EXPIRY_WINDOW = timedelta(days=BARTER_EXPIRY_DAYS)

# --------------- Derived display fields ---------------


def expires_at(created_at: datetime) -> datetime:
    return ensure_utc(created_at) + EXPIRY_WINDOW


def is_expired(created_at: datetime, now: Optional[datetime] = None) -> bool:
    """True once strictly more than the expiry window has elapsed since creation."""
    now = ensure_utc(now) if now else utcnow()
    return now - ensure_utc(created_at) > EXPIRY_WINDOW


def display_mode(mode: str) -> str:
    return "Online" if mode == BarterMode.ONLINE.value else "In-person"


def time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Human-readable age: "just now", "N min ago", "N hours ago" or "N days ago"."""
    now = ensure_utc(now) if now else utcnow()
    seconds = int((now - ensure_utc(created_at)).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60} min ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


def barter_fields(barter: Barter, now: Optional[datetime] = None) -> dict:
    """Stored columns plus the computed-on-read fields."""
    created = ensure_utc(barter.created_at)
    return {
        "id": barter.id,
        "owner_id": barter.owner_id,
        "title": barter.title,
        "description": barter.description,
        "mode": barter.mode,
        "teach_skill_id": barter.teach_skill_id,
        "learn_skill_id": barter.learn_skill_id,
        "skill_rating": barter.skill_rating,
        "created_at": created,
        "expires_at": expires_at(created),
        "is_expired": is_expired(created, now),
        "display_mode": display_mode(barter.mode),
        "time_ago": time_ago(created, now),
    }


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Turn pydantic's error list into one short sentence for the user."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = err.get("msg", "invalid value").removeprefix("Value error, ")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid input"


# --------------- Catalog ---------------


class BarterCatalog:
    """Create, list and query barter postings.

    Args:
        db: Database session.
        auth: Auth collaborator for the calling user.
        skills: Skill catalog used to resolve skill ids.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        db: Session,
        auth: Auth,
        skills: Optional[SkillCatalog] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.auth = auth
        self.skills = skills or SkillCatalog(db)
        self.clock = clock

    def create_barter(
        self,
        owner_id: str,
        title: str,
        description: str,
        mode: str,
        teach_skill_id: int,
        learn_skill_id: int,
        rating: Optional[int] = None,
    ) -> Barter:
        """Validate the fields and store a new barter owned by ``owner_id``.

        Raises:
            AuthenticationError: No valid session.
            AuthorizationError: ``owner_id`` is not the signed-in user.
            ValidationError: Any field is malformed or a skill id does not resolve.
        """
        try:
            payload = BarterCreate(
                title=title,
                description=description,
                mode=mode,
                teach_skill_id=teach_skill_id,
                learn_skill_id=learn_skill_id,
                skill_rating=rating,
            )
        except PydanticValidationError as e:
            logger.warning("Rejected barter from %s: %s", owner_id, e.error_count())
            raise ValidationError(describe_validation_error(e)) from e
        return self.add_barter(owner_id, payload)

    def add_barter(self, owner_id: str, payload: BarterCreate) -> Barter:
        """Store an already-validated payload after checking the caller and skill ids."""
        require_caller(self.auth, owner_id)

        known = self.skills.skills_by_id([payload.teach_skill_id, payload.learn_skill_id])
        missing = [sid for sid in (payload.teach_skill_id, payload.learn_skill_id) if sid not in known]
        if missing:
            raise ValidationError(
                f"Unknown skill: {', '.join(str(s) for s in missing)}", skill_ids=missing,
            )

        barter = Barter(
            owner_id=owner_id,
            title=payload.title,
            description=payload.description,
            mode=payload.mode.value,
            teach_skill_id=payload.teach_skill_id,
            learn_skill_id=payload.learn_skill_id,
            skill_rating=payload.skill_rating,
            created_at=self.clock(),
        )
        with storage_call(self.db, "create_barter"):
            self.db.add(barter)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                if self.db.get(User, owner_id) is None:
                    logger.warning("Barter from user %s without a profile", owner_id)
                    raise NotFoundError(PROFILE_NOT_FOUND, user_id=owner_id) from e
                logger.error("Barter insert rejected for user %s", owner_id, exc_info=e)
                raise ConflictError("Your barter couldn't be saved. Please try again.") from e
            self.db.refresh(barter)
        logger.info("Barter #%s created by %s", barter.id, owner_id)
        return barter

    def get_barter(self, barter_id: int) -> Barter:
        with storage_call(self.db, "get_barter"):
            barter = self.db.get(Barter, barter_id)
        if barter is None:
            raise NotFoundError("That barter no longer exists.", barter_id=barter_id)
        return barter

    def list_barters(
        self,
        category: Optional[str] = None,
        owner_id: Optional[str] = None,
        limit: Optional[int] = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[Barter]:
        """Newest first. ``category`` matches the taught or the wanted skill's category name."""
        query = self.db.query(Barter)
        if category and category != ALL_CATEGORIES:
            teach, learn = aliased(Skill), aliased(Skill)
            teach_cat, learn_cat = aliased(Category), aliased(Category)
            wanted = category.strip().lower()
            query = (
                query.outerjoin(teach, Barter.teach_skill_id == teach.id)
                .outerjoin(teach_cat, teach.category_id == teach_cat.id)
                .outerjoin(learn, Barter.learn_skill_id == learn.id)
                .outerjoin(learn_cat, learn.category_id == learn_cat.id)
                .filter(or_(func.lower(teach_cat.name) == wanted, func.lower(learn_cat.name) == wanted))
            )
        if owner_id:
            query = query.filter(Barter.owner_id == owner_id)

        query = query.order_by(desc(Barter.created_at), desc(Barter.id)).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        with storage_call(self.db, "list_barters"):
            return query.all()

    def count_barters(self, owner_id: Optional[str] = None) -> int:
        query = self.db.query(func.count(Barter.id))
        if owner_id:
            query = query.filter(Barter.owner_id == owner_id)
        with storage_call(self.db, "count_barters"):
            return query.scalar() or 0

    def describe(self, barter: Barter) -> BarterResponse:
        return BarterResponse(**barter_fields(barter, self.clock()))
