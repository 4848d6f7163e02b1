"""Onboarding skill selection and profile stats."""
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from skillbarter.auth import Auth, require_caller
from skillbarter.constants import MAX_SELECTED_SKILLS, PROFILE_NOT_FOUND
from skillbarter.database import storage_call
from skillbarter.errors import NotFoundError, ValidationError
from skillbarter.models import Barter, Skill, User, UserSkill
from skillbarter.schemas import ProfileStats
from skillbarter.services.skill_catalog import SkillCatalog

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: Session, auth: Auth, skills: Optional[SkillCatalog] = None) -> None:
        self.db = db
        self.auth = auth
        self.skills = skills or SkillCatalog(db)

    def select_skills(self, user_id: str, skill_ids: list[int]) -> list[Skill]:
        """Replace the user's skills with ``skill_ids`` (1 to 3 known skills)."""
        require_caller(self.auth, user_id)
        unique_ids = list(dict.fromkeys(skill_ids))
        if not unique_ids:
            raise ValidationError("Please select at least one skill.")
        if len(unique_ids) > MAX_SELECTED_SKILLS:
            raise ValidationError(f"You can select a maximum of {MAX_SELECTED_SKILLS} skills.")
        known = self.skills.skills_by_id(unique_ids)
        missing = [sid for sid in unique_ids if sid not in known]
        if missing:
            raise ValidationError(f"Unknown skill: {', '.join(str(s) for s in missing)}", skill_ids=missing)

        with storage_call(self.db, "select_skills"):
            user = self.db.get(User, user_id)
            if user is None:
                raise NotFoundError(PROFILE_NOT_FOUND, user_id=user_id)
            # Delete and insert in one transaction
            self.db.query(UserSkill).filter(UserSkill.user_id == user_id).delete(synchronize_session=False)
            self.db.add_all(UserSkill(user_id=user_id, skill_id=sid) for sid in unique_ids)
            user.skills_selected = True
            self.db.commit()
        logger.info("User %s selected skills %s", user_id, unique_ids)
        return [known[sid] for sid in unique_ids]

    def list_user_skills(self, user_id: str) -> list[Skill]:
        with storage_call(self.db, "list_user_skills"):
            return (
                self.db.query(Skill)
                .join(UserSkill, UserSkill.skill_id == Skill.id)
                .filter(UserSkill.user_id == user_id)
                .order_by(Skill.name)
                .all()
            )

    def skill_options(self, user_id: str) -> tuple[list[Skill], list[Skill]]:
        """Skills for the create form: (ones the user can teach, everything else)."""
        mine = self.list_user_skills(user_id)
        mine_ids = {s.id for s in mine}
        others = [s for s in self.skills.list_skills() if s.id not in mine_ids]
        return mine, others

    def profile_stats(self, user_id: str) -> ProfileStats:
        """Counts for the profile header.

        ``rating`` is the mean of the user's per-barter self-assessments, or
        None when none of their postings carries one.
        """
        with storage_call(self.db, "profile_stats"):
            barter_count, avg_rating = (
                self.db.query(func.count(Barter.id), func.avg(Barter.skill_rating))
                .filter(Barter.owner_id == user_id)
                .one()
            )
            skill_count = self.db.query(UserSkill).filter(UserSkill.user_id == user_id).count()
        return ProfileStats(
            user_id=user_id,
            barters=barter_count,
            skills=skill_count,
            rating=round(float(avg_rating), 1) if avg_rating is not None else None,
        )
