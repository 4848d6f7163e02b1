"""Read-only lookups over skills, categories and subcategories."""
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from skillbarter.database import storage_call
from skillbarter.models import Category, Skill, Subcategory

logger = logging.getLogger(__name__)


class SkillCatalog:
    """Static reference data.

    Args:
        db: Database session.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_skills(self) -> list[Skill]:
        with storage_call(self.db, "list_skills"):
            return self.db.query(Skill).order_by(Skill.name, Skill.id).all()

    def list_categories(self) -> list[Category]:
        with storage_call(self.db, "list_categories"):
            return self.db.query(Category).order_by(Category.name).all()

    def list_subcategories(self, category_id: Optional[int] = None) -> list[Subcategory]:
        with storage_call(self.db, "list_subcategories"):
            query = self.db.query(Subcategory)
            if category_id is not None:
                query = query.filter(Subcategory.category_id == category_id)
            return query.order_by(Subcategory.name).all()

    def skills_in_subcategory(self, subcategory_id: int) -> list[Skill]:
        with storage_call(self.db, "skills_in_subcategory"):
            return (
                self.db.query(Skill)
                .filter(Skill.subcategory_id == subcategory_id)
                .order_by(Skill.name)
                .all()
            )

    def get_skill(self, skill_id: int) -> Optional[Skill]:
        with storage_call(self.db, "get_skill"):
            return self.db.get(Skill, skill_id)

    def skills_by_id(self, skill_ids: Optional[Iterable[int]] = None) -> dict[int, Skill]:
        """Map skill id -> Skill, for all skills or only the given ids."""
        with storage_call(self.db, "skills_by_id"):
            query = self.db.query(Skill)
            if skill_ids is not None:
                ids = set(skill_ids)
                if not ids:
                    return {}
                query = query.filter(Skill.id.in_(ids))
            return {s.id: s for s in query.all()}

    def category_names(self) -> dict[int, str]:
        """Map category id -> category name."""
        with storage_call(self.db, "category_names"):
            return {c.id: c.name for c in self.db.query(Category).all()}
