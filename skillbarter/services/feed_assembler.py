"""Read-side composition of barters, skills, owners and bookmarks into display records."""
import logging
from datetime import datetime
from typing import Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from skillbarter.auth import Auth, StaticAuth
from skillbarter.constants import ALL_CATEGORIES, UNKNOWN_SKILL
from skillbarter.models import Barter, Skill, User, utcnow
from skillbarter.schemas import FeedItem
from skillbarter.services.barter_catalog import BarterCatalog, barter_fields
from skillbarter.services.bookmark_store import BookmarkStore
from skillbarter.services.skill_catalog import SkillCatalog
from skillbarter.services.user_directory import UserDirectory, avatar_key, avatar_url, display_name

logger = logging.getLogger(__name__)


def assemble_feed(
    barters: Iterable[Barter],
    skills_by_id: Mapping[int, Skill],
    users_by_id: Mapping[str, User],
    bookmarked_ids: Iterable[int] = (),
    category: Optional[str] = None,
    category_names: Optional[Mapping[int, str]] = None,
    now: Optional[datetime] = None,
) -> list[FeedItem]:
    """Join raw records into feed items, keeping the input order.

    Missing skills or owners never drop a barter; they fall back to
    "Unknown Skill" / "Anonymous User". The category filter runs on the
    assembled items and keeps a barter when either its taught or its wanted
    skill belongs to ``category``.
    """
    now = now or utcnow()
    bookmarked = set(bookmarked_ids)
    category_names = category_names or {}
    wanted = category.strip().lower() if category and category != ALL_CATEGORIES else None

    items = []
    for barter in barters:
        teach = skills_by_id.get(barter.teach_skill_id)
        learn = skills_by_id.get(barter.learn_skill_id)
        if wanted is not None:
            categories = {
                category_names.get(s.category_id, "").lower() for s in (teach, learn) if s is not None
            }
            if wanted not in categories:
                continue

        owner = users_by_id.get(barter.owner_id)
        key = avatar_key(owner)
        items.append(FeedItem(
            **barter_fields(barter, now),
            teach_skill_name=teach.name if teach else UNKNOWN_SKILL,
            learn_skill_name=learn.name if learn else UNKNOWN_SKILL,
            owner_display_name=display_name(owner),
            owner_avatar_key=key,
            owner_avatar_url=avatar_url(key),
            bookmarked=barter.id in bookmarked,
        ))
    return items


class FeedAssembler:
    """Loads the current records and hands them to ``assemble_feed``. Never writes."""

    def __init__(
        self,
        db: Session,
        auth: Optional[Auth] = None,
        skills: Optional[SkillCatalog] = None,
        users: Optional[UserDirectory] = None,
        barters: Optional[BarterCatalog] = None,
        bookmarks: Optional[BookmarkStore] = None,
    ) -> None:
        self.auth = auth or StaticAuth()
        self.skills = skills or SkillCatalog(db)
        self.users = users or UserDirectory(db)
        self.barters = barters or BarterCatalog(db, self.auth, skills=self.skills)
        self.bookmarks = bookmarks or BookmarkStore(db, self.auth)

    def build_feed(
        self,
        viewer_id: Optional[str] = None,
        category: Optional[str] = None,
        owner_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[FeedItem]:
        """Newest-first feed for ``viewer_id`` (defaults to the signed-in user)."""
        viewer_id = viewer_id or self.auth.current_user_id()
        barters = self.barters.list_barters(owner_id=owner_id, limit=None)
        return self._assemble(barters, viewer_id, category, now)

    def feed_page(
        self,
        limit: int,
        offset: int = 0,
        viewer_id: Optional[str] = None,
        category: Optional[str] = None,
        owner_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> tuple[list[FeedItem], int]:
        """One page of the feed plus the total number of matching barters.

        Without a category the page is cut in SQL. A category filter runs on
        the assembled items, so the whole feed is assembled before slicing.
        """
        if category and category != ALL_CATEGORIES:
            items = self.build_feed(viewer_id, category, owner_id, now)
            return items[offset:offset + limit], len(items)

        viewer_id = viewer_id or self.auth.current_user_id()
        barters = self.barters.list_barters(owner_id=owner_id, limit=limit, offset=offset)
        items = self._assemble(barters, viewer_id, None, now)
        return items, self.barters.count_barters(owner_id=owner_id)

    def bookmarked_feed(self, viewer_id: Optional[str] = None, now: Optional[datetime] = None) -> list[FeedItem]:
        viewer_id = viewer_id or self.auth.current_user_id()
        if not viewer_id:
            return []
        saved = self.bookmarks.list_bookmarks(viewer_id)
        barters = [b for b in self.barters.list_barters(limit=None) if b.id in saved]
        return self._assemble(barters, viewer_id, None, now, bookmarked=saved)

    def _assemble(
        self,
        barters: list[Barter],
        viewer_id: Optional[str],
        category: Optional[str],
        now: Optional[datetime],
        bookmarked: Optional[set[int]] = None,
    ) -> list[FeedItem]:
        if bookmarked is None:
            bookmarked = self.bookmarks.list_bookmarks(viewer_id) if viewer_id else set()
        skill_ids = {b.teach_skill_id for b in barters} | {b.learn_skill_id for b in barters}
        items = assemble_feed(
            barters,
            skills_by_id=self.skills.skills_by_id(skill_ids),
            users_by_id=self.users.users_by_ids(b.owner_id for b in barters),
            bookmarked_ids=bookmarked,
            category=category,
            category_names=self.skills.category_names() if category else None,
            now=now or self.barters.clock(),
        )
        logger.debug("Assembled feed of %d/%d barters for %s", len(items), len(barters), viewer_id)
        return items

    def get_item(self, barter_id: int, viewer_id: Optional[str] = None, now: Optional[datetime] = None) -> FeedItem:
        """Single barter as a feed item, for the detail screen."""
        viewer_id = viewer_id or self.auth.current_user_id()
        barter = self.barters.get_barter(barter_id)
        return self._assemble([barter], viewer_id, None, now)[0]
