"""Per-user saved barters."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillbarter.auth import Auth, require_caller
from skillbarter.constants import PROFILE_NOT_FOUND
from skillbarter.database import storage_call
from skillbarter.errors import ConflictError, NotFoundError
from skillbarter.models import Barter, Bookmark, User

logger = logging.getLogger(__name__)


class BookmarkStore:
    """Save/unsave barters for the signed-in user."""

    def __init__(self, db: Session, auth: Auth) -> None:
        self.db = db
        self.auth = auth

    def toggle_bookmark(self, user_id: str, barter_id: int) -> dict[str, bool]:
        """Flip the bookmark for (user, barter) and return the resulting state.

        Not safe to blindly retry: each call flips the state, so a caller that
        lost the response should re-read ``list_bookmarks`` first.
        """
        require_caller(self.auth, user_id)

        with storage_call(self.db, "toggle_bookmark"):
            if self.db.get(Barter, barter_id) is None:
                raise NotFoundError("That barter no longer exists.", barter_id=barter_id)

            existing = self._find(user_id, barter_id)
            if existing is not None:
                self.db.delete(existing)
                self.db.commit()
                logger.info("User %s removed bookmark on barter #%s", user_id, barter_id)
                return {"bookmarked": False}

            self.db.add(Bookmark(user_id=user_id, barter_id=barter_id))
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                self._explain_insert_failure(user_id, barter_id, e)
                logger.warning("Concurrent bookmark insert for user %s barter #%s", user_id, barter_id)
            logger.info("User %s bookmarked barter #%s", user_id, barter_id)
            return {"bookmarked": True}

    def _explain_insert_failure(self, user_id: str, barter_id: int, exc: IntegrityError) -> None:
        """Return quietly only if a concurrent toggle stored the same pair first."""
        if self._find(user_id, barter_id) is not None:
            return
        if self.db.get(User, user_id) is None:
            raise NotFoundError(PROFILE_NOT_FOUND, user_id=user_id) from exc
        if self.db.get(Barter, barter_id) is None:
            raise NotFoundError("That barter no longer exists.", barter_id=barter_id) from exc
        logger.error("Bookmark insert rejected for user %s barter #%s", user_id, barter_id, exc_info=exc)
        raise ConflictError("Your bookmark couldn't be saved. Please try again.") from exc

    def _find(self, user_id: str, barter_id: int) -> Optional[Bookmark]:
        return (
            self.db.query(Bookmark)
            .filter(Bookmark.user_id == user_id, Bookmark.barter_id == barter_id)
            .first()
        )

    def list_bookmarks(self, user_id: str) -> set[int]:
        with storage_call(self.db, "list_bookmarks"):
            rows = self.db.query(Bookmark.barter_id).filter(Bookmark.user_id == user_id).all()
        return {row.barter_id for row in rows}
