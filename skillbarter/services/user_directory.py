"""Profile lookups used to decorate records with a display identity."""
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillbarter.constants import ANONYMOUS_USER, DEFAULT_AVATAR_URL, GRAVATAR_URL
from skillbarter.database import storage_call
from skillbarter.models import User
from skillbarter.utils import email_hash, sanitize_text

logger = logging.getLogger(__name__)


def display_name(user: Optional[User]) -> str:
    if user is None or not user.username:
        return ANONYMOUS_USER
    return user.username


def avatar_key(user: Optional[User]) -> Optional[str]:
    return email_hash(user.email) if user is not None else None


def avatar_url(key: Optional[str]) -> str:
    """Identicon URL for an avatar key, or the shared default picture."""
    if not key:
        return DEFAULT_AVATAR_URL
    return GRAVATAR_URL.format(hash=key)


class UserDirectory:
    """Minimal id -> username/email lookup."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        with storage_call(self.db, "get_user"):
            return self.db.get(User, user_id)

    def users_by_ids(self, user_ids: Iterable[str]) -> dict[str, User]:
        ids = {uid for uid in user_ids if uid}
        if not ids:
            return {}
        with storage_call(self.db, "users_by_ids"):
            users = self.db.query(User).filter(User.id.in_(ids)).all()
        return {u.id: u for u in users}

    def ensure_profile(self, user_id: str, username: Optional[str], email: Optional[str]) -> User:
        """Create the profile row for a freshly signed-in user if it is missing.

        When no username is supplied the local part of the email is used.
        """
        user = self.get_user(user_id)
        if user is not None:
            return user

        if not username and email:
            username = email.split("@")[0]
        user = User(id=user_id, username=sanitize_text(username), email=email, skills_selected=False)
        with storage_call(self.db, "ensure_profile"):
            self.db.add(user)
            try:
                self.db.commit()
            except IntegrityError:
                # Another sign-in created it first
                self.db.rollback()
                return self.db.get(User, user_id)
            self.db.refresh(user)
        logger.info("Created profile for user %s", user_id)
        return user
