"""Auth collaborator: who is calling, and is their session valid."""
import logging
from typing import Optional, Protocol

from skillbarter.errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)


class Auth(Protocol):
    """Interface the services use to learn the caller's identity."""

    def current_user_id(self) -> Optional[str]:
        ...

    def session_valid(self) -> bool:
        ...


class StaticAuth:
    """Fixed identity, for scripts and tests. ``None`` means signed out."""

    def __init__(self, user_id: Optional[str] = None) -> None:
        self._user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def session_valid(self) -> bool:
        return bool(self._user_id)


class HeaderAuth(StaticAuth):
    """Identity taken from the ``X-User-Id`` header set by the upstream auth provider."""

    HEADER = "X-User-Id"

    @classmethod
    def from_headers(cls, headers) -> "HeaderAuth":
        user_id = (headers.get(cls.HEADER) or "").strip()
        return cls(user_id or None)


def require_caller(auth: Auth, claimed_id: Optional[str] = None) -> str:
    """Return the authenticated user id or raise.

    Args:
        auth: The auth collaborator for this call.
        claimed_id: The actor id the caller says it is acting as, if any.

    Returns:
        The session's user id.

    Raises:
        AuthenticationError: No valid session.
        AuthorizationError: ``claimed_id`` is not the session's user.
    """
    user_id = auth.current_user_id()
    if not auth.session_valid() or not user_id:
        raise AuthenticationError()
    if claimed_id is not None and claimed_id != user_id:
        logger.warning("Caller %s tried to act as %s", user_id, claimed_id)
        raise AuthorizationError("You can only act on your own behalf.")
    return user_id
