"""Exchange-request lifecycle.

States::

    pending --(owner)-----> accepted | declined
    pending --(requester)-> cancelled (row removed)

``accepted``, ``declined`` and ``cancelled`` are terminal. A new request for
the same (barter, requester) pair is allowed once the previous one is no
longer active. The partial unique index ``uq_barter_requests_active`` is the
authoritative guard for that; the lookup in ``create_request`` only exists to
give the caller a friendlier message on the common path.
"""
import logging
from typing import Optional

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillbarter.auth import Auth, require_caller
from skillbarter.constants import (
    ERR_DUPLICATE_REQUEST,
    PROFILE_NOT_FOUND,
    UNKNOWN_BARTER,
    UNKNOWN_SKILL,
    VALID_REQUEST_ROLES,
)
from skillbarter.database import storage_call
from skillbarter.errors import (
    AuthorizationError,
    BarterError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from skillbarter.models import (
    ACTIVE_REQUEST_STATUSES,
    Barter,
    BarterRequest,
    RequestStatus,
    TERMINAL_REQUEST_STATUSES,
    utcnow,
)
from skillbarter.schemas import RequestView
from skillbarter.services.barter_catalog import BarterCatalog
from skillbarter.services.skill_catalog import SkillCatalog
from skillbarter.services.user_directory import UserDirectory, avatar_key, avatar_url, display_name
from skillbarter.utils import ensure_utc

logger = logging.getLogger(__name__)


class RequestLedger:
    """Create, accept, decline, cancel and list barter requests.

    Args:
        db: Database session.
        auth: Auth collaborator for the calling user.
        barters: Catalog used to resolve a barter's owner.
        users: Directory used to decorate listings.
        skills: Catalog used to decorate listings.
    """

    def __init__(
        self,
        db: Session,
        auth: Auth,
        barters: Optional[BarterCatalog] = None,
        users: Optional[UserDirectory] = None,
        skills: Optional[SkillCatalog] = None,
    ) -> None:
        self.db = db
        self.auth = auth
        self.skills = skills or SkillCatalog(db)
        self.barters = barters or BarterCatalog(db, auth, skills=self.skills)
        self.users = users or UserDirectory(db)

    # --------------- Mutations ---------------

    def create_request(self, barter_id: int, requester_id: str) -> BarterRequest:
        """Ask the owner of ``barter_id`` for an exchange.

        Raises:
            NotFoundError: The barter does not exist.
            AuthorizationError: The requester owns the barter.
            ConflictError: An active request for this pair already exists.
        """
        require_caller(self.auth, requester_id)
        barter = self.barters.get_barter(barter_id)
        if barter.owner_id == requester_id:
            logger.warning("User %s tried to request own barter #%s", requester_id, barter_id)
            raise AuthorizationError("You cannot send a request to your own barter.")

        existing = self._find_active(barter_id, requester_id)
        if existing is not None:
            raise self._duplicate(existing)

        request = BarterRequest(
            barter_id=barter_id,
            requester_id=requester_id,
            owner_id=barter.owner_id,
            status=RequestStatus.PENDING.value,
            created_at=utcnow(),
        )
        with storage_call(self.db, "create_request"):
            self.db.add(request)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                raise self._explain_insert_failure(barter_id, requester_id) from e
            self.db.refresh(request)
        logger.info("Request #%s created: barter #%s by %s", request.id, barter_id, requester_id)
        return request

    @staticmethod
    def _duplicate(existing: BarterRequest) -> ConflictError:
        article = "a pending" if existing.status == RequestStatus.PENDING.value else "an accepted"
        return ConflictError(
            f"You already have {article} request for this barter.",
            code=ERR_DUPLICATE_REQUEST,
            request_id=existing.id,
        )

    def _explain_insert_failure(self, barter_id: int, requester_id: str) -> BarterError:
        """Work out which constraint rejected a new request, after the rollback."""
        existing = self._active_query(barter_id, requester_id).first()
        if existing is not None:
            logger.warning(
                "Duplicate active request blocked by storage for barter #%s requester %s",
                barter_id, requester_id,
            )
            return self._duplicate(existing)
        if self.users.get_user(requester_id) is None:
            logger.warning("Request on barter #%s from user %s without a profile", barter_id, requester_id)
            return NotFoundError(PROFILE_NOT_FOUND, user_id=requester_id)
        if self.db.get(Barter, barter_id) is None:
            return NotFoundError("That barter no longer exists.", barter_id=barter_id)
        logger.error("Request insert rejected for barter #%s requester %s", barter_id, requester_id)
        return ConflictError("Your request couldn't be saved. Please try again.")

    def accept_request(self, request_id: int, caller_id: str) -> BarterRequest:
        return self._resolve(request_id, caller_id, RequestStatus.ACCEPTED)

    def decline_request(self, request_id: int, caller_id: str) -> BarterRequest:
        return self._resolve(request_id, caller_id, RequestStatus.DECLINED)

    def cancel_request(self, request_id: int, caller_id: str) -> None:
        """Withdraw a pending request. The row is deleted, freeing the pair for a new request."""
        require_caller(self.auth, caller_id)
        request = self.get_request(request_id)
        if request.requester_id != caller_id:
            raise AuthorizationError("Only the person who sent this request can cancel it.")
        if request.status in TERMINAL_REQUEST_STATUSES:
            raise InvalidStateError(f"This request was already {request.status} and can't be cancelled.")

        with storage_call(self.db, "cancel_request"):
            deleted = (
                self.db.query(BarterRequest)
                .filter(BarterRequest.id == request_id, BarterRequest.status == RequestStatus.PENDING.value)
                .delete(synchronize_session=False)
            )
            if deleted != 1:
                self.db.rollback()
                raise InvalidStateError("This request changed before it could be cancelled.")
            self.db.expunge(request)
            self.db.commit()
        logger.info("Request #%s cancelled by %s", request_id, caller_id)

    def _resolve(self, request_id: int, caller_id: str, target: RequestStatus) -> BarterRequest:
        """Owner-driven pending -> accepted/declined transition."""
        require_caller(self.auth, caller_id)
        request = self.get_request(request_id)
        if request.owner_id != caller_id:
            logger.warning("User %s tried to %s request #%s they don't own", caller_id, target.value, request_id)
            raise AuthorizationError("Only the barter's owner can respond to this request.")
        if request.status in TERMINAL_REQUEST_STATUSES:
            raise InvalidStateError(f"This request was already {request.status}.")

        with storage_call(self.db, f"{target.value}_request"):
            # Conditional update so two concurrent responses can't both win
            updated = (
                self.db.query(BarterRequest)
                .filter(BarterRequest.id == request_id, BarterRequest.status == RequestStatus.PENDING.value)
                .update({"status": target.value, "updated_at": utcnow()}, synchronize_session=False)
            )
            if updated != 1:
                self.db.rollback()
                raise InvalidStateError("This request changed before your response was saved.")
            self.db.commit()
            self.db.refresh(request)
        logger.info("Request #%s %s by %s", request_id, target.value, caller_id)
        return request

    # --------------- Queries ---------------

    def get_request(self, request_id: int) -> BarterRequest:
        with storage_call(self.db, "get_request"):
            request = self.db.get(BarterRequest, request_id)
        if request is None:
            raise NotFoundError("That request no longer exists.", request_id=request_id)
        return request

    def _find_active(self, barter_id: int, requester_id: str) -> Optional[BarterRequest]:
        with storage_call(self.db, "find_active_request"):
            return self._active_query(barter_id, requester_id).first()

    def _active_query(self, barter_id: int, requester_id: str):
        return self.db.query(BarterRequest).filter(
            BarterRequest.barter_id == barter_id,
            BarterRequest.requester_id == requester_id,
            BarterRequest.status.in_(ACTIVE_REQUEST_STATUSES),
        )

    def list_requests(self, user_id: str, role: str) -> list[RequestView]:
        """Requests the user received, sent, or sent and still pending; newest first."""
        require_caller(self.auth, user_id)
        if role not in VALID_REQUEST_ROLES:
            raise ValidationError(
                f"Unknown request view '{role}'. Use one of: {', '.join(sorted(VALID_REQUEST_ROLES))}",
            )

        query = self.db.query(BarterRequest)
        if role == "received":
            query = query.filter(BarterRequest.owner_id == user_id)
        else:
            query = query.filter(BarterRequest.requester_id == user_id)
            if role == "pending":
                query = query.filter(BarterRequest.status == RequestStatus.PENDING.value)
        with storage_call(self.db, "list_requests"):
            requests = query.order_by(desc(BarterRequest.created_at), desc(BarterRequest.id)).all()
            barters = {
                b.id: b
                for b in self.db.query(Barter).filter(Barter.id.in_({r.barter_id for r in requests})).all()
            } if requests else {}

        skill_ids = {b.teach_skill_id for b in barters.values()} | {b.learn_skill_id for b in barters.values()}
        skills = self.skills.skills_by_id(skill_ids)

        def counterpart(r: BarterRequest) -> str:
            return r.requester_id if role == "received" else r.owner_id

        users = self.users.users_by_ids(counterpart(r) for r in requests)

        views = []
        for r in requests:
            barter = barters.get(r.barter_id)
            teach = skills.get(barter.teach_skill_id) if barter else None
            learn = skills.get(barter.learn_skill_id) if barter else None
            other = users.get(counterpart(r))
            views.append(RequestView(
                id=r.id,
                barter_id=r.barter_id,
                barter_title=barter.title if barter else UNKNOWN_BARTER,
                teach_skill_name=teach.name if teach else UNKNOWN_SKILL,
                learn_skill_name=learn.name if learn else UNKNOWN_SKILL,
                counterpart_id=counterpart(r),
                counterpart_name=display_name(other),
                counterpart_email=other.email if other else None,
                counterpart_avatar_url=avatar_url(avatar_key(other)),
                status=r.status,
                created_at=ensure_utc(r.created_at),
            ))
        return views
