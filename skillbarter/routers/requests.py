"""API routes for responding to and withdrawing exchange requests."""
from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from skillbarter.auth import HeaderAuth, require_caller
from skillbarter.constants import WRITE_RATE_LIMIT
from skillbarter.dependencies import get_auth, get_request_ledger
from skillbarter.rate_limit import limiter
from skillbarter.schemas import BarterRequestResponse, RequestList
from skillbarter.services import RequestLedger

router = APIRouter(prefix="/api/v1/requests", tags=["requests"])


@router.get("/", response_model=RequestList)
def list_requests(
    role: str = Query(default="received", description="received, sent or pending"),
    auth: HeaderAuth = Depends(get_auth),
    ledger: RequestLedger = Depends(get_request_ledger),
):
    user_id = require_caller(auth)
    views = ledger.list_requests(user_id, role)
    return RequestList(role=role, requests=views, total=len(views))


@router.post("/{request_id}/accept", response_model=BarterRequestResponse)
@limiter.limit(WRITE_RATE_LIMIT)
def accept_request(
    request: Request,
    request_id: int,
    auth: HeaderAuth = Depends(get_auth),
    ledger: RequestLedger = Depends(get_request_ledger),
):
    """Accept a pending request. Barter owner only."""
    return ledger.accept_request(request_id, require_caller(auth))


@router.post("/{request_id}/decline", response_model=BarterRequestResponse)
@limiter.limit(WRITE_RATE_LIMIT)
def decline_request(
    request: Request,
    request_id: int,
    auth: HeaderAuth = Depends(get_auth),
    ledger: RequestLedger = Depends(get_request_ledger),
):
    """Decline a pending request. Barter owner only."""
    return ledger.decline_request(request_id, require_caller(auth))


@router.delete("/{request_id}")
@limiter.limit(WRITE_RATE_LIMIT)
def cancel_request(
    request: Request,
    request_id: int,
    auth: HeaderAuth = Depends(get_auth),
    ledger: RequestLedger = Depends(get_request_ledger),
) -> dict[str, Any]:
    """Withdraw a pending request. Requester only."""
    ledger.cancel_request(request_id, require_caller(auth))
    return {"id": request_id, "message": "Request cancelled"}
