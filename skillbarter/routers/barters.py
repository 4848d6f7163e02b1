"""API routes for barter postings, bookmarks and new exchange requests."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from skillbarter.auth import HeaderAuth, require_caller
from skillbarter.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, WRITE_RATE_LIMIT
from skillbarter.dependencies import (
    get_auth,
    get_barter_catalog,
    get_bookmark_store,
    get_feed_assembler,
    get_request_ledger,
)
from skillbarter.rate_limit import limiter
from skillbarter.schemas import (
    BarterCreate,
    BarterRequestResponse,
    BarterResponse,
    BookmarkToggleResponse,
    FeedItem,
    FeedList,
)
from skillbarter.services import BarterCatalog, BookmarkStore, FeedAssembler, RequestLedger

router = APIRouter(prefix="/api/v1/barters", tags=["barters"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=FeedList)
def list_barters(
    category: Optional[str] = None,
    owner_id: Optional[str] = None,
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    feed: FeedAssembler = Depends(get_feed_assembler),
):
    """Feed for the caller, newest first, optionally filtered by skill category."""
    items, total = feed.feed_page(limit, offset, category=category, owner_id=owner_id)
    return FeedList(barters=items, total=total)


@router.post("/", response_model=BarterResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
def create_barter(
    request: Request,
    payload: BarterCreate,
    auth: HeaderAuth = Depends(get_auth),
    catalog: BarterCatalog = Depends(get_barter_catalog),
):
    """Post a new barter owned by the signed-in user."""
    owner_id = require_caller(auth)
    barter = catalog.add_barter(owner_id, payload)
    return catalog.describe(barter)


@router.get("/{barter_id}", response_model=FeedItem)
def get_barter(barter_id: int, feed: FeedAssembler = Depends(get_feed_assembler)):
    return feed.get_item(barter_id)


@router.post("/{barter_id}/bookmark", response_model=BookmarkToggleResponse)
@limiter.limit(WRITE_RATE_LIMIT)
def toggle_bookmark(
    request: Request,
    barter_id: int,
    auth: HeaderAuth = Depends(get_auth),
    bookmarks: BookmarkStore = Depends(get_bookmark_store),
):
    """Save the barter if it isn't saved yet, otherwise unsave it."""
    user_id = require_caller(auth)
    result = bookmarks.toggle_bookmark(user_id, barter_id)
    return BookmarkToggleResponse(barter_id=barter_id, bookmarked=result["bookmarked"])


@router.post("/{barter_id}/requests", response_model=BarterRequestResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
def request_exchange(
    request: Request,
    barter_id: int,
    auth: HeaderAuth = Depends(get_auth),
    ledger: RequestLedger = Depends(get_request_ledger),
):
    """Ask the barter's owner for an exchange."""
    requester_id = require_caller(auth)
    return ledger.create_request(barter_id, requester_id)
