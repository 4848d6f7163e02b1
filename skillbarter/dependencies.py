"""FastAPI dependencies wiring the auth and storage collaborators into services."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from skillbarter.auth import HeaderAuth
from skillbarter.database import get_db
from skillbarter.services import (
    BarterCatalog,
    BookmarkStore,
    FeedAssembler,
    ProfileService,
    RequestLedger,
    SkillCatalog,
    UserDirectory,
)


def get_auth(request: Request) -> HeaderAuth:
    return HeaderAuth.from_headers(request.headers)


def get_skill_catalog(db: Session = Depends(get_db)) -> SkillCatalog:
    return SkillCatalog(db)


def get_user_directory(db: Session = Depends(get_db)) -> UserDirectory:
    return UserDirectory(db)


def get_barter_catalog(db: Session = Depends(get_db), auth: HeaderAuth = Depends(get_auth)) -> BarterCatalog:
    return BarterCatalog(db, auth)


def get_bookmark_store(db: Session = Depends(get_db), auth: HeaderAuth = Depends(get_auth)) -> BookmarkStore:
    return BookmarkStore(db, auth)


def get_request_ledger(db: Session = Depends(get_db), auth: HeaderAuth = Depends(get_auth)) -> RequestLedger:
    return RequestLedger(db, auth)


def get_feed_assembler(db: Session = Depends(get_db), auth: HeaderAuth = Depends(get_auth)) -> FeedAssembler:
    return FeedAssembler(db, auth)


def get_profile_service(db: Session = Depends(get_db), auth: HeaderAuth = Depends(get_auth)) -> ProfileService:
    return ProfileService(db, auth)
