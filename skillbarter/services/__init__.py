"""Services layer — shared business logic."""
from skillbarter.services.barter_catalog import (
    BarterCatalog,
    display_mode,
    expires_at,
    is_expired,
    time_ago,
)
from skillbarter.services.bookmark_store import BookmarkStore
from skillbarter.services.feed_assembler import FeedAssembler, assemble_feed
from skillbarter.services.profile_service import ProfileService
from skillbarter.services.request_ledger import RequestLedger
from skillbarter.services.skill_catalog import SkillCatalog
from skillbarter.services.user_directory import UserDirectory

__all__ = [
    "BarterCatalog",
    "BookmarkStore",
    "FeedAssembler",
    "ProfileService",
    "RequestLedger",
    "SkillCatalog",
    "UserDirectory",
    "assemble_feed",
    "display_mode",
    "expires_at",
    "is_expired",
    "time_ago",
]
