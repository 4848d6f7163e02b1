"""Profile routes: the signed-in user's profile, skills, bookmarks and stats."""
from typing import List

from fastapi import APIRouter, Depends, Request

from skillbarter.auth import HeaderAuth, require_caller
from skillbarter.constants import PROFILE_NOT_FOUND, WRITE_RATE_LIMIT
from skillbarter.dependencies import (
    get_auth,
    get_feed_assembler,
    get_profile_service,
    get_user_directory,
)
from skillbarter.errors import NotFoundError
from skillbarter.rate_limit import limiter
from skillbarter.schemas import (
    FeedList,
    ProfileCreate,
    ProfileStats,
    SkillOptions,
    SkillResponse,
    SkillSelection,
    UserProfile,
)
from skillbarter.services import FeedAssembler, ProfileService, UserDirectory
from skillbarter.services.user_directory import avatar_key, avatar_url, display_name

router = APIRouter(prefix="/api/v1", tags=["profile"])


def _profile(user, skills) -> UserProfile:
    return UserProfile(
        id=user.id,
        username=display_name(user),
        email=user.email,
        avatar_url=avatar_url(avatar_key(user)),
        skills_selected=bool(user.skills_selected),
        skills=[SkillResponse.model_validate(s) for s in skills],
    )


@router.get("/me", response_model=UserProfile)
def get_me(
    auth: HeaderAuth = Depends(get_auth),
    users: UserDirectory = Depends(get_user_directory),
    profiles: ProfileService = Depends(get_profile_service),
):
    user_id = require_caller(auth)
    user = users.get_user(user_id)
    if user is None:
        raise NotFoundError(PROFILE_NOT_FOUND, user_id=user_id)
    return _profile(user, profiles.list_user_skills(user_id))


@router.post("/me", response_model=UserProfile)
@limiter.limit(WRITE_RATE_LIMIT)
def ensure_me(
    request: Request,
    body: ProfileCreate,
    auth: HeaderAuth = Depends(get_auth),
    users: UserDirectory = Depends(get_user_directory),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Create the caller's profile row if it doesn't exist yet."""
    user_id = require_caller(auth)
    user = users.ensure_profile(user_id, body.username, body.email)
    return _profile(user, profiles.list_user_skills(user_id))


@router.put("/me/skills", response_model=List[SkillResponse])
@limiter.limit(WRITE_RATE_LIMIT)
def select_skills(
    request: Request,
    body: SkillSelection,
    auth: HeaderAuth = Depends(get_auth),
    profiles: ProfileService = Depends(get_profile_service),
):
    return profiles.select_skills(require_caller(auth), body.skill_ids)


@router.get("/me/skill-options", response_model=SkillOptions)
def skill_options(
    auth: HeaderAuth = Depends(get_auth),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Skills the caller can teach and skills they could learn."""
    teach, learn = profiles.skill_options(require_caller(auth))
    return SkillOptions(
        teach=[SkillResponse.model_validate(s) for s in teach],
        learn=[SkillResponse.model_validate(s) for s in learn],
    )


@router.get("/me/bookmarks", response_model=FeedList)
def my_bookmarks(
    auth: HeaderAuth = Depends(get_auth),
    feed: FeedAssembler = Depends(get_feed_assembler),
):
    items = feed.bookmarked_feed(require_caller(auth))
    return FeedList(barters=items, total=len(items))


@router.get("/users/{user_id}/stats", response_model=ProfileStats)
def user_stats(user_id: str, profiles: ProfileService = Depends(get_profile_service)):
    return profiles.profile_stats(user_id)
