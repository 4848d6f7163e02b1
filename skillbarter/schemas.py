"""Pydantic schemas for request/response validation."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from skillbarter.constants import (
    DEFAULT_SKILL_RATING,
    MAX_DESCRIPTION_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_SELECTED_SKILLS,
    MAX_SKILL_RATING,
    MAX_TITLE_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_SKILL_RATING,
)
from skillbarter.models import BarterMode
from skillbarter.utils import sanitize_text


# Skill catalog


class CategoryResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int = Field(..., examples=[1])
    name: str = Field(..., examples=["Design"])


class SubcategoryResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int = Field(..., examples=[3])
    name: str = Field(..., examples=["Graphic Design"])
    category_id: int = Field(..., examples=[1])


class SkillResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int = Field(..., examples=[7])
    name: str = Field(..., examples=["Illustrator"])
    category_id: int = Field(..., examples=[1])
    subcategory_id: Optional[int] = Field(None, examples=[3])


# Barter schemas


class BarterCreate(BaseModel):
    """Schema for creating a new barter posting."""

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH, examples=["Web Development for Photography"])
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH, examples=["I build your portfolio site, you teach me lighting."])
    mode: BarterMode = Field(default=BarterMode.ONLINE, examples=["online"])
    teach_skill_id: int = Field(..., description="Skill the owner can teach", examples=[1])
    learn_skill_id: int = Field(..., description="Skill the owner wants to learn", examples=[2])
    skill_rating: Optional[int] = Field(
        DEFAULT_SKILL_RATING,
        ge=MIN_SKILL_RATING, le=MAX_SKILL_RATING,
        description="Self-assessed level in the taught skill", examples=[4],
    )

    @field_validator("title", "description", mode="before")
    @classmethod
    def clean_text(cls, v: object) -> object:
        """Strip markup and whitespace before length checks run."""
        if isinstance(v, str):
            return sanitize_text(v)
        return v

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def check_distinct_skills(self) -> "BarterCreate":
        if self.teach_skill_id == self.learn_skill_id:
            raise ValueError("You can't teach and learn the same skill")
        return self


class BarterResponse(BaseModel):
    """A stored barter plus its computed display fields."""

    id: int = Field(..., examples=[1])
    owner_id: str
    title: str
    description: str
    mode: str = Field(..., examples=["online"])
    teach_skill_id: int
    learn_skill_id: int
    skill_rating: Optional[int] = None
    created_at: datetime
    expires_at: datetime
    is_expired: bool
    display_mode: str = Field(..., examples=["Online"])
    time_ago: str = Field(..., examples=["3 hours ago"])


class FeedItem(BarterResponse):
    """Display-ready barter for listing screens."""

    teach_skill_name: str = Field(..., examples=["Guitar"])
    learn_skill_name: str = Field(..., examples=["Spanish"])
    owner_display_name: str = Field(..., examples=["maria"])
    owner_avatar_key: Optional[str] = Field(None, description="md5 of the owner's email")
    owner_avatar_url: str
    bookmarked: bool = False


class FeedList(BaseModel):
    barters: List[FeedItem]
    total: int = Field(..., examples=[10])


class BookmarkToggleResponse(BaseModel):
    barter_id: int
    bookmarked: bool


# Request schemas


class BarterRequestResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    barter_id: int
    requester_id: str
    owner_id: str
    status: str = Field(..., examples=["pending"])
    created_at: datetime


class RequestView(BaseModel):
    """A request decorated with the counterpart's identity and the barter's skills."""

    id: int
    barter_id: int
    barter_title: str
    teach_skill_name: str
    learn_skill_name: str
    counterpart_id: str
    counterpart_name: str
    counterpart_email: Optional[str] = None
    counterpart_avatar_url: str
    status: str
    created_at: datetime


class RequestList(BaseModel):
    role: str = Field(..., examples=["received"])
    requests: List[RequestView]
    total: int


# Profile schemas


class SkillSelection(BaseModel):
    skill_ids: List[int] = Field(..., min_length=1, max_length=MAX_SELECTED_SKILLS)


class UserProfile(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    avatar_url: str
    skills_selected: bool
    skills: List[SkillResponse] = []


class ProfileStats(BaseModel):
    user_id: str
    barters: int = Field(..., examples=[24])
    skills: int = Field(..., examples=[3])
    rating: Optional[float] = Field(None, description="Mean self-assessed rating over the user's postings", examples=[4.5])


class ProfileCreate(BaseModel):
    """Sent once after sign-in so the profile row exists."""

    username: Optional[str] = Field(None, max_length=MAX_USERNAME_LENGTH, examples=["maria"])
    email: Optional[str] = Field(None, max_length=MAX_EMAIL_LENGTH, examples=["maria@example.com"])


class SkillOptions(BaseModel):
    teach: List[SkillResponse]
    learn: List[SkillResponse]
