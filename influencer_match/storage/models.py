"""Database models for Bitcoin Influencer Match."""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

DEFAULT_SEARCH_CATEGORY = "all"


def search_key_for(category: str) -> str:
    """Serialize search criteria deterministically so it can be used as a lookup key."""
    return json.dumps({"category": category}, sort_keys=True, separators=(",", ":"))


# ============================================================================
# Pydantic Models (for data transfer)
# ============================================================================


class Platform(str, Enum):
    """Social platforms tracked for each creator."""

    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    X = "x"


# Column prefix used by the creators table for each platform
PLATFORM_COLUMN_PREFIX = {
    Platform.YOUTUBE: "youtube",
    Platform.INSTAGRAM: "insta",
    Platform.TIKTOK: "tiktok",
    Platform.X: "x",
}


class PlatformMetrics(BaseModel):
    """Per-platform profile data. Every metric is optional."""

    url: Optional[str] = None
    bio: Optional[str] = None
    followers: Optional[int] = None
    engagement_rate: Optional[float] = None
    average_views: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return bool(self.followers and self.followers > 0)


def _empty_platforms() -> Dict[Platform, PlatformMetrics]:
    return {platform: PlatformMetrics() for platform in Platform}


class CreatorProfile(BaseModel):
    """Creator record as exposed to the matching and view layers."""

    id: str
    full_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    is_btc_only: bool = False
    total_followers: Optional[int] = None
    categories: List[str] = Field(default_factory=list)
    platforms: Dict[Platform, PlatformMetrics] = Field(default_factory=_empty_platforms)

    def model_post_init(self, __context: Any) -> None:
        # Always carry the full, fixed set of platform keys
        for platform in Platform:
            self.platforms.setdefault(platform, PlatformMetrics())

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or self.id

    def active_platforms(self) -> Dict[Platform, PlatformMetrics]:
        """Platforms where the creator has a positive follower count."""
        return {p: m for p, m in self.platforms.items() if m.is_active}

    def summed_followers(self) -> int:
        return sum(m.followers or 0 for m in self.platforms.values())

    @classmethod
    def from_record(cls, creator: "Creator") -> "CreatorProfile":
        platforms = {}
        for platform, prefix in PLATFORM_COLUMN_PREFIX.items():
            platforms[platform] = PlatformMetrics(
                url=getattr(creator, f"{prefix}_url", None),
                bio=getattr(creator, f"{prefix}_bio", None),
                followers=getattr(creator, f"{prefix}_followers", None),
                engagement_rate=getattr(creator, f"{prefix}_engagement_rate", None),
                average_views=getattr(creator, f"{prefix}_average_views", None),
            )

        return cls(
            id=creator.id,
            full_name=creator.full_name,
            username=creator.username,
            email=creator.email,
            location=creator.location,
            is_btc_only=bool(creator.is_btc_only),
            total_followers=creator.total_followers,
            categories=sorted(tag.category for tag in creator.category_tags),
            platforms=platforms,
        )


class UserMatchRecord(BaseModel):
    """Latest set of creators matched to a user for one search."""

    id: int
    user_id: str
    search_criteria: Dict[str, str]
    creator_ids: List[str]
    created_at: datetime

    @property
    def category(self) -> str:
        return self.search_criteria.get("category", DEFAULT_SEARCH_CATEGORY)

    @classmethod
    def from_record(cls, match: "UserMatch") -> "UserMatchRecord":
        return cls(
            id=match.id,
            user_id=match.user_id,
            search_criteria=dict(match.search_criteria or {}),
            creator_ids=list(match.creator_ids or []),
            created_at=match.created_at,
        )

    def to_api(self) -> dict:
        """Persisted shape returned by the HTTP layer."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "search_criteria": self.search_criteria,
            "creator_ids": self.creator_ids,
            "created_at": self.created_at.isoformat(),
        }


# ============================================================================
# SQLAlchemy Models (for database)
# ============================================================================


class Creator(Base):
    """Content creator profile with per-platform metrics."""

    __tablename__ = "creators"

    id = Column(String, primary_key=True)
    full_name = Column(String)
    username = Column(String, index=True)
    email = Column(String)
    location = Column(String)
    is_btc_only = Column(Boolean, default=False)

    # Aggregate reach, drives display order
    total_followers = Column(Integer, index=True)

    youtube_url = Column(String)
    youtube_bio = Column(Text)
    youtube_followers = Column(Integer)
    youtube_engagement_rate = Column(Float)
    youtube_average_views = Column(Integer)

    insta_url = Column(String)
    insta_bio = Column(Text)
    insta_followers = Column(Integer)
    insta_engagement_rate = Column(Float)
    insta_average_views = Column(Integer)

    tiktok_url = Column(String)
    tiktok_bio = Column(Text)
    tiktok_followers = Column(Integer)
    tiktok_engagement_rate = Column(Float)
    tiktok_average_views = Column(Integer)

    x_url = Column(String)
    x_bio = Column(Text)
    x_followers = Column(Integer)
    x_engagement_rate = Column(Float)
    x_average_views = Column(Integer)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    category_tags = relationship(
        "CreatorCategory",
        back_populates="creator",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Creator(id='{self.id}', username='{self.username}', followers={self.total_followers})>"


class CreatorCategory(Base):
    """One category tag on a creator."""

    __tablename__ = "creator_categories"
    __table_args__ = (UniqueConstraint("creator_id", "category", name="uq_creator_category"),)

    id = Column(Integer, primary_key=True)
    creator_id = Column(String, ForeignKey("creators.id"), index=True, nullable=False)
    category = Column(String, index=True, nullable=False)

    creator = relationship("Creator", back_populates="category_tags")

    def __repr__(self):
        return f"<CreatorCategory(creator_id='{self.creator_id}', category='{self.category}')>"


class UserMatch(Base):
    """Latest creator set matched to a user for one search criteria value."""

    __tablename__ = "user_matches"
    __table_args__ = (UniqueConstraint("user_id", "search_key", name="uq_user_match_search"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String, index=True, nullable=False)
    search_criteria = Column(JSON, nullable=False)  # {"category": "..."}
    search_key = Column(String, nullable=False)  # serialized search_criteria
    creator_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<UserMatch(id={self.id}, user_id='{self.user_id}', key='{self.search_key}')>"


class OnboardingAnswer(Base):
    """Company and product details submitted during onboarding."""

    __tablename__ = "onboarding_answers"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, index=True, nullable=False)
    company_name = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    product_url = Column(String)
    product_description = Column(String(300), nullable=False)
    category = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<OnboardingAnswer(id={self.id}, user_id='{self.user_id}', product='{self.product_name}')>"
