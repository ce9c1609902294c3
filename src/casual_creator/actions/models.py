"""
Provider result types and per-turn action outcomes.

Provider results are pydantic models because they are persisted into the
profile extension map (``model_dump(mode="json")``) and read back from it.
Outcomes are plain dataclasses that only live for one turn.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SimilarAccount(BaseModel):
    username: str
    full_name: str = ""
    category: str = ""
    followers: int = 0
    engagement_rate: float = 0.0
    avg_likes: float = 0.0


class InstagramProfile(BaseModel):
    """Statistics for one analyzed Instagram account."""

    username: str
    full_name: str = ""
    biography: str = ""
    category: str = ""
    followers: int = 0
    following: int = 0
    posts: int = 0
    top_hashtags: List[str] = Field(default_factory=list)
    engagement_rate: float = Field(default=0.0, description="Percent")
    avg_likes: float = 0.0
    avg_comments: float = 0.0
    similar_accounts: List[SimilarAccount] = Field(default_factory=list)
    post_texts: List[str] = Field(default_factory=list)
    profile_pic_url: Optional[str] = None
    is_verified: bool = False
    cached_at: datetime = Field(default_factory=datetime.now)


class HashtagPost(BaseModel):
    id: str
    code: str = ""
    caption: Optional[str] = None
    like_count: int = 0
    comment_count: int = 0
    media_type: int = Field(default=1, description="1 photo, 2 video, 8 carousel")
    taken_at: Optional[int] = None
    thumbnail_url: Optional[str] = None
    username: str = ""
    user_id: Optional[str] = None

    @property
    def engagement(self) -> int:
        return self.like_count + self.comment_count


class HashtagSearchResult(BaseModel):
    hashtag: str
    total_posts: int = 0
    posts: List[HashtagPost] = Field(default_factory=list)
    cached_at: datetime = Field(default_factory=datetime.now)


class BlogProfile(BaseModel):
    """Writing-style analysis of the user's blog."""

    analyzed_urls: List[str] = Field(default_factory=list)
    writing_style: str = "conversational"
    average_post_length: str = "medium"
    common_topics: List[str] = Field(default_factory=list)
    tone_keywords: List[str] = Field(default_factory=list)
    content_themes: List[str] = Field(default_factory=list)
    brand_voice: str = "authentic and personal"
    target_audience: Optional[str] = None
    posting_pattern: Optional[str] = None
    cached_at: datetime = Field(default_factory=datetime.now)


class SearchResult(BaseModel):
    content: str = ""
    citations: List[str] = Field(default_factory=list)


@dataclass
class SearchOutcome:
    query: str
    service: str
    content: str = ""
    citations: List[str] = field(default_factory=list)
    cached: bool = False


@dataclass
class InstagramOutcome:
    username: str
    is_own_profile: bool
    analysis: Optional[InstagramProfile] = None
    cached: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.analysis is not None


@dataclass
class HashtagOutcome:
    hashtag: str
    result: Optional[HashtagSearchResult] = None
    cached: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.result is not None


@dataclass
class BlogOutcome:
    urls: List[str]
    analysis: Optional[BlogProfile] = None
    cached: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.analysis is not None


@dataclass
class ActionContext:
    """
    Everything the external actions contributed to one turn.

    A failed action leaves its outcome without a result (or None for search)
    and is listed in ``omitted`` with the reason; it never aborts the turn.
    """

    search: Optional[SearchOutcome] = None
    instagram: Optional[InstagramOutcome] = None
    hashtag: Optional[HashtagOutcome] = None
    blog: Optional[BlogOutcome] = None
    performed: List[str] = field(default_factory=list)
    omitted: Dict[str, str] = field(default_factory=dict)

    @property
    def citations(self) -> List[str]:
        return list(self.search.citations) if self.search else []

    @property
    def search_query(self) -> Optional[str]:
        return self.search.query if self.search else None

    @property
    def has_fresh_analysis(self) -> bool:
        """True when a new (non-cached) analysis may carry profile facts worth extracting."""
        return any(
            outcome is not None and outcome.success and not outcome.cached
            for outcome in (self.instagram, self.hashtag, self.blog)
        )
