import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

MemorySource = Literal[
    "conversation",
    "instagram_analysis",
    "hashtag_search",
    "blog_analysis",
    "search_result",
    "user_confirmed",
]

MessageRole = Literal["user", "assistant", "system"]

DEFAULT_CONVERSATION_TITLE = "New Conversation"


class UserProfile(BaseModel):
    """Per-user creator profile.

    Scalar fields are set by profile-patch extraction; ``profile_data`` is the
    free-form extension map that also holds provider-derived sub-objects
    (``instagram_profile``, ``competitor_analyses``, ``hashtag_searches``,
    ``blog_profile``).
    """

    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    content_niche: List[str] = Field(default_factory=list)
    primary_platform: Optional[str] = None
    primary_platforms: List[str] = Field(default_factory=list)
    profile_data: Dict[str, Any] = Field(
        default_factory=dict, description="Extension map (audience, voice, provider results)"
    )
    profile_completeness: int = Field(
        default=0, ge=0, le=100, description="Derived completeness score"
    )
    updated_at: Optional[datetime] = None


class MemoryRecord(BaseModel):
    """A durable, embedded semantic fact about a user."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    content: str
    embedding: List[float] = Field(default_factory=list)
    source: MemorySource = "conversation"
    importance: float = Field(default=0.5, ge=0.0, le=1.0)
    retrieval_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)
    last_retrieved_at: Optional[datetime] = None
    conversation_id: Optional[str] = None
    related_memory_ids: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ConversationMessage(BaseModel):
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)


class Conversation(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    title: str = DEFAULT_CONVERSATION_TITLE
    created_at: datetime = Field(default_factory=datetime.now)
