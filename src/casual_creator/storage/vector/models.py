from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from casual_creator.models import MemoryRecord, MemorySource


class MemoryPointPayload(BaseModel):
    """Payload stored next to a memory vector. Timestamps are ISO strings."""

    content: str
    user_id: str
    source: MemorySource = "conversation"
    importance: float = 0.5
    retrieval_count: int = 0
    created_at: str
    last_retrieved_at: Optional[str] = None
    conversation_id: Optional[str] = None
    related_memory_ids: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @staticmethod
    def from_record(record: MemoryRecord) -> "MemoryPointPayload":
        return MemoryPointPayload(
            content=record.content,
            user_id=record.user_id,
            source=record.source,
            importance=record.importance,
            retrieval_count=record.retrieval_count,
            created_at=record.created_at.isoformat(),
            last_retrieved_at=(
                record.last_retrieved_at.isoformat() if record.last_retrieved_at else None
            ),
            conversation_id=record.conversation_id,
            related_memory_ids=list(record.related_memory_ids),
            keywords=list(record.keywords),
            metadata=dict(record.metadata),
        )


class MemoryPoint(BaseModel):
    id: str
    vector: List[float]
    payload: MemoryPointPayload

    def to_record(self) -> MemoryRecord:
        payload = self.payload
        return MemoryRecord(
            id=self.id,
            user_id=payload.user_id,
            content=payload.content,
            embedding=list(self.vector),
            source=payload.source,
            importance=payload.importance,
            retrieval_count=payload.retrieval_count,
            created_at=datetime.fromisoformat(payload.created_at),
            last_retrieved_at=(
                datetime.fromisoformat(payload.last_retrieved_at)
                if payload.last_retrieved_at
                else None
            ),
            conversation_id=payload.conversation_id,
            related_memory_ids=list(payload.related_memory_ids),
            keywords=list(payload.keywords),
            metadata=dict(payload.metadata),
        )
