"""Result types returned by the memory service."""

from dataclasses import dataclass, field
from typing import Literal, Optional

from casual_creator.models import MemoryRecord


@dataclass
class MemoryWriteResult:
    """
    Outcome of a merge-on-write upsert.

    Attributes:
        action: "added" for a new row, "merged" when an existing near-duplicate
            was overwritten in place
        memory_id: ID of the stored (or overwritten) memory
        similarity: Similarity to the merged memory, None for inserts
    """

    action: Literal["added", "merged"]
    memory_id: str
    similarity: Optional[float] = None
    metadata: dict = field(default_factory=dict)


@dataclass
class RetrievedMemory:
    """A memory returned by retrieval, annotated with its raw similarity to the query."""

    memory: MemoryRecord
    similarity: float

    @property
    def content(self) -> str:
        return self.memory.content
