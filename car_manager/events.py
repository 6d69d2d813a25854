"""
Collection change events.

The collection manager emits one :class:`CollectionChanged` after every
successful mutation, once the new collection has been persisted.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class CollectionChangeKind(str, Enum):
    """What happened to the collection."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class CollectionChanged(BaseModel):
    """A change notification delivered to collection subscribers."""

    model_config = ConfigDict(frozen=True)

    kind: CollectionChangeKind
    car_id: Optional[int] = Field(default=None, description="Affected record, if any")
    size: int = Field(..., ge=0, description="Collection size after the change")
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


CollectionListener = Callable[[CollectionChanged], None]
