from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class EntityType(str, Enum):
    """Document kinds that own a dedicated search index."""

    RESOURCE = "resource"
    NOTE = "note"
    COLLECTION = "collection"
    CONVERSATION_MESSAGE = "conversationMessage"
    SKILL = "skill"


class MessageType(str, Enum):
    AI = "ai"
    HUMAN = "human"
    SYSTEM = "system"


class IndexedDocument(BaseModel):
    """Fields shared by every indexed document.

    Attributes are snake_case; the stored body uses the camelCase aliases.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    uid: str = Field(min_length=1, description="Owning user identifier, used for visibility filtering only")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    def to_source(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ResourceDocument(IndexedDocument):
    title: str | None = None
    content: str | None = None
    url: str | None = None


class NoteDocument(IndexedDocument):
    title: str | None = None
    content: str | None = None


class CollectionDocument(IndexedDocument):
    title: str | None = None
    description: str | None = None


class ConversationMessageDocument(IndexedDocument):
    conv_id: str | None = Field(default=None, alias="convId")
    conv_title: str | None = Field(default=None, alias="convTitle")
    content: str | None = None
    type: MessageType | None = None


class SkillDocument(IndexedDocument):
    display_name: str | None = Field(default=None, alias="displayName")
    description: str | None = None
    tpl_name: str | None = Field(default=None, alias="tplName")


class User(BaseModel):
    uid: str = Field(min_length=1)


class EntityRef(BaseModel):
    """Reference to a document used to narrow a search to a known subset."""

    model_config = ConfigDict(populate_by_name=True)

    entity_id: str = Field(alias="entityId", min_length=1)
    entity_type: str | None = Field(default=None, alias="entityType")


class SearchRequest(BaseModel):
    query: str
    limit: int = Field(default=10, ge=1)
    entities: List[EntityRef] | None = None

    @field_validator("query")
    @classmethod
    def ensure_query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be empty")
        return value

    def entity_ids(self) -> List[str]:
        return [entity.entity_id for entity in self.entities or []]


class SearchHit(BaseModel):
    """Scored hit as returned by the engine, with per-field highlight snippets."""

    model_config = ConfigDict(populate_by_name=True)

    index: str = Field(alias="_index")
    id: str = Field(alias="_id")
    score: float | None = Field(default=None, alias="_score")
    source: Dict[str, Any] = Field(default_factory=dict, alias="_source")
    highlight: Dict[str, List[str]] = Field(default_factory=dict)


class WriteResult(BaseModel):
    id: str
    index: str
    result: str


class IndexBootstrapResult(BaseModel):
    entity_type: EntityType
    index: str
    status: Literal["created", "exists", "mismatch", "failed"]
    error: str | None = None
    mismatches: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in ("created", "exists")


class BootstrapReport(BaseModel):
    results: List[IndexBootstrapResult] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def healthy(self) -> bool:
        return all(result.ok for result in self.results)

    def failed(self) -> List[IndexBootstrapResult]:
        return [result for result in self.results if not result.ok]


__all__ = [
    "BootstrapReport",
    "CollectionDocument",
    "ConversationMessageDocument",
    "EntityRef",
    "EntityType",
    "IndexBootstrapResult",
    "IndexedDocument",
    "MessageType",
    "NoteDocument",
    "ResourceDocument",
    "SearchHit",
    "SearchRequest",
    "SkillDocument",
    "User",
    "WriteResult",
]
