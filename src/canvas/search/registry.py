"""Index schema registry.

One entry per entity type: the index name, its analysis settings, the field
mapping and the weighted fields searched by full-text queries. The registry
is built once from settings and never mutated afterwards.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Tuple, Type

from .config import SearchSettings, get_settings
from .errors import RegistryError, UnknownEntityTypeError
from .models import (
    CollectionDocument,
    ConversationMessageDocument,
    EntityType,
    IndexedDocument,
    NoteDocument,
    ResourceDocument,
    SkillDocument,
)

FIELD_TYPES = frozenset({"text", "keyword", "date"})


@dataclass(frozen=True, slots=True)
class WeightedField:
    name: str
    weight: int = 1

    def as_query_field(self) -> str:
        return self.name if self.weight == 1 else f"{self.name}^{self.weight}"


@dataclass(frozen=True, slots=True)
class IndexSpec:
    entity_type: EntityType
    index: str
    settings: Mapping[str, Any]
    properties: Mapping[str, str]
    weighted_fields: Tuple[WeightedField, ...]
    document_model: Type[IndexedDocument]

    def index_settings(self) -> Dict[str, Any]:
        return copy.deepcopy(dict(self.settings))

    def mappings(self) -> Dict[str, Any]:
        return {"properties": {name: {"type": kind} for name, kind in self.properties.items()}}

    def highlight_fields(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self.weighted_fields if self.properties.get(field.name) == "text")

    def validate(self) -> None:
        unknown = set(self.properties.values()) - FIELD_TYPES
        if unknown:
            raise RegistryError(f"{self.index}: unsupported field types {sorted(unknown)}")
        if self.properties.get("uid") != "keyword":
            raise RegistryError(f"{self.index}: uid must be mapped as keyword")
        if not self.weighted_fields:
            raise RegistryError(f"{self.index}: at least one weighted field is required")
        for field in self.weighted_fields:
            if field.name not in self.properties:
                raise RegistryError(f"{self.index}: weighted field {field.name!r} missing from mapping")
            if field.weight < 1:
                raise RegistryError(f"{self.index}: weight for {field.name!r} must be positive")


_COMMON = {"createdAt": "date", "updatedAt": "date", "uid": "keyword"}

# entity type -> (index suffix, properties, weighted fields, document model)
_SCHEMAS: Dict[EntityType, Tuple[str, Dict[str, str], Tuple[WeightedField, ...], Type[IndexedDocument]]] = {
    EntityType.RESOURCE: (
        "resources",
        {"title": "text", "content": "text", "url": "keyword", **_COMMON},
        (WeightedField("title", 2), WeightedField("content")),
        ResourceDocument,
    ),
    EntityType.NOTE: (
        "notes",
        {"title": "text", "content": "text", **_COMMON},
        (WeightedField("title", 2), WeightedField("content")),
        NoteDocument,
    ),
    EntityType.COLLECTION: (
        "collections",
        {"title": "text", "description": "text", **_COMMON},
        (WeightedField("title", 2), WeightedField("description")),
        CollectionDocument,
    ),
    EntityType.CONVERSATION_MESSAGE: (
        "conversation_messages",
        {"convId": "keyword", "convTitle": "text", "content": "text", "type": "keyword", **_COMMON},
        (WeightedField("convTitle", 2), WeightedField("content")),
        ConversationMessageDocument,
    ),
    EntityType.SKILL: (
        "skills",
        {"displayName": "text", "description": "text", "tplName": "keyword", **_COMMON},
        (WeightedField("displayName", 2), WeightedField("description"), WeightedField("tplName")),
        SkillDocument,
    ),
}


def analysis_settings(analyzer: str) -> Dict[str, Any]:
    return {"analysis": {"analyzer": {"default": {"type": analyzer}}}}


class IndexRegistry:
    """Read-only lookup of index specs keyed by entity type."""

    def __init__(self, specs: Mapping[EntityType, IndexSpec]) -> None:
        for spec in specs.values():
            spec.validate()
        names = [spec.index for spec in specs.values()]
        if len(set(names)) != len(names):
            raise RegistryError(f"index names must be unique: {names}")
        self._specs: Mapping[EntityType, IndexSpec] = MappingProxyType(dict(specs))

    def get(self, entity_type: EntityType | str) -> IndexSpec:
        try:
            return self._specs[EntityType(entity_type)]
        except (KeyError, ValueError) as exc:
            raise UnknownEntityTypeError(f"no index registered for entity type {entity_type!r}") from exc

    def __iter__(self) -> Iterator[IndexSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)


def build_registry(settings: SearchSettings | None = None) -> IndexRegistry:
    settings = settings or get_settings()
    shared_settings = MappingProxyType(analysis_settings(settings.default_analyzer))
    specs = {
        entity_type: IndexSpec(
            entity_type=entity_type,
            index=f"{settings.index_prefix}_{suffix}",
            settings=shared_settings,
            properties=MappingProxyType(properties),
            weighted_fields=weighted,
            document_model=model,
        )
        for entity_type, (suffix, properties, weighted, model) in _SCHEMAS.items()
    }
    return IndexRegistry(specs)


__all__ = ["IndexRegistry", "IndexSpec", "WeightedField", "analysis_settings", "build_registry"]
