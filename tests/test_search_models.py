from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from canvas.search.models import (
    BootstrapReport,
    ConversationMessageDocument,
    EntityType,
    IndexBootstrapResult,
    MessageType,
    ResourceDocument,
    SearchHit,
    SearchRequest,
    SkillDocument,
)


def test_document_accepts_camel_case_aliases() -> None:
    message = ConversationMessageDocument.model_validate(
        {"id": "m1", "uid": "u1", "convId": "c1", "convTitle": "Planning", "type": "human"}
    )
    assert message.conv_id == "c1"
    assert message.conv_title == "Planning"
    assert message.type is MessageType.HUMAN


def test_document_to_source_uses_stored_names_and_drops_missing_fields() -> None:
    skill = SkillDocument(
        id="s1",
        uid="u1",
        display_name="Summarise",
        tpl_name="summary",
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )
    source = skill.to_source()
    assert source == {
        "id": "s1",
        "uid": "u1",
        "displayName": "Summarise",
        "tplName": "summary",
        "createdAt": "2024-05-01T12:00:00Z",
    }


def test_document_requires_id_and_uid() -> None:
    with pytest.raises(ValidationError):
        ResourceDocument(id="", uid="u1")
    with pytest.raises(ValidationError):
        ResourceDocument.model_validate({"id": "r1"})


def test_search_request_rejects_blank_query_and_non_positive_limit() -> None:
    with pytest.raises(ValidationError):
        SearchRequest(query="   ")
    with pytest.raises(ValidationError):
        SearchRequest(query="quantum", limit=0)
    with pytest.raises(ValidationError):
        SearchRequest(query="quantum", limit=-3)


def test_search_request_entity_ids() -> None:
    request = SearchRequest.model_validate(
        {"query": "q", "entities": [{"entityId": "r1", "entityType": "resource"}, {"entityId": "r2"}]}
    )
    assert request.limit == 10
    assert request.entity_ids() == ["r1", "r2"]
    assert SearchRequest(query="q").entity_ids() == []


def test_search_hit_round_trips_engine_field_names() -> None:
    hit = SearchHit.model_validate(
        {"_index": "idx", "_id": "r1", "_score": 1.5, "_source": {"title": "x"}, "highlight": {"title": ["<em>x</em>"]}}
    )
    assert hit.id == "r1"
    dumped = hit.model_dump(by_alias=True)
    assert dumped["_id"] == "r1"
    assert dumped["_score"] == 1.5
    assert dumped["_source"] == {"title": "x"}


def test_bootstrap_report_health() -> None:
    ok = IndexBootstrapResult(entity_type=EntityType.NOTE, index="notes", status="exists")
    created = IndexBootstrapResult(entity_type=EntityType.SKILL, index="skills", status="created")
    failed = IndexBootstrapResult(entity_type=EntityType.RESOURCE, index="resources", status="failed", error="boom")

    assert BootstrapReport(results=[ok, created]).healthy
    report = BootstrapReport(results=[ok, failed])
    assert not report.healthy
    assert report.failed() == [failed]
    assert report.model_dump()["healthy"] is False
