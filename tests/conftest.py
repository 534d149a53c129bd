import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import copy
import re
from typing import Any, Dict, List

import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig
from elasticsearch import BadRequestError, NotFoundError

from canvas.search.config import SearchSettings
from canvas.search.registry import build_registry
from canvas.search.services import DocumentIndexGateway


def _meta(status: int) -> ApiResponseMeta:
    return ApiResponseMeta(
        status=status,
        http_version="1.1",
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig("http", "localhost", 9200),
    )


def not_found_error(index: str, doc_id: str) -> NotFoundError:
    return NotFoundError(
        message="not_found",
        meta=_meta(404),
        body={"_index": index, "_id": doc_id, "result": "not_found"},
    )


def already_exists_error(index: str) -> BadRequestError:
    return BadRequestError(
        message="resource_already_exists_exception",
        meta=_meta(400),
        body={"error": {"type": "resource_already_exists_exception", "index": index}, "status": 400},
    )


def _tokens(value: Any) -> List[str]:
    return re.findall(r"\w+", str(value).lower())


class FakeIndices:
    def __init__(self, es: "FakeElasticsearch") -> None:
        self._es = es

    async def exists(self, index: str) -> bool:
        self._es.calls.append(("indices.exists", index))
        return index in self._es.mappings

    async def create(self, index: str, settings: Dict[str, Any], mappings: Dict[str, Any]) -> Dict[str, Any]:
        self._es.calls.append(("indices.create", index))
        if index in self._es.fail_create:
            raise self._es.fail_create[index]
        if index in self._es.mappings:
            raise already_exists_error(index)
        self._es.settings[index] = copy.deepcopy(settings)
        self._es.mappings[index] = copy.deepcopy(mappings)
        self._es.docs.setdefault(index, {})
        return {"acknowledged": True, "index": index}

    async def get_mapping(self, index: str) -> Dict[str, Any]:
        self._es.calls.append(("indices.get_mapping", index))
        return {index: {"mappings": copy.deepcopy(self._es.mappings[index])}}


class FakeElasticsearch:
    """In-memory stand-in for AsyncElasticsearch covering the calls the gateway makes.

    Scoring is a per-token count multiplied by the field boost, summed across
    fields the way ``most_fields`` combines them.
    """

    def __init__(self) -> None:
        self.indices = FakeIndices(self)
        self.mappings: Dict[str, Dict[str, Any]] = {}
        self.settings: Dict[str, Dict[str, Any]] = {}
        self.docs: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.fail_create: Dict[str, Exception] = {}
        self.calls: List[tuple] = []
        self.last_search: Dict[str, Any] | None = None
        self.closed = False

    async def index(self, index: str, id: str, document: Dict[str, Any], refresh: str | None = None) -> Dict[str, Any]:
        self.calls.append(("index", index, id, refresh))
        store = self.docs.setdefault(index, {})
        result = "updated" if id in store else "created"
        store[id] = copy.deepcopy(document)
        return {"_index": index, "_id": id, "result": result}

    async def delete(self, index: str, id: str, refresh: str | None = None) -> Dict[str, Any]:
        self.calls.append(("delete", index, id, refresh))
        store = self.docs.setdefault(index, {})
        if id not in store:
            raise not_found_error(index, id)
        del store[id]
        return {"_index": index, "_id": id, "result": "deleted"}

    async def search(self, index: str, query: Dict[str, Any], size: int, highlight: Dict[str, Any]) -> Dict[str, Any]:
        self.last_search = {"index": index, "query": query, "size": size, "highlight": highlight}
        self.calls.append(("search", index))
        bool_query = query["bool"]
        multi_match = bool_query["must"][0]["multi_match"]
        terms = _tokens(multi_match["query"])
        boosts = {}
        for field in multi_match["fields"]:
            name, _, boost = field.partition("^")
            boosts[name] = float(boost or 1)

        hits = []
        for doc_id, source in self.docs.get(index, {}).items():
            if not self._passes_filters(doc_id, source, bool_query.get("filter", [])):
                continue
            score = 0.0
            for name, boost in boosts.items():
                field_tokens = _tokens(source.get(name, ""))
                score += boost * sum(field_tokens.count(term) for term in terms)
            if score <= 0:
                continue
            hit = {"_index": index, "_id": doc_id, "_score": score, "_source": copy.deepcopy(source)}
            snippets = self._highlight(source, highlight["fields"], terms)
            if snippets:
                hit["highlight"] = snippets
            hits.append(hit)

        hits.sort(key=lambda hit: hit["_score"], reverse=True)
        return {"hits": {"total": {"value": len(hits), "relation": "eq"}, "hits": hits[:size]}}

    @staticmethod
    def _passes_filters(doc_id: str, source: Dict[str, Any], filters: List[Dict[str, Any]]) -> bool:
        for clause in filters:
            if "term" in clause:
                (field, value), = clause["term"].items()
                if source.get(field) != value:
                    return False
            elif "terms" in clause:
                (field, values), = clause["terms"].items()
                candidate = doc_id if field == "_id" else source.get(field)
                if candidate not in values:
                    return False
        return True

    @staticmethod
    def _highlight(source: Dict[str, Any], fields: Dict[str, Any], terms: List[str]) -> Dict[str, List[str]]:
        snippets: Dict[str, List[str]] = {}
        for name in fields:
            value = source.get(name)
            if not value:
                continue
            words = str(value).split()
            if not any(word.lower().strip(".,") in terms for word in words):
                continue
            marked = [f"<em>{word}</em>" if word.lower().strip(".,") in terms else word for word in words]
            snippets[name] = [" ".join(marked)]
        return snippets

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings(
        elasticsearch_url="http://localhost:9200",
        index_prefix="test",
        default_analyzer="standard",
        max_search_limit=50,
        refresh=None,
    )


@pytest.fixture
def fake_es() -> FakeElasticsearch:
    return FakeElasticsearch()


@pytest.fixture
def gateway(fake_es: FakeElasticsearch, settings: SearchSettings) -> DocumentIndexGateway:
    return DocumentIndexGateway(fake_es, registry=build_registry(settings), settings=settings)
