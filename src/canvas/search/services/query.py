from __future__ import annotations

from typing import Any, Dict, List

from ..models import SearchRequest, User
from ..registry import IndexSpec


def build_search_body(spec: IndexSpec, user: User, request: SearchRequest, max_limit: int | None = None) -> Dict[str, Any]:
    """Compose the bool query for a scoped, weighted full-text search.

    ``uid`` and the optional entity ids are non-scoring filters so only the
    weighted text fields contribute to ranking.
    """

    filters: List[Dict[str, Any]] = [{"term": {"uid": user.uid}}]
    entity_ids = request.entity_ids()
    if entity_ids:
        filters.append({"terms": {"_id": entity_ids}})

    size = request.limit if max_limit is None else min(request.limit, max_limit)
    return {
        "query": {
            "bool": {
                "must": [
                    {
                        "multi_match": {
                            "query": request.query,
                            "fields": [field.as_query_field() for field in spec.weighted_fields],
                            "type": "most_fields",
                        }
                    }
                ],
                "filter": filters,
            }
        },
        "size": size,
        "highlight": {"fields": {name: {} for name in spec.highlight_fields()}},
    }


__all__ = ["build_search_body"]
