"""
Search Service

Queries a configured index through its alias, so readers always hit the
generation of the last committed revision.

Responsibilities
----------------
- Build Typesense search parameters from simple arguments
- Execute the search
- Map hits to documents and per-document scores
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, Field, ValidationError

from ..config import settings
from ..core.errors import ConfigurationError
from ..models import DocumentID, IndexID, Score, Scores
from .client import TypesenseClient

logger = logging.getLogger("indexer.search")


class SearchResults(BaseModel):
    documents: List[Any] = Field(default_factory=list)
    scores: Scores = Field(default_factory=dict)
    found: int = 0


# ---------------------------------------------------------------------
# Parameter Helpers
# ---------------------------------------------------------------------

def format_filter_query(filter_by: Optional[Dict[str, Sequence[str]]]) -> str:
    """
    Render a field -> values map as a Typesense ``filter_by`` expression.

    A single value uses exact match (``field:="v"``), several values use the
    array form (``field:["a","b"]``). Clauses are AND-ed.
    """
    if not filter_by:
        return ""

    clauses: List[str] = []
    for key, values in filter_by.items():
        if len(values) == 1:
            clauses.append(f'{key}:="{values[0]}"')
        else:
            formatted = ",".join(f'"{v}"' for v in values)
            clauses.append(f"{key}:[{formatted}]")

    return " && ".join(clauses)


def build_search_params(
    q: str,
    filter_by: Optional[Dict[str, Sequence[str]]],
    page: int,
    per_page: int,
    sort_by: str = "",
) -> Dict[str, Any]:
    parameters: Dict[str, Any] = {
        "q": q,
        "page": page,
        "per_page": per_page,
    }
    filter_string = format_filter_query(filter_by)
    if filter_string:
        parameters["filter_by"] = filter_string
    if sort_by:
        parameters["sort_by"] = sort_by
    return parameters


def _parse_score(hit: Dict[str, Any]) -> int:
    info = hit.get("text_match_info") or {}
    raw = info.get("score")
    if raw is None:
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid score value %r", raw)
        return 0


# ---------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------

class SearchService:
    def __init__(
        self,
        client: TypesenseClient,
        result_model: Optional[Type[BaseModel]] = None,
    ) -> None:
        """
        Parameters
        ----------
        client : TypesenseClient
            Client for the Typesense node.

        result_model : Optional[Type[BaseModel]]
            Model to validate each hit against. Raw dicts are returned when
            omitted.
        """
        self._client = client
        self._result_model = result_model

    async def simple_search(
        self,
        index_id: IndexID,
        q: str,
        filter_by: Optional[Dict[str, Sequence[str]]] = None,
        page: int = 1,
        per_page: int = 10,
        sort_by: str = "",
        query_by: Optional[str] = None,
    ) -> SearchResults:
        parameters = build_search_params(q, filter_by, page, per_page, sort_by)
        parameters["query_by"] = query_by or settings.default_query_by
        return await self.expert_search(index_id, parameters)

    async def expert_search(
        self,
        index_id: IndexID,
        parameters: Optional[Dict[str, Any]],
    ) -> SearchResults:
        """
        Run a search with caller-supplied Typesense parameters.

        Raises
        ------
        ConfigurationError
            If parameters is None.
        TypesenseRequestError
            If the search call fails.
        """
        if parameters is None:
            logger.error("Search parameters are missing")
            raise ConfigurationError("search parameters cannot be None")

        collection_name = str(index_id)
        response = await self._client.search(collection_name, parameters)

        results = SearchResults(found=int(response.get("found", 0) or 0))
        for hit in response.get("hits") or []:
            document = hit.get("document") or {}
            doc_id = document.get("id")
            if not isinstance(doc_id, str):
                logger.warning("Missing or invalid document ID in search result")
                continue

            if self._result_model is not None:
                try:
                    document = self._result_model.model_validate(document)
                except ValidationError as exc:
                    logger.warning(
                        "Failed to parse search result from %s: %s",
                        collection_name,
                        exc,
                    )
                    continue

            results.documents.append(document)
            results.scores[DocumentID(doc_id)] = Score(
                id=DocumentID(doc_id),
                index=_parse_score(hit),
            )

        logger.info(
            "Search on %s completed with %d results",
            collection_name,
            len(results.documents),
        )
        return results
