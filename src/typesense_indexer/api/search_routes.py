"""
Search Routes

Full-text search against an index alias. The alias always resolves to the
generation of the last committed revision.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from .dependencies import get_search_service
from .models import SearchRequest, SearchResponse
from ..models import IndexID
from ..typesense.search import SearchService

router = APIRouter(prefix="/search", tags=["search"])


@router.post(
    "/{index_id}",
    response_model=SearchResponse,
    summary="Simple search on one index",
    status_code=status.HTTP_200_OK,
)
async def search(
    index_id: str,
    req: SearchRequest,
    search_service: Annotated[SearchService, Depends(get_search_service)],
) -> SearchResponse:
    """
    Run a simple search on the alias named ``index_id``.

    Upstream failures are mapped to 502 by the global exception handlers.
    """
    results = await search_service.simple_search(
        IndexID(index_id),
        req.q,
        filter_by=req.filter_by,
        page=req.page,
        per_page=req.per_page,
        sort_by=req.sort_by,
        query_by=req.query_by,
    )
    return SearchResponse(
        hits=list(results.documents),
        scores=results.scores,
        found=results.found,
    )
