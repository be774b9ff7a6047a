"""
Reindex Routes

Triggers a full build. Only one build runs per process; a second request
while a build is in progress is refused with 409. Running builds from several
processes against the same indices is not guarded here.
"""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from .dependencies import get_indexer
from ..indexing.indexer import Indexer
from ..models import BuildReport

logger = logging.getLogger("indexer.app")

router = APIRouter(prefix="/reindex", tags=["reindex"])

_build_lock = asyncio.Lock()


@router.post(
    "",
    response_model=BuildReport,
    summary="Rebuild all configured indices",
)
async def reindex(
    indexer: Annotated[Indexer, Depends(get_indexer)],
) -> BuildReport:
    if _build_lock.locked():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A build is already running",
        )

    async with _build_lock:
        report = await indexer.run()

    logger.info(
        "Build %s finished: %s (%d documents)",
        report.revision_id,
        report.outcome,
        report.documents_indexed,
    )
    return report
