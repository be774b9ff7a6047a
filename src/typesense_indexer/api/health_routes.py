from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.errors import ConnectivityError
from ..typesense.client import TypesenseClient
from .dependencies import get_typesense_client
from .models import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def health(
    client: Annotated[TypesenseClient, Depends(get_typesense_client)],
) -> HealthResponse:
    try:
        await client.health()
    except ConnectivityError:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unavailable", typesense=client.base_url
            ).model_dump(),
        )
    return HealthResponse(status="ok", typesense=client.base_url)
