import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..config import settings
from ..core.errors import ConnectivityError
from .models import RepoNode

logger = logging.getLogger("indexer.contentserver")


class ContentServerError(ConnectivityError):
    """Raised when the content server cannot be queried."""


class ContentServerClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = str(base_url or settings.contentserver_url).rstrip("/")
        self.timeout = timeout or settings.contentserver_timeout
        self._transport = transport

    async def _request(self, handler: str, payload: Dict[str, Any]) -> Any:
        """
        Call a content server handler and return the unwrapped reply.

        Args:
            handler: handler name, appended to the base URL (e.g. "getRepo")
            payload: JSON request body
        """
        url = f"{self.base_url}/{handler}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            logger.error(
                "Content server %s failed (%s): %s",
                handler,
                type(exc).__name__,
                exc,
            )
            raise ContentServerError(
                f"Content server {handler} failed: {type(exc).__name__}",
                status_code=getattr(getattr(exc, "response", None), "status_code", None),
            ) from exc
        except ValueError as exc:
            raise ContentServerError(
                f"Content server {handler} returned invalid JSON"
            ) from exc

        if isinstance(data, dict) and "reply" in data:
            return data["reply"]
        return data

    async def get_repo(self) -> Dict[str, RepoNode]:
        """Returns the root node of every dimension, keyed by dimension name."""
        reply = await self._request("getRepo", {})
        if not isinstance(reply, dict):
            raise ContentServerError("getRepo reply must be an object")

        try:
            return {
                dimension: RepoNode.model_validate(node)
                for dimension, node in reply.items()
                if node is not None
            }
        except ValidationError as exc:
            raise ContentServerError(f"Malformed repo node in getRepo reply: {exc}") from exc

    async def get_uris(self, dimension: str, ids: List[str]) -> Dict[str, str]:
        """Resolves canonical URIs for the given node IDs within a dimension."""
        reply = await self._request("getURIs", {"dimension": dimension, "ids": ids})
        if reply is None:
            return {}
        if not isinstance(reply, dict):
            raise ContentServerError("getURIs reply must be an object")
        return {str(k): str(v) for k, v in reply.items()}
