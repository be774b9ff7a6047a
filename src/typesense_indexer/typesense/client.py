"""
Typesense API Client

Thin asynchronous client for the subset of the Typesense REST API the indexer
needs: health, collections, aliases, bulk import, presets and search.

Design Goals
------------
- One place that knows about HTTP, headers and status codes
- Every transport or status failure surfaces as TypesenseRequestError
- Responses are returned as plain JSON structures; interpretation is left
  to the revision manager and the search service
- Injectable transport for testing (httpx.MockTransport)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import settings
from ..core.errors import ConnectivityError

logger = logging.getLogger("indexer.typesense")

API_KEY_HEADER = "X-TYPESENSE-API-KEY"


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class TypesenseRequestError(ConnectivityError):
    """Raised when a Typesense call fails at the transport or status level."""


class TypesenseConnectionError(TypesenseRequestError):
    """Raised when the Typesense health probe fails."""


# ---------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------

class TypesenseClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        base_url : Optional[str]
            Typesense node URL. Defaults to settings.typesense_url.

        api_key : Optional[str]
            Admin API key. Defaults to settings.typesense_api_key.

        timeout : Optional[float]
            Per-request timeout in seconds. Defaults to settings.typesense_timeout.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport, used by tests.
        """
        self.base_url = str(base_url or settings.typesense_url).rstrip("/")
        self.api_key = (
            api_key if api_key is not None
            else settings.typesense_api_key.get_secret_value()
        )
        self.timeout = timeout or settings.typesense_timeout
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        content: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        headers = {API_KEY_HEADER: self.api_key}
        if content is not None:
            headers["Content-Type"] = "text/plain"

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=timeout or self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.request(
                    method,
                    path,
                    params=params,
                    json=json_body,
                    content=content,
                    headers=headers,
                )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Typesense %s %s rejected with status %d",
                method,
                path,
                exc.response.status_code,
            )
            raise TypesenseRequestError(
                f"Typesense {method} {path} failed with status {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "Typesense %s %s failed (%s): %s",
                method,
                path,
                type(exc).__name__,
                exc,
            )
            raise TypesenseRequestError(
                f"Typesense {method} {path} failed: {type(exc).__name__}"
            ) from exc

        return resp

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = await self._request(method, path, **kwargs)
        try:
            return resp.json()
        except ValueError as exc:
            raise TypesenseRequestError(
                f"Typesense {method} {path} returned invalid JSON"
            ) from exc

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self, timeout: Optional[float] = None) -> None:
        """
        Probe the node. Raises TypesenseConnectionError unless it reports ok.
        """
        try:
            data = await self._request_json(
                "GET",
                "/health",
                timeout=timeout or settings.typesense_health_timeout,
            )
        except TypesenseRequestError as exc:
            raise TypesenseConnectionError(
                f"Typesense health check failed: {exc}",
                status_code=exc.status_code,
            ) from exc

        if not isinstance(data, dict) or data.get("ok") is not True:
            raise TypesenseConnectionError("Typesense reported unhealthy node")

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def retrieve_collections(self) -> List[Dict[str, Any]]:
        data = await self._request_json("GET", "/collections")
        if not isinstance(data, list):
            raise TypesenseRequestError("Collection listing must be a list")
        return data

    async def create_collection(self, schema: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request_json("POST", "/collections", json_body=schema)

    async def delete_collection(self, name: str) -> Dict[str, Any]:
        return await self._request_json("DELETE", f"/collections/{name}")

    # ------------------------------------------------------------------
    # Aliases
    # ------------------------------------------------------------------

    async def retrieve_aliases(self) -> List[Dict[str, Any]]:
        data = await self._request_json("GET", "/aliases")
        aliases = data.get("aliases", []) if isinstance(data, dict) else None
        if not isinstance(aliases, list):
            raise TypesenseRequestError("Alias listing must contain an 'aliases' list")
        return aliases

    async def upsert_alias(self, name: str, collection_name: str) -> Dict[str, Any]:
        return await self._request_json(
            "PUT",
            f"/aliases/{name}",
            json_body={"collection_name": collection_name},
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def import_documents(
        self,
        collection_name: str,
        documents: Sequence[Dict[str, Any]],
        action: str = "upsert",
    ) -> List[Dict[str, Any]]:
        """
        Bulk import documents as JSONL.

        Returns one result object per document, in input order:
        ``{"success": true}`` or ``{"success": false, "error": "..."}``.
        """
        body = "\n".join(json.dumps(doc) for doc in documents)
        resp = await self._request(
            "POST",
            f"/collections/{collection_name}/documents/import",
            params={"action": action},
            content=body,
        )

        results: List[Dict[str, Any]] = []
        for line in resp.text.splitlines():
            if not line.strip():
                continue
            try:
                results.append(json.loads(line))
            except ValueError:
                results.append({"success": False, "error": f"unparsable result: {line}"})
        return results

    async def search(
        self,
        collection_name: str,
        parameters: Dict[str, Any],
    ) -> Dict[str, Any]:
        return await self._request_json(
            "GET",
            f"/collections/{collection_name}/documents/search",
            params=parameters,
        )

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    async def upsert_preset(self, name: str, value: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request_json(
            "PUT",
            f"/presets/{name}",
            json_body={"value": value},
        )
