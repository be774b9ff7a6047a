import json
from typing import Any, Dict, List, Optional, Set

import httpx
import pytest

from typesense_indexer.contentserver.client import ContentServerClient
from typesense_indexer.typesense.client import TypesenseClient

TYPESENSE_URL = "http://typesense.test"
CONTENTSERVER_URL = "http://contentserver.test/contentserver"


class FakeTypesense:
    """
    In-memory Typesense node served through httpx.MockTransport.
    """

    def __init__(self):
        self.healthy = True
        self.collections: Dict[str, Dict[str, Any]] = {}
        self.documents: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.aliases: Dict[str, str] = {}
        self.presets: Dict[str, Dict[str, Any]] = {}
        self.search_response: Dict[str, Any] = {"found": 0, "hits": []}

        self.fail_alias: Set[str] = set()
        self.fail_delete: Set[str] = set()
        self.fail_import: Set[str] = set()
        self.reject_ids: Set[str] = set()

        self.requests: List[httpx.Request] = []

    # --------------------------------------------------------------
    # Helpers for tests
    # --------------------------------------------------------------

    def add_collection(self, name: str) -> None:
        self.collections[name] = {"name": name, "fields": []}
        self.documents[name] = {}

    def calls(self, method: str, path_prefix: str = "") -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.startswith(path_prefix)
        ]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # --------------------------------------------------------------
    # Request handling
    # --------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method
        parts = [p for p in request.url.path.split("/") if p]

        if parts == ["health"]:
            if not self.healthy:
                return httpx.Response(503, json={"ok": False})
            return httpx.Response(200, json={"ok": True})

        if parts == ["collections"]:
            if method == "GET":
                return httpx.Response(200, json=list(self.collections.values()))
            schema = json.loads(request.content)
            if schema["name"] in self.collections:
                return httpx.Response(409, json={"message": "already exists"})
            self.collections[schema["name"]] = schema
            self.documents[schema["name"]] = {}
            return httpx.Response(201, json=schema)

        if len(parts) == 2 and parts[0] == "collections" and method == "DELETE":
            name = parts[1]
            if name in self.fail_delete:
                return httpx.Response(500, json={"message": "boom"})
            if name not in self.collections:
                return httpx.Response(404, json={"message": "not found"})
            self.documents.pop(name, None)
            return httpx.Response(200, json=self.collections.pop(name))

        if parts == ["aliases"]:
            aliases = [
                {"name": n, "collection_name": c} for n, c in self.aliases.items()
            ]
            return httpx.Response(200, json={"aliases": aliases})

        if len(parts) == 2 and parts[0] == "aliases" and method == "PUT":
            name = parts[1]
            if name in self.fail_alias:
                return httpx.Response(500, json={"message": "boom"})
            self.aliases[name] = json.loads(request.content)["collection_name"]
            return httpx.Response(200, json={"name": name, "collection_name": self.aliases[name]})

        if len(parts) == 2 and parts[0] == "presets" and method == "PUT":
            self.presets[parts[1]] = json.loads(request.content)["value"]
            return httpx.Response(200, json={"name": parts[1]})

        if len(parts) == 4 and parts[2] == "documents" and parts[3] == "import":
            return self._import(parts[1], request)

        if len(parts) == 4 and parts[2] == "documents" and parts[3] == "search":
            name = self.aliases.get(parts[1], parts[1])
            if name not in self.collections:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json=self.search_response)

        return httpx.Response(404, json={"message": "unknown route"})

    def _import(self, name: str, request: httpx.Request) -> httpx.Response:
        if name in self.fail_import:
            return httpx.Response(500, json={"message": "boom"})
        if name not in self.collections:
            return httpx.Response(404, json={"message": "not found"})

        lines = []
        for raw in request.content.decode().splitlines():
            doc = json.loads(raw)
            if doc["id"] in self.reject_ids:
                lines.append(json.dumps({"success": False, "error": "field missing"}))
            else:
                self.documents[name][doc["id"]] = doc
                lines.append(json.dumps({"success": True}))
        return httpx.Response(200, text="\n".join(lines))


class FakeContentServer:
    """
    Content server answering getRepo and getURIs.
    """

    def __init__(self, repo: Optional[Dict[str, Any]] = None):
        self.repo = repo or {}
        self.uris: Dict[str, str] = {}
        self.fail = False
        self.requests: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(502, text="bad gateway")

        handler = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content or b"{}")

        if handler == "getRepo":
            return httpx.Response(200, json={"reply": self.repo})
        if handler == "getURIs":
            reply = {i: self.uris[i] for i in body["ids"] if i in self.uris}
            return httpx.Response(200, json={"reply": reply})
        return httpx.Response(404)


@pytest.fixture
def fake_typesense():
    return FakeTypesense()


@pytest.fixture
def typesense_client(fake_typesense):
    return TypesenseClient(
        base_url=TYPESENSE_URL,
        api_key="test-key",
        timeout=5,
        transport=fake_typesense.transport(),
    )


@pytest.fixture
def fake_contentserver():
    return FakeContentServer()


@pytest.fixture
def contentserver_client(fake_contentserver):
    return ContentServerClient(
        base_url=CONTENTSERVER_URL,
        timeout=5,
        transport=fake_contentserver.transport(),
    )


def repo_node(node_id, mime_type="", children=None, hidden=False, data=None):
    """Build a content server node as JSON."""
    children = children or []
    return {
        "id": node_id,
        "mimeType": mime_type,
        "hidden": hidden,
        "data": data,
        "nodes": {c["id"]: c for c in children} or None,
        "index": [c["id"] for c in children] or None,
    }
