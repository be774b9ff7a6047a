from functools import lru_cache

from ..config import settings
from ..contentserver.client import ContentServerClient
from ..documents.provider import ContentServerDocumentProvider
from ..documents.registry import default_registry
from ..indexing.indexer import Indexer
from ..revisions.manager import RevisionManager
from ..typesense.client import TypesenseClient
from ..typesense.search import SearchService


@lru_cache
def get_typesense_client() -> TypesenseClient:
    return TypesenseClient()


@lru_cache
def get_content_server_client() -> ContentServerClient:
    return ContentServerClient()


def get_revision_manager() -> RevisionManager:
    # Not cached: each build tracks its own revision state.
    return RevisionManager(
        get_typesense_client(),
        settings.collections,
        preset=settings.search_preset,
        preset_name=settings.search_preset_name,
    )


@lru_cache
def get_search_service() -> SearchService:
    return SearchService(get_typesense_client())


def get_indexer() -> Indexer:
    return Indexer(
        get_revision_manager(),
        ContentServerDocumentProvider(get_content_server_client(), default_registry),
    )
