"""
Document Provider

Resolves the descriptors extracted from the content tree into concrete index
documents.

Positional Contract
-------------------
``provide`` returns one slot per descriptor, in descriptor order. A slot is
None when no provider function is registered for the descriptor's type, when
the provider function fails, or when it returns nothing. A failing document
never aborts the batch; callers drop the empty slots before upserting.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Protocol, Tuple

from ..contentserver.client import ContentServerClient
from ..contentserver.tree import ContentTreeExtractor
from ..models import DocumentType, IndexDocument, IndexID
from .registry import DocumentProviderFunc

logger = logging.getLogger("indexer.documents")


class DocumentProvider(Protocol):
    """Contract consumed by the build orchestrator."""

    async def provide(self, index_id: IndexID) -> List[Optional[IndexDocument]]:
        ...

    async def provide_paged(
        self,
        index_id: IndexID,
        offset: int,
    ) -> Tuple[List[Optional[IndexDocument]], int]:
        ...


class ContentServerDocumentProvider:
    """
    Builds index documents from the content server.
    """

    def __init__(
        self,
        client: ContentServerClient,
        provider_funcs: Mapping[DocumentType, DocumentProviderFunc],
        extractor: Optional[ContentTreeExtractor] = None,
    ) -> None:
        """
        Parameters
        ----------
        client : ContentServerClient
            Used for the batch URI lookup.

        provider_funcs : Mapping[DocumentType, DocumentProviderFunc]
            Provider function per document type, usually a
            DocumentProviderRegistry.

        extractor : Optional[ContentTreeExtractor]
            Descriptor source. Defaults to an extractor over the same client
            with the configured mime types.
        """
        self._client = client
        self._provider_funcs = provider_funcs
        self._extractor = extractor or ContentTreeExtractor(client)

    async def provide(self, index_id: IndexID) -> List[Optional[IndexDocument]]:
        descriptors = await self._extractor.extract(index_id)

        ids = [str(d.document_id) for d in descriptors]
        uri_map = await self._client.get_uris(str(index_id), ids)

        documents: List[Optional[IndexDocument]] = [None] * len(descriptors)
        for position, descriptor in enumerate(descriptors):
            provider = self._provider_funcs.get(descriptor.document_type)
            if provider is None:
                logger.warning(
                    "No document provider available for document type %s",
                    descriptor.document_type,
                )
                continue

            try:
                documents[position] = await provider(index_id, descriptor.document_id, uri_map)
            except Exception:
                logger.exception(
                    "Index document %s (%s) not created",
                    descriptor.document_id,
                    descriptor.document_type,
                )

        return documents

    async def provide_paged(
        self,
        index_id: IndexID,
        offset: int,
    ) -> Tuple[List[Optional[IndexDocument]], int]:
        raise NotImplementedError("paged document provision is not implemented")
