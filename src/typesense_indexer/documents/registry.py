"""
Document Provider Registry

Maps a content-server mime type (document type) to the async function that
turns one node into an index document. Only registered types can produce
documents; everything else is skipped by the document provider.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Dict, Iterator, Mapping, Optional

from ..models import DocumentID, DocumentType, IndexDocument, IndexID


DocumentProviderFunc = Callable[
    [IndexID, DocumentID, Mapping[str, str]],
    Awaitable[Optional[IndexDocument]],
]


class DocumentProviderRegistry(Mapping[DocumentType, DocumentProviderFunc]):
    """
    Explicit allow-list of document provider functions.

    Usage::

        registry = DocumentProviderRegistry()

        @registry.register("application/x-article")
        async def article(index_id, document_id, uri_map):
            ...
    """

    def __init__(self) -> None:
        self._funcs: Dict[DocumentType, DocumentProviderFunc] = {}

    def register(
        self,
        document_type: str,
    ) -> Callable[[DocumentProviderFunc], DocumentProviderFunc]:
        def decorator(func: DocumentProviderFunc) -> DocumentProviderFunc:
            self.add(document_type, func)
            return func
        return decorator

    def add(self, document_type: str, func: DocumentProviderFunc) -> None:
        if DocumentType(document_type) in self._funcs:
            raise ValueError(f"document provider for {document_type!r} already registered")
        self._funcs[DocumentType(document_type)] = func

    def __getitem__(self, document_type: DocumentType) -> DocumentProviderFunc:
        return self._funcs[document_type]

    def __iter__(self) -> Iterator[DocumentType]:
        return iter(self._funcs)

    def __len__(self) -> int:
        return len(self._funcs)


# Global registry used by the HTTP surface and the reindex script
default_registry = DocumentProviderRegistry()
