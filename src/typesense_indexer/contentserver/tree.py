"""
Content Tree Extraction

Turns the content server's node tree for one dimension into the flat list of
document descriptors that should be indexed.

Inclusion Rules (in order)
--------------------------
1. A null node is skipped.
2. A node whose data carries a truthy exclusion flag is skipped, whatever
   its type.
3. Optionally, a node with the ``hidden`` visibility flag is skipped.
4. A node whose mime type is not supported is skipped.
Everything else is indexed.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..config import settings
from ..core.errors import ExtractionError
from ..models import DocumentDescriptor, DocumentID, DocumentType, IndexID
from .client import ContentServerClient
from .models import RepoNode

logger = logging.getLogger("indexer.contentserver")


class DimensionNotFoundError(ExtractionError):
    """Raised when the content server has no root node for an index."""


# ---------------------------------------------------------------------
# Tree Helpers
# ---------------------------------------------------------------------

def flatten_repo_node(root: Optional[RepoNode]) -> Dict[str, RepoNode]:
    """
    Collect every node of a tree into a map keyed by node ID.

    The walk is iterative and remembers visited IDs, so a cyclic or very
    deep tree cannot recurse forever. Should two distinct nodes share an ID,
    the one visited last wins.
    """
    node_map: Dict[str, RepoNode] = {}
    visited: set[int] = set()
    stack: List[Optional[RepoNode]] = [root]

    while stack:
        node = stack.pop()
        if node is None or id(node) in visited:
            continue
        visited.add(id(node))

        node_map[node.id] = node
        # Reversed so children are visited in index order.
        stack.extend(reversed(node.children()))

    return node_map


def is_indexable(
    node: Optional[RepoNode],
    supported_mime_types: Iterable[str],
    exclude_key: str,
    skip_hidden: bool = False,
) -> bool:
    if node is None:
        return False
    if node.data.get(exclude_key):
        return False
    if skip_hidden and node.hidden:
        return False
    return node.mime_type in supported_mime_types


# ---------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------

class ContentTreeExtractor:
    def __init__(
        self,
        client: ContentServerClient,
        supported_mime_types: Optional[Iterable[str]] = None,
        exclude_key: Optional[str] = None,
        skip_hidden: Optional[bool] = None,
    ) -> None:
        self._client = client
        self._supported_mime_types = frozenset(
            settings.supported_mime_types
            if supported_mime_types is None
            else supported_mime_types
        )
        self._exclude_key = exclude_key or settings.exclude_from_search_key
        self._skip_hidden = settings.skip_hidden_nodes if skip_hidden is None else skip_hidden

    async def extract(self, index_id: IndexID) -> List[DocumentDescriptor]:
        """
        Return the descriptors to index for one dimension, sorted by document ID.

        Raises
        ------
        DimensionNotFoundError
            If the repo has no root node for the index ID.
        ContentServerError
            If the repo cannot be fetched.
        """
        repo = await self._client.get_repo()

        root = repo.get(str(index_id))
        if root is None:
            raise DimensionNotFoundError(f"contentserver dimension {index_id} not found")

        node_map = flatten_repo_node(root)

        descriptors = [
            DocumentDescriptor(
                document_type=DocumentType(node.mime_type),
                document_id=DocumentID(node.id),
            )
            for node in node_map.values()
            if is_indexable(
                node,
                self._supported_mime_types,
                self._exclude_key,
                self._skip_hidden,
            )
        ]
        descriptors.sort(key=lambda d: d.document_id)

        logger.info(
            "Extracted %d of %d nodes for dimension %s",
            len(descriptors),
            len(node_map),
            index_id,
        )
        return descriptors
