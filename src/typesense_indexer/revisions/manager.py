"""
Revision Manager

This module owns the lifecycle of index generations in Typesense:

    initialize -> upsert_documents -> commit_revision | revert_revision

Every configured index is served to consumers through an alias named after
the index ID. A build writes into fresh collections named
``<index_id>-<revision_id>`` and only repoints the aliases once the whole
build succeeded, so consumers never observe a half-built index.

Retention
---------
After an alias has been moved, all generations of that index except the
current one and the one before it are deleted. Pruning is best effort: the
alias swap is already durable and is never undone because of a failed delete.

Concurrency
-----------
No lock is taken around the lifecycle. Only one build may run against a
given set of indices at a time; two concurrent builds can interleave their
alias updates.
"""

from __future__ import annotations

import copy
import enum
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..core.errors import ConfigurationError, IndexerError
from ..models import IndexDocument, IndexID, RevisionID, UpsertOutcome
from ..typesense.client import TypesenseClient
from .naming import extract_revision_id, format_collection_name, generate_revision_id

logger = logging.getLogger("indexer.revisions")

DEFAULT_SEARCH_PRESET_NAME = "default"


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class RevisionError(IndexerError):
    """Raised when a revision cannot be created or is invalid."""


class RevisionStateError(ConfigurationError):
    """Raised on an illegal lifecycle transition."""


class RevisionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    COMMITTED = "committed"
    REVERTED = "reverted"


# ---------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------

class RevisionManager:
    """
    Creates, fills, promotes and discards index generations.
    """

    def __init__(
        self,
        client: TypesenseClient,
        collections: Dict[str, Dict[str, Any]],
        preset: Optional[Dict[str, Any]] = None,
        preset_name: str = DEFAULT_SEARCH_PRESET_NAME,
    ) -> None:
        """
        Parameters
        ----------
        client : TypesenseClient
            Client for the backing Typesense node.

        collections : Dict[str, Dict[str, Any]]
            Collection schema per index ID. The schema's ``name`` is replaced
            by the generation name on creation.

        preset : Optional[Dict[str, Any]]
            Search preset value to upsert on initialize, if any.

        preset_name : str
            Name under which the preset is stored.
        """
        self._client = client
        self._collections = {IndexID(k): v for k, v in collections.items()}
        self._preset = preset
        self._preset_name = preset_name

        self._revision_id: Optional[RevisionID] = None
        self._states: Dict[RevisionID, RevisionState] = {}
        self._current_revisions: Dict[IndexID, RevisionID] = {}

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def revision_id(self) -> Optional[RevisionID]:
        """The revision minted by the last successful initialize."""
        return self._revision_id

    @property
    def current_revisions(self) -> Dict[IndexID, RevisionID]:
        """Alias targets found valid during the last initialize."""
        return dict(self._current_revisions)

    def state(self, revision_id: RevisionID) -> RevisionState:
        return self._states.get(revision_id, RevisionState.UNINITIALIZED)

    def indices(self) -> List[IndexID]:
        """
        Return the configured index IDs in configuration order.

        Raises
        ------
        ConfigurationError
            If no collections are configured.
        """
        if not self._collections:
            raise ConfigurationError("no collections configured")
        return list(self._collections)

    async def healthz(self) -> None:
        """
        Raise TypesenseConnectionError if the Typesense node is unhealthy.
        """
        await self._client.health()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> RevisionID:
        """
        Check connectivity and prepare a new generation for every index.

        Steps
        -----
        1. Probe the Typesense node.
        2. Reconcile existing aliases against existing collections.
        3. Mint a revision ID and create ``<index>-<revision>`` for every
           configured index (skipped if it already exists).
        4. Upsert the configured search preset.

        Aliases are NOT moved here; that happens on commit.

        Returns
        -------
        RevisionID
            The revision to pass to upsert/commit/revert.
        """
        logger.info("Initializing Typesense collections and aliases")

        await self._client.health()

        aliases = await self._client.retrieve_aliases()
        existing = await self._fetch_existing_collections()

        self._current_revisions = {}
        for alias in aliases:
            name = alias.get("name", "")
            target = alias.get("collection_name", "")
            revision_id = extract_revision_id(target, name)

            if revision_id and target in existing:
                self._current_revisions[IndexID(name)] = revision_id
            else:
                logger.warning(
                    "Alias %s points to missing collection %s; next commit repairs it",
                    name,
                    target,
                )

        revision_id = generate_revision_id()
        logger.info("Generated new revision %s", revision_id)

        for index_id, schema in self._collections.items():
            collection_name = format_collection_name(index_id, revision_id)
            await self._create_collection_if_not_exists(schema, collection_name, existing)

        if self._preset is not None:
            await self._client.upsert_preset(self._preset_name, self._preset)
            logger.info("Upserted search preset %s", self._preset_name)

        self._revision_id = revision_id
        self._states[revision_id] = RevisionState.INITIALIZED

        logger.info("Initialization completed, revision %s", revision_id)
        return revision_id

    async def upsert_documents(
        self,
        revision_id: RevisionID,
        index_id: IndexID,
        documents: Sequence[Optional[IndexDocument]],
    ) -> UpsertOutcome:
        """
        Bulk upsert documents into the generation for (index_id, revision_id).

        Per-document failures are logged and counted in the outcome but do
        not raise. Only a rejected import call raises TypesenseRequestError.
        """
        collection_name = format_collection_name(index_id, revision_id)
        payload = [doc.to_import_payload() for doc in documents if doc is not None]

        if not payload:
            logger.warning("No documents provided for upsert into %s", collection_name)
            return UpsertOutcome(collection=collection_name)

        results = await self._client.import_documents(collection_name, payload)

        outcome = UpsertOutcome(collection=collection_name, attempted=len(payload))
        for result in results:
            if result.get("success") is True:
                outcome.succeeded += 1
            else:
                error = str(result.get("error", "unknown error"))
                outcome.failed += 1
                outcome.errors.append(error)
                logger.warning(
                    "Document failed to upsert into %s: %s",
                    collection_name,
                    error,
                )

        # Results missing from the response count as failures.
        missing = outcome.attempted - outcome.succeeded - outcome.failed
        if missing > 0:
            outcome.failed += missing
            outcome.errors.append(f"{missing} documents without import result")

        logger.info(
            "Bulk upsert into %s completed: %d succeeded, %d failed",
            collection_name,
            outcome.succeeded,
            outcome.failed,
        )
        return outcome

    async def commit_revision(self, revision_id: RevisionID) -> None:
        """
        Point every alias at its new generation, then prune old generations.

        An alias failure raises and leaves the remaining aliases untouched.
        Pruning failures are only logged.
        """
        self._require_initialized(revision_id)

        for index_id in self._collections:
            alias = str(index_id)
            new_collection = format_collection_name(index_id, revision_id)

            try:
                await self._client.upsert_alias(alias, new_collection)
            except IndexerError:
                logger.error("Failed to update alias %s", alias)
                raise
            logger.info("Updated alias %s -> %s", alias, new_collection)
            self._current_revisions[index_id] = revision_id

            try:
                await self.prune_old_collections(alias, new_collection)
            except IndexerError as exc:
                logger.error("Failed to clean up old collections for %s: %s", alias, exc)

        self._states[revision_id] = RevisionState.COMMITTED

    async def revert_revision(self, revision_id: RevisionID) -> None:
        """
        Delete the generations created for revision_id. Aliases are untouched.
        """
        self._require_initialized(revision_id)

        for index_id in self._collections:
            collection_name = format_collection_name(index_id, revision_id)
            if self._current_revisions.get(index_id) == revision_id:
                logger.error(
                    "Collection %s is the live alias target, not deleting it",
                    collection_name,
                )
                continue
            try:
                await self._client.delete_collection(collection_name)
            except IndexerError:
                logger.error("Failed to delete collection %s", collection_name)
                raise
            logger.info("Reverted and deleted collection %s", collection_name)

        self._states[revision_id] = RevisionState.REVERTED

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    async def prune_old_collections(
        self,
        alias: str,
        current_collection: str,
    ) -> List[str]:
        """
        Delete all generations of an alias except the current and the newest
        older one.

        Returns
        -------
        List[str]
            Names of the collections actually deleted.
        """
        collections = await self._client.retrieve_collections()

        candidates: List[tuple[str, str]] = []
        for col in collections:
            name = col.get("name", "")
            if name == current_collection:
                continue
            revision_id = extract_revision_id(name, alias)
            if revision_id is not None:
                candidates.append((revision_id, name))

        candidates.sort(reverse=True)

        deleted: List[str] = []
        for _, name in candidates[1:]:
            try:
                await self._client.delete_collection(name)
            except IndexerError as exc:
                logger.error("Failed to delete collection %s: %s", name, exc)
                continue
            logger.info("Deleted old collection %s", name)
            deleted.append(name)

        return deleted

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_initialized(self, revision_id: RevisionID) -> None:
        state = self.state(revision_id)
        if state is not RevisionState.INITIALIZED:
            raise RevisionStateError(
                f"revision {revision_id!r} is {state.value}, expected initialized"
            )

    async def _fetch_existing_collections(self) -> set[str]:
        collections = await self._client.retrieve_collections()
        return {col.get("name", "") for col in collections}

    async def _create_collection_if_not_exists(
        self,
        schema: Dict[str, Any],
        collection_name: str,
        existing: set[str],
    ) -> None:
        if collection_name in existing:
            # Same-minute rebuild: the revision ID repeats and the collection is reused.
            logger.warning(
                "Collection %s already exists, skipping creation",
                collection_name,
            )
            return

        collection_schema = copy.deepcopy(schema)
        collection_schema["name"] = collection_name
        try:
            await self._client.create_collection(collection_schema)
        except IndexerError:
            logger.error("Failed to create collection %s", collection_name)
            raise

        existing.add(collection_name)
        logger.info("Created new collection %s", collection_name)
