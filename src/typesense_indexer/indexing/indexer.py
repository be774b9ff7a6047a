"""
Build Orchestrator

Runs one full re-index: initialize a revision, push every configured index
through the document provider into its new generation, then commit or revert.

Decision Rule
-------------
- Any extraction, assembly or upsert failure for an index taints the run,
  including unexpected errors raised by third-party document providers.
  The remaining indices are still attempted.
- Cancellation is checked before every index and taints the run.
- After the loop: commit only if the run is untainted AND at least one
  document was accepted. An untainted run with zero documents is reverted,
  since an empty result usually means the content source was down.

Only failures of initialize, commit and revert are raised. A reverted run is
reported through the returned BuildReport.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from ..core.errors import IndexerError
from ..documents.provider import DocumentProvider
from ..models import BuildReport, IndexID, IndexReport, RevisionID
from ..revisions.manager import RevisionError, RevisionManager

logger = logging.getLogger("indexer.run")


class Indexer:
    def __init__(
        self,
        revision_manager: RevisionManager,
        document_provider: DocumentProvider,
    ) -> None:
        self._revisions = revision_manager
        self._documents = document_provider

    async def healthz(self) -> None:
        await self._revisions.healthz()

    async def run(self, cancel_event: Optional[asyncio.Event] = None) -> BuildReport:
        """
        Execute one build and return its report.

        Parameters
        ----------
        cancel_event : Optional[asyncio.Event]
            When set, no further index is started and the run is reverted.

        Raises
        ------
        IndexerError
            If initialize, commit or revert fail, or initialize returns no
            revision.
        """
        revision_id = await self._revisions.initialize()
        if not revision_id:
            raise RevisionError("initialize returned an empty revision ID")

        indices = self._revisions.indices()

        tainted = False
        cancelled = False
        reports: List[IndexReport] = []
        reasons: List[str] = []

        for index_id in indices:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Build %s cancelled before index %s", revision_id, index_id)
                tainted = cancelled = True
                reasons.append(f"cancelled before index {index_id}")
                break

            report = await self._index(revision_id, index_id)
            reports.append(report)
            if report.error is not None:
                tainted = True
                reasons.append(f"index {index_id}: {report.error}")

        documents_indexed = sum(r.upsert.succeeded for r in reports if r.upsert)
        documents_failed = sum(r.upsert.failed for r in reports if r.upsert)

        if not tainted and documents_indexed == 0:
            reasons.append("no documents indexed")

        if not tainted and documents_indexed > 0:
            await self._revisions.commit_revision(revision_id)
            outcome = "committed"
            logger.info(
                "Committed revision %s with %d documents",
                revision_id,
                documents_indexed,
            )
        else:
            await self._revisions.revert_revision(revision_id)
            outcome = "reverted"
            logger.warning(
                "Reverted revision %s (%s)",
                revision_id,
                "; ".join(reasons),
            )

        return BuildReport(
            revision_id=revision_id,
            outcome=outcome,
            tainted=tainted,
            cancelled=cancelled,
            documents_indexed=documents_indexed,
            documents_failed=documents_failed,
            indices=reports,
            reasons=reasons,
        )

    async def _index(self, revision_id: RevisionID, index_id: IndexID) -> IndexReport:
        report = IndexReport(index_id=index_id)

        try:
            documents = await self._documents.provide(index_id)
        except IndexerError as exc:
            logger.error("Failed to provide documents for index %s: %s", index_id, exc)
            report.error = f"provide failed: {exc}"
            return report
        except Exception as exc:
            logger.exception("Unexpected error providing documents for index %s", index_id)
            report.error = f"provide failed: {type(exc).__name__}: {exc}"
            return report

        present = [doc for doc in documents if doc is not None]
        report.documents_provided = len(present)
        report.documents_skipped = len(documents) - len(present)

        try:
            report.upsert = await self._revisions.upsert_documents(revision_id, index_id, present)
        except IndexerError as exc:
            logger.error(
                "Failed to upsert %d documents into index %s, revision %s: %s",
                len(present),
                index_id,
                revision_id,
                exc,
            )
            report.error = f"upsert failed: {exc}"
        except Exception as exc:
            logger.exception(
                "Unexpected error upserting into index %s, revision %s",
                index_id,
                revision_id,
            )
            report.error = f"upsert failed: {type(exc).__name__}: {exc}"

        return report
