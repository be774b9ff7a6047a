"""
Indexer Data Models

This module defines the identifiers and value objects shared by the revision
manager, the document provider and the build orchestrator.

Identifiers are NewTypes over str: they cost nothing at runtime but keep
index, revision and document names from being mixed up in signatures.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, NewType

from pydantic import BaseModel, Field, ConfigDict


IndexID = NewType("IndexID", str)
RevisionID = NewType("RevisionID", str)
DocumentID = NewType("DocumentID", str)
DocumentType = NewType("DocumentType", str)


# ---------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------

class DocumentDescriptor(BaseModel):
    """
    A content node selected for indexing, before it is resolved into a document.
    """
    document_type: DocumentType
    document_id: DocumentID

    model_config = ConfigDict(frozen=True)


class IndexDocument(BaseModel):
    """
    Base class for engine-ready documents.

    Provider functions return instances of this class or of a subclass that
    declares the collection's fields. Unknown fields are kept so simple
    providers can build documents without a dedicated subclass.
    """
    id: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="allow")

    def to_import_payload(self) -> Dict[str, object]:
        return self.model_dump(mode="json", exclude_none=True)


# ---------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------

class Score(BaseModel):
    id: DocumentID
    index: int = 0


Scores = Dict[DocumentID, Score]


# ---------------------------------------------------------------------
# Build Outcomes
# ---------------------------------------------------------------------

class UpsertOutcome(BaseModel):
    """
    Result of one bulk import into a generation.

    Per-document failures do not raise; they are reported here so callers
    can act on data rather than on log output.
    """
    collection: str
    attempted: int = Field(default=0, ge=0)
    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    errors: List[str] = Field(default_factory=list)


class IndexReport(BaseModel):
    """Per-index result of one build run."""
    index_id: IndexID
    documents_provided: int = 0
    documents_skipped: int = 0
    upsert: Optional[UpsertOutcome] = None
    error: Optional[str] = None


class BuildReport(BaseModel):
    """Terminal summary of one build run."""
    revision_id: RevisionID
    outcome: Literal["committed", "reverted"]
    tainted: bool = False
    cancelled: bool = False
    documents_indexed: int = 0
    documents_failed: int = 0
    indices: List[IndexReport] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)
