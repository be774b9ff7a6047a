"""
Revisions Package

Naming rules and lifecycle management for index generations.
"""

from .manager import RevisionManager, RevisionError, RevisionStateError, RevisionState
from .naming import (
    REVISION_ID_LENGTH,
    extract_revision_id,
    format_collection_name,
    generate_revision_id,
)

__all__ = [
    "RevisionManager",
    "RevisionError",
    "RevisionStateError",
    "RevisionState",
    "REVISION_ID_LENGTH",
    "extract_revision_id",
    "format_collection_name",
    "generate_revision_id",
]
