"""
Revision Naming

A generation (physical Typesense collection) is named by joining the index ID
and the revision ID with a hyphen, e.g. ``www-bks-at-de-2021-01-01-12-30``.
The alias carries the bare index ID.

Revision IDs are local timestamps at minute granularity, zero padded, so that
string order and chronological order coincide.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..models import IndexID, RevisionID


REVISION_ID_FORMAT = "%Y-%m-%d-%H-%M"  # YYYY-MM-DD-HH-MM
REVISION_ID_LENGTH = 16


def generate_revision_id(now: Optional[datetime] = None) -> RevisionID:
    """
    Mint a revision ID for the given instant (defaults to now, local time).
    """
    now = now or datetime.now()
    return RevisionID(now.strftime(REVISION_ID_FORMAT))


def format_collection_name(index_id: IndexID, revision_id: RevisionID) -> str:
    return f"{index_id}-{revision_id}"


def extract_revision_id(collection_name: str, index_id: str) -> Optional[RevisionID]:
    """
    Return the revision ID embedded in a collection name, or None.

    None is returned (never raised) when the name does not start with
    ``index_id + "-"`` or when the remainder is not exactly as long as a
    revision ID. Collections of other indices whose names merely share a
    prefix (``www`` vs ``www-en``) are therefore ignored.
    """
    prefix = f"{index_id}-"
    if not collection_name.startswith(prefix):
        return None

    revision_id = collection_name[len(prefix):]
    if len(revision_id) != REVISION_ID_LENGTH:
        return None

    return RevisionID(revision_id)
