"""
API Models

Request/response models for the indexer's HTTP surface.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from ..models import Scores


class SearchRequest(BaseModel):
    """
    Simple search request against one index alias.
    """
    q: str = Field(..., min_length=1)
    filter_by: Optional[Dict[str, List[str]]] = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=10, ge=1, le=250)
    sort_by: str = ""
    query_by: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class SearchResponse(BaseModel):
    hits: List[Dict[str, Any]]
    scores: Scores
    found: int = Field(..., ge=0)


class HealthResponse(BaseModel):
    status: str
    typesense: str
