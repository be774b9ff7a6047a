"""
Content Server Data Models

A repo node as delivered by the content server. The tree is nested through
``nodes`` (child ID -> node), with ``index`` holding the child order.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict, ValidationInfo, field_validator


class RepoNode(BaseModel):
    id: str = Field(..., min_length=1)
    mime_type: str = Field(default="", alias="mimeType")
    hidden: bool = False
    uri: Optional[str] = Field(default=None, alias="URI")
    names: Dict[str, str] = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)
    nodes: Dict[str, Optional["RepoNode"]] = Field(default_factory=dict)
    index: List[str] = Field(default_factory=list)

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("names", "data", "nodes", "index", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any, info: ValidationInfo) -> Any:
        # The content server sends null for empty maps and lists.
        if v is None:
            return [] if info.field_name == "index" else {}
        return v

    def children(self) -> List[Optional["RepoNode"]]:
        """
        Child nodes in ``index`` order, followed by any child not listed there.
        """
        ordered = [self.nodes[child_id] for child_id in self.index if child_id in self.nodes]
        listed = set(self.index)
        ordered.extend(node for key, node in self.nodes.items() if key not in listed)
        return ordered


RepoNode.model_rebuild()
