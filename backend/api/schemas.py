"""Pydantic request/response schemas for API."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat


class HeightsRequest(BaseModel):
    """Measured card heights from the renderer, keyed by node id."""
    heights: Dict[str, FiniteFloat] = Field(default_factory=dict)


class NodeCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    title: Optional[str] = None
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    x: float = 0
    y: float = 0


class NodeUpdateRequest(BaseModel):
    """Partial edit; omitted fields are left unchanged."""
    model_config = ConfigDict(populate_by_name=True)
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate")


class CompleteRequest(BaseModel):
    completed: bool
    confirm: bool = False


class ExpandRequest(BaseModel):
    """expanded omitted -> toggle."""
    expanded: Optional[bool] = None


class LinkRequest(BaseModel):
    url: str = Field(..., min_length=1)
    text: str = ""


class SelectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    node_id: Optional[str] = Field(default=None, alias="nodeId")


class NavigateRequest(BaseModel):
    direction: str = Field(..., description="up | down | left | right")


class BackupUploadRequest(BaseModel):
    """Either a parsed backup object or its raw file text (repaired if damaged)."""
    backup: Optional[Dict[str, Any]] = None
    content: Optional[str] = None
    overwrite: bool = False
