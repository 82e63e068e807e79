"""Pydantic request schemas for API."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskCreateRequest(BaseModel):
    """Title and due are checked in the route so missing values get the 400 messages clients expect."""
    model_config = ConfigDict(populate_by_name=True)
    title: Optional[str] = None
    due: Optional[str] = None


class DependencyToggleRequest(BaseModel):
    """Toggle one prerequisite of the task in the path. `dependency` must be an integer task id."""
    model_config = ConfigDict(populate_by_name=True)
    dependency: Any = Field(default=None, description="Prerequisite task id")


class SettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")
    image_concurrency: Optional[int] = Field(default=None, alias="imageConcurrency", ge=1)
    images_enabled: Optional[bool] = Field(default=None, alias="imagesEnabled")
