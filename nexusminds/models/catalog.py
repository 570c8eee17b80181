"""Model catalog API models."""

from typing import List
from pydantic import BaseModel, Field


class ModelCatalogResponse(BaseModel):
    """Response model for the completion model catalog."""

    models: List[str] = Field(description="Available model IDs")
    total: int = Field(description="Number of models")
    source: str = Field(description="'live' when read from the provider, 'default' otherwise")
