"""
Source descriptor schemas
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from logstream.services.logs.base import SourceDescriptor


class SourceDescriptorSchema(BaseModel):
    """A configured provider instance"""
    id: str = Field(..., description="Unique source id")
    slug: str = Field(..., description="Provider type, e.g. 'stripe'")
    name: str = Field("", description="Display name")
    config: Dict[str, Any] = Field(default_factory=dict, description="Provider credentials and options")

    def to_descriptor(self) -> SourceDescriptor:
        return SourceDescriptor(id=self.id, slug=self.slug, name=self.name, config=dict(self.config))


class SourceSummary(BaseModel):
    """Source descriptor without its credentials"""
    id: str
    slug: str
    name: str = ""
    registered: bool = False
    active: bool = False


class SourceCatalogueUpdate(BaseModel):
    sources: List[SourceDescriptorSchema] = Field(default_factory=list)


class SourceCatalogueResponse(BaseModel):
    count: int
    unregistered: List[str] = Field(default_factory=list)


class SupportedSourcesResponse(BaseModel):
    sources: List[str]


class ValidationResponse(BaseModel):
    valid: bool
    source: str
    errors: Optional[List[Dict[str, Any]]] = None
