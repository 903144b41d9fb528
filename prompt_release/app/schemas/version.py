from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import VariableType


class VariableSpec(BaseModel):
    """A template variable declared by a version"""
    name: str = Field(..., min_length=1, description="Variable name, unique within the version")
    type: VariableType = Field(default=VariableType.STRING, description="Declared value type")
    required: bool = False
    default_value: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class VersionCreate(BaseModel):
    """Schema for creating a new version of an existing prompt.

    Every field left as None is copied from the base version when
    ``base_version_id`` is given. ``notes`` is never copied.
    """
    base_version_id: Optional[str] = Field(None, description="Version to fork from")
    content: Optional[str] = Field(None, description="Template content")
    model_name: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    notes: Optional[str] = Field(None, description="Free-text notes for this version")
    variables: Optional[List[VariableSpec]] = None

    model_config = ConfigDict(protected_namespaces=())


class VersionCreated(BaseModel):
    id: str
    version: int


class VersionView(BaseModel):
    """Full read model of a stored version"""
    id: str
    version: int
    content: str
    model_name: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    notes: Optional[str] = None
    created_by: str
    created_at: datetime
    variables: List[VariableSpec] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())
