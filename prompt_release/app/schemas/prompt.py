from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import PromptStatus
from .publication import PublicationResponse, PublicationSummary
from .version import VariableSpec, VersionView


class InitialVersion(BaseModel):
    content: str = Field(..., min_length=1, description="The prompt content/template")
    model_name: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    notes: Optional[str] = None
    variables: List[VariableSpec] = Field(default_factory=list)

    model_config = ConfigDict(protected_namespaces=())


class PromptCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Name for the prompt")
    description: Optional[str] = Field(None, description="Description of the prompt")
    owner_team: Optional[str] = Field(None, description="Team that owns the prompt")
    status: PromptStatus = PromptStatus.ACTIVE
    tags: List[str] = Field(default_factory=list, description="Tags for categorization")
    initial_version: InitialVersion


class PromptUpdate(BaseModel):
    """Partial update; fields that are not sent are left untouched"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    owner_team: Optional[str] = None
    status: Optional[PromptStatus] = None
    tags: Optional[List[str]] = None


class PromptSummary(BaseModel):
    """Prompt model for list responses"""
    id: str
    name: str
    description: Optional[str] = None
    owner_team: Optional[str] = None
    status: PromptStatus
    created_at: datetime
    updated_at: datetime
    tags: List[str] = Field(default_factory=list)
    publications: List[PublicationSummary] = Field(default_factory=list)


class PromptDetail(BaseModel):
    """Prompt with its full version and publication history"""
    id: str
    name: str
    description: Optional[str] = None
    owner_team: Optional[str] = None
    status: PromptStatus
    created_at: datetime
    updated_at: datetime
    tags: List[str] = Field(default_factory=list)
    versions: List[VersionView] = Field(default_factory=list)
    publications: List[PublicationResponse] = Field(default_factory=list)
