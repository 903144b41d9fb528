from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .version import VariableSpec


class EnvironmentResponse(BaseModel):
    key: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class PublishRequest(BaseModel):
    env: str = Field(..., min_length=1, description="Environment key, e.g. 'prod'")
    prompt_version_id: str = Field(..., min_length=1, description="Version to release")
    notes: Optional[str] = None


class PublicationResponse(BaseModel):
    """One row of the append-only publish history"""
    id: int
    prompt_id: str
    env: str
    prompt_version_id: str
    version: int
    published_at: datetime
    published_by: str
    notes: Optional[str] = None


class PublicationSummary(BaseModel):
    env: str
    prompt_version_id: str
    published_at: datetime


class ActiveVersion(BaseModel):
    id: str
    version: int
    content: str
    model_name: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    variables: List[VariableSpec] = Field(default_factory=list)

    model_config = ConfigDict(protected_namespaces=())


class ActivePublication(BaseModel):
    """The version currently active in an environment, with its publish metadata"""
    env: str
    published_at: datetime
    published_by: str
    notes: Optional[str] = None
    version: ActiveVersion
