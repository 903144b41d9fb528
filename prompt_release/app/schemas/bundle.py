"""
Portable bundle document exchanged between deployments.

The camelCase wire names are the compatibility surface; do not rename them.
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import ImportMode, PromptStatus, VariableType


class BundleModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())


class BundleVariable(BundleModel):
    name: str
    type: VariableType = VariableType.STRING
    required: bool = False
    default_value: Optional[str] = None


class BundleVersion(BundleModel):
    # None marks a number that was not a positive integer; such entries are skipped on import
    version: Optional[int] = None
    content: str = ""
    model_name: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    variables: List[BundleVariable] = Field(default_factory=list)


class BundlePublication(BundleModel):
    env: str
    prompt_version_id: str
    published_at: Optional[datetime] = None
    published_by: Optional[str] = None
    notes: Optional[str] = None


class BundlePrompt(BundleModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    owner_team: Optional[str] = None
    status: PromptStatus = PromptStatus.ACTIVE
    tags: List[str] = Field(default_factory=list)


class Bundle(BundleModel):
    prompt: BundlePrompt
    versions: List[BundleVersion] = Field(default_factory=list)
    publications: List[BundlePublication] = Field(default_factory=list)

    def to_document(self) -> dict:
        """JSON-ready dict using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)


class ImportRequest(BaseModel):
    bundle: Any = None
    mode: ImportMode = ImportMode.MERGE
