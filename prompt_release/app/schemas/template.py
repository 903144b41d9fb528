from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .enums import DiffKind


class DiffLine(BaseModel):
    kind: DiffKind
    text: str


class VersionDiff(BaseModel):
    from_version_id: str
    to_version_id: str
    from_version: int
    to_version: int
    lines: List[DiffLine] = Field(default_factory=list)


class RenderRequest(BaseModel):
    variables: Dict[str, Any] = Field(default_factory=dict, description="Values substituted into {{name}} placeholders")


class RenderResponse(BaseModel):
    env: str
    prompt_version_id: str
    version: int
    content: str
    unresolved_variables: List[str] = Field(
        default_factory=list,
        description="Placeholders that had no value or default and rendered as empty text",
    )
