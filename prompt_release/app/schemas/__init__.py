"""
Schemas package containing all Pydantic models for the application.
"""

# Common schemas
from .common import (
    PaginatedResponse,
    ErrorBody,
    ErrorResponse,
)

from .enums import (
    PromptStatus,
    VariableType,
    ImportMode,
    DiffKind,
    SortField,
    SortOrder,
)

# Version schemas
from .version import (
    VariableSpec,
    VersionCreate,
    VersionCreated,
    VersionView,
)

# Publication schemas
from .publication import (
    EnvironmentResponse,
    PublishRequest,
    PublicationResponse,
    PublicationSummary,
    ActiveVersion,
    ActivePublication,
)

# Prompt schemas
from .prompt import (
    InitialVersion,
    PromptCreate,
    PromptUpdate,
    PromptSummary,
    PromptDetail,
)

# Bundle schemas
from .bundle import (
    Bundle,
    BundlePrompt,
    BundleVersion,
    BundleVariable,
    BundlePublication,
    ImportRequest,
)

from .template import DiffLine, VersionDiff, RenderRequest, RenderResponse

__all__ = [
    # Common schemas
    "PaginatedResponse",
    "ErrorBody",
    "ErrorResponse",

    # Enums
    "PromptStatus",
    "VariableType",
    "ImportMode",
    "DiffKind",
    "SortField",
    "SortOrder",

    # Version schemas
    "VariableSpec",
    "VersionCreate",
    "VersionCreated",
    "VersionView",

    # Publication schemas
    "EnvironmentResponse",
    "PublishRequest",
    "PublicationResponse",
    "PublicationSummary",
    "ActiveVersion",
    "ActivePublication",

    # Prompt schemas
    "InitialVersion",
    "PromptCreate",
    "PromptUpdate",
    "PromptSummary",
    "PromptDetail",

    # Bundle schemas
    "Bundle",
    "BundlePrompt",
    "BundleVersion",
    "BundleVariable",
    "BundlePublication",
    "ImportRequest",

    # Diff and rendering
    "DiffLine",
    "VersionDiff",
    "RenderRequest",
    "RenderResponse",
]
