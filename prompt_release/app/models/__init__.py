from .base import Base, new_id, utcnow
from .prompt import (
    Environment,
    Prompt,
    PromptTag,
    PromptVariable,
    PromptVersion,
    Publication,
    Tag,
)

__all__ = [
    "Base",
    "new_id",
    "utcnow",
    "Prompt",
    "PromptVersion",
    "PromptVariable",
    "Environment",
    "Publication",
    "Tag",
    "PromptTag",
]
