"""
CRUD operations for the Prompt Release Service.

This module provides database operations following the Repository pattern.
Every function works on a caller-supplied Session and never commits.
"""
from .crud import (
    normalize_tag_name,
    normalize_tag_names,
    get_prompt,
    search_prompts,
    get_version,
    get_versions,
    get_max_version_number,
    get_version_numbers,
    add_version,
    get_environment,
    get_environments,
    ensure_environment,
    get_or_create_tag,
    replace_prompt_tags,
    add_publication,
    get_latest_publication,
    get_publications,
)

__all__ = [
    "normalize_tag_name",
    "normalize_tag_names",
    "get_prompt",
    "search_prompts",
    "get_version",
    "get_versions",
    "get_max_version_number",
    "get_version_numbers",
    "add_version",
    "get_environment",
    "get_environments",
    "ensure_environment",
    "get_or_create_tag",
    "replace_prompt_tags",
    "add_publication",
    "get_latest_publication",
    "get_publications",
]
