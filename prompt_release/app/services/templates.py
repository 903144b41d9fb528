"""
Literal {{variable}} substitution for prompt templates.
"""
import json
import re
from typing import Any, List, Mapping

_PLACEHOLDER = re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*\}\}")


def extract_variables(template: str) -> List[str]:
    """Distinct placeholder names in first-seen order."""
    names: List[str] = []
    for match in _PLACEHOLDER.finditer(template or ""):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """Replace each placeholder with its value; unknown names render as an empty string."""

    def substitute(match: re.Match) -> str:
        value = values.get(match.group(1))
        return "" if value is None else _to_text(value)

    return _PLACEHOLDER.sub(substitute, template or "")
