from typing import Optional

from fastapi import Header, Request

from ...core.config import settings
from ...services import PromptEngine


def get_engine(request: Request) -> PromptEngine:
    """Dependency that provides the engine bound to the application's database.

    The engine is created once per application in ``create_app``.
    """
    return request.app.state.engine


def get_actor(
    x_actor: Optional[str] = Header(
        None,
        description="Identity recorded on versions, publications and imports",
    ),
) -> str:
    """Resolve the acting identity from the X-Actor header.

    Returns:
        str: The trimmed header value, or settings.DEFAULT_ACTOR when absent or blank
    """
    if x_actor and x_actor.strip():
        return x_actor.strip()
    return settings.DEFAULT_ACTOR
