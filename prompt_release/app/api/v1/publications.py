from fastapi import APIRouter, Depends, Path, Query, status
from typing import List, Optional
import logging

from ... import schemas
from ...core.config import settings
from ...services import PromptEngine
from .deps import get_actor, get_engine

# Initialize logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="",
    tags=["Publications"],
    responses={
        status.HTTP_404_NOT_FOUND: {"model": schemas.ErrorResponse, "description": "Prompt, version or environment not found"},
    },
)

environments_router = APIRouter(prefix="", tags=["Environments"])


@router.post(
    "/{prompt_id}/publish",
    response_model=schemas.PublicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a version to an environment",
    response_description="The new publication record",
)
def publish_version(
    publish_in: schemas.PublishRequest,
    prompt_id: str = Path(..., description="The ID of the prompt"),
    engine: PromptEngine = Depends(get_engine),
    actor: str = Depends(get_actor),
) -> schemas.PublicationResponse:
    """
    Make a version the active one for an environment.

    - **env**: Environment key (e.g. `prod`)
    - **prompt_version_id**: A version of this prompt

    Earlier publications are kept as history; the newest one wins.
    """
    logger.info(
        f"Publishing prompt {prompt_id} version {publish_in.prompt_version_id} "
        f"to '{publish_in.env}' (published by: {actor})"
    )
    return engine.publications.publish(
        prompt_id,
        publish_in.env,
        publish_in.prompt_version_id,
        publisher_id=actor,
        notes=publish_in.notes,
    )


@router.get(
    "/{prompt_id}/active",
    response_model=schemas.ActivePublication,
    summary="Get the active version for an environment",
)
def get_active_version(
    prompt_id: str = Path(..., description="The ID of the prompt"),
    env: str = Query(settings.DEFAULT_ENVIRONMENT_KEY, description="Environment key"),
    engine: PromptEngine = Depends(get_engine),
) -> schemas.ActivePublication:
    return engine.publications.get_active(prompt_id, env)


@router.get(
    "/{prompt_id}/publications",
    response_model=List[schemas.PublicationResponse],
    summary="Publish history, newest first",
)
def list_publications(
    prompt_id: str = Path(..., description="The ID of the prompt"),
    env: Optional[str] = Query(None, description="Restrict to one environment"),
    engine: PromptEngine = Depends(get_engine),
) -> List[schemas.PublicationResponse]:
    return engine.publications.history(prompt_id, env)


@environments_router.get(
    "/",
    response_model=List[schemas.EnvironmentResponse],
    summary="List deployment environments",
)
def list_environments(engine: PromptEngine = Depends(get_engine)) -> List[schemas.EnvironmentResponse]:
    return engine.publications.list_environments()
