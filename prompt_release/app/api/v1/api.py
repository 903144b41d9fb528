from fastapi import APIRouter, Body, Depends, Path, Query, Response, status
from typing import Any, Dict, List, Optional
import logging

from ... import schemas
from ...core.config import settings
from ...services import PromptEngine
from .deps import get_actor, get_engine

# Initialize logger
logger = logging.getLogger(__name__)

# Create API router with common parameters
router = APIRouter(
    prefix="",
    tags=["Prompts"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": schemas.ErrorResponse, "description": "Invalid request"},
        status.HTTP_404_NOT_FOUND: {"model": schemas.ErrorResponse, "description": "Resource not found"},
    },
)


# ======================
# Prompt Endpoints
# ======================

@router.get(
    "/",
    response_model=schemas.PaginatedResponse[schemas.PromptSummary],
    summary="Search and list prompts with filtering",
)
def list_prompts(
    engine: PromptEngine = Depends(get_engine),
    q: Optional[str] = Query(None, description="Search name, description and version content"),
    tag: Optional[str] = Query(None, description="Filter by tag (exact match after normalization)"),
    env: Optional[str] = Query(None, description="Only prompts published to this environment"),
    sort: schemas.SortField = Query(schemas.SortField.UPDATED_AT),
    order: schemas.SortOrder = Query(schemas.SortOrder.DESC),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> schemas.PaginatedResponse[schemas.PromptSummary]:
    """
    Search and list live prompts with filtering and pagination.

    - **q**: Search text in prompt name, description or any version's content
    - **tag**: Filter by tag
    - **env**: Filter by environment key with at least one publication
    - **sort** / **order**: `updatedAt` or `createdAt`, `asc` or `desc`
    """
    logger.info(f"Searching prompts with filters: q={q}, tag={tag}, env={env}")
    return engine.prompts.list_prompts(
        query=q, tag=tag, env=env, sort=sort, order=order, page=page, page_size=page_size
    )


@router.post(
    "/",
    response_model=schemas.PromptDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create a prompt with its first version",
)
def create_prompt(
    prompt_in: schemas.PromptCreate = Body(
        ...,
        examples=[{
            "name": "Support Reply",
            "description": "Draft a support reply with a friendly tone",
            "owner_team": "Support",
            "tags": ["support"],
            "initial_version": {
                "content": "Customer message:\n{{message}}",
                "model_name": "gpt-4o-mini",
                "temperature": 0.3,
                "variables": [{"name": "message", "type": "STRING", "required": True}],
            },
        }],
    ),
    engine: PromptEngine = Depends(get_engine),
    actor: str = Depends(get_actor),
) -> schemas.PromptDetail:
    logger.info(f"Creating new prompt: {prompt_in.name}")
    return engine.prompts.create_prompt(prompt_in, actor_id=actor)


@router.post(
    "/import",
    response_model=schemas.PromptDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Import a prompt bundle",
)
def import_bundle(
    request: schemas.ImportRequest,
    engine: PromptEngine = Depends(get_engine),
    actor: str = Depends(get_actor),
) -> schemas.PromptDetail:
    """
    Import a bundle exported from this or another deployment.

    - **mode=create**: always creates a new prompt
    - **mode=merge**: updates the prompt with the bundle's id when it exists and
      adds only version numbers it does not have yet
    """
    logger.info(f"Importing bundle (mode={request.mode.value}) by {actor}")
    return engine.importer.import_bundle(request.bundle, mode=request.mode, actor_id=actor)


@router.get("/{prompt_id}", response_model=schemas.PromptDetail, summary="Get a prompt by ID")
def read_prompt(
    prompt_id: str = Path(..., description="The ID of the prompt to retrieve"),
    engine: PromptEngine = Depends(get_engine),
) -> schemas.PromptDetail:
    return engine.prompts.get_prompt(prompt_id)


@router.patch("/{prompt_id}", response_model=schemas.PromptDetail, summary="Update prompt metadata and tags")
def update_prompt(
    prompt_update: schemas.PromptUpdate,
    prompt_id: str = Path(...),
    engine: PromptEngine = Depends(get_engine),
) -> schemas.PromptDetail:
    return engine.prompts.update_prompt(prompt_id, prompt_update)


@router.delete("/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Soft delete a prompt")
def delete_prompt(
    prompt_id: str = Path(...),
    engine: PromptEngine = Depends(get_engine),
    actor: str = Depends(get_actor),
) -> Response:
    logger.info(f"Deleting prompt {prompt_id} (requested by: {actor})")
    engine.prompts.delete_prompt(prompt_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ======================
# Version Endpoints
# ======================

@router.get("/{prompt_id}/versions", response_model=List[schemas.VersionView], summary="List versions, newest first")
def list_versions(
    prompt_id: str = Path(...),
    engine: PromptEngine = Depends(get_engine),
) -> List[schemas.VersionView]:
    return engine.versions.list_versions(prompt_id)


@router.post(
    "/{prompt_id}/versions",
    response_model=schemas.VersionCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new version, optionally forked from a base version",
    responses={409: {"model": schemas.ErrorResponse, "description": "Version number could not be allocated"}},
)
def create_version(
    version_in: schemas.VersionCreate,
    prompt_id: str = Path(...),
    engine: PromptEngine = Depends(get_engine),
    actor: str = Depends(get_actor),
) -> schemas.VersionCreated:
    """
    Create the next version of a prompt.

    Fields that are not sent are copied from **base_version_id** when it is given.
    """
    return engine.versions.create_version(prompt_id, version_in, author_id=actor)


@router.get("/{prompt_id}/diff", response_model=schemas.VersionDiff, summary="Line diff between two versions")
def diff_versions(
    prompt_id: str = Path(...),
    from_version_id: str = Query(..., alias="from"),
    to_version_id: str = Query(..., alias="to"),
    engine: PromptEngine = Depends(get_engine),
) -> schemas.VersionDiff:
    return engine.prompts.compare_versions(prompt_id, from_version_id, to_version_id)


@router.post("/{prompt_id}/render", response_model=schemas.RenderResponse, summary="Render the active version")
def render_active(
    prompt_id: str = Path(...),
    env: str = Query(settings.DEFAULT_ENVIRONMENT_KEY),
    render_in: Optional[schemas.RenderRequest] = Body(None),
    engine: PromptEngine = Depends(get_engine),
) -> schemas.RenderResponse:
    values = render_in.variables if render_in else {}
    return engine.prompts.render_active(prompt_id, env, values)


# ======================
# Bundle Endpoints
# ======================

@router.get("/{prompt_id}/export", summary="Export a prompt bundle")
def export_bundle(
    prompt_id: str = Path(...),
    engine: PromptEngine = Depends(get_engine),
) -> Dict[str, Any]:
    return engine.bundles.export_bundle(prompt_id).to_document()
