"""
Prompt catalogue: prompt lifecycle, search, version comparison and rendering.
"""
import logging
import math
from typing import Any, Dict, Optional

from sqlalchemy.orm import sessionmaker

from .. import models, schemas
from ..core.config import settings
from ..core.errors import BadRequestError, NotFoundError
from ..crud import crud
from ..schemas.enums import SortField, SortOrder
from . import views
from .diff import diff_lines
from .templates import extract_variables, render_template
from .versions import check_unique_variable_names, variables_from_specs

# Initialize logger
logger = logging.getLogger(__name__)


class PromptCatalogue:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def create_prompt(self, prompt_in: schemas.PromptCreate, actor_id: str) -> schemas.PromptDetail:
        """
        Create a prompt together with its first version and tags.

        Args:
            prompt_in: Prompt metadata and the content of version 1
            actor_id: Identity recorded as creator of version 1

        Returns:
            The created prompt
        """
        initial = prompt_in.initial_version
        variables = variables_from_specs(initial.variables)
        check_unique_variable_names(variables, field="initial_version.variables")

        with self._session_factory.begin() as db:
            prompt = models.Prompt(
                name=prompt_in.name,
                description=prompt_in.description,
                owner_team=prompt_in.owner_team,
                status=prompt_in.status,
            )
            db.add(prompt)
            db.flush()

            crud.add_version(
                db,
                prompt=prompt,
                number=1,
                content=initial.content,
                created_by=actor_id,
                variables=variables,
                model_name=initial.model_name,
                temperature=initial.temperature,
                max_tokens=initial.max_tokens,
                top_p=initial.top_p,
                notes=initial.notes,
            )
            crud.replace_prompt_tags(db, prompt, prompt_in.tags)
            result = views.prompt_detail(prompt)

        logger.info(f"Created prompt {result.id} '{result.name}' by {actor_id}")
        return result

    def update_prompt(self, prompt_id: str, prompt_update: schemas.PromptUpdate) -> schemas.PromptDetail:
        """Update prompt metadata; only fields present in the request are applied"""
        fields = prompt_update.model_fields_set

        with self._session_factory.begin() as db:
            prompt = crud.get_prompt(db, prompt_id, for_update=True)
            if not prompt:
                logger.warning(f"Prompt {prompt_id} not found for update")
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)

            if "name" in fields:
                if not prompt_update.name:
                    raise BadRequestError("name cannot be empty", field="name")
                prompt.name = prompt_update.name
            if "description" in fields:
                prompt.description = prompt_update.description
            if "owner_team" in fields:
                prompt.owner_team = prompt_update.owner_team
            if "status" in fields and prompt_update.status is not None:
                prompt.status = prompt_update.status
            if prompt_update.tags is not None:
                crud.replace_prompt_tags(db, prompt, prompt_update.tags)
                # Tag-only edits still count as an update of the prompt
                prompt.updated_at = models.utcnow()

            db.flush()
            result = views.prompt_detail(prompt)

        logger.info(f"Updated prompt {prompt_id}: {sorted(fields)}")
        return result

    def delete_prompt(self, prompt_id: str) -> None:
        """Soft delete: the prompt disappears from reads but its rows are kept"""
        with self._session_factory.begin() as db:
            prompt = crud.get_prompt(db, prompt_id, for_update=True)
            if not prompt:
                logger.warning(f"Prompt {prompt_id} not found for delete")
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)
            prompt.deleted_at = models.utcnow()

        logger.info(f"Soft-deleted prompt {prompt_id}")

    def get_prompt(self, prompt_id: str) -> schemas.PromptDetail:
        with self._session_factory() as db:
            prompt = crud.get_prompt(db, prompt_id)
            if not prompt:
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)
            return views.prompt_detail(prompt)

    def list_prompts(
        self,
        query: Optional[str] = None,
        tag: Optional[str] = None,
        env: Optional[str] = None,
        sort: SortField = SortField.UPDATED_AT,
        order: SortOrder = SortOrder.DESC,
        page: int = 1,
        page_size: int = 20,
    ) -> schemas.PaginatedResponse[schemas.PromptSummary]:
        """
        Search live prompts with pagination.

        - **query**: matched against name, description and the content of any version
        - **tag**: exact tag match after normalization
        - **env**: only prompts published at least once to this environment
        """
        if page < 1:
            raise BadRequestError("page must be >= 1", field="page")
        if page_size < 1:
            raise BadRequestError("page_size must be >= 1", field="page_size")

        with self._session_factory() as db:
            prompts, total = crud.search_prompts(
                db,
                query=query or "",
                tag=tag,
                env=env,
                sort=sort,
                order=order,
                skip=(page - 1) * page_size,
                limit=page_size,
            )
            items = [views.prompt_summary(prompt) for prompt in prompts]

        logger.info(f"Found {len(items)} prompts out of {total} total")
        return schemas.PaginatedResponse[schemas.PromptSummary](
            items=items,
            total=total,
            page=page,
            size=len(items),
            pages=math.ceil(total / page_size) if total else 0,
        )

    def compare_versions(self, prompt_id: str, from_version_id: str, to_version_id: str) -> schemas.VersionDiff:
        """Line diff from one version's content to another's"""
        with self._session_factory() as db:
            if not crud.get_prompt(db, prompt_id):
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)

            source = crud.get_version(db, prompt_id, from_version_id)
            if not source:
                raise NotFoundError("Version not found", version_id=from_version_id, field="from")
            target = crud.get_version(db, prompt_id, to_version_id)
            if not target:
                raise NotFoundError("Version not found", version_id=to_version_id, field="to")

            return schemas.VersionDiff(
                from_version_id=source.id,
                to_version_id=target.id,
                from_version=source.version,
                to_version=target.version,
                lines=diff_lines(source.content, target.content),
            )

    def render_active(
        self,
        prompt_id: str,
        environment_key: Optional[str] = None,
        values: Optional[Dict[str, Any]] = None,
    ) -> schemas.RenderResponse:
        """
        Render the version active in an environment with literal substitution.

        Declared defaults fill in missing values; a required variable that still
        has no value is rejected.
        """
        environment_key = environment_key or settings.DEFAULT_ENVIRONMENT_KEY
        values = dict(values or {})

        with self._session_factory() as db:
            if not crud.get_prompt(db, prompt_id):
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)
            environment = crud.get_environment(db, environment_key)
            if not environment:
                raise NotFoundError("Environment not found", env=environment_key)
            publication = crud.get_latest_publication(db, prompt_id, environment.id)
            if not publication:
                raise NotFoundError(
                    "No published version for environment",
                    prompt_id=prompt_id,
                    env=environment_key,
                )

            version = publication.prompt_version
            for variable in version.variables:
                if values.get(variable.name) is None and variable.default_value is not None:
                    values[variable.name] = variable.default_value
                if variable.required and values.get(variable.name) is None:
                    raise BadRequestError(
                        f"Missing value for required variable '{variable.name}'",
                        field=f"variables.{variable.name}",
                    )

            unresolved = [
                name for name in extract_variables(version.content) if values.get(name) is None
            ]
            if unresolved:
                logger.warning(
                    f"Rendered prompt {prompt_id} v{version.version} with no value for {unresolved}"
                )

            return schemas.RenderResponse(
                env=environment_key,
                prompt_version_id=version.id,
                version=version.version,
                content=render_template(version.content, values),
                unresolved_variables=unresolved,
            )
