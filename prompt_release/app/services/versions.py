"""
Version manager: creates and forks immutable prompt versions.
"""
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random,
)

from .. import models, schemas
from ..core.config import settings
from ..core.errors import BadRequestError, ConflictError, NotFoundError
from ..crud import crud
from . import views

# Initialize logger
logger = logging.getLogger(__name__)


class VersionNumberTaken(Exception):
    """Another transaction committed the version number this one computed"""


def is_version_number_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return (
        "uq_prompt_versions_prompt_version" in message
        or "prompt_versions.prompt_id, prompt_versions.version" in message
    )


def variables_from_specs(specs: Sequence[schemas.VariableSpec]) -> List[Dict]:
    return [spec.model_dump() for spec in specs]


def variables_from_rows(rows: Sequence[models.PromptVariable]) -> List[Dict]:
    return [
        {
            "name": row.name,
            "type": row.type,
            "required": row.required,
            "default_value": row.default_value,
        }
        for row in rows
    ]


def check_unique_variable_names(variables: Sequence[Dict], field: str = "variables") -> None:
    seen = set()
    for variable in variables:
        if variable["name"] in seen:
            raise BadRequestError(
                f"Duplicate variable name '{variable['name']}' in {field}",
                field=field,
            )
        seen.add(variable["name"])


class VersionManager:
    """
    Creates new versions of a prompt.

    Numbers are allocated as max(version) + 1 inside the same transaction that
    inserts the row. The prompt row is locked for the duration of that
    transaction, and the (prompt_id, version) unique constraint turns any race
    the lock does not cover into a retry.
    """

    def __init__(self, session_factory: sessionmaker, max_attempts: Optional[int] = None):
        self._session_factory = session_factory
        # None reads VERSION_CREATE_MAX_ATTEMPTS on every call
        self._max_attempts = max_attempts

    def create_version(
        self,
        prompt_id: str,
        request: schemas.VersionCreate,
        author_id: str,
    ) -> schemas.VersionCreated:
        """
        Create the next version of a prompt, optionally forked from a base version.

        Args:
            prompt_id: Prompt to add the version to
            request: Version fields; unset fields are copied from the base version
            author_id: Identity recorded as the version's creator

        Returns:
            The new version's id and number

        Raises:
            NotFoundError: The prompt or the base version does not exist
            BadRequestError: No content after inheritance, or duplicate variable names
            ConflictError: The version number could not be claimed
        """
        attempt = retry(
            retry=retry_if_exception_type(VersionNumberTaken),
            stop=stop_after_attempt(self._max_attempts or settings.VERSION_CREATE_MAX_ATTEMPTS),
            wait=wait_random(min=0, max=0.05),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )(self._create_version_attempt)
        try:
            return attempt(prompt_id, request, author_id)
        except VersionNumberTaken as e:
            logger.error(f"Gave up allocating a version number for prompt {prompt_id}")
            raise ConflictError(
                f"Could not allocate a version number for prompt '{prompt_id}', please retry",
                prompt_id=prompt_id,
            ) from e

    def _create_version_attempt(
        self,
        prompt_id: str,
        request: schemas.VersionCreate,
        author_id: str,
    ) -> schemas.VersionCreated:
        with self._session_factory.begin() as db:
            prompt = crud.get_prompt(db, prompt_id, for_update=True)
            if not prompt:
                logger.warning(f"Prompt {prompt_id} not found for version creation")
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)

            base: Optional[models.PromptVersion] = None
            if request.base_version_id:
                base = crud.get_version(db, prompt_id, request.base_version_id)
                if not base:
                    logger.warning(
                        f"Base version {request.base_version_id} not found for prompt {prompt_id}"
                    )
                    raise NotFoundError(
                        "Base version not found",
                        base_version_id=request.base_version_id,
                    )

            def inherit(field: str):
                value = getattr(request, field)
                if value is None and base is not None:
                    return getattr(base, field)
                return value

            content = inherit("content")
            if not content:
                raise BadRequestError(
                    "content is required (or provide base_version_id)",
                    field="content",
                )

            if request.variables is not None:
                variables = variables_from_specs(request.variables)
            elif base is not None:
                variables = variables_from_rows(base.variables)
            else:
                variables = []
            check_unique_variable_names(variables)

            number = crud.get_max_version_number(db, prompt_id) + 1
            try:
                db_version = crud.add_version(
                    db,
                    prompt=prompt,
                    number=number,
                    content=content,
                    created_by=author_id,
                    variables=variables,
                    model_name=inherit("model_name"),
                    temperature=inherit("temperature"),
                    max_tokens=inherit("max_tokens"),
                    top_p=inherit("top_p"),
                    notes=request.notes,
                )
            except IntegrityError as e:
                if is_version_number_conflict(e):
                    logger.warning(f"Version {number} of prompt {prompt_id} was taken concurrently")
                    raise VersionNumberTaken(number) from e
                raise

            created = schemas.VersionCreated(id=db_version.id, version=db_version.version)

        logger.info(
            f"Created version {created.version} of prompt {prompt_id} (ID: {created.id}) "
            f"by {author_id}" + (f" from base {request.base_version_id}" if base else "")
        )
        return created

    def get_version(self, prompt_id: str, version_id: str) -> schemas.VersionView:
        with self._session_factory() as db:
            if not crud.get_prompt(db, prompt_id):
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)
            version = crud.get_version(db, prompt_id, version_id)
            if not version:
                raise NotFoundError("Version not found", version_id=version_id)
            return views.version_view(version)

    def list_versions(self, prompt_id: str) -> List[schemas.VersionView]:
        """All versions of a live prompt, newest first"""
        with self._session_factory() as db:
            if not crud.get_prompt(db, prompt_id):
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)
            return [views.version_view(version) for version in crud.get_versions(db, prompt_id)]
