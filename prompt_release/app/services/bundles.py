"""
Bundle export/parse and import reconciliation.

A bundle carries one prompt's metadata, all of its versions and its publish
history so it can be moved between independent deployments.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import sessionmaker

from .. import models, schemas
from ..core.config import settings
from ..core.errors import BadRequestError, NotFoundError
from ..crud import crud
from ..schemas.enums import ImportMode, PromptStatus, VariableType
from . import views
from .versions import check_unique_variable_names

# Initialize logger
logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def coerce_version_number(value: Any) -> Optional[int]:
    """
    Read a version number the way a JSON consumer would: 3, 3.0 and "3" are all 3.

    Returns None for anything that is not a positive integer.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int) and value >= 1:
        return value
    return None


def _validate(model: Type[ModelT], data: Dict[str, Any], path: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join([path] + [str(part) for part in error["loc"]])
        raise BadRequestError(f"{field}: {error['msg']}", field=field) from e


def _parse_variables(raw_variables: Any) -> List[Dict[str, Any]]:
    parsed = []
    for raw in raw_variables if isinstance(raw_variables, list) else []:
        if not isinstance(raw, Mapping) or not raw.get("name"):
            continue
        type_name = str(raw.get("type") or VariableType.STRING.value).upper()
        default_value = raw.get("defaultValue")
        parsed.append({
            "name": str(raw["name"]),
            "type": VariableType.__members__.get(type_name, VariableType.STRING),
            "required": bool(raw.get("required")),
            "defaultValue": str(default_value) if default_value else None,
        })
    return parsed


def parse_bundle(document: Any) -> schemas.Bundle:
    """
    Validate an incoming bundle document.

    Only ``prompt.name`` is mandatory. Version entries with a number that is
    not a positive integer are kept with ``version=None`` so the importer can
    skip them.

    Raises:
        BadRequestError: The document is not an object, ``prompt.name`` is
            missing, or a version field has an invalid value
    """
    if isinstance(document, schemas.Bundle):
        return document
    if not isinstance(document, Mapping):
        raise BadRequestError("bundle is required", field="bundle")

    prompt_in = document.get("prompt")
    if (
        not isinstance(prompt_in, Mapping)
        or not isinstance(prompt_in.get("name"), str)
        or not prompt_in["name"]
    ):
        raise BadRequestError("bundle.prompt.name is required", field="bundle.prompt.name")

    prompt_id = prompt_in.get("id")
    tags_in = prompt_in.get("tags")
    prompt = _validate(
        schemas.BundlePrompt,
        {
            "id": str(prompt_id) if prompt_id not in (None, "") else None,
            "name": prompt_in["name"],
            "description": prompt_in.get("description"),
            "ownerTeam": prompt_in.get("ownerTeam"),
            "status": PromptStatus.ARCHIVED if prompt_in.get("status") == "ARCHIVED" else PromptStatus.ACTIVE,
            "tags": [tag for tag in tags_in if isinstance(tag, str)] if isinstance(tags_in, list) else [],
        },
        "bundle.prompt",
    )

    versions = []
    versions_in = document.get("versions")
    for index, raw in enumerate(versions_in if isinstance(versions_in, list) else []):
        path = f"versions[{index}]"
        if not isinstance(raw, Mapping):
            logger.warning(f"Ignoring {path}: not an object")
            continue
        content = raw.get("content")
        version = _validate(
            schemas.BundleVersion,
            {
                "version": coerce_version_number(raw.get("version")),
                "content": "" if content is None else str(content),
                "modelName": raw.get("modelName"),
                "temperature": raw.get("temperature"),
                "maxTokens": raw.get("maxTokens"),
                "topP": raw.get("topP"),
                "notes": raw.get("notes"),
                "createdBy": raw.get("createdBy"),
                "createdAt": raw.get("createdAt"),
                "variables": _parse_variables(raw.get("variables")),
            },
            path,
        )
        check_unique_variable_names(
            [variable.model_dump() for variable in version.variables],
            field=f"{path}.variables",
        )
        versions.append(version)

    publications = []
    publications_in = document.get("publications")
    for index, raw in enumerate(publications_in if isinstance(publications_in, list) else []):
        # Publish history is informational, so a malformed entry is dropped rather than rejected
        try:
            publications.append(schemas.BundlePublication.model_validate(raw))
        except ValidationError:
            logger.warning(f"Ignoring publications[{index}]: invalid publication entry")

    return schemas.Bundle(prompt=prompt, versions=versions, publications=publications)


class BundleCodec:
    """Exports live prompts as bundles"""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def export_bundle(self, prompt_id: str) -> schemas.Bundle:
        """
        Snapshot a prompt, its versions (ascending) and its publications.

        Raises:
            NotFoundError: The prompt does not exist or is soft-deleted
        """
        with self._session_factory() as db:
            prompt = crud.get_prompt(db, prompt_id)
            if not prompt:
                logger.warning(f"Prompt {prompt_id} not found for export")
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)

            bundle = schemas.Bundle(
                prompt=schemas.BundlePrompt(
                    id=prompt.id,
                    name=prompt.name,
                    description=prompt.description,
                    owner_team=prompt.owner_team,
                    status=prompt.status,
                    tags=prompt.tag_names,
                ),
                versions=[
                    schemas.BundleVersion(
                        version=version.version,
                        content=version.content,
                        model_name=version.model_name,
                        temperature=version.temperature,
                        max_tokens=version.max_tokens,
                        top_p=version.top_p,
                        notes=version.notes,
                        created_by=version.created_by,
                        created_at=version.created_at,
                        variables=[
                            schemas.BundleVariable(
                                name=variable.name,
                                type=variable.type,
                                required=variable.required,
                                default_value=variable.default_value,
                            )
                            for variable in version.variables
                        ],
                    )
                    for version in sorted(prompt.versions, key=lambda v: v.version)
                ],
                publications=[
                    schemas.BundlePublication(
                        env=publication.environment.key,
                        prompt_version_id=publication.prompt_version_id,
                        published_at=publication.published_at,
                        published_by=publication.published_by,
                        notes=publication.notes,
                    )
                    for publication in prompt.publications
                ],
            )

        logger.info(
            f"Exported prompt {prompt_id} with {len(bundle.versions)} versions "
            f"and {len(bundle.publications)} publications"
        )
        return bundle


class BundleImporter:
    """
    Reconciles an imported bundle with the prompts already stored.

    Versions are added by number and never overwritten, so importing the same
    bundle twice adds nothing the second time. Tags and prompt metadata are
    overwritten on every import. Publications are not replayed.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def import_bundle(
        self,
        document: Any,
        mode: ImportMode = ImportMode.MERGE,
        actor_id: Optional[str] = None,
    ) -> schemas.PromptDetail:
        """
        Import a bundle document.

        Args:
            document: Raw bundle (dict) or an already parsed Bundle
            mode: ``create`` always makes a new prompt; ``merge`` updates the
                prompt with the bundle's id when one exists (even soft-deleted)
            actor_id: Identity recorded on versions that carry no creator

        Returns:
            Detail of the target prompt after the import

        Raises:
            BadRequestError: The bundle is malformed or the mode is unknown
        """
        actor_id = actor_id or settings.DEFAULT_ACTOR
        try:
            mode = ImportMode(mode)
        except ValueError as e:
            raise BadRequestError(f"Unknown import mode '{mode}'", field="mode") from e

        bundle = parse_bundle(document)
        prompt_in = bundle.prompt

        with self._session_factory.begin() as db:
            prompt = None
            if mode == ImportMode.MERGE and prompt_in.id:
                prompt = crud.get_prompt(db, prompt_in.id, include_deleted=True, for_update=True)

            if prompt is None:
                attributes = {}
                if mode == ImportMode.MERGE and prompt_in.id:
                    attributes["id"] = prompt_in.id
                prompt = models.Prompt(
                    name=prompt_in.name,
                    description=prompt_in.description,
                    owner_team=prompt_in.owner_team,
                    status=prompt_in.status,
                    **attributes,
                )
                db.add(prompt)
                db.flush()
                logger.info(f"Import ({mode.value}) created prompt {prompt.id} '{prompt.name}'")
            else:
                if prompt.deleted_at is not None:
                    logger.info(f"Import restores soft-deleted prompt {prompt.id}")
                prompt.name = prompt_in.name
                prompt.description = prompt_in.description
                prompt.owner_team = prompt_in.owner_team
                prompt.status = prompt_in.status
                prompt.deleted_at = None
                db.flush()
                logger.info(f"Import ({mode.value}) updating prompt {prompt.id} '{prompt.name}'")

            crud.replace_prompt_tags(db, prompt, prompt_in.tags)

            existing = crud.get_version_numbers(db, prompt.id)
            created = skipped_invalid = skipped_existing = 0
            for version_in in bundle.versions:
                if version_in.version is None:
                    skipped_invalid += 1
                    continue
                if version_in.version in existing:
                    skipped_existing += 1
                    continue

                crud.add_version(
                    db,
                    prompt=prompt,
                    number=version_in.version,
                    content=version_in.content,
                    created_by=version_in.created_by or actor_id,
                    variables=[variable.model_dump() for variable in version_in.variables],
                    model_name=version_in.model_name,
                    temperature=version_in.temperature,
                    max_tokens=version_in.max_tokens,
                    top_p=version_in.top_p,
                    notes=version_in.notes,
                    created_at=to_naive_utc(version_in.created_at),
                )
                existing.add(version_in.version)
                created += 1

            if bundle.publications:
                logger.info(
                    f"Bundle carries {len(bundle.publications)} publications; publish history is not replayed"
                )

            result = views.prompt_detail(prompt)

        logger.info(
            f"Imported bundle into prompt {result.id} by {actor_id}: {created} versions created, "
            f"{skipped_existing} already present, {skipped_invalid} with invalid numbers"
        )
        return result
