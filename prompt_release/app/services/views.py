"""
Conversions from ORM rows to the pydantic read models returned by the services.

They must run while the owning session is still open.
"""
from typing import List

from .. import models, schemas


def variable_specs(version: models.PromptVersion) -> List[schemas.VariableSpec]:
    return [schemas.VariableSpec.model_validate(variable) for variable in version.variables]


def version_view(version: models.PromptVersion) -> schemas.VersionView:
    return schemas.VersionView.model_validate(version)


def publication_view(publication: models.Publication) -> schemas.PublicationResponse:
    return schemas.PublicationResponse(
        id=publication.id,
        prompt_id=publication.prompt_id,
        env=publication.environment.key,
        prompt_version_id=publication.prompt_version_id,
        version=publication.prompt_version.version,
        published_at=publication.published_at,
        published_by=publication.published_by,
        notes=publication.notes,
    )


def active_publication_view(publication: models.Publication) -> schemas.ActivePublication:
    version = publication.prompt_version
    return schemas.ActivePublication(
        env=publication.environment.key,
        published_at=publication.published_at,
        published_by=publication.published_by,
        notes=publication.notes,
        version=schemas.ActiveVersion(
            id=version.id,
            version=version.version,
            content=version.content,
            model_name=version.model_name,
            temperature=version.temperature,
            max_tokens=version.max_tokens,
            top_p=version.top_p,
            variables=variable_specs(version),
        ),
    )


def prompt_summary(prompt: models.Prompt) -> schemas.PromptSummary:
    return schemas.PromptSummary(
        id=prompt.id,
        name=prompt.name,
        description=prompt.description,
        owner_team=prompt.owner_team,
        status=prompt.status,
        created_at=prompt.created_at,
        updated_at=prompt.updated_at,
        tags=prompt.tag_names,
        publications=[
            schemas.PublicationSummary(
                env=publication.environment.key,
                prompt_version_id=publication.prompt_version_id,
                published_at=publication.published_at,
            )
            for publication in prompt.publications
        ],
    )


def prompt_detail(prompt: models.Prompt) -> schemas.PromptDetail:
    """Prompt with versions newest first and publications in insertion order"""
    versions = sorted(prompt.versions, key=lambda v: v.version, reverse=True)
    return schemas.PromptDetail(
        id=prompt.id,
        name=prompt.name,
        description=prompt.description,
        owner_team=prompt.owner_team,
        status=prompt.status,
        created_at=prompt.created_at,
        updated_at=prompt.updated_at,
        tags=prompt.tag_names,
        versions=[version_view(version) for version in versions],
        publications=[publication_view(publication) for publication in prompt.publications],
    )
