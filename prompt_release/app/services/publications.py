"""
Publication registry: append-only release history per (prompt, environment).
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from .. import schemas
from ..core.errors import NotFoundError
from ..crud import crud
from . import views

# Initialize logger
logger = logging.getLogger(__name__)


class PublicationRegistry:
    """
    Records which version of a prompt is released to which environment.

    Publishing never updates or removes earlier rows; the active version of
    an environment is always derived from the newest publication.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def publish(
        self,
        prompt_id: str,
        environment_key: str,
        version_id: str,
        publisher_id: str,
        notes: Optional[str] = None,
    ) -> schemas.PublicationResponse:
        """
        Release a version of a prompt to an environment.

        Raises:
            NotFoundError: The prompt, the version (of that prompt) or the environment is unknown
        """
        with self._session_factory.begin() as db:
            prompt = crud.get_prompt(db, prompt_id)
            if not prompt:
                logger.warning(f"Prompt {prompt_id} not found for publish")
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)

            version = crud.get_version(db, prompt_id, version_id)
            if not version:
                logger.warning(f"Version {version_id} not found on prompt {prompt_id} for publish")
                raise NotFoundError("Version not found", version_id=version_id)

            environment = crud.get_environment(db, environment_key)
            if not environment:
                logger.warning(f"Environment '{environment_key}' not found for publish")
                raise NotFoundError("Environment not found", env=environment_key)

            publication = crud.add_publication(
                db,
                prompt=prompt,
                environment=environment,
                version=version,
                published_by=publisher_id,
                notes=notes,
            )
            result = views.publication_view(publication)

        logger.info(
            f"Published prompt {prompt_id} v{result.version} to '{environment_key}' by {publisher_id}"
        )
        return result

    def get_active(self, prompt_id: str, environment_key: str) -> schemas.ActivePublication:
        """
        Resolve the version currently active in an environment.

        Raises:
            NotFoundError: The prompt is missing or soft-deleted, the environment is
                unknown, or nothing was ever published there
        """
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
            return views.active_publication_view(publication)

    def history(
        self,
        prompt_id: str,
        environment_key: Optional[str] = None,
    ) -> List[schemas.PublicationResponse]:
        """Publish history of a prompt, newest first, optionally for a single environment"""
        with self._session_factory() as db:
            if not crud.get_prompt(db, prompt_id):
                raise NotFoundError("Prompt not found", prompt_id=prompt_id)

            environment_id = None
            if environment_key is not None:
                environment = crud.get_environment(db, environment_key)
                if not environment:
                    raise NotFoundError("Environment not found", env=environment_key)
                environment_id = environment.id

            return [
                views.publication_view(publication)
                for publication in crud.get_publications(db, prompt_id, environment_id)
            ]

    def list_environments(self) -> List[schemas.EnvironmentResponse]:
        with self._session_factory() as db:
            return [
                schemas.EnvironmentResponse.model_validate(environment)
                for environment in crud.get_environments(db)
            ]

    def ensure_environment(self, key: str, name: str) -> schemas.EnvironmentResponse:
        with self._session_factory.begin() as db:
            environment = crud.ensure_environment(db, key, name)
            return schemas.EnvironmentResponse.model_validate(environment)
