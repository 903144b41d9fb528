from typing import Dict, Optional

from sqlalchemy.orm import sessionmaker

from ..core.config import settings
from .bundles import BundleCodec, BundleImporter
from .prompts import PromptCatalogue
from .publications import PublicationRegistry
from .versions import VersionManager


class PromptEngine:
    """All engine services wired to one storage port."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self.prompts = PromptCatalogue(session_factory)
        self.versions = VersionManager(session_factory)
        self.publications = PublicationRegistry(session_factory)
        self.bundles = BundleCodec(session_factory)
        self.importer = BundleImporter(session_factory)

    def seed_environments(self, environments: Optional[Dict[str, str]] = None) -> None:
        """Make sure every configured environment exists"""
        environments = settings.DEFAULT_ENVIRONMENTS if environments is None else environments
        for key, name in environments.items():
            self.publications.ensure_environment(key, name)
