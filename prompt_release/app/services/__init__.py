"""
Version and publication engine.

Every service takes the session factory it works against; nothing here holds
a module-level database handle.
"""
from .bundles import BundleCodec, BundleImporter, parse_bundle
from .diff import diff_lines
from .engine import PromptEngine
from .prompts import PromptCatalogue
from .publications import PublicationRegistry
from .templates import extract_variables, render_template
from .versions import VersionManager

__all__ = [
    "BundleCodec",
    "BundleImporter",
    "parse_bundle",
    "diff_lines",
    "PromptEngine",
    "PromptCatalogue",
    "PublicationRegistry",
    "extract_variables",
    "render_template",
    "VersionManager",
]
