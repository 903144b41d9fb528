"""
Shared test fixtures for the Prompt Release test suite.

Provides:
- Database fixtures: in-memory SQLite (StaticPool), seeded with dev/stage/prod
- engine: PromptEngine wired to that database
- make_prompt: factory for prompts with a first version
"""

import os

import pytest

# Set test environment BEFORE any app imports
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from prompt_release.app import schemas
from prompt_release.app.database import create_db_engine, create_session_factory, init_db
from prompt_release.app.models import Base
from prompt_release.app.services import PromptEngine


@pytest.fixture
def db_engine():
    """In-memory SQLite database with all tables."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def engine(session_factory):
    """PromptEngine with the default environments in place."""
    prompt_engine = PromptEngine(session_factory)
    prompt_engine.seed_environments()
    return prompt_engine


@pytest.fixture
def make_prompt(engine):
    """Create a prompt with version 1 and return its detail."""

    def _make(
        name="Greeting",
        content="Hello {{name}}",
        tags=None,
        variables=None,
        actor="alice",
        **version_fields,
    ):
        prompt_in = schemas.PromptCreate(
            name=name,
            description=f"{name} prompt",
            owner_team="Platform",
            tags=tags or [],
            initial_version=schemas.InitialVersion(
                content=content,
                variables=variables or [],
                **version_fields,
            ),
        )
        return engine.prompts.create_prompt(prompt_in, actor_id=actor)

    return _make


@pytest.fixture
def greeting(make_prompt):
    """Prompt whose version 1 carries model parameters and a variable."""
    return make_prompt(
        content="Hello {{name}}",
        model_name="gpt-4o-mini",
        temperature=0.2,
        max_tokens=256,
        top_p=0.9,
        variables=[schemas.VariableSpec(name="name", required=True)],
        tags=["Greeting", "onboarding"],
    )
