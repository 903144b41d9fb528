"""Concurrent access to a file-backed SQLite database.

An in-memory database shares a single connection, so these tests use a real
file to get one connection per thread.
"""

import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from prompt_release.app import schemas
from prompt_release.app.database import create_db_engine, create_session_factory, init_db
from prompt_release.app.services import PromptEngine

pytestmark = pytest.mark.slow

WORKERS = 8
VERSIONS_PER_WORKER = 5
DB_FILE = "prompts.db"


@pytest.fixture
def file_engine(tmp_path):
    db_engine = create_db_engine(f"sqlite:///{tmp_path / DB_FILE}")
    init_db(db_engine)
    prompt_engine = PromptEngine(create_session_factory(db_engine))
    prompt_engine.seed_environments()
    yield prompt_engine
    db_engine.dispose()


def _create_prompt(engine, name="Concurrent"):
    return engine.prompts.create_prompt(
        schemas.PromptCreate(name=name, initial_version=schemas.InitialVersion(content="v1")),
        actor_id="setup",
    )


class TestConcurrentVersionCreation:
    def test_numbers_are_unique_and_gapless(self, file_engine):
        prompt = _create_prompt(file_engine)

        def worker(worker_id):
            return [
                file_engine.versions.create_version(
                    prompt.id,
                    schemas.VersionCreate(content=f"worker {worker_id} edit {i}"),
                    author_id=f"worker-{worker_id}",
                ).version
                for i in range(VERSIONS_PER_WORKER)
            ]

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            results = list(pool.map(worker, range(WORKERS)))

        created = sorted(number for numbers in results for number in numbers)
        expected_total = WORKERS * VERSIONS_PER_WORKER + 1
        assert created == list(range(2, expected_total + 1))

        stored = [v.version for v in file_engine.versions.list_versions(prompt.id)]
        assert sorted(stored) == list(range(1, expected_total + 1))

    def test_forks_from_the_same_base_get_distinct_numbers(self, file_engine):
        prompt = _create_prompt(file_engine)
        base_id = prompt.versions[0].id

        def fork(i):
            return file_engine.versions.create_version(
                prompt.id,
                schemas.VersionCreate(base_version_id=base_id, notes=f"fork {i}"),
                author_id="forker",
            ).version

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            numbers = list(pool.map(fork, range(WORKERS)))

        assert sorted(numbers) == list(range(2, WORKERS + 2))

    def test_prompts_do_not_share_numbers(self, file_engine):
        first = _create_prompt(file_engine, "First")
        second = _create_prompt(file_engine, "Second")

        def worker(prompt_id):
            return file_engine.versions.create_version(
                prompt_id, schemas.VersionCreate(content="edit"), author_id="w"
            ).version

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(worker, [first.id, second.id] * 4))

        for prompt in (first, second):
            stored = sorted(v.version for v in file_engine.versions.list_versions(prompt.id))
            assert stored == [1, 2, 3, 4, 5]

    def test_concurrent_tag_creation(self, file_engine):
        def create(i):
            return _create_prompt_with_tags(file_engine, f"Tagged {i}", ["shared", f"own-{i}"])

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(create, range(WORKERS)))

        assert file_engine.prompts.list_prompts(tag="shared", page_size=100).total == WORKERS


def _create_prompt_with_tags(engine, name, tags):
    return engine.prompts.create_prompt(
        schemas.PromptCreate(name=name, tags=tags, initial_version=schemas.InitialVersion(content="x")),
        actor_id="setup",
    )


class TestReadsDuringWrites:
    @pytest.fixture
    def published(self, file_engine):
        prompt = _create_prompt(file_engine, "Published")
        file_engine.publications.publish(prompt.id, "prod", prompt.versions[0].id, publisher_id="setup")
        return prompt

    @pytest.fixture
    def write_lock(self, tmp_path, published):
        """Another connection holding the database write lock"""
        holder = sqlite3.connect(tmp_path / DB_FILE, isolation_level=None)
        holder.execute("BEGIN IMMEDIATE")
        yield holder
        holder.execute("ROLLBACK")
        holder.close()

    @staticmethod
    def run_read(call):
        results = []
        reader = threading.Thread(target=lambda: results.append(call()), daemon=True)
        reader.start()
        reader.join(timeout=5)
        assert not reader.is_alive(), "read waited on the write lock"
        return results[0]

    def test_get_active_while_write_lock_is_held(self, file_engine, published, write_lock):
        active = self.run_read(lambda: file_engine.publications.get_active(published.id, "prod"))
        assert active.version.version == 1

    def test_search_and_export_while_write_lock_is_held(self, file_engine, published, write_lock):
        listing = self.run_read(lambda: file_engine.prompts.list_prompts())
        assert listing.total == 1
        bundle = self.run_read(lambda: file_engine.bundles.export_bundle(published.id))
        assert bundle.to_document()["prompt"]["id"] == published.id
