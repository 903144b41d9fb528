"""Tests for engine creation and read/write session setup."""

import logging

from prompt_release.app import models
from prompt_release.app.database import WRITE_TRANSACTION_OPTION, create_db_engine


class TestSessionFactory:
    def test_begin_marks_a_write_transaction(self, session_factory):
        with session_factory.begin() as db:
            assert db.connection().get_execution_options().get(WRITE_TRANSACTION_OPTION) is True

    def test_plain_sessions_are_reads(self, session_factory):
        with session_factory() as db:
            assert not db.connection().get_execution_options().get(WRITE_TRANSACTION_OPTION)

    def test_write_commits_and_read_sees_it(self, engine, session_factory):
        engine.publications.ensure_environment("qa", "Quality")
        with session_factory() as db:
            keys = [environment.key for environment in db.query(models.Environment)]
        assert "qa" in keys


class TestInMemoryDatabase:
    def test_warns_that_the_connection_is_shared(self, caplog):
        with caplog.at_level(logging.WARNING, logger="prompt_release.app.database"):
            db_engine = create_db_engine("sqlite://")
        db_engine.dispose()
        assert "one shared connection" in caplog.text

    def test_file_database_does_not_warn(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="prompt_release.app.database"):
            db_engine = create_db_engine(f"sqlite:///{tmp_path / 'prompts.db'}")
        db_engine.dispose()
        assert "one shared connection" not in caplog.text
