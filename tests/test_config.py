"""Tests for settings parsing and the error taxonomy."""

import logging

import pytest
from pydantic import ValidationError

from prompt_release.app.core.config import Settings
from prompt_release.app.core.errors import BadRequestError, ConflictError, NotFoundError, PromptError
from prompt_release.app.core.logger import setup_logging


class TestSettings:
    def test_cors_origins_from_comma_separated_env(self, monkeypatch):
        monkeypatch.setenv("BACKEND_CORS_ORIGINS", "http://a.test, http://b.test")
        assert Settings().BACKEND_CORS_ORIGINS == ["http://a.test", "http://b.test"]

    def test_default_environments(self):
        settings = Settings()
        assert list(settings.DEFAULT_ENVIRONMENTS) == ["dev", "stage", "prod"]
        assert settings.DEFAULT_ENVIRONMENT_KEY == "prod"

    def test_attempts_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("VERSION_CREATE_MAX_ATTEMPTS", "0")
        with pytest.raises(ValidationError):
            Settings()


class TestErrors:
    @pytest.mark.parametrize("error_class, code, status_code", [
        (NotFoundError, "NOT_FOUND", 404),
        (BadRequestError, "BAD_REQUEST", 400),
        (ConflictError, "CONFLICT", 409),
    ])
    def test_codes(self, error_class, code, status_code):
        error = error_class("boom", field="x")
        assert isinstance(error, PromptError)
        assert error.code == code
        assert error.status_code == status_code
        assert error.message == "boom"
        assert error.details == {"field": "x"}


class TestLogging:
    def test_file_handler(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        log_file = tmp_path / "logs" / "service.log"
        try:
            setup_logging("DEBUG", str(log_file))
            logging.getLogger("prompt_release.test").info("written to file")
            for handler in root.handlers:
                handler.flush()
            assert "written to file" in log_file.read_text()
            assert root.level == logging.DEBUG
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)
