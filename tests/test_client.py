"""Tests for the requests-based SDK client, with the HTTP session mocked out."""

from unittest.mock import MagicMock

import pytest
import requests

from prompt_release.sdk.prompt_client import PromptClient


def fake_response(payload=None, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} error")
    return response


@pytest.fixture
def session():
    mock_session = MagicMock()
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def client(session):
    return PromptClient("http://prompts.local/", actor="release-bot", session=session)


class TestPromptClient:
    def test_actor_header(self, client, session):
        assert session.headers["X-Actor"] == "release-bot"
        assert client.base_url == "http://prompts.local"

    def test_get_active(self, client, session):
        session.request.return_value = fake_response({"env": "stage"})
        assert client.get_active("p1", env="stage") == {"env": "stage"}
        session.request.assert_called_once_with(
            "GET",
            "http://prompts.local/api/v1/prompts/p1/active",
            timeout=30.0,
            params={"env": "stage"},
        )

    def test_create_version_drops_unset_fields(self, client, session):
        session.request.return_value = fake_response({"id": "v2", "version": 2})
        client.create_version("p1", base_version_id="v1", temperature=0.5)
        _, kwargs = session.request.call_args
        assert kwargs["json"] == {"base_version_id": "v1", "temperature": 0.5}

    def test_publish(self, client, session):
        session.request.return_value = fake_response({"id": 1})
        client.publish("p1", "v2", env="prod", notes="ship it")
        args, kwargs = session.request.call_args
        assert args == ("POST", "http://prompts.local/api/v1/prompts/p1/publish")
        assert kwargs["json"] == {"env": "prod", "prompt_version_id": "v2", "notes": "ship it"}

    def test_render_returns_text(self, client, session):
        session.request.return_value = fake_response({"content": "Hello Ada"})
        assert client.render("p1", {"name": "Ada"}) == "Hello Ada"

    def test_http_errors_propagate(self, client, session):
        session.request.return_value = fake_response({"error": {}}, status_code=404)
        with pytest.raises(requests.exceptions.HTTPError):
            client.get_active("missing")

    def test_empty_response(self, client, session):
        session.request.return_value = fake_response(None, status_code=204)
        assert client._request("DELETE", "/prompts/p1") is None

    def test_transfer_prompt(self, client):
        bundle = {"prompt": {"id": "p1", "name": "Greeting"}, "versions": [{"version": 1}]}
        client.session.request.return_value = fake_response(bundle)

        target_session = MagicMock()
        target_session.headers = {}
        target_session.request.return_value = fake_response({"id": "p1", "versions": []})
        target = PromptClient("http://other.local", actor="release-bot", session=target_session)

        assert client.transfer_prompt("p1", target) == {"id": "p1", "versions": []}
        _, kwargs = target_session.request.call_args
        assert kwargs["json"] == {"bundle": bundle, "mode": "merge"}
