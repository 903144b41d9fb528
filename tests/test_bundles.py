"""Tests for bundle export and bundle document parsing."""

from datetime import datetime

import pytest

from prompt_release.app import schemas
from prompt_release.app.core.errors import BadRequestError, NotFoundError
from prompt_release.app.schemas import PromptStatus, VariableType
from prompt_release.app.services import parse_bundle
from prompt_release.app.services.bundles import coerce_version_number, to_naive_utc


def minimal(**overrides):
    document = {"prompt": {"name": "Imported"}, "versions": [], "publications": []}
    document.update(overrides)
    return document


class TestExport:
    def test_export_contains_prompt_versions_and_publications(self, engine, greeting):
        v1 = greeting.versions[0]
        engine.versions.create_version(
            greeting.id, schemas.VersionCreate(base_version_id=v1.id, content="Hi"), author_id="bob"
        )
        engine.publications.publish(greeting.id, "prod", v1.id, publisher_id="carol")

        document = engine.bundles.export_bundle(greeting.id).to_document()

        assert document["prompt"]["id"] == greeting.id
        assert document["prompt"]["name"] == "Greeting"
        assert document["prompt"]["ownerTeam"] == "Platform"
        assert document["prompt"]["status"] == "ACTIVE"
        assert document["prompt"]["tags"] == ["greeting", "onboarding"]
        assert [v["version"] for v in document["versions"]] == [1, 2]
        assert document["versions"][0]["modelName"] == "gpt-4o-mini"
        assert document["versions"][0]["maxTokens"] == 256
        assert document["versions"][0]["variables"] == [
            {"name": "name", "type": "STRING", "required": True, "defaultValue": None}
        ]
        assert document["publications"] == [
            {
                "env": "prod",
                "promptVersionId": v1.id,
                "publishedAt": document["publications"][0]["publishedAt"],
                "publishedBy": "carol",
                "notes": None,
            }
        ]

    def test_export_soft_deleted_prompt(self, engine, greeting):
        engine.prompts.delete_prompt(greeting.id)
        with pytest.raises(NotFoundError):
            engine.bundles.export_bundle(greeting.id)

    def test_export_unknown_prompt(self, engine):
        with pytest.raises(NotFoundError):
            engine.bundles.export_bundle("missing")

    def test_exported_document_parses_back(self, engine, greeting):
        document = engine.bundles.export_bundle(greeting.id).to_document()
        bundle = parse_bundle(document)
        assert bundle.prompt.id == greeting.id
        assert bundle.versions[0].content == "Hello {{name}}"


class TestParseBundle:
    @pytest.mark.parametrize("document", [None, "text", 42, ["prompt"]])
    def test_document_must_be_an_object(self, document):
        with pytest.raises(BadRequestError, match="bundle is required"):
            parse_bundle(document)

    @pytest.mark.parametrize("prompt", [None, "x", {}, {"name": ""}, {"name": 5}])
    def test_prompt_name_is_required(self, prompt):
        with pytest.raises(BadRequestError, match="bundle.prompt.name is required"):
            parse_bundle({"prompt": prompt})

    def test_only_prompt_name_is_mandatory(self):
        bundle = parse_bundle({"prompt": {"name": "Bare"}})
        assert bundle.prompt.id is None
        assert bundle.prompt.status == PromptStatus.ACTIVE
        assert bundle.versions == []
        assert bundle.publications == []

    def test_non_list_collections_are_empty(self):
        bundle = parse_bundle(
            {"prompt": {"name": "X", "tags": "a,b"}, "versions": {"1": {}}, "publications": "none"}
        )
        assert bundle.prompt.tags == []
        assert bundle.versions == []
        assert bundle.publications == []

    @pytest.mark.parametrize("status, expected", [
        ("ARCHIVED", PromptStatus.ARCHIVED),
        ("ACTIVE", PromptStatus.ACTIVE),
        ("archived", PromptStatus.ACTIVE),
        (None, PromptStatus.ACTIVE),
    ])
    def test_status_mapping(self, status, expected):
        bundle = parse_bundle({"prompt": {"name": "X", "status": status}})
        assert bundle.prompt.status == expected

    def test_missing_content_becomes_empty(self):
        bundle = parse_bundle(minimal(versions=[{"version": 1}]))
        assert bundle.versions[0].content == ""

    def test_variables_are_cleaned(self):
        bundle = parse_bundle(minimal(versions=[{
            "version": 1,
            "content": "{{a}}",
            "variables": [
                {"name": "a", "type": "number", "required": 1, "defaultValue": "5"},
                {"name": "b", "type": "DATE", "defaultValue": ""},
                {"type": "STRING"},
                "junk",
            ],
        }]))
        variables = bundle.versions[0].variables
        assert [(v.name, v.type, v.required, v.default_value) for v in variables] == [
            ("a", VariableType.NUMBER, True, "5"),
            ("b", VariableType.STRING, False, None),
        ]

    def test_duplicate_variable_names_are_rejected(self):
        with pytest.raises(BadRequestError) as exc_info:
            parse_bundle(minimal(versions=[{
                "version": 1,
                "content": "x",
                "variables": [{"name": "a"}, {"name": "a"}],
            }]))
        assert exc_info.value.details["field"] == "versions[0].variables"

    def test_malformed_timestamp_names_the_field(self):
        with pytest.raises(BadRequestError) as exc_info:
            parse_bundle(minimal(versions=[
                {"version": 1, "content": "a"},
                {"version": 2, "content": "b"},
                {"version": 3, "content": "c", "createdAt": "yesterday"},
            ]))
        assert exc_info.value.details["field"] == "versions[2].createdAt"

    def test_malformed_numeric_field_names_the_field(self):
        with pytest.raises(BadRequestError) as exc_info:
            parse_bundle(minimal(versions=[{"version": 1, "content": "a", "temperature": "hot"}]))
        assert exc_info.value.details["field"] == "versions[0].temperature"

    def test_invalid_publications_are_dropped(self):
        bundle = parse_bundle(minimal(publications=[
            {"env": "prod", "promptVersionId": "abc", "publishedAt": "2024-01-01T00:00:00Z"},
            {"env": "prod"},
            "junk",
        ]))
        assert [p.prompt_version_id for p in bundle.publications] == ["abc"]

    def test_timestamps_accept_iso_strings(self):
        bundle = parse_bundle(minimal(versions=[
            {"version": 1, "content": "a", "createdAt": "2024-03-01T12:30:00+02:00"}
        ]))
        assert to_naive_utc(bundle.versions[0].created_at) == datetime(2024, 3, 1, 10, 30)


class TestCoerceVersionNumber:
    @pytest.mark.parametrize("value, expected", [
        (3, 3),
        (3.0, 3),
        ("3", 3),
        (" 4 ", 4),
        ("2.0", 2),
        (1, 1),
    ])
    def test_number_like_values(self, value, expected):
        assert coerce_version_number(value) == expected

    @pytest.mark.parametrize("value", [0, -1, 2.5, "2.5", "two", "", None, True, False, [1], {"v": 1}])
    def test_invalid_values(self, value):
        assert coerce_version_number(value) is None


class TestToNaiveUtc:
    def test_naive_values_are_unchanged(self):
        value = datetime(2024, 1, 1, 8, 0)
        assert to_naive_utc(value) == value

    def test_none(self):
        assert to_naive_utc(None) is None
