"""Tests for {{variable}} extraction and literal rendering."""

from prompt_release.app.services import extract_variables, render_template


class TestExtractVariables:
    def test_names_in_first_seen_order(self):
        assert extract_variables("{{b}} and {{a}} then {{ b }}") == ["b", "a"]

    def test_whitespace_inside_braces(self):
        assert extract_variables("Hi {{  user_name  }}") == ["user_name"]

    def test_invalid_identifiers_are_ignored(self):
        assert extract_variables("{{1abc}} {{a-b}} {{}}") == []

    def test_empty_template(self):
        assert extract_variables("") == []


class TestRenderTemplate:
    def test_substitutes_values(self):
        assert render_template("Hello {{name}}!", {"name": "Ada"}) == "Hello Ada!"

    def test_unknown_names_render_empty(self):
        assert render_template("Hello {{name}}!", {}) == "Hello !"

    def test_scalar_values(self):
        rendered = render_template(
            "{{n}} {{flag}} {{off}}", {"n": 3, "flag": True, "off": False}
        )
        assert rendered == "3 true false"

    def test_structured_values_render_as_json(self):
        assert render_template("{{data}}", {"data": {"a": [1, 2]}}) == '{"a": [1, 2]}'

    def test_values_are_not_evaluated_again(self):
        assert render_template("{{a}}", {"a": "{{b}}", "b": "x"}) == "{{b}}"
