"""Tests for argument validation against parameter schemas."""

import pytest

from toolport.tools.errors import (
    InvalidEnumValueError,
    InvalidFormatError,
    MissingRequiredParameterError,
    TypeMismatchError,
)
from toolport.tools.models import (
    BooleanParam,
    EnumParam,
    NumberParam,
    StringListParam,
    StringMapParam,
    StringParam,
)
from toolport.tools.validation import is_valid_url, validate

SCHEMA = (
    StringParam(name="path"),
    NumberParam(name="limit", integer=True, minimum=1, required=False, default=10),
    BooleanParam(name="recursive", required=False, default=False),
    EnumParam(name="format", allowed=["iso", "unix"], required=False, default="iso"),
    StringListParam(name="tags", required=False, default=[]),
    StringMapParam(name="headers", required=False),
)


class TestDefaults:
    def test_defaults_applied(self):
        result = validate(SCHEMA, {"path": "a.txt"})
        assert result == {
            "path": "a.txt",
            "limit": 10,
            "recursive": False,
            "format": "iso",
            "tags": [],
            "headers": None,
        }

    def test_none_counts_as_absent(self):
        result = validate(SCHEMA, {"path": "a.txt", "limit": None})
        assert result["limit"] == 10

    def test_default_is_copied(self):
        first = validate(SCHEMA, {"path": "a"})
        first["tags"].append("mutated")
        second = validate(SCHEMA, {"path": "a"})
        assert second["tags"] == []

    def test_unknown_keys_ignored(self):
        result = validate(SCHEMA, {"path": "a", "extra": 1})
        assert "extra" not in result

    def test_none_arguments(self):
        assert validate([StringParam(name="x", required=False)], None) == {"x": None}


class TestRequired:
    def test_missing_required(self):
        with pytest.raises(MissingRequiredParameterError) as exc_info:
            validate(SCHEMA, {})
        assert exc_info.value.parameter == "path"
        assert "path" in str(exc_info.value)

    def test_required_null(self):
        with pytest.raises(MissingRequiredParameterError):
            validate(SCHEMA, {"path": None})


class TestCoercion:
    def test_numeric_string(self):
        assert validate(SCHEMA, {"path": "a", "limit": "5"})["limit"] == 5

    def test_integral_float_accepted_as_integer(self):
        assert validate(SCHEMA, {"path": "a", "limit": 5.0})["limit"] == 5

    def test_fractional_rejected_for_integer(self):
        with pytest.raises(TypeMismatchError):
            validate(SCHEMA, {"path": "a", "limit": 2.5})

    def test_bool_is_not_a_number(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate(SCHEMA, {"path": "a", "limit": True})
        assert exc_info.value.expected_type == "integer"

    def test_non_numeric_string(self):
        with pytest.raises(TypeMismatchError):
            validate(SCHEMA, {"path": "a", "limit": "five"})

    def test_nan_rejected(self):
        with pytest.raises(TypeMismatchError):
            validate([NumberParam(name="n")], {"n": "nan"})

    @pytest.mark.parametrize("raw,expected", [("true", True), ("FALSE", False), (True, True)])
    def test_boolean_strings(self, raw, expected):
        assert validate(SCHEMA, {"path": "a", "recursive": raw})["recursive"] is expected

    def test_boolean_rejects_other_strings(self):
        with pytest.raises(TypeMismatchError):
            validate(SCHEMA, {"path": "a", "recursive": "yes"})

    def test_boolean_rejects_numbers(self):
        with pytest.raises(TypeMismatchError):
            validate(SCHEMA, {"path": "a", "recursive": 1})

    def test_number_to_string(self):
        assert validate(SCHEMA, {"path": 42})["path"] == "42"

    def test_object_is_not_a_string(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate(SCHEMA, {"path": {"a": 1}})
        assert "object" in str(exc_info.value)

    def test_json_encoded_list(self):
        assert validate(SCHEMA, {"path": "a", "tags": '["x", "y"]'})["tags"] == ["x", "y"]

    def test_list_of_non_strings_rejected(self):
        with pytest.raises(TypeMismatchError):
            validate(SCHEMA, {"path": "a", "tags": [1, 2]})

    def test_bad_json_list_rejected(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            validate(SCHEMA, {"path": "a", "tags": "not json"})
        assert "not json" in str(exc_info.value)

    def test_json_encoded_map(self):
        result = validate(SCHEMA, {"path": "a", "headers": '{"Accept": "text/html", "X-N": 3}'})
        assert result["headers"] == {"Accept": "text/html", "X-N": "3"}

    def test_map_with_nested_value_rejected(self):
        with pytest.raises(TypeMismatchError):
            validate(SCHEMA, {"path": "a", "headers": {"a": {"b": "c"}}})


class TestConstraints:
    def test_enum_member(self):
        assert validate(SCHEMA, {"path": "a", "format": "unix"})["format"] == "unix"

    def test_enum_non_member(self):
        with pytest.raises(InvalidEnumValueError) as exc_info:
            validate(SCHEMA, {"path": "a", "format": "rfc"})
        assert exc_info.value.allowed == ["iso", "unix"]
        assert "iso, unix" in str(exc_info.value)

    def test_minimum(self):
        with pytest.raises(InvalidFormatError, match="must be >= 1"):
            validate(SCHEMA, {"path": "a", "limit": 0})

    def test_maximum(self):
        with pytest.raises(InvalidFormatError, match="must be <= 5"):
            validate([NumberParam(name="n", maximum=5)], {"n": 6})

    @pytest.mark.parametrize("url", ["https://example.com", "http://10.0.0.1:8080/x"])
    def test_url_format_accepts(self, url):
        assert validate([StringParam(name="url", format="url")], {"url": url})["url"] == url

    @pytest.mark.parametrize("url", ["example.com", "not a url", "http://", "http://host:99999"])
    def test_url_format_rejects(self, url):
        with pytest.raises(InvalidFormatError) as exc_info:
            validate([StringParam(name="url", format="url")], {"url": url})
        assert exc_info.value.parameter == "url"

    def test_is_valid_url(self):
        assert is_valid_url("ftp://files.example.com/a")
        assert not is_valid_url("/just/a/path")

    def test_first_failure_wins(self):
        schema = [StringParam(name="a"), StringParam(name="b")]
        with pytest.raises(MissingRequiredParameterError) as exc_info:
            validate(schema, {})
        assert exc_info.value.parameter == "a"


class TestJsonSchema:
    def test_schema_fragments(self):
        assert StringParam(name="u", format="url").json_schema() == {"type": "string", "format": "uri"}
        assert EnumParam(name="e", allowed=["a"], description="E").json_schema() == {
            "type": "string",
            "enum": ["a"],
            "description": "E",
        }
        assert StringListParam(name="l").json_schema() == {"type": "array", "items": {"type": "string"}}
        assert BooleanParam(name="b", required=False, default=True).json_schema() == {
            "type": "boolean",
            "default": True,
        }
