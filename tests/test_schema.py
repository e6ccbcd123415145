import math
from typing import Annotated, List, Literal, Optional

import pytest
from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr

from validation import FlowModel, format_path, to_json_schema, validate


class Turn(FlowModel):
    role: Literal["user", "model"]
    content: StrictStr = Field(min_length=1)


class Chat(FlowModel):
    query: StrictStr = Field(min_length=1)
    history: Optional[List[Turn]] = None
    temperature: StrictFloat = Field(default=1.0, ge=0, le=2)
    stream: Optional[StrictBool] = None


class Score(FlowModel):
    value: StrictFloat = Field(ge=0, le=100)


def test_valid_value_is_normalized():
    result = validate(Chat, {"query": "hi", "history": [{"role": "user", "content": "hello"}]})
    assert result.ok
    assert result.value == {
        "query": "hi",
        "history": [{"role": "user", "content": "hello"}],
        "temperature": 1.0,
    }


def test_undeclared_keys_are_dropped():
    result = validate(Chat, {"query": "hi", "extra": 42, "history": [{"role": "user", "content": "x", "id": 1}]})
    assert result.ok
    assert "extra" not in result.value
    assert result.value["history"] == [{"role": "user", "content": "x"}]


def test_missing_required_field():
    result = validate(Chat, {"history": []})
    assert not result.ok
    assert result.value is None
    [violation] = result.violations
    assert violation.path == "query"
    assert violation.constraint == "required"
    assert violation.actual is None


def test_null_optional_field_counts_as_absent():
    result = validate(Chat, {"query": "hi", "history": None})
    assert result.ok
    assert "history" not in result.value


def test_nested_violations_carry_paths():
    result = validate(
        Chat,
        {
            "query": "",
            "history": [
                {"role": "user", "content": "ok"},
                {"role": "assistant", "content": ""},
            ],
        },
    )
    assert not result.ok
    by_path = {v.path: v.constraint for v in result.violations}
    assert by_path == {
        "query": "min_length",
        "history[1].role": "enum",
        "history[1].content": "min_length",
    }


def test_scalars_are_not_coerced():
    result = validate(Chat, {"query": 5, "temperature": True, "stream": "yes"})
    constraints = {v.path: (v.constraint, v.actual) for v in result.violations}
    assert constraints["query"] == ("type", 5)
    assert constraints["temperature"] == ("type", True)
    assert constraints["stream"] == ("type", "yes")


def test_number_bounds():
    assert validate(Score, {"value": 100}).ok
    assert validate(Score, {"value": 50.5}).ok
    assert [v.constraint for v in validate(Score, {"value": 101}).violations] == ["maximum"]
    assert [v.constraint for v in validate(Score, {"value": -1}).violations] == ["minimum"]


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_numbers_are_rejected(value):
    result = validate(Score, {"value": value})
    assert not result.ok
    [violation] = result.violations
    assert violation.path == "value"
    assert violation.constraint == "finite"
    assert violation.to_dict()["actual"] == repr(value)


def test_integer_fields_reject_fractions():
    result = validate(Annotated[StrictInt, Field(ge=1, le=5)], 2.5)
    assert [v.constraint for v in result.violations] == ["type"]
    assert validate(Annotated[StrictInt, Field(ge=1, le=5)], 5).value == 5


def test_list_item_limits():
    schema = Annotated[List[StrictStr], Field(min_length=1, max_length=2)]
    assert [v.constraint for v in validate(schema, []).violations] == ["min_items"]
    assert [v.constraint for v in validate(schema, ["a", "b", "c"]).violations] == ["max_items"]
    assert validate(schema, ("a",)).value == ["a"]


def test_pattern():
    media = Annotated[StrictStr, Field(pattern=r"^data:audio/wav;base64,.+")]
    assert validate(media, "data:audio/wav;base64,UklGRg==").ok
    assert [v.constraint for v in validate(media, "data:audio/wav;base64,").violations] == ["pattern"]


def test_non_object_input():
    result = validate(Chat, ["query"])
    assert [v.constraint for v in result.violations] == ["type"]
    assert result.violations[0].path == ""


def test_violation_to_dict_previews_containers():
    result = validate(Turn, {"role": "user", "content": {"a": 1}})
    payload = result.violations[0].to_dict()
    assert payload["path"] == "content"
    assert payload["constraint"] == "type"
    assert payload["actual"] == "dict"
    assert payload["message"]


def test_format_path():
    assert format_path(()) == ""
    assert format_path(("matches", 0, "name")) == "matches[0].name"


def test_json_schema_rendering():
    schema = to_json_schema(Chat)
    assert schema["type"] == "object"
    assert schema["required"] == ["query"]
    assert schema["properties"]["query"]["type"] == "string"
    assert schema["properties"]["query"]["minLength"] == 1
    assert schema["properties"]["temperature"]["maximum"] == 2
    assert schema["$defs"]["Turn"]["properties"]["role"]["enum"] == ["user", "model"]
