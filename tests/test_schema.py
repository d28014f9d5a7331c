import json

import pytest

from trustgate.models import UpstreamTarget
from trustgate.schema import (
    EndpointConfig,
    ProviderConfig,
    ProviderSchema,
    SchemaError,
    SchemaField,
    extract_value_by_path,
    get_json_bytes,
    map_between_schemas,
    transform_request_body,
)


@pytest.fixture
def chat():
    return {
        "model": "m1",
        "messages": [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hello"},
        ],
        "options": {"temperature": 0.5},
    }


def test_simple_key(chat):
    assert extract_value_by_path(chat, "model") == chat["model"]


def test_indexed_path(chat):
    assert extract_value_by_path(chat, "messages[0].content") == chat["messages"][0]["content"]


def test_last_path(chat):
    assert extract_value_by_path(chat, "messages.last.content") == chat["messages"][-1]["content"]
    assert extract_value_by_path(chat, "messages.last") == chat["messages"][-1]


def test_nested_object(chat):
    assert extract_value_by_path(chat, "options.temperature") == chat["options"]["temperature"]


def test_index_as_last_segment(chat):
    assert extract_value_by_path(chat, "messages[1]") == chat["messages"][1]


@pytest.mark.parametrize(
    "path",
    ["", "missing", "options.missing", "messages[5].content", "options[0]", "model.x", "...", "messages[-1]"],
)
def test_bad_paths_raise(chat, path):
    with pytest.raises(SchemaError):
        extract_value_by_path(chat, path)


def test_last_on_empty_array():
    with pytest.raises(SchemaError, match="array is empty"):
        extract_value_by_path({"items": []}, "items.last")


def test_index_into_non_object():
    with pytest.raises(SchemaError):
        extract_value_by_path({"items": [1, 2]}, "items[0].name")


def _schema():
    return ProviderSchema(
        request_format={
            "model": SchemaField(path="model", required=True),
            "prompt": SchemaField(path="messages.last.content", required=True),
            "temperature": SchemaField(path="options.temperature"),
            "max_tokens": SchemaField(path="limits.max", default=256),
            "top_p": SchemaField(path="options.top_p"),
        }
    )


def test_map_between_schemas(chat):
    result = map_between_schemas(chat, _schema())
    assert result == {
        "model": chat["model"],
        "prompt": chat["messages"][-1]["content"],
        "temperature": chat["options"]["temperature"],
        "max_tokens": 256,
    }


def test_map_required_missing_raises():
    with pytest.raises(SchemaError, match="missing required field"):
        map_between_schemas({"messages": []}, _schema())


def test_map_without_schema_raises(chat):
    with pytest.raises(SchemaError):
        map_between_schemas(chat, None)


@pytest.fixture
def providers():
    schema = ProviderSchema(
        request_format={
            "model": SchemaField(path="model", required=True),
            "messages": SchemaField(path="messages", required=True),
        }
    )
    return {
        "llm": ProviderConfig(
            base_url="https://llm.example.com",
            endpoints={"/chat": EndpointConfig(path="/v1/chat", schema=schema)},
        )
    }


@pytest.fixture
def target():
    return UpstreamTarget(provider="llm", path="/chat", models=["m1", "m2"], default_model="m2")


def test_transform_empty_body(providers, target):
    assert transform_request_body(b"", target, providers) == b""


def test_transform_keeps_known_model(providers, target, chat):
    out = json.loads(transform_request_body(json.dumps(chat).encode(), target, providers))
    assert out == {"model": chat["model"], "messages": chat["messages"]}


def test_transform_replaces_unknown_model(providers, target, chat):
    chat["model"] = "other"
    out = json.loads(transform_request_body(json.dumps(chat).encode(), target, providers))
    assert out["model"] == target.default_model


def test_transform_sets_default_model_when_absent(providers, target, chat):
    del chat["model"]
    out = json.loads(transform_request_body(json.dumps(chat).encode(), target, providers))
    assert out["model"] == target.default_model


def test_transform_preserves_stream(providers, target, chat):
    chat["stream"] = True
    out = json.loads(transform_request_body(json.dumps(chat).encode(), target, providers))
    assert out["stream"] is True


def test_transform_unknown_provider(providers, chat):
    other = UpstreamTarget(provider="nope", path="/chat")
    with pytest.raises(SchemaError, match="missing schema"):
        transform_request_body(json.dumps(chat).encode(), other, providers)


def test_transform_invalid_json(providers, target):
    with pytest.raises(SchemaError):
        transform_request_body(b"{not json", target, providers)


def test_get_json_bytes_passthrough():
    raw = b'[{"name":"x"}]'
    assert get_json_bytes(raw) == raw
    assert get_json_bytes(raw.decode()) == raw


def test_get_json_bytes_round_trip():
    value = [{"name": "rate_limiter", "enabled": True}]
    assert json.loads(get_json_bytes(value)) == value


def test_get_json_bytes_unserialisable():
    with pytest.raises(SchemaError):
        get_json_bytes({"x": object()})