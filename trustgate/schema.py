"""Provider schemas and translation of request bodies into a provider's format."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from trustgate.models import UpstreamTarget

_INDEX = re.compile(r"[+-]?[0-9]+")
_SEPARATORS = re.compile(r"[.\[\]]")


class SchemaError(ValueError):
    """A request could not be read or mapped according to a schema."""


@dataclass
class SchemaField:
    """Where a target field takes its value from in the incoming request."""

    path: str = ""
    required: bool = False
    default: Any = None


@dataclass
class ProviderSchema:
    """The request format a provider endpoint expects, keyed by target field."""

    request_format: dict[str, SchemaField] = field(default_factory=dict)


@dataclass
class EndpointConfig:
    path: str = ""
    schema: ProviderSchema | None = None


@dataclass
class ProviderConfig:
    base_url: str = ""
    endpoints: dict[str, EndpointConfig] = field(default_factory=dict)


def _descend(value: Any, is_last: bool, where: str) -> Any:
    if is_last:
        return value
    if isinstance(value, dict):
        return value
    raise SchemaError(f"expected object at {where}")


def extract_value_by_path(data: dict[str, Any], path: str) -> Any:
    """Return the value at a path such as ``messages[0].content`` or ``messages.last``."""
    if not path:
        raise SchemaError("empty path")

    if "." not in path and "[" not in path:
        if path in data:
            return data[path]
        raise SchemaError(f"key not found: {path}")

    segments = [s for s in _SEPARATORS.split(path) if s]
    current: Any = data
    for position, segment in enumerate(segments):
        is_last = position == len(segments) - 1

        if _INDEX.fullmatch(segment):
            index = int(segment)
            if not isinstance(current, list):
                raise SchemaError("expected array for index access")
            if index < 0 or index >= len(current):
                raise SchemaError(f"array index out of bounds: {index}")
            if is_last:
                return current[index]
            current = _descend(current[index], is_last, f"index {index}")
            continue

        if segment == "last":
            if not isinstance(current, list):
                raise SchemaError("expected array for 'last' access")
            if not current:
                raise SchemaError("array is empty")
            if is_last:
                return current[-1]
            current = _descend(current[-1], is_last, "last index")
            continue

        if not isinstance(current, dict):
            raise SchemaError(f"expected object at path {segment}")
        if segment not in current:
            raise SchemaError(f"key not found: {segment}")
        if is_last:
            return current[segment]
        current = current[segment]

    raise SchemaError("invalid path")


def map_between_schemas(data: dict[str, Any], target_schema: ProviderSchema | None) -> dict[str, Any]:
    """Build a request in the target format from the fields of ``data``."""
    if target_schema is None:
        raise SchemaError("missing target schema configuration")

    result: dict[str, Any] = {}
    for target_key, target_field in target_schema.request_format.items():
        try:
            result[target_key] = extract_value_by_path(data, target_field.path)
        except SchemaError as exc:
            if target_field.default is not None:
                result[target_key] = target_field.default
            elif target_field.required:
                raise SchemaError(f"missing required field {target_key}: {exc}") from exc
    return result


def _marshal(value: Any) -> bytes:
    return json.dumps(value, sort_keys=True, separators=(",", ":")).encode()


def transform_request_body(
    body: bytes, target: UpstreamTarget, providers: Mapping[str, ProviderConfig]
) -> bytes:
    """Rewrite a JSON request body into the format of the target's provider endpoint."""
    if not body:
        return body

    try:
        request_data = json.loads(body)
    except ValueError as exc:
        raise SchemaError(f"failed to unmarshal request body: {exc}") from exc
    if not isinstance(request_data, dict):
        raise SchemaError("failed to unmarshal request body: not a JSON object")

    provider = providers.get(target.provider)
    endpoint = provider.endpoints.get(target.path) if provider is not None else None
    if endpoint is None or endpoint.schema is None:
        raise SchemaError(
            f"missing schema for target provider {target.provider} endpoint {target.path}"
        )

    model = request_data.get("model")
    if not (isinstance(model, str) and model in target.models):
        request_data["model"] = target.default_model

    try:
        transformed = map_between_schemas(request_data, endpoint.schema)
    except SchemaError as exc:
        raise SchemaError(
            f"failed to transform request for provider {target.provider} "
            f"endpoint {target.path}: {exc}"
        ) from exc

    stream = request_data.get("stream")
    if isinstance(stream, bool):
        transformed["stream"] = stream
    return _marshal(transformed)


def get_json_bytes(value: Any) -> bytes:
    """Return raw JSON bytes for bytes or text as-is, or serialise any other value."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode()
    try:
        return _marshal(value)
    except (TypeError, ValueError) as exc:
        raise SchemaError(f"failed to marshal value to JSON bytes: {exc}") from exc