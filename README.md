# trustgate

The request-handling core of an AI gateway. It matches incoming requests to
forwarding rules, reshapes request bodies into the format a provider
expects, forwards them to upstream targets with `httpx` and relays
server-sent event streams back to the caller while recording token usage.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `trustgate.models`: dataclasses for gateways (`Gateway`), forwarding rules
  (`ForwardingRule`), plugin configuration (`PluginConfig`, with the `Stage`
  and `Level` enums), `Credentials`, `UpstreamTarget`, `GatewayData`, and
  the `RequestContext` and `ResponseContext` passed around while a request
  is handled. `PluginError` is an exception carrying an HTTP status code and
  message. `Gateway`, `ForwardingRule`, `PluginConfig` and `JSONResponse`
  have `to_dict`; `gateway_from_dict`, `rule_from_dict`,
  `plugin_config_from_dict` and `credentials_from_dict` build them back.
  `UpstreamTarget.initialize(upstream_id, index)` gives a target without an
  ID one of the form `<upstream_id>-<provider>-<index>`.
- `trustgate.conditions`: `evaluate_condition` checks a `ResponseCondition`
  (`eq`, `ne`, `gt`, `gte`, `lt`, `lte`, `contains`, `not_contains`,
  `exists`, `not_exists`) against a value; unknown operators are false.
  `compare_numbers` and `contains_value` are the helpers it uses.
- `trustgate.mapper`: `FieldMapper` copies selected dotted-path fields
  (`FieldMapping(source, destination)`) from one dictionary into a new one;
  with no mappings it returns the source unchanged.
- `trustgate.ttlmap`: `TTLMap(ttl)`, a thread-safe in-memory map whose
  entries expire after `ttl` seconds (or a `timedelta`), with `get`, `set`,
  `delete` and `in`. `CacheKeys` and `CacheConfig` hold cache key formats
  and connection settings.
- `trustgate.subdomain`: `extract_tenant_from_subdomain` reads the tenant
  name from a host such as `tenant1.example.com:8080`, returning `""` when
  there is none; `is_valid_tenant_name` allows lower-case letters, digits
  and `-`.
- `trustgate.version`: `get_info` returns an `Info` with the package
  version, commit, build date, Python version and platform.
- `trustgate.schema`: `ProviderConfig`, `EndpointConfig`, `ProviderSchema`
  and `SchemaField` describe what a provider endpoint expects.
  `extract_value_by_path` understands paths like `messages[0].content` and
  `messages.last.content`; `map_between_schemas` builds a body in the target
  format, using defaults and rejecting missing required fields;
  `transform_request_body` turns a client JSON body into a provider body,
  replacing a model the target does not list with its default model and
  keeping a boolean `stream` flag. Failures raise `SchemaError`.
- `trustgate.routing`: `find_matching_rule` (first active rule allowing the
  method whose path prefixes the request path), `is_public_route`,
  `build_target_url` (provider endpoint or `protocol://host:port/path`,
  with optional path stripping), `apply_authentication` (header, query or
  JSON-body credentials) and `convert_gateway_plugins`.
- `trustgate.streaming`: `relay_event_stream` passes event-stream lines to a
  writer and stores the last reported `usage` object under
  `metadata["token_usage"]`.
- `trustgate.forwarder`: `Forwarder(providers, client=None)` sends a request
  to a target with `forward`, or streams it with `stream`; bodies with
  `"stream": true` are streamed automatically. Unreachable upstreams and
  non-2xx answers raise `UpstreamError`. It can be used as a context
  manager.
- `trustgate.pipeline`: `RequestPipeline(workers, batch_size, client=None)`,
  a pool of worker threads that send `httpx.Request` objects; `submit`
  blocks until the response arrives. It can be used as a context manager,
  which starts and stops the workers.

## Example

```python
from trustgate.models import rule_from_dict
from trustgate.routing import find_matching_rule
from trustgate.schema import extract_value_by_path

rules = [
    rule_from_dict({
        "id": "r1",
        "path": "/v1",
        "service_id": "s1",
        "methods": ["POST"],
        "active": True,
    }),
]

rule = find_matching_rule(rules, "POST", "/v1/chat/completions")
print(rule.id if rule else "no match")  # r1

data = {"messages": [{"content": "hi"}, {"content": "bye"}]}
print(extract_value_by_path(data, "messages[0].content"))    # hi
print(extract_value_by_path(data, "messages.last.content"))  # bye
```

## What this package does not do

It is a library of building blocks, not a running gateway. It has no HTTP
server or command to start one, no plugin manager or plugins, no load
balancing or retries across targets, and no storage: gateways, rules and
services are not read from a database or a shared cache, and `TTLMap` keeps
data only in memory. The caller supplies rules, targets and provider
configuration and wires the pieces together.