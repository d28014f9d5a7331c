"""Rule matching, target URL construction and authentication of upstream requests."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from trustgate.models import (
    Credentials,
    ForwardingRule,
    Gateway,
    Level,
    PluginConfig,
    Stage,
    UpstreamTarget,
)
from trustgate.schema import ProviderConfig

logger = logging.getLogger(__name__)


def _now_rfc3339() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


def find_matching_rule(
    rules: Iterable[ForwardingRule], method: str, path: str
) -> ForwardingRule | None:
    """Return a copy of the first active rule allowing the method whose path prefixes ``path``."""
    for rule in rules:
        if not rule.active or method not in rule.methods:
            continue
        if path.startswith(rule.path):
            now = _now_rfc3339()
            return replace(rule, created_at=now, updated_at=now)
    return None


def is_public_route(rules: Iterable[ForwardingRule], path: str) -> bool:
    """Whether the first active rule matching ``path`` is public."""
    for rule in rules:
        if rule.active and path.startswith(rule.path):
            return rule.public
    return False


def build_target_url(
    target: UpstreamTarget,
    rule: ForwardingRule,
    request_path: str,
    providers: Mapping[str, ProviderConfig],
) -> str:
    """Build the upstream URL for a target, stripping the rule path if asked to."""
    if target.provider:
        provider = providers.get(target.provider)
        if provider is None:
            raise ValueError(f"unsupported provider: {target.provider}")
        endpoint = provider.endpoints.get(target.path)
        if endpoint is None:
            raise ValueError(f"unsupported endpoint path: {target.path}")
        url = f"{provider.base_url}{endpoint.path}"
    else:
        url = f"{target.protocol}://{target.host}:{target.port}{target.path}"

    if rule.strip_path:
        url = url.removesuffix("/") + request_path.removeprefix(rule.path)
    return url


def _set_header(headers: dict[str, list[str]], name: str, value: str) -> None:
    for key in [k for k in headers if k.lower() == name.lower()]:
        del headers[key]
    headers[name] = [value]


def _set_query_param(url: str, name: str, value: str) -> str:
    parts = urlsplit(url)
    params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
    params.append((name, value))
    return urlunsplit(parts._replace(query=urlencode(params)))


def apply_authentication(
    url: str,
    headers: Mapping[str, Sequence[str]],
    body: bytes,
    credentials: Credentials | None,
) -> tuple[str, dict[str, list[str]], bytes]:
    """Return the URL, headers and body with the credentials applied."""
    new_headers = {k: list(v) for k, v in headers.items()}
    if credentials is None:
        logger.debug("No credentials found")
        return url, new_headers, body

    if credentials.header_name and credentials.header_value:
        logger.debug("Setting auth header %s", credentials.header_name)
        _set_header(new_headers, credentials.header_name, credentials.header_value)

    if credentials.param_name and credentials.param_value:
        if credentials.param_location == "query":
            url = _set_query_param(url, credentials.param_name, credentials.param_value)
        elif credentials.param_location == "body" and body:
            try:
                json_body = json.loads(body)
            except ValueError:
                logger.error("Failed to parse request body")
                return url, new_headers, body
            if not isinstance(json_body, dict):
                logger.error("Failed to parse request body")
                return url, new_headers, body
            json_body[credentials.param_name] = credentials.param_value
            body = json.dumps(json_body, sort_keys=True, separators=(",", ":")).encode()

    return url, new_headers, body


def convert_gateway_plugins(
    gateway: Gateway, plugin_stages: Mapping[str, Sequence[Stage]]
) -> list[PluginConfig]:
    """Select the gateway's enabled, known plugins as gateway-level configurations.

    ``plugin_stages`` maps each registered plugin name to the stages it is fixed to;
    an empty sequence means the stage must come from the configuration.
    """
    chains: list[PluginConfig] = []
    for config in gateway.required_plugins:
        if not config.enabled:
            continue
        if config.name not in plugin_stages:
            logger.error("Plugin not found: %s", config.name)
            continue
        if not plugin_stages[config.name] and config.stage is None:
            logger.error("Stage not configured for plugin: %s", config.name)
            continue
        chains.append(replace(config, level=Level.GATEWAY, settings=dict(config.settings)))
    return chains