"""Core data types shared by the gateway: plugins, rules, gateways and contexts."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class Stage(str, Enum):
    """When a plugin is executed."""

    PRE_REQUEST = "pre_request"
    POST_REQUEST = "post_request"
    PRE_RESPONSE = "pre_response"
    POST_RESPONSE = "post_response"


class Level(str, Enum):
    """At which level a plugin is configured."""

    GATEWAY = "gateway"
    RULE = "rule"


def _enum_or_none(enum_cls: type[Enum], value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    return enum_cls(value)


def _enum_value(member: Enum | None) -> str:
    return member.value if member is not None else ""


@dataclass
class PluginConfig:
    """Configuration of one plugin attached to a gateway or rule."""

    id: str = ""
    name: str = ""
    enabled: bool = False
    level: Level | None = None
    stage: Stage | None = None
    priority: int = 0
    parallel: bool = False
    settings: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "enabled": self.enabled,
            "level": _enum_value(self.level),
            "stage": _enum_value(self.stage),
            "priority": self.priority,
            "parallel": self.parallel,
            "settings": dict(self.settings),
        }


def plugin_config_from_dict(data: dict[str, Any]) -> PluginConfig:
    """Build a PluginConfig from its JSON form; unknown stages or levels raise ValueError."""
    return PluginConfig(
        id=data.get("id") or "",
        name=data.get("name") or "",
        enabled=bool(data.get("enabled", False)),
        level=_enum_or_none(Level, data.get("level")),
        stage=_enum_or_none(Stage, data.get("stage")),
        priority=int(data.get("priority") or 0),
        parallel=bool(data.get("parallel", False)),
        settings=dict(data.get("settings") or {}),
    )


class PluginError(Exception):
    """A plugin rejected the request with an HTTP status and message."""

    def __init__(self, status_code: int, message: str, err: BaseException | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.err = err

    def __str__(self) -> str:
        return self.message


@dataclass
class PluginResponse:
    status_code: int = 0
    message: str = ""
    body: bytes = b""
    headers: dict[str, list[str]] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class PluginChain:
    """A sequence of plugins run at one stage."""

    stage: Stage | None = None
    parallel: bool = False
    plugins: list[PluginConfig] = field(default_factory=list)


@dataclass
class RequestContext:
    """An incoming request as seen by plugins and the forwarder."""

    gateway_id: str = ""
    headers: dict[str, list[str]] = field(default_factory=dict)
    method: str = ""
    path: str = ""
    query: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""
    metadata: dict[str, Any] = field(default_factory=dict)
    stage: Stage | None = None


@dataclass
class ResponseContext:
    """An upstream response as seen by plugins."""

    gateway_id: str = ""
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""
    status_code: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    streaming: bool = False


@dataclass
class RateLimit:
    limit: int = 0
    window: str = ""


@dataclass
class RateLimiterActions:
    type: str = ""
    retry_after: str = ""


@dataclass
class RateLimiterConfig:
    limits: dict[str, RateLimit] = field(default_factory=dict)
    actions: RateLimiterActions = field(default_factory=RateLimiterActions)


@dataclass
class ResponseCondition:
    """A condition checked against a value taken from a response."""

    field: str = ""
    operator: str = ""
    value: Any = None
    stop_flow: bool = False
    message: str = ""


@dataclass
class Gateway:
    """A tenant's gateway configuration."""

    id: str = ""
    name: str = ""
    subdomain: str = ""
    status: str = ""
    created_at: str = ""
    updated_at: str = ""
    required_plugins: list[PluginConfig] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subdomain": self.subdomain,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "required_plugins": [p.to_dict() for p in self.required_plugins],
        }


def gateway_from_dict(data: dict[str, Any]) -> Gateway:
    return Gateway(
        id=data.get("id") or "",
        name=data.get("name") or "",
        subdomain=data.get("subdomain") or "",
        status=data.get("status") or "",
        created_at=data.get("created_at") or "",
        updated_at=data.get("updated_at") or "",
        required_plugins=[plugin_config_from_dict(p) for p in data.get("required_plugins") or []],
    )


@dataclass
class ForwardingRule:
    """A rule that forwards matching requests to a service."""

    id: str = ""
    gateway_id: str = ""
    path: str = ""
    service_id: str = ""
    methods: list[str] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    strip_path: bool = False
    preserve_host: bool = False
    retry_attempts: int = 0
    plugin_chain: list[PluginConfig] = field(default_factory=list)
    active: bool = False
    public: bool = False
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "gateway_id": self.gateway_id,
            "path": self.path,
            "service_id": self.service_id,
            "methods": list(self.methods),
            "headers": dict(self.headers),
            "strip_path": self.strip_path,
            "preserve_host": self.preserve_host,
            "retry_attempts": self.retry_attempts,
            "plugin_chain": [p.to_dict() for p in self.plugin_chain],
            "active": self.active,
            "public": self.public,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def rule_from_dict(data: dict[str, Any]) -> ForwardingRule:
    return ForwardingRule(
        id=data.get("id") or "",
        gateway_id=data.get("gateway_id") or "",
        path=data.get("path") or "",
        service_id=data.get("service_id") or "",
        methods=list(data.get("methods") or []),
        headers=dict(data.get("headers") or {}),
        strip_path=bool(data.get("strip_path", False)),
        preserve_host=bool(data.get("preserve_host", False)),
        retry_attempts=int(data.get("retry_attempts") or 0),
        plugin_chain=[plugin_config_from_dict(p) for p in data.get("plugin_chain") or []],
        active=bool(data.get("active", False)),
        public=bool(data.get("public", False)),
        created_at=data.get("created_at") or "",
        updated_at=data.get("updated_at") or "",
    )


@dataclass
class HealthStatus:
    healthy: bool = False
    last_check: datetime | None = None
    last_error: BaseException | None = None
    failures: int = 0
    active_conn: int = 0


@dataclass
class Credentials:
    """Authentication settings applied to upstream requests."""

    header_name: str = ""
    header_value: str = ""
    param_name: str = ""
    param_value: str = ""
    param_location: str = ""
    azure_use_managed_identity: bool = False
    azure_client_id: str = ""
    azure_client_secret: str = ""
    azure_tenant_id: str = ""
    gcp_use_service_account: bool = False
    gcp_service_account_json: str = ""
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    allow_override: bool = False


def credentials_from_dict(data: dict[str, Any]) -> Credentials:
    values = {f.name: data[f.name] for f in fields(Credentials) if data.get(f.name) is not None}
    return Credentials(**values)


@dataclass
class UpstreamTarget:
    """One target behind an upstream or endpoint service."""

    id: str = ""
    weight: int = 0
    priority: int = 0
    host: str = ""
    port: int = 0
    protocol: str = ""
    provider: str = ""
    models: list[str] = field(default_factory=list)
    default_model: str = ""
    credentials: Credentials = field(default_factory=Credentials)
    headers: dict[str, str] = field(default_factory=dict)
    path: str = ""
    health: HealthStatus | None = None

    def initialize(self, upstream_id: str, index: int) -> None:
        """Give the target a derived ID if it has none."""
        if not self.id:
            self.id = f"{upstream_id}-{self.provider}-{index}"


@dataclass
class GatewayData:
    """A gateway together with its forwarding rules."""

    gateway: Gateway | None = None
    rules: list[ForwardingRule] = field(default_factory=list)


@dataclass
class JSONResponse:
    code: int = 0
    message: str = ""
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        return result


class RulesCacher(Protocol):
    """Something that can cache the rules of a gateway."""

    def update_rules_cache(self, gateway_id: str, rules: list[ForwardingRule]) -> None: ...