"""Forwarding of requests to upstream targets, plain and streaming."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

import httpx

from trustgate.models import ForwardingRule, RequestContext, ResponseContext, UpstreamTarget
from trustgate.routing import apply_authentication, build_target_url
from trustgate.schema import ProviderConfig, SchemaError, transform_request_body
from trustgate.streaming import relay_event_stream

logger = logging.getLogger(__name__)

RESPONSE_WRITER_KEY = "response_writer"
SELECTED_PROVIDER_HEADER = "X-Selected-Provider"

_STREAM_HEADERS = (
    ("Content-Type", "application/json"),
    ("Accept", "text/event-stream"),
    ("Cache-Control", "no-cache"),
    ("Connection", "keep-alive"),
)


class UpstreamError(Exception):
    """The upstream could not be reached or answered with a failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _set_header(headers: dict[str, list[str]], name: str, value: str) -> None:
    for key in [k for k in headers if k.lower() == name.lower()]:
        del headers[key]
    headers[name] = [value]


def _copy_headers(source: Mapping[str, list[str]], skip: frozenset[str]) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for name, values in source.items():
        if name.lower() in skip:
            continue
        headers.setdefault(name, []).extend(values)
    return headers


def _pairs(headers: Mapping[str, list[str]]) -> list[tuple[str, str]]:
    return [(name, value) for name, values in headers.items() for value in values]


def _response_headers(response: httpx.Response) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for raw_name, raw_value in response.headers.raw:
        headers.setdefault(raw_name.decode("latin-1"), []).append(raw_value.decode("latin-1"))
    return headers


def _wants_stream(body: bytes) -> bool:
    try:
        data = json.loads(body)
    except ValueError:
        return False
    return isinstance(data, dict) and data.get("stream") is True


def _iter_lines(response: httpx.Response) -> Iterator[bytes]:
    pending = b""
    try:
        for chunk in response.iter_bytes():
            pending += chunk
            *complete, pending = pending.split(b"\n")
            for line in complete:
                yield line + b"\n"
    except httpx.HTTPError as exc:
        logger.error("Error reading streaming response: %s", exc)
        return
    if pending:
        yield pending


class Forwarder:
    """Sends requests to upstream targets and collects their responses."""

    def __init__(self, providers: Mapping[str, ProviderConfig], client: httpx.Client | None = None) -> None:
        self.providers = dict(providers)
        self._owns_client = client is None
        self.client = client if client is not None else httpx.Client(timeout=30.0)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> Forwarder:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def forward(
        self, request: RequestContext, rule: ForwardingRule, target: UpstreamTarget
    ) -> ResponseContext:
        """Forward a request to a target; JSON bodies with ``"stream": true`` are streamed."""
        try:
            url = build_target_url(target, rule, request.path, self.providers)
        except ValueError as exc:
            raise UpstreamError(str(exc)) from exc

        body = b""
        if request.body:
            if _wants_stream(request.body):
                return self._forward_stream(request, target)
            if target.provider:
                try:
                    body = transform_request_body(request.body, target, self.providers)
                except SchemaError as exc:
                    raise UpstreamError(f"failed to transform request body: {exc}") from exc
            else:
                body = request.body

        headers = _copy_headers(request.headers, frozenset({"content-length"}))
        for name, value in target.headers.items():
            _set_header(headers, name, value)
        url, headers, auth_body = apply_authentication(
            url, headers, request.body, target.credentials
        )
        if auth_body is not request.body:
            body = auth_body

        try:
            response = self.client.request(
                request.method, url, headers=_pairs(headers), content=body or None
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"failed to forward request: {exc}") from exc

        status = response.status_code
        if status <= 0 or status >= 600:
            raise UpstreamError(f"invalid status code received: {status}")
        if not 200 <= status < 300:
            raise UpstreamError(
                f"upstream returned status code {status}: {response.text}", status_code=status
            )

        response_headers = _response_headers(response)
        _set_header(response_headers, SELECTED_PROVIDER_HEADER, target.provider)
        return ResponseContext(status_code=status, headers=response_headers, body=response.content)

    def _forward_stream(self, request: RequestContext, target: UpstreamTarget) -> ResponseContext:
        try:
            request.body = transform_request_body(request.body, target, self.providers)
        except SchemaError as exc:
            raise UpstreamError(f"failed to transform streaming request: {exc}") from exc
        writer = request.metadata.get(RESPONSE_WRITER_KEY)
        return self.stream(request, target, writer if callable(writer) else None)

    def stream(
        self,
        request: RequestContext,
        target: UpstreamTarget,
        write: Callable[[bytes], Any] | None = None,
    ) -> ResponseContext:
        """Send a streaming request to the target's provider and relay events to ``write``.

        The returned context carries the upstream headers, merged with any
        ``rate_limit_headers`` found in the request metadata.
        """
        provider = self.providers.get(target.provider)
        if provider is None:
            raise UpstreamError(f"unsupported provider: {target.provider}")
        endpoint = provider.endpoints.get(target.path)
        if endpoint is None:
            raise UpstreamError(f"unsupported endpoint path: {target.path}")
        url = f"{provider.base_url}{endpoint.path}"

        headers = _copy_headers(request.headers, frozenset({"host", "content-length"}))
        for name, value in _STREAM_HEADERS:
            _set_header(headers, name, value)
        credentials = target.credentials
        if credentials.header_name and credentials.header_value:
            _set_header(headers, credentials.header_name, credentials.header_value)
        for name, value in target.headers.items():
            _set_header(headers, name, value)

        try:
            with self.client.stream(
                request.method, url, headers=_pairs(headers), content=request.body, timeout=None
            ) as response:
                if response.status_code >= 400:
                    return ResponseContext(status_code=response.status_code, body=response.read())

                response_headers = _response_headers(response)
                rate_limit_headers = request.metadata.get("rate_limit_headers")
                if isinstance(rate_limit_headers, Mapping):
                    for name, values in rate_limit_headers.items():
                        for value in values:
                            _set_header(response_headers, name, value)

                if write is not None:
                    relay_event_stream(_iter_lines(response), write, request.metadata)
                status = response.status_code
        except httpx.HTTPError as exc:
            raise UpstreamError(f"failed to make streaming request: {exc}") from exc

        return ResponseContext(
            status_code=status,
            headers=response_headers,
            streaming=True,
            metadata=request.metadata,
        )