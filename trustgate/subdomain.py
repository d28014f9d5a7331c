"""Tenant extraction from request hosts."""

from __future__ import annotations

import string

_ALLOWED = frozenset(string.ascii_lowercase + string.digits + "-")


def is_valid_tenant_name(tenant: str) -> bool:
    """Tenant names are non-empty and use only lower-case letters, digits and '-'."""
    return bool(tenant) and all(ch in _ALLOWED for ch in tenant)


def extract_tenant_from_subdomain(host: str, base_domain: str) -> str:
    """Return the tenant in ``tenant.base_domain`` (port ignored), or '' if none."""
    if not host or not base_domain:
        return ""
    host = host.split(":")[0]
    if not host.endswith(base_domain):
        return ""
    tenant = host.removesuffix("." + base_domain)
    return tenant if is_valid_tenant_name(tenant) else ""