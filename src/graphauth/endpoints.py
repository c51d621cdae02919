from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .config import TokenVersion
from .environments import Api, Environment

DEFAULT_TENANT: Final[str] = "common"
DEFAULT_SCOPE_SUFFIX: Final[str] = "/.default"


@dataclass(frozen=True)
class DerivedEndpoint:
    """Token URL, scopes and (v1 only) resource for one token request."""

    token_url: str
    scopes: tuple[str, ...]
    resource: str | None = None


def token_url(ad_endpoint: str, tenant_id: str | None, version: TokenVersion) -> str:
    """Return the OAuth2 token endpoint for a tenant.

    Args:
        ad_endpoint: Azure AD authority base (e.g. "https://login.microsoftonline.com").
        tenant_id: Tenant ID or domain. Blank values fall back to ``"common"``.
        version: Token protocol version; v2 inserts the ``/v2.0`` segment.

    Returns:
        "<ad_endpoint>/<tenant>/oauth2[/v2.0]/token"
    """
    tenant = tenant_id.strip() if tenant_id else ""
    url = f"{ad_endpoint}/{tenant or DEFAULT_TENANT}/oauth2"
    if version == TokenVersion.V2:
        url = f"{url}/v2.0"
    return f"{url}/token"


def scopes(environment: Environment, api: Api) -> list[str]:
    return [f"{environment.api_endpoint(api)}{DEFAULT_SCOPE_SUFFIX}"]


def resource(environment: Environment, api: Api) -> str:
    """Return the legacy v1 ``resource`` parameter (endpoint with trailing slash)."""
    return f"{environment.api_endpoint(api)}/"


def derive(
    environment: Environment,
    api: Api,
    tenant_id: str | None,
    version: TokenVersion,
) -> DerivedEndpoint:
    """Compute everything a client-credentials request needs for ``api``."""
    return DerivedEndpoint(
        token_url=token_url(environment.azure_ad_endpoint, tenant_id, version),
        scopes=tuple(scopes(environment, api)),
        resource=resource(environment, api) if version == TokenVersion.V1 else None,
    )
