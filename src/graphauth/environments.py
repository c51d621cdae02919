"""Registry of national clouds and their directory/graph endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Mapping

from .errors import ConfigurationError


class Api(str, Enum):
    """API surfaces a token can be requested for."""

    MS_GRAPH = "ms_graph"
    AAD_GRAPH = "aad_graph"


@dataclass(frozen=True)
class ApiEndpoint:
    endpoint: str


@dataclass(frozen=True)
class Environment:
    """Endpoints for one national cloud.

    Attributes:
        name: Registry key of the cloud (e.g. ``"global"``).
        azure_ad_endpoint: Base URL of the Azure AD authority, without tenant.
        ms_graph: Microsoft Graph API endpoint.
        aad_graph: Legacy Azure AD Graph API endpoint.
    """

    name: str
    azure_ad_endpoint: str
    ms_graph: ApiEndpoint
    aad_graph: ApiEndpoint

    def api_endpoint(self, api: Api) -> str:
        """Return the base endpoint of ``api`` in this cloud.

        Raises:
            ValueError: If ``api`` is not a known :class:`Api`.
        """
        match api:
            case Api.MS_GRAPH:
                return self.ms_graph.endpoint
            case Api.AAD_GRAPH:
                return self.aad_graph.endpoint
        raise ValueError(f"Unknown API: {api!r}")


GLOBAL: Final = Environment(
    name="global",
    azure_ad_endpoint="https://login.microsoftonline.com",
    ms_graph=ApiEndpoint("https://graph.microsoft.com"),
    aad_graph=ApiEndpoint("https://graph.windows.net"),
)

US_GOVERNMENT_L4: Final = Environment(
    name="usgovernmentl4",
    azure_ad_endpoint="https://login.microsoftonline.us",
    ms_graph=ApiEndpoint("https://graph.microsoft.us"),
    aad_graph=ApiEndpoint("https://graph.windows.net"),
)

US_GOVERNMENT_L5: Final = Environment(
    name="usgovernmentl5",
    azure_ad_endpoint="https://login.microsoftonline.us",
    ms_graph=ApiEndpoint("https://dod-graph.microsoft.us"),
    aad_graph=ApiEndpoint("https://graph.windows.net"),
)

GERMANY: Final = Environment(
    name="germany",
    azure_ad_endpoint="https://login.microsoftonline.de",
    ms_graph=ApiEndpoint("https://graph.microsoft.de"),
    aad_graph=ApiEndpoint("https://graph.cloudapi.de"),
)

CHINA: Final = Environment(
    name="china",
    azure_ad_endpoint="https://login.chinacloudapi.cn",
    ms_graph=ApiEndpoint("https://microsoftgraph.chinacloudapi.cn"),
    aad_graph=ApiEndpoint("https://graph.chinacloudapi.cn"),
)

CANARY: Final = Environment(
    name="canary",
    azure_ad_endpoint="https://login.microsoftonline.com",
    ms_graph=ApiEndpoint("https://canary.graph.microsoft.com"),
    aad_graph=ApiEndpoint("https://graph.windows.net"),
)

ENVIRONMENTS: Final[Mapping[str, Environment]] = {
    env.name: env
    for env in (GLOBAL, US_GOVERNMENT_L4, US_GOVERNMENT_L5, GERMANY, CHINA, CANARY)
}

_ALIASES: Final[Mapping[str, str]] = {
    "public": "global",
    "usgovernment": "usgovernmentl4",
    "dod": "usgovernmentl5",
}


def get_environment(name: str) -> Environment:
    """Look up a cloud by name (case-insensitive, aliases allowed).

    Raises:
        ConfigurationError: If the name is not a known cloud.
    """
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return ENVIRONMENTS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown environment {name!r}; expected one of: "
            f"{', '.join(sorted(ENVIRONMENTS))}"
        ) from None
