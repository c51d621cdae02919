from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from . import endpoints
from .certificate import load_pkcs12
from .config import Api, AuthConfig, TokenVersion
from .environments import Environment
from .errors import AuthError, ConfigurationError
from .token_sources import (
    Authorizer,
    AuthType,
    AzureCliTokenSource,
    TokenSourceConfig,
)

logger = logging.getLogger(__name__)


class AuthMethod(str, Enum):
    """Authentication methods, in order of preference."""

    CLIENT_CERTIFICATE = "client_certificate"
    CLIENT_SECRET = "client_secret"
    AZURE_CLI = "azure_cli"


def _present(value: object) -> bool:
    if value is None:
        return False
    if hasattr(value, "get_secret_value"):
        value = value.get_secret_value()
    return bool(str(value).strip())


def select_method(config: AuthConfig) -> AuthMethod | None:
    """Return the first enabled and sufficiently configured method.

    Certificate and secret authentication need ``tenant_id`` and ``client_id``
    plus their own credential; Azure CLI only needs to be enabled.
    """
    identity = _present(config.tenant_id) and _present(config.client_id)

    if config.enable_client_certificate_auth:
        if identity and _present(config.certificate_path):
            return AuthMethod.CLIENT_CERTIFICATE
        logger.debug(
            "Skipping client certificate auth: tenant_id, client_id and "
            "certificate_path are required"
        )

    if config.enable_client_secret_auth:
        if identity and _present(config.client_secret):
            return AuthMethod.CLIENT_SECRET
        logger.debug(
            "Skipping client secret auth: tenant_id, client_id and "
            "client_secret are required"
        )

    if config.enable_azure_cli_auth:
        return AuthMethod.AZURE_CLI

    return None


def get_authorizer(config: AuthConfig | None = None, api: Api = Api.MS_GRAPH) -> Authorizer:
    """Construct an :class:`Authorizer` for ``api`` based on :class:`AuthConfig`.

    Methods are tried in this order, the first one that is enabled and has the
    fields it needs wins:

    - client certificate (tenant_id, client_id, certificate_path)
    - client secret (tenant_id, client_id, client_secret)
    - Azure CLI

    A selected method that fails to build is reported, lower-precedence
    methods are not tried.

    Args:
        config: Auth configuration. If ``None``, it is read from the environment.
        api: API the tokens are for.

    Returns:
        A ready-to-use :class:`Authorizer`.

    Raises:
        ConfigurationError: If no method is usable or the selected one fails.
    """
    cfg = config or AuthConfig()
    method = select_method(cfg)
    if method is None:
        raise ConfigurationError(
            "no Authorizer could be configured, please check your configuration"
        )

    logger.info("Using %s authentication for %s", method.value, api.value)
    try:
        match method:
            case AuthMethod.CLIENT_CERTIFICATE:
                return new_client_certificate_authorizer(
                    cfg.cloud,
                    api,
                    cfg.version,
                    cfg.tenant_id,
                    cfg.client_id,
                    cfg.certificate_path,
                    (
                        cfg.certificate_password.get_secret_value()
                        if cfg.certificate_password
                        else None
                    ),
                )
            case AuthMethod.CLIENT_SECRET:
                return new_client_secret_authorizer(
                    cfg.cloud,
                    api,
                    cfg.version,
                    cfg.tenant_id,
                    cfg.client_id,
                    cfg.client_secret.get_secret_value(),
                )
            case AuthMethod.AZURE_CLI:
                return new_azure_cli_authorizer(cfg.cloud, api, cfg.tenant_id)
    except AuthError as err:
        raise ConfigurationError(
            f"could not configure {method.value} Authorizer: {err}"
        ) from err
    raise AssertionError(f"Unhandled authentication method: {method!r}")


def new_client_certificate_authorizer(
    environment: Environment,
    api: Api,
    version: TokenVersion,
    tenant_id: str,
    client_id: str,
    certificate_path: str | Path,
    certificate_password: str | None = None,
) -> Authorizer:
    """Return an Authorizer signing client assertions with a PKCS#12 certificate.

    Raises:
        DecodeError: If the bundle cannot be read or decoded.
    """
    credential = load_pkcs12(certificate_path, certificate_password)
    derived = endpoints.derive(environment, api, tenant_id, version)
    conf = TokenSourceConfig(
        client_id=client_id,
        token_url=derived.token_url,
        scopes=derived.scopes,
        resource=derived.resource,
        private_key=credential.private_key,
        certificate=credential.certificate,
    )
    return conf.token_source(AuthType.ASSERTION)


def new_client_secret_authorizer(
    environment: Environment,
    api: Api,
    version: TokenVersion,
    tenant_id: str,
    client_id: str,
    client_secret: str,
) -> Authorizer:
    """Return an Authorizer using the client secret grant."""
    derived = endpoints.derive(environment, api, tenant_id, version)
    conf = TokenSourceConfig(
        client_id=client_id,
        token_url=derived.token_url,
        scopes=derived.scopes,
        resource=derived.resource,
        client_secret=client_secret,
    )
    return conf.token_source(AuthType.SECRET)


def new_azure_cli_authorizer(
    environment: Environment,
    api: Api,
    tenant_id: str | None = None,
) -> Authorizer:
    """Return an Authorizer backed by the Azure CLI session.

    A blank ``tenant_id`` uses the CLI's default tenant.
    """
    return AzureCliTokenSource(tuple(endpoints.scopes(environment, api)), tenant_id)
