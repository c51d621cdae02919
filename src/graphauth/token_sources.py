from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Protocol, runtime_checkable

import jwt
import requests
from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import AzureCliCredential
from cryptography.hazmat.primitives import serialization

from .certificate import certificate_thumbprint
from .errors import ConfigurationError, TokenError

logger = logging.getLogger(__name__)

CLIENT_ASSERTION_TYPE: Final[str] = (
    "urn:ietf:params:oauth:client-assertion-type:jwt-bearer"
)
ASSERTION_LIFETIME_SECONDS: Final[int] = 3600
EXPIRY_MARGIN_SECONDS: Final[int] = 300


@runtime_checkable
class Authorizer(Protocol):
    """Anything that can return an access token for authorizing API calls."""

    def token(self) -> AccessToken:
        """Return a current access token.

        Raises:
            TokenError: If no token could be obtained.
        """
        raise NotImplementedError


class AuthType(str, Enum):
    """How a client-credentials request authenticates the application."""

    ASSERTION = "assertion"
    SECRET = "secret"


@dataclass(frozen=True)
class TokenSourceConfig:
    """Shape of a client-credentials token request.

    Attributes:
        client_id: Application (client) ID.
        token_url: OAuth2 token endpoint.
        scopes: Requested scopes.
        resource: Legacy v1 ``resource`` parameter, ``None`` for v2.
        client_secret: Secret for :attr:`AuthType.SECRET`.
        private_key: DER PKCS#1 RSA key for :attr:`AuthType.ASSERTION`.
        certificate: DER certificate for :attr:`AuthType.ASSERTION`.
    """

    client_id: str
    token_url: str
    scopes: tuple[str, ...] = ()
    resource: str | None = None
    client_secret: str | None = field(default=None, repr=False)
    private_key: bytes | None = field(default=None, repr=False)
    certificate: bytes | None = field(default=None, repr=False)

    def token_source(
        self,
        auth_type: AuthType,
        *,
        session: requests.Session | None = None,
    ) -> ClientCredentialsTokenSource:
        """Build a token source authenticating with ``auth_type``.

        Raises:
            ConfigurationError: If the material ``auth_type`` needs is missing.
        """
        match auth_type:
            case AuthType.ASSERTION:
                if not (self.private_key and self.certificate):
                    raise ConfigurationError(
                        "assertion authentication requires a private key and certificate"
                    )
            case AuthType.SECRET:
                if not self.client_secret:
                    raise ConfigurationError(
                        "secret authentication requires a client secret"
                    )
        return ClientCredentialsTokenSource(self, auth_type, session=session)


class ClientCredentialsTokenSource:
    """OAuth2 client-credentials grant against a Microsoft identity endpoint.

    The last token is reused until it is within ``EXPIRY_MARGIN_SECONDS`` of
    expiry. A session passed in stays owned by the caller; one created here is
    owned by the source and released by :meth:`close`.
    """

    def __init__(
        self,
        config: TokenSourceConfig,
        auth_type: AuthType,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._auth_type = auth_type
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._token: AccessToken | None = None
        self._lock = threading.Lock()

    @property
    def config(self) -> TokenSourceConfig:
        return self._config

    @property
    def auth_type(self) -> AuthType:
        return self._auth_type

    def _client_assertion(self) -> str:
        """Sign a JWT-bearer client assertion with the configured certificate."""
        cfg = self._config
        key = serialization.load_der_private_key(cfg.private_key, password=None)
        now = int(time.time())
        claims = {
            "aud": cfg.token_url,
            "iss": cfg.client_id,
            "sub": cfg.client_id,
            "jti": str(uuid.uuid4()),
            "nbf": now,
            "exp": now + ASSERTION_LIFETIME_SECONDS,
        }
        headers = {"x5t": certificate_thumbprint(cfg.certificate)}
        return jwt.encode(claims, key, algorithm="RS256", headers=headers)

    def request_body(self) -> dict[str, str]:
        """Return the form fields of the token request."""
        cfg = self._config
        body = {
            "grant_type": "client_credentials",
            "client_id": cfg.client_id,
        }
        # v1 endpoints authorize by resource, v2 by scope.
        if cfg.resource:
            body["resource"] = cfg.resource
        elif cfg.scopes:
            body["scope"] = " ".join(cfg.scopes)

        if self._auth_type is AuthType.ASSERTION:
            body["client_assertion_type"] = CLIENT_ASSERTION_TYPE
            body["client_assertion"] = self._client_assertion()
        else:
            body["client_secret"] = cfg.client_secret
        return body

    def close(self) -> None:
        """Close the HTTP session if this source created it."""
        if self._owns_session:
            self._session.close()

    def token(self) -> AccessToken:
        with self._lock:
            if self._token is None or _expiring(self._token):
                self._token = self._exchange()
            return self._token

    def _exchange(self) -> AccessToken:
        url = self._config.token_url
        logger.debug("Requesting %s token from %s", self._auth_type.value, url)
        try:
            response = self._session.post(
                url,
                data=self.request_body(),
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as err:
            raise TokenError(f"token request to {url} failed: {err}") from err

        try:
            payload: dict[str, Any] = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            detail = (
                payload.get("error_description")
                or payload.get("error")
                or response.reason
            )
            raise TokenError(
                f"token request to {url} failed with HTTP {response.status_code}: {detail}"
            )

        access_token = payload.get("access_token")
        if not access_token:
            raise TokenError(f"token response from {url} did not contain an access_token")

        return AccessToken(access_token, _expires_on(payload))


def _expiring(token: AccessToken) -> bool:
    return token.expires_on - EXPIRY_MARGIN_SECONDS <= time.time()


def _expires_on(payload: dict[str, Any]) -> int:
    # v1 responses carry an absolute expires_on; both versions send expires_in,
    # v1 as a string.
    if payload.get("expires_on"):
        return int(payload["expires_on"])
    return int(time.time()) + int(payload.get("expires_in", 0))


class AzureCliTokenSource:
    """Tokens from the signed-in Azure CLI session."""

    def __init__(self, scopes: tuple[str, ...], tenant_id: str | None = None) -> None:
        self.scopes = scopes
        self.tenant_id = tenant_id.strip() if tenant_id and tenant_id.strip() else None
        kwargs = {"tenant_id": self.tenant_id} if self.tenant_id else {}
        try:
            self._credential = AzureCliCredential(**kwargs)
        except ValueError as err:
            raise ConfigurationError(
                f"invalid Azure CLI tenant {self.tenant_id!r}: {err}"
            ) from err

    def token(self) -> AccessToken:
        try:
            return self._credential.get_token(*self.scopes)
        except ClientAuthenticationError as err:
            raise TokenError(
                f"could not obtain a token from Azure CLI for {', '.join(self.scopes)}: {err}"
            ) from err
