from __future__ import annotations

import requests
from azure.core.credentials import AccessToken

from graphauth.token_sources import AuthType, TokenSourceConfig
from graphauth.transport import AuthorizerAuth


class _StaticAuthorizer:
    def __init__(self) -> None:
        self.calls = 0

    def token(self) -> AccessToken:
        self.calls += 1
        return AccessToken(f"token-{self.calls}", 0)


def test_authorizer_auth__sets_bearer_header() -> None:
    authorizer = _StaticAuthorizer()
    request = requests.Request("GET", "https://graph.example/v1.0/me").prepare()

    prepared = AuthorizerAuth(authorizer)(request)

    assert prepared.headers["Authorization"] == "Bearer token-1"


def test_authorizer_auth__asks_for_a_token_per_request() -> None:
    authorizer = _StaticAuthorizer()
    auth = AuthorizerAuth(authorizer)

    for _ in range(2):
        auth(requests.Request("GET", "https://graph.example/v1.0/me").prepare())

    assert authorizer.calls == 2


def test_authorizer_auth__reuses_client_credentials_token(fake_session) -> None:
    """Several API calls through the hook cost a single token exchange."""
    session = fake_session()
    source = TokenSourceConfig(
        client_id="c",
        token_url="https://login.example/t/oauth2/v2.0/token",
        scopes=("https://graph.example/.default",),
        client_secret="s",
    ).token_source(AuthType.SECRET, session=session)
    auth = AuthorizerAuth(source)

    for _ in range(3):
        prepared = auth(requests.Request("GET", "https://graph.example/v1.0/me").prepare())
        assert prepared.headers["Authorization"] == "Bearer tok"

    assert len(session.calls) == 1
