from __future__ import annotations

import requests
from requests.auth import AuthBase

from .token_sources import Authorizer


class AuthorizerAuth(AuthBase):
    """``requests`` auth hook adding a bearer token from an Authorizer.

    Example:
        session.auth = AuthorizerAuth(get_authorizer(config, Api.MS_GRAPH))
    """

    def __init__(self, authorizer: Authorizer) -> None:
        self.authorizer = authorizer

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        token = self.authorizer.token()
        request.headers["Authorization"] = f"Bearer {token.token}"
        return request
