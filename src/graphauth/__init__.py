"""Credential resolution for Microsoft Graph and Azure AD Graph clients.

Public API:
- get_authorizer() → Authorizer
- AuthConfig (settings), Api, TokenVersion
- Environment registry (get_environment, ENVIRONMENTS)
- token_url(), scopes(), resource() (endpoint helpers)
- decode_pkcs12(), load_pkcs12() (certificate decoding)
- AuthorizerAuth (requests integration)
"""

from .certificate import DecodedCredential, decode_pkcs12, load_pkcs12
from .config import AuthConfig, TokenVersion
from .endpoints import DEFAULT_TENANT, resource, scopes, token_url
from .environments import ENVIRONMENTS, Api, Environment, get_environment
from .errors import (
    AuthError,
    ConfigurationError,
    DecodeError,
    TokenError,
    UnsupportedKeyError,
)
from .factory import (
    AuthMethod,
    get_authorizer,
    new_azure_cli_authorizer,
    new_client_certificate_authorizer,
    new_client_secret_authorizer,
    select_method,
)
from .token_sources import Authorizer
from .transport import AuthorizerAuth

__all__ = [
    "Api",
    "AuthConfig",
    "AuthError",
    "AuthMethod",
    "Authorizer",
    "AuthorizerAuth",
    "ConfigurationError",
    "DEFAULT_TENANT",
    "DecodeError",
    "DecodedCredential",
    "ENVIRONMENTS",
    "Environment",
    "TokenError",
    "TokenVersion",
    "UnsupportedKeyError",
    "decode_pkcs12",
    "get_authorizer",
    "get_environment",
    "load_pkcs12",
    "new_azure_cli_authorizer",
    "new_client_certificate_authorizer",
    "new_client_secret_authorizer",
    "resource",
    "scopes",
    "select_method",
    "token_url",
]
