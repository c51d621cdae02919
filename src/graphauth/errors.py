"""Exceptions raised while resolving credentials and acquiring tokens."""

from __future__ import annotations


class AuthError(Exception):
    """Base class for graphauth errors."""


class ConfigurationError(AuthError):
    """No authentication method could be configured from the settings."""


class DecodeError(AuthError):
    """A certificate bundle could not be read or parsed."""


class UnsupportedKeyError(DecodeError):
    """The certificate bundle holds a key the assertion signer cannot use."""


class TokenError(AuthError):
    """The token endpoint or CLI session failed to produce an access token."""
