from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .environments import Api, Environment, get_environment

__all__ = ["Api", "AuthConfig", "TokenVersion"]


class TokenVersion(str, Enum):
    """Microsoft identity platform token protocol versions."""

    V1 = "v1"
    V2 = "v2"


class AuthConfig(BaseSettings):
    """Credential inputs and per-method enable flags.

    Several methods may be enabled at once; :func:`graphauth.get_authorizer`
    picks one by precedence (client certificate, client secret, Azure CLI).
    No cross-field validation happens here, blank or missing fields simply
    make a method ineligible.

    Environment variables (aliases supported where noted):
        - ARM_ENVIRONMENT (alias: AZURE_ENVIRONMENT)
        - TOKEN_VERSION
        - AZURE_TENANT_ID (alias: TENANT_ID)
        - AZURE_CLIENT_ID (alias: CLIENT_ID)
        - ENABLE_CLIENT_CERTIFICATE_AUTH
        - AZURE_CLIENT_CERTIFICATE_PATH
        - AZURE_CLIENT_CERTIFICATE_PASSWORD
        - ENABLE_CLIENT_SECRET_AUTH
        - AZURE_CLIENT_SECRET (alias: CLIENT_SECRET)
        - ENABLE_AZURE_CLI_AUTH
    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # Field names are repeated in AliasChoices so keyword construction keeps working.
    # Matching is case-sensitive, so the lower-case field names never pick up
    # unrelated upper-case variables such as ENVIRONMENT or VERSION.

    environment: str = Field(
        default="global",
        validation_alias=AliasChoices(
            "environment", "ARM_ENVIRONMENT", "AZURE_ENVIRONMENT"
        ),
    )
    version: TokenVersion = Field(
        default=TokenVersion.V2,
        validation_alias=AliasChoices("version", "TOKEN_VERSION"),
    )
    tenant_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("tenant_id", "AZURE_TENANT_ID", "TENANT_ID"),
    )
    client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("client_id", "AZURE_CLIENT_ID", "CLIENT_ID"),
    )
    enable_client_certificate_auth: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "enable_client_certificate_auth", "ENABLE_CLIENT_CERTIFICATE_AUTH"
        ),
    )
    certificate_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "certificate_path", "AZURE_CLIENT_CERTIFICATE_PATH"
        ),
    )
    certificate_password: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "certificate_password", "AZURE_CLIENT_CERTIFICATE_PASSWORD"
        ),
    )
    enable_client_secret_auth: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "enable_client_secret_auth", "ENABLE_CLIENT_SECRET_AUTH"
        ),
    )
    client_secret: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "client_secret", "AZURE_CLIENT_SECRET", "CLIENT_SECRET"
        ),
    )
    enable_azure_cli_auth: bool = Field(
        default=False,
        validation_alias=AliasChoices("enable_azure_cli_auth", "ENABLE_AZURE_CLI_AUTH"),
    )

    @field_validator("certificate_path", mode="before")
    @classmethod
    def _blank_path_is_unset(cls, v: object) -> object:
        """Treat a blank certificate path as not configured."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def cloud(self) -> Environment:
        """The registry entry for :attr:`environment`.

        Raises:
            ConfigurationError: If the environment name is unknown.
        """
        return get_environment(self.environment)
