from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator

import pytest
from azure.core.credentials import AccessToken
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    NoEncryption,
    pkcs12,
)
from cryptography.x509.oid import NameOID

import graphauth.token_sources as token_sources

BUNDLE_PASSWORD = "hunter2"


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove environment variables so settings only see what a test sets.

    Yields:
        Iterator[None]: Context manager semantics for pytest.
    """
    for k in list(os.environ.keys()):
        monkeypatch.delenv(k, raising=False)
    yield


def _self_signed(key: Any, algorithm: hashes.HashAlgorithm) -> x509.Certificate:
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "NL"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "graphauth tests"),
            x509.NameAttribute(NameOID.COMMON_NAME, "graphauth-test-app"),
        ]
    )
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(1)
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=1))
        .sign(private_key=key, algorithm=algorithm)
    )


@pytest.fixture(scope="session")
def rsa_bundle() -> bytes:
    """Password-protected PKCS#12 bundle holding an RSA key."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    cert = _self_signed(key, hashes.SHA256())
    return pkcs12.serialize_key_and_certificates(
        b"graphauth", key, cert, None, BestAvailableEncryption(BUNDLE_PASSWORD.encode())
    )


@pytest.fixture(scope="session")
def unencrypted_rsa_bundle() -> bytes:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    cert = _self_signed(key, hashes.SHA256())
    return pkcs12.serialize_key_and_certificates(
        b"graphauth", key, cert, None, NoEncryption()
    )


@pytest.fixture(scope="session")
def ec_bundle() -> bytes:
    """Password-protected PKCS#12 bundle holding an EC (non-RSA) key."""
    key = ec.generate_private_key(ec.SECP256R1())
    cert = _self_signed(key, hashes.SHA256())
    return pkcs12.serialize_key_and_certificates(
        b"graphauth", key, cert, None, BestAvailableEncryption(BUNDLE_PASSWORD.encode())
    )


@pytest.fixture()
def rsa_bundle_path(tmp_path: Path, rsa_bundle: bytes) -> Path:
    p = tmp_path / "app.pfx"
    p.write_bytes(rsa_bundle)
    return p


@pytest.fixture()
def ec_bundle_path(tmp_path: Path, ec_bundle: bytes) -> Path:
    p = tmp_path / "ec.pfx"
    p.write_bytes(ec_bundle)
    return p


@pytest.fixture()
def stub_cli(monkeypatch: pytest.MonkeyPatch) -> type:
    """Replace AzureCliCredential with a recorder so no subprocess is spawned.

    Returns:
        type: The recorder class; inspect ``last_kwargs``/``call_count``.
    """

    class AzureCliCredential:
        last_kwargs: dict[str, Any] | None = None
        last_scopes: tuple[str, ...] | None = None
        call_count: int = 0
        error: Exception | None = None

        def __init__(self, **kwargs: Any) -> None:
            type(self).last_kwargs = dict(kwargs)
            type(self).call_count += 1

        def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
            type(self).last_scopes = scopes
            if type(self).error is not None:
                raise type(self).error
            return AccessToken("cli-token", 1_700_000_000)

    monkeypatch.setattr(token_sources, "AzureCliCredential", AzureCliCredential)
    return AzureCliCredential


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: dict[str, Any] | None = None,
        reason: str = "OK",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    def json(self) -> dict[str, Any]:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Records token requests and answers with a canned response."""

    def __init__(
        self,
        response: FakeResponse | None = None,
        error: Exception | None = None,
    ) -> None:
        self.response = response or FakeResponse(
            payload={"access_token": "tok", "token_type": "Bearer", "expires_in": 3599}
        )
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture()
def fake_session() -> type[FakeSession]:
    return FakeSession


@pytest.fixture()
def fake_response() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture()
def bundle_password() -> str:
    return BUNDLE_PASSWORD
