"""Decoding of password-protected PKCS#12 bundles for client assertions."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12

from .errors import DecodeError, UnsupportedKeyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedCredential:
    """Key material extracted from a certificate bundle.

    Attributes:
        private_key: DER-encoded PKCS#1 ``RSAPrivateKey``.
        certificate: DER-encoded leaf certificate.
    """

    private_key: bytes = field(repr=False)
    certificate: bytes = field(repr=False)


def rsa_private_key_to_pkcs1(key: rsa.RSAPrivateKey) -> bytes:
    """Serialize an RSA private key as unencrypted DER PKCS#1 (``RSAPrivateKey``).

    This is the only key encoding the assertion signer in
    :mod:`graphauth.token_sources` accepts.
    """
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def certificate_thumbprint(certificate: bytes) -> str:
    """Return the base64url SHA-1 thumbprint of a DER certificate (``x5t``)."""
    cert = x509.load_der_x509_certificate(certificate)
    digest = cert.fingerprint(hashes.SHA1())
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def decode_pkcs12(
    data: bytes,
    password: str | None,
    *,
    source: str = "<bytes>",
) -> DecodedCredential:
    """Extract the RSA private key and leaf certificate from a PKCS#12 bundle.

    Args:
        data: Raw PKCS#12 (``.pfx``/``.p12``) bytes.
        password: Bundle password, or ``None``/empty for an unencrypted bundle.
        source: Identifier of the bundle (usually its path) used in error messages.

    Returns:
        The decoded key and certificate.

    Raises:
        DecodeError: If the password is wrong, the container is corrupt, or it
            lacks a private key or certificate.
        UnsupportedKeyError: If the private key is not an RSA key.
    """
    secret = password.encode("utf-8") if password else None
    try:
        key, cert, _additional = pkcs12.load_key_and_certificates(data, secret)
    except ValueError as err:
        raise DecodeError(
            f"could not decode pkcs12 credential store {source!r}: "
            "invalid password or corrupt bundle"
        ) from err

    if key is None:
        raise DecodeError(f"no private key found in pkcs12 store {source!r}")
    if cert is None:
        raise DecodeError(f"no certificate found in pkcs12 store {source!r}")
    if not isinstance(key, rsa.RSAPrivateKey):
        raise UnsupportedKeyError(
            f"unsupported non-rsa key ({type(key).__name__}) was found in "
            f"pkcs12 store {source!r}"
        )

    return DecodedCredential(
        private_key=rsa_private_key_to_pkcs1(key),
        certificate=cert.public_bytes(serialization.Encoding.DER),
    )


def load_pkcs12(path: str | Path, password: str | None) -> DecodedCredential:
    """Read a PKCS#12 bundle from disk and decode it.

    Raises:
        DecodeError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as err:
        raise DecodeError(f"could not read pkcs12 store at {str(path)!r}: {err}") from err

    logger.debug("Decoding pkcs12 store %s", path)
    return decode_pkcs12(data, password, source=str(path))
