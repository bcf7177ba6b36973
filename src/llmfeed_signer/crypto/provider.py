"""Pluggable Ed25519 primitive used by key generation, signing and verification.

Signer and verifier only exchange DER bytes (PKCS#8 for private keys, SPKI for
public keys) with the provider, so another backend can be bound without
touching their contracts.
"""

from __future__ import annotations

from typing import Protocol

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from llmfeed_signer.errors import KeyEncodingError, UnsupportedAlgorithmError


class Ed25519Provider(Protocol):
    """Ed25519 capability: generate, sign, verify on DER-encoded keys."""

    def generate(self) -> tuple[bytes, bytes]:
        """Return a fresh (pkcs8_der, spki_der) pair."""
        ...

    def sign(self, pkcs8_der: bytes, data: bytes) -> bytes: ...

    def verify(self, spki_der: bytes, signature: bytes, data: bytes) -> bool: ...

    def public_from_private(self, pkcs8_der: bytes) -> bytes:
        """SPKI DER of the public key matching ``pkcs8_der``."""
        ...


class CryptographyEd25519Provider:
    """Ed25519Provider backed by ``cryptography`` (OpenSSL, OS CSPRNG)."""

    def generate(self) -> tuple[bytes, bytes]:
        try:
            private_key = Ed25519PrivateKey.generate()
        except UnsupportedAlgorithm as e:
            raise UnsupportedAlgorithmError(str(e)) from e
        return _private_der(private_key), _public_der(private_key.public_key())

    def sign(self, pkcs8_der: bytes, data: bytes) -> bytes:
        return _load_private(pkcs8_der).sign(data)

    def verify(self, spki_der: bytes, signature: bytes, data: bytes) -> bool:
        public_key = _load_public(spki_der)
        try:
            public_key.verify(signature, data)
        except InvalidSignature:
            return False
        return True

    def public_from_private(self, pkcs8_der: bytes) -> bytes:
        return _public_der(_load_private(pkcs8_der).public_key())


def _private_der(key: Ed25519PrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _public_der(key: Ed25519PublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def _load_private(pkcs8_der: bytes) -> Ed25519PrivateKey:
    try:
        key = serialization.load_der_private_key(pkcs8_der, password=None)
    except UnsupportedAlgorithm as e:
        raise UnsupportedAlgorithmError(str(e)) from e
    except ValueError as e:
        raise KeyEncodingError(f"unreadable PKCS#8 private key ({e})") from e
    if not isinstance(key, Ed25519PrivateKey):
        raise KeyEncodingError("Key is not an Ed25519 private key")
    return key


def _load_public(spki_der: bytes) -> Ed25519PublicKey:
    try:
        key = serialization.load_der_public_key(spki_der)
    except UnsupportedAlgorithm as e:
        raise UnsupportedAlgorithmError(str(e)) from e
    except ValueError as e:
        raise KeyEncodingError(f"unreadable SPKI public key ({e})") from e
    if not isinstance(key, Ed25519PublicKey):
        raise KeyEncodingError("Key is not an Ed25519 public key")
    return key


_default_provider: Ed25519Provider = CryptographyEd25519Provider()


def get_default_provider() -> Ed25519Provider:
    return _default_provider
