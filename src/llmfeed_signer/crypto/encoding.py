"""Ed25519 key encodings: base64, PEM, and the fixed PKCS#8 / SPKI wrappers."""

from __future__ import annotations

import base64
import binascii
import re

from llmfeed_signer.errors import InvalidKeyLengthError, KeyEncodingError

# ASN.1 headers for Ed25519 (OID 1.3.101.112). Protocol constants: every
# implementation must use these exact bytes.
PKCS8_ED25519_PREFIX = bytes.fromhex("302e020100300506032b657004220420")
SPKI_ED25519_PREFIX = bytes.fromhex("302a300506032b6570032100")

ED25519_KEY_SIZE = 32
ED25519_SIGNATURE_SIZE = 64
PKCS8_ED25519_SIZE = len(PKCS8_ED25519_PREFIX) + ED25519_KEY_SIZE
SPKI_ED25519_SIZE = len(SPKI_ED25519_PREFIX) + ED25519_KEY_SIZE

PRIVATE_KEY_LENGTHS = (ED25519_KEY_SIZE, PKCS8_ED25519_SIZE)
PUBLIC_KEY_LENGTHS = (ED25519_KEY_SIZE, SPKI_ED25519_SIZE)

PEM_LINE_LENGTH = 64
PEM_PRIVATE_KEY_LABEL = "PRIVATE KEY"
PEM_PUBLIC_KEY_LABEL = "PUBLIC KEY"

_PEM_BEGIN_RE = re.compile(r"-----BEGIN [A-Z0-9 ]+-----")
_PEM_END_RE = re.compile(r"-----END [A-Z0-9 ]+-----")
_WHITESPACE_RE = re.compile(r"\s+")


def bytes_to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def base64_to_bytes(b64: str) -> bytes:
    """Standard-alphabet base64 decode. Raises KeyEncodingError on bad input."""
    try:
        return base64.b64decode(_WHITESPACE_RE.sub("", b64), validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyEncodingError(f"not valid base64 ({e})") from e


def format_pem(b64: str, label: str) -> str:
    """Wrap base64 text in BEGIN/END lines with a 64-character body."""
    lines = [f"-----BEGIN {label}-----"]
    lines.extend(b64[i : i + PEM_LINE_LENGTH] for i in range(0, len(b64), PEM_LINE_LENGTH))
    lines.append(f"-----END {label}-----")
    return "\n".join(lines)


def parse_pem(pem: str) -> str:
    """Strip PEM armor and all whitespace, returning the base64 body."""
    body = _PEM_BEGIN_RE.sub("", pem, count=1)
    body = _PEM_END_RE.sub("", body, count=1)
    return _WHITESPACE_RE.sub("", body)


def is_pem(text: str) -> bool:
    return "-----BEGIN" in text


def decode_key_text(text: str) -> bytes:
    """Decode PEM or bare base64 key text into DER/raw bytes."""
    text = text.strip()
    if is_pem(text):
        return base64_to_bytes(parse_pem(text))
    return base64_to_bytes(text)


def wrap_seed_as_pkcs8(seed: bytes) -> bytes:
    """32-byte Ed25519 seed -> 48-byte PKCS#8 DER."""
    if len(seed) != ED25519_KEY_SIZE:
        raise InvalidKeyLengthError("private", len(seed), (ED25519_KEY_SIZE,))
    return PKCS8_ED25519_PREFIX + seed


def wrap_raw_public_key_as_spki(raw: bytes) -> bytes:
    """32-byte Ed25519 public key -> 44-byte SPKI DER."""
    if len(raw) != ED25519_KEY_SIZE:
        raise InvalidKeyLengthError("public", len(raw), (ED25519_KEY_SIZE,))
    return SPKI_ED25519_PREFIX + raw


def normalize_private_key_bytes(data: bytes) -> bytes:
    """Raw seed or PKCS#8 bytes -> 48-byte PKCS#8 DER."""
    if len(data) == ED25519_KEY_SIZE:
        return wrap_seed_as_pkcs8(data)
    if len(data) == PKCS8_ED25519_SIZE:
        if not data.startswith(PKCS8_ED25519_PREFIX):
            raise KeyEncodingError("48-byte private key is not an Ed25519 PKCS#8 structure")
        return data
    raise InvalidKeyLengthError("private", len(data), PRIVATE_KEY_LENGTHS)


def extract_raw_public_key(pem_or_bytes: str | bytes) -> bytes:
    """Return the 32-byte raw Ed25519 public key.

    Accepts SPKI (44 bytes) or raw (32 bytes), either as bytes or as PEM /
    base64 text. Any other length raises InvalidKeyLengthError.
    """
    data = decode_key_text(pem_or_bytes) if isinstance(pem_or_bytes, str) else pem_or_bytes
    if len(data) == SPKI_ED25519_SIZE:
        if not data.startswith(SPKI_ED25519_PREFIX):
            raise KeyEncodingError("44-byte public key is not an Ed25519 SPKI structure")
        return data[-ED25519_KEY_SIZE:]
    if len(data) == ED25519_KEY_SIZE:
        return data
    raise InvalidKeyLengthError("public", len(data), PUBLIC_KEY_LENGTHS)
