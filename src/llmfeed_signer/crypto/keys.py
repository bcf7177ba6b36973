"""Ed25519 key generation, key-material parsing, and key file loading.

Key text arrives in several shapes (PEM, base64 PKCS#8, base64 raw seed,
base64 SPKI, base64 raw public key). ``parse_private_key`` and
``parse_public_key`` resolve the shape once and hand the signer/verifier a
normalized, length-tagged value.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from llmfeed_signer.crypto.encoding import (
    ED25519_KEY_SIZE,
    PEM_PRIVATE_KEY_LABEL,
    PEM_PUBLIC_KEY_LABEL,
    bytes_to_base64,
    decode_key_text,
    extract_raw_public_key,
    format_pem,
    normalize_private_key_bytes,
    wrap_raw_public_key_as_spki,
)
from llmfeed_signer.crypto.models import KeyPair
from llmfeed_signer.crypto.provider import Ed25519Provider, get_default_provider
from llmfeed_signer.errors import ConfigurationError
from llmfeed_signer.observability import get_logger

logger = get_logger(__name__)

# Age in days after which to log a key rotation warning.
KEY_ROTATION_WARNING_DAYS = 365
# Recommended mode for private key files (owner read/write only).
KEY_FILE_RECOMMENDED_MODE = 0o600
# Environment variable holding a private key (PEM or base64) for signing.
ENV_PRIVATE_KEY = "LLMFEED_PRIVATE_KEY"


@dataclass(frozen=True)
class PrivateKeyMaterial:
    """Private key normalized to PKCS#8 DER; ``encoding`` records the input shape."""

    encoding: Literal["raw-seed", "pkcs8"]
    der: bytes

    def __repr__(self) -> str:
        return f"PrivateKeyMaterial(encoding={self.encoding!r})"


@dataclass(frozen=True)
class PublicKeyMaterial:
    """Public key normalized to its 32 raw bytes; ``encoding`` records the input shape."""

    encoding: Literal["raw", "spki"]
    raw: bytes

    @property
    def spki(self) -> bytes:
        return wrap_raw_public_key_as_spki(self.raw)

    @property
    def base64(self) -> str:
        return bytes_to_base64(self.raw)


def parse_private_key(key: str | bytes) -> PrivateKeyMaterial:
    """PEM text, base64 text, or bytes -> PrivateKeyMaterial.

    Raises InvalidKeyLengthError unless the decoded key is 32 or 48 bytes.
    """
    data = decode_key_text(key) if isinstance(key, str) else bytes(key)
    encoding: Literal["raw-seed", "pkcs8"] = (
        "raw-seed" if len(data) == ED25519_KEY_SIZE else "pkcs8"
    )
    return PrivateKeyMaterial(encoding=encoding, der=normalize_private_key_bytes(data))


def parse_public_key(key: str | bytes) -> PublicKeyMaterial:
    """PEM text, base64 text, or bytes -> PublicKeyMaterial.

    Raises InvalidKeyLengthError unless the decoded key is 32 or 44 bytes.
    """
    data = decode_key_text(key) if isinstance(key, str) else bytes(key)
    encoding: Literal["raw", "spki"] = "raw" if len(data) == ED25519_KEY_SIZE else "spki"
    return PublicKeyMaterial(encoding=encoding, raw=extract_raw_public_key(data))


def generate_key_pair(provider: Ed25519Provider | None = None) -> KeyPair:
    """Generate a fresh Ed25519 key pair from the OS CSPRNG.

    Raises UnsupportedAlgorithmError if the backend has no Ed25519 support.
    """
    provider = provider or get_default_provider()
    pkcs8_der, spki_der = provider.generate()
    private_b64 = bytes_to_base64(pkcs8_der)
    return KeyPair(
        private_key=private_b64,
        public_key=bytes_to_base64(extract_raw_public_key(spki_der)),
        private_key_pem=format_pem(private_b64, PEM_PRIVATE_KEY_LABEL),
        public_key_pem=format_pem(bytes_to_base64(spki_der), PEM_PUBLIC_KEY_LABEL),
        created_at=datetime.now(timezone.utc),
    )


def derive_public_key(private_key: str | bytes, provider: Ed25519Provider | None = None) -> str:
    """Base64 raw public key for a private key in any accepted encoding."""
    provider = provider or get_default_provider()
    material = parse_private_key(private_key)
    return bytes_to_base64(extract_raw_public_key(provider.public_from_private(material.der)))


def get_key_created_at(path: str | Path) -> datetime:
    """Key creation time approximated by file mtime (UTC)."""
    mtime = Path(path).stat().st_mtime
    return datetime.fromtimestamp(mtime, tz=timezone.utc)


def warn_if_key_old(
    created_at: datetime,
    max_age_days: int = KEY_ROTATION_WARNING_DAYS,
    path: Path | None = None,
) -> bool:
    """Log key.rotation_recommended when the key is at least ``max_age_days`` old."""
    age_days = (datetime.now(timezone.utc) - created_at).days
    if age_days < max_age_days:
        return False
    logger.warning(
        "key.rotation_recommended",
        age_days=age_days,
        max_age_days=max_age_days,
        created_at=created_at.isoformat(),
        path=str(path) if path is not None else None,
    )
    return True


def warn_if_key_file_permissions_loose(path: Path) -> bool:
    """Log key.file_permissions_loose when group or others can access ``path``."""
    if os.name == "nt":
        return False
    try:
        permissions = path.stat().st_mode & 0o777
    except OSError:
        return False
    loose = bool(permissions & 0o077)
    if loose:
        logger.warning(
            "key.file_permissions_loose",
            path=str(path),
            mode=oct(permissions),
            recommended=oct(KEY_FILE_RECOMMENDED_MODE),
        )
    return loose


def load_private_key_from_file(path: str | Path) -> PrivateKeyMaterial:
    """Load a private key from a PEM or base64 sidecar file (blocking I/O).

    Logs a warning if the file is readable by group/others and a rotation
    warning if it is older than KEY_ROTATION_WARNING_DAYS.
    """
    path = Path(path)
    warn_if_key_file_permissions_loose(path)
    material = parse_private_key(path.read_text(encoding="utf-8"))
    warn_if_key_old(get_key_created_at(path), path=path)
    return material


def load_public_key_from_file(path: str | Path) -> PublicKeyMaterial:
    """Load a public key from a PEM (SPKI) or base64 file."""
    return parse_public_key(Path(path).read_text(encoding="utf-8"))


def load_private_key_from_env(var_name: str = ENV_PRIVATE_KEY) -> PrivateKeyMaterial:
    """From env var (PEM or base64). Raises ConfigurationError if unset or empty."""
    value = os.environ.get(var_name)
    if not value:
        raise ConfigurationError(
            f"Environment variable {var_name!r} is not set or empty",
            details={"var_name": var_name},
        )
    return parse_private_key(value)


def write_key_pair(
    key_pair: KeyPair, directory: str | Path, name: str = "llmfeed"
) -> dict[str, Path]:
    """Write ``{name}.private.pem``, ``{name}.public.pem`` and ``{name}.private.base64``.

    Private files are chmod 0600. Returns the written paths keyed by
    "private_pem", "public_pem" and "private_base64".
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    paths = {
        "private_pem": directory / f"{name}.private.pem",
        "public_pem": directory / f"{name}.public.pem",
        "private_base64": directory / f"{name}.private.base64",
    }
    paths["private_pem"].write_text(key_pair.private_key_pem, encoding="utf-8")
    paths["public_pem"].write_text(key_pair.public_key_pem, encoding="utf-8")
    paths["private_base64"].write_text(key_pair.private_key, encoding="utf-8")
    for secret in (paths["private_pem"], paths["private_base64"]):
        try:
            secret.chmod(KEY_FILE_RECOMMENDED_MODE)
        except OSError as exc:
            logger.warning("key.chmod_failed", path=str(secret), error=str(exc))
    logger.info("key.pair_written", directory=str(directory), name=name)
    return paths
