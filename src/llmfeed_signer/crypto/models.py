"""Pydantic models for feed trust/signature blocks and signer results."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from llmfeed_signer.crypto.trust_levels import TrustLevel

# Base64 (standard alphabet) pattern for key and signature fields.
BASE64_PATTERN = r"^[A-Za-z0-9+/=]+$"

ALGORITHM_ED25519 = "Ed25519"


class TrustBlock(BaseModel):
    """``trust`` block injected into a signed feed."""

    model_config = ConfigDict(extra="forbid")

    signed_blocks: list[str] = Field(
        ...,
        description="Top-level block names covered by the signature, in signing order.",
    )
    algorithm: Literal["Ed25519"] = Field(default=ALGORITHM_ED25519)
    public_key_hint: str | None = Field(
        default=None,
        description="URL where the signer's public key is hosted.",
    )
    trust_level: str | None = Field(default=None, description="e.g. 'self-signed'.")
    scope: str | None = Field(default=None)

    def to_feed_block(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SignatureBlock(BaseModel):
    """``signature`` block injected into a signed feed."""

    model_config = ConfigDict(extra="forbid")

    value: str = Field(
        ...,
        description="Base64-encoded 64-byte Ed25519 signature.",
        pattern=BASE64_PATTERN,
    )
    created_at: str | None = Field(default=None, description="ISO-8601 UTC timestamp.")

    def to_feed_block(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SigningOptions(BaseModel):
    """Options for sign_feed; every field is optional."""

    model_config = ConfigDict(extra="forbid")

    signed_blocks: list[str] | None = Field(
        default=None,
        description="Blocks to sign (default: all top-level keys except trust/signature).",
    )
    public_key_url: str | None = None
    trust_level: TrustLevel | str | None = None
    scope: str | None = None
    add_timestamp: bool = True


class SignedFeed(BaseModel):
    """Result of sign_feed: the signed document plus signing diagnostics."""

    feed: dict[str, Any]
    canonical_payload: str
    payload_hash: str
    signature: str
    signed_blocks: list[str]


class VerificationResult(BaseModel):
    """Result of verify_feed; ``error`` is set on every failure path."""

    valid: bool
    signed_blocks: list[str] | None = None
    payload_hash: str | None = None
    error: str | None = None
    error_code: str | None = None
    missing_blocks: list[str] = Field(
        default_factory=list,
        description="Declared signed blocks absent from the document at verification time.",
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class KeyPair(BaseModel):
    """Fresh Ed25519 key pair in every encoding the signer accepts."""

    model_config = ConfigDict(frozen=True)

    private_key: str = Field(..., description="Base64 PKCS#8 DER (48 bytes).", repr=False)
    public_key: str = Field(..., description="Base64 raw public key (32 bytes).")
    private_key_pem: str = Field(..., repr=False)
    public_key_pem: str = Field(..., description="SPKI PEM for publishing.")
    created_at: datetime
