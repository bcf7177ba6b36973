"""Ed25519 feed signing and verification over selected top-level blocks.

A signature covers the canonical JSON of the sub-object made of the blocks
listed in ``trust.signed_blocks``. Signing raises on bad input; verification
never raises and reports every failure through ``VerificationResult``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from llmfeed_signer.canonical import canonical_json, sha256_hex
from llmfeed_signer.crypto.encoding import (
    ED25519_SIGNATURE_SIZE,
    PUBLIC_KEY_LENGTHS,
    base64_to_bytes,
    bytes_to_base64,
    decode_key_text,
)
from llmfeed_signer.crypto.keys import (
    PrivateKeyMaterial,
    PublicKeyMaterial,
    parse_private_key,
    parse_public_key,
)
from llmfeed_signer.crypto.models import (
    SignatureBlock,
    SignedFeed,
    SigningOptions,
    TrustBlock,
    VerificationResult,
)
from llmfeed_signer.crypto.provider import Ed25519Provider, get_default_provider
from llmfeed_signer.crypto.resolver import fetch_public_key
from llmfeed_signer.crypto.trust_levels import TrustLevel
from llmfeed_signer.errors import (
    BlockNotFoundError,
    PublicKeyFetchError,
    VerificationErrorCode,
)
from llmfeed_signer.observability import get_logger

logger = get_logger(__name__)

RESERVED_BLOCKS = frozenset({"trust", "signature"})


def utc_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC with milliseconds and a Z suffix, e.g. 2025-01-01T00:00:00.000Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_signed_blocks(document: dict[str, Any]) -> list[str]:
    """All top-level keys except trust/signature, in document order."""
    return [key for key in document if key not in RESERVED_BLOCKS]


def build_canonical_payload(document: dict[str, Any], signed_blocks: list[str]) -> str:
    """Canonical JSON of the signed blocks present in ``document``."""
    payload = {block: document[block] for block in signed_blocks if block in document}
    return canonical_json(payload)


def sign_feed(
    document: dict[str, Any],
    private_key: str | bytes | PrivateKeyMaterial,
    options: SigningOptions | None = None,
    *,
    provider: Ed25519Provider | None = None,
) -> SignedFeed:
    """Sign ``document`` and return a copy carrying trust and signature blocks.

    ``private_key`` may be PEM, base64 PKCS#8 (48 bytes), base64 raw seed
    (32 bytes), raw bytes, or already-parsed material; every encoding of the
    same key yields the same signature. ``document`` is not mutated.

    Raises:
        BlockNotFoundError: A requested signed block is not in ``document``.
        InvalidKeyLengthError: The key decodes to an unsupported length.
        KeyEncodingError: The key text is not valid PEM/base64 or not Ed25519.
    """
    options = options or SigningOptions()
    provider = provider or get_default_provider()

    if options.signed_blocks is not None:
        signed_blocks = list(options.signed_blocks)
    else:
        signed_blocks = default_signed_blocks(document)
    for block in signed_blocks:
        if block not in document:
            raise BlockNotFoundError(block, details={"available": default_signed_blocks(document)})

    canonical_payload = build_canonical_payload(document, signed_blocks)
    payload_hash = sha256_hex(canonical_payload)

    if isinstance(private_key, PrivateKeyMaterial):
        material = private_key
    else:
        material = parse_private_key(private_key)
    raw_signature = provider.sign(material.der, canonical_payload.encode("utf-8"))
    assert len(raw_signature) == ED25519_SIGNATURE_SIZE, "Ed25519 signature must be 64 bytes"
    signature = bytes_to_base64(raw_signature)

    trust_level = options.trust_level
    if isinstance(trust_level, TrustLevel):
        trust_level = trust_level.value
    trust = TrustBlock(
        signed_blocks=signed_blocks,
        public_key_hint=options.public_key_url or None,
        trust_level=trust_level or None,
        scope=options.scope or None,
    )
    signature_block = SignatureBlock(
        value=signature,
        created_at=utc_timestamp() if options.add_timestamp else None,
    )
    signed_document = dict(document)
    signed_document["trust"] = trust.to_feed_block()
    signed_document["signature"] = signature_block.to_feed_block()

    logger.debug(
        "feed.signed",
        signed_blocks=signed_blocks,
        payload_hash=payload_hash[:16],
        key_encoding=material.encoding,
    )
    return SignedFeed(
        feed=signed_document,
        canonical_payload=canonical_payload,
        payload_hash=payload_hash,
        signature=signature,
        signed_blocks=signed_blocks,
    )


def _failure(
    code: VerificationErrorCode,
    message: str,
    signed_blocks: list[str] | None = None,
    payload_hash: str | None = None,
    missing_blocks: list[str] | None = None,
) -> VerificationResult:
    return VerificationResult(
        valid=False,
        error=message,
        error_code=code.value,
        signed_blocks=signed_blocks,
        payload_hash=payload_hash,
        missing_blocks=missing_blocks or [],
    )


def _verify(
    document: dict[str, Any],
    public_key: str | bytes | PublicKeyMaterial,
    provider: Ed25519Provider,
) -> VerificationResult:
    trust = document.get("trust")
    if not isinstance(trust, dict):
        return _failure(VerificationErrorCode.MISSING_TRUST, "Missing trust block")
    sig = document.get("signature")
    if not isinstance(sig, dict):
        return _failure(VerificationErrorCode.MISSING_SIGNATURE, "Missing signature block")
    signed_blocks = trust.get("signed_blocks")
    if not isinstance(signed_blocks, list) or not signed_blocks:
        return _failure(VerificationErrorCode.EMPTY_SIGNED_BLOCKS, "Missing or empty signed_blocks")
    signature_value = sig.get("value")
    if not signature_value:
        return _failure(VerificationErrorCode.MISSING_SIGNATURE_VALUE, "Missing signature value")

    # Declared blocks absent from the document are left out of the payload;
    # the signature check then fails, and missing_blocks says why.
    missing_blocks = [block for block in signed_blocks if block not in document]
    canonical_payload = build_canonical_payload(document, signed_blocks)
    payload_hash = sha256_hex(canonical_payload)

    signature_bytes = base64_to_bytes(signature_value)
    if len(signature_bytes) != ED25519_SIGNATURE_SIZE:
        return _failure(
            VerificationErrorCode.INVALID_SIGNATURE_LENGTH,
            f"Invalid signature length: {len(signature_bytes)}",
            signed_blocks,
            payload_hash,
            missing_blocks,
        )

    if isinstance(public_key, PublicKeyMaterial):
        key_material = public_key
    else:
        if isinstance(public_key, str):
            key_bytes = decode_key_text(public_key)
        else:
            key_bytes = bytes(public_key)
        if len(key_bytes) not in PUBLIC_KEY_LENGTHS:
            return _failure(
                VerificationErrorCode.INVALID_PUBLIC_KEY_LENGTH,
                f"Invalid public key length: {len(key_bytes)}",
                signed_blocks,
                payload_hash,
                missing_blocks,
            )
        key_material = parse_public_key(key_bytes)

    valid = provider.verify(key_material.spki, signature_bytes, canonical_payload.encode("utf-8"))
    if not valid:
        message = "Signature verification failed"
        if missing_blocks:
            message += f" (signed blocks missing from feed: {', '.join(missing_blocks)})"
        logger.info(
            "feed.verification_failed",
            payload_hash=payload_hash[:16],
            missing_blocks=missing_blocks,
        )
        return _failure(
            VerificationErrorCode.SIGNATURE_VERIFICATION_FAILED,
            message,
            signed_blocks,
            payload_hash,
            missing_blocks,
        )
    logger.debug("feed.verified", signed_blocks=signed_blocks, payload_hash=payload_hash[:16])
    return VerificationResult(
        valid=True,
        signed_blocks=signed_blocks,
        payload_hash=payload_hash,
        missing_blocks=missing_blocks,
    )


def verify_feed(
    document: dict[str, Any],
    public_key: str | bytes | PublicKeyMaterial,
    *,
    provider: Ed25519Provider | None = None,
) -> VerificationResult:
    """Verify ``document``'s signature against ``public_key``.

    ``public_key`` may be base64 raw (32 bytes), base64 SPKI (44 bytes), an
    SPKI PEM, bytes, or parsed material. The payload is rebuilt from the
    document's own ``trust.signed_blocks``. Never raises: any failure,
    including malformed input, returns ``valid=False`` with ``error`` set.
    """
    try:
        return _verify(document, public_key, provider or get_default_provider())
    except Exception as e:  # untrusted input must not crash the caller
        logger.info("feed.verification_error", error=str(e), error_type=type(e).__name__)
        return _failure(VerificationErrorCode.EXCEPTION, str(e))


def verify_feed_with_hint(
    document: dict[str, Any],
    *,
    client: httpx.Client | None = None,
    provider: Ed25519Provider | None = None,
) -> VerificationResult:
    """Verify using the public key hosted at ``trust.public_key_hint``."""
    trust = document.get("trust")
    hint = trust.get("public_key_hint") if isinstance(trust, dict) else None
    if not isinstance(hint, str) or not hint:
        return _failure(
            VerificationErrorCode.PUBLIC_KEY_UNAVAILABLE,
            "No public key provided and no public_key_hint in feed",
        )
    try:
        public_key = fetch_public_key(hint, client=client)
    except PublicKeyFetchError as e:
        return _failure(VerificationErrorCode.PUBLIC_KEY_UNAVAILABLE, e.message)
    return verify_feed(document, public_key, provider=provider)
