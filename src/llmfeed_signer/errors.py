"""LLMFeed Signer Error Taxonomy.

This module defines the error hierarchy for feed signing and key handling,
providing structured error handling with specific error codes and context
information.

Signing and key-loading errors are raised to the caller. Verification never
raises: its failure modes are reported through ``VerificationErrorCode`` on a
``VerificationResult``.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class LLMFeedError(Exception):
    """Base exception for all signer errors.

    Attributes:
        code: Error code following the llmfeed:<area>/<name> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class BlockNotFoundError(LLMFeedError):
    """Raised when a requested signed block is not a top-level key of the feed.

    Attributes:
        block: The missing block name
    """

    def __init__(self, block: str, details: dict[str, Any] | None = None) -> None:
        message = f'Specified signed block "{block}" does not exist in feed'
        super().__init__(
            code="llmfeed:sign/block_not_found",
            message=message,
            details={"block": block, **(details or {})},
        )
        self.block = block


class InvalidKeyLengthError(LLMFeedError):
    """Raised when decoded key bytes have none of the accepted lengths.

    Attributes:
        kind: "private" or "public"
        length: Actual decoded length in bytes
        expected: Accepted lengths for this kind of key
    """

    def __init__(
        self,
        kind: str,
        length: int,
        expected: tuple[int, ...],
        details: dict[str, Any] | None = None,
    ) -> None:
        accepted = " or ".join(str(n) for n in expected)
        message = f"Invalid {kind} key length: {length} (expected {accepted})"
        super().__init__(
            code="llmfeed:key/invalid_length",
            message=message,
            details={"kind": kind, "length": length, "expected": list(expected), **(details or {})},
        )
        self.kind = kind
        self.length = length
        self.expected = expected


class KeyEncodingError(LLMFeedError):
    """Raised when key text is not valid base64/PEM or carries a foreign ASN.1 header."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="llmfeed:key/invalid_encoding",
            message=f"Invalid key encoding: {reason}",
            details=details or {},
        )
        self.reason = reason


class UnsupportedAlgorithmError(LLMFeedError):
    """Raised when the crypto backend cannot perform Ed25519 operations."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="llmfeed:crypto/unsupported_algorithm",
            message=f"Ed25519 is not available: {reason}",
            details=details or {},
        )
        self.reason = reason


class PublicKeyFetchError(LLMFeedError):
    """Raised when a hosted public key cannot be retrieved or parsed.

    Attributes:
        url: The public_key_hint URL
        reason: Why the fetch failed
    """

    def __init__(self, url: str, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="llmfeed:key/fetch_failed",
            message=f"Failed to fetch public key from {url}: {reason}",
            details={"url": url, "reason": reason, **(details or {})},
        )
        self.url = url
        self.reason = reason


class ConfigurationError(LLMFeedError):
    """Raised when required configuration (e.g. a key environment variable) is missing."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="llmfeed:config/invalid",
            message=reason,
            details=details or {},
        )
        self.reason = reason


class VerificationErrorCode(str, Enum):
    """Named failure modes reported by feed verification."""

    MISSING_TRUST = "missing_trust"
    MISSING_SIGNATURE = "missing_signature"
    EMPTY_SIGNED_BLOCKS = "empty_signed_blocks"
    MISSING_SIGNATURE_VALUE = "missing_signature_value"
    INVALID_SIGNATURE_LENGTH = "invalid_signature_length"
    INVALID_PUBLIC_KEY_LENGTH = "invalid_public_key_length"
    SIGNATURE_VERIFICATION_FAILED = "signature_verification_failed"
    PUBLIC_KEY_UNAVAILABLE = "public_key_unavailable"
    EXCEPTION = "exception"
