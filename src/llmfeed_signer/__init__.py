"""Ed25519 signing and verification for LLMFeed JSON documents.

Example:
    >>> from llmfeed_signer import generate_key_pair, sign_feed, verify_feed
    >>> pair = generate_key_pair()
    >>> signed = sign_feed({"feed_type": "mcp", "metadata": {"title": "T"}}, pair.private_key)
    >>> verify_feed(signed.feed, pair.public_key).valid
    True
"""

__version__ = "1.2.0"

from llmfeed_signer.canonical import canonical_json, canonicalize, sha256_hex
from llmfeed_signer.crypto.encoding import (
    base64_to_bytes,
    bytes_to_base64,
    extract_raw_public_key,
    format_pem,
    parse_pem,
    wrap_seed_as_pkcs8,
)
from llmfeed_signer.crypto.keys import derive_public_key, generate_key_pair
from llmfeed_signer.crypto.models import (
    KeyPair,
    SignedFeed,
    SigningOptions,
    VerificationResult,
)
from llmfeed_signer.crypto.signing import sign_feed, verify_feed, verify_feed_with_hint
from llmfeed_signer.errors import (
    BlockNotFoundError,
    InvalidKeyLengthError,
    KeyEncodingError,
    LLMFeedError,
    VerificationErrorCode,
)

__all__ = [
    "__version__",
    "BlockNotFoundError",
    "InvalidKeyLengthError",
    "KeyEncodingError",
    "KeyPair",
    "LLMFeedError",
    "SignedFeed",
    "SigningOptions",
    "VerificationErrorCode",
    "VerificationResult",
    "base64_to_bytes",
    "bytes_to_base64",
    "canonical_json",
    "canonicalize",
    "derive_public_key",
    "extract_raw_public_key",
    "format_pem",
    "generate_key_pair",
    "parse_pem",
    "sha256_hex",
    "sign_feed",
    "verify_feed",
    "verify_feed_with_hint",
    "wrap_seed_as_pkcs8",
]
