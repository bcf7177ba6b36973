"""Ed25519 key handling and feed signing.

- Key codec: base64, PEM, PKCS#8 / SPKI wrappers (``encoding``)
- Key generation, parsing and file/env loading (``keys``)
- Feed signing and verification over selected blocks (``signing``)
- Hosted public key retrieval (``resolver``)
"""

from llmfeed_signer.crypto import encoding, keys, signing
from llmfeed_signer.crypto.models import (
    KeyPair,
    SignatureBlock,
    SignedFeed,
    SigningOptions,
    TrustBlock,
    VerificationResult,
)
from llmfeed_signer.crypto.provider import (
    CryptographyEd25519Provider,
    Ed25519Provider,
    get_default_provider,
)
from llmfeed_signer.crypto.trust_levels import TrustLevel

__all__ = [
    "encoding",
    "keys",
    "signing",
    "CryptographyEd25519Provider",
    "Ed25519Provider",
    "KeyPair",
    "SignatureBlock",
    "SignedFeed",
    "SigningOptions",
    "TrustBlock",
    "TrustLevel",
    "VerificationResult",
    "get_default_provider",
]
