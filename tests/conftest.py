"""Shared pytest fixtures for llmfeed-signer tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from llmfeed_signer.crypto.keys import generate_key_pair
from llmfeed_signer.crypto.models import KeyPair


@pytest.fixture(scope="session")
def key_pair() -> KeyPair:
    """One generated key pair shared by the session (generation is the slow part)."""
    return generate_key_pair()


@pytest.fixture
def sample_feed() -> dict[str, Any]:
    return {
        "feed_type": "mcp",
        "metadata": {
            "title": "Example Site",
            "origin": "https://example.com",
            "description": "Tools for agents",
        },
        "capabilities": [
            {"name": "search", "method": "GET", "path": "/api/search"},
            {"name": "book", "method": "POST", "path": "/api/book"},
        ],
        "agent_guidance": {"on_error": "retry once", "tone": "concise"},
    }


@dataclass(frozen=True)
class Ed25519Vector:
    seed: bytes
    public_key: bytes
    empty_message_signature: bytes


@pytest.fixture(scope="session")
def rfc8032_vector() -> Ed25519Vector:
    """RFC 8032 section 7.1, TEST 1."""
    return Ed25519Vector(
        seed=bytes.fromhex("9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"),
        public_key=bytes.fromhex(
            "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"
        ),
        empty_message_signature=bytes.fromhex(
            "e5564300c360ac729086e2cc806e828a84877f1eb8e5d974d873e065"
            "224901555fb8821590a33bacc61e39701cf9b46bd25bf5f0595bbe24655141438e7a100b"
        ),
    )
