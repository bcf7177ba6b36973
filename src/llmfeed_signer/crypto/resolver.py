"""Fetch a publisher's hosted public key from ``trust.public_key_hint``."""

from __future__ import annotations

import httpx

from llmfeed_signer.crypto.keys import parse_public_key
from llmfeed_signer.errors import LLMFeedError, PublicKeyFetchError
from llmfeed_signer.observability import get_logger

logger = get_logger(__name__)

DEFAULT_FETCH_TIMEOUT = 10.0
# Hosted keys are tiny; anything larger is not a key file.
MAX_PUBLIC_KEY_BYTES = 16 * 1024


def fetch_public_key(
    url: str,
    *,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> str:
    """GET ``url`` once and return the base64 raw public key it hosts.

    The body may be an SPKI PEM or bare base64. No retries.

    Raises:
        PublicKeyFetchError: On a malformed URL, transport errors, non-2xx
            status, or an unparseable body.
    """
    if not url.startswith(("https://", "http://")):
        raise PublicKeyFetchError(url, "public_key_hint is not an http(s) URL")
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = http.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise PublicKeyFetchError(url, str(e) or type(e).__name__) from e
    finally:
        if owns_client:
            http.close()

    if not response.is_success:
        raise PublicKeyFetchError(
            url, f"HTTP {response.status_code}", details={"status_code": response.status_code}
        )
    if len(response.content) > MAX_PUBLIC_KEY_BYTES:
        raise PublicKeyFetchError(url, f"response too large ({len(response.content)} bytes)")
    try:
        material = parse_public_key(response.text)
    except LLMFeedError as e:
        raise PublicKeyFetchError(url, e.message) from e
    logger.debug("key.public_key_fetched", url=url, encoding=material.encoding)
    return material.base64
