"""Trust level enum; separate module to avoid circular imports."""

from enum import Enum


class TrustLevel(str, Enum):
    """Known values for ``trust.trust_level`` on a signed feed."""

    SELF_SIGNED = "self-signed"
    """Publisher signs its own feed with a key hosted on its own origin."""

    CERTIFIED = "certified"
    """Feed countersigned by a third-party certifier."""

    VERIFIED = "verified"
    """Publisher identity checked out of band."""

    ENTERPRISE = "enterprise"
    """Feed signed by an organization-managed key."""
