"""TLS 1.2 signature algorithm identifiers."""

from __future__ import annotations

from enum import IntEnum


class SignatureAlgorithm(IntEnum):
    """Signature algorithm as registered with IANA."""

    ANONYMOUS = 0
    RSA = 1
    ECDSA = 3
    ED25519 = 7


def signature_algorithms() -> frozenset[SignatureAlgorithm]:
    """All implemented signature algorithms."""
    return frozenset(SignatureAlgorithm)