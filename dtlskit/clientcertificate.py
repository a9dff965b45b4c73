"""Client certificate types for CertificateRequest messages."""

from __future__ import annotations

from enum import IntEnum


class ClientCertificateType(IntEnum):
    """Type of certificate a server asks the client for."""

    RSA_SIGN = 1
    ECDSA_SIGN = 64


def client_certificate_types() -> frozenset[ClientCertificateType]:
    """All valid client certificate types."""
    return frozenset(ClientCertificateType)