"""Elliptic curve identifiers and key generation for DTLS key exchange."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import IntEnum

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat


class InvalidNamedCurveError(ValueError):
    """The curve is not one we implement."""

    def __init__(self, message: str = "invalid named curve") -> None:
        super().__init__(message)


class CurvePointFormat(IntEnum):
    """IANA registered curve point formats."""

    UNCOMPRESSED = 0


class CurveType(IntEnum):
    """IANA registered curve types."""

    NAMED_CURVE = 0x03


class Curve(IntEnum):
    """IANA registered named curves that are implemented."""

    P256 = 0x0017
    P384 = 0x0018
    X25519 = 0x001D


@dataclass
class Keypair:
    """A curve with its public and private key bytes."""

    curve: Curve
    public_key: bytes
    private_key: bytes


def curve_types() -> frozenset[CurveType]:
    """All known curve types."""
    return frozenset(CurveType)


def curves() -> frozenset[Curve]:
    """All implemented curves."""
    return frozenset(Curve)


_EC_CURVES = {Curve.P256: ec.SECP256R1, Curve.P384: ec.SECP384R1}


def generate_keypair(curve: int) -> Keypair:
    """Generate a fresh keypair on the given curve."""
    try:
        curve = Curve(curve)
    except ValueError:
        raise InvalidNamedCurveError() from None

    if curve is Curve.X25519:
        private = os.urandom(32)
        public = (
            X25519PrivateKey.from_private_bytes(private)
            .public_key()
            .public_bytes(Encoding.Raw, PublicFormat.Raw)
        )
        return Keypair(curve, public, private)

    key = ec.generate_private_key(_EC_CURVES[curve]())
    size = (key.curve.key_size + 7) // 8
    private = key.private_numbers().private_value.to_bytes(size, "big")
    public = key.public_key().public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
    return Keypair(curve, public, private)