import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from dtlskit.elliptic import (
    Curve,
    CurveType,
    InvalidNamedCurveError,
    curve_types,
    curves,
    generate_keypair,
)


def test_curve_wire_values():
    assert Curve(0x001D) is Curve.X25519
    assert Curve(0x0017) is Curve.P256
    assert Curve(0x0018) is Curve.P384


def test_sets():
    assert curves() == set(Curve)
    assert curve_types() == {CurveType.NAMED_CURVE}


def test_x25519_keypair_consistent():
    kp = generate_keypair(Curve.X25519)
    assert kp.curve is Curve.X25519
    expected = (
        X25519PrivateKey.from_private_bytes(kp.private_key)
        .public_key()
        .public_bytes(Encoding.Raw, PublicFormat.Raw)
    )
    assert kp.public_key == expected


@pytest.mark.parametrize(
    "curve, ec_curve", [(Curve.P256, ec.SECP256R1), (Curve.P384, ec.SECP384R1)]
)
def test_nist_keypair_consistent(curve, ec_curve):
    kp = generate_keypair(curve)
    assert kp.curve is curve
    key = ec.derive_private_key(int.from_bytes(kp.private_key, "big"), ec_curve())
    expected = key.public_key().public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
    assert kp.public_key == expected


@pytest.mark.parametrize(
    "curve, private_len, public_len",
    [(Curve.X25519, 32, 32), (Curve.P256, 32, 65), (Curve.P384, 48, 97)],
)
def test_keypair_sizes(curve, private_len, public_len):
    kp = generate_keypair(curve)
    assert len(kp.private_key) == private_len
    assert len(kp.public_key) == public_len


def test_nist_public_key_is_uncompressed_point():
    kp = generate_keypair(Curve.P256)
    assert kp.public_key[0] == 0x04


def test_invalid_curve():
    with pytest.raises(InvalidNamedCurveError):
        generate_keypair(0x0001)