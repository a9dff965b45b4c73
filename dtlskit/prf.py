"""TLS 1.2 pseudorandom function and key derivation."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Callable, Union

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey

from dtlskit.elliptic import Curve
from dtlskit.protocol import FatalError

HashFunc = Union[str, Callable[..., "hashlib._Hash"]]

_MASTER_SECRET_LABEL = b"master secret"
_EXTENDED_MASTER_SECRET_LABEL = b"extended master secret"
_KEY_EXPANSION_LABEL = b"key expansion"
_VERIFY_DATA_CLIENT_LABEL = b"client finished"
_VERIFY_DATA_SERVER_LABEL = b"server finished"

_EC_CURVES = {Curve.P256: ec.SECP256R1, Curve.P384: ec.SECP384R1}


class InvalidNamedCurveError(FatalError):
    """The curve is unknown or the public key is not a point on it."""

    default_message = "invalid named curve"


@dataclass
class EncryptionKeys:
    """All key material a TLS cipher suite needs."""

    master_secret: bytes
    client_mac_key: bytes
    server_mac_key: bytes
    client_write_key: bytes
    server_write_key: bytes
    client_write_iv: bytes
    server_write_iv: bytes

    def __str__(self) -> str:
        return (
            "encryptionKeys:\n"
            f"- masterSecret: {self.master_secret.hex()}\n"
            f"- clientMACKey: {self.client_mac_key.hex()}\n"
            f"- serverMACKey: {self.server_mac_key.hex()}\n"
            f"- clientWriteKey: {self.client_write_key.hex()}\n"
            f"- serverWriteKey: {self.server_write_key.hex()}\n"
            f"- clientWriteIV: {self.client_write_iv.hex()}\n"
            f"- serverWriteIV: {self.server_write_iv.hex()}\n"
        )


def _new_hash(hash_func: HashFunc, data: bytes = b""):
    if isinstance(hash_func, str):
        return hashlib.new(hash_func, data)
    return hash_func(data)


def _hmac(hash_func: HashFunc, key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hash_func).digest()


def psk_pre_master_secret(psk: bytes) -> bytes:
    """Premaster secret for a pre-shared key (RFC 4279, section 2)."""
    psk = bytes(psk)
    length = len(psk) & 0xFFFF
    prefix = length.to_bytes(2, "big")
    return prefix + bytes(length) + prefix + psk


def pre_master_secret(public_key: bytes, private_key: bytes, curve: int) -> bytes:
    """ECDH shared secret for the given keys on the given curve."""
    try:
        curve = Curve(curve)
    except ValueError:
        raise InvalidNamedCurveError() from None

    if curve is Curve.X25519:
        private = X25519PrivateKey.from_private_bytes(bytes(private_key))
        return private.exchange(X25519PublicKey.from_public_bytes(bytes(public_key)))

    ec_curve = _EC_CURVES[curve]
    try:
        public = ec.EllipticCurvePublicKey.from_encoded_point(ec_curve(), bytes(public_key))
    except ValueError:
        raise InvalidNamedCurveError() from None
    private = ec.derive_private_key(int.from_bytes(bytes(private_key), "big"), ec_curve())
    return private.exchange(ec.ECDH(), public)


def p_hash(secret: bytes, seed: bytes, requested_length: int, hash_func: HashFunc) -> bytes:
    """The TLS P_hash expansion, truncated to requested_length bytes."""
    secret, seed = bytes(secret), bytes(seed)
    size = _new_hash(hash_func).digest_size
    iterations = -(-requested_length // size)
    last_round = seed
    out = bytearray()
    for _ in range(iterations):
        last_round = _hmac(hash_func, secret, last_round)
        out += _hmac(hash_func, secret, last_round + seed)
    return bytes(out[:requested_length])


def extended_master_secret(
    pre_master_secret: bytes, session_hash: bytes, hash_func: HashFunc
) -> bytes:
    """Extended master secret as defined in RFC 7627."""
    return p_hash(pre_master_secret, _EXTENDED_MASTER_SECRET_LABEL + bytes(session_hash), 48, hash_func)


def master_secret(
    pre_master_secret: bytes, client_random: bytes, server_random: bytes, hash_func: HashFunc
) -> bytes:
    """TLS 1.2 master secret."""
    seed = _MASTER_SECRET_LABEL + bytes(client_random) + bytes(server_random)
    return p_hash(pre_master_secret, seed, 48, hash_func)


def generate_encryption_keys(
    master_secret: bytes,
    client_random: bytes,
    server_random: bytes,
    mac_len: int,
    key_len: int,
    iv_len: int,
    hash_func: HashFunc,
) -> EncryptionKeys:
    """Expand the master secret into MAC keys, write keys and IVs."""
    seed = _KEY_EXPANSION_LABEL + bytes(server_random) + bytes(client_random)
    material = p_hash(master_secret, seed, 2 * mac_len + 2 * key_len + 2 * iv_len, hash_func)

    sizes = (mac_len, mac_len, key_len, key_len, iv_len, iv_len)
    parts = []
    offset = 0
    for size in sizes:
        parts.append(material[offset : offset + size])
        offset += size

    return EncryptionKeys(bytes(master_secret), *parts)


def _verify_data(master_secret: bytes, handshake_bodies: bytes, label: bytes, hash_func: HashFunc) -> bytes:
    seed = label + _new_hash(hash_func, bytes(handshake_bodies)).digest()
    return p_hash(master_secret, seed, 12, hash_func)


def verify_data_client(master_secret: bytes, handshake_bodies: bytes, hash_func: HashFunc) -> bytes:
    """Client-side Finished verify data."""
    return _verify_data(master_secret, handshake_bodies, _VERIFY_DATA_CLIENT_LABEL, hash_func)


def verify_data_server(master_secret: bytes, handshake_bodies: bytes, hash_func: HashFunc) -> bytes:
    """Server-side Finished verify data."""
    return _verify_data(master_secret, handshake_bodies, _VERIFY_DATA_SERVER_LABEL, hash_func)