"""TLS 1.2 hash algorithm identifiers."""

from __future__ import annotations

import hashlib
from enum import IntEnum

_NAMES = {
    0: "none",
    1: "md5",
    2: "sha-1",
    3: "sha-224",
    4: "sha-256",
    5: "sha-384",
    6: "sha-512",
    8: "null",
}

_HASHLIB_NAMES = {
    1: "md5",
    2: "sha1",
    3: "sha224",
    4: "sha256",
    5: "sha384",
    6: "sha512",
}


class HashAlgorithm(IntEnum):
    """Hash algorithm used in signatures, as registered with IANA."""

    NONE = 0
    MD5 = 1
    SHA1 = 2
    SHA224 = 3
    SHA256 = 4
    SHA384 = 5
    SHA512 = 6
    ED25519 = 8

    def __str__(self) -> str:
        return _NAMES.get(int(self), "unknown or unsupported hash algorithm")

    def digest(self, data: bytes) -> bytes | None:
        """Digest of data, or None for algorithms without a digest."""
        name = self.crypto_hash()
        if name is None:
            return None
        return hashlib.new(name, bytes(data)).digest()

    def insecure(self) -> bool:
        """Whether the algorithm is considered insecure in DTLS 1.2."""
        return self in (HashAlgorithm.NONE, HashAlgorithm.MD5, HashAlgorithm.SHA1)

    def crypto_hash(self) -> str | None:
        """The hashlib name of the algorithm, or None where there is none."""
        return _HASHLIB_NAMES.get(int(self))


def hash_algorithms() -> frozenset[HashAlgorithm]:
    """All known hash algorithms."""
    return frozenset(HashAlgorithm)