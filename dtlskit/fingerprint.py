"""Certificate fingerprints and hash-name lookup."""

from __future__ import annotations

import hashlib

from cryptography.hazmat.primitives.serialization import Encoding


class HashUnavailableError(ValueError):
    """The requested hash algorithm is not available."""

    def __init__(
        self, message: str = "fingerprint: hash algorithm is not linked into the binary"
    ) -> None:
        super().__init__(message)


class InvalidFingerprintLengthError(ValueError):
    """The hex digest has an odd length."""

    def __init__(self, message: str = "fingerprint: invalid fingerprint length") -> None:
        super().__init__(message)


class InvalidHashAlgorithmError(ValueError):
    """No hash algorithm goes by that name."""

    def __init__(self, message: str = "fingerprint: invalid hash algorithm") -> None:
        super().__init__(message)


_NAME_TO_HASH = {
    "md5": "md5",
    "sha-1": "sha1",
    "sha-224": "sha224",
    "sha-256": "sha256",
    "sha-384": "sha384",
    "sha-512": "sha512",
}


def fingerprint(cert: object, algo: str) -> str:
    """Colon-separated hex digest of a certificate's DER encoding.

    cert is either DER bytes or an object with public_bytes(), such as an
    x509 certificate; algo is a hashlib algorithm name.
    """
    try:
        hasher = hashlib.new(algo)
    except (ValueError, TypeError):
        raise HashUnavailableError() from None

    if isinstance(cert, (bytes, bytearray, memoryview)):
        raw = bytes(cert)
    else:
        raw = cert.public_bytes(Encoding.DER)
    hasher.update(raw)
    digest = hasher.hexdigest()

    if not digest:
        return ""
    if len(digest) % 2:
        raise InvalidFingerprintLengthError()
    return ":".join(digest[i : i + 2] for i in range(0, len(digest), 2))


def hash_from_string(name: str) -> str:
    """The hashlib algorithm name for a textual hash name such as 'sha-256'."""
    try:
        return _NAME_TO_HASH[name]
    except KeyError:
        raise InvalidHashAlgorithmError() from None


def string_from_hash(algo: str) -> str:
    """The textual name for a hashlib algorithm name."""
    for name, value in _NAME_TO_HASH.items():
        if value == algo:
            return name
    raise InvalidHashAlgorithmError()