"""Signature/hash algorithm pairs as used in TLS 1.2 digital signatures."""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from dtlskit.hashalg import HashAlgorithm, hash_algorithms
from dtlskit.signature import SignatureAlgorithm, signature_algorithms


class NoAvailableSignatureSchemesError(ValueError):
    """No signature scheme satisfies the configuration."""

    def __init__(
        self,
        message: str = "connection can not be created, no SignatureScheme satisfy this Config",
    ) -> None:
        super().__init__(message)


class InvalidSignatureAlgorithmError(ValueError):
    """The signature part of a scheme is unknown."""


class InvalidHashAlgorithmError(ValueError):
    """The hash part of a scheme is unknown or none."""


@dataclass(frozen=True)
class SignatureHashAlgorithm:
    """A hash and signature algorithm pair."""

    hash: HashAlgorithm
    signature: SignatureAlgorithm

    def is_compatible(self, private_key: object) -> bool:
        """Whether the private key can produce signatures of this scheme."""
        if isinstance(private_key, ed25519.Ed25519PrivateKey):
            return self.signature is SignatureAlgorithm.ED25519
        if isinstance(private_key, ec.EllipticCurvePrivateKey):
            return self.signature is SignatureAlgorithm.ECDSA
        if isinstance(private_key, rsa.RSAPrivateKey):
            return self.signature is SignatureAlgorithm.RSA
        return False


def signature_hash_algorithms() -> list[SignatureHashAlgorithm]:
    """All known signature/hash pairs, in order of preference."""
    return [
        SignatureHashAlgorithm(HashAlgorithm.SHA256, SignatureAlgorithm.ECDSA),
        SignatureHashAlgorithm(HashAlgorithm.SHA384, SignatureAlgorithm.ECDSA),
        SignatureHashAlgorithm(HashAlgorithm.SHA512, SignatureAlgorithm.ECDSA),
        SignatureHashAlgorithm(HashAlgorithm.SHA256, SignatureAlgorithm.RSA),
        SignatureHashAlgorithm(HashAlgorithm.SHA384, SignatureAlgorithm.RSA),
        SignatureHashAlgorithm(HashAlgorithm.SHA512, SignatureAlgorithm.RSA),
        SignatureHashAlgorithm(HashAlgorithm.ED25519, SignatureAlgorithm.ED25519),
    ]


def select_signature_scheme(
    sigs: list[SignatureHashAlgorithm], private_key: object
) -> SignatureHashAlgorithm:
    """The first scheme in sigs that the private key is compatible with."""
    for scheme in sigs:
        if scheme.is_compatible(private_key):
            return scheme
    raise NoAvailableSignatureSchemesError()


def parse_signature_schemes(
    sigs: list[int], insecure_hashes: bool
) -> list[SignatureHashAlgorithm]:
    """Translate TLS SignatureScheme values; the defaults when none are given."""
    if not sigs:
        return signature_hash_algorithms()

    out = []
    for scheme in sigs:
        sig = scheme & 0xFF
        if sig not in signature_algorithms():
            raise InvalidSignatureAlgorithmError(
                f"SignatureScheme {scheme:04x}: invalid signature algorithm"
            )
        hash_id = scheme >> 8
        if hash_id not in hash_algorithms() or hash_id == HashAlgorithm.NONE:
            raise InvalidHashAlgorithmError(f"SignatureScheme {scheme:04x}: invalid hash algorithm")
        hash_alg = HashAlgorithm(hash_id)
        if hash_alg.insecure() and not insecure_hashes:
            continue
        out.append(SignatureHashAlgorithm(hash_alg, SignatureAlgorithm(sig)))

    if not out:
        raise NoAvailableSignatureSchemesError()
    return out