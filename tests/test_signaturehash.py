import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from dtlskit.hashalg import HashAlgorithm
from dtlskit.signature import SignatureAlgorithm
from dtlskit.signaturehash import (
    InvalidHashAlgorithmError,
    InvalidSignatureAlgorithmError,
    NoAvailableSignatureSchemesError,
    SignatureHashAlgorithm,
    parse_signature_schemes,
    select_signature_scheme,
    signature_hash_algorithms,
)

ECDSA_P256_SHA256 = 0x0403
ECDSA_P384_SHA384 = 0x0503
ECDSA_P521_SHA512 = 0x0603
PKCS1_SHA256 = 0x0401
PKCS1_SHA384 = 0x0501
PKCS1_SHA512 = 0x0601
ECDSA_SHA1 = 0x0203
ED25519 = 0x0807

S = SignatureHashAlgorithm


def test_translate():
    out = parse_signature_schemes(
        [
            ECDSA_P256_SHA256,
            ECDSA_P384_SHA384,
            ECDSA_P521_SHA512,
            PKCS1_SHA256,
            PKCS1_SHA384,
            PKCS1_SHA512,
        ],
        False,
    )
    assert out == [
        S(HashAlgorithm.SHA256, SignatureAlgorithm.ECDSA),
        S(HashAlgorithm.SHA384, SignatureAlgorithm.ECDSA),
        S(HashAlgorithm.SHA512, SignatureAlgorithm.ECDSA),
        S(HashAlgorithm.SHA256, SignatureAlgorithm.RSA),
        S(HashAlgorithm.SHA384, SignatureAlgorithm.RSA),
        S(HashAlgorithm.SHA512, SignatureAlgorithm.RSA),
    ]


def test_translate_ed25519():
    assert parse_signature_schemes([ED25519], False) == [
        S(HashAlgorithm.ED25519, SignatureAlgorithm.ED25519)
    ]


def test_invalid_signature_algorithm():
    with pytest.raises(InvalidSignatureAlgorithmError):
        parse_signature_schemes([ECDSA_P256_SHA256, 0x04FF], False)


def test_invalid_hash_algorithm():
    with pytest.raises(InvalidHashAlgorithmError):
        parse_signature_schemes([ECDSA_P256_SHA256, 0x0003], False)


def test_insecure_hash_denied():
    assert parse_signature_schemes([ECDSA_P256_SHA256, ECDSA_SHA1], False) == [
        S(HashAlgorithm.SHA256, SignatureAlgorithm.ECDSA)
    ]


def test_insecure_hash_allowed():
    assert parse_signature_schemes([ECDSA_P256_SHA256, ECDSA_SHA1], True) == [
        S(HashAlgorithm.SHA256, SignatureAlgorithm.ECDSA),
        S(HashAlgorithm.SHA1, SignatureAlgorithm.ECDSA),
    ]


def test_only_insecure_hash():
    with pytest.raises(NoAvailableSignatureSchemesError):
        parse_signature_schemes([ECDSA_SHA1], False)


def test_empty_gives_defaults():
    assert parse_signature_schemes([], False) == signature_hash_algorithms()


def test_select_for_keys():
    algos = signature_hash_algorithms()
    ec_key = ec.generate_private_key(ec.SECP256R1())
    assert select_signature_scheme(algos, ec_key) == S(HashAlgorithm.SHA256, SignatureAlgorithm.ECDSA)
    ed_key = ed25519.Ed25519PrivateKey.generate()
    assert select_signature_scheme(algos, ed_key) == S(
        HashAlgorithm.ED25519, SignatureAlgorithm.ED25519
    )
    rsa_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    assert select_signature_scheme(algos, rsa_key) == S(HashAlgorithm.SHA256, SignatureAlgorithm.RSA)


def test_select_unsupported_key():
    with pytest.raises(NoAvailableSignatureSchemesError):
        select_signature_scheme(signature_hash_algorithms(), object())


def test_is_compatible():
    ed_key = ed25519.Ed25519PrivateKey.generate()
    assert S(HashAlgorithm.ED25519, SignatureAlgorithm.ED25519).is_compatible(ed_key)
    assert not S(HashAlgorithm.SHA256, SignatureAlgorithm.ECDSA).is_compatible(ed_key)