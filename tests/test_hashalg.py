import pytest

from dtlskit.fingerprint import hash_from_string
from dtlskit.hashalg import HashAlgorithm, hash_algorithms


def test_string_round_trip():
    for algo in hash_algorithms():
        if algo in (HashAlgorithm.ED25519, HashAlgorithm.NONE):
            continue
        assert hash_from_string(str(algo)) == algo.crypto_hash()


@pytest.mark.parametrize(
    "algo, name",
    [
        (HashAlgorithm.NONE, "none"),
        (HashAlgorithm.MD5, "md5"),
        (HashAlgorithm.SHA1, "sha-1"),
        (HashAlgorithm.SHA256, "sha-256"),
        (HashAlgorithm.ED25519, "null"),
    ],
)
def test_names(algo, name):
    assert str(algo) == name


def test_insecure():
    assert HashAlgorithm.MD5.insecure()
    assert HashAlgorithm.SHA1.insecure()
    assert HashAlgorithm.NONE.insecure()
    assert not HashAlgorithm.SHA256.insecure()
    assert not HashAlgorithm.ED25519.insecure()


def test_digest():
    assert HashAlgorithm.SHA256.digest(b"abc") == bytes.fromhex(
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )
    assert HashAlgorithm.NONE.digest(b"abc") is None
    assert HashAlgorithm.ED25519.digest(b"abc") is None


def test_digest_lengths_match_algorithm():
    assert len(HashAlgorithm.SHA384.digest(b"")) == 48
    assert len(HashAlgorithm.SHA512.digest(b"")) == 64


def test_crypto_hash_absent():
    assert HashAlgorithm.NONE.crypto_hash() is None
    assert HashAlgorithm.ED25519.crypto_hash() is None