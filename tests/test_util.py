from dataclasses import dataclass

import pytest

from dtlskit.extension import SRTPProtectionProfile
from dtlskit.util import find_matching_cipher_suite, find_matching_srtp_profile, split_bytes


@dataclass
class _Suite:
    id: int
    name: str


class _MethodSuite:
    def __init__(self, ident):
        self._ident = ident

    def id(self):
        return self._ident


def test_srtp_profile_prefers_order_of_first_list():
    a = [
        SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_80,
        SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_32,
    ]
    b = list(reversed(a))
    assert find_matching_srtp_profile(a, b) is SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_80


def test_srtp_profile_no_match():
    a = [SRTPProtectionProfile.SRTP_AEAD_AES_128_GCM]
    b = [SRTPProtectionProfile.SRTP_AEAD_AES_256_GCM]
    assert find_matching_srtp_profile(a, b) is None


def test_cipher_suite_matches_by_id():
    a = [_Suite(1, "first"), _Suite(2, "second")]
    b = [_Suite(2, "other"), _Suite(3, "third")]
    assert find_matching_cipher_suite(a, b) == a[1]


def test_cipher_suite_with_id_method():
    a = [_MethodSuite(5), _MethodSuite(6)]
    b = [_MethodSuite(6)]
    assert find_matching_cipher_suite(a, b) is a[1]


def test_cipher_suite_no_match():
    assert find_matching_cipher_suite([_Suite(1, "x")], [_Suite(2, "y")]) is None


def test_split_bytes_example():
    assert split_bytes(b"abcdefg", 3) == [b"abc", b"def", b"g"]


@pytest.mark.parametrize("size", [1, 2, 5, 16, 100])
def test_split_bytes_invariants(size):
    data = bytes(range(37))
    chunks = split_bytes(data, size)
    assert b"".join(chunks) == data
    assert all(0 < len(chunk) <= size for chunk in chunks)
    assert all(len(chunk) == size for chunk in chunks[:-1])


def test_split_bytes_empty():
    assert split_bytes(b"", 4) == []


def test_split_bytes_rejects_non_positive():
    with pytest.raises(ValueError):
        split_bytes(b"abc", 0)