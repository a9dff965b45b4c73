import hashlib

import pytest

from dtlskit.ciphersuite import (
    CBC,
    GCM,
    CCMCipher,
    CCMTagLength,
    DecryptPacketError,
    InvalidMACError,
    NotEnoughRoomForNonceError,
    examine_padding,
    generate_aead_additional_data,
)
from dtlskit.protocol import VERSION_1_2, ApplicationData
from dtlskit.recordlayer import HEADER_SIZE, RecordHeader, RecordLayer

KEY_A = bytes(range(16))
KEY_B = bytes(range(16, 32))
IV_A = bytes(range(100, 112))
IV_B = bytes(range(200, 212))
MAC_A = bytes(range(32))
MAC_B = bytes(range(32, 64))
PAYLOAD = b"hello dtls payload"

CHANGE_CIPHER_SPEC = bytes(
    [0x14, 0xFE, 0xFF, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x12, 0x00, 0x01, 0x01]
)


def _record(payload=PAYLOAD):
    pkt = RecordLayer(
        header=RecordHeader(version=VERSION_1_2, epoch=1, sequence_number=5),
        content=ApplicationData.unmarshal(payload),
    )
    return pkt, pkt.marshal()


def _flip_last(data):
    return data[:-1] + bytes([data[-1] ^ 0x01])


def test_additional_data_layout():
    header = RecordHeader(content_type=23, version=VERSION_1_2, epoch=1, sequence_number=5)
    assert generate_aead_additional_data(header, 10) == bytes(
        [0x00, 0x01, 0, 0, 0, 0, 0, 0x05, 0x17, 0xFE, 0xFD, 0x00, 0x0A]
    )


@pytest.mark.parametrize(
    "payload, expected",
    [
        (b"", (0, 0)),
        (b"\x00", (1, 255)),
        (b"abc\x02\x02\x02", (3, 255)),
        (b"abc\x01\x02", (3, 0)),
        (b"\x05", (6, 0)),
    ],
)
def test_examine_padding(payload, expected):
    assert examine_padding(payload) == expected


def _gcm_pair():
    return GCM(KEY_A, IV_A, KEY_B, IV_B), GCM(KEY_B, IV_B, KEY_A, IV_A)


def test_gcm_round_trip():
    local, remote = _gcm_pair()
    pkt, raw = _record()
    encrypted = local.encrypt(pkt, raw)
    assert len(encrypted) == HEADER_SIZE + 8 + len(PAYLOAD) + 16
    assert int.from_bytes(encrypted[11:13], "big") == len(encrypted) - HEADER_SIZE
    assert PAYLOAD not in encrypted
    decrypted = remote.decrypt(encrypted)
    assert decrypted[HEADER_SIZE:] == PAYLOAD
    assert decrypted[:11] == raw[:11]


def test_gcm_tampered_record_rejected():
    local, remote = _gcm_pair()
    pkt, raw = _record()
    with pytest.raises(DecryptPacketError):
        remote.decrypt(_flip_last(local.encrypt(pkt, raw)))


def test_gcm_wrong_direction_rejected():
    local, _ = _gcm_pair()
    pkt, raw = _record()
    with pytest.raises(DecryptPacketError):
        local.decrypt(local.encrypt(pkt, raw))


def test_gcm_short_record():
    _, remote = _gcm_pair()
    _, raw = _record(b"abc")
    with pytest.raises(NotEnoughRoomForNonceError):
        remote.decrypt(raw[: HEADER_SIZE + 8])


@pytest.mark.parametrize(
    "cipher",
    [
        GCM(KEY_A, IV_A, KEY_B, IV_B),
        CCMCipher(CCMTagLength.CCM_TAG_LENGTH, KEY_A, IV_A, KEY_B, IV_B),
        CBC(KEY_A, IV_A[:16].ljust(16, b"\x00"), MAC_A, KEY_B, IV_B, MAC_B, hashlib.sha256),
    ],
)
def test_change_cipher_spec_passes_through(cipher):
    assert cipher.decrypt(CHANGE_CIPHER_SPEC) == CHANGE_CIPHER_SPEC


@pytest.mark.parametrize("tag_length", list(CCMTagLength))
def test_ccm_round_trip(tag_length):
    local = CCMCipher(tag_length, KEY_A, IV_A, KEY_B, IV_B)
    remote = CCMCipher(tag_length, KEY_B, IV_B, KEY_A, IV_A)
    pkt, raw = _record()
    encrypted = local.encrypt(pkt, raw)
    assert len(encrypted) == HEADER_SIZE + 8 + len(PAYLOAD) + int(tag_length)
    assert int.from_bytes(encrypted[11:13], "big") == len(encrypted) - HEADER_SIZE
    assert remote.decrypt(encrypted)[HEADER_SIZE:] == PAYLOAD


def test_ccm_tampered_record_rejected():
    local = CCMCipher(CCMTagLength.CCM_TAG_LENGTH_8, KEY_A, IV_A, KEY_B, IV_B)
    remote = CCMCipher(CCMTagLength.CCM_TAG_LENGTH_8, KEY_B, IV_B, KEY_A, IV_A)
    pkt, raw = _record()
    with pytest.raises(DecryptPacketError):
        remote.decrypt(_flip_last(local.encrypt(pkt, raw)))


def test_ccm_short_record():
    remote = CCMCipher(CCMTagLength.CCM_TAG_LENGTH, KEY_B, IV_B, KEY_A, IV_A)
    _, raw = _record(b"abc")
    with pytest.raises(NotEnoughRoomForNonceError):
        remote.decrypt(raw[:HEADER_SIZE] + b"\x00" * 8)


def test_ccm_invalid_tag_length():
    with pytest.raises(ValueError):
        CCMCipher(12, KEY_A, IV_A, KEY_B, IV_B)


@pytest.mark.parametrize("hash_func", [hashlib.sha256, "sha1", "sha384"])
def test_cbc_round_trip(hash_func):
    local = CBC(KEY_A, bytes(16), MAC_A, KEY_B, bytes(16), MAC_B, hash_func)
    remote = CBC(KEY_B, bytes(16), MAC_B, KEY_A, bytes(16), MAC_A, hash_func)
    pkt, raw = _record()
    encrypted = local.encrypt(pkt, raw)
    body_len = len(encrypted) - HEADER_SIZE
    assert body_len % 16 == 0
    assert int.from_bytes(encrypted[11:13], "big") == body_len
    assert remote.decrypt(encrypted)[HEADER_SIZE:] == PAYLOAD


def test_cbc_empty_payload_round_trip():
    local = CBC(KEY_A, bytes(16), MAC_A, KEY_B, bytes(16), MAC_B, hashlib.sha256)
    remote = CBC(KEY_B, bytes(16), MAC_B, KEY_A, bytes(16), MAC_A, hashlib.sha256)
    pkt, raw = _record(b"")
    assert remote.decrypt(local.encrypt(pkt, raw))[HEADER_SIZE:] == b""


def test_cbc_wrong_mac_key_rejected():
    local = CBC(KEY_A, bytes(16), MAC_A, KEY_B, bytes(16), MAC_B, hashlib.sha256)
    remote = CBC(KEY_B, bytes(16), MAC_B, KEY_A, bytes(16), MAC_B, hashlib.sha256)
    pkt, raw = _record()
    with pytest.raises(InvalidMACError):
        remote.decrypt(local.encrypt(pkt, raw))


def test_cbc_tampered_record_rejected():
    local = CBC(KEY_A, bytes(16), MAC_A, KEY_B, bytes(16), MAC_B, hashlib.sha256)
    remote = CBC(KEY_B, bytes(16), MAC_B, KEY_A, bytes(16), MAC_A, hashlib.sha256)
    pkt, raw = _record()
    encrypted = local.encrypt(pkt, raw)
    tampered = encrypted[:HEADER_SIZE + 20] + bytes([encrypted[HEADER_SIZE + 20] ^ 0x80]) + encrypted[HEADER_SIZE + 21 :]
    with pytest.raises(InvalidMACError):
        remote.decrypt(tampered)


@pytest.mark.parametrize("body_len", [15, 32, 33])
def test_cbc_bad_body_length(body_len):
    remote = CBC(KEY_B, bytes(16), MAC_B, KEY_A, bytes(16), MAC_A, hashlib.sha256)
    _, raw = _record(b"abc")
    with pytest.raises(NotEnoughRoomForNonceError):
        remote.decrypt(raw[:HEADER_SIZE] + bytes(body_len))