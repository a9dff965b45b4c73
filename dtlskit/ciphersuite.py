"""Record protection for DTLS 1.2: AES-CBC with HMAC, AES-CCM and AES-GCM."""

from __future__ import annotations

import hashlib
import hmac
import os
from enum import IntEnum
from typing import Callable, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from dtlskit.ccm import CCM, CCMError
from dtlskit.protocol import ContentType, InternalError, TemporaryError
from dtlskit.recordlayer import HEADER_SIZE, RecordHeader

HashFunc = Union[str, Callable[..., "hashlib._Hash"]]

_BLOCK_SIZE = 16
_GCM_TAG_LENGTH = 16
_AEAD_NONCE_LENGTH = 12
_EXPLICIT_NONCE_LENGTH = 8


class NotEnoughRoomForNonceError(InternalError):
    """The record is too short to hold the explicit nonce or IV."""

    default_message = "buffer not long enough to contain nonce"


class DecryptPacketError(TemporaryError):
    """An AEAD record failed to decrypt or authenticate."""

    default_message = "failed to decrypt packet"


class InvalidMACError(TemporaryError):
    """A CBC record has bad padding or a bad MAC."""

    default_message = "invalid mac"


class CCMTagLength(IntEnum):
    """Authentication tag lengths used by the CCM cipher suites."""

    CCM_TAG_LENGTH_8 = 8
    CCM_TAG_LENGTH = 16


def generate_aead_additional_data(header: RecordHeader, payload_len: int) -> bytes:
    """The 13 bytes of additional data authenticated with an AEAD record."""
    return (
        (header.epoch & 0xFFFF).to_bytes(2, "big")
        + (header.sequence_number & 0xFFFFFFFFFFFF).to_bytes(6, "big")
        + bytes([int(header.content_type) & 0xFF, header.version.major, header.version.minor])
        + (payload_len & 0xFFFF).to_bytes(2, "big")
    )


def examine_padding(payload: bytes) -> tuple[int, int]:
    """Return (bytes to remove, 255 if the CBC padding is valid else 0)."""
    if len(payload) < 1:
        return 0, 0
    padding_len = payload[-1]
    good = 0xFF if padding_len <= len(payload) - 1 else 0
    to_check = min(256, len(payload))
    mismatch = 0
    for i in range(to_check):
        if i <= padding_len:
            mismatch |= payload[len(payload) - 1 - i] ^ padding_len
    if mismatch:
        good = 0
    return padding_len + 1, good


def _with_length(raw: bytes) -> bytes:
    """Rewrite the record header's length field to match the body."""
    length = (len(raw) - HEADER_SIZE) & 0xFFFF
    return raw[: HEADER_SIZE - 2] + length.to_bytes(2, "big") + raw[HEADER_SIZE:]


def _digest_size(hash_func: HashFunc) -> int:
    if isinstance(hash_func, str):
        return hashlib.new(hash_func).digest_size
    return hash_func().digest_size


def _is_change_cipher_spec(header: RecordHeader) -> bool:
    return int(header.content_type) == ContentType.CHANGE_CIPHER_SPEC


class CBC:
    """AES-CBC records authenticated with HMAC (MAC-then-encrypt)."""

    def __init__(
        self,
        local_key: bytes,
        local_write_iv: bytes,
        local_mac: bytes,
        remote_key: bytes,
        remote_write_iv: bytes,
        remote_mac: bytes,
        hash_func: HashFunc,
    ) -> None:
        # Validates both keys up front.
        algorithms.AES(bytes(local_key))
        algorithms.AES(bytes(remote_key))
        self._local_key = bytes(local_key)
        self._remote_key = bytes(remote_key)
        self._local_write_iv = bytes(local_write_iv)
        self._remote_write_iv = bytes(remote_write_iv)
        self._write_mac = bytes(local_mac)
        self._read_mac = bytes(remote_mac)
        self._hash_func = hash_func

    def _hmac(self, header: RecordHeader, payload: bytes, key: bytes) -> bytes:
        msg = (
            (header.epoch & 0xFFFF).to_bytes(2, "big")
            + (header.sequence_number & 0xFFFFFFFFFFFF).to_bytes(6, "big")
            + bytes([int(header.content_type) & 0xFF, header.version.major, header.version.minor])
            + (len(payload) & 0xFFFF).to_bytes(2, "big")
        )
        return hmac.new(key, msg + payload, self._hash_func).digest()

    def encrypt(self, pkt, raw: bytes) -> bytes:
        """Protect a marshalled record; pkt supplies the header used in the MAC."""
        raw = bytes(raw)
        header_raw, payload = raw[:HEADER_SIZE], raw[HEADER_SIZE:]

        payload += self._hmac(pkt.header, payload, self._write_mac)
        padding_len = _BLOCK_SIZE - len(payload) % _BLOCK_SIZE
        payload += bytes([padding_len - 1]) * padding_len

        iv = os.urandom(_BLOCK_SIZE)
        encryptor = Cipher(algorithms.AES(self._local_key), modes.CBC(iv)).encryptor()
        encrypted = encryptor.update(payload) + encryptor.finalize()
        return _with_length(header_raw + iv + encrypted)

    def decrypt(self, data: bytes) -> bytes:
        """Remove protection from a record; the header is returned unchanged."""
        data = bytes(data)
        header = RecordHeader.unmarshal(data)
        if _is_change_cipher_spec(header):
            return data

        body = data[HEADER_SIZE:]
        mac_size = _digest_size(self._hash_func)
        if len(body) % _BLOCK_SIZE != 0 or len(body) < _BLOCK_SIZE + max(
            mac_size + 1, _BLOCK_SIZE
        ):
            raise NotEnoughRoomForNonceError()

        iv, body = body[:_BLOCK_SIZE], body[_BLOCK_SIZE:]
        decryptor = Cipher(algorithms.AES(self._remote_key), modes.CBC(iv)).decryptor()
        body = decryptor.update(body) + decryptor.finalize()

        padding_len, good = examine_padding(body)
        if good != 255 or len(body) < mac_size:
            raise InvalidMACError()

        data_end = len(body) - mac_size - padding_len
        if data_end < 0:
            raise InvalidMACError()
        expected_mac = body[data_end : data_end + mac_size]
        actual_mac = self._hmac(header, body[:data_end], self._read_mac)
        if not hmac.compare_digest(actual_mac, expected_mac):
            raise InvalidMACError()
        return data[:HEADER_SIZE] + body[:data_end]


class CCMCipher:
    """AES-CCM records with an 8-byte explicit nonce."""

    def __init__(
        self,
        tag_length: int,
        local_key: bytes,
        local_write_iv: bytes,
        remote_key: bytes,
        remote_write_iv: bytes,
    ) -> None:
        self._tag_length = CCMTagLength(tag_length)
        self._local = CCM(bytes(local_key), int(self._tag_length), _AEAD_NONCE_LENGTH)
        self._remote = CCM(bytes(remote_key), int(self._tag_length), _AEAD_NONCE_LENGTH)
        self._local_write_iv = bytes(local_write_iv)
        self._remote_write_iv = bytes(remote_write_iv)

    def encrypt(self, pkt, raw: bytes) -> bytes:
        """Protect a marshalled record; pkt supplies the header for the additional data."""
        raw = bytes(raw)
        header_raw, payload = raw[:HEADER_SIZE], raw[HEADER_SIZE:]
        explicit = os.urandom(_EXPLICIT_NONCE_LENGTH)
        nonce = self._local_write_iv[:4] + explicit
        additional = generate_aead_additional_data(pkt.header, len(payload))
        sealed = self._local.seal(nonce, payload, additional)
        return _with_length(header_raw + explicit + sealed)

    def decrypt(self, data: bytes) -> bytes:
        """Verify and decrypt a record; the header is returned unchanged."""
        data = bytes(data)
        header = RecordHeader.unmarshal(data)
        if _is_change_cipher_spec(header):
            return data
        if len(data) <= HEADER_SIZE + _EXPLICIT_NONCE_LENGTH:
            raise NotEnoughRoomForNonceError()

        start = HEADER_SIZE + _EXPLICIT_NONCE_LENGTH
        nonce = self._remote_write_iv[:4] + data[HEADER_SIZE:start]
        body = data[start:]
        additional = generate_aead_additional_data(header, len(body) - int(self._tag_length))
        try:
            plaintext = self._remote.open(nonce, body, additional)
        except CCMError as exc:
            raise DecryptPacketError() from exc
        return data[:HEADER_SIZE] + plaintext


class GCM:
    """AES-GCM records with an 8-byte explicit nonce."""

    def __init__(
        self,
        local_key: bytes,
        local_write_iv: bytes,
        remote_key: bytes,
        remote_write_iv: bytes,
    ) -> None:
        self._local = AESGCM(bytes(local_key))
        self._remote = AESGCM(bytes(remote_key))
        self._local_write_iv = bytes(local_write_iv)
        self._remote_write_iv = bytes(remote_write_iv)

    def encrypt(self, pkt, raw: bytes) -> bytes:
        """Protect a marshalled record; pkt supplies the header for the additional data."""
        raw = bytes(raw)
        header_raw, payload = raw[:HEADER_SIZE], raw[HEADER_SIZE:]
        explicit = os.urandom(_EXPLICIT_NONCE_LENGTH)
        nonce = self._local_write_iv[:4] + explicit
        additional = generate_aead_additional_data(pkt.header, len(payload))
        sealed = self._local.encrypt(nonce, payload, additional)
        return _with_length(header_raw + explicit + sealed)

    def decrypt(self, data: bytes) -> bytes:
        """Verify and decrypt a record; the header is returned unchanged."""
        data = bytes(data)
        header = RecordHeader.unmarshal(data)
        if _is_change_cipher_spec(header):
            return data
        if len(data) <= HEADER_SIZE + _EXPLICIT_NONCE_LENGTH:
            raise NotEnoughRoomForNonceError()

        start = HEADER_SIZE + _EXPLICIT_NONCE_LENGTH
        nonce = self._remote_write_iv[:4] + data[HEADER_SIZE:start]
        body = data[start:]
        additional = generate_aead_additional_data(header, len(body) - _GCM_TAG_LENGTH)
        try:
            plaintext = self._remote.decrypt(nonce, body, additional)
        except (InvalidTag, ValueError) as exc:
            raise DecryptPacketError() from exc
        return data[:HEADER_SIZE] + plaintext