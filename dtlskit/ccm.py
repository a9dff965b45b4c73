"""Counter with CBC-MAC (CCM) authenticated encryption over AES, per RFC 3610."""

from __future__ import annotations

import hmac

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_BLOCK_SIZE = 16
_MAX_INT64 = (1 << 63) - 1


class CCMError(ValueError):
    """Base class for CCM errors."""

    default_message = "ccm: error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidTagSizeError(CCMError):
    """The tag size is not an even number between 4 and 16."""

    default_message = "ccm: tagsize must be 4, 6, 8, 10, 12, 14, or 16"


class InvalidNonceSizeError(CCMError):
    """The nonce size is outside 7..13 or does not match the cipher."""

    default_message = "ccm: invalid nonce size"


class PlaintextTooLongError(CCMError):
    """The plaintext is longer than the length field can express."""

    default_message = "ccm: plaintext too large"


class CiphertextTooShortError(CCMError):
    """The ciphertext is shorter than the tag."""

    default_message = "ccm: ciphertext too short"


class CiphertextTooLongError(CCMError):
    """The ciphertext is longer than the maximum plaintext plus tag."""

    default_message = "ccm: ciphertext too long"


class AuthenticationFailedError(CCMError):
    """The tag does not match the message."""

    default_message = "ccm: message authentication failed"


def _maxlen(length_size: int, tag_size: int) -> int:
    limit = (1 << (8 * length_size)) - 1
    m64 = _MAX_INT64 - tag_size
    if length_size > 8 or limit > m64:
        limit = m64
    return limit


def max_nonce_length(plaintext_length: int) -> int:
    """Largest nonce length that still allows a plaintext of the given length.

    A result of 0 means no nonce length is small enough.
    """
    for length_size in range(2, 9):
        if _maxlen(length_size, 16) >= plaintext_length:
            return 15 - length_size
    return 0


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


class CCM:
    """AES in CCM mode with a fixed tag size and nonce size."""

    def __init__(self, key: bytes, tag_size: int, nonce_size: int) -> None:
        self._key = bytes(key)
        self._block = Cipher(algorithms.AES(self._key), modes.ECB()).encryptor()
        if tag_size < 4 or tag_size > 16 or tag_size & 1:
            raise InvalidTagSizeError()
        length_size = 15 - nonce_size
        if length_size < 2 or length_size > 8:
            raise InvalidNonceSizeError()
        self._m = tag_size
        self._l = length_size

    def nonce_size(self) -> int:
        """Length of the nonce in bytes."""
        return 15 - self._l

    def overhead(self) -> int:
        """Length of the authentication tag in bytes."""
        return self._m

    def max_length(self) -> int:
        """Maximum plaintext length accepted by seal."""
        return _maxlen(self._l, self.overhead())

    def _encrypt_block(self, block: bytes) -> bytes:
        return self._block.update(bytes(block))

    def _cbc_data(self, mac: bytes, data: bytes) -> bytes:
        for offset in range(0, len(data), _BLOCK_SIZE):
            chunk = data[offset : offset + _BLOCK_SIZE].ljust(_BLOCK_SIZE, b"\x00")
            mac = self._encrypt_block(_xor(mac, chunk))
        return mac

    def _tag(self, nonce: bytes, plaintext: bytes, adata: bytes) -> bytes:
        flags = (0x40 if adata else 0) | ((self._m - 2) << 2) | (self._l - 1)
        if len(nonce) != self.nonce_size():
            raise InvalidNonceSizeError()
        if len(plaintext) > self.max_length():
            raise PlaintextTooLongError()

        b0 = bytearray(_BLOCK_SIZE)
        b0[8:] = len(plaintext).to_bytes(8, "big")
        b0[0] = flags
        b0[1 : _BLOCK_SIZE - self._l] = nonce
        mac = self._encrypt_block(b0)

        if adata:
            n = len(adata)
            if n <= 0xFEFF:
                prefix = n.to_bytes(2, "big")
            elif n < 1 << 32:
                prefix = b"\xfe\xff" + n.to_bytes(4, "big")
            else:
                prefix = b"\xfe\xff" + n.to_bytes(8, "big")
            mac = self._cbc_data(mac, prefix + adata)

        if plaintext:
            mac = self._cbc_data(mac, plaintext)
        return mac[: self._m]

    def _keystream(self, nonce: bytes):
        iv = bytearray(_BLOCK_SIZE)
        iv[0] = self._l - 1
        prefix = nonce[: 15 - self._l]
        iv[1 : 1 + len(prefix)] = prefix
        s0 = self._encrypt_block(iv)
        iv[-1] |= 1
        stream = Cipher(algorithms.AES(self._key), modes.CTR(bytes(iv))).encryptor()
        return s0, stream

    def seal(self, nonce: bytes, plaintext: bytes, adata: bytes = b"") -> bytes:
        """Encrypt and authenticate plaintext; returns ciphertext followed by the tag."""
        nonce, plaintext, adata = bytes(nonce), bytes(plaintext), bytes(adata)
        tag = self._tag(nonce, plaintext, adata)
        s0, stream = self._keystream(nonce)
        tag = _xor(tag, s0)
        return stream.update(plaintext) + stream.finalize() + tag

    def open(self, nonce: bytes, ciphertext: bytes, adata: bytes = b"") -> bytes:
        """Verify and decrypt ciphertext produced by seal."""
        nonce, ciphertext, adata = bytes(nonce), bytes(ciphertext), bytes(adata)
        if len(ciphertext) < self._m:
            raise CiphertextTooShortError()
        if len(ciphertext) > self.max_length() + self.overhead():
            raise CiphertextTooLongError()

        body = ciphertext[: len(ciphertext) - self._m]
        s0, stream = self._keystream(nonce)
        tag = _xor(ciphertext[len(ciphertext) - self._m :], s0)
        plaintext = stream.update(body) + stream.finalize()

        expected = self._tag(nonce, plaintext, adata)
        if not hmac.compare_digest(tag, expected):
            raise AuthenticationFailedError()
        return plaintext