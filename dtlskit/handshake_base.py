"""Handshake building blocks: errors, message types, header, random and cipher suite lists."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum

from dtlskit.protocol import BufferTooSmallError, FatalError, InternalError

HEADER_LENGTH = 12
RANDOM_BYTES_LENGTH = 28
RANDOM_LENGTH = RANDOM_BYTES_LENGTH + 4

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class UnableToMarshalFragmentedError(InternalError):
    """Fragmented handshakes cannot be marshalled."""

    default_message = "unable to marshal fragmented handshakes"


class HandshakeMessageUnsetError(InternalError):
    """A handshake has no message to marshal."""

    default_message = "handshake message unset, unable to marshal"


class LengthMismatchError(InternalError):
    """Declared length and actual data length differ."""

    default_message = "data length and declared length do not match"


class InvalidClientKeyExchangeError(FatalError):
    """A ClientKeyExchange holds both or neither of public key and PSK identity."""

    default_message = "unable to determine if ClientKeyExchange is a public key or PSK Identity"


class InvalidHashAlgorithmError(FatalError):
    """An unknown hash algorithm was received."""

    default_message = "invalid hash algorithm"


class InvalidSignatureAlgorithmError(FatalError):
    """An unknown signature algorithm was received."""

    default_message = "invalid signature algorithm"


class CookieTooLongError(FatalError):
    """A cookie is longer than 255 bytes."""

    default_message = "cookie must not be longer then 255 bytes"


class InvalidEllipticCurveTypeError(FatalError):
    """An unknown elliptic curve type was received."""

    default_message = "invalid or unknown elliptic curve type"


class InvalidNamedCurveError(FatalError):
    """An unknown named curve was received."""

    default_message = "invalid named curve"


class CipherSuiteUnsetError(FatalError):
    """A ServerHello has no cipher suite."""

    default_message = "server hello can not be created without a cipher suite"


class CompressionMethodUnsetError(FatalError):
    """A ServerHello has no compression method."""

    default_message = "server hello can not be created without a compression method"


class InvalidCompressionMethodError(FatalError):
    """An unknown compression method was received."""

    default_message = "invalid or unknown compression method"


class NotImplementedFeatureError(InternalError):
    """The message uses a feature that is not implemented."""

    default_message = "feature has not been implemented yet"


_TYPE_NAMES = {
    0: "HelloRequest",
    1: "ClientHello",
    2: "ServerHello",
    3: "HelloVerifyRequest",
    11: "TypeCertificate",
    12: "ServerKeyExchange",
    13: "CertificateRequest",
    14: "ServerHelloDone",
    15: "CertificateVerify",
    16: "ClientKeyExchange",
    20: "Finished",
}


class HandshakeType(IntEnum):
    """Identifier of a handshake message; unregistered byte values are kept."""

    HELLO_REQUEST = 0
    CLIENT_HELLO = 1
    SERVER_HELLO = 2
    HELLO_VERIFY_REQUEST = 3
    CERTIFICATE = 11
    SERVER_KEY_EXCHANGE = 12
    CERTIFICATE_REQUEST = 13
    SERVER_HELLO_DONE = 14
    CERTIFICATE_VERIFY = 15
    CLIENT_KEY_EXCHANGE = 16
    FINISHED = 20

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, int) and 0 <= value <= 0xFF:
            member = int.__new__(cls, value)
            member._name_ = f"UNKNOWN_{value}"
            member._value_ = value
            return member
        return None

    def __str__(self) -> str:
        return _TYPE_NAMES.get(int(self), "")


def _u24(value: int) -> bytes:
    return (value & 0xFFFFFF).to_bytes(3, "big")


@dataclass
class HandshakeHeader:
    """The 12-byte header in front of every handshake message."""

    type: HandshakeType = HandshakeType.HELLO_REQUEST
    length: int = 0
    message_sequence: int = 0
    fragment_offset: int = 0
    fragment_length: int = 0

    def marshal(self) -> bytes:
        return (
            bytes([int(self.type) & 0xFF])
            + _u24(self.length)
            + (self.message_sequence & 0xFFFF).to_bytes(2, "big")
            + _u24(self.fragment_offset)
            + _u24(self.fragment_length)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "HandshakeHeader":
        if len(data) < HEADER_LENGTH:
            raise BufferTooSmallError()
        return cls(
            type=HandshakeType(data[0]),
            length=int.from_bytes(data[1:4], "big"),
            message_sequence=int.from_bytes(data[4:6], "big"),
            fragment_offset=int.from_bytes(data[6:9], "big"),
            fragment_length=int.from_bytes(data[9:12], "big"),
        )


@dataclass
class Random:
    """The random value of ClientHello and ServerHello."""

    gmt_unix_time: datetime = _EPOCH
    random_bytes: bytes = field(default_factory=lambda: bytes(RANDOM_BYTES_LENGTH))

    def marshal_fixed(self) -> bytes:
        """The 32-byte wire form: 4-byte time followed by 28 random bytes."""
        seconds = int(self.gmt_unix_time.timestamp()) & 0xFFFFFFFF
        body = bytes(self.random_bytes)[:RANDOM_BYTES_LENGTH].ljust(RANDOM_BYTES_LENGTH, b"\x00")
        return seconds.to_bytes(4, "big") + body

    @classmethod
    def unmarshal_fixed(cls, data: bytes) -> "Random":
        if len(data) != RANDOM_LENGTH:
            raise ValueError(f"random must be {RANDOM_LENGTH} bytes long")
        seconds = int.from_bytes(data[:4], "big")
        return cls(datetime.fromtimestamp(seconds, tz=timezone.utc), bytes(data[4:]))

    def populate(self) -> None:
        """Fill with the current time and fresh random bytes."""
        self.gmt_unix_time = datetime.now(timezone.utc)
        self.random_bytes = os.urandom(RANDOM_BYTES_LENGTH)


def decode_cipher_suite_ids(buf: bytes) -> list[int]:
    """Decode a length-prefixed list of 16-bit cipher suite ids."""
    if len(buf) < 2:
        raise BufferTooSmallError()
    count = int.from_bytes(buf[0:2], "big") // 2
    if len(buf) < count * 2 + 2:
        raise BufferTooSmallError()
    return [int.from_bytes(buf[2 + i * 2 : 4 + i * 2], "big") for i in range(count)]


def encode_cipher_suite_ids(cipher_suite_ids: list[int]) -> bytes:
    """Encode cipher suite ids with a 16-bit byte-length prefix."""
    out = ((len(cipher_suite_ids) * 2) & 0xFFFF).to_bytes(2, "big")
    return out + b"".join((i & 0xFFFF).to_bytes(2, "big") for i in cipher_suite_ids)