"""DTLS wire-format primitives: errors, versions, content types and simple contents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class DTLSError(Exception):
    """Base class for every error raised while handling DTLS data."""

    prefix = "dtls"
    default_message = "error"

    def __init__(self, err: object = None) -> None:
        self.err = self.default_message if err is None else err
        if isinstance(self.err, BaseException):
            self.__cause__ = self.err
        super().__init__(f"{self.prefix}: {self.err}")

    def timeout(self) -> bool:
        """Whether the error was caused by a timeout."""
        return False

    def temporary(self) -> bool:
        """Whether the connection is still usable after this error."""
        return False


class FatalError(DTLSError):
    """The connection is no longer available, usually due to misconfiguration."""

    prefix = "dtls fatal"


class InternalError(DTLSError):
    """The connection is no longer available because of an implementation fault."""

    prefix = "dtls internal"


class TemporaryError(DTLSError):
    """The request failed, but the connection is still available."""

    prefix = "dtls temporary"

    def temporary(self) -> bool:
        return True


class DTLSTimeoutError(DTLSError):
    """The request timed out."""

    prefix = "dtls timeout"

    def timeout(self) -> bool:
        return True

    def temporary(self) -> bool:
        return True


class HandshakeError(DTLSError):
    """The handshake failed; timeout and temporary state follow the wrapped error."""

    prefix = "handshake error"

    def timeout(self) -> bool:
        if isinstance(self.err, DTLSError):
            return self.err.timeout()
        return isinstance(self.err, TimeoutError)

    def temporary(self) -> bool:
        if isinstance(self.err, DTLSError):
            return self.err.temporary()
        return isinstance(self.err, TimeoutError)


class BufferTooSmallError(TemporaryError):
    """The buffer ends before the data it should hold."""

    default_message = "buffer is too small"


class InvalidCipherSpecError(FatalError):
    """A ChangeCipherSpec message did not hold the single byte 1."""

    default_message = "cipher spec invalid"


@dataclass(frozen=True)
class Version:
    """Protocol version as carried in records and hello messages."""

    major: int
    minor: int


VERSION_1_0 = Version(0xFE, 0xFF)
VERSION_1_2 = Version(0xFE, 0xFD)


class ContentType(IntEnum):
    """IANA registered record content types."""

    CHANGE_CIPHER_SPEC = 20
    ALERT = 21
    HANDSHAKE = 22
    APPLICATION_DATA = 23


@dataclass
class ApplicationData:
    """Opaque application payload carried by the record layer."""

    data: bytes = b""

    def content_type(self) -> ContentType:
        return ContentType.APPLICATION_DATA

    def marshal(self) -> bytes:
        return bytes(self.data)

    @classmethod
    def unmarshal(cls, data: bytes) -> "ApplicationData":
        return cls(bytes(data))


@dataclass(frozen=True)
class ChangeCipherSpec:
    """Signals a transition in ciphering strategy; always the single byte 1."""

    def content_type(self) -> ContentType:
        return ContentType.CHANGE_CIPHER_SPEC

    def marshal(self) -> bytes:
        return b"\x01"

    @classmethod
    def unmarshal(cls, data: bytes) -> "ChangeCipherSpec":
        if bytes(data) == b"\x01":
            return cls()
        raise InvalidCipherSpecError()


class CompressionMethodID(IntEnum):
    """Identifier of a TLS compression method."""

    NULL = 0


@dataclass(frozen=True)
class CompressionMethod:
    """A TLS compression method."""

    id: CompressionMethodID = field(default=CompressionMethodID.NULL)


def compression_methods() -> dict[CompressionMethodID, CompressionMethod]:
    """All supported compression methods, keyed by identifier."""
    return {CompressionMethodID.NULL: CompressionMethod(CompressionMethodID.NULL)}


def decode_compression_methods(buf: bytes) -> list[CompressionMethod]:
    """Decode a count-prefixed list, dropping unknown methods."""
    if len(buf) < 1:
        raise BufferTooSmallError()
    count = buf[0]
    if len(buf) < count + 1:
        raise BufferTooSmallError()
    known = compression_methods()
    return [known[method_id] for method_id in buf[1 : count + 1] if method_id in known]


def encode_compression_methods(methods: list[CompressionMethod]) -> bytes:
    """Encode methods as a count byte followed by the ids in reverse order."""
    return bytes([len(methods)]) + bytes(int(m.id) for m in reversed(methods))