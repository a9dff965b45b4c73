"""The DTLS record layer: record headers, records and datagram splitting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from dtlskit.alert import Alert
from dtlskit.handshake import Handshake
from dtlskit.protocol import (
    VERSION_1_0,
    VERSION_1_2,
    ApplicationData,
    BufferTooSmallError,
    ChangeCipherSpec,
    ContentType,
    FatalError,
    InternalError,
    TemporaryError,
    Version,
)

HEADER_SIZE = 13
MAX_SEQUENCE_NUMBER = 0x0000FFFFFFFFFFFF


class InvalidPacketLengthError(TemporaryError):
    """A record's declared length does not fit the datagram."""

    default_message = "packet length and declared length do not match"


class SequenceNumberOverflowError(InternalError):
    """The sequence number does not fit in 48 bits."""

    default_message = "sequence number overflow"


class UnsupportedProtocolVersionError(FatalError):
    """The record carries a version other than DTLS 1.0 or 1.2."""

    default_message = "unsupported protocol version"


class InvalidContentTypeError(TemporaryError):
    """The record's content type is unknown."""

    default_message = "invalid content type"


Content = Union[ChangeCipherSpec, Alert, Handshake, ApplicationData]

_CONTENT_CLASSES = {
    ContentType.CHANGE_CIPHER_SPEC: ChangeCipherSpec,
    ContentType.ALERT: Alert,
    ContentType.HANDSHAKE: Handshake,
    ContentType.APPLICATION_DATA: ApplicationData,
}


def _content_type(value: int) -> int:
    try:
        return ContentType(value)
    except ValueError:
        return value


@dataclass
class RecordHeader:
    """The 13-byte header in front of every DTLS record."""

    content_type: int = 0
    content_len: int = 0
    version: Version = Version(0, 0)
    epoch: int = 0
    sequence_number: int = 0

    def marshal(self) -> bytes:
        if self.sequence_number > MAX_SEQUENCE_NUMBER:
            raise SequenceNumberOverflowError()
        return (
            bytes([int(self.content_type) & 0xFF, self.version.major, self.version.minor])
            + (self.epoch & 0xFFFF).to_bytes(2, "big")
            + self.sequence_number.to_bytes(6, "big")
            + (self.content_len & 0xFFFF).to_bytes(2, "big")
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "RecordHeader":
        if len(data) < HEADER_SIZE:
            raise BufferTooSmallError()
        header = cls(
            content_type=_content_type(data[0]),
            content_len=int.from_bytes(data[11:13], "big"),
            version=Version(data[1], data[2]),
            epoch=int.from_bytes(data[3:5], "big"),
            sequence_number=int.from_bytes(data[5:11], "big"),
        )
        if header.version not in (VERSION_1_0, VERSION_1_2):
            raise UnsupportedProtocolVersionError()
        return header


@dataclass
class RecordLayer:
    """A single DTLS record: header plus content."""

    header: RecordHeader = field(default_factory=RecordHeader)
    content: Content | None = None

    def marshal(self) -> bytes:
        """Encode the record; the header's type and length are filled in from the content."""
        if self.content is None:
            raise ValueError("record has no content to marshal")
        body = self.content.marshal()
        self.header.content_len = len(body)
        self.header.content_type = self.content.content_type()
        return self.header.marshal() + body

    @classmethod
    def unmarshal(cls, data: bytes) -> "RecordLayer":
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise BufferTooSmallError()
        header = RecordHeader.unmarshal(data)

        content_cls = _CONTENT_CLASSES.get(data[0])
        if content_cls is None:
            raise InvalidContentTypeError()
        return cls(header, content_cls.unmarshal(data[HEADER_SIZE:]))


def unpack_datagram(buf: bytes) -> list[bytes]:
    """Split a datagram into the raw records it holds."""
    buf = bytes(buf)
    records = []
    offset = 0
    while offset != len(buf):
        if len(buf) - offset <= HEADER_SIZE:
            raise InvalidPacketLengthError()
        length = HEADER_SIZE + int.from_bytes(buf[offset + 11 : offset + 13], "big")
        if offset + length > len(buf):
            raise InvalidPacketLengthError()
        records.append(buf[offset : offset + length])
        offset += length
    return records