"""TLS hello extensions: encoding and decoding of the supported extension types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

from dtlskit.elliptic import Curve, CurvePointFormat, curves
from dtlskit.hashalg import HashAlgorithm, hash_algorithms
from dtlskit.protocol import BufferTooSmallError, FatalError, InternalError
from dtlskit.signature import SignatureAlgorithm, signature_algorithms
from dtlskit.signaturehash import SignatureHashAlgorithm

_RENEGOTIATION_INFO_HEADER_SIZE = 5
_SUPPORTED_GROUPS_HEADER_SIZE = 6
_SUPPORTED_POINT_FORMATS_SIZE = 5
_SUPPORTED_SIGNATURE_ALGORITHMS_HEADER_SIZE = 6
_USE_EXTENDED_MASTER_SECRET_HEADER_SIZE = 4
_USE_SRTP_HEADER_SIZE = 6
_SERVER_NAME_TYPE_DNS_HOST_NAME = 0


class InvalidExtensionTypeError(FatalError):
    """The encoded extension type does not match the expected one."""

    default_message = "invalid extension type"


class InvalidSNIFormatError(FatalError):
    """A server name extension is malformed."""

    default_message = "invalid server name format"


class LengthMismatchError(InternalError):
    """Declared length and actual data length differ."""

    default_message = "data length and declared length do not match"


class ExtensionType(IntEnum):
    """IANA registered TLS extension type values."""

    SERVER_NAME = 0
    SUPPORTED_ELLIPTIC_CURVES = 10
    SUPPORTED_POINT_FORMATS = 11
    SUPPORTED_SIGNATURE_ALGORITHMS = 13
    USE_SRTP = 14
    USE_EXTENDED_MASTER_SECRET = 23
    RENEGOTIATION_INFO = 65281


class SRTPProtectionProfile(IntEnum):
    """SRTP protection profiles negotiated through use_srtp (RFC 5764)."""

    SRTP_AES128_CM_HMAC_SHA1_80 = 0x0001
    SRTP_AES128_CM_HMAC_SHA1_32 = 0x0002
    SRTP_AEAD_AES_128_GCM = 0x0007
    SRTP_AEAD_AES_256_GCM = 0x0008


def _u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _read_u16(data: bytes, offset: int = 0) -> int:
    return int.from_bytes(data[offset : offset + 2], "big")


def _check_header(data: bytes, expected: ExtensionType) -> None:
    if _read_u16(data) != expected:
        raise InvalidExtensionTypeError()


class _Reader:
    """Cursor over bytes whose reads return None when data runs out."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def empty(self) -> bool:
        return self._pos >= len(self._data)

    def read(self, n: int) -> bytes | None:
        if self._pos + n > len(self._data):
            return None
        chunk = self._data[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def read_u8(self) -> int | None:
        chunk = self.read(1)
        return None if chunk is None else chunk[0]

    def read_u16(self) -> int | None:
        chunk = self.read(2)
        return None if chunk is None else int.from_bytes(chunk, "big")

    def read_prefixed16(self) -> bytes | None:
        length = self.read_u16()
        return None if length is None else self.read(length)


def _prefixed16(body: bytes) -> bytes:
    return _u16(len(body)) + body


@dataclass
class RenegotiationInfo:
    """Renegotiation support indication (RFC 5746)."""

    renegotiated_connection: int = 0

    def type_value(self) -> ExtensionType:
        return ExtensionType.RENEGOTIATION_INFO

    def marshal(self) -> bytes:
        return _u16(self.type_value()) + _u16(1) + bytes([self.renegotiated_connection & 0xFF])

    @classmethod
    def unmarshal(cls, data: bytes) -> "RenegotiationInfo":
        if len(data) < _RENEGOTIATION_INFO_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_header(data, ExtensionType.RENEGOTIATION_INFO)
        return cls(data[4])


@dataclass
class ServerName:
    """Server Name Indication (RFC 6066, section 3)."""

    server_name: str = ""

    def type_value(self) -> ExtensionType:
        return ExtensionType.SERVER_NAME

    def marshal(self) -> bytes:
        name = self.server_name.encode("utf-8", "surrogateescape")
        entry = bytes([_SERVER_NAME_TYPE_DNS_HOST_NAME]) + _prefixed16(name)
        return _u16(self.type_value()) + _prefixed16(_prefixed16(entry))

    @classmethod
    def unmarshal(cls, data: bytes) -> "ServerName":
        reader = _Reader(data)
        ext_type = reader.read_u16()
        if (ext_type or 0) != ExtensionType.SERVER_NAME:
            raise InvalidExtensionTypeError()

        ext_data = reader.read_prefixed16() or b""
        name_list = _Reader(ext_data).read_prefixed16()
        if not name_list:
            raise InvalidSNIFormatError()

        names = _Reader(name_list)
        server_name = ""
        while not names.empty():
            name_type = names.read_u8()
            name = None if name_type is None else names.read_prefixed16()
            if not name:
                raise InvalidSNIFormatError()
            if name_type != _SERVER_NAME_TYPE_DNS_HOST_NAME:
                continue
            if server_name:
                # Multiple names of the same name_type are prohibited.
                raise InvalidSNIFormatError()
            server_name = name.decode("utf-8", "surrogateescape")
            if server_name.endswith("."):
                raise InvalidSNIFormatError()
        return cls(server_name)


@dataclass
class SupportedEllipticCurves:
    """Curves a peer supports (RFC 8422, section 5.1.1)."""

    elliptic_curves: list[Curve] = field(default_factory=list)

    def type_value(self) -> ExtensionType:
        return ExtensionType.SUPPORTED_ELLIPTIC_CURVES

    def marshal(self) -> bytes:
        count = len(self.elliptic_curves)
        out = _u16(self.type_value()) + _u16(2 + count * 2) + _u16(count * 2)
        return out + b"".join(_u16(int(c)) for c in self.elliptic_curves)

    @classmethod
    def unmarshal(cls, data: bytes) -> "SupportedEllipticCurves":
        if len(data) <= _SUPPORTED_GROUPS_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_header(data, ExtensionType.SUPPORTED_ELLIPTIC_CURVES)

        count = _read_u16(data, 4) // 2
        if _SUPPORTED_GROUPS_HEADER_SIZE + count * 2 > len(data):
            raise LengthMismatchError()

        known = curves()
        ids = (_read_u16(data, _SUPPORTED_GROUPS_HEADER_SIZE + i * 2) for i in range(count))
        return cls([Curve(i) for i in ids if i in known])


@dataclass
class SupportedPointFormats:
    """Elliptic curve point formats a peer supports (RFC 4492, section 5.1.2)."""

    point_formats: list[CurvePointFormat] = field(default_factory=list)

    def type_value(self) -> ExtensionType:
        return ExtensionType.SUPPORTED_POINT_FORMATS

    def marshal(self) -> bytes:
        count = len(self.point_formats)
        out = _u16(self.type_value()) + _u16(1 + count) + bytes([count & 0xFF])
        return out + bytes(int(p) & 0xFF for p in self.point_formats)

    @classmethod
    def unmarshal(cls, data: bytes) -> "SupportedPointFormats":
        if len(data) <= _SUPPORTED_POINT_FORMATS_SIZE:
            raise BufferTooSmallError()
        _check_header(data, ExtensionType.SUPPORTED_POINT_FORMATS)

        count = _read_u16(data, 4)
        if _SUPPORTED_GROUPS_HEADER_SIZE + count > len(data):
            raise LengthMismatchError()

        formats = data[_SUPPORTED_POINT_FORMATS_SIZE : _SUPPORTED_POINT_FORMATS_SIZE + count]
        return cls(
            [CurvePointFormat(p) for p in formats if p == CurvePointFormat.UNCOMPRESSED]
        )


@dataclass
class SupportedSignatureAlgorithms:
    """Signature/hash pairs a peer supports (RFC 5246, section 7.4.1.4.1)."""

    signature_hash_algorithms: list[SignatureHashAlgorithm] = field(default_factory=list)

    def type_value(self) -> ExtensionType:
        return ExtensionType.SUPPORTED_SIGNATURE_ALGORITHMS

    def marshal(self) -> bytes:
        count = len(self.signature_hash_algorithms)
        out = _u16(self.type_value()) + _u16(2 + count * 2) + _u16(count * 2)
        return out + b"".join(
            bytes([int(a.hash) & 0xFF, int(a.signature) & 0xFF])
            for a in self.signature_hash_algorithms
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "SupportedSignatureAlgorithms":
        if len(data) <= _SUPPORTED_SIGNATURE_ALGORITHMS_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_header(data, ExtensionType.SUPPORTED_SIGNATURE_ALGORITHMS)

        count = _read_u16(data, 4) // 2
        start = _SUPPORTED_SIGNATURE_ALGORITHMS_HEADER_SIZE
        if start + count * 2 > len(data):
            raise LengthMismatchError()

        known_hashes = hash_algorithms()
        known_sigs = signature_algorithms()
        pairs = []
        for offset in range(start, start + count * 2, 2):
            hash_id, sig_id = data[offset], data[offset + 1]
            if hash_id in known_hashes and sig_id in known_sigs:
                pairs.append(
                    SignatureHashAlgorithm(HashAlgorithm(hash_id), SignatureAlgorithm(sig_id))
                )
        return cls(pairs)


@dataclass
class UseExtendedMasterSecret:
    """Extended master secret support (RFC 7627)."""

    supported: bool = False

    def type_value(self) -> ExtensionType:
        return ExtensionType.USE_EXTENDED_MASTER_SECRET

    def marshal(self) -> bytes:
        if not self.supported:
            return b""
        return _u16(self.type_value()) + _u16(0)

    @classmethod
    def unmarshal(cls, data: bytes) -> "UseExtendedMasterSecret":
        if len(data) < _USE_EXTENDED_MASTER_SECRET_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_header(data, ExtensionType.USE_EXTENDED_MASTER_SECRET)
        return cls(True)


@dataclass
class UseSRTP:
    """SRTP protection profiles a peer supports (RFC 5764)."""

    protection_profiles: list[SRTPProtectionProfile] = field(default_factory=list)

    def type_value(self) -> ExtensionType:
        return ExtensionType.USE_SRTP

    def marshal(self) -> bytes:
        count = len(self.protection_profiles)
        out = _u16(self.type_value()) + _u16(2 + count * 2 + 1) + _u16(count * 2)
        out += b"".join(_u16(int(p)) for p in self.protection_profiles)
        return out + b"\x00"  # MKI length

    @classmethod
    def unmarshal(cls, data: bytes) -> "UseSRTP":
        if len(data) <= _USE_SRTP_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_header(data, ExtensionType.USE_SRTP)

        count = _read_u16(data, 4) // 2
        if _SUPPORTED_GROUPS_HEADER_SIZE + count * 2 > len(data):
            raise LengthMismatchError()

        known = set(SRTPProtectionProfile)
        ids = (_read_u16(data, _USE_SRTP_HEADER_SIZE + i * 2) for i in range(count))
        return cls([SRTPProtectionProfile(i) for i in ids if i in known])


Extension = Union[
    RenegotiationInfo,
    ServerName,
    SupportedEllipticCurves,
    SupportedPointFormats,
    SupportedSignatureAlgorithms,
    UseExtendedMasterSecret,
    UseSRTP,
]

_DECODERS = {
    ExtensionType.SERVER_NAME: ServerName,
    ExtensionType.SUPPORTED_ELLIPTIC_CURVES: SupportedEllipticCurves,
    ExtensionType.USE_SRTP: UseSRTP,
    ExtensionType.USE_EXTENDED_MASTER_SECRET: UseExtendedMasterSecret,
    ExtensionType.RENEGOTIATION_INFO: RenegotiationInfo,
}


def unmarshal_extensions(buf: bytes) -> list[Extension]:
    """Decode a length-prefixed block of extensions, skipping unknown ones."""
    buf = bytes(buf)
    if not buf:
        return []
    if len(buf) < 2:
        raise BufferTooSmallError()
    if len(buf) - 2 != _read_u16(buf):
        raise LengthMismatchError()

    extensions: list[Extension] = []
    offset = 2
    while offset < len(buf):
        if len(buf) < offset + 2:
            raise BufferTooSmallError()
        decoder = _DECODERS.get(_read_u16(buf, offset))
        if decoder is not None:
            extensions.append(decoder.unmarshal(buf[offset:]))
        if len(buf) < offset + 4:
            raise BufferTooSmallError()
        offset += 4 + _read_u16(buf, offset + 2)
    return extensions


def marshal_extensions(extensions: list[Extension]) -> bytes:
    """Encode extensions as one block prefixed with its total length."""
    body = b"".join(ext.marshal() for ext in extensions)
    return _u16(len(body)) + body