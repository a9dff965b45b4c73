"""Hello and key exchange handshake messages with variable-width layouts."""

from __future__ import annotations

from dataclasses import dataclass, field

from dtlskit.elliptic import Curve, CurveType, curve_types, curves
from dtlskit.extension import Extension, marshal_extensions, unmarshal_extensions
from dtlskit.handshake_base import (
    RANDOM_LENGTH,
    CipherSuiteUnsetError,
    CompressionMethodUnsetError,
    CookieTooLongError,
    HandshakeType,
    InvalidCompressionMethodError,
    InvalidEllipticCurveTypeError,
    InvalidHashAlgorithmError,
    InvalidNamedCurveError,
    InvalidSignatureAlgorithmError,
    Random,
    decode_cipher_suite_ids,
    encode_cipher_suite_ids,
)
from dtlskit.hashalg import HashAlgorithm, hash_algorithms
from dtlskit.protocol import (
    BufferTooSmallError,
    CompressionMethod,
    Version,
    compression_methods,
    decode_compression_methods,
    encode_compression_methods,
)
from dtlskit.signature import SignatureAlgorithm, signature_algorithms

_VARIABLE_WIDTH_START = 2 + RANDOM_LENGTH


def _u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _read_u16(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 2], "big")


def _version_and_random(data: bytes) -> tuple[Version, Random]:
    if len(data) < _VARIABLE_WIDTH_START:
        raise BufferTooSmallError()
    return Version(data[0], data[1]), Random.unmarshal_fixed(data[2:_VARIABLE_WIDTH_START])


def _hello_prefix(version: Version, random: Random) -> bytes:
    # Version, random and an empty session id.
    return bytes([version.major, version.minor]) + random.marshal_fixed() + b"\x00"


@dataclass
class MessageClientHello:
    """The first message a client sends, also used to answer a cookie challenge."""

    version: Version = Version(0, 0)
    random: Random = field(default_factory=Random)
    cookie: bytes = b""
    cipher_suite_ids: list[int] = field(default_factory=list)
    compression_methods: list[CompressionMethod] = field(default_factory=list)
    extensions: list[Extension] = field(default_factory=list)

    def msg_type(self) -> HandshakeType:
        return HandshakeType.CLIENT_HELLO

    def marshal(self) -> bytes:
        if len(self.cookie) > 255:
            raise CookieTooLongError()
        return (
            _hello_prefix(self.version, self.random)
            + bytes([len(self.cookie)])
            + bytes(self.cookie)
            + encode_cipher_suite_ids(self.cipher_suite_ids)
            + encode_compression_methods(self.compression_methods)
            + marshal_extensions(self.extensions)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageClientHello":
        data = bytes(data)
        version, random = _version_and_random(data)

        offset = _VARIABLE_WIDTH_START
        if len(data) <= offset:
            raise BufferTooSmallError()
        offset += data[offset] + 1  # session id

        offset += 1
        if len(data) <= offset:
            raise BufferTooSmallError()
        cookie_length = data[offset - 1]
        if len(data) <= offset + cookie_length:
            raise BufferTooSmallError()
        cookie = data[offset : offset + cookie_length]
        offset += cookie_length

        cipher_suite_ids = decode_cipher_suite_ids(data[offset:])
        if len(data) < offset + 2:
            raise BufferTooSmallError()
        offset += _read_u16(data, offset) + 2

        if len(data) < offset:
            raise BufferTooSmallError()
        methods = decode_compression_methods(data[offset:])
        offset += data[offset] + 1

        extensions = unmarshal_extensions(data[offset:])
        return cls(version, random, cookie, cipher_suite_ids, methods, extensions)


@dataclass
class MessageServerHello:
    """The server's answer to a ClientHello with the chosen parameters."""

    version: Version = Version(0, 0)
    random: Random = field(default_factory=Random)
    cipher_suite_id: int | None = None
    compression_method: CompressionMethod | None = None
    extensions: list[Extension] = field(default_factory=list)

    def msg_type(self) -> HandshakeType:
        return HandshakeType.SERVER_HELLO

    def marshal(self) -> bytes:
        if self.cipher_suite_id is None:
            raise CipherSuiteUnsetError()
        if self.compression_method is None:
            raise CompressionMethodUnsetError()
        return (
            _hello_prefix(self.version, self.random)
            + _u16(self.cipher_suite_id)
            + bytes([int(self.compression_method.id) & 0xFF])
            + marshal_extensions(self.extensions)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageServerHello":
        data = bytes(data)
        version, random = _version_and_random(data)

        offset = _VARIABLE_WIDTH_START
        if len(data) <= offset:
            raise BufferTooSmallError()
        offset += data[offset] + 1  # session id
        if len(data) < offset + 2:
            raise BufferTooSmallError()

        cipher_suite_id = _read_u16(data, offset)
        offset += 2

        if len(data) <= offset:
            raise BufferTooSmallError()
        method = compression_methods().get(data[offset])
        if method is None:
            raise InvalidCompressionMethodError()
        offset += 1

        extensions = unmarshal_extensions(data[offset:]) if len(data) > offset else []
        return cls(version, random, cipher_suite_id, method, extensions)


@dataclass
class MessageServerKeyExchange:
    """Server key exchange for ECDHE (optionally signed) or a PSK identity hint."""

    identity_hint: bytes | None = None
    elliptic_curve_type: int = 0
    named_curve: int = 0
    public_key: bytes = b""
    hash_algorithm: HashAlgorithm = HashAlgorithm.NONE
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ANONYMOUS
    signature: bytes = b""

    def msg_type(self) -> HandshakeType:
        return HandshakeType.SERVER_KEY_EXCHANGE

    def marshal(self) -> bytes:
        if self.identity_hint is not None:
            return _u16(len(self.identity_hint)) + bytes(self.identity_hint)

        out = (
            bytes([int(self.elliptic_curve_type) & 0xFF])
            + _u16(int(self.named_curve))
            + bytes([len(self.public_key) & 0xFF])
            + bytes(self.public_key)
        )
        if (
            self.hash_algorithm == HashAlgorithm.NONE
            and self.signature_algorithm == SignatureAlgorithm.ANONYMOUS
            and not self.signature
        ):
            return out
        return (
            out
            + bytes([int(self.hash_algorithm) & 0xFF, int(self.signature_algorithm) & 0xFF])
            + _u16(len(self.signature))
            + bytes(self.signature)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageServerKeyExchange":
        data = bytes(data)
        if len(data) < 2:
            raise BufferTooSmallError()

        # A length that wraps the 16-bit field is treated as the wire format does.
        if len(data) == (_read_u16(data, 0) + 2) & 0xFFFF:
            return cls(identity_hint=data[2:])

        if data[0] not in curve_types():
            raise InvalidEllipticCurveTypeError()
        curve_type = CurveType(data[0])

        if len(data) < 3:
            raise BufferTooSmallError()
        named_curve = _read_u16(data, 1)
        if named_curve not in curves():
            raise InvalidNamedCurveError()
        if len(data) < 4:
            raise BufferTooSmallError()

        offset = 4 + data[3]
        if len(data) < offset:
            raise BufferTooSmallError()
        message = cls(
            elliptic_curve_type=curve_type,
            named_curve=Curve(named_curve),
            public_key=data[4:offset],
        )

        # Anonymous exchanges carry no hash, signature algorithm or signature.
        if len(data) == offset:
            return message

        if data[offset] not in hash_algorithms():
            raise InvalidHashAlgorithmError()
        message.hash_algorithm = HashAlgorithm(data[offset])
        offset += 1

        if len(data) <= offset:
            raise BufferTooSmallError()
        if data[offset] not in signature_algorithms():
            raise InvalidSignatureAlgorithmError()
        message.signature_algorithm = SignatureAlgorithm(data[offset])
        offset += 1

        if len(data) < offset + 2:
            raise BufferTooSmallError()
        signature_length = _read_u16(data, offset)
        offset += 2
        if len(data) < offset + signature_length:
            raise BufferTooSmallError()
        message.signature = data[offset : offset + signature_length]
        return message