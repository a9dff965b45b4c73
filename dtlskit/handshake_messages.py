"""Handshake messages with simple fixed or length-prefixed layouts."""

from __future__ import annotations

from dataclasses import dataclass, field

from dtlskit.clientcertificate import ClientCertificateType, client_certificate_types
from dtlskit.handshake_base import (
    CookieTooLongError,
    HandshakeType,
    InvalidClientKeyExchangeError,
    InvalidHashAlgorithmError,
    InvalidSignatureAlgorithmError,
    LengthMismatchError,
)
from dtlskit.hashalg import HashAlgorithm, hash_algorithms
from dtlskit.protocol import BufferTooSmallError, Version
from dtlskit.signature import SignatureAlgorithm, signature_algorithms
from dtlskit.signaturehash import SignatureHashAlgorithm

_CERTIFICATE_LENGTH_FIELD_SIZE = 3
_CERTIFICATE_REQUEST_MIN_LENGTH = 5
_CERTIFICATE_VERIFY_MIN_LENGTH = 4


def _u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _u24(value: int) -> bytes:
    return (value & 0xFFFFFF).to_bytes(3, "big")


@dataclass
class MessageCertificate:
    """A chain of DER certificates from client or server."""

    certificate: list[bytes] = field(default_factory=list)

    def msg_type(self) -> HandshakeType:
        return HandshakeType.CERTIFICATE

    def marshal(self) -> bytes:
        body = b"".join(_u24(len(cert)) + bytes(cert) for cert in self.certificate)
        return _u24(len(body)) + body

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageCertificate":
        data = bytes(data)
        if len(data) < _CERTIFICATE_LENGTH_FIELD_SIZE:
            raise BufferTooSmallError()
        if int.from_bytes(data[:3], "big") + _CERTIFICATE_LENGTH_FIELD_SIZE != len(data):
            raise LengthMismatchError()

        certificates = []
        offset = _CERTIFICATE_LENGTH_FIELD_SIZE
        while offset < len(data):
            if offset + _CERTIFICATE_LENGTH_FIELD_SIZE > len(data):
                raise LengthMismatchError()
            length = int.from_bytes(data[offset : offset + 3], "big")
            offset += _CERTIFICATE_LENGTH_FIELD_SIZE
            if offset + length > len(data):
                raise LengthMismatchError()
            certificates.append(data[offset : offset + length])
            offset += length
        return cls(certificates)


@dataclass
class MessageCertificateRequest:
    """A server's request for a client certificate."""

    certificate_types: list[ClientCertificateType] = field(default_factory=list)
    signature_hash_algorithms: list[SignatureHashAlgorithm] = field(default_factory=list)

    def msg_type(self) -> HandshakeType:
        return HandshakeType.CERTIFICATE_REQUEST

    def marshal(self) -> bytes:
        out = bytes([len(self.certificate_types) & 0xFF])
        out += bytes(int(t) & 0xFF for t in self.certificate_types)
        out += _u16(len(self.signature_hash_algorithms) * 2)
        out += b"".join(
            bytes([int(a.hash) & 0xFF, int(a.signature) & 0xFF])
            for a in self.signature_hash_algorithms
        )
        return out + b"\x00\x00"  # distinguished names length

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageCertificateRequest":
        data = bytes(data)
        if len(data) < _CERTIFICATE_REQUEST_MIN_LENGTH:
            raise BufferTooSmallError()

        types_length = data[0]
        offset = 1
        if offset + types_length > len(data):
            raise BufferTooSmallError()
        known_types = client_certificate_types()
        cert_types = [
            ClientCertificateType(t)
            for t in data[offset : offset + types_length]
            if t in known_types
        ]
        offset += types_length

        if len(data) < offset + 2:
            raise BufferTooSmallError()
        algorithms_length = int.from_bytes(data[offset : offset + 2], "big")
        offset += 2
        if offset + algorithms_length > len(data):
            raise BufferTooSmallError()

        known_hashes = hash_algorithms()
        known_sigs = signature_algorithms()
        pairs = []
        for i in range(0, algorithms_length, 2):
            if len(data) < offset + i + 2:
                raise BufferTooSmallError()
            hash_id, sig_id = data[offset + i], data[offset + i + 1]
            if hash_id not in known_hashes or sig_id not in known_sigs:
                continue
            pairs.append(SignatureHashAlgorithm(HashAlgorithm(hash_id), SignatureAlgorithm(sig_id)))
        return cls(cert_types, pairs)


@dataclass
class MessageCertificateVerify:
    """Explicit verification of a client certificate."""

    hash_algorithm: HashAlgorithm = HashAlgorithm.NONE
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ANONYMOUS
    signature: bytes = b""

    def msg_type(self) -> HandshakeType:
        return HandshakeType.CERTIFICATE_VERIFY

    def marshal(self) -> bytes:
        return (
            bytes([int(self.hash_algorithm) & 0xFF, int(self.signature_algorithm) & 0xFF])
            + _u16(len(self.signature))
            + bytes(self.signature)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageCertificateVerify":
        data = bytes(data)
        if len(data) < _CERTIFICATE_VERIFY_MIN_LENGTH:
            raise BufferTooSmallError()
        if data[0] not in hash_algorithms():
            raise InvalidHashAlgorithmError()
        if data[1] not in signature_algorithms():
            raise InvalidSignatureAlgorithmError()
        if int.from_bytes(data[2:4], "big") + 4 != len(data):
            raise BufferTooSmallError()
        return cls(HashAlgorithm(data[0]), SignatureAlgorithm(data[1]), data[4:])


@dataclass
class MessageClientKeyExchange:
    """Carries either the client's public key or its PSK identity."""

    identity_hint: bytes | None = None
    public_key: bytes | None = None

    def msg_type(self) -> HandshakeType:
        return HandshakeType.CLIENT_KEY_EXCHANGE

    def marshal(self) -> bytes:
        if (self.identity_hint is None) == (self.public_key is None):
            raise InvalidClientKeyExchangeError()
        if self.public_key is not None:
            return bytes([len(self.public_key) & 0xFF]) + bytes(self.public_key)
        return _u16(len(self.identity_hint)) + bytes(self.identity_hint)

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageClientKeyExchange":
        data = bytes(data)
        if len(data) < 2:
            raise BufferTooSmallError()
        # A length that wraps the 16-bit field is treated as the wire format does.
        psk_length = (int.from_bytes(data[:2], "big") + 2) & 0xFFFF
        if len(data) == psk_length:
            return cls(identity_hint=data[2:])
        if len(data) != data[0] + 1:
            raise BufferTooSmallError()
        return cls(public_key=data[1:])


@dataclass
class MessageFinished:
    """The first message protected with the negotiated keys."""

    verify_data: bytes = b""

    def msg_type(self) -> HandshakeType:
        return HandshakeType.FINISHED

    def marshal(self) -> bytes:
        return bytes(self.verify_data)

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageFinished":
        return cls(bytes(data))


@dataclass
class MessageHelloVerifyRequest:
    """A server's stateless cookie challenge (RFC 6347, section 4.2.1)."""

    version: Version = Version(0, 0)
    cookie: bytes = b""

    def msg_type(self) -> HandshakeType:
        return HandshakeType.HELLO_VERIFY_REQUEST

    def marshal(self) -> bytes:
        if len(self.cookie) > 255:
            raise CookieTooLongError()
        return bytes([self.version.major, self.version.minor, len(self.cookie)]) + bytes(
            self.cookie
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageHelloVerifyRequest":
        data = bytes(data)
        if len(data) < 3:
            raise BufferTooSmallError()
        cookie_length = data[2]
        if len(data) < cookie_length + 3:
            raise BufferTooSmallError()
        return cls(Version(data[0], data[1]), data[3 : 3 + cookie_length])


@dataclass(frozen=True)
class MessageServerHelloDone:
    """Marks the end of the server's hello flight; it has no body."""

    def msg_type(self) -> HandshakeType:
        return HandshakeType.SERVER_HELLO_DONE

    def marshal(self) -> bytes:
        return b""

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageServerHelloDone":
        return cls()