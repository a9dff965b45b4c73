"""The handshake content: a header followed by one handshake message."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from dtlskit.handshake_base import (
    HEADER_LENGTH,
    HandshakeHeader,
    HandshakeMessageUnsetError,
    HandshakeType,
    LengthMismatchError,
    NotImplementedFeatureError,
    UnableToMarshalFragmentedError,
)
from dtlskit.handshake_messages import (
    MessageCertificate,
    MessageCertificateRequest,
    MessageCertificateVerify,
    MessageClientKeyExchange,
    MessageFinished,
    MessageHelloVerifyRequest,
    MessageServerHelloDone,
)
from dtlskit.hello import MessageClientHello, MessageServerHello, MessageServerKeyExchange
from dtlskit.protocol import ContentType

Message = Union[
    MessageCertificate,
    MessageCertificateRequest,
    MessageCertificateVerify,
    MessageClientHello,
    MessageClientKeyExchange,
    MessageFinished,
    MessageHelloVerifyRequest,
    MessageServerHello,
    MessageServerHelloDone,
    MessageServerKeyExchange,
]

_MESSAGE_CLASSES = {
    HandshakeType.CLIENT_HELLO: MessageClientHello,
    HandshakeType.HELLO_VERIFY_REQUEST: MessageHelloVerifyRequest,
    HandshakeType.SERVER_HELLO: MessageServerHello,
    HandshakeType.CERTIFICATE: MessageCertificate,
    HandshakeType.SERVER_KEY_EXCHANGE: MessageServerKeyExchange,
    HandshakeType.CERTIFICATE_REQUEST: MessageCertificateRequest,
    HandshakeType.SERVER_HELLO_DONE: MessageServerHelloDone,
    HandshakeType.CLIENT_KEY_EXCHANGE: MessageClientKeyExchange,
    HandshakeType.FINISHED: MessageFinished,
    HandshakeType.CERTIFICATE_VERIFY: MessageCertificateVerify,
}


@dataclass
class Handshake:
    """A handshake message with its DTLS header."""

    header: HandshakeHeader = field(default_factory=HandshakeHeader)
    message: Message | None = None

    def content_type(self) -> ContentType:
        return ContentType.HANDSHAKE

    def marshal(self) -> bytes:
        """Encode the message; the header's type and lengths are filled in from it."""
        if self.message is None:
            raise HandshakeMessageUnsetError()
        if self.header.fragment_offset != 0:
            raise UnableToMarshalFragmentedError()

        body = self.message.marshal()
        self.header.length = len(body)
        self.header.fragment_length = len(body)
        self.header.type = self.message.msg_type()
        return self.header.marshal() + body

    @classmethod
    def unmarshal(cls, data: bytes) -> "Handshake":
        data = bytes(data)
        header = HandshakeHeader.unmarshal(data)

        reported = int.from_bytes(data[1:4], "big")
        if len(data) - HEADER_LENGTH != reported or reported != header.fragment_length:
            raise LengthMismatchError()

        message_cls = _MESSAGE_CLASSES.get(data[0])
        if message_cls is None:
            raise NotImplementedFeatureError()
        return cls(header, message_cls.unmarshal(data[HEADER_LENGTH:]))