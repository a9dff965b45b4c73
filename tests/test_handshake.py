import pytest

from dtlskit.handshake import Handshake
from dtlskit.handshake_base import (
    HandshakeHeader,
    HandshakeMessageUnsetError,
    HandshakeType,
    LengthMismatchError,
    NotImplementedFeatureError,
    UnableToMarshalFragmentedError,
)
from dtlskit.handshake_messages import (
    MessageClientKeyExchange,
    MessageFinished,
    MessageServerHelloDone,
)
from dtlskit.hello import MessageServerHello
from dtlskit.protocol import BufferTooSmallError, ContentType

RAW_SERVER_HELLO = bytes.fromhex(
    "fefd21633221810e986c853da439af5fd65ccc207f7c78f15f7e1cb7a11ecf63842800c02b000000"
)


def test_content_type():
    assert Handshake().content_type() == ContentType.HANDSHAKE


def test_finished_wire_format():
    handshake = Handshake(message=MessageFinished(b"\x01\x02\x03"))
    raw = handshake.marshal()
    assert raw == bytes.fromhex("140000030000000000000003") + b"\x01\x02\x03"
    assert handshake.header.type == HandshakeType.FINISHED
    assert handshake.header.length == 3
    assert handshake.header.fragment_length == 3


@pytest.mark.parametrize(
    "message",
    [
        MessageFinished(b"verify-data!"),
        MessageServerHelloDone(),
        MessageClientKeyExchange(public_key=b"\x04" * 32),
    ],
)
def test_round_trip(message):
    handshake = Handshake(HandshakeHeader(message_sequence=7), message)
    raw = handshake.marshal()
    parsed = Handshake.unmarshal(raw)
    assert parsed.message == message
    assert parsed.header.message_sequence == 7
    assert parsed.marshal() == raw


def test_round_trip_server_hello():
    hello = MessageServerHello.unmarshal(RAW_SERVER_HELLO)
    raw = Handshake(message=hello).marshal()
    assert raw[12:] == RAW_SERVER_HELLO
    assert Handshake.unmarshal(raw).message == hello


def test_marshal_without_message():
    with pytest.raises(HandshakeMessageUnsetError):
        Handshake().marshal()


def test_marshal_fragmented():
    header = HandshakeHeader(fragment_offset=4)
    with pytest.raises(UnableToMarshalFragmentedError):
        Handshake(header, MessageFinished(b"x")).marshal()


def test_unmarshal_length_mismatch():
    raw = Handshake(message=MessageFinished(b"abcd")).marshal()
    with pytest.raises(LengthMismatchError):
        Handshake.unmarshal(raw + b"\x00")
    broken = bytearray(raw)
    broken[11] = 2  # fragment length differs from length
    with pytest.raises(LengthMismatchError):
        Handshake.unmarshal(bytes(broken))


def test_unmarshal_short_header():
    with pytest.raises(BufferTooSmallError):
        Handshake.unmarshal(b"\x14\x00\x00")


@pytest.mark.parametrize("type_byte", [0x00, 0x63])
def test_unmarshal_unsupported_types(type_byte):
    raw = bytes([type_byte]) + bytes(11)
    with pytest.raises(NotImplementedFeatureError):
        Handshake.unmarshal(raw)