"""TLS alert protocol messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from dtlskit.protocol import BufferTooSmallError, ContentType


class _ByteEnum(IntEnum):
    """An IntEnum that also holds unregistered byte values."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, int) and 0 <= value <= 0xFF:
            member = int.__new__(cls, value)
            member._name_ = f"UNKNOWN_{value}"
            member._value_ = value
            return member
        return None


class AlertLevel(_ByteEnum):
    """Severity of an alert."""

    WARNING = 1
    FATAL = 2

    def __str__(self) -> str:
        return {1: "Warning", 2: "Fatal"}.get(int(self), "Invalid alert level")


_DESCRIPTION_NAMES = {
    0: "CloseNotify",
    10: "UnexpectedMessage",
    20: "BadRecordMac",
    21: "DecryptionFailed",
    22: "RecordOverflow",
    30: "DecompressionFailure",
    40: "HandshakeFailure",
    41: "NoCertificate",
    42: "BadCertificate",
    43: "UnsupportedCertificate",
    44: "CertificateRevoked",
    45: "CertificateExpired",
    46: "CertificateUnknown",
    47: "IllegalParameter",
    48: "UnknownCA",
    49: "AccessDenied",
    50: "DecodeError",
    51: "DecryptError",
    60: "ExportRestriction",
    70: "ProtocolVersion",
    71: "InsufficientSecurity",
    80: "InternalError",
    90: "UserCanceled",
    100: "NoRenegotiation",
    110: "UnsupportedExtension",
}


class AlertDescription(_ByteEnum):
    """What an alert is about."""

    CLOSE_NOTIFY = 0
    UNEXPECTED_MESSAGE = 10
    BAD_RECORD_MAC = 20
    DECRYPTION_FAILED = 21
    RECORD_OVERFLOW = 22
    DECOMPRESSION_FAILURE = 30
    HANDSHAKE_FAILURE = 40
    NO_CERTIFICATE = 41
    BAD_CERTIFICATE = 42
    UNSUPPORTED_CERTIFICATE = 43
    CERTIFICATE_REVOKED = 44
    CERTIFICATE_EXPIRED = 45
    CERTIFICATE_UNKNOWN = 46
    ILLEGAL_PARAMETER = 47
    UNKNOWN_CA = 48
    ACCESS_DENIED = 49
    DECODE_ERROR = 50
    DECRYPT_ERROR = 51
    EXPORT_RESTRICTION = 60
    PROTOCOL_VERSION = 70
    INSUFFICIENT_SECURITY = 71
    INTERNAL_ERROR = 80
    USER_CANCELED = 90
    NO_RENEGOTIATION = 100
    UNSUPPORTED_EXTENSION = 110

    def __str__(self) -> str:
        return _DESCRIPTION_NAMES.get(int(self), "Invalid alert description")


@dataclass
class Alert:
    """An alert record: a level and a description."""

    level: AlertLevel
    description: AlertDescription

    def __post_init__(self) -> None:
        self.level = AlertLevel(self.level)
        self.description = AlertDescription(self.description)

    def content_type(self) -> ContentType:
        return ContentType.ALERT

    def marshal(self) -> bytes:
        return bytes([int(self.level), int(self.description)])

    @classmethod
    def unmarshal(cls, data: bytes) -> "Alert":
        if len(data) != 2:
            raise BufferTooSmallError()
        return cls(AlertLevel(data[0]), AlertDescription(data[1]))

    def __str__(self) -> str:
        return f"Alert {self.level}: {self.description}"