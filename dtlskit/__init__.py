"""DTLS 1.2 wire format, record layer, key derivation and record protection."""

__version__ = "0.1.0"

__all__ = [
    "alert",
    "ccm",
    "ciphersuite",
    "clientcertificate",
    "elliptic",
    "extension",
    "fingerprint",
    "handshake",
    "handshake_base",
    "handshake_messages",
    "hashalg",
    "hello",
    "prf",
    "protocol",
    "recordlayer",
    "signature",
    "signaturehash",
    "util",
]