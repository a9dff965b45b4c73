# dtlskit

Building blocks for DTLS 1.2 (RFC 6347) in Python, on top of the
`cryptography` library.

## What is in it

- `dtlskit.protocol`: the error hierarchy, `Version` (`VERSION_1_0`,
  `VERSION_1_2`), `ContentType`, `ApplicationData`, `ChangeCipherSpec` and
  compression method encoding.
- `dtlskit.recordlayer`: `RecordHeader`, `RecordLayer` and
  `unpack_datagram`, which splits a datagram into its raw records.
- `dtlskit.handshake`: `Handshake`, a handshake header plus one message.
- `dtlskit.handshake_base`: `HandshakeHeader`, `HandshakeType`, `Random`,
  cipher suite id lists and the handshake errors.
- `dtlskit.handshake_messages` and `dtlskit.hello`: Certificate,
  CertificateRequest, CertificateVerify, ClientKeyExchange, Finished,
  HelloVerifyRequest, ServerHelloDone, ClientHello, ServerHello and
  ServerKeyExchange messages. HelloRequest is not decoded; it raises
  `NotImplementedFeatureError`.
- `dtlskit.alert`: `Alert`, `AlertLevel`, `AlertDescription`.
- `dtlskit.extension`: hello extensions (`ServerName`,
  `SupportedEllipticCurves`, `SupportedPointFormats`,
  `SupportedSignatureAlgorithms`, `UseSRTP`, `UseExtendedMasterSecret`,
  `RenegotiationInfo`) with `marshal_extensions` / `unmarshal_extensions`.
  When a block of extensions is decoded, unknown types are skipped.
- `dtlskit.prf`: the TLS 1.2 PRF (`p_hash`), master and extended master
  secrets, `generate_encryption_keys`, Finished verify data, PSK and ECDH
  premaster secrets.
- `dtlskit.elliptic`: curve identifiers and `generate_keypair` for X25519,
  P-256 and P-384.
- `dtlskit.ccm`: AES-CCM authenticated encryption (RFC 3610).
- `dtlskit.ciphersuite`: record protection with `CBC` (AES-CBC + HMAC),
  `CCMCipher` (AES-CCM) and `GCM` (AES-GCM).
- `dtlskit.hashalg`, `dtlskit.signature`, `dtlskit.signaturehash`,
  `dtlskit.clientcertificate`: algorithm identifiers, and
  `parse_signature_schemes` / `select_signature_scheme`.
- `dtlskit.fingerprint`: colon-separated certificate fingerprints and
  hash-name lookup.
- `dtlskit.util`: `find_matching_srtp_profile`, `find_matching_cipher_suite`
  and `split_bytes`.

Every message and content class decodes with the class method
`unmarshal(data)` and encodes with `marshal()`.

## Installation

```
pip install dtlskit
```

Python 3.10 or later is needed.

## Examples

Split a datagram into records and parse one:

```python
from dtlskit.recordlayer import RecordLayer, unpack_datagram

datagram = bytes([0x14, 0xfe, 0xff, 0, 0, 0, 0, 0, 0, 0, 0x12, 0x00, 0x01, 0x01])
for raw in unpack_datagram(datagram):
    record = RecordLayer.unmarshal(raw)
    print(record.header.sequence_number, record.content)
```

Derive keys with the TLS 1.2 PRF (the hash is a `hashlib` constructor or
name):

```python
import hashlib
from dtlskit.prf import master_secret, generate_encryption_keys

ms = master_secret(b"\x01" * 48, b"\x02" * 32, b"\x03" * 32, hashlib.sha256)
keys = generate_encryption_keys(ms, b"\x02" * 32, b"\x03" * 32, 0, 16, 4, hashlib.sha256)
```

Encrypt and decrypt with AES-CCM:

```python
from dtlskit.ccm import CCM

aead = CCM(bytes(16), tag_size=8, nonce_size=13)
sealed = aead.seal(bytes(13), b"hello", b"header")
assert aead.open(bytes(13), sealed, b"header") == b"hello"
```

Fingerprint a certificate, given its DER bytes or an object with
`public_bytes()` such as a `cryptography` x509 certificate:

```python
from dtlskit.fingerprint import fingerprint, hash_from_string

der = open("cert.der", "rb").read()
print(fingerprint(der, hash_from_string("sha-256")))
```

## Errors

Wire-format and record-protection errors derive from
`dtlskit.protocol.DTLSError`, grouped as `FatalError`, `InternalError`,
`TemporaryError`, `DTLSTimeoutError` and `HandshakeError`; each answers
`timeout()` and `temporary()`. The CCM, fingerprint, signature scheme and
key generation helpers raise their own `ValueError` subclasses.

## What it does not do

There is no connection object: no handshake state machine, no flights or
retransmission, no sockets, no replay detection and no session resumption.
The package encodes, decodes, derives keys and protects records; driving a
DTLS exchange is left to the caller.

## Running the tests

```
pip install -e .[test]
pytest
```