import pytest

from dtlskit.clientcertificate import ClientCertificateType, client_certificate_types


def test_types_listed():
    types = client_certificate_types()
    assert types == {ClientCertificateType.RSA_SIGN, ClientCertificateType.ECDSA_SIGN}


def test_wire_values():
    assert ClientCertificateType(1) is ClientCertificateType.RSA_SIGN
    assert ClientCertificateType(64) is ClientCertificateType.ECDSA_SIGN


def test_unknown_value():
    assert 2 not in client_certificate_types()
    with pytest.raises(ValueError):
        ClientCertificateType(2)