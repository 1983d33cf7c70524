"""Unit tests for PEM artifact loading."""

import pytest
from cryptography import x509

from ca_engine.crypto_utils import CertificateLoader
from ca_engine.errors import CryptoError, ParseError

GARBLED_CERT = b"-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n"
GARBLED_CSR = b"-----BEGIN CERTIFICATE REQUEST-----\nAAAA\n-----END CERTIFICATE REQUEST-----\n"
GARBLED_CRL = b"-----BEGIN X509 CRL-----\nAAAA\n-----END X509 CRL-----\n"


class TestLoaderRejectsMalformedInput:
    """Decode failures raise ParseError instead of returning nothing."""

    @pytest.mark.parametrize("load", [
        CertificateLoader.load_cert,
        CertificateLoader.load_csr,
        CertificateLoader.load_crl,
    ])
    def test_missing_envelope(self, load):
        with pytest.raises(ParseError):
            load(b"not pem at all")

    @pytest.mark.parametrize("load,data", [
        (CertificateLoader.load_cert, GARBLED_CERT),
        (CertificateLoader.load_csr, GARBLED_CSR),
        (CertificateLoader.load_crl, GARBLED_CRL),
    ])
    def test_malformed_body(self, load, data):
        with pytest.raises(ParseError):
            load(data)

    def test_wrong_artifact_kind(self, ca_manager, root_identity, root_key):
        cert_pem = ca_manager.create_root_cert("RootCA", root_identity, root_key)
        with pytest.raises(ParseError):
            CertificateLoader.load_crl(cert_pem)

    def test_parse_error_is_crypto_error(self):
        with pytest.raises(CryptoError):
            CertificateLoader.load_cert(b"")

    def test_text_input_rejected(self):
        with pytest.raises(ParseError):
            CertificateLoader.load_cert(GARBLED_CERT.decode())


class TestLoaderDecodes:
    """Test well-formed artifacts decode to cryptography objects."""

    def test_load_cert(self, ca_manager, root_identity, root_key):
        cert = CertificateLoader.load_cert(ca_manager.create_root_cert("RootCA", root_identity, root_key))
        assert isinstance(cert, x509.Certificate)

    def test_load_csr(self, cert_issuer, leaf_identity, leaf_key):
        csr = CertificateLoader.load_csr(cert_issuer.create_csr("RootCA", leaf_identity, leaf_key))
        assert isinstance(csr, x509.CertificateSigningRequest)
        assert csr.is_signature_valid
