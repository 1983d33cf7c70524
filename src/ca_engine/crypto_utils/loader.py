"""Decoding of stored PEM artifacts back into structured objects."""

import logging

from cryptography import x509

from ..errors import ParseError

logger = logging.getLogger(__name__)

PEM_MARKERS = {
    "csr": (b"-----BEGIN CERTIFICATE REQUEST-----", b"-----BEGIN NEW CERTIFICATE REQUEST-----"),
    "certificate": (b"-----BEGIN CERTIFICATE-----",),
    "crl": (b"-----BEGIN X509 CRL-----",),
}


class CertificateLoader:
    """Parses PEM-encoded CSRs, certificates and CRLs."""

    @staticmethod
    def _require_envelope(pem_data: bytes, kind: str) -> None:
        if not isinstance(pem_data, bytes):
            raise ParseError(f"Expected bytes for {kind}, got {type(pem_data).__name__}")
        if not any(marker in pem_data for marker in PEM_MARKERS[kind]):
            raise ParseError(f"No PEM {kind} block found")

    @staticmethod
    def load_csr(pem_data: bytes) -> x509.CertificateSigningRequest:
        """
        Load a certificate signing request.

        Args:
            pem_data: PEM-encoded CSR

        Returns:
            Certificate signing request object

        Raises:
            ParseError: If the envelope is missing or the request is malformed
        """
        CertificateLoader._require_envelope(pem_data, "csr")
        try:
            return x509.load_pem_x509_csr(pem_data)
        except ValueError as e:
            logger.error(f"Malformed certificate request: {e}")
            raise ParseError(f"Malformed certificate request: {e}") from e

    @staticmethod
    def load_cert(pem_data: bytes) -> x509.Certificate:
        """
        Load a certificate.

        Args:
            pem_data: PEM-encoded certificate

        Returns:
            Certificate object

        Raises:
            ParseError: If the envelope is missing or the certificate is malformed
        """
        CertificateLoader._require_envelope(pem_data, "certificate")
        try:
            return x509.load_pem_x509_certificate(pem_data)
        except ValueError as e:
            logger.error(f"Malformed certificate: {e}")
            raise ParseError(f"Malformed certificate: {e}") from e

    @staticmethod
    def load_crl(pem_data: bytes) -> x509.CertificateRevocationList:
        """
        Load a certificate revocation list.

        Args:
            pem_data: PEM-encoded CRL

        Returns:
            Certificate revocation list object

        Raises:
            ParseError: If the envelope is missing or the list is malformed
        """
        CertificateLoader._require_envelope(pem_data, "crl")
        try:
            return x509.load_pem_x509_crl(pem_data)
        except ValueError as e:
            logger.error(f"Malformed revocation list: {e}")
            raise ParseError(f"Malformed revocation list: {e}") from e
