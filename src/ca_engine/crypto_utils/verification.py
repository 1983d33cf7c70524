"""Certificate and CRL signature verification utilities."""

from typing import Sequence
import logging

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..errors import CertificateVerificationError

logger = logging.getLogger(__name__)


class CertificateVerifier:
    """Utility class for certificate chain verification."""

    @staticmethod
    def verify_signature(cert: x509.Certificate, issuer_cert: x509.Certificate) -> None:
        """
        Verify that cert is signed by issuer_cert.

        Args:
            cert: Certificate to verify
            issuer_cert: Issuing certificate

        Raises:
            CertificateVerificationError: If signature verification fails
        """
        issuer_public_key = issuer_cert.public_key()
        if not isinstance(issuer_public_key, rsa.RSAPublicKey):
            raise CertificateVerificationError(
                f"Unsupported issuer key type: {type(issuer_public_key).__name__}"
            )

        try:
            issuer_public_key.verify(
                cert.signature,
                cert.tbs_certificate_bytes,
                padding.PKCS1v15(),
                cert.signature_hash_algorithm,
            )
        except InvalidSignature:
            raise CertificateVerificationError(
                f"Invalid signature: {cert.subject.rfc4514_string()} not signed by {issuer_cert.subject.rfc4514_string()}"
            )

    @staticmethod
    def verify_crl_signature(crl: x509.CertificateRevocationList, issuer_cert: x509.Certificate) -> None:
        """
        Verify that a CRL is signed by the given CA.

        Raises:
            CertificateVerificationError: If the CRL was not signed by issuer_cert
        """
        if crl.issuer != issuer_cert.subject:
            raise CertificateVerificationError(
                f"CRL issuer {crl.issuer.rfc4514_string()} does not match {issuer_cert.subject.rfc4514_string()}"
            )
        if not crl.is_signature_valid(issuer_cert.public_key()):
            raise CertificateVerificationError(
                f"Invalid CRL signature for {issuer_cert.subject.rfc4514_string()}"
            )

    @staticmethod
    def is_ca(cert: x509.Certificate) -> bool:
        """Whether the certificate carries BasicConstraints with CA=true."""
        try:
            basic_constraints = cert.extensions.get_extension_for_oid(
                x509.oid.ExtensionOID.BASIC_CONSTRAINTS
            ).value
        except x509.ExtensionNotFound:
            return False

        return basic_constraints.ca

    @staticmethod
    def verify_ca_constraints(cert: x509.Certificate) -> None:
        """
        Verify that a certificate may sign other certificates.

        Raises:
            CertificateVerificationError: If the certificate is not a CA
        """
        if not CertificateVerifier.is_ca(cert):
            raise CertificateVerificationError(
                f"Certificate is not a CA: {cert.subject.rfc4514_string()}"
            )

    @staticmethod
    def verify_certificate_chain(chain: Sequence[x509.Certificate]) -> bool:
        """
        Verify a certificate chain ordered leaf first, root last.

        Every certificate must be signed by the next one, every issuer must
        be a CA, and the last certificate must be self-signed.

        Args:
            chain: Certificates from leaf to root

        Returns:
            True if verification succeeds

        Raises:
            CertificateVerificationError: If verification fails
        """
        if not chain:
            raise CertificateVerificationError("Empty certificate chain")

        logger.info(f"Verifying certificate chain of length {len(chain)}")

        for cert, issuer_cert in zip(chain, chain[1:]):
            if cert.issuer != issuer_cert.subject:
                raise CertificateVerificationError(
                    f"Issuer mismatch: {cert.issuer.rfc4514_string()} != {issuer_cert.subject.rfc4514_string()}"
                )
            CertificateVerifier.verify_ca_constraints(issuer_cert)
            CertificateVerifier.verify_signature(cert, issuer_cert)

        root_cert = chain[-1]
        if root_cert.issuer != root_cert.subject:
            raise CertificateVerificationError(
                f"Chain does not end in a self-signed root: {root_cert.subject.rfc4514_string()}"
            )
        CertificateVerifier.verify_ca_constraints(root_cert)
        CertificateVerifier.verify_signature(root_cert, root_cert)

        logger.info("Certificate chain verification successful")
        return True
