"""Certificate signing request creation and leaf certificate issuance."""

from datetime import datetime, timedelta, timezone
import logging

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..config import DEFAULT_VALID_CERT, MAX_VALID_CERT, MIN_VALID_CERT
from ..crypto_utils import CertificateVerifier, X509Utils, new_serial_number
from ..errors import (
    AlreadyExistsError,
    CertificateVerificationError,
    CryptoError,
    ValidationError,
)
from .models import CACredential, CreationType, FileType, StorageRecord, SubjectIdentity
from .storage import Storage

logger = logging.getLogger(__name__)


def resolve_valid_days(valid_days: int) -> int:
    """
    Apply the default and bounds to a leaf certificate validity.

    Raises:
        ValidationError: If valid_days is non-zero and outside [1, 825]
    """
    if valid_days == 0:
        return DEFAULT_VALID_CERT
    if valid_days < MIN_VALID_CERT or valid_days > MAX_VALID_CERT:
        raise ValidationError(
            f"the certificate valid (min/max) is not between {MIN_VALID_CERT} - {MAX_VALID_CERT}"
        )
    return valid_days


class CertificateIssuer:
    """Handles signing requests and leaf certificate issuance."""

    def __init__(self, storage: Storage):
        """
        Initialize Certificate Issuer.

        Args:
            storage: Storage collaborator for issued artifacts
        """
        self.storage = storage

    def create_csr(
        self,
        ca_name: str,
        identity: SubjectIdentity,
        private_key: rsa.RSAPrivateKey,
        creation_type: CreationType = CreationType.CERTIFICATE
    ) -> bytes:
        """
        Create a certificate signing request.

        The common name is always covered by a DNS SAN entry; the email
        address goes into the subject as an emailAddress attribute and into
        the SAN as an rfc822 name.

        Args:
            ca_name: CA the request is filed under
            identity: Subject identity
            private_key: Key the request is signed with
            creation_type: Storage tag

        Returns:
            PEM-encoded CSR

        Raises:
            CryptoError: If the request cannot be encoded or signed
            StorageError: If storing the request fails
        """
        logger.info(f"Creating CSR for: {identity.common_name} (CA: {ca_name})")

        subject = X509Utils.build_name(identity, include_email=True)
        emails = [identity.email_address] if identity.email_address else []

        try:
            csr = (
                x509.CertificateSigningRequestBuilder()
                .subject_name(subject)
                .add_extension(
                    X509Utils.subject_alternative_name(
                        identity.san_dns_names(), list(identity.ip_addresses), emails
                    ),
                    critical=False,
                )
                .sign(private_key, hashes.SHA256())
            )
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to create CSR for {identity.common_name}: {e}")
            raise CryptoError(f"Failed to create CSR: {e}") from e

        csr_pem = csr.public_bytes(serialization.Encoding.PEM)

        self.storage.save_file(StorageRecord(
            ca=ca_name,
            common_name=identity.common_name,
            file_type=FileType.CSR,
            creation_type=creation_type,
            data=csr_pem,
        ))

        return csr_pem

    def ca_sign_csr(
        self,
        ca_name: str,
        csr: x509.CertificateSigningRequest,
        ca: CACredential,
        valid_days: int = 0,
        creation_type: CreationType = CreationType.CERTIFICATE
    ) -> bytes:
        """
        Sign a CSR with a CA, issuing a leaf certificate.

        At most one certificate is issued per CA and common name: a second
        request fails before a serial number is drawn.

        Args:
            ca_name: CA namespace the certificate is stored under
            csr: Parsed signing request
            ca: Signing CA credential
            valid_days: Validity in days (0 selects the default)
            creation_type: Storage tag

        Returns:
            PEM-encoded certificate

        Raises:
            ValidationError: If valid_days is out of range, the CSR has no
                common name, or the CA certificate cannot sign
            AlreadyExistsError: If the certificate was already issued
            CryptoError: If the CSR signature is invalid or signing fails
            StorageError: If storing the certificate fails
        """
        valid_days = resolve_valid_days(valid_days)

        common_name = X509Utils.get_common_name(csr.subject)
        if not common_name:
            raise ValidationError("CSR subject has no common name")

        record = StorageRecord(
            ca=ca_name,
            common_name=common_name,
            file_type=FileType.CERTIFICATE,
            creation_type=creation_type,
        )

        if self.storage.check_cert_exists(record):
            raise AlreadyExistsError(f"certificate already exists: {common_name} (CA: {ca_name})")

        if not csr.is_signature_valid:
            raise CryptoError(f"CSR signature is invalid for {common_name}")

        try:
            CertificateVerifier.verify_ca_constraints(ca.certificate)
        except CertificateVerificationError as e:
            raise ValidationError(str(e)) from e

        logger.info(f"Signing CSR for: {common_name} (CA: {ca_name}, valid for {valid_days} days)")

        dns_names, ip_addresses = X509Utils.get_san(csr.extensions)
        public_key = csr.public_key()
        now = datetime.now(timezone.utc).replace(microsecond=0)

        try:
            builder = (
                x509.CertificateBuilder()
                .subject_name(csr.subject)
                .issuer_name(ca.certificate.subject)
                .public_key(public_key)
                .serial_number(new_serial_number())
                .not_valid_before(now)
                .not_valid_after(now + timedelta(days=valid_days))
                .add_extension(
                    x509.BasicConstraints(ca=False, path_length=None),
                    critical=True,
                )
                .add_extension(X509Utils.leaf_key_usage(), critical=True)
                .add_extension(X509Utils.extended_key_usage(), critical=False)
                .add_extension(
                    x509.SubjectKeyIdentifier.from_public_key(public_key),
                    critical=False,
                )
                .add_extension(
                    x509.AuthorityKeyIdentifier.from_issuer_public_key(ca.private_key.public_key()),
                    critical=False,
                )
            )
            if dns_names or ip_addresses:
                builder = builder.add_extension(
                    X509Utils.subject_alternative_name(dns_names, ip_addresses),
                    critical=False,
                )
            cert = builder.sign(ca.private_key, hashes.SHA256())
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to sign certificate for {common_name}: {e}")
            raise CryptoError(f"Failed to sign certificate: {e}") from e

        cert_pem = cert.public_bytes(serialization.Encoding.PEM)

        # Exclusive write; a concurrent issuer may have passed the check above
        self.storage.save_file(record.model_copy(update={"data": cert_pem}), exclusive=True)

        logger.info(f"Certificate issued: {common_name} (serial: {cert.serial_number})")
        return cert_pem
