"""Certificate Authority management module."""

from datetime import datetime, timedelta, timezone
from pathlib import PurePosixPath
from typing import Optional
import logging

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..config import CA_DIR, CERT_EXTENSION, DEFAULT_VALID_CERT, PRIVATE_KEY_FILE
from ..crypto_utils import CertificateLoader, CertificateVerifier, X509Utils, new_serial_number
from ..errors import CertificateVerificationError, CryptoError, NotFoundError, StorageError, ValidationError
from .models import CACredential, CreationType, FileType, StorageRecord, SubjectIdentity
from .storage import Storage

logger = logging.getLogger(__name__)


class CAManager:
    """Builds, stores and reloads root and intermediate CA certificates."""

    def __init__(self, storage: Storage):
        """
        Initialize CA Manager.

        Args:
            storage: Storage collaborator for CA artifacts
        """
        self.storage = storage

    def create_root_cert(
        self,
        ca_name: str,
        identity: SubjectIdentity,
        private_key: rsa.RSAPrivateKey,
        valid_days: int = 0,
        creation_type: CreationType = CreationType.CA
    ) -> bytes:
        """
        Create a self-signed root CA certificate.

        Args:
            ca_name: CA namespace the certificate is stored under
            identity: Subject of the root CA
            private_key: Key the root signs with
            valid_days: Validity in days (0 selects the default)
            creation_type: Storage tag

        Returns:
            PEM-encoded certificate
        """
        return self.create_ca_cert(
            ca_name,
            identity,
            private_key,
            valid_days=valid_days,
            parent=None,
            creation_type=creation_type,
        )

    def create_ca_cert(
        self,
        ca_name: str,
        identity: SubjectIdentity,
        private_key: rsa.RSAPrivateKey,
        valid_days: int = 0,
        parent: Optional[CACredential] = None,
        creation_type: CreationType = CreationType.CA
    ) -> bytes:
        """
        Create a CA certificate.

        Root certificates are self-signed; leave parent as None. Intermediate
        CA certificates are signed by the parent credential and also stored
        in the parent's certificate directory.

        Args:
            ca_name: CA namespace the certificate is stored under
            identity: Subject of the new CA
            private_key: The new CA's private key
            valid_days: Validity in days (0 selects the default)
            parent: Signing CA for intermediates
            creation_type: Storage tag

        Returns:
            PEM-encoded certificate

        Raises:
            ValidationError: If the parent certificate is not a CA
            CryptoError: If signing fails
            StorageError: If storing the certificate fails
        """
        if valid_days == 0:
            valid_days = DEFAULT_VALID_CERT

        public_key = private_key.public_key()
        subject = X509Utils.build_name(identity)

        if parent is not None:
            self._require_ca(parent.certificate)
            issuer = parent.certificate.subject
            signing_key = parent.private_key
            logger.info(f"Creating intermediate CA {identity.common_name} under {parent.common_name}")
        else:
            issuer = subject
            signing_key = private_key
            logger.info(f"Creating root CA: {identity.common_name}")

        now = datetime.now(timezone.utc).replace(microsecond=0)

        try:
            builder = (
                x509.CertificateBuilder()
                .subject_name(subject)
                .issuer_name(issuer)
                .public_key(public_key)
                .serial_number(new_serial_number())
                .not_valid_before(now)
                .not_valid_after(now + timedelta(days=valid_days))
                .add_extension(
                    x509.BasicConstraints(ca=True, path_length=None),
                    critical=True,
                )
                .add_extension(X509Utils.ca_key_usage(), critical=True)
                .add_extension(X509Utils.extended_key_usage(), critical=False)
                .add_extension(
                    X509Utils.subject_alternative_name(identity.san_dns_names(), list(identity.ip_addresses)),
                    critical=False,
                )
                .add_extension(
                    x509.SubjectKeyIdentifier.from_public_key(public_key),
                    critical=False,
                )
            )
            if parent is not None:
                builder = builder.add_extension(
                    x509.AuthorityKeyIdentifier.from_issuer_public_key(signing_key.public_key()),
                    critical=False,
                )
            cert = builder.sign(signing_key, hashes.SHA256())
        except (ValueError, TypeError, OverflowError) as e:
            logger.error(f"Failed to sign CA certificate {identity.common_name}: {e}")
            raise CryptoError(f"Failed to sign CA certificate: {e}") from e

        cert_pem = cert.public_bytes(serialization.Encoding.PEM)

        record = StorageRecord(
            ca=ca_name,
            common_name=identity.common_name,
            file_type=FileType.CERTIFICATE,
            creation_type=creation_type,
            data=cert_pem,
        )
        self.storage.save_file(record)

        # Intermediates also go to the parent's certs dir
        if parent is not None:
            try:
                self.storage.save_file(StorageRecord(
                    ca=parent.common_name,
                    common_name=identity.common_name,
                    file_type=FileType.CERTIFICATE,
                    creation_type=CreationType.CERTIFICATE,
                    data=cert_pem,
                ))
            except StorageError:
                logger.error(f"Rolling back CA certificate {identity.common_name} under {ca_name}")
                self.storage.remove_file(record)
                raise

        logger.info(f"CA certificate created: {identity.common_name} (serial: {cert.serial_number})")
        return cert_pem

    def store_key_pair(
        self,
        ca_name: str,
        common_name: str,
        private_key: rsa.RSAPrivateKey,
        creation_type: CreationType = CreationType.CA
    ) -> None:
        """
        Persist a key pair next to the certificate it belongs to.

        Args:
            ca_name: CA namespace
            common_name: Subject common name of the key owner
            private_key: Private key; the public half is derived from it
            creation_type: CA keys go to the ca/ directory
        """
        self.storage.save_file(StorageRecord(
            ca=ca_name,
            common_name=common_name,
            file_type=FileType.PRIVATE_KEY,
            creation_type=creation_type,
            data=X509Utils.private_key_to_pem(private_key),
        ))
        self.storage.save_file(StorageRecord(
            ca=ca_name,
            common_name=common_name,
            file_type=FileType.PUBLIC_KEY,
            creation_type=creation_type,
            data=X509Utils.public_key_to_pem(private_key.public_key()),
        ))

    def load_parent_ca(self, ca_name: str) -> CACredential:
        """
        Load a CA's certificate and private key for signing.

        Args:
            ca_name: CA namespace, which is also the CA certificate's common name

        Returns:
            CA credential

        Raises:
            NotFoundError: If the CA or one of its files does not exist
            ParseError: If a stored file is malformed
        """
        if not self.storage.ca_storage(ca_name):
            raise NotFoundError(f"parent CA not found: {ca_name}")

        ca_dir = PurePosixPath(ca_name) / CA_DIR

        private_key = X509Utils.load_private_key(self.storage.load_file(ca_dir / PRIVATE_KEY_FILE))
        certificate = CertificateLoader.load_cert(self.storage.load_file(ca_dir / f"{ca_name}{CERT_EXTENSION}"))

        try:
            credential = CACredential(certificate=certificate, private_key=private_key)
        except ValueError as e:
            raise CryptoError(f"Stored key does not match certificate for {ca_name}") from e

        logger.info(f"Loaded parent CA: {ca_name}")
        return credential

    @staticmethod
    def _require_ca(cert: x509.Certificate) -> None:
        try:
            CertificateVerifier.verify_ca_constraints(cert)
        except CertificateVerificationError as e:
            raise ValidationError(str(e)) from e
