"""Certificate revocation list generation."""

from datetime import datetime, timedelta, timezone
from typing import Sequence
import logging

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ..config import CRL_NEXT_UPDATE_DAYS
from ..crypto_utils import new_serial_number
from ..errors import CryptoError
from .models import CACredential, CreationType, FileType, RevocationEntry, StorageRecord
from .storage import Storage

logger = logging.getLogger(__name__)


class RevocationListBuilder:
    """Builds and signs CRLs for a CA."""

    def __init__(self, storage: Storage):
        self.storage = storage

    @staticmethod
    def _revoked_certificate(entry: RevocationEntry) -> x509.RevokedCertificate:
        builder = (
            x509.RevokedCertificateBuilder()
            .serial_number(entry.serial_number)
            .revocation_date(entry.revocation_time)
        )
        if entry.reason is not None:
            builder = builder.add_extension(x509.CRLReason(entry.reason), critical=False)
        return builder.build()

    def revoke_certificate(
        self,
        ca_name: str,
        revoked_entries: Sequence[RevocationEntry],
        ca: CACredential
    ) -> bytes:
        """
        Generate a CRL listing the given revoked certificates.

        Each call produces a new CRL that supersedes earlier ones; entries
        are not merged with any previous list.

        Args:
            ca_name: CA namespace the CRL is stored under
            revoked_entries: Revoked certificates, in the order they are listed
            ca: Signing CA credential

        Returns:
            PEM-encoded CRL

        Raises:
            CryptoError: If the CA cannot sign CRLs or signing fails
            StorageError: If storing the CRL fails
        """
        try:
            key_usage = ca.certificate.extensions.get_extension_for_class(x509.KeyUsage).value
        except x509.ExtensionNotFound:
            key_usage = None
        if key_usage is not None and not key_usage.crl_sign:
            raise CryptoError(f"CA certificate {ca.common_name} lacks the cRLSign key usage")

        logger.info(f"Generating CRL for {ca_name} with {len(revoked_entries)} entries")

        now = datetime.now(timezone.utc).replace(microsecond=0)

        try:
            builder = (
                x509.CertificateRevocationListBuilder()
                .issuer_name(ca.certificate.subject)
                .last_update(now)
                .next_update(now + timedelta(days=CRL_NEXT_UPDATE_DAYS))
                .add_extension(x509.CRLNumber(new_serial_number()), critical=False)
                .add_extension(
                    x509.AuthorityKeyIdentifier.from_issuer_public_key(ca.private_key.public_key()),
                    critical=False,
                )
            )
            for entry in revoked_entries:
                builder = builder.add_revoked_certificate(self._revoked_certificate(entry))

            crl = builder.sign(ca.private_key, ca.certificate.signature_hash_algorithm)
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to sign CRL for {ca_name}: {e}")
            raise CryptoError(f"Failed to sign CRL: {e}") from e

        crl_pem = crl.public_bytes(serialization.Encoding.PEM)

        self.storage.save_file(StorageRecord(
            ca=ca_name,
            common_name=ca_name,
            file_type=FileType.CRL,
            creation_type=CreationType.CA,
            data=crl_pem,
        ))

        logger.info(f"CRL generated for {ca_name}")
        return crl_pem
