"""CA issuance: CA certificates, leaf signing, revocation lists and storage."""

from .ca_manager import CAManager
from .cert_issuer import CertificateIssuer
from .revocation import RevocationListBuilder
from .storage import FileStorage, Storage
from .models import (
    CACredential,
    CreationType,
    FileType,
    RevocationEntry,
    StorageRecord,
    SubjectIdentity,
)

__all__ = [
    'CAManager',
    'CertificateIssuer',
    'RevocationListBuilder',
    'FileStorage',
    'Storage',
    'CACredential',
    'CreationType',
    'FileType',
    'RevocationEntry',
    'StorageRecord',
    'SubjectIdentity',
]
