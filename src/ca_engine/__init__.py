"""Certificate Authority issuance engine."""

from .crypto_utils import CertificateLoader, CertificateVerifier, X509Utils, new_serial_number
from .pki import (
    CACredential,
    CAManager,
    CertificateIssuer,
    CreationType,
    FileStorage,
    RevocationEntry,
    RevocationListBuilder,
    SubjectIdentity,
)

__version__ = "1.0.0"

__all__ = [
    'CACredential',
    'CAManager',
    'CertificateIssuer',
    'CertificateLoader',
    'CertificateVerifier',
    'CreationType',
    'FileStorage',
    'RevocationEntry',
    'RevocationListBuilder',
    'SubjectIdentity',
    'X509Utils',
    'new_serial_number',
]
