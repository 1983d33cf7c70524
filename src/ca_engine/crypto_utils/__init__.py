"""Cryptographic utilities for PKI operations."""

from .x509_utils import X509Utils
from .loader import CertificateLoader
from .serial import new_serial_number
from .verification import CertificateVerifier

__all__ = ['X509Utils', 'CertificateLoader', 'CertificateVerifier', 'new_serial_number']
