"""Constants and process-level settings for the CA engine."""

import logging
import os
from pathlib import Path

# Leaf certificate validity, in days
MIN_VALID_CERT = 1
MAX_VALID_CERT = 825
DEFAULT_VALID_CERT = 397

# CRLs are refreshed daily
CRL_NEXT_UPDATE_DAYS = 1

DEFAULT_KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537

# Serial numbers and CRL numbers are drawn from [0, 2**SERIAL_NUMBER_BITS)
SERIAL_NUMBER_BITS = 128

CERT_EXTENSION = ".crt"
CSR_EXTENSION = ".csr"
CRL_EXTENSION = ".crl"
PRIVATE_KEY_FILE = "key.pem"
PUBLIC_KEY_FILE = "key.pub"
CA_DIR = "ca"
CERTS_DIR = "certs"

CAPATH_ENV = "CAPATH"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def default_storage_path() -> Path:
    """
    Resolve the storage root.

    Returns:
        Path from the CAPATH environment variable, or ./ca when unset
    """
    return Path(os.environ.get(CAPATH_ENV, "ca"))


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure root logging for applications embedding the engine.

    Args:
        level: Logging level for the root logger
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)
