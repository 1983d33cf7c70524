"""Serial number generation for certificates and CRLs."""

import logging
import secrets

from ..config import SERIAL_NUMBER_BITS
from ..errors import CryptoError

logger = logging.getLogger(__name__)


def new_serial_number() -> int:
    """
    Draw a random serial number from the OS CSPRNG.

    Returns:
        Integer uniformly distributed in [1, 2**128)

    Raises:
        CryptoError: If the random source is unavailable
    """
    try:
        return 1 + secrets.randbelow(2 ** SERIAL_NUMBER_BITS - 1)
    except (OSError, NotImplementedError) as e:
        logger.error(f"Random source failed: {e}")
        raise CryptoError(f"Unable to generate serial number: {e}") from e
