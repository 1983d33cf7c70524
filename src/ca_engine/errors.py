"""Exception hierarchy for CA issuance operations."""


class CAError(Exception):
    """Base class for all CA engine errors."""
    pass


class ValidationError(CAError):
    """Raised when a request is rejected before any signing takes place."""
    pass


class AlreadyExistsError(CAError):
    """Raised when a certificate for the CA and common name is already issued."""
    pass


class NotFoundError(CAError):
    """Raised when a CA namespace or a stored file is missing."""
    pass


class CryptoError(CAError):
    """Raised when a signing, key or random-source operation fails."""
    pass


class ParseError(CryptoError):
    """Raised when PEM or DER material cannot be decoded."""
    pass


class CertificateVerificationError(CryptoError):
    """Exception raised when certificate verification fails."""
    pass


class StorageError(CAError):
    """Raised when persisting or reading an artifact fails."""
    pass
