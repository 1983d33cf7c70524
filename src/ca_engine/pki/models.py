"""Data models for CA issuance."""

from datetime import datetime
from enum import Enum
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
import email_validator
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress, field_validator, model_validator

# Internal PKI identities live under these names
for _name in ("local", "localhost"):
    if _name in email_validator.SPECIAL_USE_DOMAIN_NAMES:
        email_validator.SPECIAL_USE_DOMAIN_NAMES.remove(_name)


class FileType(str, Enum):
    """Kind of artifact handed to storage."""

    CSR = "csr"
    CERTIFICATE = "certificate"
    CRL = "crl"
    PRIVATE_KEY = "private_key"
    PUBLIC_KEY = "public_key"


class CreationType(str, Enum):
    """Whether an artifact belongs to a CA itself or to a certificate it issued."""

    CA = "ca"
    CERTIFICATE = "certificate"


class SubjectIdentity(BaseModel):
    """Identity attributes shared by CSR and certificate construction."""

    model_config = ConfigDict(frozen=True)

    common_name: str = Field(..., min_length=1, max_length=64, description="Common name")
    country: Optional[str] = Field(None, min_length=2, max_length=2, description="Two-letter country code")
    province: Optional[str] = Field(None, description="State or province")
    locality: Optional[str] = Field(None, description="Locality or city")
    organization: Optional[str] = Field(None, description="Organization name")
    organizational_unit: Optional[str] = Field(None, description="Organizational unit")
    email_address: Optional[str] = Field(None, description="Email address")
    dns_names: tuple[str, ...] = Field(default=(), description="Subject Alternative Names - DNS names")
    ip_addresses: tuple[IPvAnyAddress, ...] = Field(default=(), description="Subject Alternative Names - IP addresses")

    @field_validator("email_address")
    @classmethod
    def _check_email_syntax(cls, value: Optional[str]) -> Optional[str]:
        """Check address syntax only; the caller's spelling is kept as given."""
        if value is None:
            return value
        try:
            validate_email(
                value,
                check_deliverability=False,
                globally_deliverable=False,
                test_environment=True,
            )
        except EmailNotValidError as e:
            raise ValueError(f"invalid email address: {e}") from e
        return value

    def san_dns_names(self) -> list[str]:
        """DNS names with the common name appended when missing."""
        names = list(self.dns_names)
        if self.common_name not in names:
            names.append(self.common_name)
        return names


class CACredential(BaseModel):
    """A CA certificate together with the private key that signs for it."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    certificate: x509.Certificate
    private_key: rsa.RSAPrivateKey

    @model_validator(mode="after")
    def _key_matches_certificate(self) -> "CACredential":
        cert_key = self.certificate.public_key()
        if not isinstance(cert_key, rsa.RSAPublicKey) or (
            cert_key.public_numbers() != self.private_key.public_key().public_numbers()
        ):
            raise ValueError("private key does not match the CA certificate")
        return self

    @property
    def common_name(self) -> str:
        attrs = self.certificate.subject.get_attributes_for_oid(x509.oid.NameOID.COMMON_NAME)
        return attrs[0].value if attrs else ""


class RevocationEntry(BaseModel):
    """A revoked certificate serial number."""

    model_config = ConfigDict(frozen=True)

    serial_number: int = Field(..., gt=0, description="Serial number of the revoked certificate")
    revocation_time: datetime = Field(..., description="When the certificate was revoked")
    reason: Optional[x509.ReasonFlags] = Field(None, description="Revocation reason")


class StorageRecord(BaseModel):
    """An artifact addressed to the storage collaborator."""

    model_config = ConfigDict(frozen=True)

    ca: str = Field(..., min_length=1, description="CA namespace")
    common_name: str = Field(..., min_length=1, description="Subject common name")
    file_type: FileType
    creation_type: CreationType
    data: bytes = Field(default=b"", description="PEM-encoded artifact")
