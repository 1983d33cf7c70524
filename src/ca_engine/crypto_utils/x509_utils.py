"""X.509 name, extension and key helpers shared by the builders."""

from typing import Optional
import logging

from cryptography import x509
from cryptography.x509.oid import NameOID, ExtendedKeyUsageOID
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..config import DEFAULT_KEY_SIZE, PUBLIC_EXPONENT
from ..errors import CryptoError, ParseError

logger = logging.getLogger(__name__)


class X509Utils:
    """Utility class for X.509 certificate operations."""

    @staticmethod
    def generate_private_key(key_size: int = DEFAULT_KEY_SIZE) -> rsa.RSAPrivateKey:
        """
        Generate an RSA private key.

        Args:
            key_size: Size of the RSA key in bits

        Returns:
            RSA private key object
        """
        logger.info(f"Generating {key_size}-bit RSA private key")
        return rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=key_size)

    @staticmethod
    def load_private_key(pem_data: bytes, password: Optional[bytes] = None) -> rsa.RSAPrivateKey:
        """
        Load an RSA private key from PEM bytes.

        Args:
            pem_data: PEM-encoded private key
            password: Optional password for decryption

        Returns:
            RSA private key object

        Raises:
            ParseError: If the data is not a PEM private key
            CryptoError: If the key is not an RSA key
        """
        try:
            private_key = serialization.load_pem_private_key(pem_data, password=password)
        except (ValueError, TypeError) as e:
            raise ParseError(f"Unable to load private key: {e}") from e

        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise CryptoError(f"Unsupported private key type: {type(private_key).__name__}")

        return private_key

    @staticmethod
    def private_key_to_pem(private_key: rsa.RSAPrivateKey, password: Optional[bytes] = None) -> bytes:
        """Serialize a private key as PKCS#8 PEM."""
        if password:
            encryption = serialization.BestAvailableEncryption(password)
        else:
            encryption = serialization.NoEncryption()

        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption
        )

    @staticmethod
    def public_key_to_pem(public_key: rsa.RSAPublicKey) -> bytes:
        """Serialize a public key as SubjectPublicKeyInfo PEM."""
        return public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo
        )

    @staticmethod
    def build_name(identity, include_email: bool = False) -> x509.Name:
        """
        Build a distinguished name from identity attributes.

        Empty attributes are left out. The email address, when requested,
        goes last as a PKCS#9 emailAddress attribute.

        Args:
            identity: SubjectIdentity to encode
            include_email: Append the email address RDN

        Returns:
            Distinguished name
        """
        fields = [
            (NameOID.COUNTRY_NAME, identity.country),
            (NameOID.STATE_OR_PROVINCE_NAME, identity.province),
            (NameOID.LOCALITY_NAME, identity.locality),
            (NameOID.ORGANIZATION_NAME, identity.organization),
            (NameOID.ORGANIZATIONAL_UNIT_NAME, identity.organizational_unit),
            (NameOID.COMMON_NAME, identity.common_name),
        ]
        if include_email:
            fields.append((NameOID.EMAIL_ADDRESS, identity.email_address))

        try:
            return x509.Name([
                x509.NameAttribute(oid, value) for oid, value in fields if value
            ])
        except ValueError as e:
            raise CryptoError(f"Invalid subject attributes: {e}") from e

    @staticmethod
    def subject_alternative_name(
        dns_names: list[str],
        ip_addresses: Optional[list] = None,
        emails: Optional[list[str]] = None
    ) -> x509.SubjectAlternativeName:
        """Build a SAN extension value from DNS names, IP addresses and emails."""
        san_list: list[x509.GeneralName] = [x509.DNSName(name) for name in dns_names]
        san_list.extend(x509.RFC822Name(email) for email in emails or [])
        san_list.extend(x509.IPAddress(ip) for ip in ip_addresses or [])
        return x509.SubjectAlternativeName(san_list)

    @staticmethod
    def ca_key_usage() -> x509.KeyUsage:
        """Key usage for CA certificates: sign certificates and CRLs."""
        return x509.KeyUsage(
            digital_signature=True,
            key_cert_sign=True,
            crl_sign=True,
            key_encipherment=False,
            content_commitment=False,
            data_encipherment=False,
            key_agreement=False,
            encipher_only=False,
            decipher_only=False,
        )

    @staticmethod
    def leaf_key_usage() -> x509.KeyUsage:
        """Key usage for leaf certificates: digital signature only."""
        return x509.KeyUsage(
            digital_signature=True,
            key_cert_sign=False,
            crl_sign=False,
            key_encipherment=False,
            content_commitment=False,
            data_encipherment=False,
            key_agreement=False,
            encipher_only=False,
            decipher_only=False,
        )

    @staticmethod
    def extended_key_usage() -> x509.ExtendedKeyUsage:
        """Client and server authentication."""
        return x509.ExtendedKeyUsage([
            ExtendedKeyUsageOID.CLIENT_AUTH,
            ExtendedKeyUsageOID.SERVER_AUTH,
        ])

    @staticmethod
    def get_common_name(name: x509.Name) -> Optional[str]:
        """Return the first common name of a distinguished name, if any."""
        attrs = name.get_attributes_for_oid(NameOID.COMMON_NAME)
        return attrs[0].value if attrs else None

    @staticmethod
    def get_san(extensions: x509.Extensions) -> tuple[list[str], list]:
        """
        Extract DNS names and IP addresses from a SAN extension.

        Returns:
            Tuple of (dns_names, ip_addresses); empty when the extension is absent
        """
        try:
            san = extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        except x509.ExtensionNotFound:
            return [], []

        return san.get_values_for_type(x509.DNSName), san.get_values_for_type(x509.IPAddress)
