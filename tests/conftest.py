"""Pytest configuration and shared fixtures for CA engine testing."""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

from cryptography.hazmat.primitives.asymmetric import rsa

from ca_engine.pki import (
    CAManager,
    CertificateIssuer,
    FileStorage,
    RevocationListBuilder,
    SubjectIdentity,
)

from .utils.test_helpers import TestKeyFactory


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test artifacts."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def storage(temp_dir: Path) -> FileStorage:
    """Filesystem storage rooted in the temp directory."""
    return FileStorage(temp_dir / "capath")


@pytest.fixture
def ca_manager(storage: FileStorage) -> CAManager:
    return CAManager(storage)


@pytest.fixture
def cert_issuer(storage: FileStorage) -> CertificateIssuer:
    return CertificateIssuer(storage)


@pytest.fixture
def crl_builder(storage: FileStorage) -> RevocationListBuilder:
    return RevocationListBuilder(storage)


# RSA key generation is slow; keys are shared across the session
@pytest.fixture(scope="session")
def root_key() -> rsa.RSAPrivateKey:
    return TestKeyFactory.create_private_key()


@pytest.fixture(scope="session")
def intermediate_key() -> rsa.RSAPrivateKey:
    return TestKeyFactory.create_private_key()


@pytest.fixture(scope="session")
def leaf_key() -> rsa.RSAPrivateKey:
    return TestKeyFactory.create_private_key()


@pytest.fixture
def root_identity() -> SubjectIdentity:
    return SubjectIdentity(
        common_name="RootCA",
        country="US",
        province="TestState",
        locality="TestCity",
        organization="TestOrg",
        organizational_unit="TestOU",
        email_address="pki@example.com",
    )


@pytest.fixture
def intermediate_identity() -> SubjectIdentity:
    return SubjectIdentity(
        common_name="IntermediateCA",
        country="US",
        organization="TestOrg",
        organizational_unit="Intermediate",
    )


@pytest.fixture
def leaf_identity() -> SubjectIdentity:
    return SubjectIdentity(
        common_name="app.example.com",
        country="US",
        province="TestState",
        locality="TestCity",
        organization="TestOrg",
        organizational_unit="Web",
        email_address="admin@example.com",
        dns_names=("www.app.example.com",),
        ip_addresses=("10.0.0.1",),
    )
