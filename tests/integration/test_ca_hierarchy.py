"""Integration tests for end-to-end CA hierarchy flows."""

import logging
from datetime import datetime, timezone

import pytest

from ca_engine.crypto_utils import CertificateLoader, CertificateVerifier
from ca_engine.errors import AlreadyExistsError
from ca_engine.pki import (
    CAManager,
    CertificateIssuer,
    CreationType,
    FileStorage,
    RevocationEntry,
    RevocationListBuilder,
    SubjectIdentity,
)

from ..utils.test_helpers import MockCASetup


class TestEndToEndIssuance:
    """Test complete root -> intermediate -> leaf workflow."""

    def test_complete_hierarchy_and_reload(
        self, temp_dir, root_identity, root_key, intermediate_identity, intermediate_key,
        leaf_identity, leaf_key
    ):
        """Build a hierarchy, then reload it through a fresh storage instance."""
        base = temp_dir / "capath"
        ca_manager = CAManager(FileStorage(base))

        # Step 1: Root and intermediate CAs
        ca_manager.store_key_pair("RootCA", "RootCA", root_key)
        ca_manager.create_root_cert("RootCA", root_identity, root_key, valid_days=3650)
        root = ca_manager.load_parent_ca("RootCA")

        ca_manager.store_key_pair("IntermediateCA", "IntermediateCA", intermediate_key)
        ca_manager.create_ca_cert(
            "IntermediateCA", intermediate_identity, intermediate_key, valid_days=1825, parent=root
        )

        # Step 2: Reload from disk as a separate process would
        reloaded_storage = FileStorage(base)
        reloaded_manager = CAManager(reloaded_storage)
        intermediate = reloaded_manager.load_parent_ca("IntermediateCA")
        root = reloaded_manager.load_parent_ca("RootCA")

        # Step 3: Issue a leaf from the reloaded intermediate
        issuer = CertificateIssuer(reloaded_storage)
        csr_pem = issuer.create_csr("IntermediateCA", leaf_identity, leaf_key, CreationType.CERTIFICATE)
        cert_pem = issuer.ca_sign_csr("IntermediateCA", CertificateLoader.load_csr(csr_pem), intermediate, 90)
        leaf = CertificateLoader.load_cert(cert_pem)

        # Step 4: Verify the complete chain
        assert CertificateVerifier.verify_certificate_chain([
            leaf, intermediate.certificate, root.certificate,
        ]) is True

        # Step 5: On-disk layout
        assert (base / "RootCA" / "ca" / "key.pem").exists()
        assert (base / "RootCA" / "ca" / "RootCA.crt").exists()
        assert (base / "RootCA" / "certs" / "IntermediateCA" / "IntermediateCA.crt").exists()
        assert (base / "IntermediateCA" / "ca" / "IntermediateCA.crt").exists()
        assert (base / "IntermediateCA" / "certs" / "app.example.com" / "app.example.com.csr").exists()
        assert (base / "IntermediateCA" / "certs" / "app.example.com" / "app.example.com.crt").exists()

    def test_issue_then_revoke(
        self, ca_manager, storage, cert_issuer, crl_builder, root_identity, root_key, leaf_key
    ):
        root = MockCASetup(ca_manager).setup_root(root_identity, root_key)

        serials = []
        for name in ["web.example.com", "api.example.com", "db.example.com"]:
            csr_pem = cert_issuer.create_csr("RootCA", SubjectIdentity(common_name=name), leaf_key)
            cert = CertificateLoader.load_cert(
                cert_issuer.ca_sign_csr("RootCA", CertificateLoader.load_csr(csr_pem), root)
            )
            serials.append(cert.serial_number)

        now = datetime.now(timezone.utc)
        entries = [RevocationEntry(serial_number=s, revocation_time=now) for s in serials[:2]]
        crl_builder.revoke_certificate("RootCA", entries, root)

        crl = CertificateLoader.load_crl(storage.load_file("RootCA/ca/RootCA.crl"))
        CertificateVerifier.verify_crl_signature(crl, root.certificate)

        assert crl.get_revoked_certificate_by_serial_number(serials[0]) is not None
        assert crl.get_revoked_certificate_by_serial_number(serials[1]) is not None
        assert crl.get_revoked_certificate_by_serial_number(serials[2]) is None

    def test_reissue_after_revocation_still_blocked(
        self, ca_manager, cert_issuer, crl_builder, root_identity, root_key, leaf_identity, leaf_key
    ):
        root = MockCASetup(ca_manager).setup_root(root_identity, root_key)
        csr = CertificateLoader.load_csr(cert_issuer.create_csr("RootCA", leaf_identity, leaf_key))
        cert = CertificateLoader.load_cert(cert_issuer.ca_sign_csr("RootCA", csr, root))

        crl_builder.revoke_certificate(
            "RootCA",
            [RevocationEntry(serial_number=cert.serial_number, revocation_time=datetime.now(timezone.utc))],
            root,
        )

        with pytest.raises(AlreadyExistsError):
            cert_issuer.ca_sign_csr("RootCA", csr, root)

    def test_issuance_is_logged(self, ca_manager, cert_issuer, root_identity, root_key, leaf_identity, leaf_key, caplog):
        root = MockCASetup(ca_manager).setup_root(root_identity, root_key)
        csr = CertificateLoader.load_csr(cert_issuer.create_csr("RootCA", leaf_identity, leaf_key))

        with caplog.at_level(logging.INFO, logger="ca_engine"):
            cert_issuer.ca_sign_csr("RootCA", csr, root)

        assert any("Certificate issued: app.example.com" in r.getMessage() for r in caplog.records)
