"""Filesystem storage for CA artifacts."""

from pathlib import Path
from typing import Optional, Protocol
import logging

from ..config import (
    CA_DIR,
    CERTS_DIR,
    CERT_EXTENSION,
    CRL_EXTENSION,
    CSR_EXTENSION,
    PRIVATE_KEY_FILE,
    PUBLIC_KEY_FILE,
    default_storage_path,
)
from ..errors import AlreadyExistsError, NotFoundError, StorageError
from .models import CreationType, FileType, StorageRecord

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """Storage collaborator consumed by the builders."""

    def save_file(self, record: StorageRecord, exclusive: bool = False) -> Path: ...

    def load_file(self, path) -> bytes: ...

    def remove_file(self, record: StorageRecord) -> None: ...

    def check_cert_exists(self, record: StorageRecord) -> bool: ...

    def ca_storage(self, name: str) -> bool: ...


class FileStorage:
    """
    Stores artifacts below a base path, one directory per CA.

    CA material lives in ``<CA>/ca/``; certificates a CA issues live in
    ``<CA>/certs/<CN>/``.
    """

    def __init__(self, base_path: Optional[Path] = None):
        """
        Initialize file storage.

        Args:
            base_path: Root directory (defaults to $CAPATH or ./ca)
        """
        self.base_path = Path(base_path) if base_path is not None else default_storage_path()
        self.base_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"File storage initialized with base path: {self.base_path}")

    @staticmethod
    def _check_name(name: str) -> str:
        if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
            raise StorageError(f"Invalid storage name: {name!r}")
        return name

    def _record_dir(self, record: StorageRecord) -> Path:
        ca_path = self.base_path / self._check_name(record.ca)
        if record.creation_type == CreationType.CA:
            return ca_path / CA_DIR
        return ca_path / CERTS_DIR / self._check_name(record.common_name)

    def record_path(self, record: StorageRecord) -> Path:
        """
        Resolve where a record is stored.

        Args:
            record: Storage record

        Returns:
            Absolute file path for the record
        """
        directory = self._record_dir(record)
        common_name = self._check_name(record.common_name)

        if record.file_type == FileType.CERTIFICATE:
            return directory / f"{common_name}{CERT_EXTENSION}"
        if record.file_type == FileType.CSR:
            return directory / f"{common_name}{CSR_EXTENSION}"
        if record.file_type == FileType.CRL:
            return directory / f"{common_name}{CRL_EXTENSION}"
        if record.file_type == FileType.PRIVATE_KEY:
            return directory / PRIVATE_KEY_FILE
        return directory / PUBLIC_KEY_FILE

    def save_file(self, record: StorageRecord, exclusive: bool = False) -> Path:
        """
        Persist a record.

        Args:
            record: Record to write
            exclusive: Fail instead of overwriting an existing file

        Returns:
            Path the record was written to

        Raises:
            AlreadyExistsError: If exclusive and the file already exists
            StorageError: If the write fails
        """
        path = self.record_path(record)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if exclusive:
                try:
                    f = open(path, "xb")
                except FileExistsError as e:
                    raise AlreadyExistsError(f"{record.file_type.value} already exists: {path}") from e
                with f:
                    f.write(record.data)
            else:
                path.write_bytes(record.data)
            if record.file_type == FileType.PRIVATE_KEY:
                path.chmod(0o600)  # Restrict permissions
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StorageError(f"Failed to write {path}: {e}") from e

        logger.debug(f"Stored {record.file_type.value} for {record.common_name}: {path}")
        return path

    def load_file(self, path) -> bytes:
        """
        Read a file relative to the base path.

        Raises:
            NotFoundError: If the file does not exist
            StorageError: If the read fails
        """
        full_path = self.base_path / Path(path)
        try:
            return full_path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {full_path}") from e
        except OSError as e:
            logger.error(f"Failed to read {full_path}: {e}")
            raise StorageError(f"Failed to read {full_path}: {e}") from e

    def remove_file(self, record: StorageRecord) -> None:
        """Delete a stored record; a missing file is not an error."""
        path = self.record_path(record)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")
            raise StorageError(f"Failed to remove {path}: {e}") from e
        logger.debug(f"Removed {record.file_type.value} for {record.common_name}: {path}")

    def check_cert_exists(self, record: StorageRecord) -> bool:
        """Whether a certificate is already stored for the record's CA and common name."""
        cert_record = record.model_copy(update={"file_type": FileType.CERTIFICATE})
        return self.record_path(cert_record).exists()

    def ca_storage(self, name: str) -> bool:
        """Whether the CA namespace exists."""
        return (self.base_path / self._check_name(name)).is_dir()
