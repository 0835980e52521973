"""
Persistent store of user-chosen device names.

This module provides the NameStore class, a JSON-backed mapping from device id
to display name. Every read goes to disk so that a write is visible to the
next lookup immediately, and every write is atomic.
"""

import fcntl
import json
import logging
import os
import shutil
import tempfile
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from .backends.exceptions import CamSwitchError

logger = logging.getLogger(__name__)


class NameStoreError(CamSwitchError):
    """Base exception for name store operations."""

    def __init__(self, message: str, store_path: Optional[Path] = None, cause: Optional[Exception] = None):
        context = {'store_path': str(store_path)} if store_path else {}
        super().__init__(message, cause, context)


class NameStoreCorruptionError(NameStoreError):
    """Raised when the store file is corrupted and cannot be recovered."""

    def __init__(self, message: str, store_path: Optional[Path] = None, backup_created: bool = False, cause: Optional[Exception] = None):
        super().__init__(message, store_path, cause)
        self.context['backup_created'] = backup_created


class NameStorePermissionError(NameStoreError):
    """Raised when store operations fail due to permission issues."""
    pass


class NameStoreLockError(NameStoreError):
    """Raised when the store file cannot be locked for exclusive access."""
    pass


class NameStore:
    """
    Maps stable device ids to user-chosen display names.

    Entries are kept under ``KEY_PREFIX + device_id`` in a single JSON
    document. The store keeps whatever string it is given; deciding whether an
    override is redundant is the caller's job.
    """

    STORE_VERSION = "1.0"
    KEY_PREFIX = "camera_name_"
    DEFAULT_STORE_DIR = Path.home() / ".camswitch"
    DEFAULT_STORE_FILE = "names.json"
    LOCK_TIMEOUT = 5.0

    def __init__(self, store_path: Optional[Path] = None):
        """
        Initialize the name store.

        Args:
            store_path: Optional custom path for the store file.
                        Defaults to ~/.camswitch/names.json
        """
        if store_path is None:
            self.store_dir = self.DEFAULT_STORE_DIR
            self.store_path = self.store_dir / self.DEFAULT_STORE_FILE
        else:
            self.store_path = Path(store_path)
            self.store_dir = self.store_path.parent

        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise NameStorePermissionError(
                f"Cannot create name store directory: {self.store_dir}",
                store_path=self.store_path,
                cause=e
            )
        except OSError as e:
            raise NameStoreError(
                f"Failed to initialize name store directory: {self.store_dir}",
                store_path=self.store_path,
                cause=e
            )

        if not self.store_path.exists():
            self._create_empty_store()
            logger.info(f"Created new name store: {self.store_path}")

    def lookup(self, device_id: str) -> Optional[str]:
        """
        Get the stored name for a device.

        Returns:
            Optional[str]: The stored name, or None when no override exists
        """
        return self._read_store()["names"].get(self._key(device_id))

    def set(self, device_id: str, name: str) -> None:
        """Store a name for a device, replacing any previous one."""
        data = self._read_store()
        data["names"][self._key(device_id)] = name
        self._write_store_atomic(data)
        logger.debug(f"Stored name for {device_id}: {name!r}")

    def remove(self, device_id: str) -> None:
        """Remove the stored name for a device. Missing ids are ignored."""
        data = self._read_store()
        if data["names"].pop(self._key(device_id), None) is not None:
            self._write_store_atomic(data)
            logger.debug(f"Removed name for {device_id}")

    def clear(self) -> None:
        """Remove every stored name."""
        data = self._read_store()
        data["names"] = {}
        self._write_store_atomic(data)
        logger.info("Cleared all stored camera names")

    def items(self) -> Dict[str, str]:
        """
        Get every stored override.

        Returns:
            Dict[str, str]: Names keyed by device id
        """
        prefix_length = len(self.KEY_PREFIX)
        return {
            key[prefix_length:]: value
            for key, value in self._read_store()["names"].items()
            if key.startswith(self.KEY_PREFIX)
        }

    def _key(self, device_id: str) -> str:
        return f"{self.KEY_PREFIX}{device_id}"

    def _create_empty_store(self) -> None:
        """Create an empty store file with proper structure."""
        now = datetime.now().isoformat()
        self._write_store_atomic({
            "version": self.STORE_VERSION,
            "names": {},
            "created_at": now,
            "last_modified": now
        })

    @staticmethod
    def _is_valid(data) -> bool:
        return (
            isinstance(data, dict)
            and isinstance(data.get("names"), dict)
            and all(isinstance(value, str) for value in data["names"].values())
        )

    @contextmanager
    def _file_lock(self, file_handle, timeout: Optional[float] = None):
        """
        Context manager for exclusive file locking with timeout.

        Args:
            file_handle: File handle to lock
            timeout: Maximum time to wait for lock in seconds
        """
        timeout = self.LOCK_TIMEOUT if timeout is None else timeout
        start_time = time.time()
        locked = False

        try:
            while time.time() - start_time < timeout:
                try:
                    fcntl.flock(file_handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    locked = True
                    break
                except OSError:
                    time.sleep(0.05)

            if not locked:
                raise NameStoreLockError(
                    f"Could not acquire file lock within {timeout} seconds",
                    store_path=self.store_path
                )

            yield

        finally:
            if locked:
                try:
                    fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN)
                except OSError as e:
                    logger.warning(f"Failed to release file lock: {e}")

    def _read_store(self) -> Dict:
        """
        Read and parse the store file with file locking.

        Returns:
            Dict: The parsed store document

        Raises:
            NameStoreCorruptionError: If the file is corrupted beyond recovery
            NameStoreError: If the file cannot be read
        """
        if not self.store_path.exists():
            logger.debug("Name store missing, creating empty store")
            self._create_empty_store()

        try:
            with open(self.store_path, 'r', encoding='utf-8') as f:
                with self._file_lock(f):
                    data = json.load(f)
        except json.JSONDecodeError as e:
            return self._handle_corruption(e)
        except PermissionError as e:
            raise NameStorePermissionError(
                "Permission denied reading name store",
                store_path=self.store_path,
                cause=e
            )
        except OSError as e:
            raise NameStoreError(
                "Failed to read name store",
                store_path=self.store_path,
                cause=e
            )

        if not self._is_valid(data):
            return self._handle_corruption(ValueError("Invalid name store structure"))

        if data.get("version") != self.STORE_VERSION:
            logger.warning(f"Name store version mismatch: {data.get('version')} != {self.STORE_VERSION}")

        return data

    def _write_store_atomic(self, data: Dict) -> None:
        """
        Write the store document atomically.

        Raises:
            NameStoreError: If the write fails
        """
        data["last_modified"] = datetime.now().isoformat()
        data["version"] = self.STORE_VERSION

        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode='w',
                dir=self.store_dir,
                delete=False,
                suffix='.tmp',
                encoding='utf-8'
            ) as tmp_file:
                tmp_path = tmp_file.name
                json.dump(data, tmp_file, indent=2, ensure_ascii=False)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())

            os.replace(tmp_path, self.store_path)
            tmp_path = None

        except PermissionError as e:
            raise NameStorePermissionError(
                "Permission denied writing name store",
                store_path=self.store_path,
                cause=e
            )
        except OSError as e:
            raise NameStoreError(
                "OS error writing name store",
                store_path=self.store_path,
                cause=e
            )
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.unlink(tmp_path)
                except OSError as e:
                    logger.warning(f"Failed to clean up temporary file {tmp_path}: {e}")

    def _handle_corruption(self, error: Exception) -> Dict:
        """
        Back up a corrupted store and fall back to the newest valid backup.

        Returns:
            Dict: The recovered (or fresh, empty) store document
        """
        logger.error(f"Name store corruption detected: {error}")

        backup_created = False
        try:
            if self.store_path.exists():
                backup_path = self._create_backup()
                backup_created = True
                logger.info(f"Created backup of corrupted name store: {backup_path}")

            recovered = self._attempt_recovery()
            if recovered is None:
                self._create_empty_store()
                logger.warning("Could not recover name store, created new empty store")
                recovered = self._read_store()
            else:
                self._write_store_atomic(recovered)
                logger.info("Recovered name store from backup")
            return recovered

        except NameStoreError:
            raise
        except Exception as recovery_error:
            raise NameStoreCorruptionError(
                f"Name store corrupted and recovery failed: {error}",
                store_path=self.store_path,
                backup_created=backup_created,
                cause=recovery_error
            )

    def _create_backup(self) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_path = self.store_path.with_suffix(f'.backup_{timestamp}.json')
        shutil.copy2(self.store_path, backup_path)
        return backup_path

    def _attempt_recovery(self) -> Optional[Dict]:
        """Find the newest backup that parses and has a valid structure."""
        backup_files = list(self.store_dir.glob(f"{self.store_path.stem}.backup_*.json"))
        backup_files.sort(key=lambda p: p.stat().st_mtime, reverse=True)

        for backup_file in backup_files:
            try:
                with open(backup_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to recover from {backup_file}: {e}")
                continue

            if self._is_valid(data):
                data["recovered_from"] = str(backup_file)
                return data

        return None
