"""
Master key lifecycle for the account vault.

The key is 32 random bytes kept in a single file under the configuration
directory. It is read or generated once per KeyStore and cached for the life
of the process.
"""

import os
import enum
import logging
import threading
from typing import Optional

from . import config
from .utils import atomic_write, hide_file, restrict_permissions

logger = logging.getLogger(__name__)


class KeyStoreError(Exception):
    """Raised when no usable master key can be loaded or created."""


class KeyOrigin(enum.Enum):
    """Where the cached key came from."""
    LOADED = "loaded"
    GENERATED = "generated"
    REGENERATED = "regenerated"  # an existing key file was corrupted and replaced


class KeyStore:
    """Owns the master key: load, validate, generate, persist."""

    def __init__(self, key_path: str):
        """
        Args:
            key_path: Path of the raw key file
        """
        self.key_path = key_path
        self.origin: Optional[KeyOrigin] = None
        self._key: Optional[bytes] = None
        self._lock = threading.Lock()

    def get_key(self) -> bytes:
        """
        Return the master key, loading or generating it on first use.

        Concurrent first callers wait on the same initialization, so only one
        key is ever generated per KeyStore.

        Raises:
            KeyStoreError: If the key file is unusable and a new key cannot be written
        """
        key = self._key
        if key is not None:
            return key

        with self._lock:
            if self._key is None:
                self._key = self._initialize()
            return self._key

    def is_loaded(self) -> bool:
        """Check if the key has been initialized in this process."""
        return self._key is not None

    def _initialize(self) -> bytes:
        if not os.path.exists(self.key_path):
            key = self._generate()
            self.origin = KeyOrigin.GENERATED
            logger.info(f"Generated new master key at {self.key_path}")
            return key

        key = self._load()
        if key is not None:
            self.origin = KeyOrigin.LOADED
            return key

        key = self._generate()
        self.origin = KeyOrigin.REGENERATED
        logger.warning(f"Replaced corrupted master key at {self.key_path}; values encrypted under the old key are unreadable")
        return key

    def _load(self) -> Optional[bytes]:
        """Read the key file. Returns None if it is unreadable or the wrong length."""
        try:
            with open(self.key_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logger.warning(f"Key file {self.key_path} is unreadable: {e}")
            return None

        if len(data) != config.KEY_SIZE:
            logger.warning(f"Key file {self.key_path} has length {len(data)}, expected {config.KEY_SIZE}")
            return None
        return data

    def _generate(self) -> bytes:
        key = os.urandom(config.KEY_SIZE)
        try:
            atomic_write(self.key_path, key)
        except OSError as e:
            logger.error(f"Could not write master key to {self.key_path}: {e}", exc_info=True)
            raise KeyStoreError(f"Could not persist master key to {self.key_path}") from e

        restrict_permissions(self.key_path)
        if not hide_file(self.key_path):
            logger.debug(f"Key file {self.key_path} could not be marked hidden")
        return key
