"""
Field encryption for saved accounts.

Stored values are base64(IV || AES-256-CBC ciphertext). Values written by
earlier builds are plain base64 of the UTF-8 text, or the bare text itself,
and are still accepted by decrypt.
"""

import os
import enum
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.backends import default_backend

from . import config
from .keystore import KeyStore, KeyStoreError

logger = logging.getLogger(__name__)


class CipherStatus(enum.Enum):
    """How a CipherResult was produced."""
    EMPTY = "empty"
    ENCRYPTED = "encrypted"
    DECRYPTED = "decrypted"
    LEGACY = "legacy"        # decoded as plain base64 or bare text
    DEGRADED = "degraded"    # encryption failed, value is plain base64
    FAILED = "failed"        # nothing readable, value is ""


@dataclass(frozen=True)
class CipherResult:
    value: str
    status: CipherStatus

    @property
    def ok(self) -> bool:
        return self.status is not CipherStatus.FAILED


class CipherCodec:
    """Encrypts and decrypts single strings under the KeyStore's master key."""

    def __init__(self, keystore: KeyStore):
        self.keystore = keystore
        self.backend = default_backend()

    def encrypt(self, plaintext: str) -> str:
        """Encrypt plaintext for storage. Never raises."""
        return self.encrypt_text(plaintext).value

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored value. Returns "" when nothing readable remains. Never raises."""
        return self.decrypt_text(ciphertext).value

    def encrypt_text(self, plaintext: str) -> CipherResult:
        """
        Encrypt plaintext with a fresh random IV.

        If the key is unavailable the value is stored as plain base64 instead,
        so that saving an account never fails. That value is readable by
        anyone with access to the file; this is accepted in favour of keeping
        saves available.

        Args:
            plaintext: Text to encrypt

        Returns:
            CipherResult with status ENCRYPTED, DEGRADED or EMPTY
        """
        if not plaintext:
            return CipherResult("", CipherStatus.EMPTY)

        data = plaintext.encode(config.TEXT_ENCODING)
        try:
            blob = self._encrypt_bytes(data, self.keystore.get_key())
        except (KeyStoreError, ValueError) as e:
            logger.warning(f"Encryption unavailable, storing value as plain base64: {e}")
            return CipherResult(base64.b64encode(data).decode('ascii'), CipherStatus.DEGRADED)

        return CipherResult(base64.b64encode(blob).decode('ascii'), CipherStatus.ENCRYPTED)

    def decrypt_text(self, ciphertext: str) -> CipherResult:
        """
        Decrypt a stored value, falling back to the legacy formats.

        Args:
            ciphertext: base64 text as produced by encrypt_text, or a legacy value

        Returns:
            CipherResult with status DECRYPTED, LEGACY, EMPTY or FAILED
        """
        if not ciphertext:
            return CipherResult("", CipherStatus.EMPTY)

        try:
            # line breaks inside base64 are accepted, as older clients wrote them
            raw = base64.b64decode("".join(ciphertext.split()), validate=True)
        except (binascii.Error, ValueError):
            # Not base64 at all: the oldest builds stored the bare text
            logger.debug("Stored value is not base64; reading it as legacy plaintext")
            return CipherResult(ciphertext, CipherStatus.LEGACY)

        if len(raw) >= config.IV_SIZE:
            plaintext = self._try_decrypt(raw)
            if plaintext is not None:
                return CipherResult(plaintext, CipherStatus.DECRYPTED)

        cipher_shaped = self._is_cipher_shaped(raw)
        try:
            decoded = raw.decode(config.TEXT_ENCODING)
        except UnicodeDecodeError:
            decoded = None

        if decoded is not None and (decoded.isprintable() or cipher_shaped):
            return CipherResult(decoded, CipherStatus.LEGACY)

        if cipher_shaped:
            logger.debug("Stored value could not be decrypted or decoded")
            return CipherResult("", CipherStatus.FAILED)

        # Bare text that happens to be valid base64, such as "password"
        logger.debug("Stored value decodes to unreadable bytes; reading it as legacy plaintext")
        return CipherResult(ciphertext, CipherStatus.LEGACY)

    @staticmethod
    def _is_cipher_shaped(raw: bytes) -> bool:
        """True if raw has the length of an IV followed by at least one whole block."""
        block = config.BLOCK_SIZE_BITS // 8
        body = len(raw) - config.IV_SIZE
        return body >= block and body % block == 0

    def _try_decrypt(self, raw: bytes) -> Optional[str]:
        """Decrypt an IV-framed blob. Returns None on any key, padding or text error."""
        try:
            key = self.keystore.get_key()
        except KeyStoreError as e:
            logger.debug(f"No key available for decryption: {e}")
            return None

        iv, body = raw[:config.IV_SIZE], raw[config.IV_SIZE:]
        try:
            data = self._decrypt_bytes(body, key, iv)
            return data.decode(config.TEXT_ENCODING)
        except (ValueError, UnicodeDecodeError):
            return None

    def _encrypt_bytes(self, data: bytes, key: bytes) -> bytes:
        """AES-256-CBC with PKCS7 padding. Returns IV || ciphertext."""
        iv = os.urandom(config.IV_SIZE)
        padder = padding.PKCS7(config.BLOCK_SIZE_BITS).padder()
        padded = padder.update(data) + padder.finalize()

        cipher = Cipher(algorithms.AES(key), modes.CBC(iv), backend=self.backend)
        encryptor = cipher.encryptor()
        return iv + encryptor.update(padded) + encryptor.finalize()

    def _decrypt_bytes(self, body: bytes, key: bytes, iv: bytes) -> bytes:
        """
        Raises:
            ValueError: If the body is not block aligned or the padding is invalid
        """
        cipher = Cipher(algorithms.AES(key), modes.CBC(iv), backend=self.backend)
        decryptor = cipher.decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        unpadder = padding.PKCS7(config.BLOCK_SIZE_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
