"""
Saved-account storage for the account vault.

Records are kept in memory and mirrored to a JSON file on every change. Only
encrypted email and password values are ever written; SavedAccount holds that
persisted shape and AccountView the decoded one handed to callers.
"""

import os
import enum
import json
import shutil
import datetime
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from . import config
from .crypto import CipherCodec, CipherStatus
from .utils import atomic_write, restrict_permissions

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]

MIN_TIMESTAMP = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


def _now() -> datetime.datetime:
    return datetime.datetime.now().astimezone()


def _parse_timestamp(value: Optional[str]) -> datetime.datetime:
    """Parse an ISO timestamp; naive values are taken as local time."""
    if value is None:
        return MIN_TIMESTAMP
    if not isinstance(value, str):
        raise TypeError(f"LastUsed must be a string, got {type(value).__name__}")
    parsed = datetime.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        # replace, not astimezone: year-1 defaults from older files must not overflow
        parsed = parsed.replace(tzinfo=_now().tzinfo)
    return parsed


@dataclass
class SavedAccount:
    """Persisted shape of one saved login. email and password are ciphertext."""
    email: str
    password: str
    account_name: str = ""
    last_used: datetime.datetime = MIN_TIMESTAMP

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'Email': self.email,
            'Password': self.password,
            'AccountName': self.account_name,
            'LastUsed': self.last_used.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SavedAccount':
        """
        Create from a deserialized record.

        Raises:
            KeyError, TypeError, ValueError: If the record does not match the schema
        """
        if not isinstance(data, dict):
            raise TypeError(f"Account record must be an object, got {type(data).__name__}")
        email, password = data['Email'], data['Password']
        account_name = data.get('AccountName') or ""
        if not all(isinstance(v, str) for v in (email, password, account_name)):
            raise TypeError("Email, Password and AccountName must be strings")
        return cls(
            email=email,
            password=password,
            account_name=account_name,
            last_used=_parse_timestamp(data.get('LastUsed')),
        )


@dataclass(frozen=True)
class AccountView:
    """Decoded account as shown to callers."""
    email: str
    password: str
    account_name: str
    last_used: datetime.datetime


class LoadStatus(enum.Enum):
    MISSING = "missing"
    LOADED = "loaded"
    CORRUPT = "corrupt"


class AccountStore:
    """
    Saved accounts keyed by decrypted email.

    Not thread-safe; meant to be driven from a single UI thread.
    """

    def __init__(self, filepath: str, codec: CipherCodec, clock: Optional[Clock] = None):
        """
        Initialize the store and load the backing file.

        Args:
            filepath: Path to the accounts JSON file
            codec: Codec applied to email and password fields
            clock: Returns the current aware datetime; defaults to local now
        """
        self.filepath = filepath
        self.codec = codec
        self._clock = clock or _now
        self._accounts: List[SavedAccount] = []
        self.in_sync = True
        self.load_status = self._load()

    def __len__(self) -> int:
        return len(self._accounts)

    def list(self) -> List[AccountView]:
        """All accounts, most recently used first. Ties keep insertion order."""
        ordered = sorted(self._accounts, key=lambda a: a.last_used, reverse=True)
        return [self._to_view(a) for a in ordered]

    def get(self, email: str) -> Optional[AccountView]:
        """Return the account saved under email, or None."""
        account = self._find(email)
        return self._to_view(account) if account is not None else None

    def save(self, email: str, password: str) -> None:
        """Insert an account or update the password of an existing one."""
        account = self._find(email)
        if account is not None:
            account.password = self.codec.encrypt(password)
            account.last_used = self._clock()
            logger.info(f"Updated saved account {account.account_name}")
        else:
            account = SavedAccount(
                email=self.codec.encrypt(email),
                password=self.codec.encrypt(password),
                account_name=self._next_account_name(),
                last_used=self._clock(),
            )
            self._accounts.append(account)
            logger.info(f"Added saved account {account.account_name}")
        self._persist()

    def touch(self, email: str) -> None:
        """Mark an account as just used. Unknown emails are ignored."""
        account = self._find(email)
        if account is None:
            return
        account.last_used = self._clock()
        self._persist()

    def delete(self, email: str) -> None:
        """Remove every account saved under email."""
        before = len(self._accounts)
        self._accounts = [a for a in self._accounts if not self._matches(a, email)]
        removed = before - len(self._accounts)
        if removed:
            logger.info(f"Deleted {removed} saved account(s)")
        self._persist()

    def upgrade_legacy(self) -> int:
        """
        Re-encrypt fields that only decoded through the legacy formats.

        Returns:
            Number of accounts rewritten
        """
        upgraded = 0
        for account in self._accounts:
            changed = False
            for field in ('email', 'password'):
                result = self.codec.decrypt_text(getattr(account, field))
                if result.status is not CipherStatus.LEGACY:
                    continue
                encrypted = self.codec.encrypt_text(result.value)
                if encrypted.status is CipherStatus.ENCRYPTED:
                    setattr(account, field, encrypted.value)
                    changed = True
            if changed:
                upgraded += 1

        if upgraded:
            logger.info(f"Re-encrypted {upgraded} account(s) stored in a legacy format")
            self._persist()
        return upgraded

    def _matches(self, account: SavedAccount, email: str) -> bool:
        result = self.codec.decrypt_text(account.email)
        return result.ok and result.value == email

    def _find(self, email: str) -> Optional[SavedAccount]:
        for account in self._accounts:
            if self._matches(account, email):
                return account
        return None

    def _to_view(self, account: SavedAccount) -> AccountView:
        return AccountView(
            email=self.codec.decrypt(account.email),
            password=self.codec.decrypt(account.password),
            account_name=account.account_name,
            last_used=account.last_used,
        )

    def _next_account_name(self) -> str:
        taken = {a.account_name for a in self._accounts}
        n = len(self._accounts) + 1
        while f"{config.ACCOUNT_NAME_PREFIX}{n}" in taken:
            n += 1
        return f"{config.ACCOUNT_NAME_PREFIX}{n}"

    def _load(self) -> LoadStatus:
        """Fill the collection from disk. Never raises; an unreadable file leaves it empty."""
        if not os.path.exists(self.filepath):
            return LoadStatus.MISSING

        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if data is None:
                data = []
            if not isinstance(data, list):
                raise TypeError(f"Expected a list of accounts, got {type(data).__name__}")
            self._accounts = [SavedAccount.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError, RecursionError) as e:
            logger.warning(f"Accounts file {self.filepath} is unreadable, starting empty: {e}")
            self._accounts = []
            self._preserve_corrupt_file()
            return LoadStatus.CORRUPT

        logger.debug(f"Loaded {len(self._accounts)} saved account(s) from {self.filepath}")
        return LoadStatus.LOADED

    def _preserve_corrupt_file(self) -> None:
        # earlier copies are never overwritten, each may hold different records
        base = self.filepath + config.CORRUPT_SUFFIX
        backup = base
        if os.path.exists(backup):
            base = f"{base}-{self._clock().strftime('%Y%m%d%H%M%S%f')}"
            backup = base
            n = 1
            while os.path.exists(backup):
                backup = f"{base}-{n}"
                n += 1
        try:
            shutil.copy2(self.filepath, backup)
            logger.warning(f"Kept a copy of the unreadable accounts file at {backup}")
        except OSError as e:
            logger.error(f"Could not copy unreadable accounts file to {backup}: {e}")

    def _persist(self) -> bool:
        """
        Rewrite the accounts file with the full collection.

        A failed write is logged and leaves memory ahead of disk until the next
        successful write; in_sync reports which is the case.
        """
        payload = json.dumps(
            [a.to_dict() for a in self._accounts],
            indent=config.JSON_INDENT,
            ensure_ascii=False,
        ).encode('utf-8')

        try:
            atomic_write(self.filepath, payload)
        except OSError as e:
            logger.error(f"Error saving accounts file {self.filepath}: {e}", exc_info=True)
            self.in_sync = False
            return False

        if not restrict_permissions(self.filepath):
            logger.warning(f"Failed to set secure file permissions for accounts file: {self.filepath}")
        self.in_sync = True
        return True
