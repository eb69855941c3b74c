import os
import logging
from dataclasses import dataclass
from typing import Optional

from . import config
from .crypto import CipherCodec
from .keystore import KeyStore
from .storage import AccountStore
from .utils import get_config_dir

logger = logging.getLogger(__name__)


@dataclass
class Vault:
    """The key store, codec and account store built once at startup."""
    keystore: KeyStore
    codec: CipherCodec
    store: AccountStore


def get_key_path(config_dir: Optional[str] = None) -> str:
    return os.path.join(config_dir or get_config_dir(), config.KEY_FILE)


def get_accounts_path(config_dir: Optional[str] = None) -> str:
    return os.path.join(config_dir or get_config_dir(), config.ACCOUNTS_FILE)


def open_vault(config_dir: Optional[str] = None, upgrade_legacy: bool = False) -> Vault:
    """
    Wire up the vault components for one configuration directory.

    Nothing is written until the first encryption or mutation, except when
    upgrade_legacy finds records stored in a legacy format.

    Args:
        config_dir: Directory for the key and accounts files; defaults to get_config_dir()
        upgrade_legacy: Re-encrypt legacy-format records right away
    """
    config_dir = config_dir or get_config_dir()
    keystore = KeyStore(get_key_path(config_dir))
    codec = CipherCodec(keystore)
    store = AccountStore(get_accounts_path(config_dir), codec)
    logger.info(f"Opened account vault in {config_dir} ({len(store)} saved account(s), {store.load_status.value})")

    if upgrade_legacy:
        store.upgrade_legacy()
    return Vault(keystore=keystore, codec=codec, store=store)
