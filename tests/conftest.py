import os
import datetime

import pytest

# Must be set before any QApplication exists
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from accountvault import config
from accountvault.crypto import CipherCodec
from accountvault.keystore import KeyStore
from accountvault.storage import AccountStore


class SteppingClock:
    """Returns strictly increasing aware timestamps, one minute apart."""

    def __init__(self, start=None):
        self.current = start or datetime.datetime(2025, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)

    def __call__(self):
        self.current += datetime.timedelta(minutes=1)
        return self.current


@pytest.fixture
def key_path(tmp_path):
    return str(tmp_path / config.KEY_FILE)


@pytest.fixture
def accounts_path(tmp_path):
    return str(tmp_path / config.ACCOUNTS_FILE)


@pytest.fixture
def keystore(key_path):
    return KeyStore(key_path)


@pytest.fixture
def codec(keystore):
    return CipherCodec(keystore)


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def make_store(accounts_path, codec, clock):
    def _make(path=None, store_codec=None):
        return AccountStore(path or accounts_path, store_codec or codec, clock=clock)
    return _make


@pytest.fixture
def blocked_path(tmp_path):
    """A path whose parent is a regular file, so nothing can be written under it."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    return str(blocker / "nested" / "file")
