import os
import json

from accountvault import config, vault_manager
from accountvault.storage import LoadStatus


def test_open_vault_wires_components(tmp_path):
    vault = vault_manager.open_vault(str(tmp_path))

    assert vault.codec.keystore is vault.keystore
    assert vault.store.codec is vault.codec
    assert vault.keystore.key_path == os.path.join(str(tmp_path), config.KEY_FILE)
    assert vault.store.filepath == os.path.join(str(tmp_path), config.ACCOUNTS_FILE)
    assert vault.store.load_status is LoadStatus.MISSING


def test_open_vault_uses_config_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv(config.CONFIG_DIR_ENV, str(tmp_path))

    vault = vault_manager.open_vault()
    vault.store.save("a@x.com", "p")

    assert os.path.isfile(os.path.join(str(tmp_path), config.KEY_FILE))
    assert os.path.isfile(os.path.join(str(tmp_path), config.ACCOUNTS_FILE))


def test_reopened_vault_reads_saved_accounts(tmp_path):
    vault_manager.open_vault(str(tmp_path)).store.save("a@x.com", "secret")

    reopened = vault_manager.open_vault(str(tmp_path))

    assert reopened.store.get("a@x.com").password == "secret"


def test_open_vault_can_upgrade_legacy_records(tmp_path):
    accounts_path = os.path.join(str(tmp_path), config.ACCOUNTS_FILE)
    with open(accounts_path, 'w', encoding='utf-8') as f:
        json.dump([{"Email": "old@x.com", "Password": "pw-legacy", "AccountName": "login_1",
                    "LastUsed": "2024-01-01T00:00:00+00:00"}], f)

    vault = vault_manager.open_vault(str(tmp_path), upgrade_legacy=True)

    with open(accounts_path, encoding='utf-8') as f:
        raw = f.read()
    assert "old@x.com" not in raw
    assert vault.store.get("old@x.com").password == "pw-legacy"
