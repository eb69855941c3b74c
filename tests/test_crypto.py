import base64

import pytest

from accountvault import config
from accountvault.crypto import CipherCodec, CipherStatus
from accountvault.keystore import KeyStore


@pytest.mark.parametrize("plaintext", [
    "a@x.com",
    "correct horse battery staple",
    "pässwörd-üñíçødé",
    "日本語のパスワード",
    "emoji 🔐🗝️",
    "x" * 1000,
    "exactly sixteen!",
])
def test_round_trip(codec, plaintext):
    encrypted = codec.encrypt_text(plaintext)

    assert encrypted.status is CipherStatus.ENCRYPTED
    assert encrypted.value != plaintext
    result = codec.decrypt_text(encrypted.value)
    assert result.status is CipherStatus.DECRYPTED
    assert result.value == plaintext


def test_each_encryption_uses_fresh_iv(codec):
    values = {codec.encrypt("same secret") for _ in range(20)}

    assert len(values) == 20
    ivs = {base64.b64decode(v)[:config.IV_SIZE] for v in values}
    assert len(ivs) == 20
    assert all(codec.decrypt(v) == "same secret" for v in values)


def test_blob_is_iv_followed_by_whole_blocks(codec):
    raw = base64.b64decode(codec.encrypt("hello"))

    assert len(raw) == config.IV_SIZE + 16


def test_empty_values_skip_the_key(codec, keystore):
    assert codec.encrypt_text("").status is CipherStatus.EMPTY
    assert codec.decrypt("") == ""
    assert not keystore.is_loaded()


def test_survives_restart(key_path):
    encrypted = CipherCodec(KeyStore(key_path)).encrypt("persisted secret")

    restarted = CipherCodec(KeyStore(key_path))

    assert restarted.decrypt(encrypted) == "persisted secret"


@pytest.mark.parametrize("plaintext", [
    "a@x.com",                          # shorter than an IV once decoded
    "someone.longname@example.com",     # long enough to be mistaken for a blob
])
def test_plain_base64_is_read_as_legacy(codec, plaintext):
    legacy = base64.b64encode(plaintext.encode('utf-8')).decode('ascii')

    result = codec.decrypt_text(legacy)

    assert result.status is CipherStatus.LEGACY
    assert result.value == plaintext


def test_bare_plaintext_is_read_as_legacy(codec):
    result = codec.decrypt_text("a@x.com")

    assert result.status is CipherStatus.LEGACY
    assert result.value == "a@x.com"


def test_undecodable_blob_gives_empty_string(codec):
    garbage = base64.b64encode(b"\xff" * (config.IV_SIZE + 16)).decode('ascii')

    result = codec.decrypt_text(garbage)

    assert result.status is CipherStatus.FAILED
    assert result.value == ""
    assert not result.ok


def test_value_from_another_key_is_not_readable(tmp_path):
    first = CipherCodec(KeyStore(str(tmp_path / "one.key")))
    second = CipherCodec(KeyStore(str(tmp_path / "two.key")))

    assert second.decrypt(first.encrypt("only for the first key")) == ""


def test_encryption_degrades_to_base64_without_a_key(blocked_path):
    codec = CipherCodec(KeyStore(blocked_path))

    result = codec.encrypt_text("hello")

    assert result.status is CipherStatus.DEGRADED
    assert base64.b64decode(result.value) == b"hello"
    assert codec.decrypt(result.value) == "hello"


@pytest.mark.parametrize("plaintext", ["password", "test", "Abcd1234"])
def test_bare_plaintext_that_looks_like_base64_is_kept(codec, plaintext):
    result = codec.decrypt_text(plaintext)

    assert result.status is CipherStatus.LEGACY
    assert result.value == plaintext


def test_base64_with_line_breaks_is_decrypted(codec):
    encrypted = codec.encrypt("a secret long enough to span several lines of base64")
    wrapped = "\r\n".join(encrypted[i:i + 16] for i in range(0, len(encrypted), 16))

    result = codec.decrypt_text(wrapped)

    assert result.status is CipherStatus.DECRYPTED
    assert result.value == "a secret long enough to span several lines of base64"
