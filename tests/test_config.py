"""
Configuration tests
"""

import json

import base58
import pytest
from solders.keypair import Keypair

from launchpad.config import LaunchpadSettings, load_keypair, load_pubkey
from launchpad.errors import ConfigError


class TestSettings:
    def test_env(self, monkeypatch, program_id):
        monkeypatch.setenv("LAUNCHPAD_PROGRAM_ID", str(program_id))
        monkeypatch.setenv("PROTOCOL_VERSION", "2")
        settings = LaunchpadSettings(_env_file=None)
        assert settings.program_id() == program_id
        assert settings.protocol_version == 2

    def test_missing_program_id(self, monkeypatch):
        monkeypatch.delenv("LAUNCHPAD_PROGRAM_ID", raising=False)
        with pytest.raises(ConfigError):
            LaunchpadSettings(_env_file=None).program_id()

    def test_bad_pubkey(self):
        with pytest.raises(ConfigError):
            load_pubkey("not-a-key", "LAUNCHPAD_PROGRAM_ID")


class TestKeypairLoading:
    def test_json_array(self, tmp_path, user):
        path = tmp_path / "id.json"
        path.write_text(json.dumps(list(bytes(user))))
        assert load_keypair(path).pubkey() == user.pubkey()

    def test_secret_key_object(self, tmp_path, user):
        path = tmp_path / "id.json"
        path.write_text(json.dumps({"secretKey": list(bytes(user))}))
        assert load_keypair(path).pubkey() == user.pubkey()

    def test_base58(self, tmp_path, user):
        path = tmp_path / "key.txt"
        path.write_text(base58.b58encode(bytes(user)).decode())
        assert load_keypair(path).pubkey() == user.pubkey()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_keypair(tmp_path / "nope.json")

    def test_garbage(self, tmp_path):
        path = tmp_path / "id.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ConfigError):
            load_keypair(path)

    def test_roundtrip_generated(self, tmp_path):
        kp = Keypair()
        path = tmp_path / "id.json"
        path.write_text(json.dumps(list(bytes(kp))))
        assert load_keypair(str(path)) == kp
