import json
from pathlib import Path
from typing import Optional

import base58
from pydantic_settings import BaseSettings
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from launchpad.errors import ConfigError

DEFAULT_RPC = "https://api.devnet.solana.com"


class LaunchpadSettings(BaseSettings):
    solana_rpc: str = DEFAULT_RPC
    launchpad_program_id: Optional[str] = None
    launchpad_api_prefix: str = "https://b.kepler.homes/api/launchpad/solana"
    protocol_version: int = 1
    skip_preflight: bool = False
    request_timeout: float = 15.0
    keypair_path: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def program_id(self) -> Pubkey:
        return load_pubkey(self.launchpad_program_id, "LAUNCHPAD_PROGRAM_ID")


def load_pubkey(value: Optional[str], name: str = "pubkey") -> Pubkey:
    if not value:
        raise ConfigError(f"{name} must be set to a valid address")
    try:
        return Pubkey.from_string(value)
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"{name} is not a valid pubkey: {exc}") from exc


def load_keypair(path: str | Path) -> Keypair:
    """Load a signing key from a Solana CLI JSON file or a base58 secret."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Keypair file not found: {path}")
    text = path.read_text(encoding="utf-8").strip()
    try:
        if text.startswith("[") or text.startswith("{"):
            raw = json.loads(text)
            if isinstance(raw, list):
                secret = bytes(raw)
            elif isinstance(raw, dict) and "secretKey" in raw:
                secret = bytes(raw["secretKey"])
            elif isinstance(raw, dict) and "privateKey" in raw:
                secret = base58.b58decode(raw["privateKey"])
            else:
                raise ConfigError("Unsupported keypair file format")
        else:
            secret = base58.b58decode(text)
        return Keypair.from_bytes(secret)
    except ConfigError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"Failed to parse keypair {path}: {exc}") from exc
