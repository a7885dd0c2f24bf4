import base64
from dataclasses import dataclass
from typing import Any

from solders.pubkey import Pubkey

from launchpad.codec import FieldSchema, decode

LAUNCHPAD_ACCOUNT_FIELDS: FieldSchema = (
    ("admin", "Pubkey"),
    ("signer", "Pubkey"),
)


@dataclass(frozen=True)
class LaunchpadAccount:
    """Global launchpad state: the admin key and the attestation signer."""

    admin: Pubkey
    signer: Pubkey

    schema = LAUNCHPAD_ACCOUNT_FIELDS

    @classmethod
    def from_bytes(cls, data: bytes) -> "LaunchpadAccount":
        return cls(**decode(cls.schema, data))

    def to_dict(self) -> dict:
        return {"admin": str(self.admin), "signer": str(self.signer)}


def account_data_bytes(data: Any) -> bytes:
    # RPC responses carry either raw bytes or a (data, encoding) pair
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, (list, tuple)):
        raw = data[0] if data else b""
        return bytes(raw) if isinstance(raw, (bytes, bytearray)) else base64.b64decode(raw)
    if isinstance(data, str):
        return base64.b64decode(data)
    return bytes(data)
