"""Client SDK for the launchpad program: payload encoding, PDAs and submission."""

from launchpad.accounts import LaunchpadAccount
from launchpad.api import LaunchpadApi
from launchpad.client import LaunchpadClient
from launchpad.config import LaunchpadSettings, load_keypair
from launchpad.errors import (
    ConfigError,
    DerivationError,
    LaunchpadError,
    NetworkError,
    ProgramRejectionError,
    SchemaError,
    TruncationError,
)
from launchpad.instructions import Opcode, ProtocolVersion, build_instruction_data
from launchpad.tx_builder import Attestation

__all__ = [
    "Attestation",
    "ConfigError",
    "DerivationError",
    "LaunchpadAccount",
    "LaunchpadApi",
    "LaunchpadClient",
    "LaunchpadError",
    "LaunchpadSettings",
    "NetworkError",
    "Opcode",
    "ProgramRejectionError",
    "ProtocolVersion",
    "SchemaError",
    "TruncationError",
    "build_instruction_data",
    "load_keypair",
]
