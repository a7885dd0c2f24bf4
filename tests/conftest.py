"""
Launchpad SDK test fixtures
"""

from types import SimpleNamespace

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from launchpad.instructions import ProtocolVersion
from launchpad.tx_builder import Attestation

PROGRAM_ID = Pubkey.from_string("Bjxk4pzkq8TVRMvK38Kfm56GRJPNvHkS8FUAgdvTGzEu")


@pytest.fixture
def program_id() -> Pubkey:
    return PROGRAM_ID


@pytest.fixture
def user() -> Keypair:
    return Keypair.from_seed(bytes([7] * 32))


@pytest.fixture
def backend_signer() -> Keypair:
    return Keypair.from_seed(bytes([42] * 32))


@pytest.fixture
def mint() -> Pubkey:
    return Keypair.from_seed(bytes([9] * 32)).pubkey()


@pytest.fixture
def attestation(backend_signer, user) -> Attestation:
    message = f"{user.pubkey()}:100000:1700000000".encode()
    signature = backend_signer.sign_message(message)
    return Attestation(signer=backend_signer.pubkey(), message=message, signature=bytes(signature))


class FakeConnection:
    """In-memory stand-in for solana.rpc.api.Client."""

    def __init__(self, account_data=None, tx_err=None):
        self.sent = []
        self.account_data = account_data
        self.tx_err = tx_err
        self.signature = Signature.default()

    def get_latest_blockhash(self, commitment=None):
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default(), last_valid_block_height=100))

    def send_raw_transaction(self, txn, opts=None):
        self.sent.append((bytes(txn), opts))
        return SimpleNamespace(value=self.signature)

    def confirm_transaction(self, tx_sig, commitment=None):
        return SimpleNamespace(value=[SimpleNamespace(err=self.tx_err)])

    def get_account_info(self, pubkey, commitment=None):
        if self.account_data is None:
            return SimpleNamespace(value=None)
        return SimpleNamespace(value=SimpleNamespace(data=self.account_data))

    def get_token_account_balance(self, pubkey, commitment=None):
        raise RuntimeError("could not find account")

    def get_balance(self, pubkey, commitment=None):
        return SimpleNamespace(value=5_000_000_000)


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture(params=[ProtocolVersion.V1, ProtocolVersion.V2], ids=["v1", "v2"])
def version(request) -> ProtocolVersion:
    return request.param
