"""One method per launchpad business operation.

Each call derives its program addresses, encodes the payload, prepends the
ed25519 check when the operation carries an attestation, signs with the fee
payer, submits, and waits for confirmation. Nothing here retries; the program
rejects stale resubmissions through ``expireAt``.
"""

import logging
from typing import List, Optional, Sequence

from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from launchpad.accounts import LaunchpadAccount, account_data_bytes
from launchpad.config import LaunchpadSettings
from launchpad.errors import NetworkError, ProgramRejectionError
from launchpad.instructions import ProtocolVersion
from launchpad.pdas import launchpad_pda
from launchpad.tx_builder import (
    Attestation,
    assemble_instructions,
    build_claim_ix,
    build_create_token_ix,
    build_initialize_launchpad_ix,
    build_initialize_sol_vault_ix,
    build_initialize_token_vault_ix,
    build_mint_token_ix,
    build_recycle_claim_ix,
    build_redeem_ix,
    build_refund_sol_ix,
    build_refund_token_ix,
    build_sol_pay_ix,
    build_system_transfer_ix,
    build_token_pay_ix,
    message_from_instructions,
)

logger = logging.getLogger("launchpad")

LAMPORTS_PER_SOL = 1_000_000_000


class LaunchpadClient:
    def __init__(
        self,
        connection: Client,
        program_id: Pubkey,
        version: ProtocolVersion,
        skip_preflight: bool = False,
        commitment: Commitment = Confirmed,
    ):
        self.connection = connection
        self.program_id = program_id
        self.version = ProtocolVersion(version)
        self.skip_preflight = skip_preflight
        self.commitment = commitment

    @classmethod
    def from_settings(cls, settings: LaunchpadSettings, connection: Optional[Client] = None) -> "LaunchpadClient":
        return cls(
            connection or Client(settings.solana_rpc, commitment=Confirmed, timeout=settings.request_timeout),
            settings.program_id(),
            ProtocolVersion(settings.protocol_version),
            skip_preflight=settings.skip_preflight,
        )

    # -- submission -----------------------------------------------------

    def send(
        self,
        payer: Keypair,
        ixs: List[Instruction],
        extra_signers: Sequence[Keypair] = (),
        skip_preflight: Optional[bool] = None,
    ) -> str:
        skip = self.skip_preflight if skip_preflight is None else skip_preflight
        try:
            blockhash = self.connection.get_latest_blockhash(commitment=self.commitment).value.blockhash
        except (RPCException, SolanaRpcException) as exc:
            raise NetworkError(f"Failed to fetch blockhash: {exc}") from exc
        message = message_from_instructions(ixs, payer.pubkey(), blockhash)
        tx = VersionedTransaction(message, [payer, *extra_signers])
        try:
            resp = self.connection.send_raw_transaction(
                bytes(tx), opts=TxOpts(skip_preflight=skip, preflight_commitment=self.commitment)
            )
        except RPCException as exc:
            logger.warning("launchpad_send_rejected payer=%s error=%s", payer.pubkey(), exc)
            raise ProgramRejectionError(f"transaction rejected: {exc}") from exc
        except SolanaRpcException as exc:
            raise NetworkError(f"send_raw_transaction failed: {exc}") from exc
        signature = resp.value
        self._confirm(signature)
        logger.info("launchpad_tx_confirmed payer=%s sig=%s ixs=%s", payer.pubkey(), signature, len(ixs))
        return str(signature)

    def _confirm(self, signature: Signature) -> None:
        try:
            resp = self.connection.confirm_transaction(signature, commitment=self.commitment)
        except UnconfirmedTxError as exc:
            raise NetworkError(f"transaction {signature} not confirmed: {exc}") from exc
        except (RPCException, SolanaRpcException) as exc:
            raise NetworkError(f"confirm_transaction failed for {signature}: {exc}") from exc
        statuses = resp.value or []
        status = statuses[0] if statuses else None
        if status is not None and status.err is not None:
            raise ProgramRejectionError(f"transaction {signature} failed: {status.err}", signature=str(signature))

    def _send_attested(
        self, payer: Keypair, program_ix: Instruction, attestation: Attestation, skip_preflight: Optional[bool] = None
    ) -> str:
        return self.send(payer, assemble_instructions(program_ix, attestation), skip_preflight=skip_preflight)

    # -- reads ----------------------------------------------------------

    def query_launchpad_account(self) -> Optional[LaunchpadAccount]:
        pda = launchpad_pda(self.program_id)
        try:
            resp = self.connection.get_account_info(pda, commitment=self.commitment)
        except SolanaRpcException as exc:
            raise NetworkError(f"get_account_info {pda} failed: {exc}") from exc
        if resp.value is None or resp.value.data is None:
            return None
        return LaunchpadAccount.from_bytes(account_data_bytes(resp.value.data))

    def get_token_balance(self, token_account: Pubkey) -> dict:
        """Balance of an SPL token account, or ``{}`` when it cannot be read."""
        try:
            value = self.connection.get_token_account_balance(token_account, commitment=self.commitment).value
        except Exception as exc:  # noqa: BLE001
            logger.warning("launchpad_token_balance_failed account=%s error=%s", token_account, exc)
            return {}
        return {
            "amount": int(value.amount),
            "decimals": value.decimals,
            "ui_amount_string": value.ui_amount_string,
        }

    def get_balance(self, address: Pubkey) -> int:
        try:
            return self.connection.get_balance(address, commitment=self.commitment).value
        except SolanaRpcException as exc:
            raise NetworkError(f"get_balance {address} failed: {exc}") from exc

    # -- admin ----------------------------------------------------------

    def initialize_launchpad(self, admin: Keypair, signer: Pubkey) -> str:
        ix = build_initialize_launchpad_ix(self.program_id, admin.pubkey(), signer, self.version)
        return self.send(admin, [ix])

    def initialize_sol_vault(self, admin: Keypair, lamports: int) -> str:
        ix = build_initialize_sol_vault_ix(self.program_id, admin.pubkey(), lamports, self.version)
        return self.send(admin, [ix])

    def initialize_token_vault(self, admin: Keypair, mint: Pubkey) -> str:
        ix = build_initialize_token_vault_ix(self.program_id, admin.pubkey(), mint, self.version)
        return self.send(admin, [ix])

    def create_token(self, admin: Keypair, mint: Keypair, name: str, symbol: str, uri: str, decimals: int) -> str:
        ix = build_create_token_ix(
            self.program_id, admin.pubkey(), mint.pubkey(), name, symbol, uri, decimals, self.version
        )
        return self.send(admin, [ix], extra_signers=[mint])

    def mint_token(self, admin: Keypair, mint: Pubkey, amount: int) -> str:
        ix = build_mint_token_ix(self.program_id, admin.pubkey(), mint, amount, self.version)
        return self.send(admin, [ix])

    # -- attested user operations -----------------------------------------

    def sol_pay(
        self,
        user: Keypair,
        amount: int,
        sol_price: int,
        expire_at: int,
        vault: Pubkey,
        attestation: Attestation,
    ) -> str:
        ix = build_sol_pay_ix(
            self.program_id, user.pubkey(), vault, amount, sol_price, expire_at, attestation.signature, self.version
        )
        # sol pay always goes out without preflight simulation
        return self._send_attested(user, ix, attestation, skip_preflight=True)

    def token_pay(
        self,
        user: Keypair,
        mint: Pubkey,
        recipient: Pubkey,
        amount: int,
        token_price: int,
        sol_price: int,
        expire_at: int,
        attestation: Attestation,
    ) -> str:
        ix = build_token_pay_ix(
            self.program_id,
            user.pubkey(),
            mint,
            recipient,
            amount,
            token_price,
            sol_price,
            expire_at,
            attestation.signature,
            self.version,
        )
        return self._send_attested(user, ix, attestation)

    def claim(
        self,
        user: Keypair,
        mint: Pubkey,
        amount: int,
        expire_at: int,
        attestation: Attestation,
        claim_id: Optional[int] = None,
    ) -> str:
        ix = build_claim_ix(
            self.program_id, user.pubkey(), mint, amount, expire_at, attestation.signature, self.version, claim_id
        )
        return self._send_attested(user, ix, attestation)

    def redeem(
        self,
        user: Keypair,
        mint: Pubkey,
        redeem_id: int,
        power_value: int,
        token_amount: int,
        expire_at: int,
        attestation: Attestation,
    ) -> str:
        ix = build_redeem_ix(
            self.program_id,
            user.pubkey(),
            mint,
            redeem_id,
            power_value,
            token_amount,
            expire_at,
            attestation.signature,
            self.version,
        )
        return self._send_attested(user, ix, attestation)

    def refund_token(
        self,
        user: Keypair,
        mint: Pubkey,
        refund_id: int,
        amount: int,
        expire_at: int,
        attestation: Attestation,
    ) -> str:
        ix = build_refund_token_ix(
            self.program_id, user.pubkey(), mint, refund_id, amount, expire_at, attestation.signature, self.version
        )
        return self._send_attested(user, ix, attestation)

    def refund_sol(
        self,
        user: Keypair,
        refund_id: int,
        amount: int,
        expire_at: int,
        attestation: Attestation,
        sol_price: Optional[int] = None,
    ) -> str:
        ix = build_refund_sol_ix(
            self.program_id,
            user.pubkey(),
            refund_id,
            amount,
            expire_at,
            attestation.signature,
            self.version,
            sol_price=sol_price,
        )
        return self._send_attested(user, ix, attestation)

    def recycle_claim(
        self,
        user: Keypair,
        mint: Pubkey,
        claim_id: int,
        amount: int,
        expire_at: int,
        attestation: Attestation,
    ) -> str:
        ix = build_recycle_claim_ix(
            self.program_id, user.pubkey(), mint, claim_id, amount, expire_at, attestation.signature, self.version
        )
        return self._send_attested(user, ix, attestation)

    # -- devnet helpers -------------------------------------------------

    def request_airdrop(self, user: Pubkey, sol: float = 1.0) -> str:
        try:
            signature = self.connection.request_airdrop(user, int(sol * LAMPORTS_PER_SOL)).value
        except RPCException as exc:
            raise ProgramRejectionError(f"airdrop rejected: {exc}") from exc
        except SolanaRpcException as exc:
            raise NetworkError(f"request_airdrop failed: {exc}") from exc
        self._confirm(signature)
        return str(signature)

    def transfer_sol(self, sender: Keypair, recipient: Pubkey, lamports: int) -> str:
        return self.send(sender, [build_system_transfer_ix(sender.pubkey(), recipient, lamports)])
