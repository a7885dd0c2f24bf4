from dataclasses import dataclass
from typing import List, Optional, Sequence

import base58
from borsh_construct import CStruct, U16, U8
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import MessageV0
from solders.pubkey import Pubkey

from launchpad.codec import PUBKEY_LEN, SIGNATURE_LEN
from launchpad.errors import SchemaError
from launchpad.instructions import (
    ProtocolVersion,
    encode_claim,
    encode_create_token,
    encode_initialize_launchpad,
    encode_initialize_sol_vault,
    encode_initialize_token_vault,
    encode_mint_token,
    encode_recycle_claim,
    encode_redeem,
    encode_refund_sol,
    encode_refund_token,
    encode_sol_pay,
    encode_token_pay,
)
from launchpad.pdas import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYS_PROGRAM_ID,
    SYSVAR_INSTRUCTIONS_PUBKEY,
    SYSVAR_RENT_PUBKEY,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    derive_ata,
    launchpad_pda,
    metadata_pda,
    mint_authority_pda,
    sol_vault_pda,
    token_vault_pda,
    user_claim_pda,
    user_redeem_pda,
    user_refund_pda,
)

ED25519_PROGRAM_ID = Pubkey.from_string("Ed25519SigVerify111111111111111111111111111")

# Offsets header of the native ed25519 program, one signature, data inline.
Ed25519OffsetsLayout = CStruct(
    "num_signatures" / U8,
    "padding" / U8,
    "signature_offset" / U16,
    "signature_instruction_index" / U16,
    "public_key_offset" / U16,
    "public_key_instruction_index" / U16,
    "message_data_offset" / U16,
    "message_data_size" / U16,
    "message_instruction_index" / U16,
)
ED25519_HEADER_LEN = 16
CURRENT_INSTRUCTION = 0xFFFF


@dataclass(frozen=True)
class Attestation:
    """Off-chain signature over a business fact, checked by the ed25519 program."""

    signer: Pubkey
    message: bytes
    signature: bytes

    def __post_init__(self):
        if len(self.signature) != SIGNATURE_LEN:
            raise SchemaError(f"attestation signature must be {SIGNATURE_LEN} bytes, got {len(self.signature)}")

    @classmethod
    def from_base58(cls, signer: str, message: str, signature: str) -> "Attestation":
        return cls(
            signer=Pubkey.from_string(signer),
            message=base58.b58decode(message),
            signature=base58.b58decode(signature),
        )


def build_ed25519_verify_ix(attestation: Attestation) -> Instruction:
    public_key_offset = ED25519_HEADER_LEN
    signature_offset = public_key_offset + PUBKEY_LEN
    message_offset = signature_offset + SIGNATURE_LEN
    header = Ed25519OffsetsLayout.build(
        {
            "num_signatures": 1,
            "padding": 0,
            "signature_offset": signature_offset,
            "signature_instruction_index": CURRENT_INSTRUCTION,
            "public_key_offset": public_key_offset,
            "public_key_instruction_index": CURRENT_INSTRUCTION,
            "message_data_offset": message_offset,
            "message_data_size": len(attestation.message),
            "message_instruction_index": CURRENT_INSTRUCTION,
        }
    )
    data = header + bytes(attestation.signer) + attestation.signature + attestation.message
    return Instruction(program_id=ED25519_PROGRAM_ID, data=data, accounts=[])


def assemble_instructions(
    program_ix: Instruction,
    attestation: Optional[Attestation] = None,
    extra: Sequence[Instruction] = (),
) -> List[Instruction]:
    """Order a transaction: signature check at index 0, program instruction right after it.

    The program reads the instruction immediately before its own, so ``extra``
    instructions always go after the program instruction.
    """
    ixs: List[Instruction] = []
    if attestation is not None:
        ixs.append(build_ed25519_verify_ix(attestation))
    ixs.append(program_ix)
    ixs.extend(extra)
    return ixs


def build_initialize_launchpad_ix(
    program_id: Pubkey, admin: Pubkey, signer: Pubkey, version: ProtocolVersion
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=admin, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=signer, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=encode_initialize_launchpad(version), accounts=accounts)


def build_initialize_sol_vault_ix(
    program_id: Pubkey, admin: Pubkey, lamports: int, version: ProtocolVersion
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=admin, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=False),
        AccountMeta(pubkey=sol_vault_pda(program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=encode_initialize_sol_vault(lamports, version), accounts=accounts)


def build_initialize_token_vault_ix(
    program_id: Pubkey, admin: Pubkey, mint: Pubkey, version: ProtocolVersion
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=admin, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=token_vault_pda(program_id, mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSVAR_RENT_PUBKEY, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=encode_initialize_token_vault(version), accounts=accounts)


def build_create_token_ix(
    program_id: Pubkey,
    admin: Pubkey,
    mint: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    decimals: int,
    version: ProtocolVersion,
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=admin, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=True, is_writable=True),
        AccountMeta(pubkey=mint_authority_pda(program_id), is_signer=False, is_writable=False),
        AccountMeta(pubkey=metadata_pda(mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_METADATA_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSVAR_RENT_PUBKEY, is_signer=False, is_writable=False),
    ]
    data = encode_create_token(name, symbol, uri, decimals, version)
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_mint_token_ix(
    program_id: Pubkey, admin: Pubkey, mint: Pubkey, amount: int, version: ProtocolVersion
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=admin, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint_authority_pda(program_id), is_signer=False, is_writable=False),
        AccountMeta(pubkey=token_vault_pda(program_id, mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=encode_mint_token(amount, version), accounts=accounts)


def build_sol_pay_ix(
    program_id: Pubkey,
    user: Pubkey,
    vault: Pubkey,
    amount: int,
    sol_price: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=user, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=vault, is_signer=False, is_writable=True),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSVAR_INSTRUCTIONS_PUBKEY, is_signer=False, is_writable=False),
    ]
    data = encode_sol_pay(amount, sol_price, expire_at, signature, version)
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_token_pay_ix(
    program_id: Pubkey,
    user: Pubkey,
    mint: Pubkey,
    recipient: Pubkey,
    amount: int,
    token_price: int,
    sol_price: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=user, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=recipient, is_signer=False, is_writable=True),
        AccountMeta(pubkey=derive_ata(user, mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=derive_ata(recipient, mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=SYSVAR_INSTRUCTIONS_PUBKEY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=ASSOCIATED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    data = encode_token_pay(amount, token_price, sol_price, expire_at, signature, version)
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def _vault_payout_accounts(
    program_id: Pubkey, user: Pubkey, mint: Pubkey, tracker: Optional[Pubkey]
) -> List[AccountMeta]:
    # user, launchpad, [per-user tracker], mint, vault, user ATA, then programs
    accounts = [
        AccountMeta(pubkey=user, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=True),
    ]
    if tracker is not None:
        accounts.append(AccountMeta(pubkey=tracker, is_signer=False, is_writable=True))
    accounts.extend(
        [
            AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
            AccountMeta(pubkey=token_vault_pda(program_id, mint), is_signer=False, is_writable=True),
            AccountMeta(pubkey=derive_ata(user, mint), is_signer=False, is_writable=True),
            AccountMeta(pubkey=SYSVAR_INSTRUCTIONS_PUBKEY, is_signer=False, is_writable=False),
            AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=ASSOCIATED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        ]
    )
    return accounts


def build_claim_ix(
    program_id: Pubkey,
    user: Pubkey,
    mint: Pubkey,
    amount: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
    claim_id: Optional[int] = None,
) -> Instruction:
    accounts = _vault_payout_accounts(program_id, user, mint, None)
    data = encode_claim(amount, expire_at, signature, version, claim_id=claim_id)
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_redeem_ix(
    program_id: Pubkey,
    user: Pubkey,
    mint: Pubkey,
    redeem_id: int,
    power_value: int,
    token_amount: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
) -> Instruction:
    accounts = _vault_payout_accounts(program_id, user, mint, user_redeem_pda(program_id, user, mint))
    data = encode_redeem(redeem_id, power_value, token_amount, expire_at, signature, version)
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_refund_token_ix(
    program_id: Pubkey,
    user: Pubkey,
    mint: Pubkey,
    refund_id: int,
    amount: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
) -> Instruction:
    accounts = _vault_payout_accounts(program_id, user, mint, user_refund_pda(program_id, user, mint))
    data = encode_refund_token(refund_id, amount, expire_at, signature, version)
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_refund_sol_ix(
    program_id: Pubkey,
    user: Pubkey,
    refund_id: int,
    amount: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
    sol_price: Optional[int] = None,
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=user, is_signer=True, is_writable=True),
        AccountMeta(pubkey=launchpad_pda(program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=user_refund_pda(program_id, user), is_signer=False, is_writable=True),
        AccountMeta(pubkey=sol_vault_pda(program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=SYSVAR_INSTRUCTIONS_PUBKEY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    data = encode_refund_sol(refund_id, amount, expire_at, signature, version, sol_price=sol_price)
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_recycle_claim_ix(
    program_id: Pubkey,
    user: Pubkey,
    mint: Pubkey,
    claim_id: int,
    amount: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
) -> Instruction:
    accounts = _vault_payout_accounts(program_id, user, mint, user_claim_pda(program_id, user, mint))
    data = encode_recycle_claim(claim_id, amount, expire_at, signature, version)
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_system_transfer_ix(sender: Pubkey, recipient: Pubkey, lamports: int) -> Instruction:
    # SystemProgram transfer: instruction = 2 (u32 LE) + lamports (u64 LE)
    data = (2).to_bytes(4, "little") + lamports.to_bytes(8, "little")
    accounts = [
        AccountMeta(pubkey=sender, is_signer=True, is_writable=True),
        AccountMeta(pubkey=recipient, is_signer=False, is_writable=True),
    ]
    return Instruction(program_id=SYS_PROGRAM_ID, data=data, accounts=accounts)


def message_from_instructions(ixs: List[Instruction], payer: Pubkey, blockhash: Hash | str) -> MessageV0:
    if isinstance(blockhash, str):
        blockhash = Hash.from_string(blockhash)
    return MessageV0.try_compile(payer, ixs, [], blockhash)
