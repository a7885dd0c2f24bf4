from functools import lru_cache
from typing import Optional, Sequence, Tuple

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from launchpad.errors import DerivationError

SYS_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
SYSVAR_RENT_PUBKEY = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
SYSVAR_INSTRUCTIONS_PUBKEY = Pubkey.from_string("Sysvar1nstructions1111111111111111111111111")

LAUNCHPAD_SEED = b"Launchpad"
MINT_AUTHORITY_SEED = b"MintAuthority"
TOKEN_VAULT_SEED = b"TokenVault"
SOL_VAULT_SEED = b"SolVault"
REFUND_SEED = b"Refund"
REDEEM_SEED = b"Redeem"
CLAIM_SEED = b"Claim"

MAX_SEED_LEN = 32
MAX_SEEDS = 16


def find_program_address_with_bump(seeds: Sequence[bytes], program_id: Pubkey) -> Tuple[Pubkey, int]:
    if len(seeds) >= MAX_SEEDS:
        raise DerivationError(f"too many seeds: {len(seeds)} (max {MAX_SEEDS - 1} plus bump)")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise DerivationError(f"seed longer than {MAX_SEED_LEN} bytes: {seed!r}")
    try:
        return _find(tuple(bytes(s) for s in seeds), program_id)
    except Exception as exc:  # noqa: BLE001
        raise DerivationError(f"no program address for seeds under {program_id}: {exc}") from exc


@lru_cache(maxsize=256)
def _find(seeds: Tuple[bytes, ...], program_id: Pubkey) -> Tuple[Pubkey, int]:
    return Pubkey.find_program_address(list(seeds), program_id)


def find_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey:
    pda, _ = find_program_address_with_bump(seeds, program_id)
    return pda


def launchpad_pda(program_id: Pubkey) -> Pubkey:
    return find_program_address([LAUNCHPAD_SEED], program_id)


def mint_authority_pda(program_id: Pubkey) -> Pubkey:
    return find_program_address([MINT_AUTHORITY_SEED], program_id)


def token_vault_pda(program_id: Pubkey, mint: Pubkey) -> Pubkey:
    return find_program_address([TOKEN_VAULT_SEED, bytes(mint)], program_id)


def sol_vault_pda(program_id: Pubkey) -> Pubkey:
    return find_program_address([SOL_VAULT_SEED], program_id)


def _user_pda(tag: bytes, program_id: Pubkey, user: Pubkey, mint: Optional[Pubkey]) -> Pubkey:
    seeds = [tag, bytes(user)]
    if mint is not None:
        seeds.append(bytes(mint))
    return find_program_address(seeds, program_id)


def user_refund_pda(program_id: Pubkey, user: Pubkey, mint: Optional[Pubkey] = None) -> Pubkey:
    return _user_pda(REFUND_SEED, program_id, user, mint)


def user_redeem_pda(program_id: Pubkey, user: Pubkey, mint: Optional[Pubkey] = None) -> Pubkey:
    return _user_pda(REDEEM_SEED, program_id, user, mint)


def user_claim_pda(program_id: Pubkey, user: Pubkey, mint: Optional[Pubkey] = None) -> Pubkey:
    return _user_pda(CLAIM_SEED, program_id, user, mint)


def derive_ata(owner: Pubkey, mint: Pubkey) -> Pubkey:
    return get_associated_token_address(owner, mint)


def metadata_pda(mint: Pubkey) -> Pubkey:
    return find_program_address(
        [b"metadata", bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)], TOKEN_METADATA_PROGRAM_ID
    )
