"""
Transaction assembly tests
"""

import pytest
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature

from launchpad import pdas
from launchpad.errors import SchemaError
from launchpad.instructions import Opcode, ProtocolVersion
from launchpad.tx_builder import (
    ED25519_PROGRAM_ID,
    Attestation,
    assemble_instructions,
    build_claim_ix,
    build_create_token_ix,
    build_ed25519_verify_ix,
    build_initialize_launchpad_ix,
    build_recycle_claim_ix,
    build_refund_sol_ix,
    build_refund_token_ix,
    build_sol_pay_ix,
    build_system_transfer_ix,
    build_token_pay_ix,
    message_from_instructions,
)

V1 = ProtocolVersion.V1


def roles(ix):
    return [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts]


class TestEd25519Instruction:
    def test_layout(self, attestation):
        ix = build_ed25519_verify_ix(attestation)
        data = bytes(ix.data)
        assert ix.program_id == ED25519_PROGRAM_ID
        assert list(ix.accounts) == []
        assert data[0] == 1 and data[1] == 0
        offsets = [int.from_bytes(data[i : i + 2], "little") for i in range(2, 16, 2)]
        assert offsets == [48, 0xFFFF, 16, 0xFFFF, 112, len(attestation.message), 0xFFFF]
        assert data[16:48] == bytes(attestation.signer)
        assert data[48:112] == attestation.signature
        assert data[112:] == attestation.message

    def test_signature_verifies(self, attestation):
        data = bytes(build_ed25519_verify_ix(attestation).data)
        sig = Signature.from_bytes(data[48:112])
        assert sig.verify(Pubkey.from_bytes(data[16:48]), data[112:])

    def test_attestation_signature_length(self, backend_signer):
        with pytest.raises(SchemaError):
            Attestation(signer=backend_signer.pubkey(), message=b"m", signature=bytes(10))

    def test_from_base58(self, attestation):
        import base58

        parsed = Attestation.from_base58(
            str(attestation.signer),
            base58.b58encode(attestation.message).decode(),
            base58.b58encode(attestation.signature).decode(),
        )
        assert parsed == attestation


class TestAccountOrdering:
    def test_sol_pay(self, program_id, user, attestation):
        vault = Pubkey.from_bytes(bytes([4] * 32))
        ix = build_sol_pay_ix(program_id, user.pubkey(), vault, 100_000, 5_000_000, 1_700_000_000, attestation.signature, V1)
        assert ix.program_id == program_id
        assert roles(ix) == [
            (user.pubkey(), True, True),
            (pdas.launchpad_pda(program_id), False, True),
            (vault, False, True),
            (pdas.SYS_PROGRAM_ID, False, False),
            (pdas.SYSVAR_INSTRUCTIONS_PUBKEY, False, False),
        ]
        assert bytes(ix.data)[0] == Opcode.SOL_PAY
        assert len(bytes(ix.data)) == 89

    def test_token_pay(self, program_id, user, mint, attestation):
        recipient = Pubkey.from_bytes(bytes([5] * 32))
        ix = build_token_pay_ix(program_id, user.pubkey(), mint, recipient, 1, 2, 3, 4, attestation.signature, V1)
        assert roles(ix) == [
            (user.pubkey(), True, True),
            (pdas.launchpad_pda(program_id), False, True),
            (mint, False, True),
            (recipient, False, True),
            (pdas.derive_ata(user.pubkey(), mint), False, True),
            (pdas.derive_ata(recipient, mint), False, True),
            (pdas.SYSVAR_INSTRUCTIONS_PUBKEY, False, False),
            (pdas.TOKEN_PROGRAM_ID, False, False),
            (pdas.ASSOCIATED_TOKEN_PROGRAM_ID, False, False),
            (pdas.SYS_PROGRAM_ID, False, False),
        ]

    def test_claim(self, program_id, user, mint, attestation):
        ix = build_claim_ix(program_id, user.pubkey(), mint, 10, 20, attestation.signature, V1)
        assert [r[0] for r in roles(ix)] == [
            user.pubkey(),
            pdas.launchpad_pda(program_id),
            mint,
            pdas.token_vault_pda(program_id, mint),
            pdas.derive_ata(user.pubkey(), mint),
            pdas.SYSVAR_INSTRUCTIONS_PUBKEY,
            pdas.TOKEN_PROGRAM_ID,
            pdas.ASSOCIATED_TOKEN_PROGRAM_ID,
            pdas.SYS_PROGRAM_ID,
        ]

    def test_refund_token_includes_tracker(self, program_id, user, mint, attestation):
        ix = build_refund_token_ix(program_id, user.pubkey(), mint, 1, 2, 3, attestation.signature, V1)
        assert roles(ix)[2] == (pdas.user_refund_pda(program_id, user.pubkey(), mint), False, True)
        assert len(ix.accounts) == 10

    def test_refund_sol(self, program_id, user, attestation):
        ix = build_refund_sol_ix(program_id, user.pubkey(), 1, 2, 3, attestation.signature, V1)
        assert roles(ix) == [
            (user.pubkey(), True, True),
            (pdas.launchpad_pda(program_id), False, True),
            (pdas.user_refund_pda(program_id, user.pubkey()), False, True),
            (pdas.sol_vault_pda(program_id), False, True),
            (pdas.SYSVAR_INSTRUCTIONS_PUBKEY, False, False),
            (pdas.SYS_PROGRAM_ID, False, False),
        ]

    def test_recycle_claim_tracker(self, program_id, user, mint, attestation):
        ix = build_recycle_claim_ix(program_id, user.pubkey(), mint, 1, 2, 3, attestation.signature, ProtocolVersion.V2)
        assert roles(ix)[2] == (pdas.user_claim_pda(program_id, user.pubkey(), mint), False, True)
        assert bytes(ix.data)[0] == Opcode.RECYCLE_CLAIM

    def test_create_token_mint_signs(self, program_id, user, mint):
        ix = build_create_token_ix(program_id, user.pubkey(), mint, "Kepler", "KEP", "uri", 6, V1)
        assert roles(ix)[2] == (mint, True, True)
        assert roles(ix)[3] == (pdas.mint_authority_pda(program_id), False, False)

    def test_initialize_launchpad(self, program_id, user, backend_signer):
        ix = build_initialize_launchpad_ix(program_id, user.pubkey(), backend_signer.pubkey(), V1)
        assert bytes(ix.data) == b"\x00"
        assert roles(ix)[1] == (pdas.launchpad_pda(program_id), False, True)


class TestAssembly:
    def test_signature_check_first(self, program_id, user, attestation):
        vault = Pubkey.from_bytes(bytes([4] * 32))
        program_ix = build_sol_pay_ix(program_id, user.pubkey(), vault, 1, 2, 3, attestation.signature, V1)
        ixs = assemble_instructions(program_ix, attestation)
        assert len(ixs) == 2
        assert ixs[0].program_id == ED25519_PROGRAM_ID
        assert ixs[1] == program_ix

    def test_without_attestation(self, program_id, user, backend_signer):
        program_ix = build_initialize_launchpad_ix(program_id, user.pubkey(), backend_signer.pubkey(), V1)
        assert assemble_instructions(program_ix) == [program_ix]

    def test_extra_instructions_follow_program(self, program_id, user, attestation):
        transfer = build_system_transfer_ix(user.pubkey(), program_id, 10)
        program_ix = build_claim_ix(program_id, user.pubkey(), user.pubkey(), 1, 2, attestation.signature, V1)
        ixs = assemble_instructions(program_ix, attestation, extra=[transfer])
        assert [ix.program_id for ix in ixs] == [ED25519_PROGRAM_ID, program_id, pdas.SYS_PROGRAM_ID]
        assert ixs[1] == program_ix

    def test_message_compiles(self, program_id, user, attestation):
        vault = Pubkey.from_bytes(bytes([4] * 32))
        program_ix = build_sol_pay_ix(program_id, user.pubkey(), vault, 1, 2, 3, attestation.signature, V1)
        message = message_from_instructions(assemble_instructions(program_ix, attestation), user.pubkey(), Hash.default())
        assert message.account_keys[0] == user.pubkey()
        assert message.header.num_required_signatures == 1
        keys = message.account_keys
        assert keys[message.instructions[0].program_id_index] == ED25519_PROGRAM_ID
        assert keys[message.instructions[1].program_id_index] == program_id


class TestHelpers:
    def test_system_transfer_data(self, user):
        ix = build_system_transfer_ix(user.pubkey(), Pubkey.from_bytes(bytes([8] * 32)), 1_000)
        assert bytes(ix.data) == (2).to_bytes(4, "little") + (1_000).to_bytes(8, "little")
