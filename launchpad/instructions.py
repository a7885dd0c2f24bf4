"""Launchpad instruction payloads.

Every payload is ``[opcode: u8] ++ encode(schema, fields)``. The opcode numbers
and field orders are shared with the deployed program and carry no version
byte, so the caller picks the protocol revision explicitly.
"""

from enum import IntEnum
from typing import Any, Dict, Mapping

from launchpad.codec import SIGNATURE, FieldSchema, encode
from launchpad.errors import SchemaError


class ProtocolVersion(IntEnum):
    V1 = 1
    V2 = 2


class Opcode(IntEnum):
    INITIALIZE_LAUNCHPAD = 0
    CREATE_TOKEN = 1
    MINT_TOKEN = 2
    INITIALIZE_SOL_VAULT = 3
    INITIALIZE_TOKEN_VAULT = 4
    SOL_PAY = 5
    TOKEN_PAY = 6
    CLAIM = 7
    REFUND_TOKEN = 8
    REFUND_SOL = 9
    REDEEM = 10
    RECYCLE_CLAIM = 11


_COMMON_SCHEMAS: Dict[Opcode, FieldSchema] = {
    Opcode.INITIALIZE_LAUNCHPAD: (),
    Opcode.INITIALIZE_TOKEN_VAULT: (),
    Opcode.INITIALIZE_SOL_VAULT: (("lamports", "u64"),),
    Opcode.CREATE_TOKEN: (
        ("name", "string"),
        ("symbol", "string"),
        ("uri", "string"),
        ("decimals", "u8"),
    ),
    Opcode.MINT_TOKEN: (("amount", "u64"),),
    Opcode.SOL_PAY: (
        ("amount", "u64"),
        ("solPrice", "u64"),
        ("expireAt", "u64"),
        ("signature", SIGNATURE),
    ),
    Opcode.TOKEN_PAY: (
        ("amount", "u64"),
        ("tokenPrice", "u64"),
        ("solPrice", "u64"),
        ("expireAt", "u64"),
        ("signature", SIGNATURE),
    ),
    Opcode.REDEEM: (
        ("redeemId", "u64"),
        ("powerValue", "u64"),
        ("tokenAmount", "u64"),
        ("expireAt", "u64"),
        ("signature", SIGNATURE),
    ),
    Opcode.REFUND_TOKEN: (
        ("refundId", "u64"),
        ("amount", "u64"),
        ("expireAt", "u64"),
        ("signature", SIGNATURE),
    ),
}

SCHEMAS: Dict[ProtocolVersion, Dict[Opcode, FieldSchema]] = {
    ProtocolVersion.V1: {
        **_COMMON_SCHEMAS,
        Opcode.CLAIM: (
            ("amount", "u64"),
            ("expireAt", "u64"),
            ("signature", SIGNATURE),
        ),
        Opcode.REFUND_SOL: (
            ("refundId", "u64"),
            ("amount", "u64"),
            ("expireAt", "u64"),
            ("signature", SIGNATURE),
        ),
    },
    ProtocolVersion.V2: {
        **_COMMON_SCHEMAS,
        Opcode.CLAIM: (
            ("claimId", "u64"),
            ("amount", "u64"),
            ("expireAt", "u64"),
            ("signature", SIGNATURE),
        ),
        Opcode.REFUND_SOL: (
            ("refundId", "u64"),
            ("solAmount", "u64"),
            ("solPrice", "u64"),
            ("expireAt", "u64"),
            ("signature", SIGNATURE),
        ),
        Opcode.RECYCLE_CLAIM: (
            ("claimId", "u64"),
            ("amount", "u64"),
            ("expireAt", "u64"),
            ("signature", SIGNATURE),
        ),
    },
}


def schema_for(opcode: Opcode, version: ProtocolVersion) -> FieldSchema:
    try:
        table = SCHEMAS[ProtocolVersion(version)]
    except ValueError as exc:
        raise SchemaError(f"unknown protocol version: {version!r}") from exc
    try:
        return table[Opcode(opcode)]
    except (KeyError, ValueError) as exc:
        raise SchemaError(f"opcode {opcode!r} is not part of protocol {ProtocolVersion(version).name}") from exc


def build_instruction_data(opcode: Opcode, fields: Mapping[str, Any], version: ProtocolVersion) -> bytes:
    schema = schema_for(opcode, version)
    return bytes([int(opcode)]) + encode(schema, fields)


def encode_initialize_launchpad(version: ProtocolVersion) -> bytes:
    return build_instruction_data(Opcode.INITIALIZE_LAUNCHPAD, {}, version)


def encode_initialize_token_vault(version: ProtocolVersion) -> bytes:
    return build_instruction_data(Opcode.INITIALIZE_TOKEN_VAULT, {}, version)


def encode_initialize_sol_vault(lamports: int, version: ProtocolVersion) -> bytes:
    return build_instruction_data(Opcode.INITIALIZE_SOL_VAULT, {"lamports": lamports}, version)


def encode_create_token(name: str, symbol: str, uri: str, decimals: int, version: ProtocolVersion) -> bytes:
    return build_instruction_data(
        Opcode.CREATE_TOKEN,
        {"name": name, "symbol": symbol, "uri": uri, "decimals": decimals},
        version,
    )


def encode_mint_token(amount: int, version: ProtocolVersion) -> bytes:
    return build_instruction_data(Opcode.MINT_TOKEN, {"amount": amount}, version)


def encode_sol_pay(amount: int, sol_price: int, expire_at: int, signature: bytes, version: ProtocolVersion) -> bytes:
    return build_instruction_data(
        Opcode.SOL_PAY,
        {"amount": amount, "solPrice": sol_price, "expireAt": expire_at, "signature": signature},
        version,
    )


def encode_token_pay(
    amount: int,
    token_price: int,
    sol_price: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
) -> bytes:
    return build_instruction_data(
        Opcode.TOKEN_PAY,
        {
            "amount": amount,
            "tokenPrice": token_price,
            "solPrice": sol_price,
            "expireAt": expire_at,
            "signature": signature,
        },
        version,
    )


def encode_claim(amount: int, expire_at: int, signature: bytes, version: ProtocolVersion, claim_id: int | None = None) -> bytes:
    fields: Dict[str, Any] = {"amount": amount, "expireAt": expire_at, "signature": signature}
    if ProtocolVersion(version) >= ProtocolVersion.V2:
        if claim_id is None:
            raise SchemaError("claim_id is required from protocol V2 on")
        fields["claimId"] = claim_id
    elif claim_id is not None:
        raise SchemaError(f"claim_id is not part of the protocol V{int(version)} Claim payload")
    return build_instruction_data(Opcode.CLAIM, fields, version)


def encode_redeem(
    redeem_id: int,
    power_value: int,
    token_amount: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
) -> bytes:
    return build_instruction_data(
        Opcode.REDEEM,
        {
            "redeemId": redeem_id,
            "powerValue": power_value,
            "tokenAmount": token_amount,
            "expireAt": expire_at,
            "signature": signature,
        },
        version,
    )


def encode_refund_token(refund_id: int, amount: int, expire_at: int, signature: bytes, version: ProtocolVersion) -> bytes:
    return build_instruction_data(
        Opcode.REFUND_TOKEN,
        {"refundId": refund_id, "amount": amount, "expireAt": expire_at, "signature": signature},
        version,
    )


def encode_refund_sol(
    refund_id: int,
    amount: int,
    expire_at: int,
    signature: bytes,
    version: ProtocolVersion,
    sol_price: int | None = None,
) -> bytes:
    if ProtocolVersion(version) >= ProtocolVersion.V2:
        if sol_price is None:
            raise SchemaError("sol_price is required from protocol V2 on")
        fields = {
            "refundId": refund_id,
            "solAmount": amount,
            "solPrice": sol_price,
            "expireAt": expire_at,
            "signature": signature,
        }
    else:
        if sol_price is not None:
            raise SchemaError(f"sol_price is not part of the protocol V{int(version)} RefundSOL payload")
        fields = {"refundId": refund_id, "amount": amount, "expireAt": expire_at, "signature": signature}
    return build_instruction_data(Opcode.REFUND_SOL, fields, version)


def encode_recycle_claim(claim_id: int, amount: int, expire_at: int, signature: bytes, version: ProtocolVersion) -> bytes:
    return build_instruction_data(
        Opcode.RECYCLE_CLAIM,
        {"claimId": claim_id, "amount": amount, "expireAt": expire_at, "signature": signature},
        version,
    )
