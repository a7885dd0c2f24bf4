#!/usr/bin/env python3
"""
Launchpad end-to-end flow against devnet.

- Logs in to the launchpad backend with the configured keypair ("login" message).
- Fetches the signed parameters for the chosen operation.
- Submits the operation (ed25519 check + program instruction) and prints the explorer URL.

Configuration comes from .env (see launchpad.config.LaunchpadSettings).
"""

from __future__ import annotations

import argparse
import logging
import sys

from launchpad.api import LaunchpadApi
from launchpad.client import LaunchpadClient
from launchpad.config import LaunchpadSettings, load_keypair
from launchpad.errors import ConfigError, LaunchpadError

EXPLORER_TX = "https://explorer.solana.com/tx/{sig}?cluster=devnet"
DECIMALS = 10**6

logger = logging.getLogger("launchpad")


def run(op: str, amount: float, settings: LaunchpadSettings) -> str:
    if not settings.keypair_path:
        raise ConfigError("KEYPAIR_PATH must point to the user keypair")
    user = load_keypair(settings.keypair_path)
    client = LaunchpadClient.from_settings(settings)
    api = LaunchpadApi(settings.launchpad_api_prefix, timeout=settings.request_timeout)
    print(f"user: {user.pubkey()}")
    api.login(user)

    raw_amount = int(amount * DECIMALS)
    if op == "sol-pay":
        p = api.sol_pay_params(raw_amount)
        return client.sol_pay(user, raw_amount, p.sol_price, p.expire_at, p.vault_pubkey(), p.attestation())
    if op == "usdc-pay":
        p = api.usdc_pay_params(raw_amount)
        return client.token_pay(
            user,
            p.mint_pubkey(),
            p.vault_pubkey(),
            raw_amount,
            p.token_price,
            p.sol_price,
            p.expire_at,
            p.attestation(),
        )
    if op == "claim":
        p = api.claim_params()
        return client.claim(user, p.mint_pubkey(), p.amount, p.expire_at, p.attestation(), claim_id=p.claim_id)
    if op == "refund-sol":
        p = api.refund_sol_params()
        return client.refund_sol(user, p.refund_id, p.amount, p.expire_at, p.attestation(), sol_price=p.sol_price)
    if op == "refund-usdc":
        p = api.refund_usdc_params()
        return client.refund_token(user, p.mint_pubkey(), p.refund_id, p.amount, p.expire_at, p.attestation())
    if op == "status":
        account = client.query_launchpad_account()
        print(f"launchpad account: {account.to_dict() if account else None}")
        return ""
    raise ValueError(f"Unsupported operation {op}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one launchpad operation on devnet.")
    parser.add_argument(
        "op",
        choices=["sol-pay", "usdc-pay", "claim", "refund-sol", "refund-usdc", "status"],
    )
    parser.add_argument("--amount", type=float, default=0.1, help="whole-unit amount for pay operations")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        sig = run(args.op, args.amount, LaunchpadSettings())
    except LaunchpadError as exc:
        logger.error("launchpad_flow_failed op=%s error=%s", args.op, exc)
        sys.exit(1)
    if sig:
        print(args.op, EXPLORER_TX.format(sig=sig))


if __name__ == "__main__":
    main()
