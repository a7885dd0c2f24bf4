import logging
from typing import Any, Dict, Optional, Type, TypeVar

import base58
import requests
from pydantic import BaseModel, ValidationError
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from launchpad.errors import NetworkError
from launchpad.tx_builder import Attestation

logger = logging.getLogger("launchpad")

LOGIN_MESSAGE = b"login"


class SignedParams(BaseModel):
    expire_at: int
    message: str
    signature: str
    signer: str

    def attestation(self) -> Attestation:
        return Attestation.from_base58(self.signer, self.message, self.signature)


class SolPayParams(SignedParams):
    vault: str
    sol_price: int

    def vault_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.vault)


class UsdcPayParams(SignedParams):
    vault: str
    usdc: str
    token_price: int
    sol_price: int

    def vault_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.vault)

    def mint_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.usdc)


class ClaimParams(SignedParams):
    amount: int
    mint: str
    claim_id: Optional[int] = None

    def mint_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.mint)


class RefundSolParams(SignedParams):
    amount: int
    refund_id: int
    sol_price: Optional[int] = None


class RefundUsdcParams(SignedParams):
    amount: int
    refund_id: int
    usdc: str

    def mint_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.usdc)


P = TypeVar("P", bound=BaseModel)


class LaunchpadApi:
    """Client of the backend that issues signed payment/claim/refund parameters."""

    def __init__(self, prefix: str, timeout: float = 15.0, session: Optional[requests.Session] = None):
        self.prefix = prefix.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token: Optional[str] = None

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.prefix}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise NetworkError(f"GET {path} failed: {exc}") from exc
        except ValueError as exc:
            raise NetworkError(f"GET {path} returned non-JSON body") from exc
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise NetworkError(f"GET {path} response missing data: {body!r}")
        logger.debug("launchpad_api path=%s keys=%s", path, sorted(data))
        return data

    def _authorized(self, path: str, model: Type[P], **params: Any) -> P:
        if not self.token:
            raise NetworkError("not logged in; call login() first")
        data = self._get(path, {"Authorization": self.token, **params})
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise NetworkError(f"GET {path} returned malformed params: {exc}") from exc

    def login(self, keypair: Keypair) -> str:
        signature = keypair.sign_message(LOGIN_MESSAGE)
        data = self._get(
            "/user/login",
            {"address": str(keypair.pubkey()), "signature": base58.b58encode(bytes(signature)).decode()},
        )
        token = data.get("token")
        if not token:
            raise NetworkError("login response missing token")
        self.token = str(token)
        logger.info("launchpad_login address=%s", keypair.pubkey())
        return self.token

    def sol_pay_params(self, amount: int) -> SolPayParams:
        return self._authorized("/pay/sol-pay-params", SolPayParams, amount=amount)

    def usdc_pay_params(self, amount: int) -> UsdcPayParams:
        return self._authorized("/pay/usdc-pay-params", UsdcPayParams, amount=amount)

    def claim_params(self) -> ClaimParams:
        return self._authorized("/claim/claim-params", ClaimParams)

    def refund_sol_params(self) -> RefundSolParams:
        return self._authorized("/refund/refund-sol-params", RefundSolParams)

    def refund_usdc_params(self) -> RefundUsdcParams:
        return self._authorized("/refund/refund-usdc-params", RefundUsdcParams)
