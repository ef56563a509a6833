"""Ledger access: the only place that talks to the XRP Ledger.

Everything above this module sees addresses, seeds and XRP amounts as plain
values, so a fake implementation of `LedgerClient` can stand in for tests.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Protocol

import httpx
from xrpl import XRPLException
from xrpl.asyncio.clients import AsyncJsonRpcClient
from xrpl.asyncio.transaction import submit_and_wait
from xrpl.models.requests import AccountInfo
from xrpl.models.transactions import Payment
from xrpl.utils import drops_to_xrp, xrp_to_drops
from xrpl.wallet import Wallet

from fanout.errors import ConfigError, DeadlineExceeded, OperationError
from fanout.models import ControllingAccount, GeneratedAccount

log = logging.getLogger("fanout.ledger")


class LedgerClient(Protocol):
    def new_account(self) -> GeneratedAccount: ...
    def load_account(self, secret: str) -> ControllingAccount: ...
    async def get_balance(self, address: str) -> float: ...
    async def request_faucet(self, address: str) -> float: ...
    async def transfer(self, source: ControllingAccount, destination: str, amount: float) -> str: ...
    def explorer_url(self, address: str) -> str: ...


class XrplLedgerClient:
    """LedgerClient backed by xrpl-py's async JSON-RPC client and the test-network faucet."""

    def __init__(self, config: dict, client: AsyncJsonRpcClient | None = None):
        net = config["network"]
        self.client = client or AsyncJsonRpcClient(net["rpc_url"])
        self.faucet_url = net["faucet_url"]
        self.explorer_template = net["explorer_url"]
        self.faucet_timeout = float(config["timeout"]["faucet"])
        self.faucet_poll = float(config["timeout"]["faucet_poll"])
        self.http_timeout = float(config["timeout"]["balance"])
        log.info("Using rippled at %s", net["rpc_url"])

    def new_account(self) -> GeneratedAccount:
        w = Wallet.create()
        return GeneratedAccount(address=w.address, secret=w.seed)

    def load_account(self, secret: str) -> ControllingAccount:
        secret = secret.strip()
        try:
            w = Wallet.from_seed(secret)
        except (XRPLException, ValueError) as e:
            raise ConfigError(f"not a valid account seed: {e}") from e
        return ControllingAccount(address=w.address, secret=secret)

    async def get_balance(self, address: str) -> float:
        try:
            resp = await self.client.request(AccountInfo(account=address, ledger_index="validated"))
        except (XRPLException, httpx.HTTPError) as e:
            raise OperationError(f"balance query for {address} failed: {e}") from e
        if not resp.is_successful():
            # Never funded is the same as empty
            if resp.result.get("error") == "actNotFound":
                return 0.0
            raise OperationError(f"balance query for {address} rejected: {resp.result.get('error_message') or resp.result.get('error')}")
        return float(drops_to_xrp(resp.result["account_data"]["Balance"]))

    async def request_faucet(self, address: str) -> float:
        """Ask the test-network faucet to credit `address` and wait until the credit shows up.

        Gives up with DeadlineExceeded after the configured faucet timeout, so an
        abandoned request stops polling the RPC endpoint on its own.
        """
        deadline = asyncio.timeout(self.faucet_timeout)
        try:
            async with deadline:
                return await self._faucet_credit(address)
        except TimeoutError as e:
            if not deadline.expired():
                raise OperationError(f"faucet request for {address} failed: {str(e) or 'timed out'}") from e
            log.warning("No faucet credit for %s after %ss, giving up", address, self.faucet_timeout)
            raise DeadlineExceeded("faucet credit", self.faucet_timeout) from None

    async def _faucet_credit(self, address: str) -> float:
        start = await self.get_balance(address)
        payload = {"destination": address, "userAgent": "fanout"}
        try:
            async with httpx.AsyncClient(timeout=self.http_timeout) as http:
                r = await http.post(self.faucet_url, json=payload)
                r.raise_for_status()
        except httpx.HTTPError as e:
            raise OperationError(f"faucet request for {address} failed: {e.__class__.__name__} {e}") from e
        log.info("Faucet accepted request for %s, waiting for the credit to validate...", address)

        while True:
            await asyncio.sleep(self.faucet_poll)
            balance = await self.get_balance(address)
            if balance > start:
                return balance

    async def transfer(self, source: ControllingAccount, destination: str, amount: float) -> str:
        wallet = Wallet.from_seed(source.secret)
        payment = Payment(
            account=wallet.address,
            destination=destination,
            amount=xrp_to_drops(Decimal(str(amount))),
        )
        try:
            resp = await submit_and_wait(payment, self.client, wallet)
        except (XRPLException, httpx.HTTPError) as e:
            raise OperationError(str(e) or e.__class__.__name__) from e

        result = resp.result
        tx_result = result.get("meta", {}).get("TransactionResult")
        if not resp.is_successful() or tx_result != "tesSUCCESS":
            raise OperationError(f"payment to {destination} not applied: {tx_result or result}")
        return result["hash"]

    def explorer_url(self, address: str) -> str:
        return self.explorer_template.format(address=address)
