"""Test the xrpl-py backed ledger client against canned rippled responses."""

import asyncio
from unittest import IsolatedAsyncioTestCase
from unittest.mock import AsyncMock, patch

import httpx
from xrpl import XRPLException
from xrpl.models.requests import AccountInfo
from xrpl.models.response import Response, ResponseStatus
from xrpl.wallet import Wallet

from fanout.deadline import DeadlineRunner
from fanout.errors import DeadlineExceeded, OperationError
from fanout.ledger import XrplLedgerClient
from fanout.models import ControllingAccount

from fakes import fast_config

FAUCET = fast_config()["network"]["faucet_url"]


def account_info(drops):
    return Response(status=ResponseStatus.SUCCESS, result={"account_data": {"Balance": str(drops)}, "validated": True})


def rpc_error(error, message=None):
    return Response(status=ResponseStatus.ERROR, result={"error": error, "error_message": message, "status": "error"})


def faucet_reply(status=200):
    return httpx.Response(status, json={}, request=httpx.Request("POST", FAUCET))


class StubRpc:
    """Answers requests from a list of replies; the last reply repeats forever."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    async def request(self, req):
        self.requests.append(req)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class LedgerTestCase(IsolatedAsyncioTestCase):
    def setUp(self):
        self.address = Wallet.create().address

    def client(self, *replies, timeouts=None):
        self.rpc = StubRpc(*replies)
        return XrplLedgerClient(fast_config(timeouts), client=self.rpc)


class GetBalanceTest(LedgerTestCase):
    async def test_balance_in_xrp(self):
        ledger = self.client(account_info(1_500_000))
        self.assertEqual(await ledger.get_balance(self.address), 1.5)
        req = self.rpc.requests[0]
        self.assertIsInstance(req, AccountInfo)
        self.assertEqual(req.account, self.address)
        self.assertEqual(req.ledger_index, "validated")

    async def test_unfunded_account_is_empty(self):
        ledger = self.client(rpc_error("actNotFound", "Account not found."))
        self.assertEqual(await ledger.get_balance(self.address), 0.0)

    async def test_rejected_query(self):
        ledger = self.client(rpc_error("lgrNotFound", "ledgerNotFound"))
        with self.assertRaises(OperationError) as cm:
            await ledger.get_balance(self.address)
        self.assertIn("ledgerNotFound", str(cm.exception))

    async def test_connection_failure(self):
        ledger = self.client(httpx.ConnectError("connection refused"))
        with self.assertRaises(OperationError) as cm:
            await ledger.get_balance(self.address)
        self.assertIn("connection refused", str(cm.exception))


class TransferTest(LedgerTestCase):
    def setUp(self):
        super().setUp()
        w = Wallet.create()
        self.source = ControllingAccount(address=w.address, secret=w.seed)

    def validated(self, tx_result, tx_hash="ABC123"):
        return Response(
            status=ResponseStatus.SUCCESS,
            result={"hash": tx_hash, "meta": {"TransactionResult": tx_result}, "validated": True},
        )

    async def test_applied_payment_returns_hash(self):
        ledger = self.client(account_info(0))
        with patch("fanout.ledger.submit_and_wait", new=AsyncMock(return_value=self.validated("tesSUCCESS"))) as submit:
            self.assertEqual(await ledger.transfer(self.source, self.address, 0.5), "ABC123")

        payment, rpc, wallet = submit.call_args.args
        self.assertEqual(payment.account, self.source.address)
        self.assertEqual(payment.destination, self.address)
        self.assertEqual(payment.amount, "500000")
        self.assertIs(rpc, self.rpc)
        self.assertEqual(wallet.address, self.source.address)

    async def test_unapplied_result_is_operation_error(self):
        ledger = self.client(account_info(0))
        with patch("fanout.ledger.submit_and_wait", new=AsyncMock(return_value=self.validated("tecUNFUNDED_PAYMENT"))):
            with self.assertRaises(OperationError) as cm:
                await ledger.transfer(self.source, self.address, 0.5)
        self.assertIn("tecUNFUNDED_PAYMENT", str(cm.exception))

    async def test_submission_failure_is_operation_error(self):
        ledger = self.client(account_info(0))
        err = XRPLException("Transaction failed: tefPAST_SEQ")
        with patch("fanout.ledger.submit_and_wait", new=AsyncMock(side_effect=err)):
            with self.assertRaises(OperationError) as cm:
                await ledger.transfer(self.source, self.address, 0.5)
        self.assertIn("tefPAST_SEQ", str(cm.exception))


class RequestFaucetTest(LedgerTestCase):
    async def test_waits_for_credit(self):
        ledger = self.client(rpc_error("actNotFound"), rpc_error("actNotFound"), account_info(10_000_000))
        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=faucet_reply())) as post:
            self.assertEqual(await ledger.request_faucet(self.address), 10.0)

        self.assertEqual(post.call_args.kwargs["json"]["destination"], self.address)
        self.assertEqual(len(self.rpc.requests), 3)

    async def test_faucet_http_error(self):
        ledger = self.client(account_info(0))
        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=faucet_reply(503))):
            with self.assertRaises(OperationError) as cm:
                await ledger.request_faucet(self.address)
        self.assertIn("503", str(cm.exception))
        # Only the starting balance was read
        self.assertEqual(len(self.rpc.requests), 1)

    async def test_gives_up_when_credit_never_arrives(self):
        ledger = self.client(account_info(0), timeouts={"faucet": 0.1})
        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=faucet_reply())):
            with self.assertRaises(DeadlineExceeded) as cm:
                await ledger.request_faucet(self.address)
        self.assertEqual(cm.exception.label, "faucet credit")

    async def test_abandoned_request_stops_polling(self):
        ledger = self.client(account_info(0), timeouts={"faucet": 0.1})
        runner = DeadlineRunner()
        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=faucet_reply())):
            with self.assertRaises(DeadlineExceeded):
                await runner.run_with_deadline(ledger.request_faucet(self.address), 0.02, label="faucet credit")
            self.assertEqual(runner.abandoned_count, 1)

            await asyncio.sleep(0.2)
            polls = len(self.rpc.requests)
            await asyncio.sleep(0.1)

        self.assertEqual(len(self.rpc.requests), polls)
        self.assertEqual(runner.abandoned_count, 0)
