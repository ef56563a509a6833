import argparse
import asyncio
import logging
import sys
from pathlib import Path

import fanout.constants as C
from fanout.config import load_config
from fanout.distributor import Distributor
from fanout.errors import ConfigError, PersistenceError
from fanout.ledger import XrplLedgerClient
from fanout.logging_config import setup_logging
from fanout.prompts import PromptOperator
from fanout.store import BatchStore

log = logging.getLogger("fanout.main")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="fanout", description="Create XRP Ledger accounts and fund them from one account.")
    parser.add_argument("--secret",
                        help="Seed of the funding account (prompted for if omitted).",
                        )
    parser.add_argument("-n", "--num-accounts",
                        help="Number of accounts to create.",
                        )
    parser.add_argument("-a", "--amount",
                        help="XRP to send to each new account.",
                        )
    parser.add_argument("-o", "--output",
                        type=Path,
                        help="Where to save the generated accounts.",
                        )
    parser.add_argument("-c", "--config",
                        type=Path,
                        help="Alternate TOML config file.",
                        )
    parser.add_argument("--verify",
                        action=argparse.BooleanOptionalAction,
                        help="Check balances after the transfers.",
                        )
    parser.add_argument("--open-explorer",
                        action=argparse.BooleanOptionalAction,
                        help="Open every new account in the explorer.",
                        )
    parser.add_argument("--reconcile",
                        action="store_true",
                        help="Only re-check balances of a previously saved batch.",
                        )
    return parser.parse_args(argv)


async def amain(args) -> int:
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        log.error("%s", e)
        return C.ExitCode.BAD_INPUT

    store = BatchStore(args.output or cfg["output"]["path"])
    operator = PromptOperator(
        secret=args.secret,
        count=args.num_accounts,
        amount=args.amount,
        verify=args.verify,
        open_explorer=args.open_explorer,
    )
    d = Distributor(cfg, XrplLedgerClient(cfg), store, operator)

    if not args.reconcile:
        return await d.run()
    try:
        await d.reconcile_file()
    except (ConfigError, PersistenceError) as e:
        log.error("%s", e)
        return C.ExitCode.BAD_INPUT
    return C.ExitCode.OK


def main(argv=None):
    args = parse_args(argv)
    setup_logging()
    try:
        code = asyncio.run(amain(args))
    except KeyboardInterrupt:
        log.warning("Interrupted. Accounts saved so far are in the output file.")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
