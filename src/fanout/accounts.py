import logging

from fanout.ledger import LedgerClient
from fanout.models import AccountRecord, Batch, GeneratedAccount

log = logging.getLogger("fanout.accounts")


def generate(ledger: LedgerClient) -> GeneratedAccount:
    """Fresh key material from the ledger client. No network access."""
    return ledger.new_account()


def generate_batch(ledger: LedgerClient, n: int) -> Batch:
    """Create `n` unfunded records, indexed from 1."""
    batch: Batch = []
    for i in range(1, n + 1):
        acct = generate(ledger)
        batch.append(AccountRecord(index=i, address=acct.address, secret=acct.secret))
        log.info("Account %s created: %s", i, acct.address)
    return batch
