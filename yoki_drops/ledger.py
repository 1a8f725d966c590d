"""ERC-1155 balance ledger rebuilt from transfer events.

The ledger only ever stores positive balances: a debit that takes a
balance to zero (or below, with partial data) removes the entry.
"""

from collections import defaultdict
from enum import Enum

from .config import ZERO_ADDRESS


class CreditPolicy(Enum):
    # Receivers are credited on any transfer: current holdings.
    FULL_OWNERSHIP = "full_ownership"
    # Receivers are credited on mints only: "minted it yourself" campaigns.
    MINT_ONLY = "mint_only"


class Ledger:
    def __init__(self, policy=CreditPolicy.FULL_OWNERSHIP):
        self.policy = CreditPolicy(policy)
        self._balances = {}

    def __len__(self):
        return len(self._balances)

    def __contains__(self, address):
        return address in self._balances

    def holders(self):
        return list(self._balances)

    def tokens_of(self, address):
        return dict(self._balances.get(address, {}))

    def balance_of(self, address, token_id):
        return self._balances.get(address, {}).get(token_id, 0)

    def snapshot(self):
        return {address: dict(tokens) for address, tokens in self._balances.items()}

    def apply_transfer(self, event):
        """Apply one normalized TransferEvent."""
        sender, receiver = event.from_address, event.to_address
        if sender == ZERO_ADDRESS and receiver == ZERO_ADDRESS:
            return
        if event.value == 0:
            return

        if sender != ZERO_ADDRESS:
            self._debit(sender, event.token_id, event.value)

        if receiver == ZERO_ADDRESS:
            return
        if sender == ZERO_ADDRESS or self.policy is CreditPolicy.FULL_OWNERSHIP:
            self._credit(receiver, event.token_id, event.value)

    def _debit(self, address, token_id, value):
        tokens = self._balances.get(address)
        if not tokens or tokens.get(token_id, 0) <= 0:
            # Nothing tracked for this sender: out-of-order or partial data.
            return
        remaining = tokens[token_id] - value
        if remaining > 0:
            tokens[token_id] = remaining
            return
        del tokens[token_id]
        if not tokens:
            del self._balances[address]

    def _credit(self, address, token_id, value):
        tokens = self._balances.setdefault(address, {})
        tokens[token_id] = tokens.get(token_id, 0) + value


def replay_transfers(events, cutoff_ms=None, policy=CreditPolicy.FULL_OWNERSHIP):
    """Fold ``events`` (in the given order) into a fresh Ledger.

    Events with ``timestamp_ms`` strictly after ``cutoff_ms`` never reach
    the ledger.
    """
    ledger = Ledger(policy)
    for event in events:
        if cutoff_ms is not None and event.timestamp_ms > cutoff_ms:
            continue
        ledger.apply_transfer(event)
    return ledger


def token_holder_counts(ledger):
    counts = defaultdict(int)
    for address in ledger.holders():
        for token_id in ledger.tokens_of(address):
            counts[token_id] += 1
    return dict(counts)
