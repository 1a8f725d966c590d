"""Case-insensitive operations over address lists.

Comparisons are done on lowercased addresses; results keep the casing
and order of the list they were taken from.
"""

from dataclasses import dataclass

import pandas as pd


def _clean(addresses):
    return pd.Series(list(addresses), dtype=object).astype(str).str.strip().str.lower()


def _lowered(addresses):
    return set(_clean(addresses))


def diff(list_a, list_b):
    """Entries of ``list_a`` missing from ``list_b``."""
    in_b = _lowered(list_b)
    return [a for a in list_a if a.strip().lower() not in in_b]


def intersect(list_a, list_b):
    """Entries of ``list_a`` also present in ``list_b``."""
    in_b = _lowered(list_b)
    return [a for a in list_a if a.strip().lower() in in_b]


def unique_addresses(addresses):
    """Lowercased addresses, first occurrence wins, order kept."""
    return list(_clean(addresses).drop_duplicates())


@dataclass
class DuplicateReport:
    addresses: set
    entry_count: int
    counts: dict

    @property
    def has_duplicates(self):
        return bool(self.addresses)


def find_duplicates(addresses):
    """Addresses seen more than once, and how many extra entries they account for."""
    counts = _clean(addresses).value_counts()
    repeated = counts[counts > 1]
    return DuplicateReport(
        addresses=set(repeated.index),
        entry_count=int((repeated - 1).sum()),
        counts={address: int(n) for address, n in repeated.items()},
    )
