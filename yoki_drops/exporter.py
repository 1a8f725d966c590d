import json
import math
import os

import pandas as pd

from .config import BATCH_MAX_RECORDS


def read_address_list(path):
    """Addresses from a newline list. Blank lines and ``//`` comments are dropped."""
    with open(path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    return [line for line in lines if line and not line.startswith("//")]


def _ensure_parent(path):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def write_address_list(path, addresses, sort=False):
    """One address per line, no header."""
    addresses = sorted(addresses) if sort else list(addresses)
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(addresses))
    return path


def build_reward_items(addresses, defi_id, description, acs_amount=None, pool_amount=None):
    """ACS records for each address.

    Pass either a fixed ``acs_amount`` per user or a ``pool_amount`` that
    is split evenly (rounded down) across all addresses.
    """
    addresses = list(addresses)
    if acs_amount is None:
        if pool_amount is None:
            raise ValueError("Either acs_amount or pool_amount is required")
        acs_amount = pool_amount // len(addresses) if addresses else 0

    return [
        {
            "userAddress": address,
            "defiId": int(defi_id),
            "acsAmount": int(acs_amount),
            "description": description,
        }
        for address in addresses
    ]


def write_holders_csv(path, ledger, required_token_ids):
    """address, token_count, token_ids for every holder (debug export)."""
    rows = []
    for address in ledger.holders():
        tokens = ledger.tokens_of(address)
        held = [t for t in required_token_ids if tokens.get(t, 0) > 0]
        rows.append({
            "address": address,
            "token_count": len(held),
            "token_ids": ";".join(held),
        })
    df = pd.DataFrame(rows, columns=["address", "token_count", "token_ids"])
    df = df.sort_values(["token_count", "address"], ascending=[False, True])
    _ensure_parent(path)
    df.to_csv(path, index=False)
    return len(df)


def chunk_items(items, max_records=BATCH_MAX_RECORDS):
    items = list(items)
    return [items[i:i + max_records] for i in range(0, len(items), max_records)]


def write_batch_files(items, path, max_records=BATCH_MAX_RECORDS):
    """Write ``items`` as JSON. Splits into ``<stem>_part<N>.json`` above ``max_records``."""
    chunks = chunk_items(items, max_records) or [[]]
    _ensure_parent(path)

    if len(chunks) == 1:
        targets = [path]
    else:
        stem, ext = os.path.splitext(path)
        width = len(str(len(chunks)))
        targets = [f"{stem}_part{str(i).zfill(width)}{ext or '.json'}" for i in range(1, len(chunks) + 1)]

    for target, chunk in zip(targets, chunks):
        with open(target, "w", encoding="utf-8") as f:
            json.dump(chunk, f, indent=2)
    return targets


def load_batch_file(path):
    with open(path, "r", encoding="utf-8") as f:
        items = json.load(f)
    if not isinstance(items, list):
        raise ValueError(f"{path} must contain a JSON array of reward items")
    return items


def write_report_json(path, season, report, qualified, ledger):
    """Run summary next to the exported CSV."""
    summary = {
        "season": season.name,
        "cutoff_ms": season.cutoff_ms,
        "cutoff": season.cutoff_iso,
        "policy": season.policy.value,
        "required_token_ids": list(season.required_token_ids),
        "transfers": len(report.events),
        "skipped_events": report.skipped_events,
        "completed": [str(r) for r in report.completed],
        "incomplete": [str(r) for r in report.incomplete],
        "holders": len(ledger),
        "qualified": len(qualified),
        "batches_needed": math.ceil(len(qualified) / BATCH_MAX_RECORDS) if qualified else 0,
    }
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
    return summary
