"""Fetch -> ledger -> eligibility -> export for one season."""

import os
from dataclasses import dataclass

from .eligibility import evaluate_all
from .exporter import write_address_list, write_holders_csv, write_report_json
from .ledger import Ledger, replay_transfers, token_holder_counts
from .pagination import FetchReport, collect_transfers


@dataclass
class SeasonResult:
    report: FetchReport
    ledger: Ledger
    qualified: list


def evaluate_season(season, source, resources=None, **fetch_options):
    """Rebuild balances for ``season`` from ``source`` and pick qualified holders.

    ``resources`` defaults to the season's token ids (one pagination per id).
    """
    resources = list(resources if resources is not None else season.required_token_ids)
    print(f"🚀 {season.name}: {len(season.required_token_ids)} required tokens, "
          f"cutoff {season.cutoff_iso}, policy {season.policy.value}")

    report = collect_transfers(source, resources, **fetch_options)
    ledger = replay_transfers(report.events, cutoff_ms=season.cutoff_ms, policy=season.policy)
    qualified = sorted(evaluate_all(ledger, season.required_token_ids))

    print(f"✅ Replayed {len(report.events)} transfers into {len(ledger)} holders")
    print(f"✅ Found {len(qualified)} holders with all {len(season.required_token_ids)} tokens")
    return SeasonResult(report=report, ledger=ledger, qualified=qualified)


def export_season(result, season, output_csv, holders_csv=None):
    """Write the qualified list, a JSON run report and optionally a holders CSV."""
    write_address_list(output_csv, result.qualified)
    print(f"💾 Saved {len(result.qualified)} addresses to {output_csv}")

    report_path = os.path.splitext(output_csv)[0] + "_report.json"
    summary = write_report_json(report_path, season, result.report, result.qualified, result.ledger)
    print(f"💾 Saved run report to {report_path}")

    if holders_csv:
        count = write_holders_csv(holders_csv, result.ledger, season.required_token_ids)
        print(f"💾 Saved {count} holders to {holders_csv}")

    print("\nHolders per token:")
    per_token = token_holder_counts(result.ledger)
    for token_id in season.required_token_ids:
        print(f"  {token_id}: {per_token.get(token_id, 0)}")

    if result.report.incomplete:
        print(f"\n⚠️ DATA QUALITY: {len(result.report.incomplete)} token(s) could not be fetched "
              f"completely and were left out: {result.report.incomplete}")
    return summary
