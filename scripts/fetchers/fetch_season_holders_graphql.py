import argparse
import sys

from yoki_drops.config import data_path
from yoki_drops.errors import YokiDropError
from yoki_drops.ledger import CreditPolicy
from yoki_drops.pipeline import evaluate_season, export_season
from yoki_drops.seasons import SEASONS, get_season
from yoki_drops.sources import BlockscoutGraphQLSource

# CONFIG
DEFAULT_SEASON = "season8"
OUTPUT_FILE = "graph.csv"


def main():
    parser = argparse.ArgumentParser(description="Season holders from the Blockscout GraphQL API")
    parser.add_argument("--season", choices=sorted(SEASONS), default=DEFAULT_SEASON)
    parser.add_argument("--output", default=data_path(OUTPUT_FILE))
    parser.add_argument("--mint-only", action="store_true",
                        help="only count tokens the holder minted (fetches mints only)")
    args = parser.parse_args()

    season = get_season(args.season)
    if args.mint_only:
        season = season.with_policy(CreditPolicy.MINT_ONLY)

    source = BlockscoutGraphQLSource(
        contract=season.contract,
        cutoff_iso=season.cutoff_iso,
        mints_only=args.mint_only,
    )
    print("🚀 Fetching Yoki transfers from Blockscout (GraphQL)...")
    try:
        result = evaluate_season(season, source)
        export_season(result, season, args.output)
    except (YokiDropError, OSError) as e:
        print(f"❌ Script execution failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
