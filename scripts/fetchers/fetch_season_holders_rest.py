import argparse
import sys

from yoki_drops.config import data_path
from yoki_drops.errors import YokiDropError
from yoki_drops.pipeline import evaluate_season, export_season
from yoki_drops.seasons import SEASONS, get_season
from yoki_drops.sources import BlockscoutRestSource

# CONFIG
DEFAULT_SEASON = "season7"
OUTPUT_FILE = "transfers.csv"
HOLDERS_FILE = "transfers_holders.csv"


def main():
    parser = argparse.ArgumentParser(description="Season holders from the Blockscout REST API")
    parser.add_argument("--season", choices=sorted(SEASONS), default=DEFAULT_SEASON)
    parser.add_argument("--output", default=data_path(OUTPUT_FILE))
    parser.add_argument("--holders", default=data_path(HOLDERS_FILE), help="per-holder CSV ('' to skip)")
    args = parser.parse_args()

    season = get_season(args.season)
    print("🚀 Fetching Yoki transfers from Blockscout (REST)...")
    try:
        result = evaluate_season(season, BlockscoutRestSource(contract=season.contract))
        export_season(result, season, args.output, holders_csv=args.holders or None)
    except (YokiDropError, OSError) as e:
        print(f"❌ Script execution failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
