import argparse
import sys

from yoki_drops.config import YOKI_SUBGRAPH_URL, data_path
from yoki_drops.errors import YokiDropError
from yoki_drops.ledger import CreditPolicy
from yoki_drops.pipeline import evaluate_season, export_season
from yoki_drops.seasons import SEASONS, get_season
from yoki_drops.sources import SubgraphTransferSource

# CONFIG
DEFAULT_SEASON = "season8"
OUTPUT_FILE = "yokiSeason8.csv"
FEED = "transferSingles"


def main():
    parser = argparse.ArgumentParser(description="Season holders from the Yoki subgraph")
    parser.add_argument("--season", choices=sorted(SEASONS), default=DEFAULT_SEASON)
    parser.add_argument("--url", default=YOKI_SUBGRAPH_URL)
    parser.add_argument("--output", default=data_path(OUTPUT_FILE))
    parser.add_argument("--policy", choices=[p.value for p in CreditPolicy], default=None,
                        help="override the season's crediting policy")
    args = parser.parse_args()

    season = get_season(args.season)
    if args.policy:
        season = season.with_policy(args.policy)

    source = SubgraphTransferSource(cutoff_ms=season.cutoff_ms, url=args.url)
    print(f"🚀 Looking for users with all {len(season.required_token_ids)} tokens before {season.cutoff_iso}")
    try:
        # The subgraph serves every token id in one chronological feed.
        result = evaluate_season(season, source, resources=[FEED])
        export_season(result, season, args.output)
    except (YokiDropError, OSError) as e:
        print(f"❌ Script execution failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
