import argparse
import sys

from yoki_drops.address_sets import find_duplicates, unique_addresses
from yoki_drops.config import YOKI_GRAPH_STUDIO_URL, YOKI_SQUID_URL, data_path
from yoki_drops.eligibility import row_has_all
from yoki_drops.errors import YokiDropError
from yoki_drops.exporter import write_address_list
from yoki_drops.pagination import collect_rows
from yoki_drops.sources import SeasonConditionsSource, SeasonIndexSource

# CONFIG
DEFAULT_SEASON = 9
SOURCES = {
    # name: (default url, default output file)
    "squid": (YOKI_SQUID_URL, "_season{season}users.csv"),
    "studio": (YOKI_GRAPH_STUDIO_URL, "season{season}users.csv"),
}


def fetch_qualified_users(season, url=YOKI_SQUID_URL, filter_locally=False, source_name="squid"):
    """Addresses of a season's qualified users.

    With ``filter_locally`` every row of the season is fetched and checked
    here (``hasAll``, falling back to ``ownedYokis``) instead of trusting
    the indexer's ``hasAll_eq`` filter. The Graph Studio collections are
    already filtered on ``hasAllRequiredTokens`` and have nothing to check.
    """
    if source_name == "studio":
        source = SeasonConditionsSource(url=url)
        filter_locally = False
    else:
        source = SeasonIndexSource(url=url, has_all_only=not filter_locally)
    print(f"🚀 Fetching Season {season} qualifying users from {source_name}...")
    rows = collect_rows(source, season)
    print(f"   Received {len(rows)} rows")

    if filter_locally:
        rows = [row for row in rows if row_has_all(row)]
        print(f"   {len(rows)} rows qualify after local filtering")
    return [row["address"] for row in rows if row.get("address")]


def explain_user(address, season, url=YOKI_SQUID_URL):
    """Print the indexer row for ``address`` and whether the export filter keeps it."""
    print(f"\n🔎 Verifying {address} on the season index...")
    try:
        row = SeasonIndexSource(url=url).fetch_user_row(address, season)
    except YokiDropError as e:
        print(f"   ❌ Error checking {address}: {e}")
        return None
    if row is None:
        print(f"   ❌ {address} has no row for season {season}")
        return None

    owned = row.get("ownedYokis") or []
    print(f"   Address: {row.get('address')}")
    print(f"   Season: {row.get('season')}")
    print(f"   Has all Yokis: {row.get('hasAll')}")
    print(f"   Token count: {len([c for c in owned if isinstance(c, int) and c > 0])} tokens")
    if row.get("season") == season and row.get("hasAll") is True:
        print(f"   ✅ Should be included (season={season}, hasAll=true)")
    else:
        print(f"   ❌ Does not meet the filter (season={row.get('season')}, hasAll={row.get('hasAll')})")
    return row


def main():
    parser = argparse.ArgumentParser(description="Export a season's qualified users from a season indexer")
    parser.add_argument("--season", type=int, default=DEFAULT_SEASON)
    parser.add_argument("--source", choices=sorted(SOURCES), default="squid")
    parser.add_argument("--url", default=None)
    parser.add_argument("--output", default=None)
    parser.add_argument("--filter-locally", action="store_true")
    parser.add_argument("--watch", action="append", default=[], help="address to confirm in the results")
    args = parser.parse_args()

    default_url, default_output = SOURCES[args.source]
    url = args.url or default_url
    output = args.output or data_path(default_output.format(season=args.season))

    if args.source == "squid":
        for watched in args.watch:
            explain_user(watched, args.season, url=url)

    try:
        addresses = fetch_qualified_users(args.season, url=url, filter_locally=args.filter_locally,
                                          source_name=args.source)
    except YokiDropError as e:
        print(f"❌ Failed to export users: {e}")
        sys.exit(1)

    duplicates = find_duplicates(addresses)
    if duplicates.has_duplicates:
        print(f"⚠️ {len(duplicates.addresses)} addresses repeated across pages "
              f"({duplicates.entry_count} extra entries), removing them")
        top = sorted(duplicates.counts.items(), key=lambda x: x[1], reverse=True)[:5]
        for address, count in top:
            print(f"   {address}: appears {count} times")
    addresses = unique_addresses(addresses)

    for watched in args.watch:
        if watched.strip().lower() in addresses:
            print(f"✅ {watched} is in the final results")
        else:
            print(f"❌ {watched} is NOT in the final results")

    write_address_list(output, addresses)
    print(f"💾 Exported {len(addresses)} addresses to {output}")


if __name__ == "__main__":
    main()
