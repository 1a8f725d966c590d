import argparse
import os
import sys

from yoki_drops.address_sets import unique_addresses
from yoki_drops.config import BATCH_MAX_RECORDS, data_path
from yoki_drops.exporter import build_reward_items, read_address_list, write_batch_files

# CONFIG
DEFI_ID = 21
ACS_POOL_SEASON7 = 2000000
DESCRIPTION = "Yoki2 season 7"
INPUT_FILE = "season7users.csv"


def main():
    parser = argparse.ArgumentParser(description="Turn a season address list into ACS reward batches")
    parser.add_argument("--input", default=data_path(INPUT_FILE))
    parser.add_argument("--output", default=None, help="defaults to the input path with .json")
    parser.add_argument("--defi-id", type=int, default=DEFI_ID)
    parser.add_argument("--description", default=DESCRIPTION)
    amount = parser.add_mutually_exclusive_group()
    amount.add_argument("--pool", type=int, default=None, help="total ACS split across all users")
    amount.add_argument("--amount", type=int, default=None, help="fixed ACS per user")
    parser.add_argument("--max-records", type=int, default=BATCH_MAX_RECORDS)
    args = parser.parse_args()

    pool = args.pool if args.pool is not None or args.amount is not None else ACS_POOL_SEASON7
    output = args.output or os.path.splitext(args.input)[0] + ".json"

    print(f"📖 Reading addresses from {args.input}")
    try:
        addresses = read_address_list(args.input)
    except OSError as e:
        print(f"❌ Error processing CSV to JSON: {e}")
        sys.exit(1)
    print(f"Found {len(addresses)} addresses")

    deduped = unique_addresses(addresses)
    if len(deduped) != len(addresses):
        print(f"⚠️ Dropped {len(addresses) - len(deduped)} duplicate entries")
    if not deduped:
        print("❌ No addresses to convert")
        sys.exit(1)

    items = build_reward_items(
        deduped,
        defi_id=args.defi_id,
        description=args.description,
        acs_amount=args.amount,
        pool_amount=pool,
    )
    print(f"💰 {items[0]['acsAmount']} ACS per user ({args.description})")

    paths = write_batch_files(items, output, max_records=args.max_records)
    for path in paths:
        print(f"💾 Wrote {path}")
    print(f"✅ Successfully wrote {len(items)} items in {len(paths)} file(s)")


if __name__ == "__main__":
    main()
