import argparse
import sys

from yoki_drops.address_sets import find_duplicates
from yoki_drops.exporter import read_address_list

# Paths
FILE_PATH = "data/_season9users.csv"


def check_duplicates(file_path):
    print(f"Checking for duplicates in: {file_path}")
    addresses = read_address_list(file_path)
    report = find_duplicates(addresses)

    print("\n--- RESULTS ---")
    print(f"Total addresses found:      {len(addresses)}")
    print(f"Unique addresses:           {len(addresses) - report.entry_count}")
    print(f"Duplicated addresses:       {len(report.addresses)}")
    print(f"Duplicate entries (extra):  {report.entry_count}")

    if not report.has_duplicates:
        print("\n✅ No duplicates found!")
    else:
        example = max(report.counts, key=report.counts.get)
        print(f"\n⚠️ Example duplicate address: {example} (appears {report.counts[example]} times)")
        for address in sorted(report.addresses):
            print(address)
    return report


def main():
    parser = argparse.ArgumentParser(description="Find repeated addresses in an address list")
    parser.add_argument("file", nargs="?", default=FILE_PATH)
    args = parser.parse_args()

    try:
        check_duplicates(args.file)
    except OSError as e:
        print(f"❌ Error processing file: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
