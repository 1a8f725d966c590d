import argparse
import os
import sys

from yoki_drops.address_sets import diff, intersect
from yoki_drops.config import COMPARE_DIR
from yoki_drops.exporter import read_address_list, write_address_list

# Paths
FIRST_FILE_PATH = "data/season8users5887.csv"
SECOND_FILE_PATH = "data/_season8users.csv"


def compare_csv_files(first_path, second_path, output_dir=COMPARE_DIR):
    print("Reading files...")
    print(f"- {first_path}")
    print(f"- {second_path}")
    addresses1 = read_address_list(first_path)
    addresses2 = read_address_list(second_path)
    print(f"Found {len(addresses1)} addresses in {first_path}")
    print(f"Found {len(addresses2)} addresses in {second_path}")

    unique_to_1 = diff(addresses1, addresses2)
    unique_to_2 = diff(addresses2, addresses1)
    common = intersect(addresses1, addresses2)

    name1 = os.path.splitext(os.path.basename(first_path))[0]
    name2 = os.path.splitext(os.path.basename(second_path))[0]
    output1 = write_address_list(os.path.join(output_dir, f"{name1}_not_in_{name2}.csv"), unique_to_1)
    output2 = write_address_list(os.path.join(output_dir, f"{name2}_not_in_{name1}.csv"), unique_to_2)

    print("\n--- RESULTS ---")
    print(f"Unique to {first_path}:  {len(unique_to_1)}")
    print(f"Unique to {second_path}: {len(unique_to_2)}")
    print(f"Common to both files:    {len(common)}")
    print("💾 Outputs saved to:")
    print(f"- {output1}")
    print(f"- {output2}")
    return unique_to_1, unique_to_2, common


def main():
    parser = argparse.ArgumentParser(description="Case-insensitive diff of two address lists")
    parser.add_argument("first", nargs="?", default=FIRST_FILE_PATH)
    parser.add_argument("second", nargs="?", default=SECOND_FILE_PATH)
    parser.add_argument("--output-dir", default=COMPARE_DIR)
    args = parser.parse_args()

    try:
        compare_csv_files(args.first, args.second, args.output_dir)
    except OSError as e:
        print(f"❌ Error comparing CSV files: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
