import argparse
import sys

from yoki_drops.config import ACS_ENDPOINT, ACS_SECRET_ENV, require_env
from yoki_drops.errors import ConfigurationError, NetworkError
from yoki_drops.exporter import load_batch_file
from yoki_drops.rewards import submit_rewards

# Change or check this part for any season
INPUT_FILE = "data/season9missing8-3.json"


def main():
    parser = argparse.ArgumentParser(description="Submit ACS reward batch files")
    parser.add_argument("files", nargs="*", default=[INPUT_FILE])
    parser.add_argument("--endpoint", default=ACS_ENDPOINT)
    parser.add_argument("--secret-env", default=ACS_SECRET_ENV)
    args = parser.parse_args()

    try:
        api_secret = require_env(args.secret_env)
    except ConfigurationError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

    failed = []
    for path in args.files:
        try:
            items = load_batch_file(path)
        except (OSError, ValueError) as e:
            print(f"❌ Could not read {path}: {e}")
            failed.append(path)
            continue

        print(f"🚀 Sending {len(items)} users from {path} to ACS server {args.endpoint}")
        try:
            result = submit_rewards(items, args.endpoint, api_secret)
            print(f"✅ Success! {result}")
        except NetworkError as e:
            print(f"❌ Error: {e} {e.body or ''}")
            failed.append(path)

    if failed:
        print(f"❌ {len(failed)} file(s) not submitted: {failed}")
        sys.exit(1)


if __name__ == "__main__":
    main()
