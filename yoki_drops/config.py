import os

from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()

# CONFIG
YOKI_CONTRACT = "0x80E041b16a38f4caa1d0137565B37FD71b2f1E2b"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Indexers (Soneium)
BLOCKSCOUT_API_URL = os.getenv("BLOCKSCOUT_API_URL", "https://soneium.blockscout.com/api/v2")
BLOCKSCOUT_GRAPHQL_URL = os.getenv("BLOCKSCOUT_GRAPHQL_URL", "https://soneium.blockscout.com/api/graphql")
YOKI_SUBGRAPH_URL = os.getenv("YOKI_SUBGRAPH_URL", "http://localhost:8000/subgraphs/name/yoki2")
YOKI_SQUID_URL = os.getenv("YOKI_SQUID_URL", "http://localhost:4350/graphql")
YOKI_GRAPH_STUDIO_URL = os.getenv("YOKI_GRAPH_STUDIO_URL", "https://api.studio.thegraph.com/query/64002/yoki2/v0.0.14")

# Rewards API
ACS_ENDPOINT = os.getenv("ACS_ENDPOINT", "https://acs-api.astar.network/acs/addDiscretionaryPointsBatch")
ACS_SECRET_ENV = "ACS_API_KEY_YOKI2"

# Fetching
PAGE_DELAY = 0.1  # seconds between pages, keeps the public indexers happy
MAX_ATTEMPTS = 5
BACKOFF_BASE = 1.0
BACKOFF_CAP = 15.0

# Files
DATA_DIR = os.getenv("YOKI_DATA_DIR", "data")
COMPARE_DIR = "compares"
BATCH_MAX_RECORDS = 1900


def require_env(name):
    """Return the value of ``name`` or raise ConfigurationError."""
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"Please set {name} in .env file")
    return value


def data_path(*parts):
    return os.path.join(DATA_DIR, *parts)
