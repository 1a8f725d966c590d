from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from .config import YOKI_CONTRACT
from .events import normalize_token_id
from .ledger import CreditPolicy


def normalize_token_ids(token_ids):
    """Ordered, de-duplicated tuple of canonical token ids."""
    return tuple(dict.fromkeys(normalize_token_id(t) for t in token_ids))


@dataclass(frozen=True)
class Season:
    name: str
    number: int
    required_token_ids: tuple
    cutoff_ms: int
    contract: str = YOKI_CONTRACT
    policy: CreditPolicy = CreditPolicy.FULL_OWNERSHIP
    description: str = field(default="")

    def __post_init__(self):
        object.__setattr__(self, "required_token_ids", normalize_token_ids(self.required_token_ids))

    @property
    def cutoff_iso(self):
        return datetime.fromtimestamp(self.cutoff_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def with_policy(self, policy):
        return replace(self, policy=CreditPolicy(policy))


SEASON_7 = Season(
    name="season7",
    number=7,
    required_token_ids=[100, 200, 300, 400, 101, 201, 301, 401],
    cutoff_ms=1746104400000,
    description="Yoki2 season 7",
)

SEASON_8 = Season(
    name="season8",
    number=8,
    required_token_ids=[
        100, 200, 300, 400, 500, 600, 700, 800, 900, 1000, 1100, 1200,
        101, 201, 301, 401, 501, 601, 701, 801, 901, 1001, 1101, 1201,
    ],
    cutoff_ms=1746968400000,  # May 11, 2025
    description="Yoki2 season 8",
)

SEASONS = {s.name: s for s in (SEASON_7, SEASON_8)}


def get_season(name):
    try:
        return SEASONS[name]
    except KeyError:
        raise KeyError(f"Unknown season {name!r}, expected one of {sorted(SEASONS)}") from None
