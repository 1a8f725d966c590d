"""Transfer events as the ledger sees them.

Every source (Blockscout REST, Blockscout GraphQL, the season subgraph)
hands back its own JSON shape. They all end up here, normalized:

- addresses lowercased and stripped
- token ids as canonical decimal strings ("0100", 100 and "100" are one id)
- quantities as non-negative ints
- timestamps as epoch milliseconds
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from .config import ZERO_ADDRESS
from .errors import MalformedEventError


def normalize_address(address):
    text = str(address).strip().lower() if address is not None else ""
    if not text:
        raise MalformedEventError(f"Missing address: {address!r}")
    return text


def normalize_token_id(token_id):
    try:
        return str(int(str(token_id).strip()))
    except (TypeError, ValueError):
        raise MalformedEventError(f"Bad token id: {token_id!r}") from None


def parse_quantity(value):
    if isinstance(value, bool):
        raise MalformedEventError(f"Bad quantity: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise MalformedEventError(f"Bad quantity: {value!r}")
        value = int(value)
    try:
        quantity = int(str(value).strip())
    except (TypeError, ValueError):
        raise MalformedEventError(f"Bad quantity: {value!r}") from None
    if quantity < 0:
        raise MalformedEventError(f"Negative quantity: {value!r}")
    return quantity


def parse_timestamp_ms(value, unit="ms"):
    """Epoch milliseconds from an ISO string or an epoch number.

    ``unit`` only applies to numeric input: subgraphs give seconds,
    our own cutoffs are in milliseconds.
    """
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)

    text = str(value).strip() if value is not None else ""
    if not text:
        raise MalformedEventError(f"Missing timestamp: {value!r}")

    if text.lstrip("-").isdigit():
        number = int(text)
        return number * 1000 if unit == "s" else number

    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise MalformedEventError(f"Bad timestamp: {value!r}") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


@dataclass(frozen=True)
class TransferEvent:
    from_address: str
    to_address: str
    token_id: str
    value: int
    timestamp_ms: int

    @classmethod
    def create(cls, from_address, to_address, token_id, value, timestamp, timestamp_unit="ms"):
        """Build a normalized event. Raises MalformedEventError on bad input."""
        return cls(
            from_address=normalize_address(from_address),
            to_address=normalize_address(to_address),
            token_id=normalize_token_id(token_id),
            value=parse_quantity(value),
            timestamp_ms=parse_timestamp_ms(timestamp, unit=timestamp_unit),
        )

    @property
    def is_mint(self):
        return self.from_address == ZERO_ADDRESS and self.to_address != ZERO_ADDRESS

    @property
    def is_burn(self):
        return self.to_address == ZERO_ADDRESS and self.from_address != ZERO_ADDRESS
