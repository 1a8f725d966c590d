from .seasons import normalize_token_ids


def is_qualified(address, ledger, required_token_ids):
    """True when ``address`` holds a positive balance of every required id."""
    required = normalize_token_ids(required_token_ids)
    return all(ledger.balance_of(address, token_id) > 0 for token_id in required)


def evaluate_all(ledger, required_token_ids):
    required = normalize_token_ids(required_token_ids)
    return {address for address in ledger.holders() if is_qualified(address, ledger, required)}


def row_has_all(row):
    """Season index row check: ``hasAll`` flag first, ``ownedYokis`` counts as backup."""
    if row.get("hasAll") is True:
        return True
    owned = row.get("ownedYokis")
    if isinstance(owned, list) and owned:
        try:
            return all(int(count) > 0 for count in owned)
        except (TypeError, ValueError):
            return False
    return False
