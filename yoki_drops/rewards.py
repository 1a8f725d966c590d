"""ACS discretionary points API: signing and submission.

The server rebuilds the signature string itself, so the format here has
to match it byte for byte:

    <item1 key=value pairs, keys sorted>&<item2 ...>&timestamp=<ms>&nonce=<hex>

signed with HMAC-SHA256 and sent as lowercase hex.
"""

import hashlib
import hmac
import secrets
import time

import requests

from .errors import NetworkError


def generate_nonce():
    return secrets.token_hex(16)


def _render(value):
    # Same text the API's JavaScript side produces for the value.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return "null"
    return str(value)


def build_signature_payload(items, timestamp, nonce):
    parts = []
    for item in items:
        parts.append("&".join(f"{key}={_render(item[key])}" for key in sorted(item)))
    return f"{'&'.join(parts)}&timestamp={timestamp}&nonce={nonce}"


def sign_items(items, timestamp, nonce, secret):
    payload = build_signature_payload(items, timestamp, nonce)
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def submit_rewards(items, endpoint, secret, session=None, timestamp=None, nonce=None, timeout=None):
    """POST one signed batch. Returns the decoded response body."""
    timestamp = str(timestamp if timestamp is not None else int(time.time() * 1000))
    nonce = nonce or generate_nonce()
    signature = sign_items(items, timestamp, nonce, secret)

    headers = {
        "x-timestamp": timestamp,
        "x-signature": signature,
        "x-nonce": nonce,
        "Content-Type": "application/json",
    }
    http = session or requests
    try:
        response = http.post(endpoint, json=items, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise NetworkError(f"POST {endpoint} failed: {e}") from e

    if not 200 <= response.status_code < 300:
        raise NetworkError(f"ACS API returned {response.status_code}", response.status_code, response.text)
    try:
        return response.json()
    except ValueError:
        return response.text
