"""Voter identity and admin key helpers."""
from __future__ import annotations

import hashlib
import hmac

from fastapi.requests import HTTPConnection


def sha256_hex(value: str) -> str:
    """Return the hex SHA-256 digest of a UTF-8 string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def compute_voter_hash(salt: str, address: str | None, agent: str | None) -> str:
    """Derive the one-way voter fingerprint used to deduplicate votes.

    Args:
        salt: Process-wide secret salt.
        address: Client network address; ``None`` is treated as ``""``.
        agent: Client user agent string; ``None`` is treated as ``""``.

    Returns:
        Hex SHA-256 digest of ``"{salt}|{address}|{agent}"``. The same inputs
        always produce the same fingerprint.
    """
    return sha256_hex(f"{salt}|{address or ''}|{agent or ''}")


def client_address(conn: HTTPConnection, *, trust_forwarded_for: bool = True) -> str:
    """Return the client address for a request or websocket connection."""
    if trust_forwarded_for:
        forwarded = conn.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if conn.client is not None and conn.client.host:
        return conn.client.host
    return ""


def client_agent(conn: HTTPConnection) -> str:
    """Return the client's user agent header, or an empty string."""
    return conn.headers.get("user-agent", "")


def admin_key_matches(provided: str | None, expected: str) -> bool:
    """Compare an admin key header against the configured key in constant time."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
