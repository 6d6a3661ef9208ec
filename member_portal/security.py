"""Shared-key check for admin routes."""

from __future__ import annotations

import hmac


def verify_admin_key(provided: str | None, expected: str | None) -> bool:
    """Compare an admin key header against the configured key.

    If no key is configured, the check is skipped.
    """
    if not expected:
        return True
    if not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
