"""Membership lifecycle helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from .constants import MemberTier, is_valid_tier
from .models import Membership
from .queries import get_active_membership

logger = logging.getLogger(__name__)

TIER_ALIASES: dict[str, MemberTier] = {
    "chairman's circle": MemberTier.CHAIRMAN,
    "chairmans circle": MemberTier.CHAIRMAN,
    "chairman circle": MemberTier.CHAIRMAN,
}


def normalize_tier(tier_value: str | None) -> MemberTier | None:
    if not tier_value:
        return None
    normalized = tier_value.strip().lower()
    if normalized in TIER_ALIASES:
        return TIER_ALIASES[normalized]
    if is_valid_tier(normalized):
        return MemberTier(normalized)
    return None


def grant_membership(
    db: Session,
    business_id: int,
    tier: MemberTier,
    **billing,
) -> tuple[Membership, bool]:
    """Activate a membership for a business.

    Returns:
      - Membership: the active membership
      - bool: whether a new membership was created
    """
    existing = get_active_membership(db, business_id)
    if existing:
        return existing, False

    membership = Membership(
        business_id=business_id,
        tier=MemberTier(tier).value,
        is_active=True,
        **billing,
    )
    db.add(membership)
    db.flush()
    logger.info("Granted %s membership to business %s", membership.tier, business_id)
    return membership, True


def change_tier(
    db: Session,
    membership: Membership,
    tier: MemberTier,
    notes: str | None = None,
    effective_at: datetime | None = None,
) -> Membership:
    previous = membership.tier
    membership.tier = MemberTier(tier).value
    if notes:
        effective_at = effective_at or datetime.now(timezone.utc)
        entry = f"Tier changed on {effective_at:%b %d, %Y}: {notes}"
        membership.notes = f"{membership.notes}\n{entry}" if membership.notes else entry
    db.flush()
    logger.info(
        "Changed membership %s tier from %s to %s",
        membership.id,
        previous,
        membership.tier,
    )
    return membership


def deactivate_membership(
    db: Session,
    membership: Membership,
    reason: str | None = None,
) -> Membership:
    membership.is_active = False
    membership.cancelled_at = datetime.now(timezone.utc)
    membership.cancellation_reason = reason
    db.flush()
    logger.info("Deactivated membership %s for business %s", membership.id, membership.business_id)
    return membership
