"""Record lookups and admin writes for allocations and pricing thresholds."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .constants import MemberTier, SeatType
from .models import (
    Benefit,
    CompanyAllocationOverride,
    EventAllocation,
    Membership,
    PricingThreshold,
    SymposiumRegistration,
    TeamMembership,
    TicketClaim,
    VipDinnerRsvp,
)
from .schemas import (
    AllocationOverrideIn,
    EventAllocationIn,
    PricingThresholdIn,
    PricingThresholdPatch,
)

logger = logging.getLogger(__name__)


def get_team_membership(db: Session, profile_id: int, business_id: int) -> TeamMembership | None:
    return db.scalar(
        select(TeamMembership).where(
            TeamMembership.profile_id == profile_id,
            TeamMembership.business_id == business_id,
        )
    )


def get_active_membership(db: Session, business_id: int) -> Membership | None:
    return db.scalar(
        select(Membership)
        .where(Membership.business_id == business_id, Membership.is_active.is_(True))
        .order_by(Membership.id.desc())
    )


def get_tier_allocation(db: Session, event_id: int, tier: MemberTier | str) -> EventAllocation | None:
    return db.scalar(
        select(EventAllocation).where(
            EventAllocation.event_id == event_id,
            EventAllocation.tier == MemberTier(tier).value,
        )
    )


def list_tier_allocations(db: Session, tier: MemberTier | str) -> list[EventAllocation]:
    return list(
        db.scalars(
            select(EventAllocation)
            .where(EventAllocation.tier == MemberTier(tier).value)
            .order_by(EventAllocation.event_id)
        ).all()
    )


def get_allocation_override(db: Session, business_id: int, event_id: int) -> CompanyAllocationOverride | None:
    return db.scalar(
        select(CompanyAllocationOverride).where(
            CompanyAllocationOverride.business_id == business_id,
            CompanyAllocationOverride.event_id == event_id,
        )
    )


def list_allocation_overrides(db: Session, business_id: int) -> dict[int, CompanyAllocationOverride]:
    overrides = db.scalars(
        select(CompanyAllocationOverride).where(CompanyAllocationOverride.business_id == business_id)
    ).all()
    return {override.event_id: override for override in overrides}


def count_claims_by_pass(db: Session, business_id: int, event_id: int) -> dict[str, int]:
    rows = db.execute(
        select(TicketClaim.pass_type, func.count(TicketClaim.id))
        .where(
            TicketClaim.business_id == business_id,
            TicketClaim.event_id == event_id,
            TicketClaim.status != "cancelled",
        )
        .group_by(TicketClaim.pass_type)
    ).all()
    return {pass_type: count for pass_type, count in rows}


def count_seats_taken(db: Session, business_id: int, event_id: int) -> dict[SeatType, int]:
    """Symposium registrations and dinner RSVPs a company holds for one event."""
    symposium = db.scalar(
        select(func.count(SymposiumRegistration.id)).where(
            SymposiumRegistration.business_id == business_id,
            SymposiumRegistration.event_id == event_id,
            SymposiumRegistration.status != "cancelled",
        )
    )
    dinner = db.scalar(
        select(func.count(VipDinnerRsvp.id)).where(
            VipDinnerRsvp.business_id == business_id,
            VipDinnerRsvp.event_id == event_id,
            VipDinnerRsvp.status != "cancelled",
        )
    )
    return {SeatType.SYMPOSIUM: symposium or 0, SeatType.VIP_DINNER: dinner or 0}


def list_benefits(db: Session, benefit_ids: list[int]) -> list[Benefit]:
    if not benefit_ids:
        return []
    return list(
        db.scalars(
            select(Benefit).where(Benefit.id.in_(benefit_ids), Benefit.is_active.is_(True))
        ).all()
    )


def upsert_tier_allocation(
    db: Session,
    event_id: int,
    tier: MemberTier,
    payload: EventAllocationIn,
) -> EventAllocation:
    allocation = get_tier_allocation(db, event_id, tier)
    if allocation is None:
        allocation = EventAllocation(event_id=event_id, tier=MemberTier(tier).value)
        db.add(allocation)

    for key, value in payload.model_dump().items():
        setattr(allocation, key, value)
    db.flush()
    logger.info("Set %s allocation for event %s", MemberTier(tier).value, event_id)
    return allocation


def upsert_allocation_override(
    db: Session,
    business_id: int,
    event_id: int,
    payload: AllocationOverrideIn,
) -> tuple[CompanyAllocationOverride, bool]:
    """Create or replace the single override row for a (business, event)."""
    override = get_allocation_override(db, business_id, event_id)
    created = override is None
    if created:
        override = CompanyAllocationOverride(business_id=business_id, event_id=event_id)
        db.add(override)

    values = payload.model_dump()
    values["override_mode"] = payload.override_mode.value
    values["custom_pass_name"] = payload.custom_pass_name or None
    values["reason"] = payload.reason or None
    for key, value in values.items():
        setattr(override, key, value)
    db.flush()

    logger.info(
        "%s %s allocation override for business %s event %s",
        "Created" if created else "Updated",
        payload.override_mode.value,
        business_id,
        event_id,
    )
    return override, created


def delete_allocation_override(db: Session, business_id: int, event_id: int) -> bool:
    override = get_allocation_override(db, business_id, event_id)
    if override is None:
        return False
    db.delete(override)
    db.flush()
    logger.info("Removed allocation override for business %s event %s", business_id, event_id)
    return True


def list_pricing_thresholds(db: Session) -> list[PricingThreshold]:
    return list(
        db.scalars(
            select(PricingThreshold).order_by(PricingThreshold.display_order, PricingThreshold.id)
        ).all()
    )


def create_pricing_threshold(db: Session, payload: PricingThresholdIn) -> PricingThreshold:
    values = payload.model_dump()
    values["threshold_type"] = payload.threshold_type.value
    threshold = PricingThreshold(**values)
    db.add(threshold)
    db.flush()
    logger.info(
        "Created %s pricing threshold %s (%s%%)",
        threshold.threshold_type,
        threshold.id,
        threshold.discount_percentage,
    )
    return threshold


def update_pricing_threshold(
    db: Session,
    threshold: PricingThreshold,
    payload: PricingThresholdPatch,
) -> PricingThreshold:
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(threshold, key, value)
    db.flush()
    logger.info("Updated pricing threshold %s", threshold.id)
    return threshold
