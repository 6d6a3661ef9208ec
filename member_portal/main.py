"""FastAPI app for member entitlements, event allocations and benefit pricing."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .allocations import allocated_for_pass, allocated_for_seat, remaining_for_pass, remaining_for_seat
from .constants import (
    CURRENT_TIER_ORDER,
    LEGACY_TIER_ORDER,
    PASS_TYPE_LABELS,
    SEAT_TYPE_LABELS,
    MemberTier,
    PassType,
    SeatType,
)
from .context import MemberContext, load_event_allocation, load_member_context
from .db import get_db, init_db
from .memberships import change_tier, deactivate_membership, grant_membership, normalize_tier
from .models import Business, Event, PricingThreshold, SymposiumRegistration, TicketClaim, VipDinnerRsvp
from .permissions import role_display_name, tier_display_name
from .pricing import calculate_dynamic_pricing, fetch_pricing_thresholds, format_currency
from .queries import (
    count_claims_by_pass,
    count_seats_taken,
    create_pricing_threshold,
    delete_allocation_override,
    get_active_membership,
    list_benefits,
    list_pricing_thresholds,
    update_pricing_threshold,
    upsert_allocation_override,
    upsert_tier_allocation,
)
from .schemas import (
    AllocationOverrideIn,
    AllocationOverrideOut,
    CompanyContextOut,
    EffectiveAllocation,
    EventAllocationIn,
    EventAllocationOut,
    EventEntitlementOut,
    MembershipDeactivateRequest,
    MembershipGrantRequest,
    MembershipOut,
    PassRemaining,
    PricingQuoteOut,
    PricingQuoteRequest,
    PricingThresholdIn,
    PricingThresholdOut,
    PricingThresholdPatch,
    SeatRemaining,
    SymposiumRegistrationOut,
    SymposiumRegistrationRequest,
    TicketClaimOut,
    TicketClaimRequest,
    TierChangeRequest,
    VipDinnerRsvpOut,
    VipDinnerRsvpRequest,
)
from .security import verify_admin_key

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(
    title="Member Portal Entitlements API",
    description="Member permissions, per-event ticket and seat allocations, and benefit pricing.",
    version="0.1.0",
    lifespan=lifespan,
)


def require_admin(x_admin_key: str | None = Header(default=None)) -> None:
    if not verify_admin_key(x_admin_key, os.getenv("ADMIN_API_KEY")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin key.",
        )


def get_business_or_404(db: Session, business_id: int) -> Business:
    business = db.get(Business, business_id)
    if not business:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Business not found.",
        )
    return business


def get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found.",
        )
    return event


def resolve_member_context(
    db: Session,
    business_id: int,
    profile_id: int | None,
    include_allocations: bool,
) -> MemberContext:
    if profile_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing profile identity.",
        )

    business = get_business_or_404(db, business_id)
    context = load_member_context(db, profile_id, business, include_allocations=include_allocations)
    if context.team_membership is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this company's team.",
        )
    return context


def get_member_context(
    business_id: int,
    x_profile_id: int | None = Header(default=None),
    db: Session = Depends(get_db),
) -> MemberContext:
    return resolve_member_context(db, business_id, x_profile_id, include_allocations=False)


def get_member_context_with_allocations(
    business_id: int,
    x_profile_id: int | None = Header(default=None),
    db: Session = Depends(get_db),
) -> MemberContext:
    return resolve_member_context(db, business_id, x_profile_id, include_allocations=True)


def build_event_entitlement(
    db: Session,
    context: MemberContext,
    event: Event,
) -> EventEntitlementOut:
    allocation = load_event_allocation(db, context.business.id, event.id, context.tier)
    claimed = count_claims_by_pass(db, context.business.id, event.id)
    passes = [
        PassRemaining(
            pass_type=pass_type,
            label=PASS_TYPE_LABELS[pass_type],
            allocated=allocated_for_pass(allocation, pass_type),
            claimed=claimed.get(pass_type.value, 0),
            remaining=remaining_for_pass(allocation, pass_type, claimed.get(pass_type.value, 0)),
        )
        for pass_type in PassType
    ]
    taken = count_seats_taken(db, context.business.id, event.id)
    seats = [
        SeatRemaining(
            seat_type=seat_type,
            label=SEAT_TYPE_LABELS[seat_type],
            allocated=allocated_for_seat(allocation, seat_type),
            taken=taken[seat_type],
            remaining=remaining_for_seat(allocation, seat_type, taken[seat_type]),
        )
        for seat_type in SeatType
    ]
    return EventEntitlementOut(
        event_id=event.id,
        event_name=event.name,
        allocation=allocation,
        passes=passes,
        seats=seats,
    )


def ensure_seat_available(db: Session, context: MemberContext, event: Event, seat_type: SeatType) -> None:
    allocation = load_event_allocation(db, context.business.id, event.id, context.tier)
    taken = count_seats_taken(db, context.business.id, event.id)[seat_type]
    if remaining_for_seat(allocation, seat_type, taken) <= 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"No {SEAT_TYPE_LABELS[seat_type]} seats remaining.",
        )


@app.get("/health")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/tiers")
def get_tier_catalog() -> dict[str, list[dict]]:
    def describe(order: dict[MemberTier, int]) -> list[dict]:
        return [
            {"tier": tier.value, "rank": rank, "name": tier_display_name(tier)}
            for tier, rank in order.items()
        ]

    return {
        "current": describe(CURRENT_TIER_ORDER),
        "legacy": describe(LEGACY_TIER_ORDER),
    }


@app.get("/companies/{business_id}/context", response_model=CompanyContextOut)
def get_company_context(context: MemberContext = Depends(get_member_context)) -> CompanyContextOut:
    return CompanyContextOut(
        business_id=context.business.id,
        business_name=context.business.name,
        tier_display_name=tier_display_name(context.tier),
        role_display_name=role_display_name(context.permissions.team_role),
        permissions=context.permissions,
        membership=MembershipOut.model_validate(context.membership) if context.membership else None,
    )


@app.get("/companies/{business_id}/allocations", response_model=list[EffectiveAllocation])
def list_company_allocations(
    context: MemberContext = Depends(get_member_context_with_allocations),
) -> list[EffectiveAllocation]:
    return context.allocations


@app.get(
    "/companies/{business_id}/events/{event_id}/allocation",
    response_model=EventEntitlementOut,
)
def get_event_allocation(
    event_id: int,
    context: MemberContext = Depends(get_member_context),
    db: Session = Depends(get_db),
) -> EventEntitlementOut:
    event = get_event_or_404(db, event_id)
    return build_event_entitlement(db, context, event)


@app.post(
    "/companies/{business_id}/events/{event_id}/claims",
    response_model=TicketClaimOut,
    status_code=status.HTTP_201_CREATED,
)
def claim_ticket(
    event_id: int,
    payload: TicketClaimRequest,
    context: MemberContext = Depends(get_member_context),
    db: Session = Depends(get_db),
) -> TicketClaim:
    if not context.permissions.can_claim_tickets:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="An active membership is required to claim tickets.",
        )

    event = get_event_or_404(db, event_id)
    # Count then insert, with no lock between them. Concurrent claims for the
    # same company must be serialized by the caller.
    allocation = load_event_allocation(db, context.business.id, event.id, context.tier)
    claimed = count_claims_by_pass(db, context.business.id, event.id).get(payload.pass_type.value, 0)
    if remaining_for_pass(allocation, payload.pass_type, claimed) <= 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"No {PASS_TYPE_LABELS[payload.pass_type]} tickets remaining.",
        )

    claim = TicketClaim(
        business_id=context.business.id,
        event_id=event.id,
        profile_id=context.team_membership.profile_id,
        pass_type=payload.pass_type.value,
        attendee_name=payload.attendee_name.strip(),
        attendee_email=payload.attendee_email.strip().lower(),
    )
    db.add(claim)
    db.commit()
    db.refresh(claim)
    logger.info(
        "Business %s claimed a %s ticket for event %s",
        context.business.id,
        claim.pass_type,
        event.id,
    )
    return claim


@app.post(
    "/companies/{business_id}/events/{event_id}/symposium-registrations",
    response_model=SymposiumRegistrationOut,
    status_code=status.HTTP_201_CREATED,
)
def register_symposium_seat(
    event_id: int,
    payload: SymposiumRegistrationRequest,
    context: MemberContext = Depends(get_member_context),
    db: Session = Depends(get_db),
) -> SymposiumRegistration:
    if not context.permissions.can_register_events:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="An active membership is required to register for the symposium.",
        )

    event = get_event_or_404(db, event_id)
    # Same count-then-insert window as ticket claims.
    ensure_seat_available(db, context, event, SeatType.SYMPOSIUM)

    registration = SymposiumRegistration(
        business_id=context.business.id,
        event_id=event.id,
        profile_id=context.team_membership.profile_id,
        **payload.model_dump(exclude={"attendee_name", "attendee_email"}),
        attendee_name=payload.attendee_name.strip(),
        attendee_email=payload.attendee_email.strip().lower(),
    )
    db.add(registration)
    db.commit()
    db.refresh(registration)
    logger.info("Business %s registered a symposium seat for event %s", context.business.id, event.id)
    return registration


@app.post(
    "/companies/{business_id}/events/{event_id}/dinner-rsvps",
    response_model=VipDinnerRsvpOut,
    status_code=status.HTTP_201_CREATED,
)
def rsvp_vip_dinner(
    event_id: int,
    payload: VipDinnerRsvpRequest,
    context: MemberContext = Depends(get_member_context),
    db: Session = Depends(get_db),
) -> VipDinnerRsvp:
    if not context.permissions.can_rsvp_dinners:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="An active membership is required to RSVP for the VIP dinner.",
        )

    event = get_event_or_404(db, event_id)
    ensure_seat_available(db, context, event, SeatType.VIP_DINNER)

    rsvp = VipDinnerRsvp(
        business_id=context.business.id,
        event_id=event.id,
        profile_id=context.team_membership.profile_id,
        **payload.model_dump(exclude={"guest_name", "guest_email"}),
        guest_name=payload.guest_name.strip(),
        guest_email=payload.guest_email.strip().lower(),
    )
    db.add(rsvp)
    db.commit()
    db.refresh(rsvp)
    logger.info("Business %s reserved a VIP dinner seat for event %s", context.business.id, event.id)
    return rsvp


@app.post("/pricing/quote", response_model=PricingQuoteOut)
def quote_benefits(payload: PricingQuoteRequest, db: Session = Depends(get_db)) -> PricingQuoteOut:
    benefits = list_benefits(db, payload.benefit_ids)
    if len(benefits) != len(set(payload.benefit_ids)):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="One or more benefits not found.",
        )

    result = calculate_dynamic_pricing(
        benefits,
        payload.region_multiplier,
        fetch_thresholds=lambda: fetch_pricing_thresholds(db),
    )
    return PricingQuoteOut(
        benefit_total=result.benefit_total,
        applied_thresholds=[PricingThresholdOut.model_validate(t) for t in result.applied_thresholds],
        max_discount=result.max_discount,
        discounted_benefit_total=result.discounted_benefit_total,
        savings=result.savings,
        formatted_total=format_currency(result.discounted_benefit_total),
        formatted_savings=format_currency(result.savings),
    )


@app.put(
    "/admin/events/{event_id}/allocations/{tier}",
    response_model=EventAllocationOut,
    dependencies=[Depends(require_admin)],
)
def set_tier_allocation(
    event_id: int,
    tier: str,
    payload: EventAllocationIn,
    db: Session = Depends(get_db),
) -> EventAllocationOut:
    normalized = normalize_tier(tier)
    if normalized is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Unknown tier.",
        )
    get_event_or_404(db, event_id)

    allocation = upsert_tier_allocation(db, event_id, normalized, payload)
    db.commit()
    db.refresh(allocation)
    return EventAllocationOut.model_validate(allocation)


@app.put(
    "/admin/companies/{business_id}/events/{event_id}/override",
    response_model=AllocationOverrideOut,
    dependencies=[Depends(require_admin)],
)
def set_allocation_override(
    business_id: int,
    event_id: int,
    payload: AllocationOverrideIn,
    response: Response,
    db: Session = Depends(get_db),
) -> AllocationOverrideOut:
    get_business_or_404(db, business_id)
    get_event_or_404(db, event_id)

    override, created = upsert_allocation_override(db, business_id, event_id, payload)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An override for this company and event already exists.",
        ) from None

    db.refresh(override)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return AllocationOverrideOut.model_validate(override)


@app.delete(
    "/admin/companies/{business_id}/events/{event_id}/override",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def remove_allocation_override(
    business_id: int,
    event_id: int,
    db: Session = Depends(get_db),
) -> Response:
    if not delete_allocation_override(db, business_id, event_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Override not found.",
        )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get(
    "/admin/pricing/thresholds",
    response_model=list[PricingThresholdOut],
    dependencies=[Depends(require_admin)],
)
def get_pricing_thresholds(db: Session = Depends(get_db)) -> list[PricingThreshold]:
    return list_pricing_thresholds(db)


@app.post(
    "/admin/pricing/thresholds",
    response_model=PricingThresholdOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def add_pricing_threshold(payload: PricingThresholdIn, db: Session = Depends(get_db)) -> PricingThreshold:
    threshold = create_pricing_threshold(db, payload)
    db.commit()
    db.refresh(threshold)
    return threshold


@app.patch(
    "/admin/pricing/thresholds/{threshold_id}",
    response_model=PricingThresholdOut,
    dependencies=[Depends(require_admin)],
)
def edit_pricing_threshold(
    threshold_id: int,
    payload: PricingThresholdPatch,
    db: Session = Depends(get_db),
) -> PricingThreshold:
    threshold = db.get(PricingThreshold, threshold_id)
    if not threshold:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pricing threshold not found.",
        )
    update_pricing_threshold(db, threshold, payload)
    db.commit()
    db.refresh(threshold)
    return threshold


@app.post(
    "/admin/companies/{business_id}/membership",
    response_model=MembershipOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_membership(
    business_id: int,
    payload: MembershipGrantRequest,
    db: Session = Depends(get_db),
) -> MembershipOut:
    get_business_or_404(db, business_id)
    membership, created = grant_membership(
        db,
        business_id,
        payload.tier,
        **payload.model_dump(exclude={"tier"}),
    )
    if not created:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Business already has an active membership.",
        )
    db.commit()
    db.refresh(membership)
    return MembershipOut.model_validate(membership)


@app.patch(
    "/admin/companies/{business_id}/membership",
    response_model=MembershipOut,
    dependencies=[Depends(require_admin)],
)
def update_membership_tier(
    business_id: int,
    payload: TierChangeRequest,
    db: Session = Depends(get_db),
) -> MembershipOut:
    membership = get_active_membership(db, business_id)
    if not membership:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active membership.",
        )
    change_tier(db, membership, payload.tier, payload.notes)
    db.commit()
    db.refresh(membership)
    return MembershipOut.model_validate(membership)


@app.delete(
    "/admin/companies/{business_id}/membership",
    response_model=MembershipOut,
    dependencies=[Depends(require_admin)],
)
def end_membership(
    business_id: int,
    payload: MembershipDeactivateRequest | None = None,
    db: Session = Depends(get_db),
) -> MembershipOut:
    membership = get_active_membership(db, business_id)
    if not membership:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active membership.",
        )
    deactivate_membership(db, membership, payload.reason if payload else None)
    db.commit()
    db.refresh(membership)
    return MembershipOut.model_validate(membership)
