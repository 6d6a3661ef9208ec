"""Pydantic schemas for derived entitlements and API payloads."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from .constants import MemberTier, OverrideMode, PassType, SeatType, TeamRole, ThresholdType


class UserPermissions(BaseModel):
    is_member: bool = False
    team_role: TeamRole | None = None
    tier: MemberTier | None = None

    can_claim_tickets: bool = False
    can_register_events: bool = False
    can_apply_speaking: bool = False
    can_rsvp_dinners: bool = False
    can_request_resources: bool = False

    can_edit_profile: bool = False
    can_manage_team: bool = False
    can_manage_leadership: bool = False


class EventAllocationIn(BaseModel):
    ga_tickets: int = 0
    pro_tickets: int = 0
    whale_tickets: int = 0
    custom_tickets: int = 0
    custom_pass_name: str | None = Field(default=None, max_length=120)
    symposium_seats: int = 0
    vip_dinner_seats: int = 0


class EventAllocationOut(EventAllocationIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    tier: MemberTier


class AllocationOverrideIn(BaseModel):
    override_mode: OverrideMode = OverrideMode.ABSOLUTE
    ga_tickets_override: int | None = None
    pro_tickets_override: int | None = None
    whale_tickets_override: int | None = None
    custom_tickets_override: int | None = None
    custom_pass_name: str | None = Field(default=None, max_length=120)
    symposium_seats_override: int | None = None
    vip_dinner_seats_override: int | None = None
    reason: str | None = None


class AllocationOverrideOut(AllocationOverrideIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_id: int
    event_id: int
    updated_at: datetime


class EffectiveAllocation(BaseModel):
    event_id: int | None = None
    ga_tickets: int = 0
    pro_tickets: int = 0
    whale_tickets: int = 0
    custom_tickets: int = 0
    custom_pass_name: str | None = None
    symposium_seats: int = 0
    vip_dinner_seats: int = 0
    has_override: bool = False
    override_mode: OverrideMode | None = None
    override_reason: str | None = None


class PassRemaining(BaseModel):
    pass_type: PassType
    label: str
    allocated: int
    claimed: int
    remaining: int


class SeatRemaining(BaseModel):
    seat_type: SeatType
    label: str
    allocated: int
    taken: int
    remaining: int


class EventEntitlementOut(BaseModel):
    event_id: int
    event_name: str
    allocation: EffectiveAllocation
    passes: list[PassRemaining]
    seats: list[SeatRemaining] = Field(default_factory=list)


class MembershipOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_id: int
    tier: MemberTier
    is_active: bool
    member_since: date
    renewal_date: date | None
    cancelled_at: datetime | None
    notes: str | None


class MembershipGrantRequest(BaseModel):
    tier: MemberTier
    renewal_date: date | None = None
    payment_amount_cents: int | None = Field(default=None, ge=0)
    billing_email: str | None = Field(default=None, max_length=255)
    billing_contact_name: str | None = Field(default=None, max_length=200)
    notes: str | None = None


class TierChangeRequest(BaseModel):
    tier: MemberTier
    notes: str | None = None


class MembershipDeactivateRequest(BaseModel):
    reason: str | None = None


class CompanyContextOut(BaseModel):
    business_id: int
    business_name: str
    tier_display_name: str
    role_display_name: str
    permissions: UserPermissions
    membership: MembershipOut | None


class PricingThresholdIn(BaseModel):
    threshold_type: ThresholdType
    threshold_value: float = Field(ge=0)
    discount_percentage: float = Field(ge=0, le=100)
    discount_label: str = Field(min_length=1, max_length=120)
    is_active: bool = True
    display_order: int = 0


class PricingThresholdPatch(BaseModel):
    threshold_value: float | None = Field(default=None, ge=0)
    discount_percentage: float | None = Field(default=None, ge=0, le=100)
    discount_label: str | None = Field(default=None, min_length=1, max_length=120)
    is_active: bool | None = None
    display_order: int | None = None


class PricingThresholdOut(PricingThresholdIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


class PricingQuoteRequest(BaseModel):
    benefit_ids: list[int] = Field(default_factory=list)
    region_multiplier: float = Field(default=1.0, gt=0)


class PricingQuoteOut(BaseModel):
    benefit_total: float
    applied_thresholds: list[PricingThresholdOut]
    max_discount: float
    discounted_benefit_total: float
    savings: float
    formatted_total: str
    formatted_savings: str


class TicketClaimRequest(BaseModel):
    pass_type: PassType
    attendee_name: str = Field(min_length=2, max_length=200)
    attendee_email: str = Field(min_length=5, max_length=255)


class TicketClaimOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_id: int
    event_id: int
    pass_type: PassType
    attendee_name: str
    attendee_email: str
    status: str
    claimed_at: datetime


class SymposiumRegistrationRequest(BaseModel):
    attendee_name: str = Field(min_length=2, max_length=200)
    attendee_email: str = Field(min_length=5, max_length=255)
    attendee_title: str | None = Field(default=None, max_length=200)
    dietary_requirements: str | None = None
    accessibility_needs: str | None = None


class SymposiumRegistrationOut(SymposiumRegistrationRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_id: int
    event_id: int
    status: str
    registered_at: datetime


class VipDinnerRsvpRequest(BaseModel):
    guest_name: str = Field(min_length=2, max_length=200)
    guest_email: str = Field(min_length=5, max_length=255)
    guest_title: str | None = Field(default=None, max_length=200)
    dietary_requirements: str | None = None
    seating_preferences: str | None = None


class VipDinnerRsvpOut(VipDinnerRsvpRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_id: int
    event_id: int
    status: str
    rsvp_at: datetime
