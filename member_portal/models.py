"""SQLAlchemy models for the directory, membership and allocation records."""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .constants import OverrideMode
from .db import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Business(Base):
    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False, index=True)
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    team_memberships: Mapped[list["TeamMembership"]] = relationship(
        back_populates="business",
        cascade="all, delete-orphan",
    )
    memberships: Mapped[list["Membership"]] = relationship(
        back_populates="business",
        cascade="all, delete-orphan",
    )
    allocation_overrides: Mapped[list["CompanyAllocationOverride"]] = relationship(
        back_populates="business",
        cascade="all, delete-orphan",
    )


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    team_memberships: Mapped[list["TeamMembership"]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
    )


class TeamMembership(Base):
    __tablename__ = "team_memberships"
    __table_args__ = (UniqueConstraint("profile_id", "business_id", name="uq_team_profile_business"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    profile_id: Mapped[int] = mapped_column(ForeignKey("profiles.id"), nullable=False, index=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="member")
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    profile: Mapped[Profile] = relationship(back_populates="team_memberships")
    business: Mapped[Business] = relationship(back_populates="team_memberships")


class Membership(Base):
    __tablename__ = "memberships"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    tier: Mapped[str] = mapped_column(String(32), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    member_since: Mapped[date] = mapped_column(Date, default=lambda: utc_now().date())
    renewal_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_amount_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    billing_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    billing_contact_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    business: Mapped[Business] = relationship(back_populates="memberships")


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    event_type: Mapped[str] = mapped_column(String(32), nullable=False, default="flagship")
    starts_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    allocations: Mapped[list["EventAllocation"]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
    )


class EventAllocation(Base):
    __tablename__ = "event_allocations"
    __table_args__ = (UniqueConstraint("event_id", "tier", name="uq_allocation_event_tier"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    tier: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    ga_tickets: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pro_tickets: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    whale_tickets: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    custom_tickets: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    custom_pass_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    symposium_seats: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    vip_dinner_seats: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    event: Mapped[Event] = relationship(back_populates="allocations")


class CompanyAllocationOverride(Base):
    __tablename__ = "company_allocation_overrides"
    __table_args__ = (UniqueConstraint("business_id", "event_id", name="uq_override_business_event"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    override_mode: Mapped[OverrideMode] = mapped_column(
        Enum(
            OverrideMode,
            name="ck_override_mode",
            native_enum=False,
            create_constraint=True,
            validate_strings=True,
            values_callable=lambda modes: [mode.value for mode in modes],
            length=16,
        ),
        nullable=False,
        default=OverrideMode.ABSOLUTE,
    )
    ga_tickets_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pro_tickets_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    whale_tickets_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    custom_tickets_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    custom_pass_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    symposium_seats_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    vip_dinner_seats_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    business: Mapped[Business] = relationship(back_populates="allocation_overrides")


class PricingThreshold(Base):
    __tablename__ = "pricing_thresholds"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    threshold_type: Mapped[str] = mapped_column(String(32), nullable=False)
    threshold_value: Mapped[float] = mapped_column(Float, nullable=False)
    discount_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    discount_label: Mapped[str] = mapped_column(String(120), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class Benefit(Base):
    __tablename__ = "benefits"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    base_price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    region_multiplier: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class TicketClaim(Base):
    __tablename__ = "ticket_claims"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    profile_id: Mapped[int | None] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    pass_type: Mapped[str] = mapped_column(String(16), nullable=False)
    attendee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    attendee_email: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    claimed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class SymposiumRegistration(Base):
    __tablename__ = "symposium_registrations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    profile_id: Mapped[int | None] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    attendee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    attendee_email: Mapped[str] = mapped_column(String(255), nullable=False)
    attendee_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    dietary_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    accessibility_needs: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="registered")
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class VipDinnerRsvp(Base):
    __tablename__ = "vip_dinner_rsvps"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    profile_id: Mapped[int | None] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    guest_name: Mapped[str] = mapped_column(String(200), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    dietary_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    seating_preferences: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="confirmed")
    rsvp_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
