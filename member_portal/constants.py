"""Tier, role and pass catalog definitions."""

from __future__ import annotations

from enum import Enum
from typing import Final


class TeamRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class MemberTier(str, Enum):
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    CHAIRMAN = "chairman"
    EXECUTIVE = "executive"
    INDUSTRY = "industry"
    PREMIER = "premier"
    SPONSOR = "sponsor"


class OverrideMode(str, Enum):
    ABSOLUTE = "absolute"
    ADDITIVE = "additive"


class PassType(str, Enum):
    GA = "ga"
    PRO = "pro"
    WHALE = "whale"
    CUSTOM = "custom"


class SeatType(str, Enum):
    SYMPOSIUM = "symposium"
    VIP_DINNER = "vip_dinner"


class ThresholdType(str, Enum):
    BENEFIT_COUNT = "benefit_count"
    TOTAL_VALUE = "total_value"
    TIER_BASED = "tier_based"


# Two tier ladders coexist: memberships sold before the restructure keep the
# legacy names.
LEGACY_TIER_ORDER: Final[dict[MemberTier, int]] = {
    MemberTier.SILVER: 1,
    MemberTier.GOLD: 2,
    MemberTier.PLATINUM: 3,
    MemberTier.CHAIRMAN: 4,
    MemberTier.EXECUTIVE: 5,
}

CURRENT_TIER_ORDER: Final[dict[MemberTier, int]] = {
    MemberTier.INDUSTRY: 1,
    MemberTier.PREMIER: 2,
    MemberTier.EXECUTIVE: 3,
    MemberTier.SPONSOR: 4,
    MemberTier.CHAIRMAN: 5,
}

TIER_DISPLAY_NAMES: Final[dict[MemberTier, str]] = {
    MemberTier.SILVER: "Silver",
    MemberTier.GOLD: "Gold",
    MemberTier.PLATINUM: "Platinum",
    MemberTier.CHAIRMAN: "Chairman's Circle",
    MemberTier.EXECUTIVE: "Executive",
    MemberTier.INDUSTRY: "Industry",
    MemberTier.PREMIER: "Premier",
    MemberTier.SPONSOR: "Sponsor",
}

ROLE_DISPLAY_NAMES: Final[dict[TeamRole, str]] = {
    TeamRole.OWNER: "Owner",
    TeamRole.ADMIN: "Admin",
    TeamRole.MEMBER: "Member",
}

PASS_TYPE_LABELS: Final[dict[PassType, str]] = {
    PassType.GA: "General Admission",
    PassType.PRO: "Pro Pass",
    PassType.WHALE: "Whale Pass",
    PassType.CUSTOM: "Custom Pass",
}

ALLOCATION_FIELDS: Final[tuple[str, ...]] = (
    "ga_tickets",
    "pro_tickets",
    "whale_tickets",
    "custom_tickets",
    "symposium_seats",
    "vip_dinner_seats",
)

PASS_TYPE_FIELDS: Final[dict[PassType, str]] = {
    PassType.GA: "ga_tickets",
    PassType.PRO: "pro_tickets",
    PassType.WHALE: "whale_tickets",
    PassType.CUSTOM: "custom_tickets",
}

SEAT_TYPE_FIELDS: Final[dict[SeatType, str]] = {
    SeatType.SYMPOSIUM: "symposium_seats",
    SeatType.VIP_DINNER: "vip_dinner_seats",
}

SEAT_TYPE_LABELS: Final[dict[SeatType, str]] = {
    SeatType.SYMPOSIUM: "Symposium",
    SeatType.VIP_DINNER: "VIP Dinner",
}


def is_valid_tier(tier: str) -> bool:
    return tier in {member.value for member in MemberTier}


