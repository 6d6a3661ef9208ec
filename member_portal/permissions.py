"""Permission derivation from team role and membership tier."""

from __future__ import annotations

from .constants import ROLE_DISPLAY_NAMES, TIER_DISPLAY_NAMES, MemberTier, TeamRole
from .schemas import UserPermissions

MANAGEMENT_FLAGS: dict[TeamRole, dict[str, bool]] = {
    TeamRole.OWNER: {
        "can_edit_profile": True,
        "can_manage_team": True,
        "can_manage_leadership": True,
    },
    TeamRole.ADMIN: {
        "can_edit_profile": True,
        "can_manage_team": True,
        "can_manage_leadership": False,
    },
    TeamRole.MEMBER: {
        "can_edit_profile": False,
        "can_manage_team": False,
        "can_manage_leadership": False,
    },
}

BENEFIT_FLAGS: tuple[str, ...] = (
    "can_claim_tickets",
    "can_register_events",
    "can_apply_speaking",
    "can_rsvp_dinners",
    "can_request_resources",
)


def derive_permissions(
    role: TeamRole | None,
    tier: MemberTier | None,
    is_active_member: bool,
) -> UserPermissions:
    """Build the permission set for one (profile, business) pairing.

    Management flags follow the team role alone. Benefit flags follow the
    active-membership flag alone; the tier is carried through for display
    and allocation lookups but does not gate individual benefits.
    """
    if role is None:
        return UserPermissions()

    role = TeamRole(role)
    benefits = {flag: bool(is_active_member) for flag in BENEFIT_FLAGS}
    return UserPermissions(
        is_member=bool(is_active_member),
        team_role=role,
        tier=tier,
        **benefits,
        **MANAGEMENT_FLAGS[role],
    )


def is_company_admin(role: TeamRole | None) -> bool:
    return role in {TeamRole.OWNER, TeamRole.ADMIN}


def has_team_access(role: TeamRole | None) -> bool:
    return role is not None


def tier_display_name(tier: MemberTier | str | None) -> str:
    if not tier:
        return "Free"
    try:
        return TIER_DISPLAY_NAMES[MemberTier(tier)]
    except ValueError:
        return str(tier)


def role_display_name(role: TeamRole | str | None) -> str:
    if not role:
        return "None"
    try:
        return ROLE_DISPLAY_NAMES[TeamRole(role)]
    except ValueError:
        return str(role)
