from __future__ import annotations

import pytest

from member_portal.constants import MemberTier, TeamRole
from member_portal.permissions import (
    BENEFIT_FLAGS,
    derive_permissions,
    has_team_access,
    is_company_admin,
    role_display_name,
    tier_display_name,
)

MANAGEMENT = ("can_edit_profile", "can_manage_team", "can_manage_leadership")
TIERS = [None, *MemberTier]


def flags(permissions, names) -> dict[str, bool]:
    return {name: getattr(permissions, name) for name in names}


@pytest.mark.parametrize("tier", TIERS)
def test_owner_keeps_management_without_active_membership(tier) -> None:
    permissions = derive_permissions(TeamRole.OWNER, tier, False)

    assert flags(permissions, MANAGEMENT) == dict.fromkeys(MANAGEMENT, True)
    assert flags(permissions, BENEFIT_FLAGS) == dict.fromkeys(BENEFIT_FLAGS, False)
    assert permissions.is_member is False


@pytest.mark.parametrize("role", list(TeamRole))
@pytest.mark.parametrize("tier", TIERS)
def test_benefit_flags_follow_active_membership_only(role: TeamRole, tier) -> None:
    inactive = derive_permissions(role, tier, False)
    active = derive_permissions(role, tier, True)

    assert not any(flags(inactive, BENEFIT_FLAGS).values())
    assert all(flags(active, BENEFIT_FLAGS).values())
    assert active.is_member is True


def test_admin_cannot_manage_leadership() -> None:
    permissions = derive_permissions(TeamRole.ADMIN, MemberTier.GOLD, True)

    assert permissions.can_edit_profile is True
    assert permissions.can_manage_team is True
    assert permissions.can_manage_leadership is False


def test_active_member_role_gets_benefits_but_no_management() -> None:
    permissions = derive_permissions(TeamRole.MEMBER, MemberTier.PREMIER, True)

    assert all(flags(permissions, BENEFIT_FLAGS).values())
    assert not any(flags(permissions, MANAGEMENT).values())


def test_role_and_tier_pass_through_verbatim() -> None:
    permissions = derive_permissions(TeamRole.ADMIN, MemberTier.PLATINUM, False)

    assert permissions.team_role is TeamRole.ADMIN
    assert permissions.tier is MemberTier.PLATINUM


def test_no_team_role_gets_nothing() -> None:
    permissions = derive_permissions(None, MemberTier.GOLD, True)

    assert permissions.is_member is False
    assert permissions.team_role is None
    assert permissions.tier is None
    assert not any(flags(permissions, (*BENEFIT_FLAGS, *MANAGEMENT)).values())


def test_role_helpers() -> None:
    assert is_company_admin(TeamRole.OWNER)
    assert is_company_admin("admin")
    assert not is_company_admin(TeamRole.MEMBER)
    assert not is_company_admin(None)
    assert has_team_access(TeamRole.MEMBER)
    assert not has_team_access(None)


def test_display_names() -> None:
    assert tier_display_name(None) == "Free"
    assert tier_display_name(MemberTier.CHAIRMAN) == "Chairman's Circle"
    assert tier_display_name("sponsor") == "Sponsor"
    assert tier_display_name("bronze") == "bronze"
    assert role_display_name(None) == "None"
    assert role_display_name("owner") == "Owner"
