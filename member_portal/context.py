"""Per-request member state assembled from the record store."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from .allocations import compute_effective_allocation, compute_effective_allocations
from .constants import MemberTier, TeamRole
from .models import Business, Membership, TeamMembership
from .permissions import derive_permissions
from .queries import (
    get_active_membership,
    get_allocation_override,
    get_team_membership,
    get_tier_allocation,
    list_allocation_overrides,
    list_tier_allocations,
)
from .schemas import EffectiveAllocation, UserPermissions


@dataclass
class MemberContext:
    business: Business
    team_membership: TeamMembership | None
    membership: Membership | None
    permissions: UserPermissions
    allocations: list[EffectiveAllocation] = field(default_factory=list)

    @property
    def tier(self) -> MemberTier | None:
        if self.membership is None:
            return None
        return MemberTier(self.membership.tier)


def load_member_context(
    db: Session,
    profile_id: int | None,
    business: Business,
    include_allocations: bool = True,
) -> MemberContext:
    """Read role, membership and allocations for one business in one pass.

    Nothing is cached here; rebuild the context after any tier, allocation
    or override change.
    """
    team_membership = None
    if profile_id is not None:
        team_membership = get_team_membership(db, profile_id, business.id)
    membership = get_active_membership(db, business.id)

    role = TeamRole(team_membership.role) if team_membership else None
    tier = MemberTier(membership.tier) if membership else None
    permissions = derive_permissions(role, tier, membership is not None and membership.is_active)

    context = MemberContext(
        business=business,
        team_membership=team_membership,
        membership=membership,
        permissions=permissions,
    )
    if include_allocations and tier is not None:
        context.allocations = compute_effective_allocations(
            list_tier_allocations(db, tier),
            list_allocation_overrides(db, business.id),
        )
    return context


def load_event_allocation(db: Session, business_id: int, event_id: int, tier: MemberTier | None) -> EffectiveAllocation:
    """Fetch the tier default and the override together and merge them."""
    tier_allocation = get_tier_allocation(db, event_id, tier) if tier is not None else None
    override = get_allocation_override(db, business_id, event_id)
    return compute_effective_allocation(tier_allocation, override, event_id)
