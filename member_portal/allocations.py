"""Effective event allocations: tier defaults merged with company overrides."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .constants import (
    ALLOCATION_FIELDS,
    PASS_TYPE_FIELDS,
    SEAT_TYPE_FIELDS,
    OverrideMode,
    PassType,
    SeatType,
)
from .schemas import EffectiveAllocation


def _tier_value(tier_allocation: Any, field: str) -> int:
    # No tier row for the event counts as zero of everything.
    if tier_allocation is None:
        return 0
    return getattr(tier_allocation, field, None) or 0


def resolve_override_mode(value: OverrideMode | str | None) -> OverrideMode:
    """Anything other than ``absolute`` is applied as a delta."""
    if isinstance(value, str) and value.strip().lower() == OverrideMode.ABSOLUTE.value:
        return OverrideMode.ABSOLUTE
    return OverrideMode.ADDITIVE


def merge_field(tier_value: int, override_value: int | None, mode: OverrideMode) -> int:
    if override_value is None:
        return tier_value
    if mode is OverrideMode.ABSOLUTE:
        return override_value
    return tier_value + override_value


def compute_effective_allocation(
    tier_allocation: Any,
    override: Any | None,
    event_id: int | None = None,
) -> EffectiveAllocation:
    """Merge one event's tier default with a company's override row.

    ``has_override`` reports whether an override row exists, not whether any
    value changed. Results are never clamped, so an additive override can
    produce negative counts.
    """
    if event_id is None:
        event_id = getattr(tier_allocation, "event_id", None) or getattr(override, "event_id", None)

    if override is None:
        values = {field: _tier_value(tier_allocation, field) for field in ALLOCATION_FIELDS}
        return EffectiveAllocation(
            event_id=event_id,
            custom_pass_name=getattr(tier_allocation, "custom_pass_name", None),
            has_override=False,
            **values,
        )

    mode = resolve_override_mode(override.override_mode)
    values = {
        field: merge_field(
            _tier_value(tier_allocation, field),
            getattr(override, f"{field}_override", None),
            mode,
        )
        for field in ALLOCATION_FIELDS
    }
    return EffectiveAllocation(
        event_id=event_id,
        custom_pass_name=override.custom_pass_name or getattr(tier_allocation, "custom_pass_name", None),
        has_override=True,
        override_mode=mode,
        override_reason=override.reason,
        **values,
    )


def compute_effective_allocations(
    tier_allocations: Iterable[Any],
    overrides: Mapping[int, Any],
) -> list[EffectiveAllocation]:
    """One merged allocation per event, matching overrides by event id.

    Overrides for events without a tier default still produce an entry,
    merged against zero.
    """
    merged = []
    seen: set[int] = set()
    for allocation in tier_allocations:
        seen.add(allocation.event_id)
        merged.append(
            compute_effective_allocation(allocation, overrides.get(allocation.event_id), allocation.event_id)
        )
    for event_id, override in sorted(overrides.items()):
        if event_id not in seen:
            merged.append(compute_effective_allocation(None, override, event_id))
    return merged


def allocated_for_pass(effective: EffectiveAllocation, pass_type: PassType) -> int:
    return getattr(effective, PASS_TYPE_FIELDS[PassType(pass_type)])


def remaining_for_pass(effective: EffectiveAllocation, pass_type: PassType, claimed: int) -> int:
    return max(0, allocated_for_pass(effective, pass_type) - claimed)


def allocated_for_seat(effective: EffectiveAllocation, seat_type: SeatType) -> int:
    return getattr(effective, SEAT_TYPE_FIELDS[SeatType(seat_type)])


def remaining_for_seat(effective: EffectiveAllocation, seat_type: SeatType, taken: int) -> int:
    return max(0, allocated_for_seat(effective, seat_type) - taken)
