"""Dynamic pricing of benefit bundles with threshold discounts."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .constants import ThresholdType
from .models import PricingThreshold

logger = logging.getLogger(__name__)

ThresholdSource = Callable[[], Sequence[Any]]


@dataclass
class DynamicPricing:
    benefit_total: float = 0.0
    applied_thresholds: list[Any] = field(default_factory=list)
    max_discount: float = 0.0
    discounted_benefit_total: float = 0.0
    savings: float = 0.0


def calculate_benefit_total(benefits: Sequence[Any], region_multiplier: float = 1.0) -> float:
    total = 0.0
    for benefit in benefits:
        benefit_multiplier = benefit.region_multiplier
        if benefit_multiplier is None:
            benefit_multiplier = 1.0
        total += benefit.base_price * benefit_multiplier * region_multiplier
    return total


def fetch_pricing_thresholds(db: Session) -> list[PricingThreshold]:
    """Active thresholds in display order; an unreadable store yields none."""
    try:
        return list(
            db.scalars(
                select(PricingThreshold)
                .where(PricingThreshold.is_active.is_(True))
                .order_by(PricingThreshold.display_order, PricingThreshold.id)
            ).all()
        )
    except SQLAlchemyError:
        logger.exception("Error fetching pricing thresholds")
        return []


def get_applicable_thresholds(
    benefit_count: int,
    total_value: float,
    thresholds: Sequence[Any],
) -> list[Any]:
    applicable = []
    for threshold in thresholds:
        threshold_type = threshold.threshold_type
        if threshold_type == ThresholdType.BENEFIT_COUNT:
            if benefit_count >= threshold.threshold_value:
                applicable.append(threshold)
        elif threshold_type == ThresholdType.TOTAL_VALUE:
            if total_value >= threshold.threshold_value:
                applicable.append(threshold)
        # tier_based thresholds are configurable but not matched yet.
    return applicable


def calculate_max_discount(thresholds: Sequence[Any]) -> float:
    """Highest single discount percentage; discounts never stack."""
    if not thresholds:
        return 0
    return max(threshold.discount_percentage for threshold in thresholds)


def calculate_dynamic_pricing(
    benefits: Sequence[Any],
    region_multiplier: float = 1.0,
    *,
    fetch_thresholds: ThresholdSource,
) -> DynamicPricing:
    benefit_total = calculate_benefit_total(benefits, region_multiplier)
    applied = get_applicable_thresholds(len(benefits), benefit_total, fetch_thresholds())
    max_discount = calculate_max_discount(applied)

    discounted = benefit_total * (1 - max_discount / 100)
    return DynamicPricing(
        benefit_total=benefit_total,
        applied_thresholds=applied,
        max_discount=max_discount,
        discounted_benefit_total=discounted,
        savings=benefit_total - discounted,
    )


def format_currency(amount: float) -> str:
    """Whole-dollar USD string for display only."""
    rounded = int(Decimal(str(abs(amount))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if amount < 0 and rounded else ""
    return f"{sign}${rounded:,}"
