from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from member_portal import db
from member_portal.models import Benefit, PricingThreshold
from member_portal.pricing import (
    calculate_benefit_total,
    calculate_dynamic_pricing,
    calculate_max_discount,
    fetch_pricing_thresholds,
    format_currency,
    get_applicable_thresholds,
)


def threshold(threshold_type: str, value: float, discount: float) -> SimpleNamespace:
    return SimpleNamespace(
        threshold_type=threshold_type,
        threshold_value=value,
        discount_percentage=discount,
        discount_label=f"{discount}% off",
    )


def test_benefit_total_applies_both_multipliers() -> None:
    benefits = [
        Benefit(label="Booth", base_price=100),
        Benefit(label="Keynote", base_price=200, region_multiplier=1.5),
    ]

    assert calculate_benefit_total(benefits) == pytest.approx(400)
    assert calculate_benefit_total(benefits, 2.0) == pytest.approx(800)


def test_zero_region_multiplier_on_benefit_is_kept() -> None:
    benefits = [Benefit(label="Waived", base_price=100, region_multiplier=0.0)]

    assert calculate_benefit_total(benefits) == 0


def test_empty_benefit_total_is_zero() -> None:
    assert calculate_benefit_total([]) == 0


def test_applicable_thresholds_by_count_and_value() -> None:
    thresholds = [
        threshold("benefit_count", 3, 5),
        threshold("benefit_count", 5, 10),
        threshold("total_value", 1000, 7),
        threshold("tier_based", 0, 50),
    ]

    applied = get_applicable_thresholds(3, 1000, thresholds)

    assert [t.discount_percentage for t in applied] == [5, 7]


def test_tier_based_threshold_never_applies() -> None:
    assert get_applicable_thresholds(100, 1_000_000, [threshold("tier_based", 1, 25)]) == []


def test_max_discount_does_not_stack() -> None:
    assert calculate_max_discount([threshold("benefit_count", 1, 5), threshold("total_value", 1, 10)]) == 10
    assert calculate_max_discount([]) == 0


def test_dynamic_pricing_example() -> None:
    benefits = [Benefit(label="A", base_price=100), Benefit(label="B", base_price=200)]

    result = calculate_dynamic_pricing(
        benefits,
        1.0,
        fetch_thresholds=lambda: [threshold("benefit_count", 2, 5)],
    )

    assert result.benefit_total == pytest.approx(300)
    assert len(result.applied_thresholds) == 1
    assert result.max_discount == 5
    assert result.discounted_benefit_total == pytest.approx(285)
    assert result.savings == pytest.approx(15)


def test_dynamic_pricing_with_no_benefits() -> None:
    result = calculate_dynamic_pricing(
        [],
        1.0,
        fetch_thresholds=lambda: [threshold("benefit_count", 1, 5), threshold("total_value", 50, 10)],
    )

    assert result.benefit_total == 0
    assert result.applied_thresholds == []
    assert result.max_discount == 0
    assert result.discounted_benefit_total == 0
    assert result.savings == 0


def test_format_currency_rounds_to_whole_dollars() -> None:
    assert format_currency(1234.4) == "$1,234"
    assert format_currency(0) == "$0"
    assert format_currency(-15) == "-$15"


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (2.5, "$3"),
        (0.5, "$1"),
        (1.49, "$1"),
        (-2.5, "-$3"),
        (-0.4, "$0"),
        (1234567.5, "$1,234,568"),
    ],
)
def test_format_currency_rounds_halves_up(amount, expected) -> None:
    assert format_currency(amount) == expected


def test_fetch_thresholds_returns_active_rows_in_display_order(tmp_path) -> None:
    db.reset_engine(f"sqlite:///{tmp_path}/pricing.db")
    db.init_db()

    with db.SessionLocal() as session:
        session.add_all(
            [
                PricingThreshold(
                    threshold_type="total_value",
                    threshold_value=5000,
                    discount_percentage=10,
                    discount_label="Big spender",
                    display_order=2,
                ),
                PricingThreshold(
                    threshold_type="benefit_count",
                    threshold_value=3,
                    discount_percentage=5,
                    discount_label="Bundle",
                    display_order=1,
                ),
                PricingThreshold(
                    threshold_type="benefit_count",
                    threshold_value=10,
                    discount_percentage=20,
                    discount_label="Retired",
                    display_order=0,
                    is_active=False,
                ),
            ]
        )
        session.commit()

        labels = [t.discount_label for t in fetch_pricing_thresholds(session)]

    assert labels == ["Bundle", "Big spender"]


def test_fetch_thresholds_degrades_to_empty_on_store_error(tmp_path) -> None:
    # No tables exist in this database.
    engine = create_engine(f"sqlite:///{tmp_path}/empty.db")

    with Session(engine) as session:
        assert fetch_pricing_thresholds(session) == []
        result = calculate_dynamic_pricing(
            [Benefit(label="A", base_price=100)],
            fetch_thresholds=lambda: fetch_pricing_thresholds(session),
        )

    assert result.max_discount == 0
    assert result.discounted_benefit_total == pytest.approx(100)
    engine.dispose()
