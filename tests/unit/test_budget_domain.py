from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from fleetfuel.domain.budget import Allow, Block, Warn, build_status, evaluate_action, month_window
from fleetfuel.domain.errors import InvalidLimit, InvalidTripCost, TripGroupMismatch
from fleetfuel.domain.formatting import describe_decision, format_currency, format_percentage
from fleetfuel.domain.profiles import Role, TripScope
from fleetfuel.domain.trips import TripRecord
from fleetfuel.domain.validation import validate_limit

from factories import citizen, driver

UTC = ZoneInfo("UTC")


def _status(usage: str, limit: str):
    return build_status(
        user_id="u",
        role=Role.CITIZEN,
        monthly_usage=Decimal(usage),
        limit=Decimal(limit),
        period=month_window(datetime(2026, 10, 5, tzinfo=timezone.utc), UTC),
    )


def test_month_window_rolls_over_december() -> None:
    start, end = month_window(datetime(2026, 12, 31, 23, 59, tzinfo=timezone.utc), UTC)

    assert start == datetime(2026, 12, 1, tzinfo=UTC)
    assert end == datetime(2027, 1, 1, tzinfo=UTC)


def test_month_window_treats_naive_input_as_local_time() -> None:
    tz = ZoneInfo("America/New_York")
    start, end = month_window(datetime(2026, 3, 15, 9, 0), tz)

    assert start == datetime(2026, 3, 1, tzinfo=tz)
    assert end == datetime(2026, 4, 1, tzinfo=tz)
    assert start.utcoffset() != end.utcoffset()


def test_evaluate_action_boundaries() -> None:
    status = _status("400", "500")

    assert isinstance(evaluate_action(status, Decimal("50")), Allow)
    assert isinstance(evaluate_action(status, Decimal("50.01")), Warn)
    assert isinstance(evaluate_action(status, Decimal("100")), Warn)
    blocked = evaluate_action(status, Decimal("100.01"))
    assert isinstance(blocked, Block)
    assert blocked.overage == Decimal("0.01")


def test_evaluate_action_with_zero_limit() -> None:
    status = _status("0", "0")

    assert isinstance(evaluate_action(status, Decimal("0")), Allow)
    assert isinstance(evaluate_action(status, Decimal("0.01")), Block)


def test_format_currency_and_percentage() -> None:
    assert format_currency(Decimal("123.456")) == "E123.46"
    assert format_currency(Decimal("50"), "R") == "R50.00"
    assert format_currency(Decimal("100000"), grouping=True) == "E100,000.00"
    assert format_percentage(Decimal("74.5")) == "75"
    assert format_percentage(Decimal("74.49")) == "74"


def test_describe_decision_uses_role_wording() -> None:
    warn = Warn(new_total=Decimal("490"), limit=Decimal("500"), percentage=Decimal("98"))
    block = Block(new_total=Decimal("520"), limit=Decimal("500"), overage=Decimal("20"))

    assert describe_decision(warn, Role.CITIZEN) == "This trip will bring you to 98% of your budget."
    assert describe_decision(block, Role.DRIVER) == (
        "This trip will exceed your monthly limit by E20.00. Do you want to continue?"
    )
    assert describe_decision(Allow(new_total=Decimal("1"), limit=Decimal("500")), Role.DRIVER) is None


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("abc", "Please enter a valid amount"),
        (float("nan"), "Please enter a valid amount"),
        (-10, "Please enter a valid amount"),
        (0, "Budget cannot be zero"),
        ("100000.01", "Budget cannot exceed E100,000.00"),
    ],
)
def test_validate_limit_messages(value: object, message: str) -> None:
    with pytest.raises(InvalidLimit) as exc_info:
        validate_limit(value, allow_zero=False, maximum=Decimal("100000"))

    assert exc_info.value.message == message


def test_validate_limit_allows_zero_when_tolerated() -> None:
    assert validate_limit(0, allow_zero=True) == Decimal("0")
    assert validate_limit("250.50", allow_zero=False) == Decimal("250.50")


def test_trip_record_rejects_negative_cost() -> None:
    with pytest.raises(InvalidTripCost):
        TripRecord(
            id="t1",
            owner_id="citizen_1",
            start_time=datetime(2026, 10, 1, tzinfo=timezone.utc),
            cost=Decimal("-0.01"),
        )


def test_trip_record_requires_aware_start_time() -> None:
    with pytest.raises(ValueError):
        TripRecord(id="t1", owner_id="citizen_1", start_time=datetime(2026, 10, 1), cost=Decimal("1"))


def test_profile_variants_carry_their_own_scope() -> None:
    assert citizen("c1").trip_scope() == TripScope(owner_id="c1")
    assert driver("d1", group="biz_a").trip_scope() == TripScope(owner_id="d1", business_group_id="biz_a")
    assert citizen(budget="120").budget_limit == Decimal("120")
    assert driver(limit="900").role is Role.DRIVER


def test_new_trips_are_tagged_into_the_owner_scope() -> None:
    grouped = driver("d1", group="biz_a")

    assert grouped.trip_group_for(None) == "biz_a"
    assert grouped.trip_group_for("biz_a") == "biz_a"
    assert driver("d2", group=None).trip_group_for("biz_b") == "biz_b"
    assert citizen("c1").trip_group_for(None) is None

    with pytest.raises(TripGroupMismatch, match="biz_a"):
        grouped.trip_group_for("biz_other")
