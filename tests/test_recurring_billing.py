from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import InvalidTransitionError, ValidationError
from app.core.recurring_billing import (
    Frequency,
    LineItem,
    ProfileEvent,
    ProfileStatus,
    RecurringBillingProfile,
    compute_next_invoice_date,
    format_amount,
    is_due,
    next_invoice_date,
    summarize,
    transition,
    validate,
)


def build_profile(**overrides) -> RecurringBillingProfile:
    values = dict(
        customer_id=1,
        profile_name="Lift AMC",
        frequency="month",
        start_date=date(2024, 1, 1),
        line_item=LineItem(item_id=7, rate=Decimal("100"), quantity=2, tax_percent=Decimal("18")),
    )
    values.update(overrides)
    return RecurringBillingProfile(**values)


# ---------------------------------------------------------------------------
# compute_next_invoice_date
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("frequency,expected", [
    ("week", date(2024, 3, 22)),
    ("2week", date(2024, 3, 29)),
    ("month", date(2024, 4, 15)),
    ("2month", date(2024, 5, 15)),
    ("3month", date(2024, 6, 15)),
    ("6month", date(2024, 9, 15)),
    ("year", date(2025, 3, 15)),
    ("2year", date(2026, 3, 15)),
])
def test_compute_next_invoice_date_steps(frequency, expected):
    assert compute_next_invoice_date(date(2024, 3, 15), frequency) == expected


@pytest.mark.parametrize("frequency", list(Frequency))
@pytest.mark.parametrize("anchor", [date(2024, 1, 31), date(2023, 12, 31), date(2024, 2, 29), date(2025, 6, 30)])
def test_next_date_is_strictly_later_and_monotonic(frequency, anchor):
    first = compute_next_invoice_date(anchor, frequency, None)
    second = compute_next_invoice_date(first, frequency)
    assert first > anchor
    assert second > first


def test_month_end_clamps_to_last_day():
    assert compute_next_invoice_date(date(2024, 1, 31), "month") == date(2024, 2, 29)
    assert compute_next_invoice_date(date(2023, 1, 31), "month") == date(2023, 2, 28)
    assert compute_next_invoice_date(date(2024, 8, 31), "6month") == date(2025, 2, 28)
    assert compute_next_invoice_date(date(2024, 2, 29), "year") == date(2025, 2, 28)


def test_month_step_crosses_year_boundary():
    assert compute_next_invoice_date(date(2024, 11, 30), "3month") == date(2025, 2, 28)


def test_compute_next_invoice_date_past_end_date_is_none():
    assert compute_next_invoice_date(date(2024, 1, 1), "month", date(2024, 1, 31)) is None


def test_compute_next_invoice_date_on_end_date_is_kept():
    assert compute_next_invoice_date(date(2024, 1, 1), "month", date(2024, 2, 1)) == date(2024, 2, 1)


def test_compute_next_invoice_date_rejects_unknown_frequency():
    with pytest.raises(ValidationError) as exc:
        compute_next_invoice_date(date(2024, 1, 1), "fortnight")
    assert exc.value.errors[0]["field"] == "frequency"


# ---------------------------------------------------------------------------
# next_invoice_date
# ---------------------------------------------------------------------------

def test_next_invoice_date_anchors_on_start_date():
    assert build_profile().next_invoice_date == date(2024, 2, 1)


def test_next_invoice_date_anchors_on_last_invoice_date():
    profile = build_profile(last_invoice_date=date(2024, 5, 10))
    assert next_invoice_date(profile) == date(2024, 6, 10)


def test_next_invoice_date_never_before_start_date():
    profile = build_profile(frequency="week", start_date=date(2024, 6, 1), last_invoice_date=date(2024, 1, 1))
    assert next_invoice_date(profile) == date(2024, 6, 1)


def test_next_invoice_date_none_after_end_date():
    profile = build_profile(end_date=date(2024, 3, 15), last_invoice_date=date(2024, 3, 1))
    assert next_invoice_date(profile) is None


@pytest.mark.parametrize("status", ["completed", "cancelled"])
def test_terminal_profiles_have_no_next_invoice_date(status):
    assert next_invoice_date(build_profile(status=status)) is None


def test_is_due():
    profile = build_profile()
    assert not is_due(profile, date(2024, 1, 31))
    assert is_due(profile, date(2024, 2, 1))
    assert is_due(profile, date(2024, 3, 1))
    assert not is_due(build_profile(status="cancelled"), date(2024, 3, 1))


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------

def test_validate_normalizes_profile():
    profile = build_profile(
        frequency="3month",
        line_item=LineItem(item_id=7, rate="4500.50", quantity=1, tax_percent=None),
    )
    result = validate(profile)
    assert result.profile.frequency is Frequency.THREE_MONTHS
    assert result.profile.status is ProfileStatus.ACTIVE
    assert result.profile.line_item.rate == Decimal("4500.50")
    assert result.profile.line_item.tax_percent == Decimal("0")
    assert result.next_invoice_date == date(2024, 4, 1)


def test_validate_rejects_end_date_before_start_date():
    with pytest.raises(ValidationError) as exc:
        validate(build_profile(start_date=date(2024, 6, 1), end_date=date(2024, 5, 31)))
    assert [e["field"] for e in exc.value.errors] == ["end_date"]


def test_validate_accepts_end_date_equal_to_start_date():
    result = validate(build_profile(end_date=date(2024, 1, 1)))
    assert result.next_invoice_date is None


@pytest.mark.parametrize("overrides,field", [
    ({"customer_id": None}, "customer_id"),
    ({"customer_id": ""}, "customer_id"),
    ({"profile_name": "   "}, "profile_name"),
    ({"start_date": None}, "start_date"),
    ({"frequency": "daily"}, "frequency"),
    ({"status": "paused"}, "status"),
    ({"line_item": None}, "item"),
    ({"line_item": LineItem(item_id=None, rate=Decimal("1"))}, "item.id"),
    ({"line_item": LineItem(item_id=7, rate=None)}, "item.rate"),
    ({"line_item": LineItem(item_id=7, rate=Decimal("-0.01"))}, "item.rate"),
    ({"line_item": LineItem(item_id=7, rate="abc")}, "item.rate"),
    ({"line_item": LineItem(item_id=7, rate=Decimal("1"), quantity=0)}, "item.qty"),
    ({"line_item": LineItem(item_id=7, rate=Decimal("1"), quantity=True)}, "item.qty"),
    ({"line_item": LineItem(item_id=7, rate=Decimal("1"), tax_percent=Decimal("-5"))}, "item.tax"),
])
def test_validate_rejects_bad_fields(overrides, field):
    with pytest.raises(ValidationError) as exc:
        validate(build_profile(**overrides))
    assert field in [e["field"] for e in exc.value.errors]


@pytest.mark.parametrize("line_item,field", [
    (LineItem(item_id=7, rate="10.005", quantity=3), "item.rate"),
    (LineItem(item_id=7, rate=Decimal("10000000000"), quantity=1), "item.rate"),
    (LineItem(item_id=7, rate=Decimal("100"), tax_percent="18.125"), "item.tax"),
    (LineItem(item_id=7, rate=Decimal("100"), tax_percent=Decimal("1000")), "item.tax"),
    (LineItem(item_id=7, rate="NaN"), "item.rate"),
])
def test_validate_rejects_amounts_that_do_not_fit_storage(line_item, field):
    with pytest.raises(ValidationError) as exc:
        validate(build_profile(line_item=line_item))
    assert [e["field"] for e in exc.value.errors] == [field]


def test_validate_accepts_largest_storable_amounts():
    line_item = LineItem(item_id=7, rate="9999999999.99", quantity=1, tax_percent="999.99")
    result = validate(build_profile(line_item=line_item))
    assert result.profile.line_item.rate == Decimal("9999999999.99")
    assert result.profile.line_item.tax_percent == Decimal("999.99")


def test_validate_accepts_trailing_zeros():
    line_item = LineItem(item_id=7, rate="10.500", quantity=1, tax_percent="18.000")
    assert validate(build_profile(line_item=line_item)).profile.line_item.rate == Decimal("10.5")


def test_validate_reports_every_problem():
    profile = build_profile(customer_id=None, start_date=None, line_item=LineItem(item_id=None, rate=None))
    with pytest.raises(ValidationError) as exc:
        validate(profile)
    fields = {e["field"] for e in exc.value.errors}
    assert {"customer_id", "start_date", "item.id", "item.rate"} <= fields


# ---------------------------------------------------------------------------
# transition
# ---------------------------------------------------------------------------

def test_invoice_generated_keeps_profile_active():
    updated = transition(build_profile(), ProfileEvent.INVOICE_GENERATED, run_date=date(2024, 2, 1))
    assert updated.status is ProfileStatus.ACTIVE
    assert updated.last_invoice_date == date(2024, 2, 1)
    assert updated.next_invoice_date == date(2024, 3, 1)


def test_invoice_generated_completes_profile_past_end_date():
    profile = build_profile(end_date=date(2024, 3, 15))
    assert compute_next_invoice_date(date(2024, 3, 1), "month", date(2024, 3, 15)) is None

    updated = transition(profile, "invoice_generated", run_date=date(2024, 3, 1))
    assert updated.status is ProfileStatus.COMPLETED
    assert updated.last_invoice_date == date(2024, 3, 1)
    assert updated.next_invoice_date is None


def test_invoice_generated_defaults_to_today():
    updated = transition(build_profile(start_date=date.today()), ProfileEvent.INVOICE_GENERATED)
    assert updated.last_invoice_date == date.today()


def test_invoice_generated_rejects_date_before_last_invoice():
    profile = build_profile(last_invoice_date=date(2024, 3, 1))
    with pytest.raises(InvalidTransitionError) as exc:
        transition(profile, ProfileEvent.INVOICE_GENERATED, run_date=date(2024, 2, 1))
    assert exc.value.event == "invoice_generated"
    assert exc.value.status == "active"


def test_invoice_generated_accepts_same_date_as_last_invoice():
    profile = build_profile(last_invoice_date=date(2024, 3, 1))
    updated = transition(profile, ProfileEvent.INVOICE_GENERATED, run_date=date(2024, 3, 1))
    assert updated.last_invoice_date == date(2024, 3, 1)


def test_transition_does_not_mutate_input():
    profile = build_profile()
    transition(profile, ProfileEvent.CANCEL)
    assert profile.status is ProfileStatus.ACTIVE


def test_cancel():
    updated = transition(build_profile(), ProfileEvent.CANCEL)
    assert updated.status is ProfileStatus.CANCELLED


def test_expire_completes_profile_without_next_date():
    profile = build_profile(end_date=date(2024, 1, 15))
    updated = transition(profile, ProfileEvent.EXPIRE)
    assert updated.status is ProfileStatus.COMPLETED
    assert updated.last_invoice_date is None


def test_expire_rejected_while_schedule_continues():
    with pytest.raises(InvalidTransitionError):
        transition(build_profile(), ProfileEvent.EXPIRE)


@pytest.mark.parametrize("status", [ProfileStatus.COMPLETED, ProfileStatus.CANCELLED, "completed", "cancelled"])
@pytest.mark.parametrize("event", list(ProfileEvent))
def test_terminal_profiles_reject_every_event(status, event):
    with pytest.raises(InvalidTransitionError) as exc:
        transition(build_profile(status=status), event, run_date=date(2024, 2, 1))
    assert exc.value.event == event.value


def test_unknown_event_is_a_validation_error():
    with pytest.raises(ValidationError):
        transition(build_profile(), "pause")


# ---------------------------------------------------------------------------
# format_amount / summarize
# ---------------------------------------------------------------------------

def test_format_amount():
    assert format_amount(LineItem(item_id=1, rate=100, quantity=2, tax_percent=18)) == Decimal("236.00")


def test_format_amount_rounds_half_up():
    # 0.125 * 1 * 1.0 -> 0.13
    assert format_amount(LineItem(item_id=1, rate=Decimal("0.125"), quantity=1)) == Decimal("0.13")
    # 10.05 * 1 * 1.05 = 10.5525 -> 10.55
    item = LineItem(item_id=1, rate=Decimal("10.05"), quantity=1, tax_percent=Decimal("5"))
    assert format_amount(item) == Decimal("10.55")


def test_format_amount_without_tax():
    assert format_amount(LineItem(item_id=1, rate=Decimal("4500"), quantity=3)) == Decimal("13500.00")


def test_format_amount_missing_tax_counts_as_zero():
    assert format_amount(LineItem(item_id=1, rate=Decimal("50"), quantity=2, tax_percent=None)) == Decimal("100.00")


@pytest.mark.parametrize("line_item,field", [
    (LineItem(item_id=1, rate=None, quantity=2), "item.rate"),
    (LineItem(item_id=1, rate="abc", quantity=2), "item.rate"),
    (LineItem(item_id=1, rate=Decimal("-1"), quantity=2), "item.rate"),
    (LineItem(item_id=1, rate=Decimal("100"), quantity=None), "item.qty"),
    (LineItem(item_id=1, rate=Decimal("100"), quantity=0), "item.qty"),
    (LineItem(item_id=1, rate=Decimal("100"), quantity=1, tax_percent="abc"), "item.tax"),
    (None, "item"),
])
def test_format_amount_rejects_missing_or_invalid_values(line_item, field):
    with pytest.raises(ValidationError) as exc:
        format_amount(line_item)
    assert [e["field"] for e in exc.value.errors] == [field]


def test_summarize():
    profile = transition(build_profile(), ProfileEvent.INVOICE_GENERATED, run_date=date(2024, 2, 1))
    assert summarize(profile) == {
        "status": "active",
        "last_invoice_date": date(2024, 2, 1),
        "next_invoice_date": date(2024, 3, 1),
        "line_total": Decimal("236.00"),
    }


def test_summarize_cancelled_profile():
    profile = replace(build_profile(), status=ProfileStatus.CANCELLED)
    summary = summarize(profile)
    assert summary["status"] == "cancelled"
    assert summary["next_invoice_date"] is None
