"""
Recurring invoice profile model.

Pure domain logic for recurring invoice / AMC renewal profiles: validation,
next invoice date arithmetic, status transitions and line totals. Nothing in
this module touches the database or the network; services convert ORM rows
into ``RecurringBillingProfile`` values and back.

Usage:
    result = validate(profile)
    profile = transition(result.profile, ProfileEvent.INVOICE_GENERATED, run_date=today)
    summary = summarize(profile)
"""
import calendar
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional, Union

from app.core.exceptions import InvalidTransitionError, ValidationError

CENTS = Decimal("0.01")

# Upper bounds of the stored Numeric(12, 2) rate and Numeric(5, 2) tax columns
MAX_RATE = Decimal("10000000000")
MAX_TAX_PERCENT = Decimal("1000")


class Frequency(str, Enum):
    WEEK = "week"
    TWO_WEEKS = "2week"
    MONTH = "month"
    TWO_MONTHS = "2month"
    THREE_MONTHS = "3month"
    SIX_MONTHS = "6month"
    YEAR = "year"
    TWO_YEARS = "2year"


class ProfileStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProfileEvent(str, Enum):
    INVOICE_GENERATED = "invoice_generated"
    CANCEL = "cancel"
    EXPIRE = "expire"


TERMINAL_STATUSES = frozenset({ProfileStatus.COMPLETED, ProfileStatus.CANCELLED})

# (days, months) added by one step
_STEPS = {
    Frequency.WEEK: (7, 0),
    Frequency.TWO_WEEKS: (14, 0),
    Frequency.MONTH: (0, 1),
    Frequency.TWO_MONTHS: (0, 2),
    Frequency.THREE_MONTHS: (0, 3),
    Frequency.SIX_MONTHS: (0, 6),
    Frequency.YEAR: (0, 12),
    Frequency.TWO_YEARS: (0, 24),
}


@dataclass(frozen=True)
class LineItem:
    item_id: Any
    rate: Optional[Decimal]
    quantity: int = 1
    tax_percent: Decimal = Decimal("0")


@dataclass(frozen=True)
class RecurringBillingProfile:
    """
    A recurring invoice profile.

    ``next_invoice_date`` is derived on every access and is never stored.
    """
    customer_id: Any
    profile_name: str
    frequency: Union[Frequency, str]
    start_date: Optional[date]
    line_item: Optional[LineItem]
    end_date: Optional[date] = None
    status: Union[ProfileStatus, str] = ProfileStatus.ACTIVE
    last_invoice_date: Optional[date] = None

    @property
    def next_invoice_date(self) -> Optional[date]:
        return next_invoice_date(self)

    @property
    def line_total(self) -> Decimal:
        return format_amount(self.line_item)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a successful ``validate`` call, with values normalized."""
    profile: RecurringBillingProfile
    next_invoice_date: Optional[date]


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"{value!r} is not a number")
    if not number.is_finite():
        raise ValueError(f"{value!r} is not a number")
    return number


def _line_item_values(item: Optional[LineItem], errors: list):
    """
    Read rate, quantity and tax percent off a line item.

    Problems are appended to ``errors`` as {field, message} dicts; a missing
    tax percent reads as 0.
    """
    def fail(field: str, message: str):
        errors.append({"field": field, "message": message})

    if item is None:
        fail("item", "A line item is required.")
        return None, None, None

    rate = None
    try:
        rate = _to_decimal(item.rate)
    except ValueError:
        fail("item.rate", "Rate must be a number.")
    else:
        if rate is None:
            fail("item.rate", "Rate is required.")
        elif rate < 0:
            fail("item.rate", "Rate cannot be negative.")

    quantity = item.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        fail("item.qty", "Quantity must be a whole number of at least 1.")

    tax_percent = None
    try:
        tax_percent = _to_decimal(item.tax_percent)
    except ValueError:
        fail("item.tax", "Tax percent must be a number.")
    else:
        if tax_percent is None:
            tax_percent = Decimal("0")
        elif tax_percent < 0:
            fail("item.tax", "Tax percent cannot be negative.")

    return rate, quantity, tax_percent


def _check_stored_amount(field: str, label: str, value: Optional[Decimal], upper: Decimal, errors: list):
    if value is None or value < 0:
        return
    if value >= upper:
        errors.append({"field": field, "message": f"{label} must be less than {upper}."})
    elif value != value.quantize(CENTS):
        errors.append({"field": field, "message": f"{label} cannot have more than 2 decimal places."})


def _coerce_frequency(frequency: Union[Frequency, str]) -> Frequency:
    try:
        return Frequency(frequency)
    except ValueError:
        allowed = ", ".join(f.value for f in Frequency)
        raise ValidationError([{
            "field": "frequency",
            "message": f"Unsupported frequency {frequency!r}. Allowed: {allowed}",
        }])


def _add_months(value: date, months: int) -> date:
    total = value.month - 1 + months
    year = value.year + total // 12
    month = total % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def compute_next_invoice_date(
    anchor_date: date,
    frequency: Union[Frequency, str],
    end_date: Optional[date] = None,
) -> Optional[date]:
    """
    Advance ``anchor_date`` by one ``frequency`` step.

    Month and year steps clamp to the last day of the target month, so
    2024-01-31 + month is 2024-02-29. Returns None when the result falls
    after ``end_date``.
    """
    if anchor_date is None:
        raise ValidationError([{"field": "anchor_date", "message": "Anchor date is required."}])
    days, months = _STEPS[_coerce_frequency(frequency)]
    if days:
        candidate = anchor_date + timedelta(days=days)
    else:
        candidate = _add_months(anchor_date, months)

    if end_date is not None and candidate > end_date:
        return None
    return candidate


def next_invoice_date(profile: RecurringBillingProfile) -> Optional[date]:
    """
    Next invoice date of an active profile, or None.

    Anchored on the last invoice date when there is one, else on the start
    date. Never earlier than the start date, never later than the end date.
    """
    if ProfileStatus(profile.status) is not ProfileStatus.ACTIVE:
        return None
    anchor = profile.last_invoice_date or profile.start_date
    candidate = compute_next_invoice_date(anchor, profile.frequency)
    if candidate < profile.start_date:
        candidate = profile.start_date
    if profile.end_date is not None and candidate > profile.end_date:
        return None
    return candidate


def is_due(profile: RecurringBillingProfile, on_date: date) -> bool:
    upcoming = next_invoice_date(profile)
    return upcoming is not None and upcoming <= on_date


def validate(profile: RecurringBillingProfile) -> ValidationResult:
    """
    Check a profile and return it normalized.

    Every problem is collected before raising, so callers can report all of
    them at once.

    Raises:
        ValidationError: if any field is missing or out of range.
    """
    errors = []

    def fail(field: str, message: str):
        errors.append({"field": field, "message": message})

    if profile.customer_id is None or profile.customer_id == "":
        fail("customer_id", "Customer is required.")

    if not (profile.profile_name or "").strip():
        fail("profile_name", "Profile name is required.")

    frequency = None
    try:
        frequency = _coerce_frequency(profile.frequency)
    except ValidationError as e:
        errors.extend(e.errors)

    if profile.start_date is None:
        fail("start_date", "Start date is required.")
    elif profile.end_date is not None and profile.end_date < profile.start_date:
        fail("end_date", "End date cannot be earlier than the start date.")

    status = None
    try:
        status = ProfileStatus(profile.status)
    except ValueError:
        fail("status", f"Unknown status {profile.status!r}.")

    item = profile.line_item
    if item is not None and (item.item_id is None or item.item_id == ""):
        fail("item.id", "Item is required.")
    rate, quantity, tax_percent = _line_item_values(item, errors)
    _check_stored_amount("item.rate", "Rate", rate, MAX_RATE, errors)
    _check_stored_amount("item.tax", "Tax percent", tax_percent, MAX_TAX_PERCENT, errors)

    if errors:
        raise ValidationError(errors)

    normalized = replace(
        profile,
        frequency=frequency,
        status=status,
        line_item=LineItem(
            item_id=item.item_id,
            rate=rate,
            quantity=quantity,
            tax_percent=tax_percent,
        ),
    )
    return ValidationResult(profile=normalized, next_invoice_date=next_invoice_date(normalized))


def transition(
    profile: RecurringBillingProfile,
    event: Union[ProfileEvent, str],
    run_date: Optional[date] = None,
) -> RecurringBillingProfile:
    """
    Apply a lifecycle event and return the resulting profile.

    ``invoice_generated`` records ``run_date`` (today when omitted) as the
    last invoice date; the profile completes when no further date fits
    before the end date. ``expire`` completes a profile whose schedule has
    already run out. Completed and cancelled profiles accept no events.
    """
    try:
        event = ProfileEvent(event)
    except ValueError:
        raise ValidationError([{"field": "event", "message": f"Unknown event {event!r}."}])

    status = ProfileStatus(profile.status)
    if status in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            f"Cannot apply '{event.value}' to a {status.value} profile.",
            status=status.value,
            event=event.value,
        )

    if event is ProfileEvent.CANCEL:
        return replace(profile, status=ProfileStatus.CANCELLED)

    if event is ProfileEvent.EXPIRE:
        if next_invoice_date(profile) is not None:
            raise InvalidTransitionError(
                "Cannot expire a profile that still has a next invoice date.",
                status=status.value,
                event=event.value,
            )
        return replace(profile, status=ProfileStatus.COMPLETED)

    run_date = run_date or date.today()
    if profile.last_invoice_date is not None and run_date < profile.last_invoice_date:
        raise InvalidTransitionError(
            f"Invoice date {run_date} is earlier than the last invoice date {profile.last_invoice_date}.",
            status=status.value,
            event=event.value,
        )

    invoiced = replace(
        profile,
        status=ProfileStatus.ACTIVE,
        last_invoice_date=run_date,
    )
    if next_invoice_date(invoiced) is None:
        return replace(invoiced, status=ProfileStatus.COMPLETED)
    return invoiced


def format_amount(line_item: LineItem) -> Decimal:
    """
    rate * quantity * (1 + tax% / 100), rounded half-up to cents.

    Raises:
        ValidationError: if rate or quantity is missing or invalid, or tax
            percent is invalid. A missing tax percent counts as 0.
    """
    errors = []
    rate, quantity, tax_percent = _line_item_values(line_item, errors)
    if errors:
        raise ValidationError(errors)
    total = rate * Decimal(quantity) * (1 + tax_percent / 100)
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def summarize(profile: RecurringBillingProfile) -> Dict[str, Any]:
    return {
        "status": ProfileStatus(profile.status).value,
        "last_invoice_date": profile.last_invoice_date,
        "next_invoice_date": next_invoice_date(profile),
        "line_total": format_amount(profile.line_item),
    }
