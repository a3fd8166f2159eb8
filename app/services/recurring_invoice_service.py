"""
RecurringInvoiceService — persistence and invoicing around the profile model.

All lifecycle rules live in app.core.recurring_billing; this service only
converts between ORM rows and profiles, checks references and commits.

Usage:
    profile = RecurringInvoiceService.create(db, payload)
    result = RecurringInvoiceService.run_due_invoices(db, date.today())
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import InvalidTransitionError, NotFoundError
from app.core.recurring_billing import (
    LineItem,
    ProfileEvent,
    ProfileStatus,
    RecurringBillingProfile,
    TERMINAL_STATUSES,
    format_amount,
    is_due,
    next_invoice_date,
    summarize,
    transition,
    validate,
)
from app.models import Customer, Invoice, Item, RecurringInvoice
from app.schemas.invoice import InvoiceOut
from app.schemas.recurring_invoice import (
    LineItemOut,
    RecurringInvoiceCreate,
    RecurringInvoiceOut,
)
from app.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)


class RecurringInvoiceService:

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    @staticmethod
    def to_profile(row: RecurringInvoice) -> RecurringBillingProfile:
        return RecurringBillingProfile(
            customer_id=row.customer_id,
            profile_name=row.profile_name,
            frequency=row.repeat_every,
            start_date=row.start_date,
            end_date=row.end_date,
            status=row.status,
            last_invoice_date=row.last_invoice_date,
            line_item=LineItem(
                item_id=row.item_id,
                rate=row.rate,
                quantity=row.qty,
                tax_percent=row.tax,
            ),
        )

    @staticmethod
    def _profile_from_payload(
        data: RecurringInvoiceCreate,
        status: str = ProfileStatus.ACTIVE.value,
        last_invoice_date: Optional[date] = None,
    ) -> RecurringBillingProfile:
        line_item = None
        if data.item is not None:
            line_item = LineItem(
                item_id=data.item.id,
                rate=data.item.rate,
                quantity=data.item.qty,
                tax_percent=data.item.tax,
            )
        return RecurringBillingProfile(
            customer_id=data.customer_id,
            profile_name=data.profile_name,
            frequency=data.repeat_every,
            start_date=data.start_date,
            end_date=data.end_date,
            status=status,
            last_invoice_date=last_invoice_date,
            line_item=line_item,
        )

    @staticmethod
    def _apply_profile(row: RecurringInvoice, profile: RecurringBillingProfile) -> None:
        row.customer_id = profile.customer_id
        row.profile_name = profile.profile_name.strip()
        row.repeat_every = profile.frequency.value
        row.start_date = profile.start_date
        row.end_date = profile.end_date
        row.item_id = profile.line_item.item_id
        row.rate = profile.line_item.rate
        row.qty = profile.line_item.quantity
        row.tax = profile.line_item.tax_percent

    @staticmethod
    def to_response(row: RecurringInvoice) -> RecurringInvoiceOut:
        summary = summarize(RecurringInvoiceService.to_profile(row))
        return RecurringInvoiceOut(
            id=row.id,
            customer_id=row.customer_id,
            customer_reference=row.customer.reference_id if row.customer else None,
            customer_name=row.customer.billing_name if row.customer else None,
            profile_name=row.profile_name,
            repeat_every=row.repeat_every,
            start_date=row.start_date,
            end_date=row.end_date,
            status=summary["status"],
            item=LineItemOut(
                id=row.item_id,
                name=row.item.name if row.item else None,
                rate=row.rate,
                qty=row.qty,
                tax=row.tax,
            ),
            last_invoice_date=summary["last_invoice_date"],
            next_invoice_date=summary["next_invoice_date"],
            line_total=summary["line_total"],
            currency=get_settings().CURRENCY,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    @staticmethod
    def _check_references(db: Session, profile: RecurringBillingProfile) -> None:
        if not db.query(Customer).filter(Customer.id == profile.customer_id).first():
            raise NotFoundError(f"Customer {profile.customer_id} not found")
        if not db.query(Item).filter(Item.id == profile.line_item.item_id).first():
            raise NotFoundError(f"Item {profile.line_item.item_id} not found")

    @staticmethod
    def create(db: Session, data: RecurringInvoiceCreate) -> RecurringInvoice:
        result = validate(RecurringInvoiceService._profile_from_payload(data))
        profile = result.profile
        RecurringInvoiceService._check_references(db, profile)

        row = RecurringInvoice(status=ProfileStatus.ACTIVE.value)
        RecurringInvoiceService._apply_profile(row, profile)
        db.add(row)
        db.commit()
        db.refresh(row)
        logger.info(
            f"Created recurring invoice {row.id} for customer {row.customer_id} "
            f"({row.repeat_every}, next invoice {result.next_invoice_date})"
        )
        return row

    @staticmethod
    def get(db: Session, profile_id: int) -> RecurringInvoice:
        row = db.query(RecurringInvoice).filter(RecurringInvoice.id == profile_id).first()
        if not row:
            raise NotFoundError(f"Recurring invoice {profile_id} not found")
        return row

    @staticmethod
    def update(db: Session, profile_id: int, data: RecurringInvoiceCreate) -> RecurringInvoice:
        """Replace the editable fields of a profile. Status is kept as is."""
        row = RecurringInvoiceService.get(db, profile_id)
        status = ProfileStatus(row.status)
        if status in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Recurring invoice {profile_id} is {status.value} and can no longer be edited",
                status=status.value,
                event="edit",
            )

        candidate = RecurringInvoiceService._profile_from_payload(
            data, status=row.status, last_invoice_date=row.last_invoice_date
        )
        profile = validate(candidate).profile
        RecurringInvoiceService._check_references(db, profile)

        RecurringInvoiceService._apply_profile(row, profile)
        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def list(
        db: Session,
        search: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[RecurringInvoice]:
        """Case-insensitive match on customer reference or profile name."""
        query = db.query(RecurringInvoice).join(Customer)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                Customer.reference_id.ilike(pattern),
                RecurringInvoice.profile_name.ilike(pattern),
            ))
        if status:
            query = query.filter(RecurringInvoice.status == status.lower())
        return query.order_by(RecurringInvoice.id).offset(skip).limit(limit).all()

    @staticmethod
    def delete(db: Session, profile_id: int) -> None:
        row = RecurringInvoiceService.get(db, profile_id)
        # Issued invoices outlive the profile
        db.query(Invoice).filter(Invoice.recurring_invoice_id == profile_id).update(
            {Invoice.recurring_invoice_id: None}, synchronize_session=False
        )
        db.delete(row)
        db.commit()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def _save_status(row: RecurringInvoice, profile: RecurringBillingProfile) -> None:
        row.status = ProfileStatus(profile.status).value
        row.last_invoice_date = profile.last_invoice_date

    @staticmethod
    def cancel(db: Session, profile_id: int) -> RecurringInvoice:
        row = RecurringInvoiceService.get(db, profile_id)
        updated = transition(RecurringInvoiceService.to_profile(row), ProfileEvent.CANCEL)
        RecurringInvoiceService._save_status(row, updated)
        db.commit()
        db.refresh(row)
        logger.info(f"Cancelled recurring invoice {profile_id}")
        return row

    @staticmethod
    def _issue_invoice(db: Session, row: RecurringInvoice, run_date: date) -> Invoice:
        profile = RecurringInvoiceService.to_profile(row)
        updated = transition(profile, ProfileEvent.INVOICE_GENERATED, run_date=run_date)

        invoice = Invoice(
            invoice_number=InvoiceService.next_invoice_number(db),
            customer_id=row.customer_id,
            recurring_invoice_id=row.id,
            invoice_date=updated.last_invoice_date,
            item_id=row.item_id,
            rate=row.rate,
            qty=row.qty,
            tax=row.tax,
            total=format_amount(profile.line_item),
        )
        db.add(invoice)
        RecurringInvoiceService._save_status(row, updated)
        db.commit()
        db.refresh(invoice)
        db.refresh(row)

        logger.info(
            f"Issued {invoice.invoice_number} for recurring invoice {row.id} "
            f"({invoice.total} {get_settings().CURRENCY})"
        )
        if row.status == ProfileStatus.COMPLETED.value:
            logger.info(f"Recurring invoice {row.id} completed: no invoice date left before {row.end_date}")
        return invoice

    @staticmethod
    def generate_invoice(
        db: Session, profile_id: int, run_date: Optional[date] = None
    ) -> Tuple[RecurringInvoice, Invoice]:
        row = RecurringInvoiceService.get(db, profile_id)
        invoice = RecurringInvoiceService._issue_invoice(db, row, run_date or date.today())
        return row, invoice

    @staticmethod
    def list_due(db: Session, on_date: Optional[date] = None) -> List[RecurringInvoice]:
        on_date = on_date or date.today()
        rows = (
            db.query(RecurringInvoice)
            .filter(RecurringInvoice.status == ProfileStatus.ACTIVE.value)
            .order_by(RecurringInvoice.id)
            .all()
        )
        return [row for row in rows if is_due(RecurringInvoiceService.to_profile(row), on_date)]

    @staticmethod
    def run_due_invoices(db: Session, run_date: Optional[date] = None) -> Dict:
        """
        Issue one invoice for every profile due on ``run_date``.

        Active profiles whose schedule has already run out are completed
        without an invoice. Each invoice is committed on its own, so a
        failure keeps the invoices issued before it.
        """
        run_date = run_date or date.today()
        generated: List[Invoice] = []
        completed: List[int] = []

        rows = (
            db.query(RecurringInvoice)
            .filter(RecurringInvoice.status == ProfileStatus.ACTIVE.value)
            .order_by(RecurringInvoice.id)
            .all()
        )
        for row in rows:
            profile = RecurringInvoiceService.to_profile(row)

            if next_invoice_date(profile) is None:
                RecurringInvoiceService._save_status(row, transition(profile, ProfileEvent.EXPIRE))
                db.commit()
                completed.append(row.id)
                logger.info(f"Recurring invoice {row.id} completed: schedule ended on {row.end_date}")
                continue

            if not is_due(profile, run_date):
                continue

            try:
                invoice = RecurringInvoiceService._issue_invoice(db, row, run_date)
            except Exception as e:
                db.rollback()
                logger.error(f"Invoicing run {run_date} failed on recurring invoice {row.id}: {e}", exc_info=True)
                raise

            generated.append(invoice)
            if row.status == ProfileStatus.COMPLETED.value:
                completed.append(row.id)

        logger.info(
            f"Invoicing run {run_date}: {len(generated)} invoices issued, "
            f"{len(completed)} profiles completed"
        )
        return {
            "run_date": run_date,
            "generated": [InvoiceOut.model_validate(i) for i in generated],
            "completed": completed,
        }

    @staticmethod
    def active_cycle_amount(rows: List[RecurringInvoice]) -> Decimal:
        total = Decimal("0.00")
        for row in rows:
            if row.status == ProfileStatus.ACTIVE.value:
                total += format_amount(RecurringInvoiceService.to_profile(row).line_item)
        return total
