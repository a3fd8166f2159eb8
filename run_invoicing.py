#!/usr/bin/env python3
"""
Script to run recurring invoicing against the billing database.

    python run_invoicing.py due [--date YYYY-MM-DD]
    python run_invoicing.py run [--date YYYY-MM-DD]
"""
import argparse
import logging
import sys
from datetime import date, datetime

from app.core import database
from app.services.recurring_invoice_service import RecurringInvoiceService


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Recurring invoicing for the Lift Billing API')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    due_parser = subparsers.add_parser('due', help='List recurring invoices due on a date')
    due_parser.add_argument('--date', type=_parse_date, default=None, help='Defaults to today')

    run_parser = subparsers.add_parser('run', help='Issue invoices for every due recurring invoice')
    run_parser.add_argument('--date', type=_parse_date, default=None, help='Defaults to today')

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if database.SessionLocal is None:
        print("[ERROR] Database is not configured. Set the DB_URL environment variable.")
        return 1

    on_date = args.date or date.today()
    db = database.SessionLocal()
    try:
        if args.command == 'due':
            print(f"[*] Recurring invoices due on {on_date}:\n")
            rows = RecurringInvoiceService.list_due(db, on_date)
            if not rows:
                print("Nothing is due.")
            for row in rows:
                profile = RecurringInvoiceService.to_response(row)
                print(f"ID: {profile.id}")
                print(f"  Customer:     {profile.customer_reference}")
                print(f"  Profile:      {profile.profile_name}")
                print(f"  Next invoice: {profile.next_invoice_date}")
                print(f"  Amount:       {profile.currency} {profile.line_total}")
                print()
            return 0

        print(f"[*] Running invoicing for {on_date}...")
        result = RecurringInvoiceService.run_due_invoices(db, on_date)
        print(f"[OK] {len(result['generated'])} invoices issued.")
        for invoice in result['generated']:
            print(f"   {invoice.invoice_number}  profile {invoice.recurring_invoice_id}  {invoice.total}")
        if result['completed']:
            completed = ", ".join(str(i) for i in result['completed'])
            print(f"[OK] Completed recurring invoices: {completed}")
        return 0
    except Exception as e:
        print(f"[ERROR] Error: {e}")
        return 1
    finally:
        db.close()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
