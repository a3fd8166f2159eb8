"""
Lift Billing API - Python client.
Retries network failures; HTTP errors are raised immediately.
"""

import logging
import time
from datetime import date
from typing import Optional, Dict, List, Any

import requests

logger = logging.getLogger(__name__)


class BillingClient:
    """Python client for the Lift Billing API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retries: int = 2,
        retry_delay: float = 2.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the API (e.g., "http://localhost:8000")
            timeout: Seconds to wait for each request
            retries: Extra attempts after a connection error or timeout
            retry_delay: Seconds to wait between attempts
            session: Optional requests.Session to reuse
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        attempts_left = self.retries

        while True:
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempts_left <= 0:
                    raise
                logger.warning(
                    f"{method} {url} failed ({e}); retrying in {self.retry_delay}s "
                    f"({attempts_left} attempts left)"
                )
                attempts_left -= 1
                time.sleep(self.retry_delay)
                continue

            response.raise_for_status()
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

    @staticmethod
    def _iso(value: Optional[date]) -> Optional[str]:
        return value.isoformat() if value is not None else None

    # ==================== CUSTOMERS ====================

    def list_customers(self, search: Optional[str] = None, skip: int = 0, limit: int = 50) -> List[Dict]:
        params = {'skip': skip, 'limit': limit}
        if search:
            params['search'] = search
        return self._request('GET', '/customers/', params=params)

    def create_customer(
        self,
        reference_id: str,
        billing_name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        city: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = {
            'reference_id': reference_id,
            'billing_name': billing_name,
            'email': email,
            'phone': phone,
            'city': city,
        }
        return self._request('POST', '/customers/', json=payload)

    def get_customer(self, customer_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/customers/{customer_id}')

    def delete_customer(self, customer_id: int) -> None:
        self._request('DELETE', f'/customers/{customer_id}')

    # ==================== ITEMS ====================

    def list_items(self, search: Optional[str] = None, skip: int = 0, limit: int = 50) -> List[Dict]:
        params = {'skip': skip, 'limit': limit}
        if search:
            params['search'] = search
        return self._request('GET', '/items/', params=params)

    def create_item(
        self,
        name: str,
        rate: str = "0.00",
        tax_percent: str = "0.00",
        part_no: Optional[str] = None,
        unit: Optional[str] = None
    ) -> Dict[str, Any]:
        payload = {
            'name': name,
            'rate': str(rate),
            'tax_percent': str(tax_percent),
            'part_no': part_no,
            'unit': unit,
        }
        return self._request('POST', '/items/', json=payload)

    def get_item(self, item_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/items/{item_id}')

    def delete_item(self, item_id: int) -> None:
        self._request('DELETE', f'/items/{item_id}')

    # ==================== RECURRING INVOICES ====================

    def list_recurring_invoices(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Dict]:
        """
        List recurring invoice profiles.

        Args:
            search: Matches customer reference or profile name
            status: active, completed or cancelled
        """
        params = {'skip': skip, 'limit': limit}
        if search:
            params['search'] = search
        if status:
            params['status'] = status
        return self._request('GET', '/recurring-invoices/', params=params)

    def create_recurring_invoice(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a recurring invoice profile.

        Args:
            payload: {"customer_id", "profile_name", "repeat_every", "start_date",
                      "end_date", "item": {"id", "rate", "qty", "tax"}}

        Returns:
            dict: The profile, including next_invoice_date and line_total
        """
        return self._request('POST', '/recurring-invoices/', json=payload)

    def get_recurring_invoice(self, profile_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/recurring-invoices/{profile_id}')

    def update_recurring_invoice(self, profile_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('PUT', f'/recurring-invoices/{profile_id}', json=payload)

    def delete_recurring_invoice(self, profile_id: int) -> None:
        self._request('DELETE', f'/recurring-invoices/{profile_id}')

    def cancel_recurring_invoice(self, profile_id: int) -> Dict[str, Any]:
        return self._request('POST', f'/recurring-invoices/{profile_id}/cancel')

    def generate_invoice(self, profile_id: int, invoice_date: Optional[date] = None) -> Dict[str, Any]:
        """
        Issue an invoice for one profile.

        Returns:
            dict: {"profile": {...}, "invoice": {...}}
        """
        return self._request(
            'POST',
            f'/recurring-invoices/{profile_id}/generate-invoice',
            json={'invoice_date': self._iso(invoice_date)},
        )

    def list_due(self, on: Optional[date] = None) -> List[Dict]:
        params = {'on': self._iso(on)} if on else None
        return self._request('GET', '/recurring-invoices/due', params=params)

    def run_invoicing(self, run_date: Optional[date] = None) -> Dict[str, Any]:
        """
        Run invoicing for every due profile.

        Returns:
            dict: {"run_date": "...", "generated": [...], "completed": [profile ids]}
        """
        return self._request('POST', '/recurring-invoices/run', json={'run_date': self._iso(run_date)})

    # ==================== INVOICES ====================

    def list_invoices(
        self,
        customer_id: Optional[int] = None,
        recurring_invoice_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Dict]:
        params = {'skip': skip, 'limit': limit}
        if customer_id is not None:
            params['customer_id'] = customer_id
        if recurring_invoice_id is not None:
            params['recurring_invoice_id'] = recurring_invoice_id
        return self._request('GET', '/invoices/', params=params)

    def get_invoice(self, invoice_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/invoices/{invoice_id}')

    # ==================== REPORTS ====================

    def get_recurring_summary(self, days: int = 30) -> Dict[str, Any]:
        return self._request('GET', '/reports/recurring-invoices', params={'days': days})


def example_monitoring():
    """Show what is due and run invoicing."""

    client = BillingClient(base_url="http://localhost:8000")

    print("Recurring invoices due today:")
    for profile in client.list_due():
        print(f"  {profile['customer_reference']} - {profile['profile_name']}")
        print(f"     Next invoice: {profile['next_invoice_date']}")
        print(f"     Amount: {profile['currency']} {profile['line_total']}")

    result = client.run_invoicing()
    print(f"\nIssued {len(result['generated'])} invoices on {result['run_date']}")
    for invoice in result['generated']:
        print(f"  {invoice['invoice_number']}: {invoice['total']}")

    summary = client.get_recurring_summary(days=30)
    print(f"\nActive profiles: {summary['active']}")
    print(f"Due in the next {summary['period_days']} days: {summary['due_within_period']}")


if __name__ == "__main__":
    print("=" * 60)
    print("Lift Billing API - Monitoring Example")
    print("=" * 60)

    example_monitoring()
