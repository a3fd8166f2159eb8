from .customer import CustomerCreate, CustomerOut
from .item import ItemCreate, ItemOut
from .invoice import InvoiceOut
from .recurring_invoice import (
    LineItemIn, LineItemOut, RecurringInvoiceCreate, RecurringInvoiceUpdate,
    RecurringInvoiceOut, GenerateInvoiceRequest, GenerateInvoiceResponse,
    InvoicingRunRequest, InvoicingRunResult,
)
from .reports import RecurringSummaryResponse
