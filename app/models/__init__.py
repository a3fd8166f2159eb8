from .customer import Customer, Base
from .item import Item
from .recurring_invoice import RecurringInvoice
from .invoice import Invoice
