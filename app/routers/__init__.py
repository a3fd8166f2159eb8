from .customers import router as customers_router
from .items import router as items_router
from .recurring_invoices import router as recurring_invoices_router
from .invoices import router as invoices_router
from .reports import router as reports_router
