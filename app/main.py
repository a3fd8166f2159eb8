from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.routers import (
    customers_router, items_router, recurring_invoices_router,
    invoices_router, reports_router,
)
from app.core.config import get_settings
from app.core.database import init_db
from app.core.exceptions import (
    ConflictError, InvalidTransitionError, NotFoundError, ValidationError,
)
from app.core.limiter import limiter

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Billing API for lift/elevator maintenance: customers, items, "
                "recurring invoices (AMC renewals) and issued invoices.",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate limiting: the @limiter.limit() decorators on each endpoint share this limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


async def _invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "status": exc.status, "event": exc.event},
    )


async def _not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


app.add_exception_handler(ValidationError, _validation_error_handler)
app.add_exception_handler(InvalidTransitionError, _invalid_transition_handler)
app.add_exception_handler(NotFoundError, _not_found_handler)
app.add_exception_handler(ConflictError, _conflict_handler)

# CORS configuration
origins = settings.CORS_ORIGINS

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(customers_router)
app.include_router(items_router)
app.include_router(recurring_invoices_router)
app.include_router(invoices_router)
app.include_router(reports_router)


@app.get("/")
@limiter.limit("5/minute")
def read_root(request: Request):
    return {"message": f"{settings.APP_NAME} is running."}


@app.get("/health")
def health():
    return {"status": "ok"}
