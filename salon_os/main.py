"""
Salon OS - Main Application Entry Point
Multi-tenant salon management backend
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from salon_os.core.blind_index import get_blind_indexer
from salon_os.core.config import get_settings
from salon_os.core.crypto import get_field_cipher
from salon_os.core.exceptions import register_exception_handlers
from salon_os.core.tenant_middleware import TenantContextMiddleware
from salon_os.api import auth, customers, day_closing, expenses, pages, tenants

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup: refuse to serve with missing or malformed secrets
    logger.info("Initializing Salon OS backend")
    get_field_cipher()
    get_blind_indexer()
    # Tables are created by Alembic migrations, not auto-generated
    logger.info("Database managed by Alembic migrations")

    yield

    # Shutdown
    logger.info("Shutting down Salon OS backend")


# Create FastAPI application
app = FastAPI(
    title="Salon OS API",
    description="Multi-tenant salon management with encrypted customer records",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure middleware stack; the last one added runs first, so CORS answers
# preflight requests before tenant resolution asks for a session
app.add_middleware(TenantContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
api = settings.API_PREFIX
app.include_router(auth.router, prefix=f"{api}/auth", tags=["auth"])
app.include_router(customers.router, prefix=f"{api}/customers", tags=["customers"])
app.include_router(day_closing.router, prefix=f"{api}/day-end-closing", tags=["day-end-closing"])
app.include_router(expenses.router, prefix=f"{api}/expenses", tags=["expenses"])
app.include_router(tenants.router, prefix=f"{api}/platform/tenants", tags=["platform"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "salon-os-api"}


# Rewritten tenant pages
app.include_router(pages.router, tags=["pages"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "salon_os.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
