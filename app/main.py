from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.database import engine, Base
from app.api import admin, products, health
from app.services.product_service import FetchError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")

    # Create database tables
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    yield

    # Shutdown
    logger.info("Shutting down application...")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    A minimal admin interface for a product catalog:

    - **Admin page** (`/admin`): product table with add, edit and delete controls
    - **Product actions** (`/api/v1/products`): list, create, update and delete as JSON
    - **Caching**: the admin listing is cached in Redis and invalidated on every change

    ## Validation
    Names must be non-empty, prices at least 0.01 and stock a non-negative
    integer. Invalid input is answered with `{"error": "Invalid data"}` and
    per-field messages; nothing is written.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(admin.router)


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError):
    """Listing failures end the request: a JSON error for the API, an error page otherwise."""
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    if request.url.path.startswith("/api/"):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)}
        )
    return admin.templates.TemplateResponse(
        request,
        "error.html",
        {"message": str(exc)},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with service information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "admin": "/admin",
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/v1/health"
    }
