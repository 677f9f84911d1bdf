from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.routers import clients, inventory, profiles, invoices, invoice_items, records, editor
from app.config import settings
import logging
import sys

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

# Log startup information
logger.info("="*60)
logger.info("Starting Invoice Desk API")
logger.info("="*60)
logger.info(f"Database configured: {settings.database_url.split('://')[0]}")
logger.info(f"User header: {settings.user_header}")
logger.info("="*60)

# Create tables (in production, use migrations)
# Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Invoice Desk API",
    description="API for browsing business records and creating inventory-backed invoices",
    version="1.0.0"
)


def parse_cors_origins(origins_str: str) -> list:
    """Parse comma-separated CORS origins into a list"""
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


all_origins = parse_cors_origins(settings.cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=all_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Include routers
app.include_router(records.router)  # Record browser
app.include_router(invoices.router)
app.include_router(editor.router)  # Invoice editor sessions
app.include_router(invoice_items.router)
app.include_router(clients.router)
app.include_router(inventory.router)
app.include_router(profiles.router)


@app.get("/")
def root():
    return {"message": "Invoice Desk API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# Exception handler to ensure CORS headers are always sent
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to ensure CORS headers are sent even on errors"""
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    origin = request.headers.get("origin", "")
    cors_origin = origin if origin in all_origins else "*"

    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {str(exc)}"},
        headers={
            "Access-Control-Allow-Origin": cors_origin,
            "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS, PATCH",
            "Access-Control-Allow-Headers": "*",
            "Access-Control-Allow-Credentials": "true",
        }
    )
