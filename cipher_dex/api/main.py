"""
FastAPI application entry point.

Run with: uvicorn cipher_dex.api.main:app --reload --host 0.0.0.0 --port 5000
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cipher_dex import __version__
from cipher_dex.api.routes import analytics, balances, orders, pools, prices, swap
from cipher_dex.api.dependencies import initialize_services, is_initialized, shutdown_services

logger = logging.getLogger(__name__)

# Request fields whose absence maps onto "Missing required fields"
MISSING_FIELD_ERRORS = {"missing", "string_too_short"}


# Create FastAPI app
app = FastAPI(
    title="Cipher DEX API",
    description="Demo confidential exchange: constant-product pools over a mock encrypted ledger",
    version=__version__
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(error.get("type") in MISSING_FIELD_ERRORS for error in errors):
        message = "Missing required fields"
    else:
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"Invalid {field}: {first.get('msg', 'invalid value')}" if field else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    # Tests may have wired services already
    if not is_initialized():
        initialize_services()


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the price oracle and close the store on application shutdown."""
    shutdown_services()


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Cipher DEX API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(prices.router)
app.include_router(swap.router)
app.include_router(pools.router)
app.include_router(balances.router)
app.include_router(orders.router)
app.include_router(analytics.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
