"""
NetCommerce Gateway - FastAPI Application

Backend server for the NetCommerce hosted payment integration.
Signs redirect requests and verifies processor callbacks.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from .config import settings
from .exceptions import GatewayError
from .db.init_db import initialize_database
from .api.checkout import router as checkout_router, receipt_router
from .api.callback import router as callback_router
from .api.orders import router as orders_router


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Validate gateway configuration, initialize database
    - Shutdown: Nothing to release
    """
    # Startup
    logger.info("Starting NetCommerce gateway server...")

    # Fail fast on a broken gateway configuration
    gateway = settings.gateway_config()
    logger.info(f"Gateway: {gateway.title}, enabled={gateway.enabled}, mode={gateway.payment_mode}")
    logger.info(f"Callback URL: {gateway.callback_url()}")

    try:
        initialize_database(seed=settings.demo_mode)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    logger.info("Server startup complete")

    yield

    # Shutdown
    logger.info("Shutting down NetCommerce gateway server...")


# Initialize FastAPI application
app = FastAPI(
    title="NetCommerce Gateway API",
    description="NetCommerce hosted payment gateway with signed requests and callbacks",
    version="0.1.0",
    lifespan=lifespan,
)


# Exception handlers for gateway errors
@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    """
    Handle gateway protocol errors with standardized response format.

    Status code comes from the exception class; body from to_dict().
    """
    logger.warning(
        f"Gateway error: {exc.error_code} - {exc.message}",
        extra={"details": exc.details}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unexpected errors.

    Logs full exception for debugging but returns generic message to client.
    """
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "internal_error",
            "message": "An unexpected error occurred",
            "details": {"error_type": type(exc).__name__} if settings.demo_mode else {}
        },
    )


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        Server status and version information
    """
    return {
        "status": "healthy",
        "version": "0.1.0",
        "demo_mode": settings.demo_mode,
    }


# Include API routers
app.include_router(checkout_router, prefix="/api", tags=["Checkout"])
app.include_router(orders_router, prefix="/api/orders", tags=["Orders"])
app.include_router(receipt_router, tags=["Checkout"])
app.include_router(callback_router, tags=["Callback"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "netcommerce.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.demo_mode,
        log_level=settings.log_level.lower()
    )
