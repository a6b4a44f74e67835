"""FastAPI application for the stock tracker."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from stocktracker.core.config import settings
from stocktracker.core.database import init_db
from stocktracker.core.errors import StockTrackerError, Conflict, Unauthenticated, InvalidCredentials
from stocktracker.core.redis import close_redis
import logging
import time
import sys

# Import routers
from stocktracker.api.routes import auth, watchlist, stock, profile, health

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="StockTracker API", version="1.0.0")


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Application starting up...")
    await init_db()
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Release outbound connections."""
    await stock.close_quote_provider()
    await close_redis()
    logger.info("Application shutdown complete")


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests and responses."""
    start_time = time.time()

    logger.info(f"→ {request.method} {request.url.path}")
    logger.debug(f"  Query params: {dict(request.query_params)}")

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(f"← {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.3f}s")

        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"← {request.method} {request.url.path} - ERROR after {process_time:.3f}s: {str(e)}")
        raise


@app.exception_handler(StockTrackerError)
async def domain_exception_handler(request: Request, exc: StockTrackerError):
    """Convert domain errors into JSON error bodies."""
    content = {"detail": exc.message}
    headers = None

    if isinstance(exc, Conflict) and exc.field:
        content["field"] = exc.field
    if isinstance(exc, (Unauthenticated, InvalidCredentials)):
        headers = {"WWW-Authenticate": "Bearer"}

    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


# Add global exception handler to ensure CORS headers are sent even on errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and ensure CORS headers are sent."""
    logger.error(f"Unhandled exception in {request.method} {request.url.path}")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Exception message: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.log_level == "DEBUG" else "Internal server error"
        },
        headers={
            "Access-Control-Allow-Origin": request.headers.get("origin", "*"),
            "Access-Control-Allow-Credentials": "true",
        }
    )

# Configure CORS
logger.info(f"Configuring CORS with origins: {settings.cors_origins_list}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(watchlist.router)
app.include_router(stock.router)
app.include_router(profile.router)


def run():
    """Console entry point: serve the API with uvicorn."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.backend_port)


if __name__ == "__main__":
    run()
