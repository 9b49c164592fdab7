import time
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from vip_admin.core.db import init_db
from vip_admin.core.deps import AdminAuthRequired, get_identity_provider
from vip_admin.core.errors import AdminError
from vip_admin.core.logging import setup_logging
from vip_admin.core.settings import get_settings
from vip_admin.routers import admin, api, auth, categories, listings, products

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

# Requests slower than these (ms) are logged as slow / very slow
SLOW_REQUEST_MS = 100
VERY_SLOW_REQUEST_MS = 500

# Initialize
settings = get_settings()
logger = setup_logging()

if not settings.firebase_project_id or not settings.firebase_auth_domain:
    logger.warning("FIREBASE_PROJECT_ID / FIREBASE_AUTH_DOMAIN not set; only email sign-in is available")

# Create app
app = FastAPI(title=settings.app_name, version="1.0.0", description="VIP numbers admin dashboard")


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report which fields failed; submitted values are dropped since forms carry passwords."""
    errors = [
        {"loc": error.get("loc"), "msg": str(error.get("msg", "")), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.error(
        f"Request validation failed: {request.method} {request.url.path}",
        extra={"operation": "validate_request", "context_data": {"errors": errors}},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(errors)},
    )


@app.exception_handler(AdminError)
async def admin_error_handler(request: Request, exc: AdminError):
    """Errors that escape a route become a JSON payload with the error's status."""
    logger.error(
        f"{request.method} {request.url.path} failed: {exc}",
        extra={"error_type": type(exc).__name__, "context_data": exc.details},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


@app.exception_handler(AdminAuthRequired)
async def admin_auth_redirect_handler(_request: Request, exc: AdminAuthRequired):
    """Redirect to the login page when admin authentication is required."""
    return RedirectResponse(url=exc.redirect_url, status_code=status.HTTP_303_SEE_OTHER)


# Request logging middleware with timing
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log each request with its duration; static assets are timed but not logged."""
    start_time = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start_time) * 1000
    response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

    path = request.url.path
    if path.startswith("/static/"):
        return response

    line = f"{request.method} {path} - {response.status_code} [{duration_ms:.2f}ms]"
    if duration_ms >= VERY_SLOW_REQUEST_MS:
        logger.warning(f"{line} (very slow)")
    elif duration_ms >= SLOW_REQUEST_MS:
        logger.info(f"{line} (slow)")
    else:
        logger.info(line)
    return response


# Mount static files
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Include routers; fixed /admin paths go before the generic /admin/{entity} routes
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(admin.router)
app.include_router(categories.router)
app.include_router(products.router)
app.include_router(listings.router)
app.include_router(api.router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize the database engine on startup."""
    logger.info("Starting up...")
    init_db()
    logger.info("Database initialized")


@app.on_event("shutdown")
async def shutdown_event():
    """Close the identity provider's HTTP client."""
    await get_identity_provider().close()
    logger.info("Shut down")


@app.get("/")
async def root():
    return RedirectResponse(url="/admin/", status_code=status.HTTP_303_SEE_OTHER)


# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.app_name}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
