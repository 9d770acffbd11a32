"""Fynda Waitlist Service - FastAPI server for waitlist sign-ups and the admin back-office."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.admin.routes import router as admin_router
from src.shared.auth.database import init_db
from src.shared.cors import cors_headers, cors_middleware
from src.shared.security.rate_limit import RateLimiters
from src.shared.site.routes import router as site_router
from src.shared.waitlist.routes import router as waitlist_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(
    title="Fynda Waitlist Service",
    description="Waitlist sign-up and admin back-office API for the Fynda landing page",
    version="0.1.0"
)

# Rate-limit counters belong to this process's app instance
app.state.rate_limiters = RateLimiters.from_config()


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    try:
        init_db()
        logging.info("Database initialization completed on startup")
    except Exception as e:
        # Keep serving; requests touching the database will surface the error
        logging.error(f"Database initialization error on startup: {str(e)}")


# Include waitlist sign-up routes
app.include_router(waitlist_router)

# Include admin back-office routes
app.include_router(admin_router)

# Include public site settings
app.include_router(site_router)

# Allow-origin header for the configured origin on every routed response
app.middleware("http")(cors_middleware)


def _validation_message(errors) -> str:
    """One human-readable line for a RequestValidationError."""
    missing = [str(err["loc"][-1]) for err in errors if err.get("type") == "missing" and len(err["loc"]) > 1]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    if not errors:
        return "Invalid request format"
    first = errors[0]
    # Field rules raise ValueError with the message meant for the user
    ctx_error = (first.get("ctx") or {}).get("error")
    if ctx_error:
        return str(ctx_error)
    if first.get("type") == "missing":
        return "Invalid request format"
    return first.get("msg", "Invalid request format")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"error": ...}; dict details are passed through."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": str(exc.detail)}

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed fields are a 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=400,
        content={"error": _validation_message(exc.errors())},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Log unexpected failures and answer with a generic message."""
    logging.error(f"Unhandled exception on {request.url.path}: {type(exc).__name__}", exc_info=True)

    # Runs outside the CORS middleware, so headers are added here
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
        headers=cors_headers(request.headers.get("origin"))
    )


@app.get("/")
async def root():
    return {"message": "Fynda Waitlist Service API is running", "status": "ok"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
