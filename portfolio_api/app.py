"""Portfolio Contact Service - FastAPI server for the website contact form."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portfolio_api.shared.config.settings import get_settings
from portfolio_api.shared.contact.rate_limit import ContactRateLimiter, InMemoryRateLimitStore
from portfolio_api.shared.contact.routes import CONTACT_PATH, UNEXPECTED_ERROR_MESSAGE
from portfolio_api.shared.contact.routes import router as contact_router
from portfolio_api.shared.privacy.routes import router as privacy_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()

app = FastAPI(
    title="Portfolio Contact Service",
    description="Contact form handling with validation, lead scoring and Mailgun notifications",
    version="0.1.0"
)

# Per-process counters; use a shared RateLimitStore when running several workers
app.state.contact_rate_limiter = ContactRateLimiter(InMemoryRateLimitStore())


@app.on_event("startup")
async def startup_event():
    missing = settings.missing_required()
    if missing:
        # Requests will be answered with a configuration error until this is fixed
        logging.error(f"Email configuration incomplete, missing: {', '.join(missing)}")
    else:
        logging.info(f"Email configuration loaded for domain {settings.mailgun_domain}")


# Include contact routes
app.include_router(contact_router)

# Include privacy routes
app.include_router(privacy_router)


class RoutedPreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that lets routes with their own OPTIONS handler answer their preflights."""

    def __init__(self, app, routed_preflight_paths=(), **kwargs):
        super().__init__(app, **kwargs)
        self.routed_preflight_paths = set(routed_preflight_paths)

    async def __call__(self, scope, receive, send):
        if (
            scope["type"] == "http"
            and scope["method"] == "OPTIONS"
            and scope["path"] in self.routed_preflight_paths
        ):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


app.add_middleware(
    RoutedPreflightCORSMiddleware,
    routed_preflight_paths=[CONTACT_PATH],
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Never leak internals to the client."""
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": UNEXPECTED_ERROR_MESSAGE},
        headers={"Access-Control-Allow-Origin": "*"} if "*" in settings.cors_allow_origins else {},
    )


@app.get("/")
async def root():
    return {"message": "Portfolio Contact Service API is running", "status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
