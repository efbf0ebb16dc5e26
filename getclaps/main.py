# main.py
import os
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from getclaps.core.config import settings
from getclaps.core.exception_handlers import setup_exception_handlers
from getclaps.middleware.cookie_middleware import CookieStoreMiddleware
from getclaps.middleware.logging_middleware import RequestLoggingMiddleware
from getclaps.models.common import HealthResponse
from getclaps.routers import claps, dashboard

logger = logging.getLogger("uvicorn.error")

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Clap counting with proof-of-work admission and signed/encrypted cookies",
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
)

setup_exception_handlers(app)

app.add_middleware(CookieStoreMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# Clap buttons are embedded on third-party sites, so origins come from settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(claps.router)
app.include_router(dashboard.router)

if not settings.secret_key:
    logger.warning("SECRET_KEY is not set; signed and encrypted cookie routes will fail")


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(app_name=settings.app_name, version=settings.app_version, debug=settings.debug)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        log_level="debug" if settings.debug else "info",
    )
