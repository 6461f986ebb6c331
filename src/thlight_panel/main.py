"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from thlight_panel.api.router import get_otp_manager, router as panel_router
from thlight_panel.config import settings
from thlight_panel.otp.manager import OTPManager

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


async def _sweep_expired(otp_manager: OTPManager, interval: float) -> None:
    """Periodically drop expired OTPs so they do not linger until next read."""
    while True:
        await asyncio.sleep(interval)
        otp_manager.purge_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    sweeper = None
    if settings.otp_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            _sweep_expired(get_otp_manager(), settings.otp_sweep_interval_seconds)
        )
        logger.info("OTP sweep every %ss", settings.otp_sweep_interval_seconds)
    yield
    if sweeper is not None:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
    logger.info("Shutting down %s …", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Email validation, OTP and email preview API for the THLIGHT Panel dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

# The dashboard is served from a separate dev origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(panel_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400, like the other input errors."""
    logger.info("Invalid request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Invalid request"},
    )


@app.get("/api/ping")
async def health_check():
    """Simple liveness probe."""
    return {"status": "healthy", "app": settings.app_name}
