# salonbook/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI

from . import __version__
from .core.config import is_running_tests, settings
from .errors import register_error_handlers
from .routes.v1 import bookings as bookings_v1, schedules as schedules_v1, slots as slots_v1

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{settings.api_title} starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")
    yield
    logger.info(f"{settings.api_title} shutting down...")


app = FastAPI(
    title=settings.api_title,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
register_error_handlers(app)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(slots_v1.router)
api_v1.include_router(schedules_v1.router)
app.include_router(api_v1)


@app.get("/health")
def health_check() -> Dict[str, str]:
    return {"status": "healthy", "version": __version__, "environment": settings.environment}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("salonbook.main:app", host="0.0.0.0", port=8000)
