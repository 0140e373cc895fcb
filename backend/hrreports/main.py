import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrreports.api.calendar import router as calendar_router
from hrreports.api.reports import router as reports_router
from hrreports.core.config import settings
from hrreports.services.zenapi_client import UpstreamError, ZenApiClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared workforce API client for the application lifetime."""
    logger.info("Connecting to workforce API at %s", settings.ZENAPI_BASE_URL)
    app.state.zenapi = ZenApiClient()

    yield

    await app.state.zenapi.aclose()
    logger.info("Shutting down HR reports backend.")


app = FastAPI(
    title="HR Reports API",
    description="Monthly attendance, leave and payable-days reports over the workforce API.",
    version="0.3.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])
app.include_router(calendar_router, prefix="/api/calendar", tags=["Calendar"])


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Upstream failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": f"Workforce API unavailable: {exc}"},
    )


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
