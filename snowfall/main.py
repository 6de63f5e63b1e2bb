"""
HTTP API for the snowfall display.

Exposes the season lookup and drives one server-side page session whose
worker commands go to MQTT (or the mock port).
"""

from fastapi import FastAPI, HTTPException, APIRouter, Query
from pydantic import BaseModel, Field
from typing import Literal, Optional
from contextlib import asynccontextmanager
import asyncio
from datetime import date

from snowfall.config import (
    LOG_LEVEL, MOCK_MODE, MQTT_ENABLED,
    PAGE_TITLE, PREFERENCE_FILE, VIEWPORT_WIDTH, VIEWPORT_HEIGHT, RESIZE_THROTTLE_MS,
)
from snowfall.errors import SnowfallError
from snowfall.logger import logger
from snowfall.mqtt_client import MQTTWorkerPort, init_mqtt_service
from snowfall.orchestrator import DisplayOrchestrator
from snowfall.page import Page, Viewport
from snowfall.preferences import JsonFileStorage
from snowfall.season import SeasonOptions, get_season
from snowfall.hemisphere import resolve_hemisphere
from snowfall.throttle import AsyncioClock
from snowfall.worker import MockWorkerPort


# ============================================================================
# Session state (set during lifespan startup)
# ============================================================================

orchestrator: Optional[DisplayOrchestrator] = None
page: Optional[Page] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Builds the page session and starts the MQTT service as a background task.
    """
    global orchestrator, page

    logger.info("Snowfall starting up")
    logger.info(f"Configuration: PAGE_TITLE={PAGE_TITLE}, PREFERENCE_FILE={PREFERENCE_FILE}, LOG_LEVEL={LOG_LEVEL}")
    logger.info(f"MQTT enabled: {MQTT_ENABLED}, mock mode: {MOCK_MODE}")

    loop = asyncio.get_running_loop()
    storage = JsonFileStorage(PREFERENCE_FILE)

    mqtt_task = None
    if MQTT_ENABLED and not MOCK_MODE:
        mqtt_service = init_mqtt_service(storage)
        mqtt_service.bind(loop)
        port = MQTTWorkerPort(mqtt_service)
        mqtt_task = asyncio.create_task(mqtt_service.start())
        logger.info("MQTT service started as background task")
    else:
        port = MockWorkerPort()

    page = Page(PAGE_TITLE, Viewport(VIEWPORT_WIDTH, VIEWPORT_HEIGHT))
    orchestrator = DisplayOrchestrator(
        page,
        port,
        storage.open_tab(),
        AsyncioClock(loop),
        throttle_ms=RESIZE_THROTTLE_MS,
    )
    orchestrator.initialize()

    yield

    logger.info("Starting graceful shutdown...")

    if mqtt_task:
        logger.info("Stopping MQTT service...")
        mqtt_task.cancel()
        try:
            await mqtt_task
        except asyncio.CancelledError:
            logger.info("MQTT service stopped")

    logger.info("Shutdown complete")


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Snowfall API",
    lifespan=lifespan,
    redoc_url=None,
    docs_url="/docs"
)

display_router = APIRouter(
    prefix="/display",
    tags=["Display Control"]
)


class PreferenceRequest(BaseModel):
    value: Literal["snowfall", "none"] = Field(..., description="Snow animation preference")


class ResizeRequest(BaseModel):
    width: int = Field(..., gt=0, description="Viewport inner width in pixels")
    height: int = Field(..., gt=0, description="Viewport inner height in pixels")


def _require_orchestrator() -> DisplayOrchestrator:
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Display is not initialized")
    return orchestrator


# ------------------------------------------------------------------
# Season lookup
# ------------------------------------------------------------------

@app.get("/season", tags=["Season"])
async def season_lookup(
    date_: Optional[date] = Query(None, alias="date", description="Date to classify (default: today)"),
    calendar_type: Optional[str] = Query(None, description="Astronomical or Meteorological"),
    season_type: Optional[str] = Query(None, description="Calendar (Special is accepted, not implemented)"),
    hemisphere: Optional[str] = Query(None, description="Northern or Southern"),
    country_code: Optional[str] = Query(None, min_length=2, max_length=2, description="ISO 3166-1 alpha-2"),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    language_culture: Optional[str] = Query(None, description="Accepted and ignored"),
):
    when = date_ or date.today()
    options = SeasonOptions.from_mapping({
        "calendar_type": calendar_type,
        "season_type": season_type,
        "hemisphere": hemisphere,
        "country_code": country_code,
        "latitude": latitude,
        "longitude": longitude,
        "language_culture": language_culture,
    })
    season = get_season(when, options)
    logger.debug(f"Season lookup: date={when.isoformat()}, options={options}, season={season.value}")

    return {
        "date": when.isoformat(),
        "season": season.value,
        "hemisphere": resolve_hemisphere(options).value,
    }


# ------------------------------------------------------------------
# Display session
# ------------------------------------------------------------------

@display_router.get("/state")
async def get_state():
    return _require_orchestrator().get_snapshot()


@display_router.put("/preference")
async def set_preference(req: PreferenceRequest):
    current = _require_orchestrator()
    try:
        current.page.toggle.choose(req.value)
    except SnowfallError as e:
        logger.error("Failed to apply preference", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return current.get_snapshot()


@display_router.post("/resize")
async def resize(req: ResizeRequest):
    current = _require_orchestrator()
    current.page.viewport = Viewport(req.width, req.height)
    forwarded = current.on_resize()

    return {"forwarded": forwarded, "width": req.width, "height": req.height}


app.include_router(display_router)
