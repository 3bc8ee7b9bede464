import logging

from workshop_timer import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402
from typing import Optional  # noqa: E402

from fastapi import FastAPI, Query  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from workshop_timer.api.base import api_router  # noqa: E402
from workshop_timer.features.timer.registry import shutdown_session_registry  # noqa: E402
from workshop_timer.features.timer.schemas import LandingResponse  # noqa: E402
from workshop_timer.infra.store.client import reset_store_client  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Stop every room's polling before the HTTP client goes away
    await shutdown_session_registry()
    await reset_store_client()


app = FastAPI(
    title="Workshop Timer API",
    description="Countdown timer shared between a facilitator and participants",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Specify your frontend URL in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/", response_model=LandingResponse)
def read_root(room: Optional[str] = Query(None)):
    if room:
        return LandingResponse(
            mode="participant",
            room_id=room,
            message=f"Follow the timer at /api/rooms/{room}/stream",
        )
    return LandingResponse(
        mode="landing",
        message="Create a room with POST /api/rooms",
    )
