import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import config
from backend.routers import dashboard, scene
from floodscene import DataSources, FloodSceneController

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the scene with the service and tear it down on shutdown."""
    sources = DataSources.offline() if config.OFFLINE else None
    controller = FloodSceneController(sources=sources)
    controller.start()
    app.state.controller = controller
    try:
        yield
    finally:
        controller.dispose()


app = FastAPI(
    title="FloodScene API",
    description="Dashboard and 3D scene service for the flood-risk viewer",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS -- allow the viewer's dev server
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(dashboard.router)
app.include_router(scene.router)


@app.get("/")
async def root():
    return {"status": "ok", "service": "FloodScene API"}
