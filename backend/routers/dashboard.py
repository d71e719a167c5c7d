import logging

from fastapi import APIRouter, Request

from backend.models import DashboardResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(request: Request):
    """Weather, river discharge, flood impact, and water-level status.

    ``loading_step`` counts finished sources (weather, GISTDA, buildings)
    and reaches 4 once everything has been applied to the scene.
    """
    return DashboardResponse(**request.app.state.controller.dashboard())
