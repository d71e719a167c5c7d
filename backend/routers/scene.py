import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from backend.models import WaterLevelRequest, WaterLevelResponse
from floodscene.impact import water_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scene"])


def _live_controller(request: Request):
    controller = request.app.state.controller
    if controller.disposed or controller.scene is None:
        raise HTTPException(status_code=503, detail="Scene is not running")
    return controller


@router.put("/water-level", response_model=WaterLevelResponse)
async def set_water_level(body: WaterLevelRequest, request: Request):
    """Raise or lower the simulated water plane (0-30 m, 0.5 m steps)."""
    controller = _live_controller(request)
    controller.set_water_level(body.level)
    status, label = water_status(controller.water_level)
    logger.info(f"Water level set to {controller.water_level} m ({status})")
    return WaterLevelResponse(level=controller.water_level, status=status, label=label)


@router.get("/scene.glb")
async def get_scene(request: Request):
    """Serve the live scene as binary glTF."""
    controller = _live_controller(request)
    return Response(
        content=controller.snapshot(),
        media_type="model/gltf-binary",
        headers={"Content-Disposition": 'inline; filename="floodscene.glb"'},
    )
