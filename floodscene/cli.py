"""Click CLI commands for FloodScene."""

import asyncio
import logging
import pathlib

import click

from .controller import DataSources, FloodSceneController
from .models import SceneConfig

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """FloodScene CLI for building 3D flood-risk scenes."""
    pass


@cli.command()
@click.argument('output', type=click.Path(dir_okay=False))
@click.option('--water-level', '-w', default=0.0, type=click.FloatRange(0, 30),
              help='Simulated water elevation in meters')
@click.option('--lat', default=None, type=float, help='Scene center latitude')
@click.option('--lon', default=None, type=float, help='Scene center longitude')
@click.option('--offline', is_flag=True, help='Skip all network fetches')
def export(output: str, water_level: float, lat: float, lon: float, offline: bool):
    """Load all data and write the scene to a GLB file."""
    config = SceneConfig()
    if lat is not None:
        config.center_lat = lat
    if lon is not None:
        config.center_lon = lon
    sources = DataSources.offline() if offline else None
    asyncio.run(async_export(config, sources, output, water_level))


@cli.command()
@click.option('--host', default=None, help='Bind address')
@click.option('--port', default=None, type=int, help='Bind port')
def serve(host: str, port: int):
    """Run the dashboard API."""
    import uvicorn
    from backend import config as backend_config

    uvicorn.run("backend.app:app",
                host=host or backend_config.HOST,
                port=port or backend_config.PORT)


async def async_export(config: SceneConfig, sources, output: str,
                       water_level: float):
    """Async helper that runs the scene until data has loaded, then exports."""
    controller = FloodSceneController(config, sources=sources)
    try:
        controller.start()
        controller.set_water_level(water_level)
        await asyncio.gather(controller.data_task, controller.tile_task)

        path = pathlib.Path(output)
        path.write_bytes(controller.snapshot())
        summary = controller.dashboard()
        click.echo(f"Wrote {path} ({path.stat().st_size / 1024:.0f} KB): "
                   f"{summary['building_count']} buildings, "
                   f"{summary['flood_feature_count'] or 0} flood features")
        for item in summary['impact']:
            click.echo(f"  {item['areaName']}: {item['count']}")
    except Exception as e:
        logger.error(f"Error exporting scene: {e}")
        raise click.ClickException(str(e))
    finally:
        controller.dispose()
