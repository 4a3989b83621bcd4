"""Click CLI commands for CourseBuilder."""

import asyncio
import logging

import click

from .builder import TerrainBuilder
from .glb import export_glb
from .layering import FeatureLayeringPolicy, Operation
from .loader import ResourceLoadError, load_course_data

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CourseBuilder CLI for generating 3D golf-course scenes."""
    pass


@cli.command()
@click.argument('elevation', type=click.Path(dir_okay=False), required=False)
@click.argument('vector', type=click.Path(dir_okay=False), required=False)
@click.option('--output', '-o', default='course.glb', help='Output GLB file path')
def build(elevation, vector, output: str):
    """Build a GLB course scene from elevation and vector-overlay JSON."""
    data = _load(elevation, vector)
    scene = TerrainBuilder(data.grid, data.overlay).build_scene()
    path = export_glb(scene, output)
    click.echo(f"Wrote {len(scene.meshes())} meshes to {path}")


@cli.command()
@click.argument('elevation', type=click.Path(dir_okay=False), required=False)
@click.argument('vector', type=click.Path(dir_okay=False), required=False)
def inspect(elevation, vector):
    """Summarise the grid and overlay without building meshes."""
    data = _load(elevation, vector)
    grid, overlay = data.grid, data.overlay

    click.echo(f"Grid: {grid.lat_points} x {grid.lon_points}, step {grid.step}")
    click.echo(f"  latitude  {grid.min_latitude:.6f} .. {grid.max_latitude:.6f}")
    click.echo(f"  longitude {grid.min_longitude:.6f} .. {grid.max_longitude:.6f}")

    coverage = grid.to_polygon()
    policy = FeatureLayeringPolicy()
    for category in policy.overlay_categories():
        shapes = overlay.shapes(category)
        if not shapes:
            continue
        closed = policy.layer_for(category).operation == Operation.polygon
        outside = _count_outside(shapes, coverage, closed)
        click.echo(f"{category}: {len(shapes)} shapes, {outside} outside grid")

    click.echo(f"Holes: {len(overlay.holes)}")
    for index, hole in enumerate(overlay.holes):
        label = hole.number if hole.number is not None else "?"
        counts = ", ".join(f"{name} {len(category.shapes)}"
                           for name, category in hole.components.items())
        click.echo(f"  [{index}] hole {label}: {counts or 'no components'}")


def _count_outside(shapes, coverage, closed):
    outside = 0
    for shape in shapes:
        geometry = shape.to_geometry(closed=closed)
        if geometry is None or not coverage.intersects(geometry):
            outside += 1
    return outside


def _load(elevation, vector):
    try:
        return asyncio.run(load_course_data(elevation, vector))
    except ResourceLoadError as e:
        logger.error(f"Error loading course data: {e}")
        raise click.ClickException(str(e))


if __name__ == '__main__':
    cli()
