"""Feature layering: which geometry, style and draw layer each category uses.

The table order is the draw order.  It only matters for transparency:
translucent water and ribbons must come after the opaque layers below them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .constants import SKY_RADIUS
from .models import MaterialStyle

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    sky = "sky"
    terrain = "terrain"
    polygon = "polygon"
    ribbon = "ribbon"
    sphere = "sphere"
    tree = "tree"
    hole_number = "hole_number"


# Course-wide categories read from the overlay root; hole categories are
# read from each entry of ``Holes.Hole``.
COURSE_SCOPE = "course"
HOLE_SCOPE = "hole"


@dataclass(frozen=True)
class FeatureLayer:
    category: str
    operation: Operation
    style: MaterialStyle
    layer: int
    scope: str = COURSE_SCOPE
    height: float = 0.0     # polygon lift above ground
    width: float = 0.0      # ribbon width
    radius: float = 0.0     # sphere marker / sky radius
    accent_style: Optional[MaterialStyle] = None  # canopy, flag


# ── Styles ──────────────────────────────────────────────────────────────
POLYGON_ROUGHNESS = 0.8
RIBBON_ROUGHNESS = 0.7

SKY_STYLE = MaterialStyle((0.53, 0.81, 0.92, 1.0), roughness=1.0)
TERRAIN_STYLE = MaterialStyle((0.34, 0.52, 0.25, 1.0), roughness=0.95, metallic=0.0)
WATER_STYLE = MaterialStyle((0.15, 0.45, 0.75, 0.8), roughness=0.1, metallic=0.3)

TRUNK_STYLE = MaterialStyle((0.4, 0.3, 0.2, 1.0))
CANOPY_STYLE = MaterialStyle((0.1, 0.5, 0.1, 1.0))
POLE_STYLE = MaterialStyle((1.0, 1.0, 1.0, 1.0))
FLAG_STYLE = MaterialStyle((1.0, 0.2, 0.2, 1.0))

# Background ``Description`` code → ground colour
BACKGROUND_COLORS = {
    0: (0.85, 0.85, 0.75, 1.0),   # sand / rough
    1: (0.2, 0.4, 0.2, 1.0),      # woodland
    2: (0.6, 0.6, 0.5, 1.0),      # bare ground
}
BACKGROUND_DEFAULT_COLOR = (0.5, 0.6, 0.4, 1.0)


def _polygon_style(color):
    return MaterialStyle(color, roughness=POLYGON_ROUGHNESS)


def _ribbon_style(color):
    return MaterialStyle(color, roughness=RIBBON_ROUGHNESS)


def background_style(description) -> MaterialStyle:
    """Style for a background region; missing code counts as 0."""
    code = 0 if description is None else description
    return _polygon_style(BACKGROUND_COLORS.get(code, BACKGROUND_DEFAULT_COLOR))


def _table():
    rows = [
        ("sky", Operation.sky, SKY_STYLE, {'radius': SKY_RADIUS}),
        ("Background", Operation.polygon, background_style(0), {'height': 0.01}),
        ("terrain", Operation.terrain, TERRAIN_STYLE, {}),
        ("Water", Operation.polygon, WATER_STYLE, {'height': 0.05}),
        ("Creek", Operation.ribbon, _ribbon_style((0.3, 0.6, 0.9, 0.8)), {'width': 3.0}),
        ("Perimeter", Operation.ribbon, _ribbon_style((0.3, 0.3, 0.3, 1.0)),
         {'width': 1.0, 'scope': HOLE_SCOPE}),
        ("Fairway", Operation.polygon, _polygon_style((0.45, 0.68, 0.35, 1.0)),
         {'height': 0.05, 'scope': HOLE_SCOPE}),
        ("Green", Operation.polygon, _polygon_style((0.25, 0.55, 0.25, 1.0)),
         {'height': 0.08, 'scope': HOLE_SCOPE}),
        ("Teebox", Operation.polygon, _polygon_style((0.8, 0.7, 0.5, 1.0)),
         {'height': 0.08, 'scope': HOLE_SCOPE}),
        ("Centralpath", Operation.ribbon, _ribbon_style((1.0, 1.0, 0.0, 0.6)),
         {'width': 0.5, 'scope': HOLE_SCOPE}),
        ("Greencenter", Operation.sphere, MaterialStyle((1.0, 0.0, 0.0, 1.0)),
         {'radius': 0.5, 'scope': HOLE_SCOPE}),
        ("Teeboxcenter", Operation.sphere, MaterialStyle((0.0, 0.0, 1.0, 1.0)),
         {'radius': 0.4, 'scope': HOLE_SCOPE}),
        ("HoleNumber", Operation.hole_number, POLE_STYLE,
         {'accent_style': FLAG_STYLE, 'scope': HOLE_SCOPE}),
        ("Path", Operation.ribbon, _ribbon_style((0.5, 0.5, 0.5, 1.0)), {'width': 2.0}),
        ("Bridge", Operation.polygon, _polygon_style((0.6, 0.4, 0.2, 1.0)), {'height': 2.5}),
        ("Tree", Operation.tree, TRUNK_STYLE, {'accent_style': CANOPY_STYLE}),
        ("Clubhouse", Operation.polygon, _polygon_style((0.7, 0.6, 0.5, 1.0)), {'height': 5.0}),
    ]
    return tuple(FeatureLayer(category=category, operation=op, style=style,
                              layer=index, **params)
                 for index, (category, op, style, params) in enumerate(rows))


FEATURE_LAYERS = _table()

SKY_LAYER = FEATURE_LAYERS[0]
TERRAIN_LAYER = FEATURE_LAYERS[2]


class FeatureLayeringPolicy:
    """Ordered, read-only view over a feature layer table."""

    def __init__(self, layers=FEATURE_LAYERS):
        self._layers = tuple(layers)
        self._by_category = {layer.category: layer for layer in self._layers}

    def __iter__(self):
        return iter(self._layers)

    def __len__(self):
        return len(self._layers)

    def layer_for(self, category: str) -> Optional[FeatureLayer]:
        return self._by_category.get(category)

    def hole_layers(self):
        return tuple(layer for layer in self._layers if layer.scope == HOLE_SCOPE)

    def overlay_categories(self):
        """Course-scope categories that come from the vector overlay."""
        return tuple(layer.category for layer in self._layers
                     if layer.scope == COURSE_SCOPE
                     and layer.operation not in (Operation.sky, Operation.terrain))

    def style_for(self, layer: FeatureLayer, shape) -> MaterialStyle:
        """Style for one shape; background regions pick it from their code."""
        if layer.category == "Background":
            return background_style(shape.attribute("Description"))
        return layer.style
