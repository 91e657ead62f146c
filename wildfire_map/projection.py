"""
Conic equal-area (Albers) projection onto the map canvas.

The projection takes the usual web-map parameters (rotate, center,
parallels, scale, translate) and is realised with pyproj on a spherical
Earth. Projected metres are divided by the sphere radius, so `scale` is
pixels per radian and `translate` is the canvas point the center lands on.
Screen y grows downwards.
"""

import logging
from typing import Iterable, Sequence, Tuple

import numpy as np
import pyproj
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from .config import (
    HEIGHT,
    PROJECTION_CENTER,
    PROJECTION_PARALLELS,
    PROJECTION_ROTATE,
    PROJECTION_SCALE,
    WIDTH,
)

logger = logging.getLogger(__name__)

# authalic radius; only the ratio to it matters
EARTH_RADIUS = 6371008.8


class AlbersProjection:
    def __init__(
        self,
        rotate: Sequence[float] = PROJECTION_ROTATE,
        center: Sequence[float] = PROJECTION_CENTER,
        parallels: Sequence[float] = PROJECTION_PARALLELS,
        scale: float = PROJECTION_SCALE,
        translate: Sequence[float] = (WIDTH / 2, HEIGHT / 2),
    ):
        self.scale = float(scale)
        self.translate = (float(translate[0]), float(translate[1]))
        # rotating the globe by +lambda puts the central meridian at -rotate[0];
        # center is then given in rotated coordinates
        lon_0 = center[0] - rotate[0]
        lat_0 = center[1] - rotate[1]
        self.proj_string = (
            f"+proj=aea +lat_1={parallels[0]} +lat_2={parallels[1]} "
            f"+lat_0={lat_0} +lon_0={lon_0} +x_0=0 +y_0=0 +R={EARTH_RADIUS} +units=m +no_defs"
        )
        # source on the same sphere, so no datum shift is applied
        source = f"+proj=longlat +R={EARTH_RADIUS} +no_defs"
        self._transformer = pyproj.Transformer.from_crs(source, self.proj_string, always_xy=True)
        logger.debug(f"Projection: {self.proj_string} scale={self.scale} translate={self.translate}")

    def project_many(self, lons: Iterable[float], lats: Iterable[float]) -> Tuple[np.ndarray, np.ndarray]:
        px, py = self._transformer.transform(np.asarray(lons, dtype=float), np.asarray(lats, dtype=float))
        k = self.scale / EARTH_RADIUS
        xs = self.translate[0] + k * np.asarray(px)
        ys = self.translate[1] - k * np.asarray(py)
        return xs, ys

    def project(self, lon: float, lat: float) -> Tuple[float, float]:
        xs, ys = self.project_many([lon], [lat])
        return float(xs[0]), float(ys[0])

    def __call__(self, lon: float, lat: float) -> Tuple[float, float]:
        return self.project(lon, lat)

    # ─────────────────────── Path rendering ───────────────────────
    def _ring_path(self, coords) -> str:
        pts = np.asarray(coords, dtype=float)
        if len(pts) == 0:
            return ""
        xs, ys = self.project_many(pts[:, 0], pts[:, 1])
        head = f"M{xs[0]:.2f},{ys[0]:.2f}"
        body = "".join(f"L{x:.2f},{y:.2f}" for x, y in zip(xs[1:], ys[1:]))
        return head + body + "Z"

    def path_data(self, geometry: BaseGeometry) -> str:
        """SVG path `d` for a Polygon or MultiPolygon; each ring is closed."""
        if geometry is None or geometry.is_empty:
            return ""
        if isinstance(geometry, Polygon):
            polygons = [geometry]
        elif isinstance(geometry, MultiPolygon):
            polygons = list(geometry.geoms)
        else:
            raise ValueError(f"Cannot draw {geometry.geom_type} as a boundary path")

        parts = []
        for poly in polygons:
            parts.append(self._ring_path(poly.exterior.coords))
            parts.extend(self._ring_path(ring.coords) for ring in poly.interiors)
        return "".join(parts)
