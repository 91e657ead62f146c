"""
Runtime configuration for the wildfire map.

Layout constants are fixed at module level; data sources and a few behaviour
switches live on `MapConfig` and can be overridden through environment
variables:

    WILDFIRE_MAP_FIRES             fire records (path or URL)
    WILDFIRE_MAP_ATLAS             us-atlas states TopoJSON (path or URL)
    WILDFIRE_MAP_TICK_SECONDS      animation tick period
    WILDFIRE_MAP_REFRESH_ON_MATCH  re-bind attributes of circles already on screen
    WILDFIRE_MAP_LOG_LEVEL         logging level for the app
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# ───────────────────────── Canvas & projection ─────────────────────────
WIDTH = 700
HEIGHT = 900

PROJECTION_ROTATE = (120.0, 0.0)
PROJECTION_CENTER = (0.0, 37.5)
PROJECTION_PARALLELS = (29.5, 45.5)
PROJECTION_SCALE = 4000.0

CALIFORNIA_FIPS = "06"
STATES_OBJECT = "states"

# ───────────────────────── Scales ─────────────────────────
SIZE_DOMAIN = (0.0, 1_000_000.0)  # acres
SIZE_RANGE = (0.0, 30.0)          # pixels
DURATION_DOMAIN = (0.0, 30.0)     # days
DURATION_CMAP = "YlOrRd"

# ───────────────────────── Legends ─────────────────────────
LEGEND_X = 40
LEGEND_Y = 30
LEGEND_WIDTH = 260
LEGEND_HEIGHT = 12
LEGEND_TICKS = (0, 5, 10, 15, 20, 25, 30)
GRADIENT_STOPS = 101

SIZE_LEGEND_X = WIDTH - 130
SIZE_LEGEND_Y = 50
SIZE_LEGEND_VALUES = (10_000, 100_000, 500_000)
SIZE_LEGEND_SPACING = 40

# ───────────────────────── Data ─────────────────────────
DEFAULT_FIRES_SOURCE = "data/fires.json"
DEFAULT_ATLAS_SOURCE = "https://cdn.jsdelivr.net/npm/us-atlas@3/states-10m.json"
DEFAULT_ID_FIELD = "FOD_ID"
REQUEST_TIMEOUT = 60

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class MapConfig:
    """
    Wildfire map configuration.

    Attributes:
        fires_source: Path or URL of the fire records JSON array
        atlas_source: Path or URL of the us-atlas states TopoJSON
        id_field: Source column holding a stable record id, used as the
            reconciliation key when present
        tick_seconds: Delay between animation ticks
        refresh_on_match: When True, circles already on screen take the
            newly derived position/size/colour on every update instead of
            keeping the values they entered with
        log_level: Logging level name
    """
    fires_source: Optional[str] = None
    atlas_source: Optional[str] = None
    id_field: str = DEFAULT_ID_FIELD
    tick_seconds: Optional[float] = None
    refresh_on_match: Optional[bool] = None
    log_level: Optional[str] = None

    def __post_init__(self):
        if self.fires_source is None:
            self.fires_source = os.environ.get("WILDFIRE_MAP_FIRES", DEFAULT_FIRES_SOURCE)
        if self.atlas_source is None:
            self.atlas_source = os.environ.get("WILDFIRE_MAP_ATLAS", DEFAULT_ATLAS_SOURCE)
        if self.tick_seconds is None:
            self.tick_seconds = float(os.environ.get("WILDFIRE_MAP_TICK_SECONDS", 0.3))
        if self.refresh_on_match is None:
            raw = os.environ.get("WILDFIRE_MAP_REFRESH_ON_MATCH", "")
            self.refresh_on_match = raw.strip().lower() in _TRUTHY
        if self.log_level is None:
            self.log_level = os.environ.get("WILDFIRE_MAP_LOG_LEVEL", "INFO").upper()
        if self.tick_seconds <= 0:
            logger.warning(f"Non-positive tick period {self.tick_seconds}s, using 0.3s")
            self.tick_seconds = 0.3
