"""
HTML/SVG rendering of a map frame.

`render_map` builds a self-contained HTML document (no external links): the
state boundary, one circle per on-screen fire, the duration colour legend,
the size legend and a click tooltip. The page embeds it as-is.
"""

import html
import logging
from datetime import datetime
from typing import Iterable, Optional

from .config import (
    DURATION_DOMAIN,
    HEIGHT,
    LEGEND_HEIGHT,
    LEGEND_TICKS,
    LEGEND_WIDTH,
    LEGEND_X,
    LEGEND_Y,
    SIZE_LEGEND_SPACING,
    SIZE_LEGEND_VALUES,
    SIZE_LEGEND_X,
    SIZE_LEGEND_Y,
    WIDTH,
)
from .models import Circle, FireRecord
from .scales import LinearScale, SequentialColorScale, SqrtScale

logger = logging.getLogger(__name__)

DISPLAY_DATE_FORMAT = "%B %d, %Y"
UNNAMED_FIRE = "(Unnamed Fire)"


# ─────────────────────── Formatting ───────────────────────
def format_number(value: float) -> str:
    """Thousands separators, at most three decimals, trailing zeros dropped."""
    s = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if s in ("-0", "") else s


def format_date(value: Optional[datetime]) -> str:
    return value.strftime(DISPLAY_DATE_FORMAT) if value is not None else "N/A"


def format_duration(days: float) -> str:
    # 0 marks an unknown duration in the source data
    if days == 0:
        return "Unknown"
    return f"{days:.1f} days"


def format_tooltip(record: FireRecord) -> str:
    name = html.escape(record.name) if isinstance(record.name, str) and record.name else UNNAMED_FIRE
    return (
        f"<strong>{name}</strong><br>"
        f"<b>Size:</b> {format_number(record.size_acres)} acres<br>"
        f"<b>Duration:</b> {format_duration(record.duration_days)}<br>"
        f"<b>Discovered:</b> {format_date(record.discovered)}<br>"
        f"<b>Contained:</b> {format_date(record.contained)}"
    )


# ─────────────────────── SVG pieces ───────────────────────
def boundary_svg(path_d: str) -> str:
    if not path_d:
        return ""
    return f'<path d="{path_d}" fill="#f0f0f0" stroke="#888"></path>'


def circle_svg(circle: Circle) -> str:
    return (
        f'<circle cx="{circle.x:.3f}" cy="{circle.y:.3f}" r="{circle.radius:.3f}" '
        f'fill="{circle.color}" fill-opacity="0.85" stroke="#333" stroke-width="0.3" '
        f'style="cursor: pointer" data-key="{html.escape(circle.key, quote=True)}" '
        f'data-tip="{html.escape(format_tooltip(circle.record), quote=True)}"></circle>'
    )


def duration_legend_svg(color_scale: SequentialColorScale) -> str:
    stops = "".join(
        f'<stop offset="{offset:g}%" stop-color="{color}"></stop>'
        for offset, color in color_scale.gradient_stops()
    )
    axis = LinearScale(DURATION_DOMAIN, (LEGEND_X, LEGEND_X + LEGEND_WIDTH))
    x0, x1 = axis.range
    ticks = "".join(
        f'<g class="tick" transform="translate({axis(t):g},0)">'
        f'<line stroke="currentColor" y2="6"></line>'
        f'<text fill="currentColor" y="9" dy="0.71em" style="font-size: 10px">{t} days</text></g>'
        for t in LEGEND_TICKS
    )
    return (
        f'<defs><linearGradient id="color-gradient" x1="0%" x2="100%">{stops}</linearGradient></defs>'
        f'<text x="{LEGEND_X}" y="{LEGEND_Y - 10}" font-size="12px" font-weight="bold">Fire Duration (days)</text>'
        f'<rect x="{LEGEND_X}" y="{LEGEND_Y}" width="{LEGEND_WIDTH}" height="{LEGEND_HEIGHT}" '
        f'style="fill: url(#color-gradient)" stroke="#ccc"></rect>'
        f'<g transform="translate(0, {LEGEND_Y + LEGEND_HEIGHT})" fill="none" font-size="10" '
        f'font-family="sans-serif" text-anchor="middle">'
        f'<path class="domain" stroke="currentColor" d="M{x0:g},6V0H{x1:g}V6"></path>{ticks}</g>'
    )


def size_legend_svg(size_scale: SqrtScale) -> str:
    items = []
    for i, size in enumerate(SIZE_LEGEND_VALUES):
        y = i * SIZE_LEGEND_SPACING
        items.append(
            f'<circle cx="0" cy="{y}" r="{size_scale(size):.3f}" fill="none" stroke="#555"></circle>'
            f'<text x="40" y="{y}" alignment-baseline="middle" font-size="11px">'
            f'{format_number(size / 1000)}k acres</text>'
        )
    return (
        f'<g transform="translate({SIZE_LEGEND_X}, {SIZE_LEGEND_Y})">{"".join(items)}'
        f'<text x="0" y="-10" font-size="12px" font-weight="bold">Fire Size</text></g>'
    )


def render_svg(
    circles: Iterable[Circle],
    boundary_path: str = "",
    size_scale: Optional[SqrtScale] = None,
    color_scale: Optional[SequentialColorScale] = None,
) -> str:
    size_scale = size_scale or SqrtScale()
    color_scale = color_scale or SequentialColorScale()
    body = "".join(circle_svg(c) for c in circles)
    return (
        f'<svg id="map-svg" viewBox="0 0 {WIDTH} {HEIGHT}" style="border: 1px solid #ccc">'
        f"{boundary_svg(boundary_path)}"
        f'<g id="circles">{body}</g>'
        f"{duration_legend_svg(color_scale)}"
        f"{size_legend_svg(size_scale)}"
        f"</svg>"
    )


# ─────────────────────────── HTML ───────────────────────────
html_tpl = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>California Wildfires</title>
  <style>
    body { margin:0; font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif; }
    #vis { position: relative; max-width: __WIDTH__px; }
    #map-svg { width: 100%; height: auto; display: block; }
    #tooltip {
      position: absolute; background: white; border: 1px solid #ccc; padding: 8px;
      font-size: 12px; border-radius: 4px; box-shadow: 0 2px 4px rgba(0,0,0,0.1);
      display: none; pointer-events: none; max-width: 220px; z-index: 1;
    }
  </style>
</head>
<body>
  <div id="vis">
    __SVG__
    <div id="tooltip"></div>
  </div>
  <script>
    const vis = document.getElementById('vis');
    const tooltip = document.getElementById('tooltip');
    document.getElementById('map-svg').addEventListener('click', ()=>{ tooltip.style.display = 'none'; });
    document.querySelectorAll('#circles circle').forEach(c=>{
      c.addEventListener('click', (event)=>{
        const rect = vis.getBoundingClientRect();
        tooltip.style.display = 'block';
        tooltip.style.left = (event.clientX - rect.left + 10) + 'px';
        tooltip.style.top = (event.clientY - rect.top + 10) + 'px';
        tooltip.innerHTML = c.dataset.tip;
        event.stopPropagation();
      });
    });
  </script>
</body>
</html>
"""


def render_map(
    circles: Iterable[Circle],
    boundary_path: str = "",
    size_scale: Optional[SqrtScale] = None,
    color_scale: Optional[SequentialColorScale] = None,
) -> str:
    """Full HTML document for one frame; the tooltip starts hidden."""
    circles = list(circles)
    svg = render_svg(circles, boundary_path, size_scale, color_scale)
    logger.debug(f"Rendered {len(circles)} circles")
    # plain replace; the template is full of braces
    return html_tpl.replace("__WIDTH__", str(WIDTH)).replace("__SVG__", svg)
