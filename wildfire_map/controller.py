"""
Map controller
==============

`MapController` owns everything the page needs: the loaded dataset and
boundary, the projection and scales, the filter engine, the circle
reconciler, the animation driver and the single `SelectionState`. UI
callbacks read and write the selection only through the accessors here, and
`update()` runs filter -> project -> reconcile to produce a `MapFrame`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

import pandas as pd
from shapely.geometry.base import BaseGeometry

from .animation import AnimationDriver
from .config import MapConfig
from .engine import FireFilter
from .loader import FireDataset, load_boundary, load_fires
from .models import Circle, SelectionState, VisibleFire
from .projection import AlbersProjection
from .reconciler import CircleReconciler, ReconcileResult
from .render import render_map
from .scales import SequentialColorScale, SqrtScale

logger = logging.getLogger(__name__)


@dataclass
class MapFrame:
    selected_day: pd.Timestamp
    visible: List[VisibleFire]
    result: ReconcileResult
    circles: List[Circle]


class MapController:
    def __init__(
        self,
        dataset: FireDataset,
        boundary: Optional[BaseGeometry] = None,
        config: Optional[MapConfig] = None,
    ):
        self.config = config or MapConfig()
        self.dataset = dataset
        self.boundary = boundary
        self.projection = AlbersProjection()
        self.size_scale = SqrtScale()
        self.color_scale = SequentialColorScale()
        self.engine = FireFilter(dataset, self.projection, self.size_scale, self.color_scale)
        self.reconciler = CircleReconciler(refresh_on_match=self.config.refresh_on_match)
        self.animation = AnimationDriver()
        self.selection = SelectionState(day_index=0, active_causes=frozenset(dataset.causes), query="")
        self._boundary_path: Optional[str] = None
        self._tick_due = False

    @classmethod
    def from_config(cls, config: Optional[MapConfig] = None) -> "MapController":
        """Load both datasets; raises DataLoadError if either fails."""
        config = config or MapConfig()
        dataset = load_fires(config.fires_source, id_field=config.id_field)
        boundary = load_boundary(config.atlas_source)
        return cls(dataset, boundary, config)

    # ---------------- Day ----------------
    @property
    def day_index(self) -> int:
        return self.selection.day_index

    @property
    def last_index(self) -> int:
        return self.dataset.day_count - 1

    @property
    def selected_day(self) -> pd.Timestamp:
        return self.dataset.day(self.day_index)

    def set_day_index(self, index: int) -> None:
        index = max(0, min(int(index), self.last_index))
        self.selection = self.selection.with_day(index)

    def set_date(self, value: Union[str, date, datetime]) -> bool:
        """Move to the day matching `value`; no matching day leaves the state unchanged."""
        if value is None:
            return False
        index = self.dataset.day_index_for(value)
        if index is None:
            logger.debug(f"No day matches {value}, ignoring")
            return False
        self.set_day_index(index)
        return True

    # ---------------- Causes / search ----------------
    @property
    def active_causes(self) -> frozenset:
        return self.selection.active_causes

    def is_cause_active(self, cause: str) -> bool:
        return cause in self.selection.active_causes

    def set_cause_active(self, cause: str, active: bool) -> None:
        causes = set(self.selection.active_causes)
        if active:
            causes.add(cause)
        else:
            causes.discard(cause)
        self.selection = self.selection.with_causes(causes)

    def set_active_causes(self, causes: Iterable[str]) -> None:
        self.selection = self.selection.with_causes(causes)

    @property
    def query(self) -> str:
        return self.selection.query

    def set_query(self, text: str) -> None:
        logger.debug(f"Search changed: {text!r}")
        self.selection = self.selection.with_query(text)

    # ---------------- Playback ----------------
    @property
    def is_playing(self) -> bool:
        return self.animation.is_playing

    def play(self) -> None:
        self.animation.play()

    def pause(self) -> None:
        self.animation.pause()

    def toggle_play(self) -> None:
        self.animation.toggle()

    def tick(self) -> bool:
        """Advance one day while playing; False once playback has stopped."""
        nxt = self.animation.tick(self.day_index, self.last_index)
        if nxt is None:
            return False
        self.set_day_index(nxt)
        return True

    def schedule_tick(self) -> None:
        """Mark one tick as pending; `advance_if_due` applies it on the next run."""
        self._tick_due = True

    def advance_if_due(self) -> bool:
        due, self._tick_due = self._tick_due, False
        return due and self.tick()

    # ---------------- Render pipeline ----------------
    @property
    def boundary_path(self) -> str:
        if self._boundary_path is None:
            self._boundary_path = self.projection.path_data(self.boundary) if self.boundary is not None else ""
        return self._boundary_path

    def render(self, frame: MapFrame) -> str:
        return render_map(frame.circles, self.boundary_path, self.size_scale, self.color_scale)

    def update(self) -> MapFrame:
        visible = self.engine.visible_fires(self.selection)
        result = self.reconciler.reconcile(visible)
        return MapFrame(
            selected_day=self.selected_day,
            visible=visible,
            result=result,
            circles=self.reconciler.circles,
        )

    def visible_table(self) -> pd.DataFrame:
        """Visible records for the current selection, source columns normalised."""
        mask = self.engine.visible_mask(self.selection)
        cols = ["name", "latitude", "longitude", "size_acres", "discovered", "contained", "duration_days", "cause"]
        if self.dataset.has_record_ids:
            cols = ["record_id"] + cols
        return self.dataset.frame.loc[mask, cols].reset_index(drop=True)
