"""
Filter-and-project engine
=========================

Given the current selection (day, active causes, name query) this derives
the set of fires to draw and where/how to draw them:

1) discovered on or before the selected day
2) not yet contained on the selected day (contained day is exclusive)
3) cause is active
4) latitude, longitude, size and duration are finite
5) name contains the query (case-insensitive), or the query is empty

Dates are compared at calendar-day granularity. The engine keeps no state
between calls; the same selection always yields the same result.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from .config import DURATION_DOMAIN
from .loader import FireDataset
from .models import SelectionState, VisibleFire
from .projection import AlbersProjection
from .scales import SequentialColorScale, SqrtScale

logger = logging.getLogger(__name__)


class FireFilter:
    def __init__(
        self,
        dataset: FireDataset,
        projection: Optional[AlbersProjection] = None,
        size_scale: Optional[SqrtScale] = None,
        color_scale: Optional[SequentialColorScale] = None,
    ):
        self.dataset = dataset
        self.projection = projection or AlbersProjection()
        self.size_scale = size_scale or SqrtScale()
        self.color_scale = color_scale or SequentialColorScale()

    def visible_mask(self, selection: SelectionState) -> pd.Series:
        """Boolean mask over the dataset rows, in source order."""
        frame = self.dataset.frame
        day = self.dataset.day(selection.day_index)

        started = frame["discovered_day"] <= day
        active = frame["contained_day"].isna() | (day < frame["contained_day"])
        cause_ok = frame["cause"].isin(list(selection.active_causes))

        query = selection.normalized_query
        if query:
            name_ok = frame["name"].map(lambda n: isinstance(n, str) and query in n.lower()).astype(bool)
        else:
            name_ok = pd.Series(True, index=frame.index)

        return frame["valid"] & started & active & cause_ok & name_ok

    def visible_fires(self, selection: SelectionState) -> List[VisibleFire]:
        mask = self.visible_mask(selection)
        rows = np.flatnonzero(mask.to_numpy())
        if len(rows) == 0:
            return []

        sub = self.dataset.frame.iloc[rows]
        xs, ys = self.projection.project_many(sub["longitude"].to_numpy(), sub["latitude"].to_numpy())
        radii = np.atleast_1d(self.size_scale(sub["size_acres"].to_numpy()))

        out = []
        for i, row in enumerate(rows):
            record = self.dataset.records[row]
            duration = min(record.duration_days, DURATION_DOMAIN[1])
            out.append(
                VisibleFire(
                    key=record.identity_key(),
                    x=float(xs[i]),
                    y=float(ys[i]),
                    radius=float(radii[i]),
                    color=self.color_scale(duration),
                    record=record,
                )
            )
        return out
