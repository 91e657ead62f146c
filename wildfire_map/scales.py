"""Numeric scales mapping data domains to pixels and colours."""

from typing import List, Sequence, Tuple

import matplotlib
import numpy as np
from matplotlib.colors import to_hex

from .config import DURATION_CMAP, DURATION_DOMAIN, GRADIENT_STOPS, SIZE_DOMAIN, SIZE_RANGE


class LinearScale:
    """Unclamped linear map from `domain` to `rng`."""

    def __init__(self, domain: Sequence[float], rng: Sequence[float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(rng[0]), float(rng[1]))

    def __call__(self, value):
        d0, d1 = self.domain
        r0, r1 = self.range
        t = (np.asarray(value, dtype=float) - d0) / (d1 - d0)
        out = r0 + t * (r1 - r0)
        return float(out) if np.ndim(out) == 0 else out


class SqrtScale(LinearScale):
    """
    Power scale with exponent 0.5.

    Used for circle radii so that circle *area* grows linearly with acreage.
    Negative inputs keep their sign.
    """

    def __init__(self, domain: Sequence[float] = SIZE_DOMAIN, rng: Sequence[float] = SIZE_RANGE):
        super().__init__(domain, rng)

    @staticmethod
    def _sqrt(v):
        return np.sign(v) * np.sqrt(np.abs(v))

    def __call__(self, value):
        d0, d1 = (self._sqrt(d) for d in self.domain)
        r0, r1 = self.range
        t = (self._sqrt(np.asarray(value, dtype=float)) - d0) / (d1 - d0)
        out = r0 + t * (r1 - r0)
        return float(out) if np.ndim(out) == 0 else out


class SequentialColorScale:
    """Clamp to `domain`, normalise to [0, 1] and sample a matplotlib colormap."""

    def __init__(self, domain: Sequence[float] = DURATION_DOMAIN, cmap: str = DURATION_CMAP):
        self.domain = (float(domain[0]), float(domain[1]))
        self.cmap_name = cmap
        self.cmap = matplotlib.colormaps[cmap]

    def normalize(self, value: float) -> float:
        d0, d1 = self.domain
        v = min(max(float(value), d0), d1)
        return (v - d0) / (d1 - d0)

    def __call__(self, value: float) -> str:
        return to_hex(self.cmap(self.normalize(value)))

    def gradient_stops(self, n: int = GRADIENT_STOPS) -> List[Tuple[float, str]]:
        """(offset percent, colour) pairs evenly spaced over the ramp."""
        return [(100.0 * i / (n - 1), to_hex(self.cmap(i / (n - 1)))) for i in range(n)]
