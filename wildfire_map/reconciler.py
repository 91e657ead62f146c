"""
Keyed reconciliation of the on-screen circle set.

Each update hands the reconciler the newly derived visible fires. Circles
are matched by key: new keys enter, missing keys exit, and matched circles
stay as they are. By default a matched circle keeps the position, radius and
colour it entered with for as long as it stays on screen; set
`refresh_on_match` to re-bind them from the latest derived values instead.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .models import Circle, VisibleFire

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    entered: List[Circle] = field(default_factory=list)
    exited: List[Circle] = field(default_factory=list)
    kept: List[Circle] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.entered or self.exited)


def unique_keys(visible: Iterable[VisibleFire]) -> List[Tuple[str, VisibleFire]]:
    """Pair each fire with its key; repeated keys get a `#n` occurrence suffix."""
    seen: Dict[str, int] = {}
    out = []
    for fire in visible:
        n = seen.get(fire.key, 0)
        seen[fire.key] = n + 1
        out.append((fire.key if n == 0 else f"{fire.key}#{n}", fire))
    return out


class CircleReconciler:
    def __init__(self, refresh_on_match: bool = False):
        self.refresh_on_match = refresh_on_match
        self._circles: "OrderedDict[str, Circle]" = OrderedDict()

    @property
    def circles(self) -> List[Circle]:
        """Current on-screen circles, in the order of the last visible set."""
        return list(self._circles.values())

    @property
    def keys(self) -> List[str]:
        return list(self._circles.keys())

    def __len__(self) -> int:
        return len(self._circles)

    def clear(self) -> None:
        self._circles.clear()

    def reconcile(self, visible: Iterable[VisibleFire]) -> ReconcileResult:
        desired = unique_keys(visible)
        desired_keys = {k for k, _ in desired}

        result = ReconcileResult()
        for key, circle in self._circles.items():
            if key not in desired_keys:
                result.exited.append(circle)

        updated: "OrderedDict[str, Circle]" = OrderedDict()
        for key, fire in desired:
            circle = self._circles.get(key)
            if circle is None:
                circle = Circle.from_visible(key, fire)
                result.entered.append(circle)
            else:
                if self.refresh_on_match:
                    circle.rebind(fire)
                result.kept.append(circle)
            updated[key] = circle
        self._circles = updated

        if result.changed:
            logger.debug(
                f"Reconciled circles: +{len(result.entered)} -{len(result.exited)} ={len(result.kept)}"
            )
        return result
