"""Selection state shared by the selection and render controllers."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable

from choromap.render.surface import ChartHandle

logger = logging.getLogger(__name__)


class Phase(str, enum.Enum):
    IDLE = "idle"
    TOPOLOGY_SELECTED = "topology_selected"
    COUNTRY_DRILL_DOWN = "country_drill_down"


@dataclass
class SelectionState:
    """Everything the user has selected, plus the single active chart.

    Written only by the selection controller (and by the render controller
    through ``replace_chart`` while a render it was handed is current).
    """

    active_topology_path: str
    selected_dataset_keys: list[str] = field(default_factory=list)
    phase: Phase = Phase.IDLE
    active_chart: ChartHandle | None = None
    focused_region: str | None = None
    _token: int = 0

    def select_datasets(self, keys: Iterable[str]) -> None:
        self.selected_dataset_keys = list(dict.fromkeys(keys))

    def begin_request(self) -> int:
        """New request token; every earlier token becomes stale."""
        self._token += 1
        return self._token

    def is_current(self, token: int) -> bool:
        return token == self._token

    def replace_chart(self, chart: ChartHandle) -> None:
        """Destroy the previous chart, then make *chart* the active one."""
        previous = self.active_chart
        self.active_chart = None
        if previous is not None and previous is not chart:
            previous.destroy()
        self.active_chart = chart
        self.focused_region = None
