from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

UNASSIGNED = -1


@dataclass
class ObservationSet:
    """
    Points sampled from room volumes during one optimization run.

    `points` is read-only and may be shared by snapshot routers.
    `assignment[i]` is the index of the router owning point i, or UNASSIGNED.
    """
    points: npt.NDArray[np.float64]
    assignment: npt.NDArray[np.int64] = field(init=False)

    def __post_init__(self) -> None:
        self.points = np.array(self.points, dtype=np.float64).reshape(-1, 3)
        self.points.flags.writeable = False
        self.assignment = np.full(len(self.points), UNASSIGNED, dtype=np.int64)

    def __len__(self) -> int:
        return len(self.points)

    def members(self, router_index: int) -> npt.NDArray[np.int64]:
        """Indices of the points assigned to the router at `router_index`."""
        return np.flatnonzero(self.assignment == router_index)

    @property
    def unassigned_count(self) -> int:
        return int(np.count_nonzero(self.assignment == UNASSIGNED))
