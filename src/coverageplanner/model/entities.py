"""
Scene Entities
==============
Floors, Rooms and Routers. Each entity stores its geometric/physical
attributes as numpy vectors and knows how to rebuild itself from `get_args()`.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Union, TYPE_CHECKING

import numpy as np

from coverageplanner import config
from coverageplanner.model.registry import register_node
from coverageplanner.model.tree import Node

if TYPE_CHECKING:
    import numpy.typing as npt
    from coverageplanner.model.observations import ObservationSet

logger = logging.getLogger(__name__)

VectorLike = Union[Sequence[float], "npt.NDArray[np.float64]"]


def as_vector3(value: VectorLike, name: str = "vector") -> npt.NDArray[np.float64]:
    """Copy `value` into a float64 array of shape (3,)."""
    arr = np.array(value, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got shape {arr.shape}.")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must be finite, got {arr.tolist()}.")
    return arr


@register_node
class Floor(Node):
    """A storey. Rooms are attached to floors."""
    KIND = "Floor"

    def __init__(self, uid: Optional[str] = None, height: float = 0.0) -> None:
        super().__init__(uid=uid)
        self.height = float(height)

    def get_args(self) -> dict[str, Any]:
        return {"uid": self.uid, "height": self.height}

    def set_height(self, height: float, silent: bool = False) -> None:
        self._assert_live("change the height of")
        self.height = float(height)
        if not silent:
            self.on_hierarchy_change()


@register_node
class Room(Node):
    """
    An axis-aligned box.

    `position` is the centre of the box, `size` its extent along x, y and z.
    """
    KIND = "Room"

    def __init__(
        self,
        uid: Optional[str] = None,
        position: VectorLike = (0.0, 0.0, 0.0),
        size: VectorLike = (1.0, 1.0, 1.0),
    ) -> None:
        super().__init__(uid=uid)
        self.position = as_vector3(position, "position")
        self.size = self._check_size(size)

    @staticmethod
    def _check_size(size: VectorLike) -> npt.NDArray[np.float64]:
        arr = as_vector3(size, "size")
        if np.any(arr < 0.0):
            raise ValueError(f"Room size cannot be negative, got {arr.tolist()}.")
        return arr

    def get_args(self) -> dict[str, Any]:
        return {"uid": self.uid, "position": self.position.tolist(), "size": self.size.tolist()}

    def _freeze(self) -> None:
        self.position.flags.writeable = False
        self.size.flags.writeable = False

    @property
    def center(self) -> npt.NDArray[np.float64]:
        return self.position.copy()

    @property
    def min_corner(self) -> npt.NDArray[np.float64]:
        return self.position - self.size / 2.0

    @property
    def max_corner(self) -> npt.NDArray[np.float64]:
        return self.position + self.size / 2.0

    def contains(self, point: VectorLike, tol: float = 1e-9) -> bool:
        p = np.asarray(point, dtype=np.float64)
        return bool(np.all(p >= self.min_corner - tol) and np.all(p <= self.max_corner + tol))

    def set_position(self, position: VectorLike, silent: bool = False) -> None:
        self._assert_live("move")
        self.position = as_vector3(position, "position")
        if not silent:
            self.on_hierarchy_change()

    def set_size(self, size: VectorLike, silent: bool = False) -> None:
        self._assert_live("resize")
        self.size = self._check_size(size)
        if not silent:
            self.on_hierarchy_change()

    def get_point_cloud(
        self,
        density: Union[float, VectorLike] = config.SAMPLE_DENSITY,
        max_height: float = config.MAX_SAMPLE_HEIGHT,
    ) -> npt.NDArray[np.float64]:
        """
        Sample the room volume on a regular grid.

        Each axis is split into `floor(size * density)` cells (at least one) and
        a sample is placed at every cell centre, so no sample touches a wall.
        An even cell count leaves the exact centre uncovered along that axis,
        so the centre is appended as an extra sample in that case.

        Args:
            density: Samples per unit length, a scalar or one value per axis.
            max_height: Layers higher than this above the room floor are skipped.
                The lowest layer is always kept.

        Returns:
            An (N, 3) array of sample coordinates.
        """
        density_arr = np.broadcast_to(np.asarray(density, dtype=np.float64), (3,))
        if np.any(density_arr <= 0.0):
            raise ValueError(f"Sampling density must be positive, got {density_arr.tolist()}.")

        counts = np.maximum(1, np.floor(self.size * density_arr + 1e-9).astype(np.int64))
        lower = self.min_corner

        axes = []
        for axis in range(3):
            n = int(counts[axis])
            step = self.size[axis] / n
            axes.append(lower[axis] + (np.arange(n) + 0.5) * step)

        layers = axes[1]
        keep = (layers - lower[1]) <= max_height
        keep[0] = True
        axes[1] = layers[keep]

        gx, gy, gz = np.meshgrid(*axes, indexing="ij")
        points = np.column_stack([gx.ravel(), gy.ravel(), gz.ravel()])

        if np.any(counts % 2 == 0):
            points = np.vstack([points, self.position])

        return points


@register_node
class Router(Node):
    """
    A wireless access point.

    Signal strength halves every `half_distance` units away from `position`.
    The assigned observation points are indices into an ObservationSet owned
    by the optimizer; the router does not own them.
    """
    KIND = "Router"

    def __init__(
        self,
        uid: Optional[str] = None,
        position: VectorLike = (0.0, 0.0, 0.0),
        strength: float = config.DEFAULT_ROUTER_STRENGTH,
        half_distance: float = config.DEFAULT_HALF_DISTANCE,
    ) -> None:
        super().__init__(uid=uid)
        self.position = as_vector3(position, "position")
        self.strength = float(strength)
        self.half_distance = float(half_distance)
        if self.half_distance <= 0.0:
            raise ValueError(f"half_distance must be positive, got {self.half_distance}.")

        self.observations: Optional[ObservationSet] = None
        self._point_indices: npt.NDArray[np.int64] = np.empty(0, dtype=np.int64)

    def get_args(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "position": self.position.tolist(),
            "strength": self.strength,
            "half_distance": self.half_distance,
        }

    def clone(self) -> Router:
        out = super().clone()
        out.observations = self.observations
        out._point_indices = self._point_indices
        return out

    def _freeze(self) -> None:
        self.position.flags.writeable = False

    @property
    def point_indices(self) -> npt.NDArray[np.int64]:
        return self._point_indices

    @property
    def points(self) -> npt.NDArray[np.float64]:
        """Coordinates of the assigned observation points, shape (N, 3)."""
        if self.observations is None:
            return np.empty((0, 3), dtype=np.float64)
        return self.observations.points[self._point_indices]

    @property
    def point_count(self) -> int:
        return len(self._point_indices)

    def assign_points(self, observations: ObservationSet, indices: npt.ArrayLike) -> None:
        self._assert_live("assign points to")
        arr = np.array(indices, dtype=np.int64)
        arr.flags.writeable = False
        self.observations = observations
        self._point_indices = arr

    def clear_points(self) -> None:
        self._assert_live("clear the points of")
        self.observations = None
        self._point_indices = np.empty(0, dtype=np.int64)

    def strength_at(self, at: VectorLike) -> Union[float, npt.NDArray[np.float64]]:
        """Received strength at one point (3,) or at many points (N, 3)."""
        at_arr = np.asarray(at, dtype=np.float64)
        distance = np.linalg.norm(at_arr - self.position, axis=-1)
        strength = self.strength * 0.5 ** (distance / self.half_distance)
        if at_arr.ndim == 1:
            return float(strength)
        return strength

    def set_position(self, position: VectorLike, silent: bool = False) -> None:
        self._assert_live("move")
        self.position = as_vector3(position, "position")
        if not silent:
            self.on_hierarchy_change()
