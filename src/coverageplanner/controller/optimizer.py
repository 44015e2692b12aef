"""
Router Placement (k-means Coverage Optimizer)
=============================================
Places routers over the rooms of a Model so that the average received signal
strength over the sampled room volumes is as high as possible.

Why is this file needed?
------------------------
1. Sampling: every room is turned into a cloud of observation points.
2. Clustering: Lloyd's iteration (assign to nearest router, move router to
   the mean of its points) groups the points around the routers.
3. Installation: routers are snapped onto a real sample point so they never
   end up floating outside the rooms.
4. Scoring: the exponential decay model rates the final layout.

The result is a local optimum. Seeding is deterministic (room centres in
traversal order), so repeated runs on an unchanged scene give identical
layouts.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Union, TYPE_CHECKING

import numpy as np
from scipy.spatial.distance import cdist

from coverageplanner import config
from coverageplanner.model.entities import Room, Router
from coverageplanner.model.observations import ObservationSet

if TYPE_CHECKING:
    from coverageplanner.model.scene import Model

logger = logging.getLogger(__name__)


@dataclass
class OptimizerSettings:
    """Knobs of the optimizer. Defaults come from `coverageplanner.config`."""
    density: Union[float, tuple[float, float, float]] = config.SAMPLE_DENSITY
    max_sample_height: float = config.MAX_SAMPLE_HEIGHT
    max_iterations: int = config.MAX_ITERATIONS
    router_strength: float = config.DEFAULT_ROUTER_STRENGTH
    half_distance: float = config.DEFAULT_HALF_DISTANCE

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}.")


@dataclass
class OptimizationResult:
    """Return object of `OptimizationManager.optimize`."""
    score: Optional[float]
    routers: list[Router] = field(default_factory=list)
    iterations: int = 0
    converged: bool = True
    observation_count: int = 0


class OptimizationManager:
    """
    Implements the k-means clustering algorithm for routers.

    Keeps a cached list of the model's rooms and routers. The model refreshes
    it on every hierarchy change.
    """
    def __init__(self, model: Model, settings: Optional[OptimizerSettings] = None) -> None:
        self.model = model
        self.settings = settings or OptimizerSettings()
        self.rooms: list[Room] = []
        self.routers: list[Router] = []
        self.observations: Optional[ObservationSet] = None

    def on_hierarchy_change(self) -> None:
        self.rooms = []
        self.routers = []
        for node in self.model.get_descendants():
            if isinstance(node, Room):
                self.rooms.append(node)
            elif isinstance(node, Router):
                self.routers.append(node)

    @staticmethod
    def clamp_router_count(router_count: Optional[int], room_count: int) -> int:
        """`None` means one router per room. Never more routers than rooms, never fewer than 0."""
        if router_count is None:
            return room_count
        return max(0, min(int(router_count), room_count))

    def sample_observations(self, rooms: list[Room]) -> ObservationSet:
        clouds = [
            room.get_point_cloud(density=self.settings.density, max_height=self.settings.max_sample_height)
            for room in rooms
        ]
        points = np.vstack(clouds) if clouds else np.empty((0, 3), dtype=np.float64)
        return ObservationSet(points)

    def optimize(self, router_count: Optional[int] = None) -> OptimizationResult:
        """
        Replace all routers of the model with a freshly optimized set.

        Args:
            router_count: Number of routers to place. Clamped to [0, room count].

        Returns:
            OptimizationResult with the average signal strength (None when no
            point is covered), the new routers and iteration statistics.
        """
        self.model._assert_live("optimize")
        # Silent edits never reached the cache
        self.on_hierarchy_change()

        rooms = list(self.rooms)
        count = self.clamp_router_count(router_count, len(rooms))
        logger.info(f"Optimizing for {count} routers over {len(rooms)} rooms.")

        for router in self.routers:
            router.clear_points()
            router.delete_self(silent=True)

        observations = self.sample_observations(rooms)
        self.observations = observations

        routers = [
            Router(
                position=rooms[i].center,
                strength=self.settings.router_strength,
                half_distance=self.settings.half_distance,
            ).add_to(self.model, silent=True)
            for i in range(count)
        ]
        self.routers = routers

        if not routers or len(observations) == 0:
            self.model.on_hierarchy_change()
            logger.info("Nothing to optimize.")
            return OptimizationResult(score=None, routers=routers, observation_count=len(observations))

        iterations = 0
        while True:
            iterations += 1
            reassignments = self._assign(observations, routers)
            self._update(routers)
            logger.debug(f"Iteration {iterations}: {reassignments} reassignments.")
            if reassignments == 0 or iterations >= self.settings.max_iterations:
                break

        self._snap(routers)

        # Snapping moved the routers
        self._assign(observations, routers)

        score = self.get_score()
        # Publish the final layout and partition in one go
        self.model.on_hierarchy_change()

        logger.info(f"Solved in {iterations} iterations with an average strength of {score}.")
        return OptimizationResult(
            score=score,
            routers=routers,
            iterations=iterations,
            converged=reassignments == 0,
            observation_count=len(observations),
        )

    @staticmethod
    def _assign(observations: ObservationSet, routers: list[Router]) -> int:
        """
        Assignment step. Every point goes to its nearest router.
        Ties go to the router that comes first in `routers`.

        Returns:
            Number of points whose router changed.
        """
        positions = np.vstack([r.position for r in routers])
        distances = cdist(observations.points, positions)
        # argmin returns the first minimum
        nearest = np.argmin(distances, axis=1).astype(np.int64)

        reassignments = int(np.count_nonzero(nearest != observations.assignment))
        observations.assignment = nearest

        for index, router in enumerate(routers):
            router.assign_points(observations, observations.members(index))

        return reassignments

    @staticmethod
    def _update(routers: list[Router]) -> None:
        """Update step. A router without points keeps its position."""
        for router in routers:
            if router.point_count == 0:
                continue
            router.set_position(router.points.mean(axis=0), silent=True)

    @staticmethod
    def _snap(routers: list[Router]) -> None:
        """Move each router onto its assigned point closest to the current (mean) position."""
        for router in routers:
            points = router.points
            if len(points) == 0:
                continue
            closest = int(np.argmin(np.linalg.norm(points - router.position, axis=1)))
            router.set_position(points[closest], silent=True)

    def get_score(self) -> Optional[float]:
        """Average strength over every assigned point, or None if no point is assigned."""
        point_count = 0
        strength_sum = 0.0
        for router in self.routers:
            points = router.points
            if len(points) == 0:
                continue
            point_count += len(points)
            strength_sum += float(np.sum(router.strength_at(points)))

        if point_count == 0:
            return None
        return strength_sum / point_count

    @staticmethod
    def format_speed(score: Optional[float]) -> str:
        if score is None:
            return "N/A"
        return f"{score:.3f}Mbps / {config.MAX_SPEED_MBPS:.0f}Mbps MAX"
