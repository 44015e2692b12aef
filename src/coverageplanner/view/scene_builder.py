"""
Scene Builder (PyVista Adapter)
Converts a published snapshot into PyVista datasets for an external plotter.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pyvista as pv

from coverageplanner.model.entities import Floor, Room, Router
from coverageplanner.model.tree import Node

logger = logging.getLogger(__name__)

ROOM_COLOR = "white"
SELECTED_COLOR = "lightblue"
ROUTER_COLOR = "orange"


class SceneBuilder:
    """
    Builds one MultiBlock per snapshot:
    a box per room, a sphere per router and a point cloud of the observation
    points each router covers, with the received strength as point data.
    """
    def __init__(self, router_radius: float = 0.15) -> None:
        self.router_radius = router_radius

    @staticmethod
    def color_for(node: Node) -> str:
        if node.selected:
            return SELECTED_COLOR
        if isinstance(node, Router):
            return ROUTER_COLOR
        return ROOM_COLOR

    def build(self, snapshot: Node) -> pv.MultiBlock:
        if not snapshot.is_snapshot:
            logger.warning("Building from a live node. Views should read Model.get_snapshot().")

        blocks = pv.MultiBlock()
        for node in snapshot.walk():
            if isinstance(node, Room):
                blocks.append(self.room_mesh(node), f"Room-{node.uid}")
            elif isinstance(node, Router):
                blocks.append(self.router_mesh(node), f"Router-{node.uid}")
                coverage = self.coverage_cloud(node)
                if coverage is not None:
                    blocks.append(coverage, f"Coverage-{node.uid}")

        logger.debug(f"Built {len(blocks)} blocks.")
        return blocks

    @staticmethod
    def room_mesh(room: Room) -> pv.PolyData:
        """Box for the room. Rooms on a floor are stood on the floor's height."""
        center = np.array(room.position, dtype=np.float64)
        floor = room.find_first_ancestor(Floor.KIND)
        if isinstance(floor, Floor):
            center[1] = floor.height + room.size[1] / 2.0

        half = room.size / 2.0
        lower, upper = center - half, center + half
        mesh = pv.Box(bounds=(lower[0], upper[0], lower[1], upper[1], lower[2], upper[2]))
        mesh.field_data["selected"] = np.array([int(room.selected)])
        return mesh

    def router_mesh(self, router: Router) -> pv.PolyData:
        mesh = pv.Sphere(radius=self.router_radius, center=tuple(router.position))
        mesh.field_data["strength"] = np.array([router.strength])
        mesh.field_data["selected"] = np.array([int(router.selected)])
        return mesh

    @staticmethod
    def coverage_cloud(router: Router) -> Optional[pv.PolyData]:
        points = router.points
        if len(points) == 0:
            return None
        cloud = pv.PolyData(np.asarray(points, dtype=np.float64))
        cloud.point_data["signal"] = router.strength_at(points)
        return cloud
