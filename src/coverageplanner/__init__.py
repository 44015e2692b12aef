"""Coverage Planner - lay out floors and rooms and place routers to maximize coverage."""

__version__ = "0.1.0"

from coverageplanner.model.tree import Node
from coverageplanner.model.entities import Floor, Room, Router
from coverageplanner.model.scene import Model
from coverageplanner.controller.optimizer import OptimizationManager, OptimizationResult, OptimizerSettings

__all__ = [
    "Node", "Floor", "Room", "Router", "Model",
    "OptimizationManager", "OptimizationResult", "OptimizerSettings",
]
