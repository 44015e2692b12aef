"""
Scene Model (Tree Root)
=======================
The root of the scene hierarchy and the only object external views talk to.

Why is this file needed?
------------------------
1. Publishing: every non-silent change anywhere in the tree reaches
   `on_hierarchy_change()` here. The model refreshes the optimizer's room
   cache, regenerates the snapshot, then calls the subscribers.
2. Isolation: views read `get_snapshot()` only. The snapshot is a complete
   copy taken after the mutation finished and is never changed afterwards.
3. Composition: owns the SelectionManager and the OptimizationManager.

There is no module-level instance. Create a Model and pass it to whatever
needs it (IOManager, SceneBuilder, the CLI).
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, TYPE_CHECKING

from coverageplanner.controller.optimizer import OptimizationManager, OptimizerSettings
from coverageplanner.model.entities import Floor, Room, VectorLike
from coverageplanner.model.registry import register_node
from coverageplanner.model.selection import SelectionManager
from coverageplanner.model.tree import Node

if TYPE_CHECKING:
    from coverageplanner.model.entities import Router

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


@register_node
class Model(Node):
    KIND = "Model"

    def __init__(self, uid: Optional[str] = None, settings: Optional[OptimizerSettings] = None) -> None:
        if settings is not None and not isinstance(settings, OptimizerSettings):
            raise TypeError(f"settings must be OptimizerSettings, got {type(settings).__name__}.")
        super().__init__(uid=uid)
        self._listeners: list[Listener] = []
        self.snapshot: Optional[Model] = None
        self.selection_manager = SelectionManager(self)
        self.optimization_manager = OptimizationManager(self, settings)

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a zero-argument callback fired after every snapshot regeneration.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)
        logger.debug(f"Subscribed listener ({len(self._listeners)} total).")

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
                logger.debug(f"Unsubscribed listener ({len(self._listeners)} total).")

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ------------------------------------------------------------------
    # Change handling
    # ------------------------------------------------------------------
    def on_hierarchy_change(self) -> None:
        super().on_hierarchy_change()
        self.optimization_manager.on_hierarchy_change()
        self.re_render()

    def on_selection_change(self) -> None:
        self.re_render()

    def _on_subtree_removed(self, node: Node) -> None:
        super()._on_subtree_removed(node)
        self.selection_manager.clear_if_within(node)

    def re_render(self) -> None:
        logger.debug("Model re-rendering.")
        self.generate_snapshot()
        for listener in list(self._listeners):
            listener()

    def generate_snapshot(self) -> Model:
        snapshot = super().generate_snapshot()
        self.snapshot = snapshot
        return snapshot

    def _freeze(self) -> None:
        # Lets readers of a snapshot ask it for its rooms and routers
        self.optimization_manager.on_hierarchy_change()

    def get_snapshot(self) -> Model:
        if self.snapshot is None:
            return self.generate_snapshot()
        return self.snapshot

    # ------------------------------------------------------------------
    # Editing helpers
    # ------------------------------------------------------------------
    def add_floor(self, height: float = 0.0, silent: bool = False) -> Floor:
        floor = Floor(height=height)
        floor.add_to(self, silent=silent)
        return floor

    def add_room(
        self,
        position: VectorLike = (0.0, 0.0, 0.0),
        size: VectorLike = (1.0, 1.0, 1.0),
        silent: bool = False,
    ) -> Room:
        """
        Add a room to the selected floor, else to the first floor.
        A floor is created when the model has none.
        """
        selected = self.selection_manager.selected
        if selected is not None and selected.kind == Floor.KIND:
            parent = selected
        else:
            parent = self.find_first_descendant(Floor.KIND) or self.add_floor(silent=True)

        room = Room(position=position, size=size)
        room.add_to(parent, silent=silent)
        return room

    @property
    def rooms(self) -> list[Room]:
        return list(self.optimization_manager.rooms)

    @property
    def routers(self) -> list[Router]:
        return list(self.optimization_manager.routers)

    def room_count(self) -> int:
        return len(self.optimization_manager.rooms)
