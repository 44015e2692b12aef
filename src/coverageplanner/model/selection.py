from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from coverageplanner.model.errors import UnreachableNodeError

if TYPE_CHECKING:
    from coverageplanner.model.scene import Model
    from coverageplanner.model.tree import Node

logger = logging.getLogger(__name__)


class SelectionManager:
    """
    Manages which node is currently selected.

    The selection always refers to a live node. Selecting through a snapshot
    copy selects the live node it mirrors.
    """
    def __init__(self, model: Model) -> None:
        self.model = model
        self.selected: Optional[Node] = None

    def select(self, node: Node) -> None:
        node = node.source
        if node.root() is not self.model:
            raise UnreachableNodeError(f"{node!r} is not attached to the model.")

        if self.selected is not None and self.selected is not node:
            self.selected.selected = False
        self.selected = node
        node.selected = True
        logger.debug(f"{node.kind} {node.uid} selected.")

        self.model.on_selection_change()

    def unselect(self, silent: bool = False) -> None:
        if self.selected is None:
            return
        self.selected.selected = False
        self.selected = None
        if not silent:
            self.model.on_selection_change()

    def is_selected(self, node: Node) -> bool:
        if self.selected is None:
            return False
        return node is self.selected or node.uid == self.selected.uid

    def clear_if_within(self, node: Node) -> None:
        """Drop the selection when it is `node` or one of its descendants."""
        if self.selected is None:
            return
        if self.selected is node or node in self.selected.get_ancestors():
            self.unselect(silent=True)
