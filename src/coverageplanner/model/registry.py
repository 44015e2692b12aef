from __future__ import annotations

from typing import Any, TYPE_CHECKING

from coverageplanner.model.errors import UnknownKindError

if TYPE_CHECKING:
    from coverageplanner.model.tree import Node

_REGISTRY: dict[str, type[Node]] = {}

def register_node(cls: type[Node]) -> type[Node]:
    """Class decorator to register a node class by its KIND."""
    kind = cls.__dict__.get("KIND")
    if not kind:
        raise ValueError(f"{cls.__name__} must define KIND")
    _REGISTRY[kind] = cls
    return cls

def create_node(kind: str, args: dict[str, Any] | None = None) -> Node:
    cls = _REGISTRY.get(kind)
    if not cls:
        raise UnknownKindError(f"No node registered for kind '{kind}'")
    return cls(**(args or {}))

def list_kinds() -> list[str]:
    return list(_REGISTRY.keys())
