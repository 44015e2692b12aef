"""Exceptions raised by the scene model and its collaborators."""


class CoveragePlannerError(Exception):
    """Base class for all errors raised by coverageplanner."""


class SnapshotMutationError(CoveragePlannerError, RuntimeError):
    """A structural or attribute mutation was attempted on a snapshot node."""


class UnreachableNodeError(CoveragePlannerError, ValueError):
    """The node is not attached to the model it is being selected in."""


class UnknownKindError(CoveragePlannerError, LookupError):
    """No node class is registered under the requested kind."""


class SceneFormatError(CoveragePlannerError, ValueError):
    """Serialized scene data does not have the expected structure."""
