import logging

import numpy as np
import pytest

from coverageplanner.model.entities import Floor, Room
from coverageplanner.model.scene import Model


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI installs handlers on the package logger; drop them after each test."""
    yield
    logger = logging.getLogger("coverageplanner")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def model():
    return Model()


@pytest.fixture
def house():
    """Model with two floors and three rooms."""
    model = Model()
    ground = Floor(uid="ground", height=0.0).add_to(model, silent=True)
    upper = Floor(uid="upper", height=3.0).add_to(model, silent=True)
    Room(uid="living", position=(0, 1.5, 0), size=(6, 3, 5)).add_to(ground, silent=True)
    Room(uid="kitchen", position=(5, 1.5, 0), size=(4, 3, 5)).add_to(ground, silent=True)
    Room(uid="bedroom", position=(0, 4.5, 0), size=(6, 3, 5)).add_to(upper, silent=True)
    model.on_hierarchy_change()
    return model


@pytest.fixture
def calls():
    """A listener that records how often it was called."""
    class Recorder:
        def __init__(self):
            self.count = 0

        def __call__(self):
            self.count += 1

    return Recorder()


def assert_same_tree(a, b, compare_uid=True):
    assert a.kind == b.kind
    if compare_uid:
        assert a.uid == b.uid
    args_a, args_b = a.get_args(), b.get_args()
    args_a.pop("uid")
    args_b.pop("uid")
    assert args_a.keys() == args_b.keys()
    for key in args_a:
        assert np.allclose(args_a[key], args_b[key])
    assert len(a.children) == len(b.children)
    for child_a, child_b in zip(a.children, b.children):
        assert_same_tree(child_a, child_b, compare_uid)
