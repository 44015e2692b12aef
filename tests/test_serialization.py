import json

import pytest

from conftest import assert_same_tree
from coverageplanner.model.entities import Floor, Room, Router
from coverageplanner.model.errors import SceneFormatError, UnknownKindError
from coverageplanner.model.registry import list_kinds
from coverageplanner.model.scene import Model
from coverageplanner.model.tree import Node


def test_to_json_shape(house):
    data = house.to_json()
    assert data["kind"] == "Model"
    assert [c["kind"] for c in data["children"]] == ["Floor", "Floor"]
    room = data["children"][0]["children"][0]
    assert room == {
        "kind": "Room",
        "args": {"uid": "living", "position": [0.0, 1.5, 0.0], "size": [6.0, 3.0, 5.0]},
        "children": [],
    }


def test_round_trip(house):
    Router(position=(1, 2, 3), strength=2.0, half_distance=4.0).add_to(house)
    rebuilt = Node.from_json(json.loads(json.dumps(house.to_json())))
    assert isinstance(rebuilt, Model)
    assert_same_tree(house, rebuilt)


def test_round_trip_without_ids(house):
    data = house.to_json()

    def strip(tree):
        tree["args"].pop("uid")
        for child in tree["children"]:
            strip(child)

    strip(data)
    rebuilt = Node.from_json(data)
    assert_same_tree(house, rebuilt, compare_uid=False)


def test_children_attached_in_listed_order():
    data = {
        "kind": "Floor",
        "args": {"height": 2},
        "children": [
            {"kind": "Room", "args": {"uid": uid}, "children": []} for uid in "abc"
        ],
    }
    floor = Node.from_json(data)
    assert isinstance(floor, Floor)
    assert floor.height == 2.0
    assert [c.uid for c in floor.children] == ["a", "b", "c"]
    assert all(isinstance(c, Room) for c in floor.children)


def test_unknown_kind():
    with pytest.raises(UnknownKindError):
        Node.from_json({"kind": "Sofa", "args": {}, "children": []})
    # UnknownKindError is a LookupError
    with pytest.raises(LookupError):
        Node.from_json({"kind": "Model", "args": {}, "children": [{"kind": "Sofa"}]})


@pytest.mark.parametrize("data", [
    [],
    {"args": {}},
    {"kind": "Room", "args": []},
    {"kind": "Room", "args": {}, "children": {}},
    {"kind": "Room", "args": {"position": [1, 2]}},
    {"kind": "Room", "args": {"colour": "red"}},
    {"kind": "Router", "args": {"half_distance": 0}},
])
def test_malformed_structure(data):
    with pytest.raises(SceneFormatError):
        Node.from_json(data)


def test_registered_kinds():
    assert {"Node", "Model", "Floor", "Room", "Router"} <= set(list_kinds())


def test_clone_preserves_args(house):
    room = house.find_first_descendant("Room")
    copy = room.clone()
    assert copy is not room
    assert copy.get_args() == room.get_args()
    assert copy.parent is None
    assert copy.children == ()


def test_duplicate_uid_rejected():
    data = {
        "kind": "Model",
        "args": {"uid": "root"},
        "children": [
            {"kind": "Floor", "args": {"uid": "f"}, "children": [
                {"kind": "Room", "args": {"uid": "r"}},
                {"kind": "Room", "args": {"uid": "r"}},
            ]},
        ],
    }
    with pytest.raises(SceneFormatError, match="Duplicate uid 'r'"):
        Node.from_json(data)


def test_model_settings_must_be_optimizer_settings():
    with pytest.raises(SceneFormatError):
        Node.from_json({"kind": "Model", "args": {"settings": {"density": 2}}})
    with pytest.raises(TypeError):
        Model(settings={})
