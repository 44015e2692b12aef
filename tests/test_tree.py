import pytest

from coverageplanner.model.entities import Floor, Room, Router
from coverageplanner.model.errors import SnapshotMutationError
from coverageplanner.model.scene import Model
from coverageplanner.model.tree import Node


def test_add_sets_parent_and_notifies(model, calls):
    model.subscribe(calls)
    floor = Floor()
    model.add(floor)
    assert floor.parent is model
    assert floor in model.children
    assert calls.count == 1


def test_silent_add_does_not_notify(model, calls):
    model.subscribe(calls)
    Floor().add_to(model, silent=True)
    assert calls.count == 0


def test_re_adding_a_child_is_idempotent(model, calls):
    floor = Floor().add_to(model)
    model.subscribe(calls)
    model.add(floor)
    assert model.children == (floor,)
    assert calls.count == 0


def test_add_reparents(model):
    a = Floor().add_to(model)
    b = Floor().add_to(model)
    room = Room().add_to(a)
    b.add(room)
    assert room.parent is b
    assert room not in a.children
    assert room in b.children


def test_add_rejects_cycles(model):
    floor = Floor().add_to(model)
    room = Room().add_to(floor)
    with pytest.raises(ValueError):
        room.add(floor)
    with pytest.raises(ValueError):
        floor.add(floor)


def test_remove_clears_parent(model, calls):
    floor = Floor().add_to(model)
    model.subscribe(calls)
    model.remove(floor)
    assert floor.parent is None
    assert model.children == ()
    assert calls.count == 1


def test_remove_unknown_child_is_noop(model, calls):
    model.subscribe(calls)
    model.remove(Floor())
    assert calls.count == 0


def test_delete_self(model):
    floor = Floor().add_to(model)
    room = Room().add_to(floor)
    room.delete_self()
    assert floor.children == ()
    # Detached node: nothing happens
    room.delete_self()


def test_notification_bubbles_from_deep_nodes(house, calls):
    house.subscribe(calls)
    room = house.find_first_descendant("Room")
    Router().add_to(room)
    assert calls.count == 1


def test_find_first_descendant_is_preorder(house):
    assert house.find_first_descendant("Floor").uid == "ground"
    assert house.find_first_descendant("Room").uid == "living"
    assert house.find_first_descendant("Router") is None


def test_find_first_ancestor(house):
    bedroom = next(n for n in house.walk() if n.uid == "bedroom")
    assert bedroom.find_first_ancestor("Floor").uid == "upper"
    assert bedroom.find_first_ancestor("Model") is house
    assert bedroom.find_first_ancestor("Room") is None


def test_get_descendants(house):
    uids = [n.uid for n in house.get_descendants()]
    assert uids == ["ground", "living", "kitchen", "upper", "bedroom"]
    assert house.get_descendants(include_self=True)[0] is house


def test_replace_emits_exactly_one_notification(house, calls):
    other = Model()
    floor = Floor(height=7).add_to(other, silent=True)
    Room().add_to(floor, silent=True)
    Room().add_to(floor, silent=True)

    house.subscribe(calls)
    house.replace(other)

    assert calls.count == 1
    assert house.children == (floor,)
    assert floor.parent is house
    assert other.children == ()
    assert len(house.rooms) == 2


def test_replace_keeps_the_node(house):
    uid = house.uid
    house.replace(Model())
    assert house.uid == uid
    assert house.children == ()


def test_attribute_setters_notify(house, calls):
    house.subscribe(calls)
    room = house.find_first_descendant("Room")
    room.set_position((1, 2, 3))
    room.set_size((2, 2, 2))
    room.set_size((3, 3, 3), silent=True)
    house.find_first_descendant("Floor").set_height(1.0)
    assert calls.count == 3
    assert house.get_snapshot().find_first_descendant("Room").size.tolist() == [3, 3, 3]


def test_negative_room_size_rejected():
    with pytest.raises(ValueError):
        Room(size=(1, -1, 1))


def test_tree_dump(house):
    assert house.tree().splitlines() == [
        "Model",
        "└─Floor",
        "  └─Room",
        "  └─Room",
        "└─Floor",
        "  └─Room",
    ]


def test_unique_generated_ids():
    assert len({Node().uid for _ in range(100)}) == 100


def test_failed_replace_leaves_tree_untouched(house, calls):
    other = Model()
    Floor().add_to(other)
    before = house.children
    house.subscribe(calls)

    with pytest.raises(SnapshotMutationError):
        house.replace(other.get_snapshot())
    with pytest.raises(ValueError):
        house.replace(house)
    with pytest.raises(ValueError):
        before[0].replace(house)

    assert house.children == before
    assert all(child.parent is house for child in before)
    assert len(house.get_snapshot().children) == 2
    assert calls.count == 0
