import numpy as np
import pyvista as pv

from coverageplanner.view.scene_builder import SceneBuilder, SELECTED_COLOR, ROOM_COLOR


def test_build_rooms_only(house):
    blocks = SceneBuilder().build(house.get_snapshot())
    assert isinstance(blocks, pv.MultiBlock)
    assert len(blocks) == 3


def test_room_stands_on_its_floor(house):
    snapshot = house.get_snapshot()
    bedroom = [r for r in snapshot.rooms if r.uid == "bedroom"][0]
    mesh = SceneBuilder.room_mesh(bedroom)
    xmin, xmax, ymin, ymax, zmin, zmax = mesh.bounds
    assert np.isclose(ymin, 3.0)
    assert np.isclose(ymax, 6.0)
    assert np.isclose(xmax - xmin, 6.0)


def test_build_with_routers(house):
    house.optimization_manager.optimize(2)
    snapshot = house.get_snapshot()
    blocks = SceneBuilder().build(snapshot)
    # 3 rooms, 2 routers, 2 coverage clouds
    assert len(blocks) == 7

    router = snapshot.routers[0]
    cloud = SceneBuilder.coverage_cloud(router)
    assert cloud.n_points == router.point_count
    assert np.allclose(cloud.point_data["signal"], router.strength_at(router.points))


def test_selection_colour(house):
    room = house.find_first_descendant("Room")
    house.selection_manager.select(room)
    snapshot_room = house.get_snapshot().find_first_descendant("Room")
    assert SceneBuilder.color_for(snapshot_room) == SELECTED_COLOR
    assert SceneBuilder.color_for(snapshot_room.parent) == ROOM_COLOR
    assert SceneBuilder.room_mesh(snapshot_room).field_data["selected"][0] == 1
