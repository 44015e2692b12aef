from coverageplanner import config
from coverageplanner.main import build_parser, main
from coverageplanner.model.io import IOManager


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.scene == config.DEFAULT_SCENE_PATH
    assert args.routers is None
    assert args.iterations == config.MAX_ITERATIONS


def test_main_prints_score(capsys):
    assert main([config.DEFAULT_SCENE_PATH, "--routers", "2", "--tree"]) == 0
    out = capsys.readouterr().out
    assert "Routers: 2" in out
    assert "Mbps / 42Mbps MAX" in out
    assert "└─Router" in out


def test_main_saves_outputs(tmp_path):
    project = tmp_path / "out.h5"
    scene = tmp_path / "out.json"
    main([config.DEFAULT_SCENE_PATH, "-n", "1", "--density", "1", "--save", str(project), "--export", str(scene)])

    loaded = IOManager.load_project(str(project))
    assert len(loaded.routers) == 1
    exported = IOManager.load_scene(str(scene))
    assert exported.room_count() == 5
