"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths and magic numbers scattered
   throughout the code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (example scenes) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_SCENE_PATH (str): Absolute path to the bundled example scene.
    SAMPLE_DENSITY, MAX_SAMPLE_HEIGHT, MAX_ITERATIONS: Optimizer defaults.
    DEFAULT_ROUTER_STRENGTH, DEFAULT_HALF_DISTANCE: Router signal model.
"""
import logging
import sys
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/coverageplanner/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Paths
ASSETS_PATH: str = get_resource_path("assets")
EXAMPLES_PATH: str = os.path.join(ASSETS_PATH, "examples")
DEFAULT_SCENE_PATH: str = os.path.join(EXAMPLES_PATH, "example1.json")

if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")

# Observation sampling: points per unit length along (x, y, z)
SAMPLE_DENSITY: tuple[float, float, float] = (2.0, 1.0, 2.0)
# Devices rarely sit more than 2 units above the floor of a room
MAX_SAMPLE_HEIGHT: float = 2.0

# Lloyd's iteration cap
MAX_ITERATIONS: int = 10

# Signal model: strength * 0.5 ** (distance / half_distance)
DEFAULT_ROUTER_STRENGTH: float = 1.0
DEFAULT_HALF_DISTANCE: float = 5.0

# Only used for display
MAX_SPEED_MBPS: float = 42.0
