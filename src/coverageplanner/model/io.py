"""
Input/Output Manager
Handles JSON scene text and saving/loading projects to .h5 files.
"""
import json
import logging
import os
from importlib.metadata import version, PackageNotFoundError
from typing import Optional

import h5py
import numpy as np

from coverageplanner.controller.optimizer import OptimizerSettings
from coverageplanner.model.entities import Router
from coverageplanner.model.errors import SceneFormatError
from coverageplanner.model.observations import UNASSIGNED, ObservationSet
from coverageplanner.model.scene import Model
from coverageplanner.model.tree import Node

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("coverageplanner")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# HDF5 attributes are limited to 64KB
ATTRIBUTE_LIMIT = 60000


class IOManager:

    # ---- JSON TEXT ----
    @staticmethod
    def dumps(node: Node, indent: Optional[int] = None) -> str:
        return json.dumps(node.to_json(), indent=indent)

    @staticmethod
    def parse(text: str) -> Node:
        """
        Parse scene JSON into a detached tree.

        Raises:
            json.JSONDecodeError: Text is not valid JSON.
            UnknownKindError: A node kind is not registered.
            SceneFormatError: The structure is not a scene tree.
        """
        data = json.loads(text)
        return Node.from_json(data)

    @staticmethod
    def loads(model: Model, text: str) -> None:
        """
        Replace the contents of `model` with the scene in `text`.
        The whole text is parsed before the model is touched.
        """
        tree = IOManager.parse(text)
        IOManager._adopt(model, tree)
        logger.info(f"Scene replaced ({len(model.get_descendants())} nodes).")

    @staticmethod
    def _adopt(model: Model, tree: Node) -> None:
        if isinstance(tree, Model):
            model.replace(tree)
        else:
            wrapper = Model()
            wrapper.add(tree, silent=True)
            model.replace(wrapper)

    @staticmethod
    def load_scene(filepath: str, settings: Optional[OptimizerSettings] = None) -> Model:
        """Build a new Model from a JSON scene file."""
        logger.info(f"Loading scene from: {filepath}")
        with open(filepath, "r", encoding="utf-8") as f:
            text = f.read()

        model = Model(settings=settings)
        IOManager.loads(model, text)
        return model

    @staticmethod
    def save_scene(model: Model, filepath: str) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(IOManager.dumps(model, indent=2))
        logger.info(f"Scene saved to: {filepath}")

    # ---- HDF5 PROJECTS ----
    @staticmethod
    def save_project(model: Model, filepath: str) -> None:
        """
        Save the scene tree and, if present, the last optimization
        (observation points, their assignment and the score).
        """
        logger.info(f"Saving project to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION

                # --- 1. SAVE SCENE ---
                scene_json = IOManager.dumps(model)
                if len(scene_json) > ATTRIBUTE_LIMIT:
                    logger.info(f"Scene is large ({len(scene_json)} bytes), using dataset")
                    f.create_dataset("scene", data=np.void(scene_json.encode('utf-8')))
                else:
                    f.attrs["scene_json"] = scene_json

                # --- 2. SAVE OPTIMIZATION ---
                manager = model.optimization_manager
                manager.on_hierarchy_change()
                observations = manager.observations
                if observations is not None and len(observations) > 0:
                    # Indices refer to the routers still in the tree, not to the run's router list
                    assignment = np.full(len(observations), UNASSIGNED, dtype=np.int64)
                    for index, router in enumerate(manager.routers):
                        if router.observations is observations:
                            assignment[router.point_indices] = index

                    grp_opt = f.create_group("optimization")
                    grp_opt.create_dataset("observations", data=np.asarray(observations.points), compression="gzip")
                    grp_opt.create_dataset("assignment", data=assignment, compression="gzip")
                    grp_opt.attrs["router_uids"] = json.dumps([r.uid for r in manager.routers])

                    score = manager.get_score()
                    if score is not None:
                        grp_opt.attrs["score"] = score
                    logger.debug(f"Saved {len(observations)} observation points.")

            logger.info(f"Project saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save project: {e}")
            raise e

    @staticmethod
    def load_project(filepath: str, settings: Optional[OptimizerSettings] = None) -> Model:
        logger.info(f"Loading project from: {filepath}")
        if not os.path.exists(filepath) or not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise SceneFormatError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                # --- 1. LOAD SCENE ---
                if "scene" in f:
                    scene_json = bytes(f["scene"][()]).decode('utf-8')
                elif "scene_json" in f.attrs:
                    scene_json = f.attrs["scene_json"]
                    if isinstance(scene_json, bytes):
                        scene_json = scene_json.decode('utf-8')
                else:
                    raise SceneFormatError(f"File '{filepath}' does not contain a scene.")

                model = Model(settings=settings)
                IOManager.loads(model, scene_json)

                # --- 2. LOAD OPTIMIZATION ---
                if "optimization" in f:
                    IOManager._restore_optimization(model, f["optimization"])
                else:
                    logger.debug("No optimization stored in project.")

            logger.info(f"Project loaded from: {filepath}")
            return model

        except Exception as e:
            logger.exception(f"Failed to load project: {e}")
            raise e

    @staticmethod
    def _restore_optimization(model: Model, grp_opt: h5py.Group) -> None:
        """Reattach stored observation points to the routers they were assigned to."""
        observations = ObservationSet(grp_opt["observations"][:])
        observations.assignment = np.asarray(grp_opt["assignment"][:], dtype=np.int64)
        router_uids = json.loads(grp_opt.attrs.get("router_uids", "[]"))

        routers_by_uid = {
            node.uid: node for node in model.get_descendants() if isinstance(node, Router)
        }
        for index, uid in enumerate(router_uids):
            router = routers_by_uid.get(uid)
            if router is None:
                logger.warning(f"Router '{uid}' from the stored optimization is missing in the scene.")
                continue
            router.assign_points(observations, observations.members(index))

        model.optimization_manager.observations = observations
        # Republish so the snapshot carries the restored points
        model.on_hierarchy_change()
        logger.debug(f"Restored {len(observations)} observation points.")
