"""
Pixel Grid Editor - File Operations Service

This module handles project file I/O for the layer tree.
Separates file operations from the session and UI logic.

Project document (JSON):
    {
        "gridSize": 16,
        "layerManagerSnapshot": { "nodes": [...], "activeItemId": 1, "nextId": 2 }
    }
"""

import json
import logging

from pixelgrid.constants import PROJECT_GRID_SIZE_KEY, PROJECT_SNAPSHOT_KEY
from pixelgrid.models.layer_tree import LayerTree, SnapshotError
from pixelgrid.utils.logger import loggerRaise

_logger = logging.getLogger('FileOperations')


class ProjectFileError(ValueError):
    """Raised when a project document cannot be read back into a LayerTree"""


def project_to_json(tree):
    """Serialize a tree to the project document

    Args:
        tree: LayerTree to save

    Returns:
        JSON text
    """
    document = {
        PROJECT_GRID_SIZE_KEY: tree.size,
        PROJECT_SNAPSHOT_KEY: tree.get_snapshot(),
    }
    return json.dumps(document)


def project_from_json(text):
    """Build a LayerTree from project document text

    Args:
        text: JSON text as written by project_to_json

    Returns:
        New LayerTree holding the project

    Raises:
        ProjectFileError: If the text is not a valid project document
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProjectFileError(f"Project is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise ProjectFileError("Project document must be a JSON object")
    for key in (PROJECT_GRID_SIZE_KEY, PROJECT_SNAPSHOT_KEY):
        if key not in document:
            raise ProjectFileError(f"Project document is missing '{key}'")

    grid_size = document[PROJECT_GRID_SIZE_KEY]
    if not isinstance(grid_size, int) or isinstance(grid_size, bool) or grid_size <= 0:
        raise ProjectFileError(f"Invalid grid size: {grid_size!r}")

    tree = LayerTree()
    try:
        tree.load_snapshot(document[PROJECT_SNAPSHOT_KEY])
    except SnapshotError as e:
        raise ProjectFileError(f"Invalid layer snapshot: {e}") from e

    if tree.size != grid_size:
        raise ProjectFileError(f"Grid size {grid_size} does not match layer data ({tree.size}x{tree.size})")
    return tree


def save_project(tree, filename):
    """Save a tree to a project file

    Args:
        tree: LayerTree to save
        filename: Path to save file

    Raises:
        OSError: If file write fails
    """
    text = project_to_json(tree)

    with open(filename, 'w', encoding='utf-8') as f:
        f.write(text)

    _logger.info(f"Project saved to {filename}")


def load_project(filename):
    """Load a project file into a new LayerTree

    Args:
        filename: Path to project file

    Returns:
        LayerTree holding the project

    Raises:
        OSError: If the file cannot be read
        ProjectFileError: If the content is not a valid project
    """
    with open(filename, 'r', encoding='utf-8') as f:
        text = f.read()

    try:
        tree = project_from_json(text)
    except ProjectFileError as e:
        loggerRaise(e, f"Failed to load project - {filename} is not a valid pixel grid project",
                    title="Open Project")

    _logger.info(f"Project loaded from {filename}")
    return tree
