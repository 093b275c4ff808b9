"""
Shared fixtures for Pixel Grid Editor tests.

Provides fresh trees, a session and sample project documents.
"""
import sys
import os
import pytest

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

# Qt timers only; no window is ever shown
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')


# ── Sample project documents ────────────────────────────────────────────

SAMPLE_PROJECT = {
    "gridSize": 2,
    "layerManagerSnapshot": {
        "nodes": [
            {"id": 3, "type": "group", "name": "Outline", "visible": True, "opacity": 1.0,
             "expanded": True, "children": [
                 {"id": 2, "type": "layer", "name": "Ink", "visible": True, "opacity": 1.0,
                  "data": ["#FF0000", "", "", ""]},
             ]},
            {"id": 1, "type": "layer", "name": "Background", "visible": True, "opacity": 1.0,
             "data": ["#0000FF", "#0000FF", "#0000FF", "#0000FF"]},
        ],
        "activeItemId": 2,
        "nextId": 4,
    },
}


@pytest.fixture
def sample_project():
    """Two-by-two project: a red ink layer in a group over a blue background"""
    import copy
    return copy.deepcopy(SAMPLE_PROJECT)


@pytest.fixture
def tree():
    """Fresh 4x4 LayerTree with its seed layer active"""
    from pixelgrid.models.layer_tree import LayerTree
    return LayerTree(4)


@pytest.fixture
def session(qtbot):
    """Fresh 4x4 EditorSession (qtbot provides the Qt event loop for debounces)"""
    from pixelgrid.services.editor_session import EditorSession
    return EditorSession(4)


@pytest.fixture(autouse=True)
def _clear_color_cache():
    from pixelgrid.models.color import ColorBlend
    ColorBlend.clear_cache()
    yield
    ColorBlend.clear_cache()
