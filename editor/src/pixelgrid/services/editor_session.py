"""
Editor Session - tool dispatch, layer commands and undo/redo

Owns one LayerTree and one HistoryManager and turns editor gestures into
model edits plus history entries:

- Brush, eraser and shape drags write pixels immediately and commit one
  debounced history entry when the gesture ends (end_stroke / draw_shape)
- Fill, cut, paste and layer commands commit one entry right away
- Selection changes and color picking never touch history

Usage:
    session = EditorSession(16)
    session.brush(0, 0, 5, 5, '#FF0000')
    session.end_stroke()
    session.fill(40, '#00FF00')
    session.undo()
"""

import logging
from typing import List, Optional

from pixelgrid.constants import (
    DEFAULT_GRID_SIZE, TRANSPARENT, PASTED_LAYER_NAME,
    STROKE_DEBOUNCE_MS, DEFAULT_DEBOUNCE_MS
)
from pixelgrid.models.layer_tree import LayerTree, SnapshotError
from pixelgrid.services import tools
from pixelgrid.services.selection import (
    Selection, Clipboard, region_indices, copy_region, paste_indices
)
from pixelgrid.services import file_operations
from pixelgrid.utils.history_manager import HistoryManager
from pixelgrid.utils.logger import loggerRaise


SHAPE_KINDS = ('line', 'rectangle', 'circle')


class EditorSession:
    """Controller wiring tools, the layer tree and history together

    Attributes:
        tree: The LayerTree being edited
        history: HistoryManager holding tree snapshots
        selection: Active marquee, or None
        clipboard: Last copied block, or None
        is_saved: False once anything changed since the last new/open/save
    """

    def __init__(self, size: int = DEFAULT_GRID_SIZE, history: Optional[HistoryManager] = None):
        self._logger = logging.getLogger('EditorSession')
        self.tree = LayerTree()
        self.history = history if history is not None else HistoryManager()
        self.selection: Optional[Selection] = None
        self.clipboard: Optional[Clipboard] = None
        self.is_saved = True
        self._is_applying_history = False
        self.new_canvas(size)

    @property
    def size(self) -> int:
        return self.tree.size

    def get_composite(self) -> List[str]:
        return self.tree.get_composite()

    # ========================================
    # History plumbing
    # ========================================

    def _save_state(self, description: str):
        """Record the current tree as one history entry"""
        if self._is_applying_history:
            return  # Don't save state during undo/redo

        self.history.push_state(self.tree.get_snapshot(), description)
        self.is_saved = False

    def _save_state_debounced(self, description: str, delay_ms: int = STROKE_DEBOUNCE_MS):
        if self._is_applying_history:
            return

        self.history.push_state_debounced(self.tree.get_snapshot(), delay_ms, description)
        self.is_saved = False

    def _restore_state(self, snapshot) -> bool:
        """Load a history snapshot into the tree without recording history"""
        if not snapshot:
            return False

        self._is_applying_history = True
        try:
            self.tree.load_snapshot(snapshot)
            self.selection = None
        except SnapshotError as e:
            loggerRaise(e, "Error restoring history state")
        finally:
            self._is_applying_history = False
        return True

    def undo(self) -> bool:
        """Undo the last action (an in-flight debounced stroke is committed first)"""
        self.history.flush_pending()
        return self._restore_state(self.history.undo())

    def redo(self) -> bool:
        """Redo the last undone action"""
        self.history.flush_pending()
        return self._restore_state(self.history.redo())

    def jump_to(self, index: int) -> bool:
        """Restore the history entry at an absolute index"""
        self.history.flush_pending()
        return self._restore_state(self.history.jump_to_state(index))

    # ========================================
    # Canvas / project
    # ========================================

    def new_canvas(self, size: int):
        """Start over with one empty layer and a fresh history

        Raises:
            ValueError: If size is not a positive integer
        """
        self.tree.init(size)
        self.history.clear()
        self.selection = None
        self._save_state("New Canvas")
        self.is_saved = True
        self._logger.info(f"New {size}x{size} canvas")

    def open_project(self, filename: str):
        """Replace the tree with a project file's content and reset history

        Raises:
            OSError, ProjectFileError: When the file cannot be loaded; the
                current tree is kept
        """
        loaded = file_operations.load_project(filename)
        self.tree.load_snapshot(loaded.get_snapshot())
        self.history.clear()
        self.selection = None
        self._save_state("Open Project")
        self.is_saved = True

    def save_project(self, filename: str):
        file_operations.save_project(self.tree, filename)
        self.is_saved = True

    def _on_grid(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    # ========================================
    # Painting tools
    # ========================================

    def brush(self, x1: int, y1: int, x2: int, y2: int, color: str, dither: bool = False) -> int:
        """Paint one stroke segment into the active layer

        Call once per pointer move with the previous and current cell, then
        end_stroke() on release.

        Returns:
            Number of pixels written
        """
        if not (self._on_grid(x1, y1) and self._on_grid(x2, y2)):
            self._logger.debug(f"brush: segment ({x1},{y1})-({x2},{y2}) leaves the grid")
            return 0

        indices = tools.line(x1, y1, x2, y2, self.size)
        if dither:
            indices = tools.dither(indices, self.size)
        return self.tree.write_indices(indices, color)

    def erase(self, x1: int, y1: int, x2: int, y2: int) -> int:
        """Brush with the transparent token"""
        return self.brush(x1, y1, x2, y2, TRANSPARENT)

    def end_stroke(self, description: str = "Brush Stroke"):
        """Commit the finished stroke as one (debounced) history entry"""
        self._save_state_debounced(description)

    def draw_shape(self, kind: str, x1: int, y1: int, x2: int, y2: int, color: str,
                   filled: bool = False) -> int:
        """Rasterize a line, rectangle or circle into the active layer

        Args:
            kind: 'line', 'rectangle' or 'circle'
            x1, y1, x2, y2: Drag start and end cells
            color: Color token
            filled: Fill rectangles and circles instead of outlining them

        Returns:
            Number of pixels written

        Raises:
            ValueError: If kind is not a known shape
        """
        if kind not in SHAPE_KINDS:
            raise ValueError(f"Unknown shape kind: {kind!r}")
        if self.tree.get_active_layer() is None:
            return 0
        if not (self._on_grid(x1, y1) and self._on_grid(x2, y2)):
            self._logger.debug(f"draw_shape: drag ({x1},{y1})-({x2},{y2}) leaves the grid")
            return 0

        size = self.size
        if kind == 'line':
            indices = tools.line(x1, y1, x2, y2, size)
        elif kind == 'rectangle':
            shape = tools.rectangle_filled if filled else tools.rectangle
            indices = shape(x1, y1, x2, y2, size)
        elif filled:
            indices = tools.circle_filled(x1, y1, x2, y2, size)
        else:
            indices = [y * size + x for x, y in tools.circle_points(x1, y1, x2, y2)
                       if self._on_grid(x, y)]

        written = self.tree.write_indices(indices, color)
        self._save_state_debounced(f"Draw {kind.title()}")
        return written

    def fill(self, index: int, color: str) -> bool:
        """Flood fill the contiguous region under index

        Returns:
            True if any pixel changed (and a history entry was recorded)
        """
        layer = self.tree.get_active_layer()
        if layer is None:
            return False

        filled = tools.flood_fill(index, color, layer.data, self.size)
        if filled is layer.data:
            return False

        self.tree.set_layer_data(filled)
        self._save_state("Fill")
        return True

    def pick_color(self, index: int) -> Optional[str]:
        """Eyedropper on the composite image"""
        return tools.eyedropper(index, self.get_composite())

    # ========================================
    # Selection / clipboard
    # ========================================

    def magic_wand_select(self, index: int) -> Optional[Selection]:
        """Select the bounding box of the active layer's region under index"""
        layer = self.tree.get_active_layer()
        if layer is None:
            return None

        region = tools.bounding_box(tools.magic_wand(index, layer.data, self.size), self.size)
        self.selection = Selection.from_region(region) if region is not None else None
        return self.selection

    def select_rect(self, x1: int, y1: int, x2: int, y2: int) -> Selection:
        self.selection = Selection.from_points(x1, y1, x2, y2)
        return self.selection

    def clear_selection(self):
        self.selection = None

    def copy(self) -> bool:
        """Copy the selected block of the active layer to the clipboard"""
        layer = self.tree.get_active_layer()
        if self.selection is None or layer is None:
            return False

        self.clipboard = copy_region(layer.data, self.selection, self.size)
        self._logger.debug(f"Copied {self.clipboard.width}x{self.clipboard.height} block")
        return True

    def cut(self) -> bool:
        """Copy, then clear the selected block and drop the selection"""
        if not self.copy():
            return False

        self.tree.write_indices(region_indices(self.selection, self.size), TRANSPARENT)
        self.clear_selection()
        self._save_state("Cut")
        return True

    def paste(self) -> Optional[int]:
        """Paste the clipboard into a new layer at the grid origin

        Returns:
            Id of the new layer, or None if the clipboard is empty
        """
        if self.clipboard is None:
            return None

        layer_id = self.tree.add_layer(PASTED_LAYER_NAME)
        for index, token in paste_indices(self.clipboard, self.size):
            self.tree.write(index, token)
        self._save_state("Paste")
        return layer_id

    # ========================================
    # Layer commands
    # ========================================

    def select_item(self, item_id: Optional[int]) -> bool:
        return self.tree.select_item(item_id)

    def add_layer(self, name: Optional[str] = None) -> int:
        layer_id = self.tree.add_layer(name)
        self._save_state("Add Layer")
        return layer_id

    def add_group(self, name: Optional[str] = None) -> int:
        group_id = self.tree.add_group(name)
        self._save_state("Add Group")
        return group_id

    def delete_active(self) -> bool:
        if not self.tree.delete_active():
            return False
        self._save_state("Delete")
        return True

    def duplicate_active(self) -> Optional[int]:
        new_id = self.tree.duplicate_active()
        if new_id is not None:
            self._save_state("Duplicate")
        return new_id

    def merge_down(self) -> Optional[int]:
        merged_id = self.tree.merge_down()
        if merged_id is not None:
            self._save_state("Merge Down")
        return merged_id

    def move_active_up(self) -> bool:
        if not self.tree.move_active_up():
            return False
        self._save_state("Move Up")
        return True

    def move_active_down(self) -> bool:
        if not self.tree.move_active_down():
            return False
        self._save_state("Move Down")
        return True

    def move_item(self, item_id: int, parent_id: Optional[int], index: int) -> bool:
        if not self.tree.move_item(item_id, parent_id, index):
            return False
        self._save_state("Move")
        return True

    def toggle_visible(self, item_id: int) -> bool:
        item = self.tree.get_item(item_id)
        if item is None:
            return False
        self.tree.set_property(item_id, 'visible', not item.visible)
        self._save_state("Toggle Visibility")
        return True

    def set_opacity(self, item_id: int, opacity: float, debounced: bool = False) -> bool:
        """Set a node's opacity

        Args:
            item_id: Node id
            opacity: New opacity (clamped to [0, 1])
            debounced: Coalesce rapid changes (slider drags) into one entry
        """
        if not self.tree.set_property(item_id, 'opacity', opacity):
            return False
        if debounced:
            self._save_state_debounced("Change Opacity", DEFAULT_DEBOUNCE_MS)
        else:
            self._save_state("Change Opacity")
        return True

    def rename(self, item_id: int, name: str) -> bool:
        if not self.tree.set_property(item_id, 'name', name):
            return False
        self._save_state("Rename")
        return True

    def set_expanded(self, item_id: int, expanded: bool) -> bool:
        """Collapse or expand a group (UI state, not recorded in history)"""
        return self.tree.set_property(item_id, 'expanded', expanded)

    def clear_active(self) -> bool:
        if not self.tree.clear_active():
            return False
        self._save_state("Clear Layer")
        return True
