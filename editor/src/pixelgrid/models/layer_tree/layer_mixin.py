"""
Layer Tree Structure Mixin

This mixin provides the structural operations of LayerTree: creating,
deleting, selecting, re-ordering and re-parenting nodes, and editing their
properties.

Methods:
    Lifecycle:
        - init
    Node CRUD:
        - add_layer
        - add_group
        - delete_active
        - duplicate_active
        - merge_down
    Ordering:
        - move_item
        - move_active_up
        - move_active_down
    Selection / properties:
        - select_item
        - set_property

Expected misuse (unknown ids, bad keys) is a logged no-op returning
False/None, never an exception.
"""

from typing import Any, List, Optional

from pixelgrid.constants import (
    DEFAULT_LAYER_NAME, DEFAULT_GROUP_NAME, DUPLICATE_SUFFIX,
    EDITABLE_PROPERTIES, COMPOSITE_PROPERTIES, TRANSPARENT
)
from pixelgrid.models.color import ColorBlend
from ._internal.node import Layer, Group, LayerNode, clamp_opacity


class LayerStructureMixin:
    """Mixin providing structural operations for LayerTree

    This mixin assumes the parent class has:
        - self._nodes, self._active_item_id, self._next_id, self._size
        - self._logger: logging.Logger instance
        - self.mark_dirty(), self._notify_listeners()
        - the query methods of LayerQueryMixin
    """

    # ========================================
    # Lifecycle
    # ========================================

    def init(self, size: int):
        """Reset to an empty tree seeded with one default Layer

        Args:
            size: Grid side length

        Raises:
            ValueError: If size is not a positive integer
        """
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ValueError(f"Grid size must be a positive integer, got {size!r}")

        self._nodes = []
        self._active_item_id = None
        self._next_id = 1
        self._size = size
        self.mark_dirty()
        self._logger.debug(f"Initialized {size}x{size} tree")
        self.add_layer()

    def _new_id(self) -> int:
        node_id = self._next_id
        self._next_id += 1
        return node_id

    # ========================================
    # Node CRUD
    # ========================================

    def add_layer(self, name: Optional[str] = None) -> int:
        """Add an empty Layer next to the active node

        Inserted at the front of the active group's children when the active
        node is an expanded group, just after the active node otherwise, and at
        the front of the top level when nothing is active.

        Returns:
            Id of the new layer (which becomes active)
        """
        layer = self._create_layer(name)
        self._insert_new_node(layer, into_expanded_group=True)
        self._active_item_id = layer.id
        self.mark_dirty()
        self._logger.debug(f"Added layer {layer.id} '{layer.name}'")
        self._notify_listeners()
        return layer.id

    def add_group(self, name: Optional[str] = None) -> int:
        """Add an empty, expanded Group just after the active node

        Returns:
            Id of the new group (which becomes active)
        """
        node_id = self._new_id()
        group = Group(node_id, name or f"{DEFAULT_GROUP_NAME} {node_id}")
        self._insert_new_node(group, into_expanded_group=False)
        self._active_item_id = group.id
        self.mark_dirty()
        self._logger.debug(f"Added group {group.id} '{group.name}'")
        self._notify_listeners()
        return group.id

    def _create_layer(self, name: Optional[str] = None) -> Layer:
        node_id = self._new_id()
        return Layer(node_id, name or f"{DEFAULT_LAYER_NAME} {node_id}", size=self._size)

    def _insert_new_node(self, node: LayerNode, into_expanded_group: bool):
        active = self.find_item(self._active_item_id)
        if active and into_expanded_group and active.item.is_group and active.item.expanded:
            active.item.children.insert(0, node)
        elif active:
            active.siblings.insert(active.index + 1, node)
        else:
            self._nodes.insert(0, node)

    def delete_active(self) -> bool:
        """Delete the active node (and its subtree)

        The next active node is the sibling that took its place, else the
        previous sibling, else the parent group, else none. If no Layer is
        left anywhere a fresh one is synthesized.

        Returns:
            True if a node was deleted
        """
        found = self.find_item(self._active_item_id)
        if not found:
            self._logger.debug("delete_active: no active node")
            return False

        siblings = found.siblings
        siblings.pop(found.index)

        self._active_item_id = None
        if siblings:
            replacement = siblings[found.index] if found.index < len(siblings) else siblings[found.index - 1]
            self._active_item_id = replacement.id
        elif found.parent is not None:
            self._active_item_id = found.parent.id

        if self.first_layer() is None:
            layer = self._create_layer()
            self._insert_new_node(layer, into_expanded_group=True)
            self._active_item_id = layer.id
            self._logger.debug(f"Tree had no layer left, synthesized layer {layer.id}")

        self.mark_dirty()
        self._logger.debug(f"Deleted node {found.item.id}, active is now {self._active_item_id}")
        self._notify_listeners()
        return True

    def duplicate_active(self) -> Optional[int]:
        """Deep-copy the active node (with fresh ids) just after it

        Returns:
            Id of the copy (which becomes active), or None if nothing is active
        """
        found = self.find_item(self._active_item_id)
        if not found:
            return None

        duplicate = found.item.clone(self._new_id)
        duplicate.name = f"{found.item.name}{DUPLICATE_SUFFIX}"
        found.siblings.insert(found.index + 1, duplicate)
        self._active_item_id = duplicate.id
        self.mark_dirty()
        self._logger.debug(f"Duplicated node {found.item.id} -> {duplicate.id}")
        self._notify_listeners()
        return duplicate.id

    def merge_down(self) -> Optional[int]:
        """Merge the active Layer into the Layer directly below it

        The sibling after the active layer is below it in the stack. The
        active layer's pixels are composited onto it at the active layer's
        opacity (an invisible layer contributes nothing), then the active
        layer is removed and the merged layer becomes active.

        Returns:
            Id of the merged layer, or None if there is nothing to merge into
        """
        found = self.find_item(self._active_item_id)
        if not found or found.item.is_group:
            return None
        below_index = found.index + 1
        if below_index >= len(found.siblings) or found.siblings[below_index].is_group:
            self._logger.debug("merge_down: no layer below the active layer")
            return None

        top = found.item
        below = found.siblings[below_index]
        if top.visible:
            for j, color in enumerate(top.data):
                if color == TRANSPARENT:
                    continue
                if top.opacity >= 1:
                    below.data[j] = color
                else:
                    below.data[j] = ColorBlend.composite(color, below.data[j], top.opacity)

        found.siblings.pop(found.index)
        self._active_item_id = below.id
        self.mark_dirty()
        self._logger.debug(f"Merged layer {top.id} into {below.id}")
        self._notify_listeners()
        return below.id

    # ========================================
    # Ordering
    # ========================================

    def move_item(self, item_id: int, parent_id: Optional[int], index: int) -> bool:
        """Move a node to position `index` of another (or the same) list

        Args:
            item_id: Node to move
            parent_id: Target group id, or None for the top level
            index: Position in the target list after removal (clamped)

        Returns:
            True if the node moved
        """
        found = self.find_item(item_id)
        if not found:
            return False

        if parent_id is None:
            target_list: List[LayerNode] = self._nodes
        else:
            target = self.find_item(parent_id)
            if not target or not target.item.is_group:
                self._logger.warning(f"move_item: {parent_id} is not a group")
                return False
            if self.is_descendant(parent_id, found.item):
                self._logger.warning(f"move_item: cannot move {item_id} into itself")
                return False
            target_list = target.item.children

        found.siblings.pop(found.index)
        index = max(0, min(index, len(target_list)))
        target_list.insert(index, found.item)

        self.mark_dirty()
        self._logger.debug(f"Moved node {item_id} to parent {parent_id} at {index}")
        self._notify_listeners()
        return True

    def move_active_up(self) -> bool:
        """Swap the active node with the sibling above it (toward index 0)"""
        return self._shift_active(-1)

    def move_active_down(self) -> bool:
        """Swap the active node with the sibling below it"""
        return self._shift_active(1)

    def _shift_active(self, step: int) -> bool:
        found = self.find_item(self._active_item_id)
        if not found:
            return False
        new_index = found.index + step
        if not 0 <= new_index < len(found.siblings):
            return False

        siblings = found.siblings
        siblings[found.index], siblings[new_index] = siblings[new_index], siblings[found.index]
        self.mark_dirty()
        self._notify_listeners()
        return True

    # ========================================
    # Selection / Properties
    # ========================================

    def select_item(self, item_id: Optional[int]) -> bool:
        """Make item_id the active node (None deselects)

        Returns:
            True if the selection changed to an existing node or to None
        """
        if item_id is not None and self.find_item(item_id) is None:
            self._logger.debug(f"select_item: unknown id {item_id}")
            return False

        self._active_item_id = item_id
        self._notify_listeners()
        return True

    def set_property(self, item_id: int, key: str, value: Any) -> bool:
        """Set one editable property of a node

        Args:
            item_id: Node id
            key: One of 'name', 'visible', 'opacity', 'expanded' (groups only)
            value: New value (opacity is clamped to [0, 1])

        Returns:
            True if the property was applied
        """
        if key not in EDITABLE_PROPERTIES:
            self._logger.warning(f"set_property: '{key}' is not an editable property")
            return False

        found = self.find_item(item_id)
        if not found:
            self._logger.debug(f"set_property: unknown id {item_id}")
            return False

        item = found.item
        if key == 'expanded' and not item.is_group:
            return False

        if key == 'opacity':
            try:
                value = clamp_opacity(value)
            except (TypeError, ValueError):
                self._logger.warning(f"set_property: invalid opacity {value!r}")
                return False
        elif key == 'name':
            value = str(value)
        else:
            value = bool(value)

        setattr(item, key, value)
        if key in COMPOSITE_PROPERTIES:
            self.mark_dirty()

        self._logger.debug(f"Set node {item_id} {key}={value}")
        self._notify_listeners()
        return True
