"""
Tests for EditorSession: tools + layer tree + history working together.

Covers:
- Strokes committed as one debounced entry
- Immediate entries for fill, cut, paste and layer commands
- Undo/redo restoring the tree without recording history
- Selection, clipboard and color picking
- Project save/open through the session
"""
import pytest

from pixelgrid.services import tools
from pixelgrid.services.editor_session import EditorSession
from pixelgrid.services.selection import Selection

RED = '#FF0000'
BLUE = '#0000FF'

# Quiet period of a stroke commit plus slack
STROKE_WAIT_MS = 800


def _entries(session):
    return len(session.history.history)


# ══════════════════════════════════════════════════════════════════════════
# Canvas
# ══════════════════════════════════════════════════════════════════════════

class TestNewCanvas:

    def test_initial_entry(self, session):
        assert session.size == 4
        assert session.history.get_descriptions() == ["New Canvas"]
        assert session.is_saved

    def test_new_canvas_resets_history(self, session):
        session.add_layer()
        session.new_canvas(8)
        assert session.size == 8
        assert _entries(session) == 1
        assert session.tree.get_layer_count() == 1
        assert not session.history.can_undo()


# ══════════════════════════════════════════════════════════════════════════
# Painting
# ══════════════════════════════════════════════════════════════════════════

class TestStrokes:

    def test_brush_segment(self, session):
        assert session.brush(0, 0, 3, 3, RED) == 4
        composite = session.get_composite()
        assert [i for i, c in enumerate(composite) if c == RED] == [0, 5, 10, 15]

    def test_stroke_commits_once(self, session, qtbot):
        session.brush(0, 0, 1, 0, RED)
        session.brush(1, 0, 2, 0, RED)
        session.brush(2, 0, 3, 0, RED)
        session.end_stroke()
        assert session.history.has_pending()

        qtbot.wait(STROKE_WAIT_MS)

        assert _entries(session) == 2
        assert session.history.get_current_description() == "Brush Stroke"
        assert not session.is_saved

    def test_undo_during_quiet_period_undoes_stroke(self, session):
        session.brush(0, 0, 3, 0, RED)
        session.end_stroke()
        assert session.undo()
        assert session.get_composite() == [''] * 16
        assert session.redo()
        assert session.get_composite()[:4] == [RED] * 4

    def test_dither_brush(self, session):
        assert session.brush(0, 0, 3, 0, RED, dither=True) == 2
        assert session.tree.get_active_layer().data[:4] == [RED, '', RED, '']

    def test_erase(self, session):
        session.brush(0, 0, 3, 0, RED)
        session.erase(1, 0, 2, 0)
        assert session.get_composite()[:4] == [RED, '', '', RED]

    def test_off_grid_segment_ignored(self, session):
        assert session.brush(0, 0, 4, 0, RED) == 0
        assert session.get_composite() == [''] * 16

    def test_brush_on_group_writes_nothing(self, session):
        session.add_group()
        assert session.brush(0, 0, 3, 0, RED) == 0


class TestShapes:

    def test_filled_rectangle(self, session, qtbot):
        assert session.draw_shape('rectangle', 0, 0, 1, 1, RED, filled=True) == 4

        qtbot.wait(STROKE_WAIT_MS)

        assert session.history.get_current_description() == "Draw Rectangle"

    def test_line(self, session):
        assert session.draw_shape('line', 0, 0, 3, 3, BLUE) == 4

    def test_circle_outline_clipped(self, session):
        expected = [y * 4 + x for x, y in tools.circle_points(0, 0, 3, 3)
                    if 0 <= x < 4 and 0 <= y < 4]
        assert session.draw_shape('circle', 0, 0, 3, 3, RED) == len(expected)
        data = session.tree.get_active_layer().data
        assert {i for i, c in enumerate(data) if c == RED} == set(expected)

    def test_unknown_shape(self, session):
        with pytest.raises(ValueError):
            session.draw_shape('star', 0, 0, 1, 1, RED)


class TestFillAndPick:

    def test_fill_whole_grid(self, session):
        assert session.fill(0, RED)
        assert session.get_composite() == [RED] * 16
        assert session.history.get_descriptions() == ["New Canvas", "Fill"]

    def test_noop_fill_records_nothing(self, session):
        session.fill(0, RED)
        assert not session.fill(5, RED)
        assert _entries(session) == 2

    def test_fill_then_undo(self, session):
        session.fill(0, RED)
        session.undo()
        assert session.get_composite() == [''] * 16

    def test_pick_color(self, session):
        session.fill(0, BLUE)
        assert session.pick_color(3) == BLUE
        session.erase(3, 0, 3, 0)
        assert session.pick_color(3) is None


# ══════════════════════════════════════════════════════════════════════════
# Selection / clipboard
# ══════════════════════════════════════════════════════════════════════════

class TestSelection:

    def test_select_rect_normalizes(self, session):
        assert session.select_rect(2, 3, 0, 1) == Selection(0, 1, 2, 3)

    def test_magic_wand_selects_bounding_box(self, session):
        session.brush(1, 1, 2, 1, RED)
        session.brush(2, 2, 2, 2, RED)
        assert session.magic_wand_select(5) == Selection(1, 1, 2, 2)

    def test_magic_wand_does_not_record(self, session):
        session.magic_wand_select(0)
        assert _entries(session) == 1

    def test_copy_requires_selection(self, session):
        assert not session.copy()
        assert session.clipboard is None

    def test_copy(self, session):
        session.brush(1, 1, 1, 1, RED)
        session.select_rect(1, 1, 2, 2)
        assert session.copy()
        assert session.clipboard.width == 2
        assert session.clipboard.height == 2
        assert session.clipboard.data == [RED, '', '', '']

    def test_cut(self, session):
        session.brush(1, 1, 1, 1, RED)
        session.select_rect(1, 1, 2, 2)
        assert session.cut()
        assert session.get_composite()[5] == ''
        assert session.selection is None
        assert session.history.get_current_description() == "Cut"

    def test_paste_into_new_layer(self, session):
        session.brush(1, 1, 1, 1, RED)
        session.select_rect(1, 1, 2, 2)
        session.copy()
        layer_id = session.paste()
        layer = session.tree.get_item(layer_id)
        assert layer.name == 'Pasted Layer'
        assert layer.data[0] == RED
        assert session.tree.active_item_id == layer_id
        assert session.history.get_current_description() == "Paste"

    def test_paste_empty_clipboard(self, session):
        assert session.paste() is None
        assert session.tree.get_layer_count() == 1

    def test_oversized_paste_is_clipped(self, session):
        session.select_rect(-2, -2, 3, 3)
        session.copy()
        assert session.clipboard.width == 6
        layer_id = session.paste()
        assert len(session.tree.get_item(layer_id).data) == 16


# ══════════════════════════════════════════════════════════════════════════
# Layer commands / history
# ══════════════════════════════════════════════════════════════════════════

class TestLayerCommands:

    def test_each_command_is_one_entry(self, session):
        session.add_layer()
        group_id = session.add_group()
        session.rename(group_id, 'Details')
        session.set_opacity(group_id, 0.5)
        session.toggle_visible(group_id)
        session.duplicate_active()
        session.move_active_up()
        session.delete_active()
        assert session.history.get_descriptions() == [
            "New Canvas", "Add Layer", "Add Group", "Rename", "Change Opacity",
            "Toggle Visibility", "Duplicate", "Move Up", "Delete",
        ]

    def test_failed_commands_record_nothing(self, session):
        assert not session.move_active_up()
        assert session.merge_down() is None
        assert not session.rename(99, 'x')
        assert not session.toggle_visible(99)
        assert _entries(session) == 1

    def test_merge_down(self, session):
        session.fill(0, BLUE)
        session.select_item(None)
        session.add_layer()
        session.brush(0, 0, 0, 0, RED)
        assert session.merge_down() == 1
        assert session.tree.get_layer_count() == 1
        assert session.get_composite()[0] == RED

    def test_move_item(self, session):
        group_id = session.add_group()
        assert session.move_item(1, group_id, 0)
        assert session.tree.find_item(1).parent.id == group_id

    def test_expanded_not_recorded(self, session):
        group_id = session.add_group()
        assert session.set_expanded(group_id, False)
        assert _entries(session) == 2

    def test_clear_active(self, session):
        session.fill(0, RED)
        assert session.clear_active()
        assert session.get_composite() == [''] * 16
        session.undo()
        assert session.get_composite() == [RED] * 16

    def test_debounced_opacity_collapses(self, session, qtbot):
        for opacity in (0.9, 0.7, 0.5):
            session.set_opacity(1, opacity, debounced=True)

        qtbot.wait(STROKE_WAIT_MS)

        assert session.history.get_descriptions() == ["New Canvas", "Change Opacity"]
        assert session.tree.get_item(1).opacity == 0.5


class TestUndoRedo:

    def test_undo_restores_structure(self, session):
        session.add_layer()
        assert session.tree.get_layer_count() == 2
        session.undo()
        assert session.tree.get_layer_count() == 1
        session.redo()
        assert session.tree.get_layer_count() == 2

    def test_restore_does_not_record(self, session):
        session.add_layer()
        session.add_layer()
        session.undo()
        session.undo()
        assert _entries(session) == 3
        assert session.history.current_index == 0

    def test_undo_at_start(self, session):
        assert not session.undo()
        assert not session.redo()

    def test_new_action_after_undo_drops_redo(self, session):
        session.add_layer()
        session.undo()
        session.add_group()
        assert not session.history.can_redo()
        assert session.history.get_descriptions() == ["New Canvas", "Add Group"]

    def test_jump_to(self, session):
        session.fill(0, RED)
        session.add_layer()
        session.add_layer()
        assert session.jump_to(1)
        assert session.tree.get_layer_count() == 1
        assert session.get_composite() == [RED] * 16
        assert not session.jump_to(10)

    def test_undo_clears_selection(self, session):
        session.add_layer()
        session.select_rect(0, 0, 1, 1)
        session.undo()
        assert session.selection is None


class TestProjectFiles:

    def test_save_and_open(self, session, tmp_path):
        path = tmp_path / "sprite.json"
        session.fill(0, RED)
        assert not session.is_saved
        session.save_project(str(path))
        assert session.is_saved

        other_session = EditorSession(8)
        other_session.open_project(str(path))
        assert other_session.size == 4
        assert other_session.get_composite() == [RED] * 16
        assert other_session.history.get_descriptions() == ["Open Project"]
        assert other_session.is_saved
