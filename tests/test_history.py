"""
Tests for the HistoryManager state stack.

Covers:
- Push / undo / redo and branch truncation
- Deep copy isolation
- Capacity eviction
- Absolute jumps
- Listener notifications and descriptions
- Debounced pushes (coalescing, cancellation, flushing)
"""
import pytest

from pixelgrid.utils.history_manager import HistoryManager


# ══════════════════════════════════════════════════════════════════════════
# Stack
# ══════════════════════════════════════════════════════════════════════════

class TestHistoryStack:
    """Unit tests for the HistoryManager stack, no tree involved."""

    @pytest.fixture
    def hm(self):
        return HistoryManager(max_history=50)

    # ── basic operations ────────────────────────────────────────────

    def test_initial_state_empty(self, hm):
        assert not hm.can_undo()
        assert not hm.can_redo()
        assert hm.current_index == -1

    def test_single_push_no_undo(self, hm):
        hm.push_state({"v": 1}, "first")
        assert not hm.can_undo()  # need 2 pushes to undo
        assert not hm.can_redo()

    def test_undo_returns_previous_state(self, hm):
        hm.push_state({"v": 1}, "first")
        hm.push_state({"v": 2}, "second")
        assert hm.undo() == {"v": 1}

    def test_undo_redo_are_inverse(self, hm):
        hm.push_state({"v": 1}, "a")
        hm.push_state({"v": 2}, "b")
        hm.undo()
        assert hm.redo() == {"v": 2}
        assert hm.current_index == 1

    def test_undo_at_beginning_returns_none(self, hm):
        hm.push_state({"v": 1}, "first")
        assert hm.undo() is None

    def test_redo_at_end_returns_none(self, hm):
        hm.push_state({"v": 1}, "first")
        assert hm.redo() is None

    # ── deep copy isolation ─────────────────────────────────────────

    def test_pushed_state_is_deep_copy(self, hm):
        data = {"nested": [1, 2, 3]}
        hm.push_state(data, "push")
        data["nested"].append(999)  # mutate original
        hm.push_state({}, "second")
        assert 999 not in hm.undo()["nested"]

    def test_undo_returns_deep_copy(self, hm):
        hm.push_state({"v": [1]}, "a")
        hm.push_state({"v": [2]}, "b")
        restored = hm.undo()
        restored["v"].append(999)
        hm.redo()
        assert hm.undo() == {"v": [1]}

    # ── branch pruning ──────────────────────────────────────────────

    def test_push_after_undo_prunes_future(self, hm):
        hm.push_state({"v": 1}, "a")
        hm.push_state({"v": 2}, "b")
        hm.push_state({"v": 3}, "c")
        hm.undo()  # at v=2
        hm.push_state({"v": 4}, "d")  # prunes v=3
        assert not hm.can_redo()
        assert len(hm.history) == 3
        assert hm.undo() == {"v": 2}

    # ── capacity ────────────────────────────────────────────────────

    def test_capacity_evicts_oldest(self, hm):
        for v in range(51):
            hm.push_state({"v": v})
        assert len(hm.history) == 50
        assert hm.current_index == 49
        assert hm.history[0]['data'] == {"v": 1}

    def test_small_capacity(self):
        hm = HistoryManager(max_history=3)
        for v in range(4):
            hm.push_state({"v": v})
        hm.undo()
        assert hm.undo() == {"v": 1}
        assert hm.undo() is None

    def test_default_capacity(self):
        assert HistoryManager().max_history == 50

    # ── jumps ───────────────────────────────────────────────────────

    def test_jump_to_state(self, hm):
        for v in range(5):
            hm.push_state({"v": v})
        assert hm.jump_to_state(1) == {"v": 1}
        assert hm.current_index == 1
        assert hm.can_redo()

    @pytest.mark.parametrize("index", [-1, 5, 99, None])
    def test_jump_out_of_range(self, hm, index):
        for v in range(5):
            hm.push_state({"v": v})
        assert hm.jump_to_state(index) is None
        assert hm.current_index == 4

    def test_clear(self, hm):
        hm.push_state({"v": 1})
        hm.push_state({"v": 2})
        hm.clear()
        assert hm.history == []
        assert hm.current_index == -1
        assert not hm.can_undo()


# ══════════════════════════════════════════════════════════════════════════
# Listeners / descriptions
# ══════════════════════════════════════════════════════════════════════════

class TestHistoryListeners:

    @pytest.fixture
    def hm(self):
        return HistoryManager()

    def test_listener_called_on_push(self, hm):
        events = []
        hm.add_listener(events.append)
        hm.push_state({"v": 1}, "first")
        assert events == [{'stack_size': 1, 'current_index': 0, 'can_undo': False, 'can_redo': False}]

    def test_listener_called_on_undo_redo(self, hm):
        events = []
        hm.push_state({"v": 1}, "a")
        hm.push_state({"v": 2}, "b")
        hm.add_listener(events.append)
        hm.undo()
        assert (events[-1]['can_undo'], events[-1]['can_redo']) == (False, True)
        hm.redo()
        assert (events[-1]['can_undo'], events[-1]['can_redo']) == (True, False)

    def test_failing_listener_is_contained(self, hm):
        def broken(state):
            raise RuntimeError("listener failure")
        hm.add_listener(broken)
        hm.push_state({"v": 1})
        assert len(hm.history) == 1

    def test_remove_listener(self, hm):
        events = []
        hm.add_listener(events.append)
        hm.remove_listener(events.append)
        hm.push_state({"v": 1})
        assert events == []

    def test_descriptions(self, hm):
        hm.push_state({"v": 1}, "New Canvas")
        hm.push_state({"v": 2}, "Fill")
        hm.push_state({"v": 3}, "Add Layer")
        hm.undo()
        assert hm.get_current_description() == "Fill"
        assert hm.get_undo_description() == "New Canvas"
        assert hm.get_redo_description() == "Add Layer"
        assert hm.get_descriptions() == ["New Canvas", "Fill", "Add Layer"]

    def test_descriptions_when_empty(self, hm):
        assert hm.get_current_description() == ""
        assert hm.get_undo_description() == ""
        assert hm.get_redo_description() == ""


# ══════════════════════════════════════════════════════════════════════════
# Debounce
# ══════════════════════════════════════════════════════════════════════════

class TestDebouncedPush:
    """Rapid submissions collapse into one entry after the quiet period."""

    @pytest.fixture
    def hm(self, qtbot):
        hm = HistoryManager()
        hm.push_state({"v": 0}, "Initial")
        return hm

    def test_debounce_alone_creates_one_entry(self, hm, qtbot):
        hm.push_state_debounced({"v": 1}, 100, "Stroke")
        assert hm.has_pending()
        assert len(hm.history) == 1

        qtbot.wait(300)

        assert not hm.has_pending()
        assert len(hm.history) == 2
        assert hm.get_current_description() == "Stroke"

    def test_multiple_debounces_collapse(self, hm, qtbot):
        for v in range(1, 6):
            hm.push_state_debounced({"v": v}, 100)

        qtbot.wait(300)

        # Initial + last debounced
        assert len(hm.history) == 2
        assert hm.history[-1]['data'] == {"v": 5}

    def test_direct_push_discards_pending(self, hm, qtbot):
        hm.push_state_debounced({"v": 1}, 100, "Slider drag")
        hm.push_state({"v": 2}, "Delete layer")

        qtbot.wait(300)

        assert hm.get_descriptions() == ["Initial", "Delete layer"]

    def test_clear_discards_pending(self, hm, qtbot):
        hm.push_state_debounced({"v": 1}, 100)
        hm.clear()

        qtbot.wait(300)

        assert hm.history == []

    def test_flush_pending_commits_now(self, hm, qtbot):
        hm.push_state_debounced({"v": 1}, 100, "Stroke")
        assert hm.flush_pending()
        assert len(hm.history) == 2
        assert not hm.flush_pending()

        qtbot.wait(300)

        # Timer was stopped by the flush
        assert len(hm.history) == 2

    def test_pending_snapshot_is_copied(self, hm, qtbot):
        state = {"v": [1]}
        hm.push_state_debounced(state, 100)
        state["v"].append(2)
        hm.flush_pending()
        assert hm.history[-1]['data'] == {"v": [1]}

    def test_debounce_after_direct_push_creates_separate_entry(self, hm, qtbot):
        hm.push_state({"v": 1}, "Direct action")
        hm.push_state_debounced({"v": 2}, 100, "Slider drag")

        qtbot.wait(300)

        assert len(hm.history) == 3
