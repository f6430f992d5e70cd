from unittest.mock import MagicMock

import pytest
from PyQt5.QtTest import QTest

from casus.core.bump import BumpScheduler
from casus.core.workspace import DragMode


@pytest.fixture
def spliced(statement_block):
    """
    root -> w after w was spliced in above x; x's type does not fit below w,
    so x waits on the timer to be bumped.
    """
    def make(x_movable=True, root_movable=True):
        root = statement_block(previous=False, movable=root_movable)
        x = statement_block(y=30, previous_check='b', movable=x_movable)
        root.next_connection.connect(x.previous_connection)
        w = statement_block(x=200, y=200, next_check='a')
        w.previous_connection.connect(root.next_connection)
        return root, w, x
    return make


def position(connection):
    return (connection.x, connection.y)


@pytest.mark.unit
class TestScheduledBump:
    """Tests for the delayed bump of an orphan that could not be re-attached."""

    def test_orphan_is_bumped_diagonally(self, workspace, timer, spliced):
        root, w, x = spliced()
        assert timer.tasks[0][0] == 250

        timer.run_all()

        assert position(x.previous_connection) == (15, 45)
        assert (x.xy.x(), x.xy.y()) == (15, 45)
        assert workspace.get_top_blocks()[-1] is x
        assert workspace.bump_scheduler.pending == 0

    def test_skipped_when_orphan_reconnected(self, timer, statement_block, spliced):
        root, w, x = spliced()
        other = statement_block(x=500)
        other.next_connection.connect(x.previous_connection)

        timer.run_all()

        assert position(x.previous_connection) == (0, 30)

    def test_skipped_when_static_partner_changed(self, timer, spliced):
        root, w, x = spliced()
        w.previous_connection.disconnect()

        timer.run_all()

        assert position(x.previous_connection) == (0, 30)

    def test_skipped_when_orphan_disposed(self, timer, spliced):
        root, w, x = spliced()
        x.dispose()

        timer.run_all()

        assert x.previous_connection.disposed
        assert position(root.next_connection) == (0, 30)

    def test_skipped_while_dragging(self, workspace, timer, spliced):
        root, w, x = spliced()
        workspace.drag_mode = DragMode.FREE

        timer.run_all()

        assert position(x.previous_connection) == (0, 30)

    def test_skipped_in_flyout(self, workspace, timer, spliced):
        root, w, x = spliced()
        workspace.is_flyout = True

        timer.run_all()

        assert position(x.previous_connection) == (0, 30)

    def test_immovable_orphan_moves_the_other_tree_up(self, timer, spliced):
        root, w, x = spliced(x_movable=False)

        timer.run_all()

        assert position(x.previous_connection) == (0, 30)
        assert position(root.next_connection) == (15, 15)
        # w travels with root
        assert position(w.previous_connection) == (215, 185)

    def test_immovable_orphan_fallback_is_a_fixed_nudge(self, timer, spliced):
        root, w, x = spliced(x_movable=False)
        x.move_by(100, 100)

        timer.run_all()

        assert position(x.previous_connection) == (100, 130)
        assert position(root.next_connection) == (15, 15)

    def test_both_immovable_nothing_moves(self, timer, spliced):
        root, w, x = spliced(x_movable=False, root_movable=False)

        timer.run_all()

        assert position(x.previous_connection) == (0, 30)
        assert position(root.next_connection) == (0, 30)

    def test_rtl_mirrors_horizontal_offset(self, workspace, timer, spliced):
        root, w, x = spliced()
        workspace.rtl = True

        timer.run_all()

        assert position(x.previous_connection) == (-15, 45)

    def test_bump_keeps_indices_sorted(self, workspace, timer, spliced):
        spliced()
        timer.run_all()
        assert all(index.is_sorted() for index in workspace.connection_indices)


@pytest.mark.unit
class TestBumpNeighbours:
    """Tests for pushing unrelated blocks out of snapping range."""

    def test_unconnected_neighbour_is_pushed_away(self, statement_block):
        top = statement_block(previous=False)
        stray = statement_block(x=5, y=32)

        top.bump_neighbours()

        assert position(stray.previous_connection) == (15, 45)
        assert position(top.next_connection) == (0, 30)

    def test_inferior_side_moves_itself(self, statement_block):
        top = statement_block(previous=False)
        stray = statement_block(x=5, y=32)

        stray.bump_neighbours()

        assert position(stray.previous_connection) == (15, 45)

    def test_connected_stack_is_left_alone(self, statement_block):
        top = statement_block(previous=False)
        below = statement_block(y=30)
        top.next_connection.connect(below.previous_connection)

        top.bump_neighbours()

        assert position(below.previous_connection) == (0, 30)
        assert position(top.next_connection) == (0, 30)

    def test_no_bump_while_dragging(self, workspace, statement_block):
        top = statement_block(previous=False)
        stray = statement_block(x=5, y=32)
        workspace.drag_mode = DragMode.STICKY

        top.bump_neighbours()

        assert position(stray.previous_connection) == (5, 32)

    def test_scheduled_neighbour_bump_skipped_after_dispose(self, workspace, timer, statement_block):
        block = statement_block()
        block.bump_neighbours = MagicMock()
        workspace.bump_scheduler.schedule_neighbours(block)
        block.dispose()

        timer.run_all()

        block.bump_neighbours.assert_not_called()


@pytest.mark.qt
def test_scheduler_runs_on_qt_event_loop(qapp):
    scheduler = BumpScheduler(delay_ms=10)
    root = MagicMock()
    block = MagicMock()
    block.get_root_block.return_value = root
    block.workspace.get_top_blocks.return_value = [root]

    scheduler.schedule_neighbours(block)
    assert scheduler.pending == 1
    block.bump_neighbours.assert_not_called()

    QTest.qWait(200)

    block.bump_neighbours.assert_called_once()
    assert scheduler.pending == 0
