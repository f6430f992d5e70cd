import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

from casus.core.workspace import DragMode
from casus.types import Delta

if TYPE_CHECKING:
    from casus.core.block import Block
    from casus.core.connection import Connection
    from casus.core.workspace import Workspace

logger = logging.getLogger(__name__)


class State(Enum):
    """State enumeration for block drag interactions."""
    IDLE = "idle"
    DRAGGING_BLOCK = "dragging_block"


class DragManager:
    """
    Carries the state of a block drag on one workspace.

    While a block is dragged its connections stay at their indexed
    positions; the drag offset is handed to Connection.closest and only
    committed when the block is dropped.
    """

    def __init__(self, workspace: 'Workspace'):
        self.workspace = workspace
        self.state = State.IDLE

        # Dragging context
        self.dragging_block: Optional['Block'] = None
        self.drag_delta: Delta = (0.0, 0.0)

        # Snap context
        self.highlighted_connection: Optional['Connection'] = None
        self.local_connection: Optional['Connection'] = None
        self.snap_radius: float = workspace.snap_radius

        workspace.connection_disposed.connect(self.on_connection_disposed)

    def set_state(self, new_state: State) -> None:
        """Transition to a new state."""
        logger.debug(f"State transition: {self.state} -> {new_state}")
        self.state = new_state

    def start_drag(self, block: 'Block') -> bool:
        """
        Pick up a block, unplugging it from its parent.

        Returns:
            True if the drag started, False for immovable blocks or a drag in progress
        """
        if self.state is not State.IDLE:
            logger.warning(f"Ignoring drag of {block.name}, already dragging {self.dragging_block.name}")
            return False
        if not block.is_movable():
            return False
        if block.parent is not None:
            block.set_parent(None)
        self.workspace.drag_mode = DragMode.FREE
        self.workspace.raise_block(block)
        self.dragging_block = block
        self.drag_delta = (0.0, 0.0)
        self.set_state(State.DRAGGING_BLOCK)
        return True

    def drag_to(self, dx: float, dy: float) -> Optional['Connection']:
        """
        Update the drag offset and the highlighted snap candidate.

        Args:
            dx: Horizontal offset from where the block was picked up
            dy: Vertical offset from where the block was picked up

        Returns:
            The connection the block would snap to, or None
        """
        if self.state is not State.DRAGGING_BLOCK:
            return None
        self.drag_delta = (dx, dy)

        closest_connection = None
        local_connection = None
        radius = self.snap_radius
        block = self.dragging_block
        connections = block.get_connections()
        # A stack can also snap by the free next connection at its bottom
        last_next = block.last_connection_in_stack()
        if last_next is not None and last_next is not block.next_connection:
            connections.append(last_next)
        for connection in connections:
            neighbour = connection.closest(radius, dx, dy)
            if neighbour.connection is not None:
                closest_connection = neighbour.connection
                local_connection = connection
                radius = neighbour.radius

        if self.highlighted_connection is not closest_connection:
            if self.highlighted_connection is not None:
                self.highlighted_connection.unhighlight()
            if closest_connection is not None:
                closest_connection.highlight()
            self.highlighted_connection = closest_connection
        self.local_connection = local_connection
        return closest_connection

    def end_drag(self) -> Optional['Connection']:
        """
        Drop the block, connecting it to the highlighted candidate if any.

        Returns:
            The connection the block was connected to, or None
        """
        if self.state is not State.DRAGGING_BLOCK:
            return None
        block = self.dragging_block
        target = self.highlighted_connection
        local = self.local_connection
        try:
            block.move_by(*self.drag_delta)
            if target is not None:
                target.unhighlight()
                local.connect(target)
                superior = local if local.is_superior() else target
                superior.tighten()
                logger.info(f"Dropped {block.name} onto {target.owner.name}")
        finally:
            self._reset()
        self.workspace.bump_scheduler.schedule_neighbours(block)
        return target

    def cancel_drag(self) -> None:
        """Abandon the drag; the block stays where it was picked up."""
        if self.state is not State.DRAGGING_BLOCK:
            return
        if self.highlighted_connection is not None:
            self.highlighted_connection.unhighlight()
        self._reset()

    def _reset(self) -> None:
        self.workspace.drag_mode = DragMode.NONE
        self.dragging_block = None
        self.drag_delta = (0.0, 0.0)
        self.highlighted_connection = None
        self.local_connection = None
        self.set_state(State.IDLE)

    def on_connection_disposed(self, connection: 'Connection') -> None:
        if self.highlighted_connection is connection:
            self.highlighted_connection = None
        if self.local_connection is connection:
            self.local_connection = None
