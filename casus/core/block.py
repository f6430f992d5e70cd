"""
Block class - the tree node that owns connections.

Only the parts of a block the connection graph relies on live here:
its connection points, parent/child links, movability, collapse state
and the render/re-layout triggers the rendering layer listens to.
"""

import logging
from typing import TYPE_CHECKING, List, Optional

from PyQt5.QtCore import QPointF

from casus.core.connection import Connection
from casus.core.connection_kind import VALUE_INPUT_KINDS, VALUE_OUTPUT_KINDS, ConnectionKind
from casus.exceptions import IncompatibleConnectionError
from casus.types import CheckSpec

if TYPE_CHECKING:
    from casus.core.workspace import Workspace

logger = logging.getLogger(__name__)


class Icon:
    """An auxiliary decoration (comment, warning, mutator bubble) on a block."""

    def __init__(self, name: str = 'comment', visible: bool = False) -> None:
        self.name = name
        self.visible = visible

    def set_visible(self, visible: bool) -> None:
        self.visible = visible


class Input:
    """
    A named input row on a block.

    Attributes:
        name: Input name, unique on its block
        connection: Value or statement connection, None for dummy inputs
        visible: Whether the row is shown (False while the block is collapsed)
    """

    def __init__(self, name: str, source_block: 'Block',
                 connection: Optional[Connection] = None) -> None:
        self.name = name
        self.source_block = source_block
        self.connection = connection
        self.visible = True

    def set_visible(self, visible: bool) -> List['Block']:
        """
        Show or hide this input and everything plugged into it.

        Returns:
            Blocks that need rendering once everything is unhidden
        """
        render_list: List['Block'] = []
        if self.visible == visible:
            return render_list
        self.visible = visible
        if self.connection is None:
            return render_list
        if visible:
            render_list = self.connection.unhide_all()
        else:
            self.connection.hide_all()
        return render_list


class Block:
    """
    A draggable block in the editor.

    Attributes:
        name: Unique block identifier (block_type + sid)
        workspace: Workspace the block lives on
        part_of_speech: 'noun' or 'verb', selects the statement clamp outline
        parent: Parent block, None for a top block
        children: Child blocks in attachment order
        input_list: Input rows in display order
        output_connection / previous_connection / next_connection: Optional plugs
        xy: Absolute position of the block's origin
        rendered: Whether the block has a realized visual surface
        render_count: Number of times the block was re-laid out
    """

    def __init__(self, workspace: 'Workspace', block_type: str = 'block',
                 part_of_speech: str = 'verb', movable: bool = True,
                 rendered: bool = True) -> None:
        self.workspace: 'Workspace' = workspace
        self.block_type: str = block_type
        self.sid: int = workspace.next_block_id()
        self.name: str = block_type.lower() + str(self.sid)
        self.part_of_speech: str = part_of_speech
        self.parent: Optional['Block'] = None
        self.children: List['Block'] = []
        self.input_list: List[Input] = []
        self.output_connection: Optional[Connection] = None
        self.previous_connection: Optional[Connection] = None
        self.next_connection: Optional[Connection] = None
        self.icons: List[Icon] = []
        self.xy: QPointF = QPointF(0, 0)
        self.movable: bool = movable
        self.collapsed: bool = False
        self.disabled: bool = False
        self.effectively_disabled: bool = False
        self.rendered: bool = rendered
        self.render_count: int = 0
        workspace.add_top_block(self)

    def __repr__(self) -> str:
        return f"Block({self.name})"

    # ==================== Connection points ====================

    def set_output(self, kind: ConnectionKind = ConnectionKind.OUTPUT_VALUE,
                   check: CheckSpec = None) -> Connection:
        """Give the block a value output plug (base or grammatical case)."""
        if kind not in VALUE_OUTPUT_KINDS:
            raise IncompatibleConnectionError(f"{kind.name} is not an output kind.")
        if self.previous_connection is not None:
            raise IncompatibleConnectionError('A block cannot have both an output and a previous connection.')
        self.output_connection = Connection(self, kind).set_check(check)
        return self.output_connection

    def set_previous_statement(self, check: CheckSpec = None) -> Connection:
        if self.output_connection is not None:
            raise IncompatibleConnectionError('A block cannot have both an output and a previous connection.')
        self.previous_connection = Connection(self, ConnectionKind.PREVIOUS_STATEMENT).set_check(check)
        return self.previous_connection

    def set_next_statement(self, check: CheckSpec = None) -> Connection:
        self.next_connection = Connection(self, ConnectionKind.NEXT_STATEMENT).set_check(check)
        return self.next_connection

    def append_input(self, name: str, kind: ConnectionKind = ConnectionKind.INPUT_VALUE,
                     check: CheckSpec = None) -> Input:
        """Append a value or statement input row."""
        if kind not in VALUE_INPUT_KINDS and kind is not ConnectionKind.NEXT_STATEMENT:
            raise IncompatibleConnectionError(f"{kind.name} is not an input kind.")
        connection = Connection(self, kind).set_check(check)
        row = Input(name, self, connection)
        self.input_list.append(row)
        return row

    def append_dummy_input(self, name: str = '') -> Input:
        row = Input(name, self)
        self.input_list.append(row)
        return row

    def get_input(self, name: str) -> Optional[Input]:
        for row in self.input_list:
            if row.name == name:
                return row
        return None

    def input_connections(self) -> List[Connection]:
        return [row.connection for row in self.input_list if row.connection is not None]

    def get_connections(self, include_hidden: bool = False) -> List[Connection]:
        """
        Return this block's connections.

        Args:
            include_hidden: Also return connections of collapsed inputs.
                Headless (unrendered) blocks only report them when this is set.
        """
        connections: List[Connection] = []
        if include_hidden or self.rendered:
            for connection in (self.output_connection, self.previous_connection,
                               self.next_connection):
                if connection is not None:
                    connections.append(connection)
            if include_hidden or not self.collapsed:
                connections.extend(self.input_connections())
        return connections

    # ==================== Tree ====================

    def get_parent(self) -> Optional['Block']:
        return self.parent

    def get_root_block(self) -> 'Block':
        block = self
        while block.parent is not None:
            block = block.parent
        return block

    def get_next_block(self) -> Optional['Block']:
        if self.next_connection is None:
            return None
        return self.next_connection.target_block()

    def last_connection_in_stack(self) -> Optional[Connection]:
        """The free next connection at the bottom of this block's stack, or None."""
        block = self
        while block.next_connection is not None:
            next_block = block.next_connection.target_block()
            if next_block is None:
                return block.next_connection
            block = next_block
        return None

    def get_descendants(self) -> List['Block']:
        """This block and every block nested below it, depth first."""
        descendants = [self]
        for child in self.children:
            descendants.extend(child.get_descendants())
        return descendants

    def set_parent(self, new_parent: Optional['Block']) -> None:
        """
        Set the parent of this block, keeping the top-block list in sync.

        Re-parenting disconnects the block from its old superior connection.
        """
        if new_parent is self.parent:
            return
        was_top_block = self.parent is None
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None
            # Disconnect from superior blocks.
            for connection in (self.previous_connection, self.output_connection):
                if connection is not None and connection.target_connection is not None:
                    connection.disconnect()

        self.parent = new_parent
        if new_parent is not None:
            new_parent.children.append(self)
            if was_top_block:
                self.workspace.remove_top_block(self)
        elif not was_top_block:
            self.workspace.add_top_block(self)

    def is_movable(self) -> bool:
        return self.movable

    @property
    def is_in_flyout(self) -> bool:
        return self.workspace.is_flyout

    def is_collapsed(self) -> bool:
        return self.collapsed

    def set_collapsed(self, collapsed: bool) -> None:
        """Collapse or expand the block, hiding or showing everything plugged into its inputs."""
        if self.collapsed == collapsed:
            return
        self.collapsed = collapsed
        render_list: List['Block'] = []
        for row in self.input_list:
            render_list.extend(row.set_visible(not collapsed))
        if not self.rendered:
            return
        if not render_list:
            render_list = [self]
        for block in render_list:
            block.render()

    # ==================== Geometry ====================

    def move_by(self, dx: float, dy: float) -> None:
        """Move the block and everything attached below it."""
        self.xy = QPointF(self.xy.x() + dx, self.xy.y() + dy)
        self.move_connections(dx, dy)
        self.workspace.block_moved.emit(self, float(dx), float(dy))

    def move_to(self, x: float, y: float) -> None:
        self.move_by(x - self.xy.x(), y - self.xy.y())

    def move_connections(self, dx: float, dy: float) -> None:
        """Shift the connections of this block and its children (positions only)."""
        for connection in self.get_connections(include_hidden=True):
            connection.move_by(dx, dy)
        for child in self.children:
            child.xy = QPointF(child.xy.x() + dx, child.xy.y() + dy)
            child.move_connections(dx, dy)

    def bump_neighbours(self) -> None:
        """Move unconnected blocks of other trees out of this tree's way."""
        from casus.core.workspace import DragMode

        if self.workspace.drag_mode is not DragMode.NONE:
            return
        root_block = self.get_root_block()
        if root_block.is_in_flyout:
            return
        snap_radius = self.workspace.snap_radius
        for connection in self.get_connections():
            if connection.target_connection is not None and connection.is_superior():
                connection.target_block().bump_neighbours()
            for other in connection.neighbours(snap_radius):
                # If both connections are connected, that's fine.
                if connection.target_connection is not None and other.target_connection is not None:
                    continue
                if other.owner.get_root_block() is root_block:
                    continue
                if connection.is_superior():
                    other.bump_away_from(connection)
                else:
                    connection.bump_away_from(other)

    # ==================== Rendering hooks ====================

    def render(self) -> None:
        """Re-lay out this block; rendering a block also renders its ancestors."""
        self.render_count += 1
        self.workspace.block_rendered.emit(self)
        if self.parent is not None:
            self.parent.render()

    def update_disabled(self) -> None:
        """Refresh the disabled look of this block and its children."""
        self.effectively_disabled = self.disabled or (
            self.parent is not None and self.parent.effectively_disabled)
        for child in self.children:
            child.update_disabled()

    def set_disabled(self, disabled: bool) -> None:
        self.disabled = disabled
        self.update_disabled()

    def dispose(self) -> None:
        """Unplug this block and destroy it together with its children."""
        if self.parent is not None:
            self.set_parent(None)
        for child in list(self.children):
            child.dispose()
        for connection in self.get_connections(include_hidden=True):
            if connection.target_connection is not None:
                connection.disconnect()
            connection.dispose()
        self.workspace.remove_top_block(self)
        logger.debug(f"Disposed {self.name}")
