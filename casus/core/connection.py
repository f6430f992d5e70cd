"""
Connection class - a typed attachment point between blocks.
"""

import logging
import weakref
from typing import TYPE_CHECKING, List, Optional

from casus.core.connection_index import ClosestResult, ConnectionIndex
from casus.core.connection_kind import (
    CONTAINER_KINDS,
    SINGLE_USE_KINDS,
    VALUE_INPUT_KINDS,
    ConnectionKind,
)
from casus.exceptions import GeometryError, IncompatibleConnectionError, InvalidStateError
from casus.types import Check, CheckSpec

if TYPE_CHECKING:
    from casus.core.block import Block
    from casus.core.workspace import DragMode

logger = logging.getLogger(__name__)


class Connection:
    """
    A typed endpoint owned by exactly one block, linked to at most one partner.

    Attributes:
        owner: Block that owns this connection
        kind: ConnectionKind role of this connection
        x: Absolute horizontal position (authoritative while indexed)
        y: Absolute vertical position (authoritative while indexed)
        check: Compatible type tags, or None to accept anything
        in_index: Whether the connection currently sits in its kind's index
        hidden: Whether a collapsed ancestor has hidden this connection
        highlighted: Whether the rendering layer shows the hover outline
        disposed: Whether the connection has been destroyed
    """

    def __init__(self, owner: 'Block', kind: ConnectionKind) -> None:
        self.owner: 'Block' = owner
        self.kind: ConnectionKind = kind
        self.x: float = 0.0
        self.y: float = 0.0
        self.check: Check = None
        self.in_index: bool = False
        self.hidden: bool = False
        self.highlighted: bool = False
        self.disposed: bool = False
        self._target_ref: Optional['weakref.ReferenceType[Connection]'] = None
        self._indices = owner.workspace.connection_indices

    def __repr__(self) -> str:
        return f"Connection({self.kind.name} on {self.owner.name} at ({self.x:g}, {self.y:g}))"

    @property
    def target_connection(self) -> Optional['Connection']:
        """The connected partner, or None."""
        if self._target_ref is None:
            return None
        return self._target_ref()

    @target_connection.setter
    def target_connection(self, connection: Optional['Connection']) -> None:
        self._target_ref = weakref.ref(connection) if connection is not None else None

    @property
    def index(self) -> ConnectionIndex:
        """Spatial index holding connections of this kind."""
        return self._indices[self.kind]

    def is_superior(self) -> bool:
        """Does this connection belong to the parent side of a link?"""
        return self.kind.is_superior

    def target_block(self) -> Optional['Block']:
        """Return the block on the other side of this connection, if any."""
        target = self.target_connection
        return target.owner if target is not None else None

    def dispose(self) -> None:
        """Sever all links to this connection (not including from the owner)."""
        if self.target_connection is not None:
            logger.error(f"Attempted to dispose connected {self!r}")
            raise InvalidStateError('Disconnect connection before disposing of it.')
        if self.in_index:
            self.index.remove_connection(self)
        self.disposed = True
        self.owner.workspace.connection_disposed.emit(self)

    # ==================== Linking ====================

    def connect(self, other: 'Connection') -> None:
        """
        Connect this connection to another connection.

        If the other side is occupied, its current child is displaced (the
        orphan) and either re-attached further down the newly inserted block
        or bumped away after a short delay.

        Raises:
            IncompatibleConnectionError: If the pair can never be joined
            InvalidStateError: If this connection is already connected
        """
        if self.disposed or other.disposed:
            raise InvalidStateError('Cannot connect a disposed connection.')
        if self.owner is other.owner:
            raise IncompatibleConnectionError('Attempted to connect a block to itself.')
        if self.owner.workspace is not other.owner.workspace:
            raise IncompatibleConnectionError('Blocks are on different workspaces.')
        if self.kind.opposite is not other.kind:
            raise IncompatibleConnectionError(
                f"Attempt to connect incompatible kinds {self.kind.name} and {other.kind.name}.")
        if not self.check_type(other):
            raise IncompatibleConnectionError('Connection type checks do not intersect.')

        if self.kind.is_value:
            if self.target_connection is not None:
                raise InvalidStateError('Source connection already connected (value).')
            if other.target_connection is not None:
                self._splice_value(other)
        else:
            if self.target_connection is not None:
                raise InvalidStateError('Source connection already connected (block).')
            if other.target_connection is not None:
                if self.kind is not ConnectionKind.PREVIOUS_STATEMENT:
                    raise IncompatibleConnectionError(
                        'Can only do a mid-stack connection with the top of a block.')
                self._splice_statement(other)

        if self.is_superior():
            parent_block, child_block = self.owner, other.owner
        else:
            parent_block, child_block = other.owner, self.owner

        self.target_connection = other
        other.target_connection = self
        child_block.set_parent(parent_block)
        logger.debug(f"Connected {child_block.name} under {parent_block.name}")

        if parent_block.rendered:
            parent_block.update_disabled()
        if child_block.rendered:
            child_block.update_disabled()
        if parent_block.rendered and child_block.rendered:
            if self.kind.is_statement:
                # Child may need to square off its corners; rendering it renders the parent.
                child_block.render()
            else:
                # Child does not change shape; the parent moves its children into place.
                parent_block.render()
        self.owner.workspace.connected.emit(self, other)

    def _splice_value(self, other: 'Connection') -> None:
        """Displace the value block plugged into other, re-attaching it if possible."""
        if not other.is_superior():
            raise IncompatibleConnectionError('Cannot splice into an occupied output connection.')
        orphan_block = other.target_block()
        orphan_block.set_parent(None)
        if orphan_block.output_connection is None:
            raise InvalidStateError('Orphan block does not have an output connection.')
        # The new block may be a row of value blocks; walk to its end.
        new_block = self.owner
        connection = Connection.single_connection(new_block, orphan_block)
        while connection is not None:
            child = connection.target_block()
            if child is None:
                connection.connect(orphan_block.output_connection)
                logger.debug(f"Re-attached orphan {orphan_block.name} to {new_block.name}")
                return
            new_block = child
            connection = Connection.single_connection(new_block, orphan_block)
        self.owner.workspace.bump_scheduler.schedule(
            orphan_block.output_connection, other, expected_partner=self)

    def _splice_statement(self, other: 'Connection') -> None:
        """Split the stack below other, re-attaching the tail under this block's stack."""
        orphan_block = other.target_block()
        orphan_block.set_parent(None)
        if orphan_block.previous_connection is None:
            raise InvalidStateError('Orphan block does not have a previous connection.')
        new_block = self.owner
        while new_block.next_connection is not None:
            next_connection = new_block.next_connection
            if next_connection.target_connection is not None:
                new_block = next_connection.target_block()
                continue
            if orphan_block.previous_connection.check_type(next_connection):
                next_connection.connect(orphan_block.previous_connection)
                logger.debug(f"Re-attached stack {orphan_block.name} below {new_block.name}")
                return
            break
        self.owner.workspace.bump_scheduler.schedule(
            orphan_block.previous_connection, other, expected_partner=self)

    @staticmethod
    def single_connection(block: 'Block', orphan_block: 'Block') -> Optional['Connection']:
        """
        Return the one value input on block that accepts the orphan, or None.

        An input accepts the orphan when it is the counterpart of the
        orphan's output kind and the type checks intersect. None is returned
        both when no input fits and when more than one does.
        """
        plug = orphan_block.output_connection
        found: Optional[Connection] = None
        for connection in block.input_connections():
            if connection.kind is plug.kind.opposite and plug.check_type(connection):
                if found is not None:
                    return None
                found = connection
        return found

    def disconnect(self) -> None:
        """
        Disconnect this connection from its partner.

        Raises:
            InvalidStateError: If not connected or the partner does not point back
        """
        other = self.target_connection
        if other is None:
            raise InvalidStateError('Source connection not connected.')
        if other.target_connection is not self:
            logger.error(f"Asymmetric link between {self!r} and {other!r}")
            raise InvalidStateError('Target connection not connected to source connection.')
        other.target_connection = None
        self.target_connection = None

        if self.is_superior():
            parent_block, child_block = self.owner, other.owner
        else:
            parent_block, child_block = other.owner, self.owner
        if child_block.parent is parent_block:
            child_block.set_parent(None)

        # Rerender the parent so that it may reflow.
        if parent_block.rendered:
            parent_block.render()
        if child_block.rendered:
            child_block.update_disabled()
            child_block.render()
        self.owner.workspace.disconnected.emit(self, other)

    # ==================== Type checks ====================

    def check_type(self, other: 'Connection') -> bool:
        """True unless both sides have type tags and the tags are disjoint."""
        if not self.check or not other.check:
            return True
        return not self.check.isdisjoint(other.check)

    def set_check(self, check: CheckSpec) -> 'Connection':
        """
        Change the type tags this connection accepts.

        If the current partner no longer fits, the child side is detached and
        bumped away from its neighbours.

        Args:
            check: A tag, an iterable of tags, or None to accept anything

        Returns:
            This connection, for chaining
        """
        if not check:
            self.check = None
            return self
        if isinstance(check, str):
            check = [check]
        self.check = frozenset(check)
        if self.target_connection is not None and not self.check_type(self.target_connection):
            child_block = self.target_block() if self.is_superior() else self.owner
            logger.info(f"Type change on {self!r} detaches {child_block.name}")
            child_block.set_parent(None)
            child_block.bump_neighbours()
        return self

    # ==================== Geometry ====================

    def move_to(self, x: float, y: float) -> None:
        """Change the connection's absolute position, keeping the index in sync."""
        if self.disposed:
            raise InvalidStateError('Cannot move a disposed connection.')
        if self.in_index:
            self.index.remove_connection(self)
        self.x = x
        self.y = y
        if not self.hidden:
            self.index.add_connection(self)

    def move_by(self, dx: float, dy: float) -> None:
        self.move_to(self.x + dx, self.y + dy)

    def tighten(self) -> None:
        """Move the block on the other side so that both connections coincide."""
        target = self.target_connection
        if target is None:
            raise InvalidStateError('Cannot tighten an unconnected connection.')
        dx = round(target.x - self.x)
        dy = round(target.y - self.y)
        if dx != 0 or dy != 0:
            block = target.owner
            if not block.rendered:
                raise GeometryError('block is not rendered.')
            block.move_by(-dx, -dy)

    def bump_away_from(self, static_connection: 'Connection',
                       drag_mode: Optional['DragMode'] = None) -> None:
        """
        Move the block tree of this connection clear of static_connection.

        Args:
            static_connection: Connection to move away from
            drag_mode: Current drag state; defaults to the workspace's
        """
        from casus.core.workspace import DragMode

        workspace = self.owner.workspace
        if drag_mode is None:
            drag_mode = workspace.drag_mode
        if drag_mode is not DragMode.NONE:
            # Don't move blocks around while the user is doing the same.
            return
        root_block = self.owner.get_root_block()
        if root_block.is_in_flyout:
            return
        snap_radius = workspace.snap_radius
        if root_block.is_movable():
            dx = (static_connection.x + snap_radius) - self.x
            dy = (static_connection.y + snap_radius) - self.y
        else:
            # Can't bump an immovable block; nudge the other tree up and over instead.
            root_block = static_connection.owner.get_root_block()
            if not root_block.is_movable():
                return
            dx, dy = snap_radius, -snap_radius
        workspace.raise_block(root_block)
        if workspace.rtl:
            dx = -dx
        logger.debug(f"Bumping {root_block.name} by ({dx:g}, {dy:g})")
        root_block.move_by(dx, dy)

    # ==================== Spatial queries ====================

    def closest(self, max_radius: float, dx: float = 0, dy: float = 0) -> ClosestResult:
        """
        Find the closest compatible connection to this connection.

        Args:
            max_radius: Maximum radius to another connection
            dx: Horizontal drag offset from the indexed position
            dy: Vertical drag offset from the indexed position

        Returns:
            ClosestResult with the connection (or None) and its distance
        """
        if self.target_connection is not None:
            # Don't offer to connect a connection that is already connected.
            return ClosestResult(None, max_radius)
        index = self._indices.opposite_of(self.kind)
        return index.nearest(self.x + dx, self.y + dy, max_radius, accept=self._can_snap_to)

    def _can_snap_to(self, candidate: 'Connection') -> bool:
        """Eligibility of an opposite-kind candidate, excluding distance."""
        target = candidate.target_connection
        if target is not None:
            # Occupied outputs and previous connections are single use.
            if candidate.kind in SINGLE_USE_KINDS:
                return False
            # Splicing into an input is fine unless its child cannot be moved.
            if candidate.kind in VALUE_INPUT_KINDS and not target.owner.is_movable():
                return False
        if not self.check_type(candidate):
            return False
        # Don't connect to this block, a block it nests, or a block nesting it.
        block = candidate.owner
        while block is not None:
            if block is self.owner:
                return False
            block = block.parent
        block = self.owner.parent
        while block is not None:
            if block is candidate.owner:
                return False
            block = block.parent
        return True

    def neighbours(self, max_radius: float) -> List['Connection']:
        """All opposite-kind connections within max_radius; no type or occupancy checks."""
        index = self._indices.opposite_of(self.kind)
        return index.within_radius(self.x, self.y, max_radius)

    # ==================== Highlighting ====================

    def highlight(self) -> None:
        """Ask the rendering layer to outline this connection."""
        self.highlighted = True
        self.owner.workspace.connection_highlighted.emit(self, True)

    def unhighlight(self) -> None:
        self.highlighted = False
        self.owner.workspace.connection_highlighted.emit(self, False)

    # ==================== Visibility ====================

    def hide_all(self) -> None:
        """
        Hide this connection and every connection below it.

        Happens when a block is collapsed. Icons of the hidden blocks are
        closed as well.
        """
        self.hidden = True
        if self.in_index:
            self.index.remove_connection(self)
        target_block = self.target_block()
        if target_block is None:
            return
        for block in target_block.get_descendants():
            for connection in block.get_connections(include_hidden=True):
                connection.hidden = True
                if connection.in_index:
                    connection.index.remove_connection(connection)
            for icon in block.icons:
                icon.set_visible(False)

    def unhide_all(self) -> List['Block']:
        """
        Unhide this connection and every connection below it.

        Happens when a block is expanded. Rendering a block renders all its
        parents, so only the leaf blocks are returned for rendering.

        Returns:
            List of blocks to render
        """
        self.hidden = False
        if not self.in_index:
            self.index.add_connection(self)
        render_list: List['Block'] = []
        if self.kind not in CONTAINER_KINDS:
            # Only spider down.
            return render_list
        block = self.target_block()
        if block is None:
            return render_list
        if block.is_collapsed():
            # A collapsed child is only partially revealed.
            connections = [c for c in (block.output_connection, block.next_connection,
                                       block.previous_connection) if c is not None]
        else:
            connections = block.get_connections(include_hidden=True)
        for connection in connections:
            render_list.extend(connection.unhide_all())
        if not render_list:
            render_list.append(block)
        return render_list
