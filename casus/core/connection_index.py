"""
ConnectionIndex - spatial index over the connections of one kind.

Connections are stored in order of their vertical component so that the
connections in an area can be found with a binary search followed by a
short walk up and down the y axis.
"""

import logging
import math
from bisect import bisect_left, bisect_right
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, NamedTuple, Optional

from casus.core.connection_kind import ConnectionKind
from casus.exceptions import InvalidStateError

if TYPE_CHECKING:
    from casus.core.connection import Connection

logger = logging.getLogger(__name__)


class ClosestResult(NamedTuple):
    """Result of a nearest-connection search."""
    connection: Optional['Connection']
    radius: float


class ConnectionIndex:
    """
    Ordered container of connections sorted non-decreasing by y.

    Attributes:
        kind: Connection kind stored in this index
    """

    def __init__(self, kind: ConnectionKind) -> None:
        self.kind: ConnectionKind = kind
        self._connections: List['Connection'] = []
        # Parallel list of y values, kept in lockstep for bisect
        self._ys: List[float] = []

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator['Connection']:
        return iter(list(self._connections))

    def __contains__(self, connection: object) -> bool:
        return any(c is connection for c in self._connections)

    def __repr__(self) -> str:
        return f"ConnectionIndex({self.kind.name}, {len(self)} connections)"

    def add_connection(self, connection: 'Connection') -> None:
        """
        Insert a connection at its y position.

        Connections sharing a y value keep their insertion order.

        Raises:
            InvalidStateError: If the connection is already indexed
        """
        if connection.in_index:
            logger.error(f"Connection already in index: {connection!r}")
            raise InvalidStateError('Connection already in index.')
        position = bisect_right(self._ys, connection.y)
        self._connections.insert(position, connection)
        self._ys.insert(position, connection.y)
        connection.in_index = True
        logger.debug(f"Indexed {connection!r} at {position}")

    def remove_connection(self, connection: 'Connection') -> None:
        """
        Remove a connection, matched by identity among entries with its y.

        Raises:
            InvalidStateError: If the connection is not indexed or cannot be found
        """
        if not connection.in_index:
            logger.error(f"Connection not in index: {connection!r}")
            raise InvalidStateError('Connection not in index.')
        y = connection.y
        position = bisect_left(self._ys, y)
        while position < len(self._ys) and self._ys[position] == y:
            if self._connections[position] is connection:
                del self._connections[position]
                del self._ys[position]
                connection.in_index = False
                return
            position += 1
        logger.error(f"Index corrupted, {connection!r} not found at y={y}")
        raise InvalidStateError('Unable to find connection in index.')

    def nearest(self, x: float, y: float, max_radius: float,
                accept: Optional[Callable[['Connection'], bool]] = None) -> ClosestResult:
        """
        Find the closest accepted connection within max_radius of (x, y).

        The walk starts at the binary-searched y position and expands in both
        directions. It stops once the vertical distance alone exceeds the best
        radius found so far, since that bounds the Euclidean distance from below.

        Args:
            x: Horizontal search coordinate
            y: Vertical search coordinate
            max_radius: Largest acceptable distance
            accept: Optional eligibility predicate applied before the distance test

        Returns:
            ClosestResult with the connection (or None) and the achieved radius
        """
        best: Optional['Connection'] = None
        radius = max_radius
        start = bisect_left(self._ys, y)

        def consider(candidate: 'Connection') -> None:
            nonlocal best, radius
            if accept is not None and not accept(candidate):
                return
            distance = math.hypot(x - candidate.x, y - candidate.y)
            if distance <= radius:
                best = candidate
                radius = distance

        below = start - 1
        while below >= 0 and y - self._ys[below] <= radius:
            consider(self._connections[below])
            below -= 1
        above = start
        while above < len(self._ys) and self._ys[above] - y <= radius:
            consider(self._connections[above])
            above += 1
        return ClosestResult(best, radius)

    def within_radius(self, x: float, y: float, max_radius: float) -> List['Connection']:
        """Return every connection within max_radius of (x, y), ignoring eligibility."""
        found: List['Connection'] = []
        first = bisect_left(self._ys, y - max_radius)
        last = bisect_right(self._ys, y + max_radius)
        for candidate in self._connections[first:last]:
            if math.hypot(x - candidate.x, y - candidate.y) <= max_radius:
                found.append(candidate)
        return found

    def is_sorted(self) -> bool:
        """Check the ordering invariant (y values non-decreasing and in sync)."""
        if any(c.y != y for c, y in zip(self._connections, self._ys)):
            return False
        return all(a <= b for a, b in zip(self._ys, self._ys[1:]))


class ConnectionIndexSet:
    """One ConnectionIndex per connection kind, owned by a single workspace."""

    def __init__(self) -> None:
        self._indices: Dict[ConnectionKind, ConnectionIndex] = {
            kind: ConnectionIndex(kind) for kind in ConnectionKind
        }

    def __getitem__(self, kind: ConnectionKind) -> ConnectionIndex:
        return self._indices[kind]

    def __iter__(self) -> Iterator[ConnectionIndex]:
        return iter(self._indices.values())

    def opposite_of(self, kind: ConnectionKind) -> ConnectionIndex:
        """Index searched by a connection of the given kind."""
        return self._indices[kind.opposite]

    def indexed_connections(self) -> List['Connection']:
        """Every connection currently indexed, across all kinds."""
        return [c for index in self._indices.values() for c in index]
