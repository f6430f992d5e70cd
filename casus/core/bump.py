"""
Deferred bumps.

When a splice leaves an orphan that cannot be re-attached, the orphan is
nudged away from the connection that displaced it. The nudge waits a
short delay so the re-render triggered by the connect can settle first.
Callbacks run on the host Qt event loop.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from PyQt5.QtCore import QTimer

from casus.types import DeferredTask

if TYPE_CHECKING:
    from casus.core.block import Block
    from casus.core.connection import Connection

logger = logging.getLogger(__name__)

Timer = Callable[[int, DeferredTask], None]
"""Schedules a callback after a delay in milliseconds."""


class BumpScheduler:
    """
    Queues delayed bump tasks for one workspace.

    Attributes:
        delay_ms: Delay before a scheduled bump runs
        pending: Number of tasks scheduled but not yet run
    """

    def __init__(self, delay_ms: int, timer: Optional[Timer] = None) -> None:
        self.delay_ms: int = delay_ms
        self.pending: int = 0
        self._timer: Timer = timer or QTimer.singleShot

    def schedule(self, orphan_connection: 'Connection', static_connection: 'Connection',
                 expected_partner: Optional['Connection'] = None) -> None:
        """
        Bump the orphan's tree away from static_connection after the delay.

        The task is skipped if, by the time it runs, either connection has been
        disposed, the orphan was connected again, or the static connection
        holds a partner other than expected_partner.

        Args:
            orphan_connection: Plug of the displaced block
            static_connection: Connection the orphan was displaced from
            expected_partner: Partner static_connection will hold once the
                current connect completes; defaults to its present partner
        """
        if expected_partner is None:
            expected_partner = static_connection.target_connection

        def run() -> None:
            self.pending -= 1
            if orphan_connection.disposed or static_connection.disposed:
                logger.debug("Skipping bump, connection disposed")
                return
            if orphan_connection.target_connection is not None:
                logger.debug(f"Skipping bump, {orphan_connection.owner.name} was reconnected")
                return
            if static_connection.target_connection is not expected_partner:
                logger.debug("Skipping bump, static connection changed partner")
                return
            orphan_connection.bump_away_from(static_connection)

        self._submit(run)

    def schedule_neighbours(self, block: 'Block') -> None:
        """Run block.bump_neighbours() after the delay."""
        def run() -> None:
            self.pending -= 1
            root_block = block.get_root_block()
            if not any(top is root_block for top in block.workspace.get_top_blocks()):
                logger.debug(f"Skipping neighbour bump, {block.name} was disposed")
                return
            block.bump_neighbours()

        self._submit(run)

    def _submit(self, task: DeferredTask) -> None:
        self.pending += 1
        self._timer(self.delay_ms, task)
