"""
Workspace - owns the blocks, the spatial indices and the drag state.
"""

import logging
from enum import Enum
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from casus.config_manager import ConfigManager, get_config
from casus.core.bump import BumpScheduler, Timer
from casus.core.connection_index import ConnectionIndexSet
from casus.exceptions import InvalidStateError

logger = logging.getLogger(__name__)


class DragMode(Enum):
    """Drag state of a workspace."""
    NONE = 0
    STICKY = 1  # Pressed but not yet past the drag threshold
    FREE = 2


class Workspace(QObject):
    """
    A surface holding blocks and one connection index per connection kind.

    Signals:
        block_rendered(block): A block was re-laid out
        block_moved(block, dx, dy): A root block was moved
        block_raised(block): A root block was raised to the top of the stacking order
        connection_highlighted(connection, on): Hover outline toggled
        connection_disposed(connection): A connection was destroyed
        connected(connection, other): Two connections were joined
        disconnected(connection, other): Two connections were separated
    """
    block_rendered = pyqtSignal(object)
    block_moved = pyqtSignal(object, float, float)
    block_raised = pyqtSignal(object)
    connection_highlighted = pyqtSignal(object, bool)
    connection_disposed = pyqtSignal(object)
    connected = pyqtSignal(object, object)
    disconnected = pyqtSignal(object, object)

    def __init__(self, config: Optional[ConfigManager] = None, is_flyout: bool = False,
                 timer: Optional[Timer] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        config = config or get_config()
        self.snap_radius: float = config.get("connections.snap_radius", 15)
        self.rtl: bool = config.get("layout.rtl", False)
        self.is_flyout: bool = is_flyout
        self.drag_mode: DragMode = DragMode.NONE
        self.connection_indices: ConnectionIndexSet = ConnectionIndexSet()
        self.bump_scheduler: BumpScheduler = BumpScheduler(
            config.get("connections.bump_delay_ms", 250), timer=timer)
        self._top_blocks: List = []
        self._block_counter: int = 0
        logger.debug(f"Workspace created (snap radius {self.snap_radius}, flyout={is_flyout})")

    def next_block_id(self) -> int:
        sid = self._block_counter
        self._block_counter += 1
        return sid

    def add_top_block(self, block) -> None:
        self._top_blocks.append(block)

    def remove_top_block(self, block) -> None:
        for position, top_block in enumerate(self._top_blocks):
            if top_block is block:
                del self._top_blocks[position]
                return
        raise InvalidStateError("Block not present in workspace's list of top-most blocks.")

    def get_top_blocks(self) -> List:
        """Root blocks in stacking order, topmost last."""
        return list(self._top_blocks)

    def get_all_blocks(self) -> List:
        blocks = []
        for top_block in self._top_blocks:
            blocks.extend(top_block.get_descendants())
        return blocks

    def raise_block(self, block) -> None:
        """Move a root block to the top of the stacking order."""
        self.remove_top_block(block)
        self._top_blocks.append(block)
        self.block_raised.emit(block)
