"""
Highlight Renderer for the block editor.
Builds the hover outline drawn around the connection a drag would snap to.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from PyQt5.QtCore import QPointF

from config.connection_constants import (
    CIRCULAR_CLAMP_IN,
    CIRCULAR_CLAMP_OUT,
    NOTCH_PATH_RIGHT,
    RECTANGULAR_CLAMP_IN,
    RECTANGULAR_CLAMP_OUT,
    TAB_HEIGHT,
    TAB_WIDTH,
)
from casus.core.connection_kind import ConnectionKind, GrammaticalCase

if TYPE_CHECKING:
    from casus.core.connection import Connection
    from casus.core.workspace import Workspace

logger = logging.getLogger(__name__)

# Outline of each grammatical case's notch, drawn downwards from the connection point
CASE_NOTCH_STEPS = {
    GrammaticalCase.GENITIVE: 'm 0,0 v 7 h -3 v 3.25 h -4 v 3.5 h 4 v 3.25 h 3 v 7',  # cross
    GrammaticalCase.DATIVE: 'm 0,0 v 7 h -7 v 10 h 7 v 7',  # rectangle
    GrammaticalCase.ACCUSATIVE: 'm -2,0 v 8 a 5,5 0 1 0 0,10 v 7',  # circle
    GrammaticalCase.ABLATIVE: 'm 0,0 v 7 l -7,5 7,5 v 6',  # triangle
    GrammaticalCase.VOCATIVE: 'm 0,0 v 10.5 l -7,-3 v 10 l 7,-3 v 10.5',  # funnel
}


def _tab_steps(tab_width: float) -> str:
    return (f"m 0,0 v 5 c 0,10 {-tab_width},-8 {-tab_width},7.5 "
            f"s {tab_width},-2.5 {tab_width},7.5 v 5")


@dataclass
class HighlightPath:
    """
    A highlight outline ready for painting.

    Attributes:
        connection: Connection being outlined
        steps: SVG-style path steps, relative to the connection point
        offset: Connection point relative to the owning block's origin
    """
    connection: 'Connection'
    steps: str
    offset: QPointF


class HighlightRenderer:
    """
    Tracks the single highlighted connection of a workspace and its outline.
    """

    def __init__(self, workspace: 'Workspace'):
        self.workspace = workspace
        self.current: Optional[HighlightPath] = None
        workspace.connection_highlighted.connect(self.on_connection_highlighted)
        workspace.connection_disposed.connect(self.on_connection_disposed)

    def on_connection_highlighted(self, connection: 'Connection', on: bool) -> None:
        if on:
            self.current = self.build_path(connection)
            logger.debug(f"Highlighting {connection!r}")
        elif self.current is not None and self.current.connection is connection:
            self.current = None

    def on_connection_disposed(self, connection: 'Connection') -> None:
        if self.current is not None and self.current.connection is connection:
            self.current = None

    def build_path(self, connection: 'Connection') -> HighlightPath:
        """Build the outline for a connection, placed relative to its block."""
        block_xy = connection.owner.xy
        offset = QPointF(connection.x - block_xy.x(), connection.y - block_xy.y())
        return HighlightPath(connection, self.steps_for(connection), offset)

    def steps_for(self, connection: 'Connection') -> str:
        """Path steps of the outline, which depend on the connection kind."""
        kind = connection.kind
        rtl = self.workspace.rtl
        if kind in (ConnectionKind.INPUT_VALUE, ConnectionKind.OUTPUT_VALUE):
            return _tab_steps(-TAB_WIDTH if rtl else TAB_WIDTH)
        case = kind.case
        if case is GrammaticalCase.NOMINATIVE:
            # Nominative tabs have no stem and are never mirrored
            return _tab_steps(TAB_WIDTH)
        if case is not None:
            return CASE_NOTCH_STEPS[case]
        if rtl:
            return 'm 20,0 h -5 ' + NOTCH_PATH_RIGHT + ' h -5'
        # Statement clamps differ for nouns and verbs, top then bottom
        if connection.owner.part_of_speech == 'noun':
            clamp_in, clamp_out = CIRCULAR_CLAMP_IN, CIRCULAR_CLAMP_OUT
        else:
            clamp_in, clamp_out = RECTANGULAR_CLAMP_IN, RECTANGULAR_CLAMP_OUT
        steps = 'm -20,0 h 5 ' + clamp_in + ' h 5'
        steps += 'm 0,' + str(TAB_HEIGHT + 2) + ' h -5 ' + clamp_out + ' h -5'
        return steps
