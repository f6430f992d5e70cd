"""
Core module for Casus.
Contains the connection, spatial index and block tree classes.
"""

from casus.core.connection_kind import ConnectionKind, GrammaticalCase
from casus.core.connection_index import ClosestResult, ConnectionIndex, ConnectionIndexSet
from casus.core.connection import Connection
from casus.core.block import Block, Icon, Input
from casus.core.workspace import DragMode, Workspace

__all__ = [
    'Block', 'ClosestResult', 'Connection', 'ConnectionIndex', 'ConnectionIndexSet',
    'ConnectionKind', 'DragMode', 'GrammaticalCase', 'Icon', 'Input', 'Workspace',
]
