"""
Casus - connection graph and spatial index for a block-based editor.
"""

from casus.exceptions import (
    CasusError,
    GeometryError,
    IncompatibleConnectionError,
    InvalidStateError,
)

__version__ = '0.1.0'

__all__ = [
    'CasusError',
    'GeometryError',
    'IncompatibleConnectionError',
    'InvalidStateError',
]
