"""
Exceptions for Casus

Contract violations raised by the connection graph and spatial index.
None of these are expected at runtime; each aborts the current user
gesture and is never retried.
"""


class CasusError(Exception):
    """Base class for every connection graph error."""


class InvalidStateError(CasusError):
    """
    Raised when an operation finds a connection in the wrong state.

    Examples: disposing a connection that is still connected, disconnecting
    an unconnected one, reconnecting an occupied endpoint, adding a
    connection to an index twice, or a partner whose back-link is broken.
    """


class IncompatibleConnectionError(CasusError):
    """
    Raised when two connections can never be joined.

    Examples: both belong to the same block, they live on different
    workspaces, their kinds are not opposites, or a statement block is
    inserted mid-stack from anything but its previous connection.
    """


class GeometryError(CasusError):
    """Raised when a block has no realized visual surface to move yet."""


__all__ = [
    'CasusError',
    'InvalidStateError',
    'IncompatibleConnectionError',
    'GeometryError',
]
