"""
Type definitions for Casus.

Common type aliases used by the connection graph and its collaborators.
"""

from typing import Callable, FrozenSet, Iterable, Optional, Tuple, Union

# Type tags a connection accepts; None accepts anything
Check = Optional[FrozenSet[str]]
"""Normalized compatibility tags of a connection."""

CheckSpec = Union[None, str, Iterable[str]]
"""What callers may pass to set_check: a tag, several tags, or None."""

Delta = Tuple[float, float]
"""Drag or bump offset as (dx, dy) in workspace coordinates."""

DeferredTask = Callable[[], None]
"""A callback queued on the host event loop."""
