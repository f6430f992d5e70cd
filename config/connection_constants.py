"""Connection Geometry Configuration
Default snapping, bumping and notch geometry for the block editor.
Distances are in workspace pixels, delays in milliseconds.
"""

# Maximum distance between two connections for them to snap together
SNAP_RADIUS = 15

# Delay before an orphaned block is bumped away, lets rendering settle first
BUMP_DELAY_MS = 250

# Value tab (puzzle piece) dimensions
TAB_WIDTH = 8
TAB_HEIGHT = 20

# Statement notch outline, drawn right to left
NOTCH_PATH_RIGHT = 'l -6,4 -3,0 -6,-4'

# Statement clamps, by part of speech of the owning block
CIRCULAR_CLAMP_IN = 'a 7.5,4 0 0 0 15,0'
CIRCULAR_CLAMP_OUT = 'a 7.5,4 0 0 1 -15,0'
RECTANGULAR_CLAMP_IN = 'v 4 h 15 v -4'
RECTANGULAR_CLAMP_OUT = 'v 4 h -15 v -4'
