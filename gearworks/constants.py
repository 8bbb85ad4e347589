"""
Game constants - all magic numbers in one place.
NO UI DEPENDENCIES.
"""

# =============================================================================
# GRID
# =============================================================================
GRID_WIDTH = 6       # cells
GRID_HEIGHT = 6      # cells
CELL_SIZE = 0.75     # world units per cell

# =============================================================================
# MESHING
# =============================================================================
MESH_TOLERANCE = 0.06   # world units of slack when comparing centre distance to r1 + r2
FALLBACK_RADIUS = 0.5   # used when a gear has neither a radius nor a footprint

# =============================================================================
# GEAR PARAMETERS (index = subtype)
# =============================================================================
NUMBER_BONUSES = (0.06, 0.11, 0.17, 0.22)        # One, Two, Four, Eight
MULTIPLIER_FACTORS = (1.25, 1.5, 2.0)            # x1.25, x1.5, x2
CHARACTER_BASE_FILLS = (0.2, 0.25)               # Round, Square
CHARACTER_NAMES = ("Round", "Square")

FILL_THRESHOLD = 1.0    # accumulated fill that triggers a spawn
