"""
Layout constants for the task tree canvas.
Nodes are laid out left-to-right by depth and stacked vertically within a depth.
"""

# Horizontal distance between a parent's center and its children's centers
HORIZONTAL_SPACING = 380

# Vertical space between sibling bands
VERTICAL_GAP = 30

# Vertical space between root trees
ROOT_GAP = 100

# Used when the renderer has not reported a height for a node yet
DEFAULT_NODE_HEIGHT = 150

# Rendered card width; connection lines attach to the card edges
NODE_WIDTH = 288

# Bezier handle length as a fraction of the horizontal distance
EDGE_CURVATURE = 0.5
