"""
Constants used internally by the collage plotter.

These are implementation-level values that should not be overridden
via config files or CLI arguments.
"""

# Internal color constants
COLOR_MODE_RGB = "RGB"
COLOR_BLACK = (0, 0, 0)
COLOR_WHITE = (255, 255, 255)

# Debug overlay palette, keyed by element kind
DEBUG_COLOR_IMAGE = (200, 200, 255)        # light blue
DEBUG_COLOR_ROW_LABEL = (255, 200, 200)    # light red
DEBUG_COLOR_COLUMN_LABEL = (200, 255, 200)  # light green
DEBUG_COLOR_PADDING = (240, 240, 240)      # light gray
DEBUG_COLOR_BORDER = (100, 100, 100)
DEBUG_BORDER_PX = 1

# Space added around the stacked lines of a label band (split evenly)
LABEL_MARGIN = 20
LABEL_LINE_SEPARATOR = "\n"

# Fonts
FONT_FILE = "DejaVuSans.ttf"
FONT_CACHE_SIZE = 8

# Debug output naming
DEBUG_SUFFIX = "_debug"

# Extensions recognized as plottable images
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".jxl"})

# Encoder settings
JPEG_QUALITY = 85
WEBP_QUALITY = 80
