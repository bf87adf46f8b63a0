"""Shared default values for user-facing configuration settings."""
from collage_plot.type_defs import LabelAlignment

# Grid
DEFAULT_ROWS = 1
DEFAULT_OUTPUT = "output.png"

# Labels
DEFAULT_ALIGNMENT: LabelAlignment = "center"
DEFAULT_FONT_SIZE = 16.0

# Bands reserved for labels, grown automatically to fit label text
DEFAULT_TOP_PADDING = 40
DEFAULT_LEFT_PADDING = 40

# Diagnostics
DEFAULT_DEBUG_MODE = False
