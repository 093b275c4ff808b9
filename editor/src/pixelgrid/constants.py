"""
Pixel Grid Editor - Constants and Configuration

This module contains all constant values used throughout the engine:
- Color token sentinel and parse cache sizing
- Grid size defaults
- Layer/group naming defaults
- History capacity and debounce timings
"""

# ======================================================================
# COLOR TOKENS
# ======================================================================
# The empty string is the transparent sentinel. Every "absent" pixel in a
# layer buffer or the composite buffer holds this value.
TRANSPARENT = ''

# Maximum number of parsed color tokens kept by ColorBlend (FIFO eviction)
COLOR_CACHE_SIZE = 1000

# ======================================================================
# GRID
# ======================================================================
DEFAULT_GRID_SIZE = 16

# Grid sizes offered by the editor's size selector
GRID_SIZES = (8, 16, 24, 32, 48, 64)

# ======================================================================
# LAYER DEFAULTS
# ======================================================================
DEFAULT_LAYER_NAME = 'Layer'
DEFAULT_GROUP_NAME = 'Group'
PASTED_LAYER_NAME = 'Pasted Layer'
DUPLICATE_SUFFIX = ' copy'

DEFAULT_OPACITY = 1.0
MIN_OPACITY = 0.0
MAX_OPACITY = 1.0

# Node properties that may be changed through LayerTree.set_property
EDITABLE_PROPERTIES = ('name', 'visible', 'opacity', 'expanded')

# Properties whose change alters visible pixels
COMPOSITE_PROPERTIES = ('visible', 'opacity')

# ======================================================================
# HISTORY
# ======================================================================
HISTORY_MAX_SIZE = 50

# Default quiet period for HistoryManager.push_state_debounced (ms)
DEFAULT_DEBOUNCE_MS = 100

# Quiet period used when committing brush strokes and shape drags (ms)
STROKE_DEBOUNCE_MS = 300

# ======================================================================
# PROJECT FILES
# ======================================================================
PROJECT_GRID_SIZE_KEY = 'gridSize'
PROJECT_SNAPSHOT_KEY = 'layerManagerSnapshot'
