"""
Pixel Grid Editor - Engine

Layer/group model with incremental compositing, bounded undo/redo history
and the raster tool algorithms of a pixel-art editor.
"""

__version__ = '1.0.0'
