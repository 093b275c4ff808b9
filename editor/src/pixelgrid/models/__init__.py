"""
Pixel Grid Editor - Data Models

This module contains the data model classes for the layer tree.
This is the MODEL layer: pure data, no UI logic.

Public API: Import LayerTree, Layer, Group from models.layer_tree
The models/layer_tree/_internal/ subdirectory contains internal implementation only.
"""
