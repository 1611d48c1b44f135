"""
Room layer composition.
"""

from .layer_compositor import LayerCompositor, ComposedLayer, ComposedRoom

__all__ = [
    "LayerCompositor",
    "ComposedLayer",
    "ComposedRoom",
]
