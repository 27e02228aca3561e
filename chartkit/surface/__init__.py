from .base import Style, Surface, SurfaceKind, TextStyle
from .raster import RasterSurface
from .vector import SceneNode, VectorSurface, path_data

__all__ = [
    "RasterSurface",
    "SceneNode",
    "Style",
    "Surface",
    "SurfaceKind",
    "TextStyle",
    "VectorSurface",
    "path_data",
]
