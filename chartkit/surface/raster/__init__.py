from .canvas import blend_mask, clip_mask, new_canvas
from .surface import RasterSurface
from .text import text_mask, text_size

__all__ = [
    "RasterSurface",
    "blend_mask",
    "clip_mask",
    "new_canvas",
    "text_mask",
    "text_size",
]
