"""
Oil-on-Water Colour Mapping

Maps a phase field in [0, 1] to RGB: light blue water everywhere, with
amber oil alpha-blended on top at opacity min(1, value). A cell at 0 is
pure water colour, a cell at 1 is pure oil colour.

Arrays keep the field's [x, y] indexing (shape (N, N, 3)); use
`to_image_array` before handing a frame to an image writer that expects
rows first.
"""

import numpy as np

WATER_RGB = (173, 216, 230)   # #ADD8E6
OIL_RGB = (255, 180, 0)


def _blend(field):
    alpha = np.clip(field, 0.0, 1.0)[..., None]
    water = np.asarray(WATER_RGB, dtype=np.float32)
    oil = np.asarray(OIL_RGB, dtype=np.float32)
    return water + (oil - water) * alpha.astype(np.float32)


def oil_on_water(field):
    """(N, N, 3) uint8 RGB frame of `field`."""
    return np.rint(_blend(field)).astype(np.uint8)


def render_float(field):
    """(N, N, 3) float32 RGB frame of `field` in [0, 1]."""
    return _blend(field) / 255.0


def upscale(rgb, factor):
    """Draw every cell as a factor x factor block."""
    if factor <= 1:
        return rgb
    return np.repeat(np.repeat(rgb, factor, axis=0), factor, axis=1)


def to_image_array(rgb):
    """Swap [x, y] frame to row-major (H, W, 3) for image writers."""
    return np.ascontiguousarray(rgb.swapaxes(0, 1))
