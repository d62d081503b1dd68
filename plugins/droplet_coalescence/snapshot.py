"""
PNG snapshots of the phase field (no pygame needed).
"""

import os
from PIL import Image

from .colormaps import oil_on_water, upscale, to_image_array


def screenshots_dir():
    """<repo>/screenshots, created on first use."""
    path = os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
        "screenshots"
    )
    os.makedirs(path, exist_ok=True)
    return path


def save_field_png(field, path, scale=6, latest=True):
    """Render `field` oil-on-water, each cell as a scale x scale block.

    Also writes latest.png next to `path` unless `latest` is False.
    Returns the path written.
    """
    rgb = upscale(oil_on_water(field), scale)
    img = Image.fromarray(to_image_array(rgb))
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    img.save(path)
    if latest:
        img.save(os.path.join(parent, "latest.png"))
    return path
