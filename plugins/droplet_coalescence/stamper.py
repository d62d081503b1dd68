"""
Droplet Stamping

Paints a solid disk of oil onto a field. Addition saturates at 1: a cell
that already holds oil receives only what still fits, so overlapping
droplets never push a cell past pure oil.
"""

import math
import numpy as np


def disk_mask(size, cx, cy, radius):
    """Boolean mask of cells within `radius` of (cx, cy) on a size x size grid.

    Cells whose centre lies outside the grid simply are not part of the
    mask, so disks hanging over an edge are clipped.
    """
    X, Y = np.ogrid[:size, :size]
    dist = np.sqrt((X - cx) ** 2 + (Y - cy) ** 2)
    return dist <= radius


def stamp_droplet(field, cx, cy, radius, value=1.0):
    """Add `value` of oil to every cell within `radius` of (cx, cy).

    Mutates `field` in place, clamping each touched cell to at most 1.
    Returns the mass actually added, which is less than the disk area when
    the disk overlaps existing oil or the grid edge.
    """
    mask = disk_mask(field.shape[0], cx, cy, radius)
    before = field[mask]
    after = np.minimum(1.0, before + value)
    field[mask] = after
    return float((after - before).sum())


def disk_area(radius):
    """Analytic droplet mass estimate, pi * r^2."""
    return math.pi * radius * radius
