"""
Double-Buffered Phase Field Storage

The integrator reads `current` and writes `next`; the two are then swapped
by exchanging references. Updating a single buffer in place would let a
cell's Laplacian see neighbours that were already advanced this step.

Fields are indexed field[x, y], matching how grid coordinates are passed
to the stamping and add-droplet commands.
"""

import threading
import numpy as np

from .params import validate_size


def allocate_field(size):
    """Return a size x size field of water (all zeros)."""
    size = validate_size(size)
    return np.zeros((size, size), dtype=np.float64)


class FieldBuffers:
    """Owns the `current` and `next` fields of one simulation."""

    def __init__(self, size):
        self.size = validate_size(size)
        self._lock = threading.Lock()
        self.current = allocate_field(self.size)
        self.next = allocate_field(self.size)

    def reallocate(self):
        """Replace both buffers with fresh all-zero fields."""
        current = allocate_field(self.size)
        nxt = allocate_field(self.size)
        with self._lock:
            self.current, self.next = current, nxt

    def swap(self):
        """Make `next` the new `current` in a single step."""
        with self._lock:
            self.current, self.next = self.next, self.current

    def snapshot(self):
        """Copy of `current`, never observed half-swapped."""
        with self._lock:
            return self.current.copy()

    def mass(self):
        return float(self.current.sum())
