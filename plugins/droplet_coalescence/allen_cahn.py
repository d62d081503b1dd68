"""
Allen-Cahn Phase Separation Integrator

A single order parameter phi (0 = water, 1 = oil) diffuses and is pulled
toward the pure phases by a double-well reaction term:

  dphi/dt = M * laplacian(phi) - K * 4*phi*(phi - 1)*(phi - 0.5)

The cubic has roots at 0, 0.5 and 1; it is positive on (0, 0.5) and
negative on (0.5, 1), so -K * reaction pushes values away from the
unstable midpoint toward 0 or 1 while diffusion rounds droplets off and
lets neighbouring droplets bridge and merge.

Boundaries are no-flux (Neumann): a cell on the edge uses its own value in
place of the missing neighbour.

Time stepping is explicit Euler. The diffusion part is stable while
M * dt <= 1/4; the defaults (M=0.5, dt=0.05) leave a factor of ten of
headroom, so speed multipliers above 10x can blow up.
"""

import numpy as np

from .params import DEFAULTS, ConfigError


def reaction(phi, out=None):
    """Double-well reaction term 4*phi*(phi-1)*(phi-0.5).

    With `out` given, computed in place as 4*phi*(phi*(phi-1.5)+0.5)
    without temporaries; `out` must not alias `phi`.
    """
    if out is None:
        return 4.0 * phi * (phi - 1.0) * (phi - 0.5)
    np.subtract(phi, 1.5, out=out)
    out *= phi
    out += 0.5
    out *= phi
    out *= 4.0
    return out


def laplacian(field, out=None, padded=None):
    """5-point laplacian with no-flux boundaries.

    Uses pad+slice (one copy) with the border filled from the edge cells,
    so each missing neighbour equals the cell itself.
    Optional `out` and `padded` buffers avoid per-step allocation.
    """
    n0, n1 = field.shape
    if out is None:
        out = np.empty_like(field)
    if padded is None:
        padded = np.empty((n0 + 2, n1 + 2), dtype=field.dtype)
    p = padded
    p[1:-1, 1:-1] = field
    p[0, 1:-1] = field[0, :]
    p[-1, 1:-1] = field[-1, :]
    p[1:-1, 0] = field[:, 0]
    p[1:-1, -1] = field[:, -1]

    np.add(p[:-2, 1:-1], p[2:, 1:-1], out=out)
    out += p[1:-1, :-2]
    out += p[1:-1, 2:]
    out -= 4.0 * field
    return out


class AllenCahn:
    """Explicit Euler integrator writing into a separate output buffer."""

    def __init__(self, size, mobility=DEFAULTS["mobility"],
                 stiffness=DEFAULTS["stiffness"],
                 base_step=DEFAULTS["base_step"]):
        self.mobility = DEFAULTS["mobility"]
        self.stiffness = DEFAULTS["stiffness"]
        self.base_step = DEFAULTS["base_step"]
        self.set_params(mobility=mobility, stiffness=stiffness,
                        base_step=base_step)
        self._alloc(size)

    def _alloc(self, size):
        # Pre-allocate work buffers to avoid per-step allocation
        self.size = size
        self._padded = np.empty((size + 2, size + 2), dtype=np.float64)
        self._lap = np.empty((size, size), dtype=np.float64)
        self._tmp = np.empty((size, size), dtype=np.float64)

    def time_step(self, speed_multiplier=1.0):
        """Effective dt for a speed multiplier (1.0 = base step)."""
        return self.base_step * speed_multiplier

    def max_stable_dt(self):
        """Largest dt for which the explicit diffusion update stays stable."""
        return 0.25 / self.mobility

    def is_stable(self, dt):
        return dt <= self.max_stable_dt()

    def step(self, current, out, dt):
        """Write current + dt * dphi/dt into `out`.

        Reads only `current`; `out` must be a different array.
        """
        if current is out:
            raise ValueError("integrator output must not alias its input")
        if current.shape[0] != self.size:
            self._alloc(current.shape[0])

        rate = laplacian(current, self._lap, self._padded)
        rate *= self.mobility

        tmp = reaction(current, self._tmp)
        tmp *= self.stiffness
        rate -= tmp

        np.multiply(rate, dt, out=out)
        out += current
        return out

    def set_params(self, mobility=None, stiffness=None, base_step=None,
                   **kwargs):
        if mobility is not None and not mobility > 0:
            raise ConfigError(f"mobility must be positive, got {mobility}")
        if stiffness is not None and not stiffness >= 0:
            raise ConfigError(f"stiffness must not be negative, got {stiffness}")
        if base_step is not None and not base_step > 0:
            raise ConfigError(f"base step must be positive, got {base_step}")
        if mobility is not None:
            self.mobility = float(mobility)
        if stiffness is not None:
            self.stiffness = float(stiffness)
        if base_step is not None:
            self.base_step = float(base_step)

    def get_params(self):
        return {
            "mobility": self.mobility,
            "stiffness": self.stiffness,
            "base_step": self.base_step,
        }
