"""
DropletSimulator: headless simulation core

Owns everything one run needs: the double-buffered field, the live
parameters, the integrator and the tracked total oil mass. There is no
pygame dependency; the viewer and the command line both drive this class
(through the Driver for continuous running).

Usage:
    from droplet_coalescence.simulator import DropletSimulator
    sim = DropletSimulator(size=100, seed=1)
    sim.initialize()
    sim.tick()
    frame = sim.render_float()  # (N, N, 3) float32 [0, 1], indexed [x, y]

All state changes happen under `self.lock`, so a stamp requested from
another thread is applied between ticks, never during one.
"""

import threading
import numpy as np

from .allen_cahn import AllenCahn
from .colormaps import render_float
from .conservation import conserve_mass, mass_drift
from .grid import FieldBuffers
from .params import (
    DEFAULTS, ConfigError, SimulationParams, validate_size, validate_radius,
)
from .stamper import stamp_droplet, disk_area

MASS_TRACKING_MODES = ("analytic", "exact")


class DropletSimulator:
    """Oil droplets coalescing in water on an N x N grid.

    Args:
        size: Grid dimension N (positive integer)
        params: SimulationParams instance shared with the controls;
            a default one is created when omitted
        mass_tracking: How manual additions update the target mass.
            "analytic" books pi * r^2 per droplet; "exact" books the
            mass the stamp actually added after saturation and clipping
        seed: Seed for droplet placement (None = unpredictable)
        integrator: AllenCahn instance, for non-default constants
    """

    def __init__(self, size=DEFAULTS["size"], params=None,
                 mass_tracking="analytic", seed=None, integrator=None):
        self.size = validate_size(size)
        if mass_tracking not in MASS_TRACKING_MODES:
            raise ConfigError(f"unknown mass tracking mode: {mass_tracking!r}")
        self.mass_tracking = mass_tracking
        self.params = params if params is not None else SimulationParams()
        self.integrator = integrator if integrator is not None else AllenCahn(self.size)
        self.rng = np.random.default_rng(seed)
        self.lock = threading.RLock()

        self.buffers = FieldBuffers(self.size)
        self.target_mass = 0.0
        self.generation = 0
        self._warned_unstable = False

    @property
    def field(self):
        """The live `current` field."""
        return self.buffers.current

    def initialize(self):
        """Fresh buffers, random droplets from the live params, retarget mass."""
        num = self.params.num_droplets
        radius = self.params.droplet_radius
        with self.lock:
            self.buffers.reallocate()
            field = self.buffers.current
            for _ in range(num):
                x = int(self.rng.integers(0, self.size))
                y = int(self.rng.integers(0, self.size))
                stamp_droplet(field, x, y, radius)
            self.target_mass = self.buffers.mass()
            self.generation = 0

    reset = initialize

    def clear(self):
        """All water, zero target mass."""
        with self.lock:
            self.buffers.reallocate()
            self.target_mass = 0.0
            self.generation = 0

    def tick(self):
        """Advance one step: integrate, conserve mass, swap. Returns `current`."""
        with self.lock:
            dt = self.integrator.time_step(self.params.speed_multiplier)
            if not self.integrator.is_stable(dt) and not self._warned_unstable:
                print(f"[Droplets] Warning: dt={dt:.4f} exceeds stable limit "
                      f"{self.integrator.max_stable_dt():.4f}; lower the speed")
                self._warned_unstable = True
            nxt = self.buffers.next
            self.integrator.step(self.buffers.current, nxt, dt)
            conserve_mass(nxt, self.target_mass)
            self.buffers.swap()
            self.generation += 1
            return self.buffers.current

    def step_n(self, n):
        """Advance n steps. Returns final field."""
        for _ in range(n):
            self.tick()
        return self.buffers.current

    def add_droplet(self, x, y, radius=None):
        """Stamp a droplet onto the live field and book its mass.

        Returns the mass added to the target (see `mass_tracking`).
        Off-grid parts of the disk are clipped; an invalid radius raises
        ConfigError and leaves the field untouched.
        """
        if radius is None:
            radius = self.params.droplet_radius
        else:
            radius = validate_radius(radius)
        with self.lock:
            added = stamp_droplet(self.buffers.current, x, y, radius)
            booked = disk_area(radius) if self.mass_tracking == "analytic" else added
            self.target_mass += booked
            return booked

    def add_random_droplet(self, radius=None):
        """Add a droplet at a uniformly random cell. Returns (x, y)."""
        x = int(self.rng.integers(0, self.size))
        y = int(self.rng.integers(0, self.size))
        self.add_droplet(x, y, radius)
        return x, y

    def set_params(self, **params):
        """Update simulation and integrator parameters.

        Everything is validated before anything changes. Keys passed as
        None are ignored.
        """
        sim_keys = ("num_droplets", "droplet_radius", "speed")
        ac_keys = ("mobility", "stiffness", "base_step")
        # None leaves a parameter unchanged, as in SimulationParams.set_params
        params = {k: v for k, v in params.items() if v is not None}
        sim_params = {k: v for k, v in params.items() if k in sim_keys}
        ac_params = {k: v for k, v in params.items() if k in ac_keys}
        unknown = set(params) - set(sim_keys) - set(ac_keys)
        if unknown:
            raise ConfigError(f"unknown parameter(s): {', '.join(sorted(unknown))}")

        # Dry-run both against scratch copies so a rejected value changes nothing
        SimulationParams(**{**self.params.get_params(), **sim_params})
        AllenCahn(1, **{**self.integrator.get_params(), **ac_params})

        self.params.set_params(**sim_params)
        self.integrator.set_params(**ac_params)

    def get_params(self):
        return {**self.params.get_params(), **self.integrator.get_params()}

    def snapshot(self):
        return self.buffers.snapshot()

    def render_float(self):
        """Colour-mapped snapshot, (N, N, 3) float32 [0, 1] indexed [x, y]."""
        return render_float(self.snapshot())

    @property
    def stats(self):
        """Return current field statistics."""
        field = self.snapshot()
        return {
            "generation": self.generation,
            "mass": float(field.sum()),
            "target_mass": self.target_mass,
            "drift": mass_drift(field, self.target_mass),
            "mean": float(field.mean()),
            "max": float(field.max()),
            "oil_pct": float((field > 0.5).sum()) / field.size * 100,
        }
