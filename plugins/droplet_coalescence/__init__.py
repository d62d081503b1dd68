"""
Oil droplets coalescing in water: a 2D Allen-Cahn phase-field simulator.

    from droplet_coalescence import DropletSimulator, Driver
"""

from .driver import Driver
from .params import ConfigError, SimulationParams
from .simulator import DropletSimulator

__all__ = ["ConfigError", "Driver", "DropletSimulator", "SimulationParams"]
