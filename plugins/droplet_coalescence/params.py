"""
Simulation Parameters and Presets

Runtime parameters are held in a live SimulationParams object that the
controls mutate and the simulator re-reads: droplet count and radius on
every (re)initialize, speed on every tick.

Each preset defines a starting configuration known to produce a pleasant
coalescence sequence on the default 100x100 grid.
"""

import numbers


class ConfigError(ValueError):
    """Invalid grid size or simulation parameter."""


DEFAULTS = {
    "size": 100,
    "num_droplets": 10,
    "droplet_radius": 5,
    "speed": 100.0,       # percent, 100 -> dt multiplier 1.0
    "mobility": 0.5,      # M: diffusion strength, higher merges faster
    "stiffness": 0.05,    # K: double-well (surface tension) strength
    "base_step": 0.05,    # explicit Euler step at speed 100%
}


def validate_size(size):
    """Return size as int, or raise ConfigError if it is not a positive integer."""
    if isinstance(size, bool) or not isinstance(size, numbers.Integral):
        raise ConfigError(f"grid size must be a positive integer, got {size!r}")
    if size <= 0:
        raise ConfigError(f"grid size must be a positive integer, got {size}")
    return int(size)


def validate_radius(radius):
    if isinstance(radius, bool) or not isinstance(radius, numbers.Real):
        raise ConfigError(f"droplet radius must be a positive number, got {radius!r}")
    if radius <= 0:
        raise ConfigError(f"droplet radius must be positive, got {radius}")
    return radius


def _validate_cell_radius(radius):
    """Radius in whole cells; sliders deliver floats."""
    cells = int(round(validate_radius(radius)))
    if cells < 1:
        raise ConfigError(f"droplet radius must be at least 1 cell, got {radius}")
    return cells


def _validate_count(count):
    if isinstance(count, bool) or not isinstance(count, numbers.Integral):
        raise ConfigError(f"droplet count must be an integer, got {count!r}")
    if count < 0:
        raise ConfigError(f"droplet count must not be negative, got {count}")
    return int(count)


def _validate_speed(speed):
    if isinstance(speed, bool) or not isinstance(speed, numbers.Real):
        raise ConfigError(f"speed must be a positive percentage, got {speed!r}")
    if not speed > 0:
        raise ConfigError(f"speed must be a positive percentage, got {speed}")
    return float(speed)


class SimulationParams:
    """Live droplet count, droplet radius and speed percentage.

    Not snapshotted: the simulator holds a reference and reads the current
    values whenever it needs them, so slider changes take effect on the
    next initialize (count, radius) or the next tick (speed).
    """

    def __init__(self, num_droplets=DEFAULTS["num_droplets"],
                 droplet_radius=DEFAULTS["droplet_radius"],
                 speed=DEFAULTS["speed"]):
        self.num_droplets = _validate_count(num_droplets)
        self.droplet_radius = _validate_cell_radius(droplet_radius)
        self.speed = _validate_speed(speed)

    @property
    def speed_multiplier(self):
        """Speed as a time step multiplier (100% -> 1.0)."""
        return self.speed / 100.0

    def set_params(self, num_droplets=None, droplet_radius=None, speed=None,
                   **kwargs):
        """Update any subset of parameters.

        All values are validated before any is assigned, so a rejected
        update leaves every parameter as it was.
        """
        updates = {}
        if num_droplets is not None:
            updates["num_droplets"] = _validate_count(num_droplets)
        if droplet_radius is not None:
            updates["droplet_radius"] = _validate_cell_radius(droplet_radius)
        if speed is not None:
            updates["speed"] = _validate_speed(speed)
        for key, value in updates.items():
            setattr(self, key, value)

    def get_params(self):
        return {
            "num_droplets": self.num_droplets,
            "droplet_radius": self.droplet_radius,
            "speed": self.speed,
        }

    def __repr__(self):
        return (f"SimulationParams(num_droplets={self.num_droplets}, "
                f"droplet_radius={self.droplet_radius}, speed={self.speed})")


# Slider definitions for the control panel.
SLIDER_DEFS = [
    {"key": "num_droplets", "label": "Droplets", "section": "INITIAL STATE",
     "min": 0, "max": 40, "default": DEFAULTS["num_droplets"], "fmt": ".0f",
     "step": 1},
    {"key": "droplet_radius", "label": "Radius", "section": "INITIAL STATE",
     "min": 1, "max": 20, "default": DEFAULTS["droplet_radius"], "fmt": ".0f",
     "step": 1},
    {"key": "speed", "label": "Speed %", "section": "DYNAMICS",
     "min": 10, "max": 500, "default": DEFAULTS["speed"], "fmt": ".0f",
     "step": 5},
]


PRESETS = {
    "default": {
        "name": "Default",
        "description": "A handful of mid-sized droplets",
        "num_droplets": 10, "droplet_radius": 5, "speed": 100,
    },
    "emulsion": {
        "name": "Emulsion",
        "description": "Many small droplets ripening into a few large ones",
        "num_droplets": 40, "droplet_radius": 3, "speed": 150,
    },
    "pair": {
        "name": "Pair",
        "description": "Two large droplets, slow merge",
        "num_droplets": 2, "droplet_radius": 12, "speed": 100,
    },
    "slick": {
        "name": "Slick",
        "description": "Dense overlapping droplets forming a connected slick",
        "num_droplets": 25, "droplet_radius": 8, "speed": 200,
    },
    "empty": {
        "name": "Empty",
        "description": "Clean water, add oil by clicking",
        "num_droplets": 0, "droplet_radius": 5, "speed": 100,
    },
}

PRESET_ORDER = ["default", "emulsion", "pair", "slick", "empty"]

_PRESET_PARAM_KEYS = ("num_droplets", "droplet_radius", "speed")


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def preset_params(name):
    """Return the SimulationParams keyword arguments of a preset.

    Raises ConfigError for an unknown preset name.
    """
    preset = get_preset(name)
    if preset is None:
        raise ConfigError(f"unknown preset: {name!r}")
    return {k: preset[k] for k in _PRESET_PARAM_KEYS}


def list_presets():
    """Return list of (key, name, description) for all presets."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER if k in PRESETS]
