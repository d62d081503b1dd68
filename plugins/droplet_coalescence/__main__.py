"""
Droplet Coalescence - Entry Point

Usage:
    python -m droplet_coalescence [preset] [options]

Options:
    --size N          Grid size (default 100)
    --drops N         Number of initial droplets (overrides preset)
    --radius R        Droplet radius in cells (overrides preset)
    --speed PCT       Speed percentage, 100 = base time step (overrides preset)
    --seed S          Random seed for droplet placement
    --window WxH      Viewer canvas size (default 600x600)
    --exact-mass      Book the true stamped mass for added droplets
    --snap STEPS      Headless: run STEPS steps, save a PNG, exit
    --out PATH        PNG path for --snap
    --list            List presets

Examples:
    python -m droplet_coalescence
    python -m droplet_coalescence emulsion --size 150
    python -m droplet_coalescence pair --snap 2000 --seed 3
"""

import os
import sys

from .params import (
    ConfigError, PRESET_ORDER, SimulationParams, list_presets, preset_params,
)
from .simulator import DropletSimulator
from .snapshot import save_field_png, screenshots_dir


def snap(preset, sim_size, steps, overrides, seed=None, mass_tracking="analytic",
         out=None):
    """Headless mode: run N steps, save screenshot, exit."""
    params = SimulationParams(**{**preset_params(preset), **overrides})
    sim = DropletSimulator(size=sim_size, params=params, seed=seed,
                           mass_tracking=mass_tracking)
    sim.initialize()
    start_mass = sim.target_mass

    print(f"  {preset}: running {steps} steps...", end="", flush=True)
    sim.step_n(steps)

    if out is None:
        out = os.path.join(screenshots_dir(), f"droplets_{preset}.png")
    save_field_png(sim.snapshot(), out, scale=max(1, 600 // sim_size))
    stats = sim.stats
    print(f" saved: {out}")
    print(f"  mass {start_mass:.2f} -> {stats['mass']:.2f} "
          f"(drift {stats['drift']:+.2e}), oil cells {stats['oil_pct']:.1f}%")
    return out


_VALUE_OPTIONS = {
    "--size": "size", "--drops": "num_droplets", "--radius": "droplet_radius",
    "--speed": "speed", "--seed": "seed", "--window": "window",
    "--snap": "snap", "--out": "out",
}


def main(argv=None):
    preset = "default"
    opts = {}
    mass_tracking = "analytic"

    args = sys.argv[1:] if argv is None else list(argv)
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in _VALUE_OPTIONS and i + 1 < len(args):
            opts[_VALUE_OPTIONS[arg]] = args[i + 1]
            i += 2
        elif arg == "--exact-mass":
            mass_tracking = "exact"
            i += 1
        elif arg == "--list":
            print("\nAvailable presets:")
            for key, name, desc in list_presets():
                print(f"    {key:12s} {name:12s} {desc}")
            print()
            return 0
        elif arg in ("--help", "-h"):
            print(__doc__)
            return 0
        elif arg in PRESET_ORDER:
            preset = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return 2

    try:
        sim_size = int(opts.get("size", 100))
        seed = int(opts["seed"]) if "seed" in opts else None
        overrides = {}
        if "num_droplets" in opts:
            overrides["num_droplets"] = int(opts["num_droplets"])
        if "droplet_radius" in opts:
            overrides["droplet_radius"] = int(opts["droplet_radius"])
        if "speed" in opts:
            overrides["speed"] = float(opts["speed"])
        win_w, win_h = (int(p) for p in opts.get("window", "600x600").split("x"))
        snap_steps = int(opts.get("snap", 0))
    except ValueError as e:
        print(f"Invalid option value: {e}")
        return 2
    if "snap" in opts and snap_steps <= 0:
        print(f"Invalid option value: --snap needs a positive step count, got {snap_steps}")
        return 2

    try:
        if snap_steps > 0:
            print(f"Headless snap mode: {preset} @ {sim_size}x{sim_size}, {snap_steps} steps")
            snap(preset, sim_size, snap_steps, overrides, seed=seed,
                 mass_tracking=mass_tracking, out=opts.get("out"))
            return 0

        # pygame is only needed for the interactive window
        from .viewer import Viewer

        print("Starting Droplet Coalescence Viewer")
        print(f"  Preset: {preset}")
        print(f"  Grid: {sim_size}x{sim_size}")
        print(f"  Window: {win_w}x{win_h}")
        print()

        viewer = Viewer(width=win_w, height=win_h, sim_size=sim_size,
                        start_preset=preset, seed=seed, mass_tracking=mass_tracking)
        if overrides:
            viewer.simulator.set_params(**overrides)
        viewer.run()
    except ConfigError as e:
        print(f"Invalid configuration: {e}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
