#!/usr/bin/env python3
"""
Tests for the viewer wiring (no window is opened).

Verifies:
1. Slider callbacks write whole cells for count/radius and floats for speed
2. Canvas pixels map to grid cells; clicks add droplets
3. Presets update params and sliders, then restart the run
4. Panel events reach the right slider
"""

import math

import pytest

pygame = pytest.importorskip("pygame")

from droplet_coalescence.driver import STOPPED
from droplet_coalescence.viewer import Viewer


def _make_viewer(**kwargs):
    return Viewer(width=600, height=600, sim_size=20, seed=0, **kwargs)


def test_slider_callbacks():
    print("Testing slider callbacks...")
    viewer = _make_viewer()
    viewer._make_param_callback("droplet_radius")(7.6)
    viewer._make_param_callback("num_droplets")(12.2)
    viewer._make_param_callback("speed")(245.0)
    assert viewer.params.droplet_radius == 8
    assert viewer.params.num_droplets == 12
    assert viewer.params.speed == 245.0
    assert viewer.simulator.params is viewer.params, "Simulator reads the live params"
    print("  ✓ Count and radius rounded to whole cells")


def test_canvas_to_cell():
    viewer = _make_viewer()
    assert viewer.canvas_to_cell(0, 0) == (0, 0)
    assert viewer.canvas_to_cell(599, 599) == (19, 19)
    assert viewer.canvas_to_cell(300, 45) == (10, 1)
    assert viewer.canvas_to_cell(600, 600) == (19, 19), "Far edge clamps to the last cell"


def test_click_adds_droplet():
    print("Testing click to add oil...")
    viewer = _make_viewer(start_preset="empty")
    viewer.simulator.initialize()
    radius = viewer.params.droplet_radius

    viewer._handle_click((300, 300))
    assert math.isclose(viewer.simulator.target_mass, math.pi * radius ** 2)
    assert viewer.simulator.field[10, 10] == 1.0

    viewer._handle_click((650, 300))
    assert math.isclose(viewer.simulator.target_mass, math.pi * radius ** 2), \
        "Clicks on the panel side are not droplets"
    print("  ✓ Click stamps a droplet at the matching cell")


def test_apply_preset():
    print("Testing preset selection...")
    viewer = _make_viewer()
    viewer._build_panel()
    try:
        viewer._apply_preset("pair")
        assert viewer.preset_key == "pair"
        assert viewer.params.num_droplets == 2
        assert viewer.params.droplet_radius == 12
        assert viewer.sliders["droplet_radius"].value == 12
        assert viewer.driver.running, "Preset restarts the run"
        assert not viewer.paused

        viewer._apply_preset("no-such-preset")
        assert viewer.preset_key == "pair"
    finally:
        viewer.driver.stop()
    print("  ✓ Preset params applied and run restarted")


def test_pause_toggle():
    viewer = _make_viewer()
    viewer._build_panel()
    viewer.simulator.initialize()
    try:
        viewer.driver.start()
        viewer._toggle_pause()
        assert viewer.paused and viewer.driver.state == STOPPED
        assert viewer.pause_button.active
        assert viewer.pause_button.label.startswith("Resume")
        viewer._toggle_pause()
        assert not viewer.paused and viewer.driver.running
    finally:
        viewer.driver.stop()


def test_panel_event_reaches_slider():
    viewer = _make_viewer()
    viewer._build_panel()
    slider = viewer.sliders["speed"]
    pos = (viewer.canvas_w + slider.track_x + slider.track_w, slider.track_y)
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": pos, "button": 1})
    assert viewer.panel.handle_event(event)
    assert slider.value == 500
    assert viewer.params.speed == 500.0

    outside = pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": (10, 10), "button": 1})
    assert not viewer.panel.handle_event(outside), "Canvas clicks are left to the viewer"


if __name__ == "__main__":
    print("\n=== Testing Viewer Wiring ===\n")

    test_slider_callbacks()
    test_click_adds_droplet()
    test_apply_preset()

    print("\n✓ All tests passed!\n")
