"""
Interactive Pygame Viewer for Droplet Coalescence

The simulation runs on the Driver's background loop; this window shows
the latest completed frame, forwards slider changes to the live params
and turns clicks into droplets.

Controls:
  Mouse L     Add a droplet of the current radius at the cursor
  SPACE       Pause / Resume
  R           Restart with fresh droplets
  A           Add a droplet at a random position
  C           Clear all oil
  H           Toggle HUD overlay
  S           Save screenshot
  1-9         Select preset
  Q / ESC     Quit
"""

import os
import time
import numpy as np
import pygame

from .colormaps import oil_on_water
from .controls import ControlPanel, THEME
from .driver import Driver
from .params import (
    PRESET_ORDER, SLIDER_DEFS, SimulationParams, get_preset, preset_params,
)
from .simulator import DropletSimulator
from .snapshot import save_field_png, screenshots_dir

PANEL_WIDTH = 240

# Parameters the sliders deliver as floats but the simulation counts in cells
_INT_KEYS = ("num_droplets", "droplet_radius")


class Viewer:
    def __init__(self, width=600, height=600, sim_size=100, start_preset="default",
                 seed=None, mass_tracking="analytic"):
        self.canvas_w = width
        self.canvas_h = height
        self.sim_size = sim_size
        self.running = True
        self.paused = False
        self.show_hud = True
        self.fps_history = []

        self.preset_key = start_preset
        self.params = SimulationParams(**preset_params(start_preset))
        self.simulator = DropletSimulator(
            size=sim_size, params=self.params, seed=seed,
            mass_tracking=mass_tracking,
        )
        self.driver = Driver(self.simulator)

        # Control panel (built after pygame.init in run())
        self.panel = None
        self.sliders = {}
        self.pause_button = None

    @property
    def total_w(self):
        return self.canvas_w + PANEL_WIDTH

    def _build_panel(self):
        panel = ControlPanel(self.canvas_w, 0, PANEL_WIDTH, self.canvas_h)
        self.sliders = {}
        section = None
        for sdef in SLIDER_DEFS:
            if sdef["section"] != section:
                section = sdef["section"]
                panel.add_section(section)
            self.sliders[sdef["key"]] = panel.add_slider(
                sdef["label"], sdef["min"], sdef["max"],
                self.params.get_params()[sdef["key"]],
                fmt=sdef.get("fmt", ".2f"), step=sdef.get("step"),
                on_change=self._make_param_callback(sdef["key"]),
            )

        panel.add_section("ACTIONS")
        panel.add_button("Restart  [R]", on_click=self._on_reset)
        panel.add_button("Add Oil  [A]", on_click=self._on_add_oil)
        panel.add_button("Clear  [C]", on_click=self._on_clear)
        self.pause_button = panel.add_button("Pause  [SPACE]", on_click=self._toggle_pause)
        panel.add_spacer(4)
        panel.add_button("Screenshot  [S]", on_click=self._save_screenshot)
        self.panel = panel

    def _sync_sliders(self):
        values = self.params.get_params()
        for key, slider in self.sliders.items():
            slider.set_value(values[key])

    def _make_param_callback(self, key):
        """Callback writing one slider value into the live params.

        Droplet count and radius apply on the next restart; speed applies
        on the very next tick.
        """
        def callback(val):
            if key in _INT_KEYS:
                val = int(round(val))
            self.simulator.set_params(**{key: val})
        return callback

    def _apply_preset(self, key):
        if get_preset(key) is None:
            return
        self.preset_key = key
        self.simulator.set_params(**preset_params(key))
        self._sync_sliders()
        self._on_reset()

    def _on_reset(self):
        self.driver.reset()
        self._set_paused(False)

    def _on_clear(self):
        self.driver.clear()
        self._set_paused(False)

    def _on_add_oil(self):
        self.driver.add_random_droplet()

    def _toggle_pause(self):
        self._set_paused(not self.paused)

    def _set_paused(self, paused):
        if paused and self.driver.running:
            self.driver.stop()
        elif not paused and not self.driver.running:
            self.driver.start()
        self.paused = paused
        if self.pause_button is not None:
            self.pause_button.active = paused
            self.pause_button.label = "Resume  [SPACE]" if paused else "Pause  [SPACE]"

    def canvas_to_cell(self, mx, my):
        """Window pixel -> grid cell (x, y)."""
        sx = int(mx * self.sim_size / self.canvas_w)
        sy = int(my * self.sim_size / self.canvas_h)
        return min(sx, self.sim_size - 1), min(sy, self.sim_size - 1)

    def _handle_click(self, pos):
        mx, my = pos
        if mx >= self.canvas_w or my >= self.canvas_h:
            return
        sx, sy = self.canvas_to_cell(mx, my)
        self.driver.add_droplet(sx, sy)

    def _render_frame(self):
        """Latest field as a canvas-sized surface (cells drawn as blocks)."""
        frame = self.driver.latest_frame
        if frame is None:
            frame = self.simulator.snapshot()
        # oil_on_water is indexed [x, y], which is surfarray's layout
        surface = pygame.surfarray.make_surface(oil_on_water(frame))
        return pygame.transform.scale(surface, (self.canvas_w, self.canvas_h))

    def _draw_hud(self, screen, fps):
        if not self.show_hud:
            return
        stats = self.simulator.stats
        state = "PAUSED" if self.paused else f"{fps:.0f} fps"
        line = (f"{self.preset_key}  |  step {stats['generation']}  |  "
                f"mass {stats['mass']:.1f} / {stats['target_mass']:.1f}  |  {state}")
        text = self.hud_font.render(line, True, (20, 40, 55))
        screen.blit(text, (10, 8))

    def _save_screenshot(self):
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        path = os.path.join(screenshots_dir(), f"droplets_{self.preset_key}_{timestamp}.png")
        save_field_png(self.simulator.snapshot(), path,
                       scale=max(1, self.canvas_w // self.sim_size))
        print(f"[Droplets] Screenshot saved: {path}")

    def run(self):
        """Main viewer loop."""
        pygame.init()

        screen = pygame.display.set_mode((self.total_w, self.canvas_h))
        pygame.display.set_caption("Oil Droplet Coalescence")
        clock = pygame.time.Clock()

        self.hud_font = pygame.font.SysFont("menlo", 13)
        self.panel_font = pygame.font.SysFont("menlo", 12)

        self._build_panel()
        self.driver.initialize()

        try:
            while self.running:
                frame_start = time.time()

                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.running = False
                        continue
                    if event.type == pygame.KEYDOWN:
                        self._handle_keydown(event)
                        continue
                    if self.panel and self.panel.handle_event(event):
                        continue
                    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                        self._handle_click(event.pos)

                screen.fill(THEME["bg"])
                screen.blit(self._render_frame(), (0, 0))

                frame_time = time.time() - frame_start
                self.fps_history.append(frame_time)
                if len(self.fps_history) > 30:
                    self.fps_history.pop(0)
                avg_fps = 1.0 / max(np.mean(self.fps_history), 0.001)
                self._draw_hud(screen, avg_fps)

                self.panel.draw(screen, self.panel_font)
                pygame.display.flip()
                clock.tick(60)
        finally:
            self.driver.stop()
            pygame.quit()

    def _handle_keydown(self, event):
        key = event.key

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_SPACE:
            self._toggle_pause()

        elif key == pygame.K_r:
            self._on_reset()

        elif key == pygame.K_a:
            self._on_add_oil()

        elif key == pygame.K_c:
            self._on_clear()

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        elif key == pygame.K_s:
            self._save_screenshot()

        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            if idx < len(PRESET_ORDER):
                self._apply_preset(PRESET_ORDER[idx])
