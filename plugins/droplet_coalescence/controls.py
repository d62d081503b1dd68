"""
Control Panel Widgets for the Droplet Viewer

Sliders, buttons and section headers drawn directly with pygame onto a
side panel surface.
"""

import pygame


THEME = {
    "bg": (14, 22, 30),
    "panel": (22, 32, 42),
    "track": (48, 62, 76),
    "track_fill": (255, 180, 0),
    "handle": (210, 220, 230),
    "handle_active": (255, 255, 255),
    "text": (180, 195, 205),
    "text_bright": (235, 242, 248),
    "text_dim": (105, 120, 132),
    "button": (38, 52, 66),
    "button_hover": (52, 70, 88),
    "button_active": (200, 140, 0),
    "divider": (40, 54, 68),
}


class Slider:
    """Horizontal slider with label and value readout."""

    height = 36

    def __init__(self, x, y, width, label, min_val, max_val, value,
                 fmt=".2f", step=None, on_change=None):
        self.x = x
        self.y = y
        self.width = width
        self.label = label
        self.min_val = min_val
        self.max_val = max_val
        self.value = value
        self.fmt = fmt
        self.step = step
        self.on_change = on_change
        self.dragging = False

        self.track_x = x + 8
        self.track_w = width - 16
        self.track_y = y + 24

    def _val_to_x(self, val):
        frac = (val - self.min_val) / (self.max_val - self.min_val)
        return self.track_x + frac * self.track_w

    def _x_to_val(self, px):
        frac = min(1.0, max(0.0, (px - self.track_x) / self.track_w))
        val = self.min_val + frac * (self.max_val - self.min_val)
        if self.step:
            val = self.min_val + round((val - self.min_val) / self.step) * self.step
        return val

    def _drag_to(self, px):
        val = self._x_to_val(px)
        if val != self.value:
            self.value = val
            if self.on_change:
                self.on_change(val)

    def handle_event(self, event):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            mx, my = event.pos
            if (self.track_x - 6 <= mx <= self.track_x + self.track_w + 6
                    and abs(my - self.track_y) <= 12):
                self.dragging = True
                self._drag_to(mx)
                return True
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False
        elif event.type == pygame.MOUSEMOTION and self.dragging:
            self._drag_to(event.pos[0])
            return True
        return False

    def set_value(self, val):
        self.value = max(self.min_val, min(self.max_val, val))

    def draw(self, surface, font):
        surface.blit(font.render(self.label, True, THEME["text"]),
                     (self.x + 8, self.y + 2))
        val_surf = font.render(f"{self.value:{self.fmt}}", True, THEME["text_bright"])
        surface.blit(val_surf, (self.x + self.width - val_surf.get_width() - 8, self.y + 2))

        pygame.draw.rect(surface, THEME["track"],
                         pygame.Rect(self.track_x, self.track_y - 2, self.track_w, 4),
                         border_radius=2)
        hx = self._val_to_x(self.value)
        pygame.draw.rect(surface, THEME["track_fill"],
                         pygame.Rect(self.track_x, self.track_y - 2, hx - self.track_x, 4),
                         border_radius=2)
        color = THEME["handle_active"] if self.dragging else THEME["handle"]
        pygame.draw.circle(surface, color, (int(hx), self.track_y), 7)


class Button:
    """Clickable button."""

    def __init__(self, x, y, width, height, label, on_click=None):
        self.rect = pygame.Rect(x, y, width, height)
        self.label = label
        self.on_click = on_click
        self.active = False
        self.hovered = False

    def handle_event(self, event):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                if self.on_click:
                    self.on_click()
                return True
        elif event.type == pygame.MOUSEMOTION:
            self.hovered = self.rect.collidepoint(event.pos)
        return False

    def draw(self, surface, font):
        if self.active:
            color = THEME["button_active"]
        elif self.hovered:
            color = THEME["button_hover"]
        else:
            color = THEME["button"]
        pygame.draw.rect(surface, color, self.rect, border_radius=4)
        label = font.render(self.label, True, THEME["text_bright"])
        surface.blit(label, label.get_rect(center=self.rect.center))


class SectionHeader:

    height = 24

    def __init__(self, x, y, width, title):
        self.x = x
        self.y = y
        self.width = width
        self.title = title

    def draw(self, surface, font):
        pygame.draw.line(surface, THEME["divider"],
                         (self.x + 8, self.y + 8), (self.x + self.width - 8, self.y + 8))
        surface.blit(font.render(self.title, True, THEME["text_dim"]),
                     (self.x + 8, self.y + 12))


class ControlPanel:
    """Vertical stack of widgets at (x, y) on the window.

    Widgets are laid out top to bottom in the order they are added and
    receive events translated to panel-local coordinates.
    """

    def __init__(self, x, y, width, height):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.widgets = []
        self._cursor_y = 8

    def add_section(self, title):
        header = SectionHeader(0, self._cursor_y, self.width, title)
        self.widgets.append(header)
        self._cursor_y += header.height + 4

    def add_slider(self, label, min_val, max_val, value, fmt=".2f",
                   step=None, on_change=None):
        slider = Slider(0, self._cursor_y, self.width, label,
                        min_val, max_val, value, fmt, step, on_change)
        self.widgets.append(slider)
        self._cursor_y += slider.height + 6
        return slider

    def add_button(self, label, on_click=None):
        btn = Button(8, self._cursor_y, self.width - 16, 28, label, on_click)
        self.widgets.append(btn)
        self._cursor_y += 36
        return btn

    def add_spacer(self, height=8):
        self._cursor_y += height

    def handle_event(self, event):
        """Dispatch an event; returns True if a widget consumed it."""
        if hasattr(event, "pos"):
            local = (event.pos[0] - self.x, event.pos[1] - self.y)
            if not (0 <= local[0] <= self.width and 0 <= local[1] <= self.height):
                # Release drags that end outside the panel
                if event.type == pygame.MOUSEBUTTONUP:
                    for widget in self.widgets:
                        if isinstance(widget, Slider):
                            widget.dragging = False
                return False
            attrs = {k: v for k, v in event.__dict__.items() if k != "pos"}
            event = pygame.event.Event(event.type, {**attrs, "pos": local})

        for widget in self.widgets:
            if hasattr(widget, "handle_event") and widget.handle_event(event):
                return True
        return False

    def draw(self, target_surface, font):
        surface = pygame.Surface((self.width, self.height))
        surface.fill(THEME["panel"])
        pygame.draw.line(surface, THEME["divider"], (0, 0), (0, self.height))
        for widget in self.widgets:
            widget.draw(surface, font)
        target_surface.blit(surface, (self.x, self.y))
