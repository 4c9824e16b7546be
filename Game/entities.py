"""
entities.py
===========
Things in the world that are not actors: towels, Vogon poetry projectiles,
falling flower pots and the occasional whale.

Every transient entity owns a self-destruct timer and an idempotent
destroy(), so whatever removes it first (gameplay, its own timer, or an
effect revert) wins and the others become no-ops.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

import pygame

import constants as C
from timers import TimerHandle

logger = logging.getLogger(__name__)


class Collectible:
    """A towel, the most massively useful thing an interstellar hitchhiker can have."""

    def __init__(
        self,
        x          : float,
        y          : float,
        kind       : str = "towel",
        value      : int = C.TOWEL_VALUE,
        on_collect : Optional[Callable[["Collectible", object], None]] = None,
    ) -> None:
        self.x          = float(x)
        self.y          = float(y)
        self.kind       = kind
        self.value      = value
        self.on_collect = on_collect
        self.collected  = False
        self.active     = True
        self.phase      = (x * 0.37 + y * 0.11) % (2 * math.pi)   # float bob offset

    def collect(self, actor=None) -> bool:
        """Collect once. Duplicate overlap callbacks in one frame return False."""
        if self.collected or not self.active:
            logger.debug("%s at (%.0f, %.0f) already gone", self.kind, self.x, self.y)
            return False
        self.collected = True
        self.active    = False
        if self.on_collect is not None:
            self.on_collect(self, actor)
        return True

    def destroy(self) -> None:
        self.active = False

    @property
    def hitbox(self) -> pygame.Rect:
        s = C.TOWEL_SIZE
        return pygame.Rect(int(self.x - s / 2), int(self.y - s / 2), s, s)

    def as_dict(self) -> dict:
        return {"type": self.kind, "x": self.x, "y": self.y, "value": self.value}

    def draw(self, surface: pygame.Surface, now: float) -> None:
        if not self.active:
            return
        bob = int(math.sin(now / 1500.0 * math.pi + self.phase) * 5)
        r = self.hitbox.move(0, bob)
        pygame.draw.rect(surface, C.TOWEL_COLOR, r, border_radius=3)
        pygame.draw.line(surface, C.WHITE, (r.left + 3, r.top + 5), (r.right - 4, r.top + 5), 1)


class _Transient:
    """Shared lifetime handling for things that expire on their own."""

    def __init__(self, timers, lifespan_ms: float) -> None:
        self.active = True
        self._expiry : Optional[TimerHandle] = timers.call_later(lifespan_ms, self.destroy)

    def destroy(self) -> None:
        if not self.active:
            return
        self.active = False
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None

    @property
    def out_of_world(self) -> bool:
        return (self.x < -C.WORLD_W or self.x > 2 * C.WORLD_W or
                self.y < -C.WORLD_H or self.y > 2 * C.WORLD_H)


class Poetry(_Transient):
    """A projectile of concentrated Vogon verse, aimed along (dx, dy)."""

    def __init__(
        self,
        timers,
        x      : float,
        y      : float,
        dx     : float,
        dy     : float,
        speed  : float = C.POETRY_SPEED,
        damage : int   = C.POETRY_DAMAGE,
    ) -> None:
        super().__init__(timers, C.POETRY_LIFESPAN_MS)
        self.x, self.y = float(x), float(y)
        self.vx, self.vy = dx * speed, dy * speed
        self.damage = damage
        self.angle  = math.degrees(math.atan2(dy, dx))

    def update(self, dt: float) -> None:
        if not self.active:
            return
        self.x += self.vx * dt
        self.y += self.vy * dt
        self.angle = (self.angle + 180 * dt) % 360
        if not (0 <= self.x <= C.WORLD_W and 0 <= self.y <= C.WORLD_H):
            self.destroy()

    @property
    def hitbox(self) -> pygame.Rect:
        s = C.POETRY_SIZE
        return pygame.Rect(int(self.x - s / 2), int(self.y - s / 2), s, s)

    def draw(self, surface: pygame.Surface) -> None:
        if self.active:
            pygame.draw.circle(surface, C.POETRY_COLOR, (int(self.x), int(self.y)), C.POETRY_SIZE // 2)


class Hazard(_Transient):
    """A flower pot that improbably found itself several hundred pixels up."""

    def __init__(self, timers, x: float, y: float, vx: float, spin: float) -> None:
        super().__init__(timers, C.HAZARD_LIFESPAN_MS)
        self.x, self.y = float(x), float(y)
        self.vx, self.vy = float(vx), 0.0
        self.spin  = spin
        self.angle = 0.0

    def update(self, dt: float) -> None:
        if not self.active:
            return
        self.vy += C.HAZARD_GRAVITY * dt
        self.x  += self.vx * dt
        self.y  += self.vy * dt
        self.angle = (self.angle + self.spin * dt) % 360
        if self.out_of_world:
            self.destroy()

    @property
    def hitbox(self) -> pygame.Rect:
        s = C.HAZARD_SIZE
        return pygame.Rect(int(self.x - s / 2), int(self.y - s / 2), s, s)

    def draw(self, surface: pygame.Surface) -> None:
        if not self.active:
            return
        r = self.hitbox
        pygame.draw.polygon(surface, C.HAZARD_COLOR,
                            [(r.left, r.top), (r.right, r.top),
                             (r.right - 4, r.bottom), (r.left + 4, r.bottom)])


class Decoration(_Transient):
    """
    Harmless falling scenery with a speech bubble (the whale, the petunias).
    Passes through everything.
    """

    def __init__(
        self,
        timers,
        name    : str,
        x       : float,
        y       : float,
        size    : tuple[int, int],
        color   : tuple,
        thought : str,
        gravity : float = C.WHALE_GRAVITY,
    ) -> None:
        super().__init__(timers, C.WHALE_LIFESPAN_MS)
        self.name    = name
        self.x, self.y = float(x), float(y)
        self.vy      = 0.0
        self.w, self.h = size
        self.color   = color
        self.thought = thought
        self.gravity = gravity

    def update(self, dt: float) -> None:
        if not self.active:
            return
        self.vy += self.gravity * dt
        self.y  += self.vy * dt
        if self.out_of_world:
            self.destroy()

    def draw(self, surface: pygame.Surface, font: Optional[pygame.font.Font]) -> None:
        if not self.active:
            return
        r = pygame.Rect(int(self.x - self.w / 2), int(self.y - self.h / 2), self.w, self.h)
        pygame.draw.ellipse(surface, self.color, r)
        if font is None:
            return
        # bubble tracks the body every frame
        for i, line in enumerate(self.thought.split("\n")):
            t = font.render(line, True, (0, 0, 0), C.WHITE)
            surface.blit(t, (r.centerx - t.get_width() // 2, r.top - 20 - 16 * i))
