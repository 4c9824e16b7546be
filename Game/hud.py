"""
hud.py
======
On-screen text: score, health bar, towel counter, the centre message line,
Guide quotes, floating lines of Vogon poetry and the DON'T PANIC banner.

The HUD only keeps state (what to show and until when).  Drawing is a
separate call that needs a pygame surface, so a headless game still knows
what the player would be reading.
"""

from __future__ import annotations

from collections import deque
from typing import Optional

import pygame

import constants as C


class HUD:
    def __init__(self, clock) -> None:
        self.clock = clock          # anything with `.now` in ms
        self.log   : deque[str] = deque(maxlen=32)

        self.message       : Optional[str] = None
        self.message_until : float = -1.0
        self.quote         : Optional[str] = None
        self.quote_special : bool  = False
        self.quote_until   : float = -1.0
        self.banner        : Optional[str] = None
        self.banner_until  : float = -1.0
        self.floaters      : list[list] = []    # [text, x, y, t0]

    # ── Messages ──────────────────────────────────────────────────────────────

    def show_message(self, text: str, duration: float = C.MESSAGE_MS) -> None:
        self.message       = text
        self.message_until = self.clock.now + duration + C.MESSAGE_FADE_MS
        self.log.append(text)

    def show_quote(self, text: str, special: bool = False) -> None:
        self.quote         = text
        self.quote_special = special
        self.quote_until   = self.clock.now + C.QUOTE_SHOW_MS
        self.log.append(text)

    def show_banner(self, text: str = C.BANNER_TEXT) -> None:
        self.banner       = text
        self.banner_until = self.clock.now + C.BANNER_MS

    def show_poetry(self, line: str, x: float, y: float) -> None:
        self.prune_floaters()
        self.floaters.append([line, x, y, self.clock.now])
        self.log.append(line)

    def prune_floaters(self) -> list[list]:
        """Drop poetry lines that have finished floating away."""
        now = self.clock.now
        self.floaters = [f for f in self.floaters if now - f[3] < C.POETRY_LINE_MS]
        return self.floaters

    @property
    def current_message(self) -> Optional[str]:
        return self.message if self.clock.now < self.message_until else None

    @property
    def current_quote(self) -> Optional[str]:
        return self.quote if self.clock.now < self.quote_until else None

    @property
    def current_banner(self) -> Optional[str]:
        return self.banner if self.clock.now < self.banner_until else None

    # ── Drawing ───────────────────────────────────────────────────────────────

    def draw(self, surface: pygame.Surface, font: pygame.font.Font,
             small: pygame.font.Font, game) -> None:
        now = self.clock.now
        p   = game.player

        surface.blit(font.render(f"Score: {game.score}", True, C.HUD_COLOR), (20, 20))
        surface.blit(font.render(f"Towels: {game.towels}", True, C.HUD_COLOR), (C.SCREEN_W - 180, 20))

        bx = C.SCREEN_W // 2 - C.HEALTH_BAR_W // 2
        pygame.draw.rect(surface, C.HEALTH_BG, (bx, 20, C.HEALTH_BAR_W, C.HEALTH_BAR_H))
        ratio = max(0.0, p.health / p.max_health)
        pygame.draw.rect(surface, C.HEALTH_FG, (bx, 20, int(C.HEALTH_BAR_W * ratio), C.HEALTH_BAR_H))

        msg = self.current_message
        if msg:
            left  = self.message_until - now
            alpha = 255 if left > C.MESSAGE_FADE_MS else int(255 * left / C.MESSAGE_FADE_MS)
            self._centred(surface, font, msg, C.SCREEN_H // 2 - 100, C.HUD_COLOR, alpha)

        quote = self.current_quote
        if quote:
            col = C.SPECIAL_QUOTE if self.quote_special else C.HUD_COLOR
            panel = pygame.Surface((C.SCREEN_W - 60, 60), pygame.SRCALPHA)
            panel.fill((*C.QUOTE_PANEL, 180))
            surface.blit(panel, (30, C.SCREEN_H - 130))
            self._centred(surface, small, quote, C.SCREEN_H - 100, col)

        banner = self.current_banner
        if banner:
            self._centred(surface, font, banner, C.SCREEN_H // 2, C.BANNER_COLOR)

        for text, x, y, t0 in self.prune_floaters():
            age = now - t0
            k = age / C.POETRY_LINE_MS
            t = small.render(text, True, C.POETRY_COLOR)
            t.set_alpha(int(255 * (1 - k)))
            surface.blit(t, (int(x) - t.get_width() // 2, int(y - 100 * k)))

    @staticmethod
    def _centred(surface, font, text, y, color, alpha=255) -> None:
        for i, line in enumerate(text.split("\n")):
            t = font.render(line, True, color)
            if alpha < 255:
                t.set_alpha(alpha)
            surface.blit(t, (C.SCREEN_W // 2 - t.get_width() // 2, y + i * (font.get_height() + 2)))
