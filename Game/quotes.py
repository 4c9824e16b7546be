"""
quotes.py
=========
Drops a line from the Guide onto the screen every so often.

At most one quote per QUOTE_COOLDOWN_MS.  When the interval is up a roll
decides whether to show one; a failed roll rewinds the clock by half an
interval, so the next attempt comes sooner than a full wait.
"""

from __future__ import annotations

import logging
from typing import Optional

import constants as C
from timers import CooldownTimer

logger = logging.getLogger(__name__)


class QuoteManager:
    def __init__(
        self,
        hud,
        rng,
        now     : float = 0.0,
        chance  : float = C.QUOTE_CHANCE,
        quotes  : Optional[list[str]] = None,
    ) -> None:
        self.hud      = hud
        self.rng      = rng
        self.chance   = chance
        self.quotes   = list(C.QUOTES if quotes is None else quotes)
        self.cooldown = CooldownTimer(C.QUOTE_COOLDOWN_MS, last_trigger=now)

    def tick(self, now: float) -> Optional[str]:
        if not self.cooldown.ready(now):
            return None
        if self.rng.random() < self.chance:
            self.cooldown.reset(now)
            return self.show_random_quote()
        self.cooldown.reset(now - self.cooldown.min_interval / 2)
        return None

    def show_random_quote(self) -> str:
        quote = self.rng.choice(self.quotes)
        self._show(quote)
        return quote

    def show_quote(self, text: str) -> str:
        """Show the catalogue quote containing `text`, or `text` itself."""
        quote = next((q for q in self.quotes if text in q), text)
        self._show(quote)
        return quote

    def _show(self, quote: str) -> None:
        logger.info('quote: "%s"', quote)
        self.hud.show_quote(quote, special="42" in quote)
