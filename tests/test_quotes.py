from __future__ import annotations

import constants as C
from hud import HUD
from quotes import QuoteManager
from timers import Scheduler


class _Dice:
    """Deterministic stand-in for random.Random: fixed rolls, first choice."""

    def __init__(self, *rolls: float) -> None:
        self.rolls = list(rolls)

    def random(self) -> float:
        return self.rolls.pop(0)

    def choice(self, seq):
        return seq[0]


def test_no_quote_before_interval(sched: Scheduler) -> None:
    qm = QuoteManager(HUD(sched), _Dice())
    assert qm.tick(C.QUOTE_COOLDOWN_MS - 1) is None


def test_missed_roll_retries_after_half_interval(sched: Scheduler) -> None:
    hud = HUD(sched)
    qm = QuoteManager(hud, _Dice(0.9, 0.1))

    assert qm.tick(C.QUOTE_COOLDOWN_MS) is None
    half = C.QUOTE_COOLDOWN_MS / 2
    assert qm.tick(C.QUOTE_COOLDOWN_MS + half - 1) is None

    now = C.QUOTE_COOLDOWN_MS + half
    sched.advance(now)
    assert qm.tick(now) == C.QUOTES[0]
    assert hud.current_quote == C.QUOTES[0]
    assert qm.cooldown.last_trigger == now


def test_quote_with_42_is_special(sched: Scheduler) -> None:
    hud = HUD(sched)
    qm = QuoteManager(hud, _Dice())
    quote = qm.show_quote("42")
    assert "42" in quote
    assert quote in C.QUOTES
    assert hud.quote_special


def test_unlisted_text_is_shown_as_is(sched: Scheduler) -> None:
    hud = HUD(sched)
    qm = QuoteManager(hud, _Dice(), quotes=["Don't Panic."])
    assert qm.show_quote("Mostly harmless.") == "Mostly harmless."
    assert not hud.quote_special
    sched.advance(C.QUOTE_SHOW_MS)
    assert hud.current_quote is None
