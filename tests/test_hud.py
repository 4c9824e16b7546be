from __future__ import annotations

import constants as C
from hud import HUD
from timers import Scheduler


def test_poetry_lines_fade_without_drawing(sched: Scheduler) -> None:
    hud = HUD(sched)
    hud.show_poetry("Oh freddled gruntbuggly", 100, 100)
    assert len(hud.prune_floaters()) == 1

    sched.advance(C.POETRY_LINE_MS)
    assert hud.prune_floaters() == []


def test_floaters_stay_bounded_headless(sched: Scheduler) -> None:
    hud = HUD(sched)
    for i in range(50):
        sched.advance(i * C.POETRY_LINE_MS)
        hud.show_poetry("Thy micturations are to me", 0, 0)
    assert len(hud.floaters) == 1


def test_message_lingers_through_fade(sched: Scheduler) -> None:
    hud = HUD(sched)
    hud.show_message("Don't Panic!")
    sched.advance(C.MESSAGE_MS + C.MESSAGE_FADE_MS - 1)
    assert hud.current_message == "Don't Panic!"
    sched.advance(C.MESSAGE_MS + C.MESSAGE_FADE_MS)
    assert hud.current_message is None
