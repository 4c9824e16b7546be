from __future__ import annotations

import constants as C
from entities import Collectible, Decoration, Hazard, Poetry
from timers import Scheduler


def test_towel_collects_once() -> None:
    got = []
    towel = Collectible(100, 100, on_collect=lambda t, who: got.append((t.value, who)))

    assert towel.collect("arthur")
    assert towel.collect("ford") is False
    assert got == [(C.TOWEL_VALUE, "arthur")]
    assert towel.collected
    assert not towel.active


def test_destroyed_towel_cannot_be_collected() -> None:
    towel = Collectible(0, 0)
    towel.destroy()
    assert towel.collect() is False
    assert not towel.collected


def test_poetry_expires_after_lifespan(sched: Scheduler) -> None:
    poem = Poetry(sched, 400, 300, 0.0, 0.0)
    sched.advance(C.POETRY_LIFESPAN_MS - 1)
    assert poem.active
    sched.advance(C.POETRY_LIFESPAN_MS)
    assert not poem.active


def test_poetry_leaving_world_is_destroyed(sched: Scheduler) -> None:
    poem = Poetry(sched, C.WORLD_W - 1, 300, 1.0, 0.0)
    poem.update(0.1)
    assert not poem.active
    assert sched.pending() == 0


def test_hazard_falls_and_destroy_is_idempotent(sched: Scheduler) -> None:
    pot = Hazard(sched, 100, 0, 0, 90)
    pot.update(0.5)
    assert pot.y > 0
    assert pot.angle == 45

    pot.destroy()
    pot.destroy()
    sched.advance(C.HAZARD_LIFESPAN_MS)
    assert not pot.active


def test_decoration_falls_with_its_bubble(sched: Scheduler) -> None:
    whale = Decoration(sched, "whale", 400, -200, C.WHALE_SIZE, C.WHALE_COLOR, C.WHALE_THOUGHT)
    whale.update(1.0)
    assert whale.y > -200
    sched.advance(C.WHALE_LIFESPAN_MS)
    assert not whale.active
