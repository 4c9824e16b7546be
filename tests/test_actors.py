from __future__ import annotations

import warnings

import pytest

import constants as C
from actors import Actor, make_enemy, make_player, run_behavior, wants_to_attack
from timers import Scheduler


def _actor(sched: Scheduler, health: int = 100, grace: float = 1000) -> Actor:
    return Actor("dummy", "generic", 0, 0, 20, 20, health, grace, sched)


def test_hits_spaced_by_grace_take_health_down(sched: Scheduler) -> None:
    a = _actor(sched)
    seen = []
    for t in (0, 1000, 2000):
        sched.advance(t)
        assert a.take_damage(20)
        seen.append(a.health)
    assert seen == [80, 60, 40]


def test_damage_during_grace_is_ignored(sched: Scheduler) -> None:
    a = _actor(sched)
    a.take_damage(20)
    assert a.is_invulnerable
    assert a.take_damage(20) is False
    assert a.health == 80


def test_grace_ends_exactly_at_duration(sched: Scheduler) -> None:
    a = _actor(sched)
    a.take_damage(10)
    sched.advance(999)
    assert a.state == "invulnerable"
    sched.advance(1000)
    assert a.state == "vulnerable"
    assert a.invulnerability_deadline is None


def test_lethal_damage_clamps_and_dies_once(sched: Scheduler) -> None:
    a = _actor(sched)
    a.health = 15
    deaths = []
    a.on_death = deaths.append

    assert a.take_damage(20)
    assert a.health == 0
    assert a.is_dead

    sched.advance(5000)
    assert a.take_damage(50) is False
    assert a.health == 0
    assert deaths == [a]


def test_damage_hook_reports_amount(sched: Scheduler) -> None:
    a = _actor(sched)
    hits = []
    a.on_damage = lambda actor, amount: hits.append(amount)
    a.take_damage(7)
    assert hits == [7]
    assert a.flash_until == C.FLASH_MS


def test_regrant_resets_deadline(sched: Scheduler) -> None:
    a = _actor(sched)
    assert a.grant_invulnerability(5000)
    sched.advance(3000)
    assert a.grant_invulnerability(5000)
    assert a.invulnerability_deadline == 8000

    sched.advance(5000)
    assert a.is_invulnerable
    sched.advance(8000)
    assert not a.is_invulnerable


def test_shielded_actor_survives_lethal_hit(sched: Scheduler) -> None:
    a = _actor(sched)
    a.grant_invulnerability(5000)
    assert a.take_damage(1000) is False
    assert a.health == 100
    assert a.state == "invulnerable"

    sched.advance(5000)
    assert a.take_damage(1000)
    assert a.state == "dead"
    assert a.grant_invulnerability(1000) is False


def test_destroyed_actor_ignores_everything(sched: Scheduler) -> None:
    a = _actor(sched)
    a.take_damage(10)
    a.destroy()
    sched.advance(2000)
    assert a.state == "invulnerable"
    assert a.take_damage(10) is False
    assert not a.alive


def test_non_positive_health_rejected(sched: Scheduler) -> None:
    with pytest.raises(ValueError):
        _actor(sched, health=0)


def test_nested_transforms_restore_once(sched: Scheduler) -> None:
    p = make_player(sched)
    feet = p.y + p.h / 2

    p.transform("babel_fish", C.FISH_SCALE, (C.FISH_W, C.FISH_H))
    p.transform("babel_fish", C.FISH_SCALE, (C.FISH_W, C.FISH_H))
    assert (p.w, p.h) == (C.FISH_W, C.FISH_H)
    assert p.y + p.h / 2 == pytest.approx(feet)

    assert p.restore_form()
    assert p.form == "babel_fish"
    assert p.restore_form()
    assert p.form == "human"
    assert (p.w, p.h) == (C.PLAYER_W, C.PLAYER_H)
    assert p.y + p.h / 2 == pytest.approx(feet)
    assert p.restore_form() is False


def test_unknown_character_rejected(sched: Scheduler) -> None:
    with pytest.raises(ValueError):
        make_player(sched, "zaphod")


def test_unknown_enemy_kind_rejected(sched: Scheduler) -> None:
    with pytest.raises(ValueError):
        make_enemy(sched, "dentrassi", 0, 0)


def test_unknown_behavior_falls_back_to_stationary(sched: Scheduler) -> None:
    e = make_enemy(sched, "generic", 100, 100, behavior="moonwalk")
    assert e.behavior == "stationary"
    e.vx = 50
    run_behavior(e, None)
    assert e.vx == 0


def test_patrol_turns_at_distance(sched: Scheduler) -> None:
    e = make_enemy(sched, "vogon", 300, 300, behavior="patrol", direction=1, speed=80)
    run_behavior(e, None)
    assert e.vx == 80

    e.x = 300 + C.PATROL_DISTANCE
    run_behavior(e, None)
    assert e.direction == -1
    assert e.facing == -1


def test_follow_chases_within_range(sched: Scheduler) -> None:
    e = make_enemy(sched, "vogon", 300, 300, behavior="follow", speed=100)
    p = make_player(sched)
    p.x, p.y = 200, 300
    run_behavior(e, p)
    assert e.vx == pytest.approx(-100)
    assert e.facing == -1

    p.x = 300 - C.FOLLOW_RANGE - 1
    run_behavior(e, p)
    assert e.vx == 0


def test_vogon_recites_after_cooldown(sched: Scheduler) -> None:
    e = make_enemy(sched, "vogon", 300, 300)
    p = make_player(sched)
    p.x, p.y = 200, 300

    assert not wants_to_attack(e, p, C.POETRY_COOLDOWN_MS - 1)
    assert wants_to_attack(e, p, C.POETRY_COOLDOWN_MS)
    assert not wants_to_attack(e, p, C.POETRY_COOLDOWN_MS + 1)


def test_no_recital_when_silenced_or_out_of_range(sched: Scheduler) -> None:
    e = make_enemy(sched, "vogon", 300, 300)
    p = make_player(sched)
    p.x, p.y = 200, 300
    now = C.POETRY_COOLDOWN_MS

    e.ranged.suppressed = 1
    assert not wants_to_attack(e, p, now)
    e.ranged.suppressed = 0

    p.x = 300 + C.POETRY_RANGE + 10
    assert not wants_to_attack(e, p, now)

    p.x = 200
    p.take_damage(p.health)
    assert not wants_to_attack(e, p, now)


def test_generic_enemy_has_no_ranged_attack(sched: Scheduler) -> None:
    e = make_enemy(sched, "generic", 0, 0)
    p = make_player(sched)
    assert e.ranged is None
    assert not wants_to_attack(e, p, 100000)


def test_state_reads_without_deprecation_warnings(sched: Scheduler) -> None:
    a = _actor(sched)
    seen = []
    for hit in (0, 10, 0, 500):
        if hit:
            a.take_damage(hit)
        else:
            sched.advance(sched.now + 1000)
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            seen.append(a.state)
    assert seen == ["vulnerable", "invulnerable", "vulnerable", "dead"]
