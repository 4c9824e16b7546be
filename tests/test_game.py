from __future__ import annotations

import constants as C
from entities import Poetry
from game import Game, action_from_keys


def test_reset_gives_fresh_level(game: Game) -> None:
    obs = game.reset()
    assert obs["towels_left"] == C.TOTAL_TOWELS
    assert obs["score"] == 0
    assert len(obs["enemies"]) == len(C.ENEMY_SPAWNS)
    assert obs["world"]["gravity_sign"] == 1
    assert obs["effects"] == []
    assert obs["time"] == 0


def test_same_seed_same_level() -> None:
    a = Game(render=False, seed=3)
    b = Game(render=False, seed=3)
    assert [(t.x, t.y) for t in a.collectibles] == [(t.x, t.y) for t in b.collectibles]
    assert [(e.direction, e.speed) for e in a.enemies] == [(e.direction, e.speed) for e in b.enemies]


def test_player_falls_and_lands(game: Game) -> None:
    y0 = game.player.y
    landed = False
    for _ in range(60):
        obs, _, _ = game.step(0)
        landed = landed or obs["player"]["on_ground"]
    assert game.player.y > y0
    assert landed


def test_unknown_action_is_idle(game: Game) -> None:
    game.step(99)
    assert game.player.vx == 0


def test_jump_follows_gravity(game: Game) -> None:
    p = game.player
    p.on_ground = True
    game.step(3)
    assert p.vy < 0
    assert "jump" in game.audio.history

    game.world.override("gravity_sign", -1)
    p.on_ground = True
    game.step(3)
    assert p.vy > 0


def test_babel_fish_sinks_slowly(game: Game) -> None:
    p = game.player
    p.transform("babel_fish", C.FISH_SCALE, (C.FISH_W, C.FISH_H))
    game.step(0)
    assert p.vy == C.FISH_SINK_SPEED
    game.step(2)
    assert p.vx == C.PLAYER_SPEED * C.FISH_SPEED_FACTOR


def test_towel_pickup_scores(game: Game) -> None:
    p = game.player
    towel = game.spawn_collectible(p.x, p.y)
    game.step(0)
    assert towel.collected
    assert towel not in game.collectibles
    assert game.towels >= 1
    assert game.score == game.towels * C.TOWEL_VALUE
    assert "collect" in game.audio.history


def test_enemy_death_scores_and_removes(game: Game) -> None:
    enemy = game.enemies[0]
    enemy.take_damage(enemy.health)
    assert game.score == enemy.score_value
    assert not enemy.active
    game.step(0)
    assert enemy not in game.enemies


def test_stomp_hurts_enemy_and_bounces(game: Game) -> None:
    p, enemy = game.player, game.enemies[0]
    p.x = enemy.x
    p.y = enemy.y - (enemy.h + p.h) / 2 + 5
    p.vy = 200
    game._enemy_contact(enemy)
    assert enemy.health == C.ENEMY_TYPES["vogon"]["health"] - C.STOMP_DAMAGE
    assert p.vy == C.STOMP_BOUNCE
    assert p.health == C.PLAYER_HEALTH


def test_enemy_contact_hurts_and_knocks_back(game: Game) -> None:
    p, enemy = game.player, game.enemies[0]
    p.x, p.y, p.vy = enemy.x - 10, enemy.y, 0.0
    game._enemy_contact(enemy)
    assert p.health == C.PLAYER_HEALTH - enemy.damage
    assert p.vx == -C.CONTACT_KNOCKBACK[0]
    assert p.is_invulnerable


def test_poetry_hit_hurts_once(game: Game) -> None:
    p = game.player
    poem = Poetry(game._entity_timers, p.x, p.y, 1.0, 0.0)
    game.projectiles.append(poem)
    _, reward, _ = game.step(0)
    assert p.health == C.PLAYER_HEALTH - C.POETRY_DAMAGE
    assert not poem.active
    assert game.hud.floaters
    assert reward < 0


def test_invulnerable_player_ignores_poetry(game: Game) -> None:
    p = game.player
    p.grant_invulnerability(1000)
    poem = Poetry(game._entity_timers, p.x, p.y, 1.0, 0.0)
    game.projectiles.append(poem)
    game.step(0)
    assert p.health == C.PLAYER_HEALTH
    assert poem.active


def test_falling_pot_hurts(game: Game) -> None:
    p = game.player
    pot = game.spawn_hazard(p.x, p.y, 0, 0)
    game.step(0)
    assert not pot.active
    assert p.health == C.PLAYER_HEALTH - C.HAZARD_DAMAGE


def _collect(game: Game, n: int) -> None:
    for towel in [t for t in game.collectibles if t.active][:n]:
        towel.collect(game.player)


def test_milestone_fires_once_on_towels(game: Game) -> None:
    _collect(game, 8)
    assert game.towel_score == 40
    assert not game.milestone_reached

    _collect(game, 1)
    assert game.towel_score == 45
    assert game.milestone_reached
    assert game.drive.milestone_fired
    assert game.player.is_invulnerable
    assert game.player.invulnerability_deadline == C.MILESTONE_INVULN_MS
    assert game.hud.current_banner == C.BANNER_TEXT

    _collect(game, 1)
    assert game.towel_score == 50
    assert game.audio.history.count("forty_two") == 1


def test_enemy_kills_do_not_reach_milestone(game: Game) -> None:
    for enemy in list(game.enemies):
        enemy.take_damage(enemy.health)
    assert game.score == sum(C.ENEMY_TYPES[s[2]]["score"] for s in C.ENEMY_SPAWNS)
    assert game.score >= C.ANSWER_TO_EVERYTHING
    assert game.towels == 0
    assert not game.milestone_reached
    assert not game.drive.milestone_fired
    assert "forty_two" not in game.audio.history


def test_kills_do_not_count_toward_towel_total(game: Game) -> None:
    game.add_score(100)
    _collect(game, 8)
    assert not game.milestone_reached
    _collect(game, 1)
    assert game.milestone_reached


def test_milestone_sequence_plays_out(game: Game) -> None:
    _collect(game, 9)
    last = C.MILESTONE_FLASH_MS + max(d for d, _ in C.MILESTONE_STEPS)
    game.advance(last + 50)
    assert game.drive.history[:4] == [name for _, name in C.MILESTONE_STEPS]


def test_all_towels_is_victory(game: Game) -> None:
    for towel in list(game.collectibles):
        towel.collect(game.player)
    obs, reward, done = game.step(0)
    assert done
    assert obs["victory"]
    assert obs["towels"] == C.TOTAL_TOWELS
    assert reward >= C.REWARD_VICTORY


def test_death_ends_episode(game: Game) -> None:
    game.player.take_damage(game.player.health)
    obs, _, done = game.step(0)
    assert done
    assert obs["player"]["dead"]
    assert not obs["victory"]


def test_reset_cancels_old_level(game: Game) -> None:
    old = game.scheduler
    game.drive.trigger("gravity_reversal")
    assert game.world.gravity_sign == -1

    game.reset(seed=9)
    assert old.pending() == 0
    assert game.world.gravity_sign == 1
    assert game.drive.active == []
    assert game.scheduler is not old


def test_action_from_keys() -> None:
    assert action_from_keys(False, False, False) == 0
    assert action_from_keys(True, False, False) == 1
    assert action_from_keys(False, True, True) == 5
    assert action_from_keys(True, True, True) == 3
    assert action_from_keys(False, False, False, down=True) == 6


def test_enemy_pace_comes_from_speed_range(game: Game) -> None:
    lo, hi = C.ENEMY_SPEED_RANGE
    assert all(lo <= e.speed <= hi for e in game.enemies)
