"""
game.py
=======
Don't Panic: a small Hitchhiker's Guide platformer.

Human play
----------
    python game.py [--seed 42] [--character ford] [--verbose]

    LEFT / RIGHT = move   UP = jump (swim up)   DOWN = swim down
    R = restart   Q = quit

Programmatic / headless API
----------------------------
    from game import Game

    g = Game(render=False, seed=42)
    obs = g.reset()
    obs, reward, done = g.step(action=2)    # see constants.ACTIONS
    g.render()                              # no-op when headless
    g.close()

The Game is the scene: it owns every actor, collectible and transient
entity, the timer scheduler, the world modifiers and the RNG.  The
Infinite Improbability Drive and the actors only ever reach the world
through it.
"""

from __future__ import annotations

import argparse
import logging
import math
import random
from typing import Optional

import pygame

import constants as C
from actors import Actor, make_enemy, make_player, run_behavior, wants_to_attack
from audio import Audio
from entities import Collectible, Decoration, Hazard, Poetry
from hud import HUD
from improbability import ImprobabilityDrive
from level import build_level
from quotes import QuoteManager
from timers import Scheduler
from world import WorldModifiers

logger = logging.getLogger(__name__)


class Game:
    """
    Core game.  Works both rendered (human) and headless (tests, agents).

    Parameters
    ----------
    render : bool
        Open a pygame window and enable sound.
    seed : int | None
        RNG seed: towel spots, Vogon pacing, improbable events, quotes.
    character : str
        "arthur" or "ford".
    """

    def __init__(self, render: bool = True, seed: Optional[int] = None,
                 character: str = "arthur") -> None:
        self._do_render = render
        self._seed      = seed
        self.character  = character
        self.rng        = random.Random(seed)

        self.surface : Optional[pygame.Surface]     = None
        self.clock   : Optional[pygame.time.Clock]  = None
        self.font    : Optional[pygame.font.Font]   = None
        self.small   : Optional[pygame.font.Font]   = None
        self._stars  : list[tuple[int, int, int]]   = []

        if render:
            self._init_display()
        self.audio = Audio(enabled=render)

        self._build()

    # ── Display ───────────────────────────────────────────────────────────────

    def _init_display(self) -> None:
        if not pygame.get_init():
            pygame.init()
        pygame.font.init()
        self.surface = pygame.display.set_mode((C.SCREEN_W, C.SCREEN_H))
        pygame.display.set_caption(C.WINDOW_TITLE)
        self.clock = pygame.time.Clock()
        self.font  = pygame.font.SysFont("arial", 24, bold=True)
        self.small = pygame.font.SysFont("arial", 16)
        sky = random.Random(self._seed)
        self._stars = [(sky.randint(0, C.SCREEN_W), sky.randint(0, C.SCREEN_H), sky.randint(1, 3))
                       for _ in range(C.STAR_COUNT)]

    # ── Level lifetime ────────────────────────────────────────────────────────

    def _build(self) -> None:
        self.scheduler      = Scheduler()
        self._actor_timers  = self.scheduler.scope("actors")
        self._entity_timers = self.scheduler.scope("entities")
        self.world = WorldModifiers()
        self.hud   = HUD(self.scheduler)

        level = build_level(self.rng)
        g = level["ground"]
        self.ground    = pygame.Rect(int(g["x"]), int(g["y"]), int(g["w"]), int(g["h"]))
        self.platforms = [pygame.Rect(int(p["x"]), int(p["y"]), int(p["w"]), int(p["h"]))
                          for p in level["platforms"]]

        self.player = make_player(self._actor_timers, self.character)
        self.player.on_damage = self._on_player_damage
        self.player.on_death  = self._on_player_death

        self.enemies : list[Actor] = []
        for spawn in level["enemies"]:
            e = make_enemy(self._actor_timers, spawn["kind"], spawn["x"], spawn["y"],
                           spawn["behavior"], spawn["direction"], spawn["speed"])
            e.on_death = self._on_enemy_death
            self.enemies.append(e)

        self.collectibles : list[Collectible] = []
        self.projectiles  : list[Poetry]      = []
        self.hazards      : list[Hazard]      = []
        self.decorations  : list[Decoration]  = []
        for t in level["towels"]:
            self.spawn_collectible(t["x"], t["y"])

        self.drive  = ImprobabilityDrive(self, self.scheduler.scope("drive"), self.rng)
        self.quotes = QuoteManager(self.hud, self.rng, self.scheduler.now)

        self.score   = 0
        self.towels  = 0
        self.towel_score = 0
        self.victory = False
        self.milestone_reached = False
        self._step_n = 0
        self._reward = 0.0

    def teardown(self) -> None:
        """Cancel everything the level scheduled and drop world overrides."""
        self.drive.shutdown()
        self._actor_timers.close()
        self._entity_timers.close()
        self.scheduler.clear()
        self.world.reset()

    def reset(self, seed: Optional[int] = None) -> dict:
        """Restart the level. Returns initial obs dict."""
        self.teardown()
        if seed is not None:
            self._seed = seed
            self.rng = random.Random(seed)
        self._build()
        return self._obs()

    @property
    def now(self) -> float:
        return self.scheduler.now

    @property
    def solids(self) -> list[pygame.Rect]:
        return [self.ground] + self.platforms

    # ── Step ──────────────────────────────────────────────────────────────────

    def step(self, action: int, dt: float = 1.0 / C.FPS) -> tuple[dict, float, bool]:
        """
        Advance the simulation one frame.

        Parameters
        ----------
        action : int    key of constants.ACTIONS (unknown ids mean idle)
        dt     : float  seconds of game clock for this frame

        Returns
        -------
        obs    : dict
        reward : float
        done   : bool   player dead or every towel collected
        """
        self._step_n += 1
        self._reward  = C.REWARD_ALIVE

        now = self.scheduler.now + dt * 1000.0
        self.scheduler.advance(now)

        if self.player.alive:
            self._apply_input(action)

        pdt = dt * self.world.time_scale
        self._move_actor(self.player, pdt)
        for enemy in self.enemies:
            run_behavior(enemy, self.player)
            self._move_actor(enemy, pdt)
            if wants_to_attack(enemy, self.player, now):
                self.spawn_poetry(enemy)

        for ent in (*self.projectiles, *self.hazards, *self.decorations):
            ent.update(pdt)

        self._resolve_overlaps()
        self._cull()

        if not self.victory and self.player.alive and not any(c.active for c in self.collectibles):
            self.victory  = True
            self._reward += C.REWARD_VICTORY
            self.hud.show_message("You collected all the towels in the galaxy!")
            logger.info("victory with score %d", self.score)

        self.drive.tick(now)
        self.quotes.tick(now)

        done = self.player.is_dead or self.victory
        return self._obs(), self._reward, done

    def advance(self, ms: float, action: int = 0) -> tuple[dict, float, bool]:
        """Run whole frames until `ms` of game clock has passed."""
        frame = 1000.0 / C.FPS
        result = self.step(action, min(ms, frame) / 1000.0)
        ms -= frame
        while ms > 0:
            result = self.step(action, min(ms, frame) / 1000.0)
            ms -= frame
        return result

    # ── Input & physics ───────────────────────────────────────────────────────

    def _apply_input(self, action: int) -> None:
        move, vert = C.ACTIONS.get(action, (0, 0))
        p = self.player
        g = self.world.gravity_sign

        if p.form == "babel_fish":
            speed = p.speed * C.FISH_SPEED_FACTOR
            p.vx = move * speed
            if vert:
                p.vy = vert * speed
            elif not p.on_ground:
                p.vy = C.FISH_SINK_SPEED * g
            else:
                p.vy = 0.0
        else:
            p.vx = move * p.speed
            if vert < 0 and p.on_ground:
                p.vy = -C.PLAYER_JUMP * g
                p.on_ground = False
                self.play("jump")
        if move:
            p.facing = move

    def _move_actor(self, a: Actor, dt: float) -> None:
        if not a.active:
            return
        g = self.world.gravity_sign
        swimming = a is self.player and a.form == "babel_fish"
        if not (a.can_fly or swimming):
            a.vy = max(-C.MAX_FALL, min(C.MAX_FALL, a.vy + C.GRAVITY * g * dt))

        a.x += a.vx * dt
        half_w = a.w / 2
        if a.x < half_w or a.x > C.WORLD_W - half_w:
            a.x = min(max(a.x, half_w), C.WORLD_W - half_w)
            if a.behavior == "patrol":
                a.direction *= -1

        old = a.hitbox
        a.y += a.vy * dt
        a.on_ground = False
        for solid in self.solids:
            r = a.hitbox
            if not r.colliderect(solid):
                continue
            if a.vy >= 0 and old.bottom <= solid.top + 1:
                a.y = solid.top - a.h / 2
                a.vy = 0.0
                a.on_ground = g > 0
            elif a.vy <= 0 and old.top >= solid.bottom - 1:
                a.y = solid.bottom + a.h / 2
                a.vy = 0.0
                a.on_ground = g < 0

        # world bounds: the ceiling is a floor when gravity is reversed
        if a.y - a.h / 2 < 0:
            a.y = a.h / 2
            a.vy = max(a.vy, 0.0)
            a.on_ground = a.on_ground or g < 0

    # ── Overlaps ──────────────────────────────────────────────────────────────

    def _resolve_overlaps(self) -> None:
        p = self.player
        if p.alive:
            for towel in self.collectibles:
                if towel.active and p.hitbox.colliderect(towel.hitbox):
                    towel.collect(p)
            for enemy in self.enemies:
                if enemy.alive and p.alive and p.hitbox.colliderect(enemy.hitbox):
                    self._enemy_contact(enemy)
            for poem in self.projectiles:
                if poem.active and p.alive and p.hitbox.colliderect(poem.hitbox):
                    self._poetry_hit(poem)

        for pot in self.hazards:
            if not pot.active:
                continue
            if p.alive and p.hitbox.colliderect(pot.hitbox):
                pot.destroy()
                if not p.is_invulnerable:
                    p.take_damage(C.HAZARD_DAMAGE)
            elif pot.hitbox.collidelist(self.solids) != -1:
                pot.destroy()

    def _enemy_contact(self, enemy: Actor) -> None:
        p = self.player
        g = self.world.gravity_sign
        falling_onto = p.vy * g > 0 and (
            p.hitbox.bottom <= enemy.hitbox.centery if g > 0
            else p.hitbox.top >= enemy.hitbox.centery)
        if falling_onto:
            enemy.take_damage(C.STOMP_DAMAGE)
            p.vy = C.STOMP_BOUNCE * g
            return

        if p.is_invulnerable:
            return
        if p.take_damage(enemy.damage):
            kx, ky = C.CONTACT_KNOCKBACK
            p.vx = -kx if p.x < enemy.x else kx
            p.vy = ky * g

    def _poetry_hit(self, poem: Poetry) -> None:
        p = self.player
        if p.is_invulnerable:
            return
        p.take_damage(poem.damage)
        poem.destroy()
        self.hud.show_poetry(self.rng.choice(C.POETRY_LINES), p.x, p.y - 50)

    def _cull(self) -> None:
        self.enemies      = [e for e in self.enemies if e.active]
        self.collectibles = [c for c in self.collectibles if c.active]
        self.projectiles  = [x for x in self.projectiles if x.active]
        self.hazards      = [x for x in self.hazards if x.active]
        self.decorations  = [x for x in self.decorations if x.active]

    # ── Hooks ─────────────────────────────────────────────────────────────────

    def _on_player_damage(self, player: Actor, amount: int) -> None:
        self.play("damage")
        self._reward += C.REWARD_HIT * amount / 10.0

    def _on_player_death(self, player: Actor) -> None:
        self._reward += C.REWARD_DEATH
        logger.info("%s has died. So it goes for carbon-based life forms.", player.name)

    def _on_enemy_death(self, enemy: Actor) -> None:
        enemy.destroy()
        self.add_score(enemy.score_value)

    def _on_collect(self, towel: Collectible, actor) -> None:
        self.play("collect")
        self.towels += 1
        self.towel_score += towel.value
        self.add_score(towel.value)
        # only towels count toward 42, enemy kills do not
        if not self.milestone_reached and self.towel_score >= C.ANSWER_TO_EVERYTHING:
            self.milestone_reached = True
            self._on_milestone()

    def add_score(self, points: int) -> None:
        self.score   += points
        self._reward += points / 10.0

    def _on_milestone(self) -> None:
        logger.info("%d towel points: the Answer to Life, the Universe, and Everything",
                    self.towel_score)
        self.play("forty_two")
        self.hud.show_banner(C.BANNER_TEXT)
        self.player.grant_invulnerability(C.MILESTONE_INVULN_MS)
        self.drive.trigger_milestone_sequence()

    # ── Spawning (also used by the improbability drive) ───────────────────────

    def play(self, cue: str, volume: float = 1.0) -> None:
        self.audio.play(cue, volume)

    def spawn_collectible(self, x: float, y: float, kind: str = "towel",
                          value: int = C.TOWEL_VALUE) -> Collectible:
        towel = Collectible(x, y, kind, value, on_collect=self._on_collect)
        self.collectibles.append(towel)
        return towel

    def spawn_poetry(self, enemy: Actor) -> Poetry:
        p = self.player
        dx, dy = p.x - enemy.x, p.y - enemy.y
        length = math.hypot(dx, dy) or 1.0
        mx, my = C.POETRY_MOUTH
        poem = Poetry(self._entity_timers, enemy.x + mx * enemy.facing, enemy.y + my,
                      dx / length, dy / length)
        self.projectiles.append(poem)
        self.play("poetry")
        logger.debug("%s unleashed poetry. May the gods have mercy.", enemy.name)
        return poem

    def spawn_hazard(self, x: float, y: float, vx: float, spin: float) -> Hazard:
        pot = Hazard(self._entity_timers, x, y, vx, spin)
        self.hazards.append(pot)
        return pot

    def spawn_decoration(self, name: str, x: float, y: float, size: tuple[int, int],
                         color: tuple, thought: str) -> Decoration:
        deco = Decoration(self._entity_timers, name, x, y, size, color, thought)
        self.decorations.append(deco)
        return deco

    # ── Obs dict ──────────────────────────────────────────────────────────────

    def _obs(self) -> dict:
        p = self.player
        player = p.as_dict()
        player.update({"vx": p.vx, "vy": p.vy, "on_ground": p.on_ground,
                       "invulnerable": p.is_invulnerable, "dead": p.is_dead})
        return {
            "time":         self.scheduler.now,
            "player":       player,
            "score":        self.score,
            "towels":       self.towels,
            "towel_score":  self.towel_score,
            "towels_left":  sum(1 for c in self.collectibles if c.active),
            "enemies":      [e.as_dict() for e in self.enemies if e.active],
            "collectibles": [c.as_dict() for c in self.collectibles if c.active],
            "projectiles":  sum(1 for x in self.projectiles if x.active),
            "hazards":      sum(1 for x in self.hazards if x.active),
            "effects":      [t.effect for t in self.drive.active],
            "world":        self.world.as_dict(),
            "message":      self.hud.current_message,
            "poetry":       [f[0] for f in self.hud.prune_floaters()],
            "victory":      self.victory,
        }

    # ── Render ────────────────────────────────────────────────────────────────

    def render(self) -> None:
        """Draw current state. Safe to call even if render=False (no-ops)."""
        if self.surface is None:
            return
        now = self.scheduler.now
        self.surface.fill(C.BG_COLOR)
        for x, y, s in self._stars:
            pygame.draw.circle(self.surface, C.STAR_COLOR, (x, y), s)
        pygame.draw.rect(self.surface, C.GROUND_COLOR, self.ground)
        for plat in self.platforms:
            pygame.draw.rect(self.surface, C.PLATFORM_COLOR, plat, border_radius=3)

        for towel in self.collectibles:
            towel.draw(self.surface, now)
        for enemy in self.enemies:
            enemy.draw(self.surface, now)
        self.player.draw(self.surface, now)
        for ent in (*self.projectiles, *self.hazards):
            ent.draw(self.surface)
        for deco in self.decorations:
            deco.draw(self.surface, self.small)

        self._draw_world_effects()
        self.hud.draw(self.surface, self.font, self.small, self)
        pygame.display.flip()

    def _draw_world_effects(self) -> None:
        tint = self.world.tint
        if tint is not None:
            veil = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
            veil.fill((*tint, 60))
            self.surface.blit(veil, (0, 0))
        if self.world.inverted:
            inv = pygame.Surface((C.SCREEN_W, C.SCREEN_H))
            inv.fill(C.WHITE)
            inv.blit(self.surface, (0, 0), special_flags=pygame.BLEND_RGB_SUB)
            self.surface.blit(inv, (0, 0))
        if self.world.flash:
            self.surface.fill(C.FLASH_COLOR)

    def tick(self) -> float:
        """Advance the clock; returns dt in seconds. Call once per frame."""
        if self.clock is None:
            return 1.0 / C.FPS
        ms = self.clock.tick(C.FPS)
        return min(ms / 1000.0, C.MAX_DT)

    def close(self) -> None:
        self.teardown()
        if pygame.get_init():
            pygame.quit()


# ─────────────────────────────────────────────────────────────────────────────
# Human play entry point
# ─────────────────────────────────────────────────────────────────────────────

def action_from_keys(left: bool, right: bool, up: bool, down: bool = False) -> int:
    move = (1 if right else 0) - (1 if left else 0)
    if up:
        return {0: 3, -1: 4, 1: 5}[move]
    if down and not move:
        return 6
    return {0: 0, -1: 1, 1: 2}[move]


def main() -> None:
    parser = argparse.ArgumentParser(description="Don't Panic: a Hitchhiker's platformer")
    parser.add_argument("--seed",      type=int, default=None)
    parser.add_argument("--character", choices=C.CHARACTERS, default="arthur")
    parser.add_argument("--verbose",   action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    game = Game(render=True, seed=args.seed, character=args.character)
    attempts = 0
    best     = 0

    print("LEFT/RIGHT = move   UP = jump   R = restart   Q = quit")
    print("Don't Panic.")

    running = True
    while running:
        dt = game.tick()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_r:
                    game.reset()
                    attempts += 1
                elif event.key in (pygame.K_q, pygame.K_ESCAPE):
                    running = False

        keys = pygame.key.get_pressed()
        action = action_from_keys(keys[pygame.K_LEFT], keys[pygame.K_RIGHT],
                                  keys[pygame.K_UP], keys[pygame.K_DOWN])

        obs, reward, done = game.step(action, dt)
        game.render()

        best = max(best, obs["score"])

        if done:
            attempts += 1
            outcome = "all towels!" if obs["victory"] else "So long, and thanks for all the towels"
            print(f"Attempt {attempts} | score={obs['score']} towels={obs['towels']} "
                  f"| best={best} | {outcome}")
            pygame.time.wait(1500)
            game.reset()

    game.close()


if __name__ == "__main__":
    main()
