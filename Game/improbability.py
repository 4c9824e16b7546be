"""
improbability.py
================
The Infinite Improbability Drive.

Every frame the game calls `drive.tick(now)`.  Once the 5 s floor since the
last event has passed, each tick is a Bernoulli trial: with probability
IMPROBABILITY_CHANCE one of nine effects is picked uniformly and applied.
A missed roll does not restart the floor, so after a quiet spell the drive
keeps rolling every frame until something happens.

Each effect is an (apply, revert) pair.  apply() records everything needed
to undo itself on a RevertToken; the drive schedules exactly one revert per
token.  Reverts check that their targets still exist before touching them,
because by the time the timer fires the towel may be collected, the enemy
stomped or the whale already off screen.

The scene handed to the drive is the Game.  The effects use:

    scene.player, scene.enemies         actors
    scene.world                         WorldModifiers
    scene.rng                           random.Random
    scene.hud.show_message(text)
    scene.play(cue, volume=1.0)
    scene.spawn_collectible(x, y)
    scene.spawn_hazard(x, y, vx, spin)
    scene.spawn_decoration(name, x, y, size, color, thought)
"""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

import constants as C
from timers import CooldownTimer, TimerHandle, TimerScope

logger = logging.getLogger(__name__)


@dataclass
class RevertToken:
    effect     : str
    applied_at : float
    state      : dict = field(default_factory=dict)
    timer      : Optional[TimerHandle] = None
    reverted   : bool = False


@dataclass(frozen=True)
class ImprobableEffect:
    name     : str
    duration : float
    message  : str
    apply    : Callable[[object, RevertToken], None]
    revert   : Callable[[object, RevertToken], None]


# ─────────────────────────────────────────────────────────────────────────────
# Effects
# ─────────────────────────────────────────────────────────────────────────────

def _release_overrides(scene, token: RevertToken) -> None:
    for ov in token.state.get("overrides", []):
        scene.world.release(ov)


def _destroy_spawned(scene, token: RevertToken) -> None:
    for ent in token.state.get("spawned", []):
        ent.destroy()


# gravity ──────────────────────────────────────────────────────────────────────

def _apply_gravity_reversal(scene, token: RevertToken) -> None:
    token.state["overrides"] = [scene.world.override("gravity_sign", -1)]


# towels ───────────────────────────────────────────────────────────────────────

def _apply_spawn_towels(scene, token: RevertToken) -> None:
    p     = scene.player
    count = scene.rng.randint(C.TOWEL_SPAWN_MIN, C.TOWEL_SPAWN_MAX)
    step  = 2 * math.pi / count
    towels = []
    for i in range(count):
        x = p.x + math.cos(i * step) * C.TOWEL_SPAWN_RADIUS
        y = p.y + math.sin(i * step) * C.TOWEL_SPAWN_RADIUS
        x = min(max(x, C.TOWEL_SIZE), C.WORLD_W - C.TOWEL_SIZE)
        y = min(max(y, C.TOWEL_SIZE), C.GROUND_Y - C.TOWEL_SIZE)
        towels.append(scene.spawn_collectible(x, y))
    token.state["spawned"] = towels


def _revert_spawn_towels(scene, token: RevertToken) -> None:
    for towel in token.state.get("spawned", []):
        if towel.active and not towel.collected:
            towel.destroy()


# whale ────────────────────────────────────────────────────────────────────────

def _apply_spawn_whale(scene, token: RevertToken) -> None:
    p  = scene.player
    ww, wh = C.WHALE_SIZE
    whale = scene.spawn_decoration(
        "whale", p.x, p.y - C.WHALE_DROP,
        (ww * C.WHALE_SCALE, wh * C.WHALE_SCALE), C.WHALE_COLOR, C.WHALE_THOUGHT)
    petunias = scene.spawn_decoration(
        "petunias", whale.x + 50, whale.y - 20,
        C.PETUNIA_SIZE, C.PETUNIA_COLOR, C.PETUNIA_THOUGHT)
    token.state["spawned"] = [whale, petunias]


# flower pots ──────────────────────────────────────────────────────────────────

def _apply_falling_hazards(scene, token: RevertToken) -> None:
    rng   = scene.rng
    count = rng.randint(C.HAZARD_MIN, C.HAZARD_MAX)
    pots  = []
    for _ in range(count):
        pots.append(scene.spawn_hazard(
            rng.randint(0, C.WORLD_W),
            rng.randint(*C.HAZARD_Y_RANGE),
            rng.uniform(-C.HAZARD_DRIFT, C.HAZARD_DRIFT),
            rng.uniform(-C.HAZARD_SPIN, C.HAZARD_SPIN),
        ))
    token.state["spawned"] = pots


# invincibility ────────────────────────────────────────────────────────────────

def _apply_invincibility(scene, token: RevertToken) -> None:
    p = scene.player
    if not p.alive:
        return
    p.grant_invulnerability(C.EFFECT_DURATIONS["invincibility"])
    p.aura += 1
    token.state["player"] = p


def _revert_invincibility(scene, token: RevertToken) -> None:
    p = token.state.get("player")
    if p is not None and p.active:
        p.aura = max(0, p.aura - 1)


# slow motion ──────────────────────────────────────────────────────────────────

def _apply_slow_motion(scene, token: RevertToken) -> None:
    token.state["overrides"] = [
        scene.world.override("time_scale", C.SLOW_TIME_SCALE),
        scene.world.override("tint", C.SLOW_TINT),
    ]


# enemy transformation ─────────────────────────────────────────────────────────

def _apply_enemy_transform(scene, token: RevertToken) -> None:
    changed = []
    for enemy in scene.enemies:
        if not enemy.alive:
            continue
        enemy.transform("babel_fish", C.ENEMY_FISH_SCALE)
        if enemy.ranged is not None:
            enemy.ranged.suppressed += 1
        changed.append(enemy)
    token.state["enemies"] = changed


def _revert_enemy_transform(scene, token: RevertToken) -> None:
    for enemy in token.state.get("enemies", []):
        if not enemy.active:
            continue
        enemy.restore_form()
        if enemy.ranged is not None:
            enemy.ranged.suppressed = max(0, enemy.ranged.suppressed - 1)


# colour inversion ─────────────────────────────────────────────────────────────

def _apply_color_invert(scene, token: RevertToken) -> None:
    token.state["overrides"] = [scene.world.override("inverted", True)]


# babel fish player ────────────────────────────────────────────────────────────

def _apply_player_transform(scene, token: RevertToken) -> None:
    p = scene.player
    if not p.alive:
        return
    p.transform("babel_fish", C.FISH_SCALE, (C.FISH_W, C.FISH_H))
    token.state["player"] = p


def _revert_player_transform(scene, token: RevertToken) -> None:
    p = token.state.get("player")
    if p is not None and p.active:
        p.restore_form()


_TABLE = [
    ("gravity_reversal", _apply_gravity_reversal, _release_overrides),
    ("spawn_towels",     _apply_spawn_towels,     _revert_spawn_towels),
    ("spawn_whale",      _apply_spawn_whale,      _destroy_spawned),
    ("falling_hazards",  _apply_falling_hazards,  _destroy_spawned),
    ("invincibility",    _apply_invincibility,    _revert_invincibility),
    ("slow_motion",      _apply_slow_motion,      _release_overrides),
    ("enemy_transform",  _apply_enemy_transform,  _revert_enemy_transform),
    ("color_invert",     _apply_color_invert,     _release_overrides),
    ("player_transform", _apply_player_transform, _revert_player_transform),
]

EFFECTS: dict[str, ImprobableEffect] = {
    name: ImprobableEffect(name, C.EFFECT_DURATIONS[name], C.EFFECT_MESSAGES[name], apply, revert)
    for name, apply, revert in _TABLE
}

EFFECT_NAMES: tuple[str, ...] = tuple(name for name, _, _ in _TABLE)


# ─────────────────────────────────────────────────────────────────────────────
# Dispatcher
# ─────────────────────────────────────────────────────────────────────────────

class ImprobabilityDrive:
    """
    Parameters
    ----------
    scene : Game
        See module docstring for what the effects touch.
    timers : TimerScope
        Owned by the drive; closed by shutdown().
    rng : random.Random
        Shared, seeded game RNG so runs are reproducible.
    """

    def __init__(
        self,
        scene,
        timers      : TimerScope,
        rng,
        chance      : float = C.IMPROBABILITY_CHANCE,
        cooldown_ms : float = C.IMPROBABILITY_COOLDOWN_MS,
        catalog     : Optional[dict[str, ImprobableEffect]] = None,
    ) -> None:
        if not 0.0 <= chance <= 1.0:
            raise ValueError(f"chance must be in [0, 1], got {chance}")
        self.scene    = scene
        self.timers   = timers
        self.rng      = rng
        self.chance   = chance
        self.catalog  = EFFECTS if catalog is None else catalog
        self.names    = tuple(self.catalog)
        # the clock starts at level start, so the first event waits a full floor
        self.cooldown = CooldownTimer(cooldown_ms, last_trigger=timers.now)

        self.active  : list[RevertToken] = []
        self.history : list[str] = []
        self.milestone_fired  = False
        self._suppressed_until: Optional[float] = None

        logger.debug("Infinite Improbability Drive online. Reality stability no longer guaranteed.")

    # ── Random events ─────────────────────────────────────────────────────────

    def suppressed(self, now: float) -> bool:
        return self._suppressed_until is not None and now < self._suppressed_until

    def tick(self, now: float) -> Optional[RevertToken]:
        """One scheduling check. Returns the token of the event fired, if any."""
        if self.suppressed(now) or not self.cooldown.ready(now):
            return None
        if self.rng.random() >= self.chance:
            return None
        name = self.names[self.rng.randrange(len(self.names))]
        self.cooldown.reset(now)
        return self.trigger(name)

    def trigger(self, name: str, quiet: bool = False) -> Optional[RevertToken]:
        """
        Apply effect `name` now and schedule its single revert.

        quiet=True skips the cue and the message (used inside the milestone
        sequence, which announces itself).
        """
        effect = self.catalog.get(name)
        if not quiet:
            self.scene.play("improbability")
        if effect is None:
            logger.warning("unknown improbable event %r", name)
            self.scene.hud.show_message(C.DEFAULT_EFFECT_MESSAGE)
            return None

        token = RevertToken(name, self.timers.now)
        effect.apply(self.scene, token)
        if not quiet:
            self.scene.hud.show_message(effect.message)
        token.timer = self.timers.call_later(
            effect.duration, functools.partial(self._revert, effect, token))
        self.active.append(token)
        self.history.append(name)
        logger.info("improbable event: %s (%.0f ms)", name, effect.duration)
        return token

    def _revert(self, effect: ImprobableEffect, token: RevertToken) -> None:
        if token.reverted:
            return
        token.reverted = True
        effect.revert(self.scene, token)
        if token in self.active:
            self.active.remove(token)
        logger.debug("reverted %s", effect.name)

    # ── The 42 sequence ───────────────────────────────────────────────────────

    def trigger_milestone_sequence(self) -> bool:
        """
        The Heart of Gold goes into overdrive: flash the screen, then fire a
        fixed chain of effects.  Random events are held off until the last
        one has fired.  Runs once per level; later calls return False.
        """
        if self.milestone_fired:
            logger.debug("milestone sequence already ran")
            return False
        self.milestone_fired = True

        now   = self.timers.now
        last  = max(delay for delay, _ in C.MILESTONE_STEPS)
        self._suppressed_until = now + C.MILESTONE_FLASH_MS + last

        self.scene.play("improbability", volume=1.5)
        flash = self.scene.world.override("flash", True)

        def after_flash() -> None:
            self.scene.world.release(flash)
            for delay, name in C.MILESTONE_STEPS:
                self.timers.call_later(delay, functools.partial(self.trigger, name, quiet=True))
            self.scene.hud.show_message(C.MILESTONE_MESSAGE)

        self.timers.call_later(C.MILESTONE_FLASH_MS, after_flash)
        logger.info("milestone reached, improbability drive in overdrive")
        return True

    # ── Teardown ──────────────────────────────────────────────────────────────

    def shutdown(self) -> None:
        self.timers.close()
        self.active.clear()
