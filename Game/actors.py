"""
actors.py
=========
Anything with health: the player and the enemies.

Health, hit reactions and temporary invulnerability are one state machine
shared by every actor:

    vulnerable ──hit──▶ invulnerable ──expire──▶ vulnerable
         │                   │  ▲
         │                   └──┘ shield (re-grant resets the deadline)
         └──────die──────▶ dead ◀──────die──────┘

Enemy variety is data, not subclasses: an actor carries a `behavior` tag
that is looked up in BEHAVIOR_TABLE each frame, plus an optional
RangedAttack capability (Vogon poetry).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

import pygame
from statemachine import State, StateMachine

import constants as C
from timers import CooldownTimer, TimerHandle

logger = logging.getLogger(__name__)


class HealthFSM(StateMachine):
    """Guards the legal health transitions. Actor decides when to send them."""

    vulnerable   = State(initial=True)
    invulnerable = State()
    dead         = State(final=True)

    hit    = vulnerable.to(invulnerable)
    shield = vulnerable.to(invulnerable) | invulnerable.to.itself()
    expire = invulnerable.to(vulnerable)
    die    = vulnerable.to(dead) | invulnerable.to(dead)


@dataclass
class RangedAttack:
    cooldown   : CooldownTimer
    range      : float = C.POETRY_RANGE
    suppressed : int   = 0          # > 0 while some effect has silenced it

    @property
    def enabled(self) -> bool:
        return self.suppressed == 0


# ─────────────────────────────────────────────────────────────────────────────
# Actor
# ─────────────────────────────────────────────────────────────────────────────

class Actor:
    """
    A damageable entity.

    Parameters
    ----------
    timers : Scheduler | TimerScope
        Where the grace-period expiry is scheduled.  Anything with `now` and
        `call_later(delay, cb)`.
    grace_ms : float
        Invulnerability window after a non-lethal hit.

    Hooks
    -----
    on_damage(actor, amount) and on_death(actor) are called by the state
    machine; on_death fires exactly once.
    """

    def __init__(
        self,
        name       : str,
        kind       : str,
        x          : float,
        y          : float,
        w          : int,
        h          : int,
        max_health : int,
        grace_ms   : float,
        timers,
        *,
        speed       : float = 0.0,
        damage      : int   = 0,
        score_value : int   = 0,
        behavior    : str   = "stationary",
        ranged      : Optional[RangedAttack] = None,
        can_fly     : bool  = False,
        direction   : int   = 1,
        color       : tuple = (255, 255, 255),
    ) -> None:
        if max_health <= 0:
            raise ValueError(f"max_health must be > 0, got {max_health}")
        self.name        = name
        self.kind        = kind
        self.max_health  = int(max_health)
        self.health      = int(max_health)
        self.grace_ms    = float(grace_ms)
        self.timers      = timers
        self.fsm         = HealthFSM()

        self.x  : float = float(x)
        self.y  : float = float(y)
        self.vx : float = 0.0
        self.vy : float = 0.0
        self.w  = w
        self.h  = h
        self.on_ground = False
        self.facing    = 1

        self.speed       = float(speed)
        self.damage      = int(damage)
        self.score_value = int(score_value)
        self.behavior    = behavior
        self.ranged      = ranged
        self.can_fly     = can_fly
        self.direction   = direction
        self.start_x     = float(x)

        self.form   = "human" if kind == "player" else kind
        self.scale  = 1.0
        self.color  = color
        self.aura   = 0             # > 0 while an invincibility aura is on
        self.active = True
        self.flash_until : float = -1.0
        self.invulnerability_deadline : Optional[float] = None

        self.on_damage : Optional[Callable[["Actor", int], None]] = None
        self.on_death  : Optional[Callable[["Actor"], None]]      = None

        self._expiry : Optional[TimerHandle] = None
        self._transforms = 0
        self._original_form : Optional[tuple] = None

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def state(self) -> str:
        if self.fsm.dead.is_active:
            return "dead"
        if self.fsm.invulnerable.is_active:
            return "invulnerable"
        return "vulnerable"

    @property
    def is_dead(self) -> bool:
        return self.fsm.dead.is_active

    @property
    def is_invulnerable(self) -> bool:
        return self.fsm.invulnerable.is_active

    @property
    def alive(self) -> bool:
        return self.active and not self.is_dead

    # ── Damage ────────────────────────────────────────────────────────────────

    def take_damage(self, amount: int) -> bool:
        """Apply a hit. Returns False when it was ignored (invulnerable, dead, gone)."""
        if not self.active or not self.fsm.vulnerable.is_active:
            logger.debug("%s ignores %d damage (%s)", self.name, amount, self.state)
            return False

        self.health = max(0, self.health - int(amount))
        self.flash_until = self.timers.now + C.FLASH_MS
        if self.on_damage is not None:
            self.on_damage(self, int(amount))

        if self.health <= 0:
            self._die()
        else:
            self.fsm.hit()
            self._arm_expiry(self.grace_ms)
        return True

    def grant_invulnerability(self, duration: float) -> bool:
        """Force invulnerability. Re-granting resets the deadline, never stacks."""
        if not self.active or self.is_dead:
            return False
        self.fsm.shield()
        self._arm_expiry(duration)
        return True

    def destroy(self) -> None:
        """Remove from the world. Pending timers of this actor are cancelled."""
        if not self.active:
            return
        self.active = False
        self._cancel_expiry()

    def _arm_expiry(self, duration: float) -> None:
        self._cancel_expiry()
        self.invulnerability_deadline = self.timers.now + duration
        self._expiry = self.timers.call_later(duration, self._expire)

    def _cancel_expiry(self) -> None:
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None

    def _expire(self) -> None:
        self._expiry = None
        self.invulnerability_deadline = None
        if self.active and self.is_invulnerable:
            self.fsm.expire()

    def _die(self) -> None:
        self._cancel_expiry()
        self.invulnerability_deadline = None
        self.health = 0
        self.vx = 0.0
        self.vy = 0.0
        self.fsm.die()
        logger.info("%s has died", self.name)
        if self.on_death is not None:
            self.on_death(self)

    # ── Form ──────────────────────────────────────────────────────────────────

    @property
    def transformed(self) -> bool:
        return self._transforms > 0

    def transform(self, form: str, scale: float, size: Optional[tuple[int, int]] = None) -> None:
        """Swap visual form (and optionally hitbox). Nested transforms restore once, at the end."""
        if self._transforms == 0:
            self._original_form = (self.form, self.scale, self.w, self.h)
        self._transforms += 1
        self.form  = form
        self.scale = scale
        if size is not None:
            self._resize(*size)

    def restore_form(self) -> bool:
        if self._transforms == 0:
            return False
        self._transforms -= 1
        if self._transforms == 0 and self._original_form is not None:
            form, scale, w, h = self._original_form
            self.form, self.scale = form, scale
            self._resize(w, h)
            self._original_form = None
        return True

    def _resize(self, w: int, h: int) -> None:
        # keep the feet where they were
        self.y += (self.h - h) / 2
        self.w, self.h = w, h

    # ── Geometry ──────────────────────────────────────────────────────────────

    @property
    def hitbox(self) -> pygame.Rect:
        return pygame.Rect(int(self.x - self.w / 2), int(self.y - self.h / 2),
                           int(self.w), int(self.h))

    def distance_to(self, other: "Actor") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def as_dict(self) -> dict:
        return {
            "name":   self.name,
            "kind":   self.kind,
            "x":      self.x,
            "y":      self.y,
            "health": self.health,
            "state":  self.state,
            "form":   self.form,
        }

    def draw(self, surface: pygame.Surface, now: float) -> None:
        if not self.active:
            return
        r   = self.hitbox.inflate(int(self.w * (self.scale - 1)), int(self.h * (self.scale - 1)))
        col = C.BABEL_FISH_COLOR if self.form == "babel_fish" else self.color
        if now < self.flash_until:
            col = C.DAMAGE_TINT
        if self.is_dead:
            col = tuple(c // 3 for c in col)
        if self.form == "babel_fish":
            pygame.draw.ellipse(surface, col, r)
        else:
            pygame.draw.rect(surface, col, r, border_radius=4)
        if self.is_invulnerable and self.kind == "player":
            pygame.draw.rect(surface, C.WHITE, r.inflate(6, 6), 1, border_radius=6)
        if self.aura:
            pygame.draw.ellipse(surface, C.AURA_COLOR, r.inflate(14, 14), 2)


# ─────────────────────────────────────────────────────────────────────────────
# Behaviours
# ─────────────────────────────────────────────────────────────────────────────
# Each behaviour only sets velocities; Game integrates them with the rest of
# the physics.

def _patrol(actor: Actor, target: Optional[Actor]) -> None:
    actor.vx = actor.speed * actor.direction
    if ((actor.direction == 1 and actor.x >= actor.start_x + C.PATROL_DISTANCE) or
            (actor.direction == -1 and actor.x <= actor.start_x - C.PATROL_DISTANCE)):
        actor.direction *= -1
    actor.facing = actor.direction


def _follow(actor: Actor, target: Optional[Actor]) -> None:
    if target is None or not target.alive:
        actor.vx = 0.0
        if actor.can_fly:
            actor.vy = 0.0
        return

    dx, dy = target.x - actor.x, target.y - actor.y
    dist = math.hypot(dx, dy)
    if 0 < dist <= C.FOLLOW_RANGE:
        actor.vx = dx / dist * actor.speed
        if actor.can_fly:
            actor.vy = dy / dist * actor.speed
        actor.facing = -1 if dx < 0 else 1
    else:
        actor.vx = 0.0
        if actor.can_fly:
            actor.vy = 0.0


def _stationary(actor: Actor, target: Optional[Actor]) -> None:
    actor.vx = 0.0


BEHAVIOR_TABLE: dict[str, Callable[[Actor, Optional[Actor]], None]] = {
    "patrol":     _patrol,
    "follow":     _follow,
    "stationary": _stationary,
}


def run_behavior(actor: Actor, target: Optional[Actor]) -> None:
    if not actor.alive:
        return
    BEHAVIOR_TABLE[actor.behavior](actor, target)


def wants_to_attack(actor: Actor, target: Optional[Actor], now: float) -> bool:
    """
    True when `actor` should fire its ranged attack at `target` this frame.
    Starts the attack cooldown when it returns True.
    """
    ranged = actor.ranged
    if ranged is None or not ranged.enabled or not actor.alive:
        return False
    if target is None or not target.alive:
        return False
    if not ranged.cooldown.ready(now):
        return False
    if actor.distance_to(target) > ranged.range:
        return False
    ranged.cooldown.reset(now)
    return True


# ─────────────────────────────────────────────────────────────────────────────
# Factories
# ─────────────────────────────────────────────────────────────────────────────

def make_player(timers, character: str = "arthur") -> Actor:
    if character not in C.CHARACTERS:
        raise ValueError(f"unknown character {character!r}, pick one of {C.CHARACTERS}")
    x, y = C.PLAYER_SPAWN
    return Actor(
        character.capitalize(), "player", x, y, C.PLAYER_W, C.PLAYER_H,
        C.PLAYER_HEALTH, C.PLAYER_GRACE_MS, timers,
        speed=C.PLAYER_SPEED,
        color=C.PLAYER_COLORS[character],
    )


def make_enemy(
    timers,
    kind      : str,
    x         : float,
    y         : float,
    behavior  : str   = "patrol",
    direction : int   = 1,
    speed     : Optional[float] = None,
) -> Actor:
    if kind not in C.ENEMY_TYPES:
        raise ValueError(f"unknown enemy kind {kind!r}")
    if behavior not in BEHAVIOR_TABLE:
        logger.warning("unknown enemy behavior %r, defaulting to 'stationary'", behavior)
        behavior = "stationary"

    d = C.ENEMY_TYPES[kind]
    ranged = None
    if d["ranged"]:
        # first recital no sooner than one cooldown into the level
        ranged = RangedAttack(CooldownTimer(C.POETRY_COOLDOWN_MS, last_trigger=timers.now))

    enemy = Actor(
        kind.capitalize(), kind, x, y, d["w"], d["h"],
        d["health"], C.ENEMY_GRACE_MS, timers,
        speed       = d["speed"] if speed is None else speed,
        damage      = d["damage"],
        score_value = d["score"],
        behavior    = behavior,
        ranged      = ranged,
        direction   = direction,
        color       = C.ENEMY_COLORS[kind],
    )
    logger.debug("%s (%s) created at (%.0f, %.0f)", enemy.name, behavior, x, y)
    return enemy
