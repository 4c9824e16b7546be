# =============================================================================
# constants.py
# =============================================================================
# ALL game configuration lives here. Never hardcode values in the logic
# modules. Change things here and they update everywhere automatically.
#
# UNITS:
#   Time      : milliseconds of game clock (timers, cooldowns, durations)
#   Distance  : pixels
#   Speed     : px/s         Acceleration : px/s²
#
# The game clock is advanced by Game.step(); physics is additionally scaled
# by the world time-scale (slow motion), timers are not.
# =============================================================================


# ── Display ───────────────────────────────────────────────────────────────────

SCREEN_W     = 800          # window width  in pixels
SCREEN_H     = 600          # window height in pixels
FPS          = 60
WINDOW_TITLE = "Don't Panic"


# ── Colours  (R, G, B) ────────────────────────────────────────────────────────

BG_COLOR       = (0,   0,   0)      # deep space
STAR_COLOR     = (255, 255, 255)
GROUND_COLOR   = (66,  245, 227)
PLATFORM_COLOR = (58,  134, 255)
PLAYER_COLORS  = {
    "arthur": (255, 107, 107),      # bathrobe pink
    "ford":   (255, 190, 80),
}
BABEL_FISH_COLOR = (250, 220, 40)
ENEMY_COLORS   = {
    "generic": (170, 90,  200),
    "vogon":   (77,  170, 87),
}
DAMAGE_TINT    = (255, 0,   0)
AURA_COLOR     = (255, 255, 0)
TOWEL_COLOR    = (76,  201, 240)
POETRY_COLOR   = (155, 93,  229)
HAZARD_COLOR   = (165, 42,  42)     # flower pot brown
WHALE_COLOR    = (120, 150, 190)
PETUNIA_COLOR  = (230, 120, 200)
SLOW_TINT      = (0,   0,   255)
FLASH_COLOR    = (255, 255, 255)
HUD_COLOR      = (255, 255, 255)
WHITE          = (255, 255, 255)
HEALTH_BG      = (40,  15,  15)
HEALTH_FG      = (255, 0,   0)
QUOTE_PANEL    = (0,   0,   0)
SPECIAL_QUOTE  = (66,  244, 241)    # the "42" teal
BANNER_COLOR   = (255, 0,   0)


# ── World geometry ────────────────────────────────────────────────────────────

WORLD_W      = SCREEN_W
WORLD_H      = SCREEN_H

GROUND_H     = 40
GROUND_Y     = WORLD_H - GROUND_H   # top edge of the ground slab

# Floating platforms as (centre_x, centre_y, width, height).
PLATFORMS = [
    (150, 500, 200, 20),
    (650, 500, 200, 20),
    (400, 450, 100, 20),
    (200, 350, 150, 20),
    (600, 350, 150, 20),
    (400, 250, 120, 20),
]

STAR_COUNT   = 100


# ── Physics ───────────────────────────────────────────────────────────────────

# Roughly 9.8 m/s² at 100 px per metre.
GRAVITY      = 980.0        # px/s²
MAX_FALL     = 900.0        # px/s, terminal velocity either way up
MAX_DT       = 1.0 / 30.0   # clamp huge frame gaps (window dragged, etc.)


# ── Player ────────────────────────────────────────────────────────────────────

PLAYER_SPEED       = 200.0  # px/s horizontal
PLAYER_JUMP        = 400.0  # px/s initial upward speed
PLAYER_W           = 24     # hitbox
PLAYER_H           = 40
PLAYER_SPAWN       = (100, 450)
PLAYER_HEALTH      = 100
PLAYER_GRACE_MS    = 1000   # invulnerability after a hit
FLASH_MS           = 200    # red damage tint

CHARACTERS   = ("arthur", "ford")

# Babel fish form (player transformation effect).
FISH_SCALE         = 3
FISH_W             = 16
FISH_H             = 8
FISH_SPEED_FACTOR  = 0.7
FISH_SINK_SPEED    = 50.0   # px/s drift when not swimming up or down

# Enemy contact.
CONTACT_KNOCKBACK  = (200.0, -200.0)   # (|vx|, vy) pushed onto the player
STOMP_DAMAGE       = 50
STOMP_BOUNCE       = -300.0


# ── Enemies ───────────────────────────────────────────────────────────────────

ENEMY_GRACE_MS     = 200    # enemies only flash briefly between hits
PATROL_DISTANCE    = 200.0  # px either side of spawn
ENEMY_SPEED_RANGE  = (50, 100)  # px/s, each spawned enemy rolls its own pace
FOLLOW_RANGE       = 300.0

ENEMY_TYPES = {
    "generic": {"health": 100, "damage": 10, "speed": 100.0, "score": 10,
                "w": 30, "h": 40, "ranged": False},
    "vogon":   {"health": 150, "damage": 15, "speed": 100.0, "score": 25,
                "w": 35, "h": 45, "ranged": True},
}


# Enemy spawns: (x, y, kind, behavior)
ENEMY_SPAWNS = [
    (300, 300, "vogon", "patrol"),
    (500, 300, "vogon", "patrol"),
    (200, 100, "vogon", "follow"),
    (600, 100, "vogon", "stationary"),
]


# ── Vogon poetry ──────────────────────────────────────────────────────────────

POETRY_COOLDOWN_MS = 3000
POETRY_RANGE       = 300.0
POETRY_SPEED       = 150.0
POETRY_DAMAGE      = 15
POETRY_LIFESPAN_MS = 3000
POETRY_SIZE        = 20
POETRY_MOUTH       = (20, -15)      # offset from the Vogon centre (x flips)
POETRY_LINE_MS     = 2000

POETRY_LINES = [
    "Oh fetid grobblings of a putrid sun!",
    "Moist is the moonlight on decaying blurgs",
    "My love is like a festering bureaucratic form",
    "Ode to a small lump of green putty I found in my armpit one midsummer morning",
    "The plurdled gabbleblotchits on a lurgid bee",
    "As the Ravenous Bugblatter Beast of Traal once said to me...",
    "Oh the rancid pustules of my seething bowels",
]


# ── Collectibles & scoring ────────────────────────────────────────────────────

TOWEL_VALUE          = 5
TOTAL_TOWELS         = 10
TOWEL_SIZE           = 20
TOWEL_AREA           = (50, 750, 50, 500)   # x_min, x_max, y_min, y_max

# The answer to the ultimate question of life, the universe, and everything.
ANSWER_TO_EVERYTHING = 42
MILESTONE_INVULN_MS  = 5000


# ── Infinite Improbability Drive ──────────────────────────────────────────────

IMPROBABILITY_CHANCE      = 0.05    # per check once the floor has elapsed
IMPROBABILITY_COOLDOWN_MS = 5000

# Effect durations.
EFFECT_DURATIONS = {
    "gravity_reversal":  4000,
    "spawn_towels":      10000,
    "spawn_whale":       10000,
    "falling_hazards":   10000,
    "invincibility":     10000,
    "slow_motion":       5000,
    "enemy_transform":   8000,
    "color_invert":      6000,
    "player_transform":  10000,
}

EFFECT_MESSAGES = {
    "gravity_reversal":  "Gravity decided to take a brief vacation!",
    "spawn_towels":      "By an extraordinary coincidence, extra towels have materialized!",
    "spawn_whale":       "Oh no, not again.",
    "falling_hazards":   "Watch out for falling flower pots!",
    "invincibility":     "You've become improbably invulnerable!",
    "slow_motion":       "Time is slowing down... well, more than usual.",
    "enemy_transform":   "The Vogons are experiencing an identity crisis!",
    "color_invert":      "Reality has temporarily decided to try a new look.",
    "player_transform":  "Don't forget your babel fish!",
}
DEFAULT_EFFECT_MESSAGE = "Something improbable has happened!"

SLOW_TIME_SCALE    = 0.3

TOWEL_SPAWN_MIN    = 3
TOWEL_SPAWN_MAX    = 6
TOWEL_SPAWN_RADIUS = 100.0

WHALE_DROP         = 300.0  # px above the player
WHALE_GRAVITY      = 500.0
WHALE_SCALE        = 2
WHALE_SIZE         = (64, 40)
PETUNIA_SIZE       = (14, 14)
WHALE_LIFESPAN_MS  = 10000
WHALE_THOUGHT      = ("Wow! What's happening? Who am I?\n"
                      "Why am I here? What's my purpose in life?")
PETUNIA_THOUGHT    = "Oh no, not again."

HAZARD_MIN         = 5
HAZARD_MAX         = 12
HAZARD_GRAVITY     = 300.0
HAZARD_DRIFT       = 50.0   # max |vx|
HAZARD_SPIN        = 100.0  # max |deg/s|
HAZARD_Y_RANGE     = (-300, -50)
HAZARD_DAMAGE      = 10
HAZARD_SIZE        = 20
HAZARD_LIFESPAN_MS = 10000

ENEMY_FISH_SCALE   = 2

# Milestone ("42") sequence: flash first, then these effects at these
# delays after the flash has finished.
MILESTONE_FLASH_MS = 1600
MILESTONE_STEPS = [
    (500,  "gravity_reversal"),
    (1500, "spawn_towels"),
    (2500, "enemy_transform"),
    (3500, "invincibility"),
]
MILESTONE_MESSAGE = ("The Answer to the Ultimate Question of Life,\n"
                     "the Universe, and Everything is... 42!")


# ── Quotes ────────────────────────────────────────────────────────────────────

QUOTE_COOLDOWN_MS = 30000
QUOTE_CHANCE      = 0.3
QUOTE_SHOW_MS     = 7000    # 1 s fade in, 5 s hold, 1 s fade out

QUOTES = [
    "Don't Panic!",
    "So long, and thanks for all the fish",
    "Time is an illusion. Lunchtime doubly so.",
    "The ships hung in the sky in much the same way that bricks don't.",
    "In the beginning, the universe was created. This has made a lot of "
    "people very angry and been widely regarded as a bad move.",
    "A towel is about the most massively useful thing an interstellar "
    "hitchhiker can have.",
    "I'd far rather be happy than right any day.",
    "For a moment, nothing happened. Then, after a second or so, nothing "
    "continued to happen.",
    "It is a mistake to think you can solve any major problems just with potatoes.",
    "This must be Thursday. I never could get the hang of Thursdays.",
    "The Answer to the Ultimate Question of Life, The Universe, and Everything is...42.",
]


# ── HUD ───────────────────────────────────────────────────────────────────────

MESSAGE_MS        = 3000
MESSAGE_FADE_MS   = 500
BANNER_TEXT       = "DON'T PANIC"
BANNER_MS         = 6000
HEALTH_BAR_W      = 150
HEALTH_BAR_H      = 20


# ── Rewards  (for agents driving the headless API) ────────────────────────────

REWARD_ALIVE   =  0.01      # per step
REWARD_HIT     = -1.0       # per point of damage taken / 10
REWARD_DEATH   = -10.0
REWARD_VICTORY =  10.0


# ── Actions ───────────────────────────────────────────────────────────────────

# action id -> (horizontal intent, vertical intent)
#   vertical -1 = jump (or swim up as a babel fish), +1 = swim down
ACTIONS = {
    0: (0,  0),     # idle
    1: (-1, 0),     # left
    2: (1,  0),     # right
    3: (0, -1),     # jump
    4: (-1, -1),    # left + jump
    5: (1, -1),     # right + jump
    6: (0,  1),     # down (only means something underwater... or as a fish)
}
