# =============================================================================
# level.py
# =============================================================================
# The level layout: one ground slab, six floating platforms, ten towels and
# four Vogons.  Platforms and enemy spawns are fixed (constants.py); towel
# spots and each Vogon's starting direction and pace come from the game RNG,
# so a seed always gives the same level.
#
#   from level import build_level
#   lvl = build_level(random.Random(42))
#   lvl["platforms"]  -> [{"x", "y", "w", "h"}, ...]   top-left corners
#   lvl["towels"]     -> [{"x", "y"}, ...]             centres
#   lvl["enemies"]    -> [{"kind", "x", "y", "behavior", "direction", "speed"}, ...]
# =============================================================================

from __future__ import annotations

import random

import constants as C


def _rect(cx: float, cy: float, w: float, h: float) -> dict:
    """Centre-based box (how the layout is written) to a top-left dict."""
    return {"x": float(cx - w / 2), "y": float(cy - h / 2), "w": float(w), "h": float(h)}


def build_level(rng: random.Random) -> dict:
    ground = {"x": 0.0, "y": float(C.GROUND_Y), "w": float(C.WORLD_W), "h": float(C.GROUND_H)}
    platforms = [_rect(*p) for p in C.PLATFORMS]

    x0, x1, y0, y1 = C.TOWEL_AREA
    towels = [{"x": float(rng.randint(x0, x1)), "y": float(rng.randint(y0, y1))}
              for _ in range(C.TOTAL_TOWELS)]

    enemies = []
    for x, y, kind, behavior in C.ENEMY_SPAWNS:
        enemies.append({
            "kind":      kind,
            "x":         float(x),
            "y":         float(y),
            "behavior":  behavior,
            "direction": 1 if rng.random() > 0.5 else -1,
            "speed":     float(rng.randint(*C.ENEMY_SPEED_RANGE)),
        })

    return {"ground": ground, "platforms": platforms, "towels": towels, "enemies": enemies}
