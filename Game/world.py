"""
world.py
========
Single owner of the global world parameters that improbable events mess
with: gravity direction, physics time-scale, colour inversion, camera tint
and the full-screen flash.

Effects never write these fields directly.  They push an Override and later
release it.  The effective value is the newest override still alive, or the
base value when none is, so two overlapping gravity reversals can release in
any order and gravity still ends up pointing down.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

logger = logging.getLogger(__name__)


BASE_VALUES: dict[str, Any] = {
    "gravity_sign": 1,
    "time_scale":   1.0,
    "inverted":     False,
    "tint":         None,
    "flash":        False,
}


class Override:
    __slots__ = ("field", "value", "seq", "released")

    def __init__(self, field: str, value: Any, seq: int) -> None:
        self.field    = field
        self.value    = value
        self.seq      = seq
        self.released = False

    def __repr__(self) -> str:
        return f"<Override {self.field}={self.value!r}{' released' if self.released else ''}>"


class WorldModifiers:
    def __init__(self) -> None:
        self._stacks : dict[str, list[Override]] = {f: [] for f in BASE_VALUES}
        self._seq    = itertools.count()

    def override(self, field: str, value: Any) -> Override:
        if field not in self._stacks:
            raise ValueError(f"unknown world field: {field!r}")
        ov = Override(field, value, next(self._seq))
        self._stacks[field].append(ov)
        logger.debug("world %s -> %r (%d active)", field, value, len(self._stacks[field]))
        return ov

    def release(self, ov: Override) -> None:
        if ov.released:
            return
        ov.released = True
        stack = self._stacks[ov.field]
        if ov in stack:
            stack.remove(ov)
        logger.debug("world %s restored to %r", ov.field, self.get(ov.field))

    def get(self, field: str) -> Any:
        stack = self._stacks[field]
        return stack[-1].value if stack else BASE_VALUES[field]

    def active_count(self, field: str) -> int:
        return len(self._stacks[field])

    def reset(self) -> None:
        for stack in self._stacks.values():
            for ov in stack:
                ov.released = True
            stack.clear()

    # ── Convenience accessors ───────────────────────────────────────────────

    @property
    def gravity_sign(self) -> int:
        return self.get("gravity_sign")

    @property
    def time_scale(self) -> float:
        return self.get("time_scale")

    @property
    def inverted(self) -> bool:
        return self.get("inverted")

    @property
    def tint(self):
        return self.get("tint")

    @property
    def flash(self) -> bool:
        return self.get("flash")

    def as_dict(self) -> dict:
        return {f: self.get(f) for f in BASE_VALUES}
