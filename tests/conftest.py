from __future__ import annotations

import os
from collections.abc import Generator

import pytest

# pygame must never open a window or a sound device under test
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from game import Game  # noqa: E402
from timers import Scheduler  # noqa: E402


@pytest.fixture()
def sched() -> Scheduler:
    return Scheduler()


@pytest.fixture()
def game() -> Generator[Game, None, None]:
    g = Game(render=False, seed=42)
    yield g
    g.teardown()
