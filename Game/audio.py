"""
audio.py
========
Named sound cues, synthesised at start-up so the game ships no audio files.

Headless games (and machines without a sound device) still accept every
play() call; the cue is recorded in `history` and nothing is heard.
"""

from __future__ import annotations

import io
import logging
import math
import random
import struct
import wave
from collections import deque

import pygame

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050


def _build_sound(samples: list[float], sr: int = SAMPLE_RATE) -> pygame.mixer.Sound:
    """Pack mono float samples (already scaled to int16 range) into a Sound."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(sr)
        w.writeframes(b"".join(struct.pack("<h", max(-32767, min(32767, int(s)))) for s in samples))
    buf.seek(0)
    return pygame.mixer.Sound(buf)


def _sweep(f0: float, f1: float, dur: float, vol: float = 0.35) -> list[float]:
    n = int(SAMPLE_RATE * dur)
    out, phase = [], 0.0
    for i in range(n):
        f = f0 + (f1 - f0) * i / n
        phase += 2 * math.pi * f / SAMPLE_RATE
        out.append(vol * 32767 * math.sin(phase) * (1 - i / n))
    return out


def _noise(dur: float, vol: float = 0.3) -> list[float]:
    rng = random.Random(42)
    n = int(SAMPLE_RATE * dur)
    return [vol * 32767 * rng.uniform(-1, 1) * (1 - i / n) ** 0.5 for i in range(n)]


def _chord(freqs: list[float], dur: float, vol: float = 0.3) -> list[float]:
    n = int(SAMPLE_RATE * dur)
    return [vol * 32767 / len(freqs)
            * sum(math.sin(2 * math.pi * f * i / SAMPLE_RATE) for f in freqs)
            * (1 - (i / n) ** 0.4) for i in range(n)]


def _warble(dur: float, vol: float = 0.3) -> list[float]:
    n = int(SAMPLE_RATE * dur)
    out, phase = [], 0.0
    for i in range(n):
        f = 440 + 220 * math.sin(2 * math.pi * 7 * i / SAMPLE_RATE)
        phase += 2 * math.pi * f / SAMPLE_RATE
        out.append(vol * 32767 * math.sin(phase) * (1 - i / n))
    return out


def _gen_sounds() -> dict[str, pygame.mixer.Sound]:
    return {
        "jump":          _build_sound(_sweep(300, 700, 0.12)),
        "damage":        _build_sound(_noise(0.18, 0.4)),
        "collect":       _build_sound(_sweep(880, 1320, 0.10) + _sweep(1320, 1760, 0.10)),
        "poetry":        _build_sound(_sweep(180, 90, 0.35, 0.3)),
        "improbability": _build_sound(_warble(0.8)),
        "forty_two":     _build_sound(_chord([262, 330, 392, 523], 1.2)),
    }


class Audio:
    def __init__(self, enabled: bool = True) -> None:
        self.history : deque[str] = deque(maxlen=64)
        self.sounds  : dict[str, pygame.mixer.Sound] = {}
        if not enabled:
            return
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(SAMPLE_RATE, -16, 1)
            self.sounds = _gen_sounds()
        except pygame.error as exc:
            logger.warning("audio disabled: %s", exc)

    def play(self, name: str, volume: float = 1.0) -> None:
        self.history.append(name)
        snd = self.sounds.get(name)
        if snd is None:
            return
        snd.set_volume(min(1.0, 0.5 * volume))
        snd.play()
