"""Square-wave beeps for score, game and match events.

Sound is decoration: if the mixer is missing or fails, every call is a no-op
and the simulation never notices.
"""

import numpy as np

try:
    import pygame
except ImportError:
    pygame = None

from hookring.types import GameWonEvent, MatchWonEvent, ScoredEvent

# (frequency Hz, duration ms) per event type
EVENT_TONES = {
    ScoredEvent: (1100, 110),
    GameWonEvent: (1400, 140),
    MatchWonEvent: (1760, 220),
}

VOLUME = 0.25


def square_wave(freq: float, ms: int, sample_rate: int, channels: int = 1) -> np.ndarray:
    """16-bit square wave samples shaped for pygame.sndarray."""
    n = max(1, int(sample_rate * ms / 1000))
    t = np.arange(n) / sample_rate
    wave = np.sign(np.sin(2 * np.pi * freq * t))
    samples = (wave * VOLUME * 32767).astype(np.int16)
    if channels > 1:
        samples = np.repeat(samples[:, None], channels, axis=1)
    return samples


class Beeper:
    """Plays a short tone for each event that has one."""

    def __init__(self, enabled: bool = True):
        self.enabled = False
        self._cache = {}
        if not enabled or pygame is None:
            return
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=22050, size=-16, channels=1)
            self._rate, _, self._channels = pygame.mixer.get_init()
            self.enabled = True
        except pygame.error:
            self.enabled = False

    def beep(self, freq: float = 880, ms: int = 90) -> None:
        if not self.enabled:
            return
        try:
            key = (freq, ms)
            if key not in self._cache:
                samples = square_wave(freq, ms, self._rate, self._channels)
                self._cache[key] = pygame.sndarray.make_sound(samples)
            self._cache[key].play()
        except (pygame.error, ValueError):
            self.enabled = False

    def play_events(self, events: list) -> None:
        for e in events:
            tone = EVENT_TONES.get(type(e))
            if tone:
                self.beep(*tone)
