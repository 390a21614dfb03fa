from typing import Optional

import numpy as np
import pygame
from logger import log as _log
from numpy.typing import NDArray
from pygame import mixer


def square_wave(frequency: int, sample_rate: int, volume: float, channels: int = 1) -> NDArray[np.int16]:
    """One looping buffer of a 50% duty square wave, shaped for ``pygame.sndarray``."""
    period = max(2, round(sample_rate / frequency))
    periods = max(1, sample_rate // (10 * period))  # ~100 ms of audio
    amplitude = int(32767 * volume)

    phase = np.arange(period * periods) % period
    wave = np.where(phase < period // 2, amplitude, -amplitude).astype(np.int16)
    if channels > 1:
        wave = np.ascontiguousarray(np.column_stack([wave] * channels))
    return wave


class Beeper:
    """Plays a tone for as long as the sound timer is non-zero."""

    def __init__(self, frequency: int = 440, volume: float = 0.25, enable: bool = True, sample_rate: int = 44100, buffer_size: int = 512):
        self.enabled: bool = enable
        self.playing: bool = False
        self.channel: Optional[mixer.Channel] = None
        self.sound: Optional[mixer.Sound] = None

        if not self.enabled:
            return

        try:
            if not mixer.get_init():
                mixer.init(frequency=sample_rate, size=-16, channels=1, buffer=buffer_size)
            actual_rate, _, channels = mixer.get_init()
            self.sound = pygame.sndarray.make_sound(square_wave(frequency, actual_rate, volume, channels))
            self.channel = mixer.Channel(0)
        except pygame.error as e:
            _log.warning(f"Sound disabled, no audio device: {e}")
            self.enabled = False

    def update(self, active: bool) -> None:
        if not self.enabled or self.channel is None or self.sound is None:
            return

        if active and not self.playing:
            self.channel.play(self.sound, loops=-1)
            self.playing = True
        elif not active and self.playing:
            self.channel.stop()
            self.playing = False

    def close(self) -> None:
        """Clean up audio resources"""
        if self.channel is not None and self.channel.get_busy():
            self.channel.stop()
        self.playing = False
        if mixer.get_init():
            mixer.quit()
