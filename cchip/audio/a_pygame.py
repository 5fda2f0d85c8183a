#!/usr/bin/env python3

"""
PyGame Audio Plugin

The CHIP-8 only has a buzzer, with an 'on' or 'off' status.  Here, that is a
short square wave sample, built once at startup and looped by the PyGame / SDL
mixer for as long as the buzzer is on.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .a_null import Audio as AudioBase

PLAYBACK_FREQUENCY = 44100
DEFAULT_TONE = 440.0
DEFAULT_VOLUME = 0.1


def square_wave(tone, playback_frequency=PLAYBACK_FREQUENCY):
    # One full cycle of unsigned 8-bit audio, high for the first half and low for the second
    cycle_length = max(2, int(playback_frequency / tone))
    half_cycle = cycle_length // 2
    return bytes((0xFF,) * half_cycle + (0x00,) * (cycle_length - half_cycle))


class Audio(AudioBase):
    def __init__(self, tone=DEFAULT_TONE):
        super().__init__()
        pygame.mixer.pre_init(PLAYBACK_FREQUENCY, size=8, channels=1, buffer=512, allowedchanges=0)
        pygame.mixer.init()

        # Repeat the cycle so the loop point isn't hit too often
        self.sound = pygame.mixer.Sound(buffer=square_wave(tone) * 100)
        self.sound.set_volume(DEFAULT_VOLUME)

    def enable_buzzer(self, enabled):
        # If there is already a sound being played, it won't be restarted
        if enabled and not self.buzzer_enabled:
            self.sound.play(-1)
        elif not enabled and self.buzzer_enabled:
            self.sound.stop()

        super().enable_buzzer(enabled)

    def shutdown(self):
        self.sound.stop()
        pygame.mixer.quit()
        super().shutdown()
