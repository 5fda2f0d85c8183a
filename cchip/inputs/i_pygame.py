#!/usr/bin/env python3

"""
PyGame Input Plugin

Unlike the Curses plugin, this scans the keyboard and properly detects key
'press' and 'release' events, so held keys stay held for as long as they are
physically down.

Escape (or closing the window) quits, Space toggles pause, and Backspace resets
the machine.

If the application is quit, then this will control shutting PyGame down too, so
any linked Renderer must be able to handle that.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .i_null import Inputs as InputsBase
from ..constants import EVENT_PAUSE, EVENT_QUIT, EVENT_RESET

CONTROL_KEYS = {
    pygame.K_ESCAPE:    EVENT_QUIT,
    pygame.K_SPACE:     EVENT_PAUSE,
    pygame.K_BACKSPACE: EVENT_RESET
}


class Inputs(InputsBase):
    def __init__(self, keymap, renderer):
        self.key_down = [False] * 0x10

        self.pygame_methods = {
            pygame.QUIT:    self._pygame_quit,
            pygame.KEYDOWN: self._pygame_keydown,
            pygame.KEYUP:   self._pygame_keyup
        }

        super().__init__(keymap, renderer, reserved_keys=CONTROL_KEYS)

    def process_messages(self, keys):
        # Call PyGame method based on fast dictionary lookup of event.  Quitting takes priority over anything else.
        host_event = None

        for event in pygame.event.get():
            pygame_method = self.pygame_methods.get(event.type)

            if pygame_method:
                method_event = pygame_method(event)

                if method_event is not None and host_event != EVENT_QUIT:
                    host_event = method_event  # Process more events, even if planning to quit

        keys[:] = self.key_down
        return host_event

    def _pygame_quit(self, _):
        return EVENT_QUIT

    def _pygame_keydown(self, event):
        control_event = CONTROL_KEYS.get(event.key)

        if control_event is not None:
            return control_event

        hex_key = self.keymap_dict.get(event.key)

        if hex_key is not None:
            self.key_down[hex_key] = True

        return None

    def _pygame_keyup(self, event):
        hex_key = self.keymap_dict.get(event.key)

        if hex_key is not None:
            self.key_down[hex_key] = False

        return None
