#!/usr/bin/env python3

"""
Curses TTY Terminal Input Plugin

Uses a thread to trap Terminal inputs and redirects them to the emulator.  Note
that standard TTY Terminals only understand characters, they do not know when
an actual key is 'pressed' or 'released'.

What we can do (for this plugin) is assume a key is held for a very short time,
and then take advantage of keyboard repeats to fake a 'press' and 'release'.
The last time a character corresponding to a key has been 'seen' is stored.  If
it was last seen a long time ago (when checked), then it has almost certainly
been released.

ESC (char 27) or CTRL+C (char 3) quits, Space toggles pause, and Backspace
resets the machine.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
import queue
from threading import Thread
from time import monotonic
from .i_null import Inputs as InputsBase
from ..constants import EVENT_PAUSE, EVENT_QUIT, EVENT_RESET

# Terminals don't have separate key press/release, so we have to pause after a character is seen.
KEYBOARD_FAKE_KEYDOWN_TIME = 0.2

CONTROL_CHARS = {
    27:                   EVENT_QUIT,   # ESC
    3:                    EVENT_QUIT,   # CTRL+C
    32:                   EVENT_PAUSE,  # Space
    8:                    EVENT_RESET,  # Backspace, depending on the terminal
    127:                  EVENT_RESET,
    curses.KEY_BACKSPACE: EVENT_RESET
}


# For thread safety, use proper queues to exchange information, avoiding shared variables.
def input_thread(thread_quitter_queue, input_queue, curses_screen):
    while thread_quitter_queue.empty():
        # This blocks the thread from proceeding, so it won't get the quit message until at least one key is pressed.
        # However, as a daemon thread, it will be terminated when the main thread shuts down.
        char = curses_screen.getch()

        if char < 0:
            continue

        if char < 0x100:
            # Lowercase plain characters only.  Codes above that are curses.KEY_* values, not characters.
            char = ord(chr(char).lower())

        quitting = CONTROL_CHARS.get(char) == EVENT_QUIT

        try:
            # Never drop a quit request, but drop keys if the emulator isn't keeping up
            input_queue.put(char, block=quitting)
        except queue.Full:
            pass

        if quitting:
            break


class Inputs(InputsBase):
    def __init__(self, keymap, renderer):
        self.key_timers = [0.0] * 0x10
        super().__init__(keymap, renderer, force_lowercase=True, reserved_keys=CONTROL_CHARS)

        self.thread_quitter_queue = queue.Queue(1)  # Used to inform the thread it should quit
        self.input_queue = queue.Queue(16)
        self.thread = Thread(
            target=input_thread,
            args=(
                self.thread_quitter_queue,
                self.input_queue,
                renderer.get_curses_screen()
            )
        )
        # Terminate the thread when the main program quits (even if currently waiting for a keypress)
        self.thread.daemon = True
        self.thread.start()

    def process_messages(self, keys):
        # Deal with any characters seen since the last call
        host_event = None
        target_time = None

        while True:
            try:
                # Blocking here would lock up the main thread if nothing was pressed
                char = self.input_queue.get(block=False)
            except queue.Empty:
                break

            control_event = CONTROL_CHARS.get(char)

            if control_event is not None:
                if host_event != EVENT_QUIT:
                    host_event = control_event

                continue

            key_pressed = self.keymap_dict.get(char)

            if key_pressed is not None:
                if target_time is None:
                    target_time = monotonic() + KEYBOARD_FAKE_KEYDOWN_TIME

                self.key_timers[key_pressed] = target_time

        now = monotonic()

        for key_num in range(0x10):
            keys[key_num] = self.key_timers[key_num] > now

        return host_event

    def shutdown(self):
        try:
            self.thread_quitter_queue.put(None, block=False)
        except queue.Full:
            # Something else has already requested the thread quits
            pass

        # Don't wait for the thread to quit (because this is likely to happen after a keypress)
        super().shutdown()
