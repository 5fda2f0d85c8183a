#!/usr/bin/env python3

"""
Curses Renderer Plugin

Used by a Framebuffer object to draw the screen.  This draws graphics in a
standard Linux-style TTY Terminal, the Windows Command Prompt, or PowerShell.

Each pixel is drawn as a run of inverted spaces (the run length is the scale),
with the window title on the top line.  The whole screen is drawn to an
off-screen pad, which is then copied to the terminal in one go.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
import _curses
from .r_null import Renderer as RendererBase


class Renderer(RendererBase):
    def __init__(self, scale=None, curses_cursor_mode=0, **kwargs):
        if scale is None:
            scale = 2  # Default horizontal stretch if not supplied, or set to default

        self.pixel_char = " " * scale
        self.pad = None
        self.refresh_needed = False
        self.last_screen_height = -1
        self.last_screen_width = -1
        self.cursor_mode = curses_cursor_mode
        self.screen = curses.initscr()

        try:
            curses.curs_set(self.cursor_mode)
        except _curses.error:
            pass  # Not every terminal can change the cursor

        curses.noecho()
        curses.cbreak()
        super().__init__(scale)

    def set_resolution(self, width, height):
        # One extra line for the title, and one extra column, otherwise we can't write the furthest bottom-right pixel
        self.pad = curses.newpad(height + 1, width * self.scale + 1)
        self.refresh_needed = True
        super().set_resolution(width, height)

    def render(self, pixels, dirty=False):
        if dirty and self.pad:
            width = self.width
            pixel_char = self.pixel_char

            for location, pixel in enumerate(pixels):
                y, x = divmod(location, width)
                self.pad.addstr(y + 1, x * self.scale, pixel_char, curses.A_REVERSE if pixel else curses.A_NORMAL)

            self.refresh_needed = True

        screen_height, screen_width = self.screen.getmaxyx()

        if screen_height != self.last_screen_height or screen_width != self.last_screen_width:
            # Terminal resized, so redraw everything
            self.screen.clear()

            if hasattr(curses, "resizeterm"):
                # This doesn't work on Windows
                curses.resizeterm(screen_height, screen_width)

            self.screen.refresh()
            self.last_screen_height = screen_height
            self.last_screen_width = screen_width
            self.refresh_needed = True

        if self.refresh_needed and self.pad:
            self.pad.refresh(0, 0, 0, 0, screen_height - 1, screen_width - 1)
            self.refresh_needed = False

        super().render(pixels, dirty)

    def set_title(self, title):
        if self.pad:
            line_width = self.width * self.scale
            self.pad.addstr(0, 0, title[:line_width].ljust(line_width), curses.A_REVERSE)
            self.refresh_needed = True

        super().set_title(title)

    def shutdown(self):
        curses.nocbreak()
        curses.echo()

        if self.cursor_mode != 1:
            try:
                curses.curs_set(1)
            except _curses.error:
                pass

        curses.endwin()
        super().shutdown()

    # No Superclass for this Curses-specific method

    def get_curses_screen(self):
        return self.screen
