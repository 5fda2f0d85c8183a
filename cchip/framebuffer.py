#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here by the CPU, and are only handed to the actual display
(the host rendering system) when the display clock fires, normally at 60Hz.
Calling out to PyGame or Curses for every pixel of every sprite would be far
too slow, so the renderer gets one read-only view of the whole screen per frame
instead, along with a flag saying whether anything has changed since the last
one.

Programs cannot write directly into video memory.  Sprites are drawn with XOR,
one pixel at a time.  If a pixel which was set gets unset, that is a collision,
and it is reported back so the CPU can set the Vf flag.

Sprite start positions always wrap around the screen, but pixels running off
the right or bottom edge are clipped, unless wrapping is enabled, in which case
they reappear on the opposite side.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import APP_NAME, SCREEN_WIDTH, SCREEN_HEIGHT
from .ram import RAM


class Framebuffer:
    def __init__(self, renderer, width=SCREEN_WIDTH, height=SCREEN_HEIGHT, allow_wrapping=False):
        self.renderer = renderer
        self.allow_wrapping = allow_wrapping
        self.plane = RAM()
        self.vid_width = 0
        self.vid_height = 0
        self.vid_size = 0
        self.dirty = False
        self.resize_vid(width, height)
        self.report_perf()  # Some renderers can only show a title once they have a screen size

    def resize_vid(self, vid_width, vid_height):
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.plane.resize(self.vid_size)  # One byte per pixel, either 0 or 1
        self.renderer.set_resolution(vid_width, vid_height)
        self.dirty = True

    def clear(self):
        self.plane.clear()
        self.dirty = True

    def xor_pixel(self, x, y):
        # Returns True on collision, False if the pixel was previously unset, and None if clipped

        if self.allow_wrapping:
            x %= self.vid_width
            y %= self.vid_height
        elif x >= self.vid_width or y >= self.vid_height:
            return None

        vram_loc = y * self.vid_width + x
        pixel = self.plane.read(vram_loc)
        self.plane.write(vram_loc, pixel ^ 1)
        self.dirty = True

        return pixel != 0

    def is_pixel_set(self, x, y):
        return self.plane.read(y * self.vid_width + x) != 0

    def get_pixels(self):
        # Row-major, one byte per pixel.  Renderers must not be able to draw into the framebuffer
        return self.plane.mem.toreadonly()

    def get_vid_size(self):
        return self.vid_width, self.vid_height

    def refresh_display(self):
        self.renderer.render(self.get_pixels(), self.dirty)
        self.dirty = False

    def report_perf(self, fps=0, ops=0):
        title = "{} - {} FPS, {} OPS".format(APP_NAME, fps, ops)
        self.renderer.set_title(title)
