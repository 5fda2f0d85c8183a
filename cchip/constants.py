#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

# App identification
APP_NAME = "ChocChip-8 Emulator"
APP_VERSION = "1.0.0"
APP_COPYRIGHT = "Copyright (C) 2024 Gregory Maynard-Hoare, licensed under GNU Affero General Public License v3.0"
APP_INTRO = "{} V{} -- ".format(APP_NAME, APP_VERSION)

# Memory map
MEMORY_SIZE = 0x1000
FONT_LOCATION = 0x50
PROGRAM_START = 0x200
STACK_DEPTH = 16

# Display
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

# Clock rates in Hz.  Only the CPU rate can be changed from the command line
DEFAULT_CLOCK_SPEED = 1000
TIMER_FREQ = 60
DISPLAY_FREQ = 60

# Scheduler activities
ACTIVITY_CPU = "cpu"
ACTIVITY_TIMERS = "timers"
ACTIVITY_DISPLAY = "display"
ACTIVITY_PERF = "perf"  # Once a second, performance figures go to the window title

# Out-of-band host events, produced by input plugins and consumed by the emulator loop (never the CPU)
EVENT_QUIT = "quit"
EVENT_PAUSE = "pause"
EVENT_RESET = "reset"

# Default mappings for keys 0-F.  The physical 1234/QWER/ASDF/ZXCV block maps onto the COSMAC VIP keypad:
#   1 2 3 C
#   4 5 6 D
#   7 8 9 E
#   A 0 B F
# Keyscans (PyGame) and lowercase ASCII characters (Curses) are the same codes for these keys
DEFAULT_KEYMAP = "120,49,50,51,113,119,101,97,115,100,122,99,52,114,102,118"

# Configurable behaviour (the display wrap quirk is handled by the framebuffer, the rest by the CPU)
CPU_QUIRKS = ["shift", "load", "logic"]

# 4x5 hexadecimal digit glyphs, copied into RAM at FONT_LOCATION on boot
SYSTEM_FONT = bytes((
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
))
FONT_GLYPH_SIZE = 5
