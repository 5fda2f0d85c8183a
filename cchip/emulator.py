#!/usr/bin/env python3

"""
Emulator Control Loop

Owns the machine (RAM, CPU, framebuffer) and everything around it (the
scheduler, and the input, audio and rendering plugins), and runs the main loop:

    1. Poll the input plugin, refreshing the 16-key state and picking up any
       quit, pause or reset request.
    2. Ask the scheduler which clocks fired.
    3. Execute one instruction if the CPU clock fired, then decrement the timers
       if the timer clock fired, then hand the framebuffer to the renderer if
       the display clock fired.  Always in that order, so a frame shows the
       effects of the instruction executed in the same iteration.

Nothing here blocks.  While the CPU is waiting for a keypress (Fx0A), the loop
keeps going, so timers keep counting down and the display keeps refreshing.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import (
    ACTIVITY_CPU, ACTIVITY_TIMERS, ACTIVITY_DISPLAY, ACTIVITY_PERF, DEFAULT_CLOCK_SPEED, DISPLAY_FREQ, EVENT_PAUSE,
    EVENT_QUIT, EVENT_RESET, FONT_LOCATION, PROGRAM_START, SYSTEM_FONT, TIMER_FREQ
)


class Emulator:
    def __init__(self, ram, cpu, framebuffer, scheduler, inputs, audio, rom, clock_speed=None, max_cycles=None):
        self.ram = ram
        self.cpu = cpu
        self.framebuffer = framebuffer
        self.scheduler = scheduler
        self.inputs = inputs
        self.audio = audio
        self.rom = rom
        self.max_cycles = max_cycles
        self.clock_speed = DEFAULT_CLOCK_SPEED if clock_speed is None else clock_speed

        # Registration order is the order activities are reported, and so the order they run in
        self.scheduler.add_clock(self.clock_speed, ACTIVITY_CPU)
        self.scheduler.add_clock(TIMER_FREQ, ACTIVITY_TIMERS)
        self.scheduler.add_clock(DISPLAY_FREQ, ACTIVITY_DISPLAY)
        self.scheduler.add_clock(1, ACTIVITY_PERF)

        self.keys = [False] * 0x10
        self.paused = False
        self.buzzer_enabled = False
        self.cycles = 0

        # Performance-related vars
        self.perf_counter_fps = 0
        self.perf_counter_ops = 0

    def boot(self):
        # Also used for resets.  Wipe everything, then put the font and ROM back.
        self.ram.clear()
        self.ram.write_block(FONT_LOCATION, SYSTEM_FONT)
        self.ram.write_block(PROGRAM_START, self.rom)
        self.cpu.reset()
        self._set_buzzer(False)

    def run(self):
        self.boot()

        while not self.step():
            pass

        # Leave the last frame on screen
        self.framebuffer.refresh_display()
        self._set_buzzer(False)

    def step(self):
        # One iteration of the main loop.  Returns True when it's time to quit.
        event = self.inputs.process_messages(self.keys)

        if event == EVENT_QUIT:
            return True

        if event == EVENT_PAUSE:
            self.toggle_pause()
        elif event == EVENT_RESET:
            self.boot()

        fired = self.scheduler.poll()

        if not self.paused:
            if ACTIVITY_CPU in fired:
                self.cpu.tick(self.keys)
                self.cycles += 1
                self.perf_counter_ops += 1

            if ACTIVITY_TIMERS in fired:
                self.cpu.decrement_timers()

            self._set_buzzer(self.cpu.is_buzzer_on())

        if ACTIVITY_DISPLAY in fired:
            self.framebuffer.refresh_display()
            self.perf_counter_fps += 1

        if ACTIVITY_PERF in fired:
            # Reporting the performance should be done before a refresh, as refreshing will likely show the report
            self.framebuffer.report_perf(self.perf_counter_fps, self.perf_counter_ops)
            self.perf_counter_fps = 0
            self.perf_counter_ops = 0

        return self.max_cycles is not None and self.cycles >= self.max_cycles

    def toggle_pause(self):
        self.paused = not self.paused

        if self.paused:
            self._set_buzzer(False)
        else:
            # Don't let the time spent paused turn into a burst of ticks
            self.scheduler.reset()

    def _set_buzzer(self, enabled):
        # Only call out to the audio plugin when something changes
        if enabled != self.buzzer_enabled:
            self.audio.enable_buzzer(enabled)
            self.buzzer_enabled = enabled
