#!/usr/bin/env python3

"""
Multi-rate Scheduler

The CPU, the delay/sound timers and the display all run at their own rates.
Rather than tying them together (so that a slow CPU drags the timers down with
it, or the display waits on the CPU), each gets its own clock, and the
emulator's main loop polls all of them once per iteration.

A clock fires when at least one period has passed since it last fired.  When it
fires, its reference time is reset to the moment it was polled, not advanced by
exactly one period, so a clock that falls behind (e.g. while the host is busy)
picks up from 'now' rather than firing a burst of catch-up ticks.

Time is measured in whole microseconds from a monotonic counter.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from time import perf_counter_ns

MICROSECONDS_PER_SECOND = 1000000


class SchedulerError(Exception):
    pass


def monotonic_us():
    return perf_counter_ns() // 1000


class Clock:
    def __init__(self, frequency, activity, now=0):
        if frequency <= 0:
            raise SchedulerError("Clock frequency for '{}' must be above 0Hz".format(activity))

        self.frequency = frequency
        self.activity = activity
        self.period = MICROSECONDS_PER_SECOND / frequency
        self.last_fire = now

    def poll(self, now):
        if now - self.last_fire >= self.period:
            self.last_fire = now
            return True

        return False

    def rebase(self, now):
        self.last_fire = now


class Scheduler:
    def __init__(self, time_func=monotonic_us):
        self.time_func = time_func
        self.clocks = []

    def add_clock(self, frequency, activity):
        # Clocks are reported in the order they are added
        clock = Clock(frequency, activity, self.time_func())
        self.clocks.append(clock)
        return clock

    def poll(self):
        # Sample the time once, so clocks polled together agree on what 'now' is
        now = self.time_func()
        return [clock.activity for clock in self.clocks if clock.poll(now)]

    def reset(self):
        # Used after a pause, so time spent paused doesn't count towards the next firing
        now = self.time_func()

        for clock in self.clocks:
            clock.rebase(now)
