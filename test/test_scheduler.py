#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from cchip.scheduler import Clock, Scheduler, SchedulerError, monotonic_us


class FakeTime:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


class TestClock(unittest.TestCase):
    def test_clock_period(self):
        self.assertEqual(1000, Clock(1000, "cpu").period)
        self.assertAlmostEqual(16666.667, Clock(60, "timers").period, places=3)

    def test_clock_fires_on_period(self):
        clock = Clock(1000, "cpu", now=0)
        self.assertFalse(clock.poll(999))
        self.assertTrue(clock.poll(1000))
        self.assertFalse(clock.poll(1999))
        self.assertTrue(clock.poll(2000))

    def test_clock_resets_to_now(self):
        # A late poll re-bases the clock at the time it fired, rather than one period after the last firing
        clock = Clock(1000, "cpu", now=0)
        self.assertTrue(clock.poll(1500))
        self.assertFalse(clock.poll(2000))
        self.assertTrue(clock.poll(2500))

    def test_clock_bad_frequency(self):
        self.assertRaises(SchedulerError, Clock, 0, "cpu")
        self.assertRaises(SchedulerError, Clock, -60, "timers")


class TestScheduler(unittest.TestCase):
    def setUp(self):
        self.time = FakeTime(5000)
        self.scheduler = Scheduler(time_func=self.time)
        self.scheduler.add_clock(1000, "cpu")
        self.scheduler.add_clock(60, "timers")
        self.scheduler.add_clock(60, "display")

    def test_scheduler_nothing_fired(self):
        self.assertEqual([], self.scheduler.poll())
        self.time.now += 999
        self.assertEqual([], self.scheduler.poll())

    def test_scheduler_single_clock(self):
        self.time.now += 1000
        self.assertEqual(["cpu"], self.scheduler.poll())
        self.assertEqual([], self.scheduler.poll())

    def test_scheduler_simultaneous_in_order(self):
        self.time.now += 16667
        self.assertEqual(["cpu", "timers", "display"], self.scheduler.poll())

    def test_scheduler_clocks_independent(self):
        # The fast clock firing repeatedly doesn't hold back the slow ones
        fired_timers = 0

        for _ in range(34):
            self.time.now += 1000
            fired = self.scheduler.poll()
            self.assertIn("cpu", fired)
            fired_timers += fired.count("timers")

        self.assertEqual(2, fired_timers)

    def test_scheduler_reset(self):
        self.time.now += 10000
        self.scheduler.reset()
        self.assertEqual([], self.scheduler.poll())
        self.time.now += 1000
        self.assertEqual(["cpu"], self.scheduler.poll())

    def test_scheduler_default_time(self):
        first = monotonic_us()
        self.assertIsInstance(first, int)
        self.assertGreaterEqual(monotonic_us(), first)
        scheduler = Scheduler()
        scheduler.add_clock(1, "perf")
        self.assertEqual([], scheduler.poll())
