#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
import queue
import threading
import unittest
from types import SimpleNamespace
from unittest import mock
import pygame
from cchip.constants import DEFAULT_KEYMAP, EVENT_PAUSE, EVENT_QUIT, EVENT_RESET
from cchip.inputs import i_curses, i_pygame
from cchip.inputs.i_null import Inputs, InputsError


class ScriptedScreen:
    # Hands out a fixed list of getch() results.  Scripts must end with a quit character.
    def __init__(self, chars):
        self.chars = list(chars)

    def getch(self):
        return self.chars.pop(0)


class BlockingScreen:
    # Never produces a character until released, so the input thread stays out of the way
    def __init__(self):
        self.released = threading.Event()

    def getch(self):
        self.released.wait()
        return -1


class CursesRenderer:
    def __init__(self, screen):
        self.screen = screen

    def get_curses_screen(self):
        return self.screen


def keymap_with(key_num, code):
    keymap_split = DEFAULT_KEYMAP.split(",")
    keymap_split[key_num] = str(code)
    return ",".join(keymap_split)


class TestNullInputs(unittest.TestCase):
    def test_null_inputs_keymap(self):
        inputs = Inputs(DEFAULT_KEYMAP, None)
        self.assertEqual(0x0, inputs.keymap_dict[120])  # x
        self.assertEqual(0xF, inputs.keymap_dict[118])  # v
        self.assertEqual(16, len(inputs.keymap_dict))

    def test_null_inputs_keymap_lowercase(self):
        inputs = Inputs(keymap_with(0x0, 88), None, force_lowercase=True)  # X
        self.assertEqual(0x0, inputs.keymap_dict[120])
        self.assertNotIn(88, inputs.keymap_dict)

    def test_null_inputs_keymap_errors(self):
        self.assertRaises(InputsError, Inputs, "1,2,3", None)
        self.assertRaises(InputsError, Inputs, keymap_with(0x3, "q"), None)
        self.assertRaises(InputsError, Inputs, keymap_with(0x3, 120), None)  # Same as key 0
        self.assertRaises(InputsError, Inputs, keymap_with(0x3, 88), None, force_lowercase=True)  # X is x

    def test_null_inputs_keymap_reserved(self):
        with self.assertRaises(InputsError) as context:
            Inputs(keymap_with(0x5, 32), None, reserved_keys=(27, 32))

        self.assertIn("32", str(context.exception))

    def test_null_inputs_process_messages(self):
        keys = [True] * 0x10
        self.assertIsNone(Inputs(DEFAULT_KEYMAP, None).process_messages(keys))
        self.assertEqual([False] * 0x10, keys)


class TestCursesInputThread(unittest.TestCase):
    def _run_thread(self, chars):
        input_queue = queue.Queue()
        screen = ScriptedScreen(chars)
        i_curses.input_thread(queue.Queue(1), input_queue, screen)
        received = []

        while not input_queue.empty():
            received.append(input_queue.get())

        return received, screen.chars

    def test_curses_input_thread_lowercase(self):
        received, _ = self._run_thread([ord("X"), ord("q"), 27])
        self.assertEqual([ord("x"), ord("q"), 27], received)

    def test_curses_input_thread_special_keys_unchanged(self):
        received, _ = self._run_thread([curses.KEY_HOME, curses.KEY_DOWN, 27])
        self.assertEqual([curses.KEY_HOME, curses.KEY_DOWN, 27], received)
        self.assertIsNone(i_curses.CONTROL_CHARS.get(curses.KEY_HOME))
        self.assertIsNone(i_curses.CONTROL_CHARS.get(curses.KEY_DOWN))

    def test_curses_input_thread_stops_on_quit(self):
        received, remaining = self._run_thread([-1, ord("w"), 3, ord("e")])
        self.assertEqual([ord("w"), 3], received)
        self.assertEqual([ord("e")], remaining)

    def test_curses_input_thread_quitter(self):
        quitter_queue = queue.Queue(1)
        quitter_queue.put(None)
        input_queue = queue.Queue()
        screen = ScriptedScreen([ord("w"), 27])
        i_curses.input_thread(quitter_queue, input_queue, screen)
        self.assertTrue(input_queue.empty())
        self.assertEqual(2, len(screen.chars))


class TestCursesInputs(unittest.TestCase):
    def setUp(self):
        self.screen = BlockingScreen()
        self.inputs = i_curses.Inputs(DEFAULT_KEYMAP, CursesRenderer(self.screen))
        self.keys = [False] * 0x10

    def tearDown(self):
        self.inputs.shutdown()
        self.screen.released.set()
        self.inputs.thread.join(1)

    def _feed(self, *chars):
        for char in chars:
            self.inputs.input_queue.put(char)

        return self.inputs.process_messages(self.keys)

    def test_curses_inputs_control_chars(self):
        self.assertEqual(EVENT_QUIT, self._feed(27))
        self.assertEqual(EVENT_QUIT, self._feed(3))
        self.assertEqual(EVENT_PAUSE, self._feed(32))
        self.assertEqual(EVENT_RESET, self._feed(8))
        self.assertEqual(EVENT_RESET, self._feed(127))
        self.assertEqual(EVENT_RESET, self._feed(curses.KEY_BACKSPACE))
        self.assertIsNone(self._feed())

    def test_curses_inputs_quit_takes_priority(self):
        self.assertEqual(EVENT_QUIT, self._feed(32, 27, 8))
        self.assertTrue(self.inputs.input_queue.empty())

    def test_curses_inputs_special_key_ignored(self):
        self.assertIsNone(self._feed(curses.KEY_HOME))
        self.assertEqual([False] * 0x10, self.keys)

    def test_curses_inputs_control_chars_not_keys(self):
        self._feed(32)
        self.assertEqual([False] * 0x10, self.keys)

    def test_curses_inputs_key_held_then_released(self):
        with mock.patch("cchip.inputs.i_curses.monotonic", return_value=100.0) as clock:
            self.assertIsNone(self._feed(ord("x"), ord("v")))
            self.assertTrue(self.keys[0x0])
            self.assertTrue(self.keys[0xF])
            self.assertFalse(self.keys[0x1])

            clock.return_value = 100.0 + i_curses.KEYBOARD_FAKE_KEYDOWN_TIME / 2
            self._feed()
            self.assertTrue(self.keys[0x0])

            clock.return_value = 100.0 + i_curses.KEYBOARD_FAKE_KEYDOWN_TIME * 2
            self._feed()
            self.assertEqual([False] * 0x10, self.keys)

    def test_curses_inputs_reserved_keymap(self):
        for reserved in 27, 32, 127:
            self.assertRaises(InputsError, i_curses.Inputs, keymap_with(0x1, reserved), CursesRenderer(self.screen))


class TestPyGameInputs(unittest.TestCase):
    def setUp(self):
        self.inputs = i_pygame.Inputs(DEFAULT_KEYMAP, None)
        self.keys = [False] * 0x10

    def _process(self, *events):
        with mock.patch("pygame.event.get", return_value=list(events)):
            return self.inputs.process_messages(self.keys)

    def test_pygame_inputs_control_keys(self):
        self.assertEqual(EVENT_QUIT, self._process(SimpleNamespace(type=pygame.KEYDOWN, key=pygame.K_ESCAPE)))
        self.assertEqual(EVENT_PAUSE, self._process(SimpleNamespace(type=pygame.KEYDOWN, key=pygame.K_SPACE)))
        self.assertEqual(EVENT_RESET, self._process(SimpleNamespace(type=pygame.KEYDOWN, key=pygame.K_BACKSPACE)))
        self.assertEqual(EVENT_QUIT, self._process(SimpleNamespace(type=pygame.QUIT)))
        self.assertIsNone(self._process())

    def test_pygame_inputs_quit_takes_priority(self):
        self.assertEqual(
            EVENT_QUIT,
            self._process(
                SimpleNamespace(type=pygame.KEYDOWN, key=pygame.K_SPACE),
                SimpleNamespace(type=pygame.QUIT),
                SimpleNamespace(type=pygame.KEYDOWN, key=pygame.K_BACKSPACE)
            )
        )

    def test_pygame_inputs_key_press_release(self):
        self._process(SimpleNamespace(type=pygame.KEYDOWN, key=pygame.K_x))
        self.assertTrue(self.keys[0x0])
        self._process()
        self.assertTrue(self.keys[0x0])  # Still physically held
        self._process(SimpleNamespace(type=pygame.KEYUP, key=pygame.K_x))
        self.assertFalse(self.keys[0x0])

    def test_pygame_inputs_reserved_keymap(self):
        self.assertRaises(InputsError, i_pygame.Inputs, keymap_with(0x2, pygame.K_SPACE), None)
        self.assertRaises(InputsError, i_pygame.Inputs, keymap_with(0x2, pygame.K_BACKSPACE), None)
