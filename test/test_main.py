#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
import chocchip8
from cchip import main, select_plugins
from cchip.audio.a_null import Audio
from cchip.constants import DEFAULT_KEYMAP
from cchip.inputs.i_null import Inputs
from cchip.renderers.r_null import Renderer


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp_dir.cleanup()

    def _args(self, rom, **overrides):
        filename = os.path.join(self.tmp_dir.name, "test.ch8")

        if rom is not None:
            with open(filename, "wb") as f:
                f.write(rom)

        args = {
            "filename": filename,
            "renderer": "null",
            "mute": 1,
            "scale": None,
            "pygame_palette": None,
            "curses_cursor_mode": 0,
            "keymap": DEFAULT_KEYMAP,
            "screen_wrap_quirks": None,
            "shift_quirks": None,
            "load_quirks": None,
            "logic_quirks": None,
            "debug": False,
            "clock_speed": 1000,
            "max_cycles": 10
        }
        args.update(overrides)
        return args

    def _main(self, args):
        stdout = io.StringIO()
        stderr = io.StringIO()

        with redirect_stdout(stdout), redirect_stderr(stderr):
            result = main(args)

        return result, stdout.getvalue(), stderr.getvalue()

    def test_main_null_plugins(self):
        self.assertEqual((Renderer, Inputs, Audio), select_plugins("null", None))

    def test_main_max_cycles(self):
        result, stdout, stderr = self._main(self._args(b"\x12\x00"))
        self.assertEqual(0, result)
        self.assertIn("ChocChip-8", stdout)
        self.assertEqual("", stderr)

    def test_main_debug_output(self):
        result, stdout, _ = self._main(self._args(b"\x12\x00", debug=True, max_cycles=2))
        self.assertEqual(0, result)
        self.assertIn("JP 0x200", stdout)

    def test_main_missing_rom(self):
        result, _, stderr = self._main(self._args(None))
        self.assertEqual(1, result)
        self.assertIn("Unable to read ROM", stderr)

    def test_main_rom_too_large(self):
        result, _, stderr = self._main(self._args(b"\x12\x00" * 0x800))
        self.assertEqual(1, result)
        self.assertIn("bytes are available", stderr)

    def test_main_bad_opcode(self):
        result, _, stderr = self._main(self._args(b"\x00\x00"))
        self.assertEqual(1, result)
        self.assertIn("Emulation halted.", stderr)
        self.assertIn("Opcode 0x0000 at address 0x200", stderr)

    def test_main_bad_keymap(self):
        result, _, stderr = self._main(self._args(b"\x12\x00", keymap="1,2,3"))
        self.assertEqual(1, result)
        self.assertIn("16 required", stderr)


class TestArgs(unittest.TestCase):
    def test_args_defaults(self):
        args = vars(chocchip8.parse_args(["game.ch8"]))
        self.assertEqual("game.ch8", args["filename"])
        self.assertEqual(1000, args["clock_speed"])
        self.assertEqual(DEFAULT_KEYMAP, args["keymap"])
        self.assertIsNone(args["renderer"])
        self.assertIsNone(args["max_cycles"])
        self.assertFalse(args["debug"])

        for quirk in "shift", "load", "logic", "screen_wrap":
            self.assertIsNone(args["{}_quirks".format(quirk)])

    def test_args_options(self):
        args = vars(chocchip8.parse_args(
            ["game.ch8", "-c", "500", "-r", "null", "--load_quirks", "1", "--max_cycles", "20", "-d"]
        ))
        self.assertEqual(500, args["clock_speed"])
        self.assertEqual("null", args["renderer"])
        self.assertEqual(1, args["load_quirks"])
        self.assertEqual(20, args["max_cycles"])
        self.assertTrue(args["debug"])

    def test_args_rejected(self):
        with redirect_stderr(io.StringIO()):
            self.assertRaises(SystemExit, chocchip8.parse_args, ["game.ch8", "-c", "0"])
            self.assertRaises(SystemExit, chocchip8.parse_args, ["game.ch8", "--shift_quirks", "2"])
            self.assertRaises(SystemExit, chocchip8.parse_args, [])
