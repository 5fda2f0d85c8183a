#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.

main() returns the process exit status: 0 if the user quit, 1 if the ROM could
not be loaded, a plugin could not be started, or the emulated machine crashed.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import sys
from .constants import APP_INTRO, APP_COPYRIGHT, CPU_QUIRKS, MEMORY_SIZE
from .cpu import CPU, CPUError
from .debugger import Debugger
from .emulator import Emulator
from .framebuffer import Framebuffer
from .hostio import Loader, LoaderError
from .inputs.i_null import InputsError
from .ram import RAM, RAMError
from .renderers.r_null import RendererError
from .scheduler import Scheduler, SchedulerError
from .stack import Stack, StackError


class StartupError(Exception):
    pass


def select_plugins(opt_renderer, mute_audio):
    # Returns the (Renderer, Inputs, Audio) classes to use.  If necessary, try PyGame first, then Curses.
    auto_select_renderer = opt_renderer is None

    # flake8: noqa: F401
    if auto_select_renderer or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame
        except ImportError:
            if auto_select_renderer:
                opt_renderer = "curses"
            else:
                raise StartupError(
                    "PyGame does not appear to be installed."
                )
        else:
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer

            if mute_audio:
                from .audio.a_null import Audio
            else:
                from .audio.a_pygame import Audio

            return Renderer, Inputs, Audio

    if opt_renderer == "curses":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import curses
        except ImportError:
            if auto_select_renderer:
                raise StartupError(
                    "Neither PyGame nor Curses (or Windows-Curses) appear to be installed."
                )

            raise StartupError(
                "Curses (or Windows-Curses) does not appear to be installed."
            )
        else:
            from .inputs.i_curses import Inputs
            from .renderers.r_curses import Renderer

            # Terminals can handle fixed-length beeps, but not sampled sound
            if mute_audio or mute_audio is None:
                from .audio.a_null import Audio
            else:
                from .audio.a_curses import Audio

            return Renderer, Inputs, Audio

    # pylint: disable=import-outside-toplevel
    from .inputs.i_null import Inputs
    from .renderers.r_null import Renderer
    from .audio.a_null import Audio

    return Renderer, Inputs, Audio


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))
    quirk_settings = {}

    for cpu_quirk in CPU_QUIRKS:
        quirk_label = "{}_quirks".format(cpu_quirk)
        quirk_setting = args[quirk_label]
        quirk_settings[quirk_label] = None if quirk_setting is None else bool(quirk_setting)

    # Read the ROM binary before building anything else, so a bad filename costs nothing
    try:
        rom = Loader().load_rom(args["filename"])
    except OSError as err:
        print("Unable to read ROM: {}".format(err), file=sys.stderr)
        return 1
    except LoaderError as err:
        print(err, file=sys.stderr)
        return 1

    try:
        Renderer, Inputs, Audio = select_plugins(args["renderer"], args["mute"])
    except StartupError as err:
        print(err, file=sys.stderr)
        return 1

    # Set up a new rendering system, then host inputs and audio, which can depend on the renderer
    renderer = None
    inputs = None
    audio = None

    try:
        renderer = Renderer(
            scale=args["scale"],
            pygame_palette=args["pygame_palette"],
            curses_cursor_mode=args["curses_cursor_mode"]
        )
        inputs = Inputs(args["keymap"], renderer)
        audio = Audio()
    except (InputsError, RendererError) as err:
        _shutdown(audio, inputs, renderer)
        print(err, file=sys.stderr)
        return 1

    # Initialise framebuffer and attach to rendering system
    screen_wrap_quirks = args["screen_wrap_quirks"]
    framebuffer = Framebuffer(renderer, allow_wrapping=bool(screen_wrap_quirks))

    ram = RAM(MEMORY_SIZE)
    stack = Stack()

    # Set up debugger and live output if necessary
    debugger = Debugger()
    debugger.set_live(args["debug"])

    # Create a new CPU, and plug it into the rest of the system
    cpu = CPU(ram, stack, framebuffer, debugger, **quirk_settings)
    error = None

    try:
        emulator = Emulator(
            ram, cpu, framebuffer, Scheduler(), inputs, audio, rom,
            clock_speed=args["clock_speed"], max_cycles=args["max_cycles"]
        )
        emulator.run()
    except (CPUError, RAMError, StackError, SchedulerError) as err:
        error = err
    finally:
        # Shut down the rendering framework before reporting.  __del__ cannot be relied upon when using PyPy
        _shutdown(audio, inputs, renderer)

    if error is not None:
        print(error, file=sys.stderr)
        return 1

    return 0


def _shutdown(audio, inputs, renderer):
    for plugin in audio, inputs, renderer:
        if plugin is not None:
            plugin.shutdown()
