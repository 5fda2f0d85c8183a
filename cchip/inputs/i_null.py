#!/usr/bin/env python3

"""
Null Input Plugin

Serves as a base class for other Input plugins.  Can be used on its own if zero
input functionality is required (no keys are ever held, and the emulator is
never asked to quit).

Plugins are handed the emulator's 16-entry key list once per main loop
iteration, and refresh it in place.  Anything the emulator itself needs to act
on (quit, pause, reset) is returned separately, and never reaches the CPU.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class InputsError(Exception):
    pass


class Inputs:
    def __init__(self, keymap, renderer, force_lowercase=False, reserved_keys=()):
        self.keymap_dict = {}
        self.renderer = renderer
        keymap_split = keymap.split(",")

        if len(keymap_split) != 0x10:
            raise InputsError("Incorrect number of keys defined -- 16 required.  Use commas to split numbers")

        for key_num, key_defined in enumerate(keymap_split):
            try:
                key_defined_ord = int(key_defined)
            except ValueError:
                raise InputsError("Defined keys are not all integer values") from None

            if force_lowercase and 0 <= key_defined_ord < 0x100:
                # If we are working with characters rather than keyscan codes, we should convert to lowercase
                key_defined_ord = ord(chr(key_defined_ord).lower())

            if key_defined_ord in reserved_keys:
                raise InputsError("Key {} is reserved for emulator controls".format(key_defined_ord))

            if key_defined_ord in self.keymap_dict:
                raise InputsError("Duplicate keys defined")

            self.keymap_dict[key_defined_ord] = key_num

    def process_messages(self, keys):
        # Refresh 'keys' in place, and return an EVENT_* constant or None
        for key_num in range(0x10):
            keys[key_num] = False

        return None

    def shutdown(self):
        pass
