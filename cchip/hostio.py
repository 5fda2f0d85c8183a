#!/usr/bin/env python3

"""
Host I/O Functionality

Handles loading ROM binaries for later writing into RAM.  A ROM is copied
verbatim to the program start address, so anything larger than the space
between there and the top of RAM is rejected before the machine is built.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import MEMORY_SIZE, PROGRAM_START


class LoaderError(Exception):
    pass


class Loader:
    def __init__(self, max_rom_size=MEMORY_SIZE - PROGRAM_START):
        self.max_rom_size = max_rom_size

    def load_binary(self, filename):
        with open(filename, "rb") as f:
            return f.read()

    def load_rom(self, filename):
        # OSError is left to propagate if the file is missing or unreadable
        data = self.load_binary(filename)

        if len(data) > self.max_rom_size:
            raise LoaderError(
                "ROM '{}' is {} bytes long, but only {} bytes are available.".format(
                    filename, len(data), self.max_rom_size
                )
            )

        return data
