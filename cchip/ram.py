#!/usr/bin/env python3

"""
RAM Emulator

Supports reading and writing of individual bytes, big-endian words, and blocks
of memory, plus fast zeroing of blocks.

Every access is checked against the size of the bank before it happens.  A bad
address computed by a ROM (from I, the program counter, or a jump target)
raises a MemoryFault naming the address, rather than an IndexError from deep
inside a memoryview, or worse, a silent wrap from a negative index.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RAMError(Exception):
    pass


class MemoryFault(RAMError):
    pass


class RAM:
    def __init__(self, mem_size=0):
        self.resize(mem_size)

    def resize(self, mem_size):
        self.mem = memoryview(bytearray(mem_size))
        self.mem_top = mem_size - 1
        self.mem_size = mem_size

    def read(self, location):
        self.check_bounds(location)
        return self.mem[location]

    def read_word(self, location):
        # CHIP-8 is big-endian.  Both bytes must be inside the bank
        self.check_bounds(location)
        self.check_bounds(location + 1)
        return (self.mem[location] << 8) | self.mem[location + 1]

    def read_block(self, location, size=1):
        if size:
            self.check_bounds(location)
            self.check_bounds(location + size - 1)

        return self.mem[location:location + size]

    def write(self, location, byte):
        self.check_bounds(location)
        self.mem[location] = byte

    def write_block(self, location, block):
        block_size = len(block)

        if not block_size:
            return

        block_top = location + block_size
        self.check_bounds(location)
        self.check_bounds(block_top - 1)
        self.mem[location:block_top] = block

    def check_bounds(self, location):
        if location < 0 or location > self.mem_top:
            raise MemoryFault("Memory access out of range at address 0x{:04x}".format(location))

    def zero_block(self, offset, size):
        if not size:
            return

        block_top = offset + size
        self.check_bounds(offset)
        self.check_bounds(block_top - 1)
        self.mem[offset:block_top] = bytes(size)

    def clear(self):
        self.zero_block(0, self.mem_size)
