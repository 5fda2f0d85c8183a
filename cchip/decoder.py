#!/usr/bin/env python3

"""
Instruction Decoder

Every CHIP-8 instruction is a single 16-bit word, and the operand fields are
always found in the same nibble positions, whichever instruction is being
executed:

    op   - bits 12-15, the instruction family
    x    - bits 8-11, first register index
    y    - bits 4-7, second register index
    n    - bits 0-3, a nibble (sprite height, or a sub-operation selector)
    nn   - bits 0-7, an immediate byte
    nnn  - bits 0-11, an address

Decoding never fails.  Whether the fields make sense together is for the CPU
to decide when it dispatches the instruction.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class Instruction:
    __slots__ = ("opcode", "op", "x", "y", "n", "nn", "nnn")

    def __init__(self, opcode):
        self.opcode = opcode
        self.op = (opcode & 0xF000) >> 12
        self.x = (opcode & 0xF00) >> 8
        self.y = (opcode & 0xF0) >> 4
        self.n = opcode & 0xF
        self.nn = opcode & 0xFF
        self.nnn = opcode & 0xFFF

    def __eq__(self, other):
        return isinstance(other, Instruction) and other.opcode == self.opcode

    def __hash__(self):
        return hash(self.opcode)

    def __repr__(self):
        return "Instruction(0x{:04x})".format(self.opcode)


def decode(opcode):
    return Instruction(opcode & 0xFFFF)
