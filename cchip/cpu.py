#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8)

Like a real computer, this is where most of the processing happens.  The CPU
does not keep time itself.  The emulator's scheduler calls tick() whenever the
CPU clock fires, and decrement_timers() whenever the 60Hz timer clock fires, so
each call here does exactly one thing and returns.

Instructions are dispatched through a dictionary of handlers.  The first lookup
is keyed on the instruction's top nibble.  Families that share a nibble are then
looked up again with a wider mask (0xFFFF for 0nnn, 0xF00F for 5/8/9, 0xF0FF for
E/F).  Anything missing from the table is a DecodeError, so a bad ROM halts with
a report instead of silently running off into garbage.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import randint
from .constants import FONT_LOCATION, FONT_GLYPH_SIZE, PROGRAM_START
from .decoder import decode
from .ram import RAMError
from .stack import StackError


class CPUError(Exception):
    pass


class DecodeError(CPUError):
    pass


class CPU:
    def __init__(self, ram, stack, framebuffer, debugger, shift_quirks=None, load_quirks=None, logic_quirks=None):
        self.ram = ram
        self.stack = stack
        self.framebuffer = framebuffer
        self.debugger = debugger
        self.live_debug = self.debugger.is_live()

        """
        Quirks
        ------

        - Shift quirks : Enabled by default.  8xy6/8xyE shift Vx in place.  If disabled, Vy is shifted into Vx as
                         on the COSMAC VIP.
        - Load quirks  : Disabled by default.  If enabled, Fx55/Fx65 leave I pointing past the last register.
        - Logic quirks : Disabled by default.  If enabled, 8xy1/8xy2/8xy3 reset Vf as on the COSMAC VIP.
        """

        self.shift_quirks = True if shift_quirks is None else shift_quirks
        self.load_quirks = False if load_quirks is None else load_quirks
        self.logic_quirks = False if logic_quirks is None else logic_quirks

        # n = Nibble
        # kk = Byte
        # nnn = address
        # x/y = register (0-15)
        self.instructions = {
            # Initial lookup for instructions' first nibble
            0x0: self._0nnn,  # Alias for bitmask 0xFFFF
            0x1: self._1nnn,
            0x2: self._2nnn,
            0x3: self._3xkk,
            0x4: self._4xkk,
            0x5: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x6: self._6xkk,
            0x7: self._7xkk,
            0x8: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x9: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0xA: self._Annn,
            0xB: self._Bnnn,
            0xC: self._Cxkk,
            0xD: self._Dxyn,
            0xE: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            0xF: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            # Instructions beginning with nibble 0x0, bitmask 0xFFFF (i.e., exact match)
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            # Instructions beginning with nibble 0x5/0x8/0x9, bitmask 0xF00F
            0x5000: self._5xy0,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            # Instructions beginning with nibble 0xE/0xF, bitmask 0xF0FF
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65
        }

        self.v = memoryview(bytearray(16))  # Writes outside 0-255 raise ValueError, so results must be masked
        self.keys = [False] * 0x10
        self.reset()

    def reset(self):
        # Registers, timers and the call stack.  RAM contents are left to whoever loaded them.
        self.v[:] = bytes(16)
        self.i = 0
        self.dt = 0  # Delay timer
        self.st = 0  # Sound timer
        self.pc = PROGRAM_START
        self.debug_pc = PROGRAM_START
        self.opcode = 0
        self.stack.clear()
        self.framebuffer.clear()

    def tick(self, keys):
        # Execute exactly one instruction.  The key state list is owned by the caller and only read here.
        self.keys = keys
        self.debug_pc = self.pc  # Do this first in case there is a crash
        self.opcode = 0

        try:
            self.opcode = self.fetch()
            self.inc_pc()  # Program counter updates after fetch, but before execute
            self.decode_exec()
        except (RAMError, StackError) as err:
            # Re-raise the same type, but with enough state attached to reproduce the failure
            raise type(err)(self.debugger.crash_report(self, "???", str(err))) from None

    def decrement_timers(self):
        # Timers count down at 60Hz and stop at zero
        if self.dt > 0:
            self.dt -= 1

        if self.st > 0:
            self.st -= 1

    def is_buzzer_on(self):
        return self.st > 0

    def fetch(self):
        return self.ram.read_word(self.pc)

    def _call_masked_instruction(self, masked_opcode, ins):
        instruction = self.instructions.get(masked_opcode)

        if instruction is None:
            self._opcode_unsupported()

        instruction(ins)

    def decode_exec(self):
        ins = decode(self.opcode)
        self._call_masked_instruction(ins.op, ins)

    def inc_pc(self):
        self.pc += 2

    def dec_pc(self):
        # Only used to re-run instructions (i.e. the keypress wait)
        self.pc -= 2

    def _opcode_unsupported(self):
        raise DecodeError(
            self.debugger.crash_report(
                self, "???", "Opcode 0x{:04x} at address 0x{:03x} is not a CHIP-8 instruction.".format(
                    self.opcode, self.debug_pc
                )
            )
        ) from None

    def debug(self, instruction):
        self.debugger.output(self, instruction)

    def _0nnn(self, ins):
        if ins.opcode < 0x10:
            # Opcodes 0x0 - 0xF are used internally for indexing, so they must never be matched here
            self._opcode_unsupported()

        self._call_masked_instruction(ins.opcode, ins)

    def _5nnn_8nnn_9nnn(self, ins):
        self._call_masked_instruction(ins.opcode & 0xF00F, ins)

    def _Ennn_Fnnn(self, ins):
        self._call_masked_instruction(ins.opcode & 0xF0FF, ins)

    def _00E0(self, ins):  # CLS
        if self.live_debug:
            self.debug("CLS")

        self.framebuffer.clear()

    def _00EE(self, ins):  # RET
        if self.live_debug:
            self.debug("RET")

        self.pc = self.stack.pop()

    def _1nnn(self, ins):  # JP addr
        if self.live_debug:
            self.debug("JP 0x{:03x}".format(ins.nnn))

        self.pc = ins.nnn

    def _2nnn(self, ins):  # CALL addr
        if self.live_debug:
            self.debug("CALL 0x{:03x}".format(ins.nnn))

        self.stack.push(self.pc)
        self.pc = ins.nnn

    def _3xkk(self, ins):  # SE Vx, byte
        if self.live_debug:
            self.debug("SE V{:01x}, 0x{:02x}".format(ins.x, ins.nn))

        if self.v[ins.x] == ins.nn:
            self.inc_pc()

    def _4xkk(self, ins):  # SNE Vx, byte
        if self.live_debug:
            self.debug("SNE V{:01x}, 0x{:02x}".format(ins.x, ins.nn))

        if self.v[ins.x] != ins.nn:
            self.inc_pc()

    def _5xy0(self, ins):  # SE Vx, Vy
        if self.live_debug:
            self.debug("SE V{:01x}, V{:01x}".format(ins.x, ins.y))

        if self.v[ins.x] == self.v[ins.y]:
            self.inc_pc()

    def _6xkk(self, ins):  # LD Vx, byte
        if self.live_debug:
            self.debug("LD V{:01x}, 0x{:02x}".format(ins.x, ins.nn))

        self.v[ins.x] = ins.nn

    def _7xkk(self, ins):  # ADD Vx, byte
        if self.live_debug:
            self.debug("ADD V{:01x}, 0x{:02x}".format(ins.x, ins.nn))

        # Wraps around without touching Vf
        self.v[ins.x] = (self.v[ins.x] + ins.nn) & 0xFF

    def _post_8xy1_8xy2_8xy3(self):
        if self.logic_quirks:
            self.v[0xF] = 0

    def _8xy0(self, ins):  # LD Vx, Vy
        if self.live_debug:
            self.debug("LD V{:01x}, V{:01x}".format(ins.x, ins.y))

        self.v[ins.x] = self.v[ins.y]

    def _8xy1(self, ins):  # OR Vx, Vy
        if self.live_debug:
            self.debug("OR V{:01x}, V{:01x}".format(ins.x, ins.y))

        self.v[ins.x] |= self.v[ins.y]
        self._post_8xy1_8xy2_8xy3()

    def _8xy2(self, ins):  # AND Vx, Vy
        if self.live_debug:
            self.debug("AND V{:01x}, V{:01x}".format(ins.x, ins.y))

        self.v[ins.x] &= self.v[ins.y]
        self._post_8xy1_8xy2_8xy3()

    def _8xy3(self, ins):  # XOR Vx, Vy
        if self.live_debug:
            self.debug("XOR V{:01x}, V{:01x}".format(ins.x, ins.y))

        self.v[ins.x] ^= self.v[ins.y]
        self._post_8xy1_8xy2_8xy3()

    def _8xy4(self, ins):  # ADD Vx, Vy
        if self.live_debug:
            self.debug("ADD V{:01x}, V{:01x}".format(ins.x, ins.y))

        val = self.v[ins.x] + self.v[ins.y]
        self.v[ins.x] = val & 0xFF
        self.v[0xF] = int(val > 0xFF)  # Vf is set when carrying, after Vx in case Vx is Vf

    def _post_8xy5_8xy7(self, ins, val):  # Post-SUB/SUBN
        self.v[ins.x] = val & 0xFF
        # Vf is set when NOT borrowing, and only after Vx has been written
        self.v[0xF] = int(val >= 0)

    def _8xy5(self, ins):  # SUB Vx, Vy
        if self.live_debug:
            self.debug("SUB V{:01x}, V{:01x}".format(ins.x, ins.y))

        self._post_8xy5_8xy7(ins, self.v[ins.x] - self.v[ins.y])

    def _debug_8xy6_8xyE(self, ins, direction):
        self.debug(
            "{} V{:01x}".format(direction, ins.x) if self.shift_quirks else
            "{} V{:01x}, V{:01x}".format(direction, ins.x, ins.y)
        )

    def _8xy6(self, ins):  # SHR Vx {, Vy}
        if self.live_debug:
            self._debug_8xy6_8xyE(ins, "SHR")

        val = self.v[ins.x if self.shift_quirks else ins.y]
        self.v[ins.x] = val >> 1
        self.v[0xF] = val & 1

    def _8xy7(self, ins):  # SUBN Vx, Vy
        if self.live_debug:
            self.debug("SUBN V{:01x}, V{:01x}".format(ins.x, ins.y))

        self._post_8xy5_8xy7(ins, self.v[ins.y] - self.v[ins.x])

    def _8xyE(self, ins):  # SHL Vx {, Vy}
        if self.live_debug:
            self._debug_8xy6_8xyE(ins, "SHL")

        val = self.v[ins.x if self.shift_quirks else ins.y]
        self.v[ins.x] = (val << 1) & 0xFF
        self.v[0xF] = val >> 7

    def _9xy0(self, ins):  # SNE Vx, Vy
        if self.live_debug:
            self.debug("SNE V{:01x}, V{:01x}".format(ins.x, ins.y))

        if self.v[ins.x] != self.v[ins.y]:
            self.inc_pc()

    def _Annn(self, ins):  # LD I, addr
        if self.live_debug:
            self.debug("LD I, 0x{:03x}".format(ins.nnn))

        self.i = ins.nnn

    def _Bnnn(self, ins):  # JP V0, addr
        if self.live_debug:
            self.debug("JP V0, 0x{:03x}".format(ins.nnn))

        # Not masked.  A target past the end of RAM faults on the next fetch.
        self.pc = ins.nnn + self.v[0]

    def _Cxkk(self, ins):  # RND Vx, byte
        if self.live_debug:
            self.debug("RND V{:01x}, 0x{:02x}".format(ins.x, ins.nn))

        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.v[ins.x] = randint(0, 0xFF) & ins.nn

    def _Dxyn(self, ins):  # DRW Vx, Vy, nibble
        height = ins.n

        if self.live_debug:
            self.debug("DRW V{:01x}, V{:01x}, 0x{:01x}".format(ins.x, ins.y, height))

        # The sprite's start always wraps.  Whether the rest of it wraps or is clipped is up to the framebuffer.
        vid_width, vid_height = self.framebuffer.get_vid_size()
        vx_pos = self.v[ins.x] % vid_width
        vy_pos = self.v[ins.y] % vid_height
        sprite = self.ram.read_block(self.i, height)
        self.v[0xF] = 0
        collided = False

        for y, spr_data in enumerate(sprite):
            scr_y = y + vy_pos

            for x in range(8):
                if spr_data & (0x80 >> x):
                    # Don't stop drawing on a collision.  Set the flag, and never unset it for this sprite.
                    if self.framebuffer.xor_pixel(x + vx_pos, scr_y):
                        collided = True

        self.v[0xF] = int(collided)
        self.framebuffer.dirty = True

    def _Ex9E(self, ins):  # SKP Vx
        if self.live_debug:
            self.debug("SKP V{:01x}".format(ins.x))

        # Only the low nibble selects a key
        if self.keys[self.v[ins.x] & 0xF]:
            self.inc_pc()

    def _ExA1(self, ins):  # SKNP Vx
        if self.live_debug:
            self.debug("SKNP V{:01x}".format(ins.x))

        if not self.keys[self.v[ins.x] & 0xF]:
            self.inc_pc()

    def _Fx07(self, ins):  # LD Vx, DT
        if self.live_debug:
            self.debug("LD V{:01x}, DT".format(ins.x))

        self.v[ins.x] = self.dt

    def _Fx0A(self, ins):  # LD Vx, K
        if self.live_debug:
            self.debug("LD V{:01x}, K".format(ins.x))

        # This opcode waits for a keypress, but the timers still need to expire and the display still needs
        # refreshing, so control goes back to the scheduler and the program counter is wound back to come here again.
        key = None

        for key_num, key_down in enumerate(self.keys):
            if key_down:
                key = key_num  # If several are held, the highest key wins

        if key is None:
            self.dec_pc()
        else:
            self.v[ins.x] = key

    def _Fx15(self, ins):  # LD DT, Vx
        if self.live_debug:
            self.debug("LD DT, V{:01x}".format(ins.x))

        self.dt = self.v[ins.x]

    def _Fx18(self, ins):  # LD ST, Vx
        if self.live_debug:
            self.debug("LD ST, V{:01x}".format(ins.x))

        self.st = self.v[ins.x]

    def _Fx1E(self, ins):  # ADD I, Vx
        if self.live_debug:
            self.debug("ADD I, V{:01x}".format(ins.x))

        # 16-bit, and Vf is left alone
        self.i = (self.i + self.v[ins.x]) & 0xFFFF

    def _Fx29(self, ins):  # LD F, Vx
        if self.live_debug:
            self.debug("LD F, V{:01x}".format(ins.x))

        self.i = FONT_LOCATION + FONT_GLYPH_SIZE * self.v[ins.x]

    def _Fx33(self, ins):  # LD B, Vx
        if self.live_debug:
            self.debug("LD B, V{:01x}".format(ins.x))

        # All three digits go in one checked write, so nothing is stored if the last would fall outside RAM
        val = self.v[ins.x]
        self.ram.write_block(self.i, bytes((val // 100, (val // 10) % 10, val % 10)))

    def _post_Fx55_Fx65(self, ins):
        if self.load_quirks:
            self.i = (self.i + ins.x + 1) & 0xFFFF

    def _Fx55(self, ins):  # LD [I], Vx
        if self.live_debug:
            self.debug("LD [I], V{:01x}".format(ins.x))

        # Ensure with +1s that the final register is copied
        self.ram.write_block(self.i, self.v[:ins.x + 1])
        self._post_Fx55_Fx65(ins)

    def _Fx65(self, ins):  # LD Vx, [I]
        if self.live_debug:
            self.debug("LD V{:01x}, [I]".format(ins.x))

        self.v[:ins.x + 1] = self.ram.read_block(self.i, ins.x + 1)
        self._post_Fx55_Fx65(ins)
