#!/usr/bin/env python3

"""
Stack Emulator

There is no specified location in RAM for the CHIP-8 call stack, and no stack
pointer register exposed to running programs, so a bounded list is all that is
needed.  The COSMAC VIP interpreter reserved room for 12 return addresses;
later interpreters commonly allow 16, which is the default here.

Returning with nothing on the stack is always fatal.  There is no sensible
address to continue from, and carrying on would only hide the ROM bug.
"""

__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import STACK_DEPTH


class StackError(Exception):
    pass


class StackOverflow(StackError):
    pass


class StackUnderflow(StackError):
    pass


class Stack:
    def __init__(self, size=STACK_DEPTH):
        self.items = []
        self.size = size

    def push(self, item):
        if len(self.items) >= self.size:
            raise StackOverflow("Stack overflow (more than {} nested calls)".format(self.size))

        self.items.append(item)

    def pop(self):
        try:
            return self.items.pop()
        except IndexError:
            raise StackUnderflow("Stack underflow (return with an empty call stack)") from None

    def clear(self):
        self.items.clear()

    def get_items(self):
        # For debugging
        return self.items
