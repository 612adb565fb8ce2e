"""Fault codes and exceptions raised by the interpreter."""

from enum import IntEnum


class Fault(IntEnum):
    """Diagnostic code recorded by an instruction that could not complete normally."""
    NONE = 0
    UNKNOWN_OPCODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3

    def describe(self, opcode: int, address: int) -> str:
        """Human readable message for a fault raised by `opcode` at `address`."""
        messages = {
            Fault.NONE: "No fault",
            Fault.UNKNOWN_OPCODE: "Unknown opcode",
            Fault.STACK_OVERFLOW: "Stack overflow on",
            Fault.STACK_UNDERFLOW: "Stack underflow on",
        }
        return f"{messages[self]} 0x{opcode:04X} at 0x{address:03X}"


class RomLoadError(ValueError):
    """Program image could not be loaded into memory."""
