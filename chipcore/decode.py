"""Instruction decoding.

An instruction word is decoded once into an ``Op`` tag plus its operand
fields. Execution dispatches on the tag alone, so "which instruction is this"
is answered here and nowhere else.
"""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Op(IntEnum):
    """Instruction variants, in jump table order."""
    UNKNOWN = 0
    CLEAR_SCREEN = 1            # 00E0
    RETURN = 2                  # 00EE
    JUMP = 3                    # 1NNN
    CALL = 4                    # 2NNN
    SKIP_IF_EQUAL_IMMEDIATE = 5       # 3XNN
    SKIP_IF_NOT_EQUAL_IMMEDIATE = 6   # 4XNN
    SKIP_IF_EQUAL_REGISTER = 7        # 5XY0
    SET_IMMEDIATE = 8           # 6XNN
    ADD_IMMEDIATE = 9           # 7XNN
    ALU_SET = 10                # 8XY0
    ALU_OR = 11                 # 8XY1
    ALU_AND = 12                # 8XY2
    ALU_XOR = 13                # 8XY3
    ALU_ADD = 14                # 8XY4
    ALU_SUB_XY = 15             # 8XY5
    ALU_SHIFT_RIGHT = 16        # 8XY6
    ALU_SUB_YX = 17             # 8XY7
    ALU_SHIFT_LEFT = 18         # 8XYE
    SKIP_IF_NOT_EQUAL_REGISTER = 19   # 9XY0
    SET_INDEX = 20              # ANNN
    JUMP_WITH_OFFSET = 21       # BNNN
    RANDOM = 22                 # CXNN
    DRAW = 23                   # DXYN
    SKIP_IF_KEY_PRESSED = 24    # EX9E
    SKIP_IF_KEY_NOT_PRESSED = 25      # EXA1
    GET_DELAY_TIMER = 26        # FX07
    WAIT_FOR_KEY = 27           # FX0A
    SET_DELAY_TIMER = 28        # FX15
    SET_SOUND_TIMER = 29        # FX18
    ADD_TO_INDEX = 30           # FX1E
    FONT_CHARACTER = 31         # FX29
    BCD_CONVERSION = 32         # FX33
    STORE_REGISTERS = 33        # FX55
    LOAD_REGISTERS = 34         # FX65


def _table(size: int, entries: dict) -> jnp.ndarray:
    table = [int(Op.UNKNOWN)] * size
    for key, op in entries.items():
        table[key] = int(op)
    return jnp.array(table, dtype=jnp.int32)


# Families 0, 8, E and F are resolved by the secondary tables below.
_FAMILY_OPS = _table(16, {
    0x1: Op.JUMP,
    0x2: Op.CALL,
    0x3: Op.SKIP_IF_EQUAL_IMMEDIATE,
    0x4: Op.SKIP_IF_NOT_EQUAL_IMMEDIATE,
    0x5: Op.SKIP_IF_EQUAL_REGISTER,
    0x6: Op.SET_IMMEDIATE,
    0x7: Op.ADD_IMMEDIATE,
    0x9: Op.SKIP_IF_NOT_EQUAL_REGISTER,
    0xA: Op.SET_INDEX,
    0xB: Op.JUMP_WITH_OFFSET,
    0xC: Op.RANDOM,
    0xD: Op.DRAW,
})

_ALU_OPS = _table(16, {
    0x0: Op.ALU_SET,
    0x1: Op.ALU_OR,
    0x2: Op.ALU_AND,
    0x3: Op.ALU_XOR,
    0x4: Op.ALU_ADD,
    0x5: Op.ALU_SUB_XY,
    0x6: Op.ALU_SHIFT_RIGHT,
    0x7: Op.ALU_SUB_YX,
    0xE: Op.ALU_SHIFT_LEFT,
})

_KEY_OPS = _table(256, {
    0x9E: Op.SKIP_IF_KEY_PRESSED,
    0xA1: Op.SKIP_IF_KEY_NOT_PRESSED,
})

_MISC_OPS = _table(256, {
    0x07: Op.GET_DELAY_TIMER,
    0x0A: Op.WAIT_FOR_KEY,
    0x15: Op.SET_DELAY_TIMER,
    0x18: Op.SET_SOUND_TIMER,
    0x1E: Op.ADD_TO_INDEX,
    0x29: Op.FONT_CHARACTER,
    0x33: Op.BCD_CONVERSION,
    0x55: Op.STORE_REGISTERS,
    0x65: Op.LOAD_REGISTERS,
})


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded instruction with extracted operands."""
    raw: int
    op: int      # Op tag
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode_op(instruction) -> jnp.ndarray:
    """Resolve the ``Op`` tag of a 16-bit instruction word."""
    family = (instruction & 0xF000) >> 12
    n = instruction & 0x000F
    nn = instruction & 0x00FF

    system_op = jnp.where(
        instruction == 0x00E0,
        int(Op.CLEAR_SCREEN),
        jnp.where(instruction == 0x00EE, int(Op.RETURN), int(Op.UNKNOWN)),
    )

    return jnp.select(
        [family == 0x0, family == 0x8, family == 0xE, family == 0xF],
        [system_op, _ALU_OPS[n], _KEY_OPS[nn], _MISC_OPS[nn]],
        default=_FAMILY_OPS[family],
    ).astype(jnp.int32)


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into its tag and operands."""
    return DecodedInstruction(
        raw=instruction,
        op=decode_op(instruction),
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
