"""ALU operations (8xxx).

Each ``alu_*`` function maps the pre-instruction values of VX and VY to the new
VX and, for the flag-producing operations, the new VF.
"""

import jax.numpy as jnp
from chipcore.state import MachineState
from chipcore.decode import DecodedInstruction
from chipcore.constants import FLAG_REGISTER


def _u8(value) -> jnp.ndarray:
    return jnp.astype(value & 0xFF, jnp.uint8)


def alu_set(vx: int, vy: int) -> int:
    """8XY0 - Set: VX = VY."""
    return vy


def alu_or(vx: int, vy: int) -> int:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy


def alu_and(vx: int, vy: int) -> int:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy


def alu_xor(vx: int, vy: int) -> int:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.int32) + jnp.astype(vy, jnp.int32)
    carry = result > 255
    return _u8(result), carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when no borrow (VX > VY)."""
    not_borrow = vx > vy
    result = jnp.astype(vx, jnp.int32) - jnp.astype(vy, jnp.int32)
    return _u8(result), not_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1, VF = bit shifted out."""
    shifted_bit = vx & 1
    result = vx >> 1
    return _u8(result), shifted_bit


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when no borrow (VY > VX)."""
    not_borrow = vy > vx
    result = jnp.astype(vy, jnp.int32) - jnp.astype(vx, jnp.int32)
    return _u8(result), not_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1, VF = bit shifted out."""
    shifted_bit = (vx & 0x80) >> 7
    result = jnp.astype(vx, jnp.int32) << 1
    return _u8(result), shifted_bit


def make_alu_instruction(alu_fn):
    """Handler for an ALU operation leaving VF untouched."""
    def alu_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        result = alu_fn(state.V[instruction.x], state.V[instruction.y])
        return state.replace(V=state.V.at[instruction.x].set(_u8(result)))
    return alu_instruction


def make_flag_alu_instruction(alu_fn):
    """Handler for an ALU operation that also produces VF.

    The flag is written before the result, so with X = F the result wins.
    """
    def alu_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        result, flag = alu_fn(state.V[instruction.x], state.V[instruction.y])
        new_V = state.V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        new_V = new_V.at[instruction.x].set(result)
        return state.replace(V=new_V)
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_flag_alu_instruction(alu_add)
execute_alu_sub_xy = make_flag_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_flag_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_flag_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_flag_alu_instruction(alu_shift_left)
