"""Fetch-decode-execute engine and cycle driver."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from flax.struct import dataclass

from chipcore.state import MachineState
from chipcore.decode import Op, decode
from chipcore.constants import ADDRESS_MASK
from chipcore.errors import Fault
from chipcore.instructions.system import (
    advance_pc, execute_unknown, execute_clear_screen, execute_return
)
from chipcore.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed
)
from chipcore.instructions.registers import execute_set, execute_add, execute_set_index, execute_random
from chipcore.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chipcore.instructions.display import execute_display
from chipcore.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

HANDLERS = {
    Op.UNKNOWN: execute_unknown,
    Op.CLEAR_SCREEN: execute_clear_screen,
    Op.RETURN: execute_return,
    Op.JUMP: execute_jump,
    Op.CALL: execute_call,
    Op.SKIP_IF_EQUAL_IMMEDIATE: execute_skip_if_equal_immediate,
    Op.SKIP_IF_NOT_EQUAL_IMMEDIATE: execute_skip_if_not_equal_immediate,
    Op.SKIP_IF_EQUAL_REGISTER: execute_skip_if_equal_register,
    Op.SET_IMMEDIATE: execute_set,
    Op.ADD_IMMEDIATE: execute_add,
    Op.ALU_SET: execute_alu_set,
    Op.ALU_OR: execute_alu_or,
    Op.ALU_AND: execute_alu_and,
    Op.ALU_XOR: execute_alu_xor,
    Op.ALU_ADD: execute_alu_add,
    Op.ALU_SUB_XY: execute_alu_sub_xy,
    Op.ALU_SHIFT_RIGHT: execute_alu_shift_right,
    Op.ALU_SUB_YX: execute_alu_sub_yx,
    Op.ALU_SHIFT_LEFT: execute_alu_shift_left,
    Op.SKIP_IF_NOT_EQUAL_REGISTER: execute_skip_if_not_equal_register,
    Op.SET_INDEX: execute_set_index,
    Op.JUMP_WITH_OFFSET: execute_jump_with_offset,
    Op.RANDOM: execute_random,
    Op.DRAW: execute_display,
    Op.SKIP_IF_KEY_PRESSED: execute_skip_if_key_pressed,
    Op.SKIP_IF_KEY_NOT_PRESSED: execute_skip_if_key_not_pressed,
    Op.GET_DELAY_TIMER: execute_get_delay_timer,
    Op.WAIT_FOR_KEY: execute_wait_for_key,
    Op.SET_DELAY_TIMER: execute_set_delay_timer,
    Op.SET_SOUND_TIMER: execute_set_sound_timer,
    Op.ADD_TO_INDEX: execute_add_to_index,
    Op.FONT_CHARACTER: execute_font_character,
    Op.BCD_CONVERSION: execute_bcd_conversion,
    Op.STORE_REGISTERS: execute_store_registers,
    Op.LOAD_REGISTERS: execute_load_registers,
}

# Jump table indexed by Op tag
JUMP_TABLE = [HANDLERS[op] for op in Op]


@dataclass
class CycleTrace:
    """Per-cycle fault record produced by ``run_cycles``."""
    fault: jnp.ndarray
    fault_opcode: jnp.ndarray
    fault_address: jnp.ndarray


def clear_fault(state: MachineState) -> MachineState:
    return state.replace(
        fault=jnp.asarray(int(Fault.NONE), dtype=jnp.uint8),
        fault_opcode=jnp.zeros((), dtype=jnp.uint16),
        fault_address=jnp.zeros((), dtype=jnp.uint16),
    )


def execute(state: MachineState, instruction: int) -> MachineState:
    """Execute single instruction.

    pc is advanced past the instruction before the handler runs; handlers for
    jumps, calls, returns, skips and the key wait adjust it from there.
    """
    decoded_instruction = decode(instruction)
    state = clear_fault(state)
    state = state.replace(pc=advance_pc(state.pc))
    return jax.lax.switch(decoded_instruction.op, JUMP_TABLE, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: MachineState) -> jnp.uint16:
    """Read the instruction word at pc. Addresses wrap at the end of memory."""
    high = state.memory[state.pc & ADDRESS_MASK]
    low = state.memory[(state.pc + 1) & ADDRESS_MASK]
    return _pack_u16(high, low)


def tick_timers(state: MachineState) -> MachineState:
    """Decrement both timers, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def step(state: MachineState) -> MachineState:
    """Run one cycle: fetch, execute, tick timers."""
    instruction = fetch(state)
    state = execute(state, instruction)
    state = tick_timers(state)
    return state.replace(cycles=jnp.astype(state.cycles + 1, jnp.uint32))


def run_cycle(state, _):
    state = step(state)
    return state, CycleTrace(
        fault=state.fault,
        fault_opcode=state.fault_opcode,
        fault_address=state.fault_address,
    )


@partial(jax.jit, static_argnums=1)
def run_cycles(state: MachineState, n: int) -> tuple[MachineState, CycleTrace]:
    """Run ``n`` cycles, returning the final state and the fault of every cycle."""
    return jax.lax.scan(run_cycle, state, length=n)
