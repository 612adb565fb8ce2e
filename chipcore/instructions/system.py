"""System instructions (0x0xxx) and helpers shared by every handler."""

import jax
import jax.lax
import jax.numpy as jnp
from chipcore.state import MachineState
from chipcore.decode import DecodedInstruction
from chipcore.constants import ADDRESS_MASK
from chipcore.errors import Fault
from chipcore.stack import pop, is_empty


def advance_pc(pc: jnp.ndarray, amount: int = 2) -> jnp.ndarray:
    """Move the program counter by ``amount`` bytes, wrapping inside memory."""
    return jnp.astype((jnp.astype(pc, jnp.int32) + amount) & ADDRESS_MASK, jnp.uint16)


def report_fault(state: MachineState, fault: Fault, instruction: DecodedInstruction) -> MachineState:
    """Record a fault raised by the instruction being executed.

    ``execute`` has already advanced pc, so the faulting address is two bytes back.
    """
    return state.replace(
        fault=jnp.asarray(int(fault), dtype=jnp.uint8),
        fault_opcode=jnp.astype(instruction.raw, jnp.uint16),
        fault_address=advance_pc(state.pc, -2),
    )


def execute_unknown(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Unrecognised instruction word: report it and carry on."""
    return report_fault(state, Fault.UNKNOWN_OPCODE, instruction)


def execute_clear_screen(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(
        display=jnp.zeros_like(state.display),
        draw_flag=jnp.ones((), dtype=jnp.bool_),
    )


def execute_return(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00EE - Return from subroutine."""
    def _return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=jnp.astype(address, jnp.uint16))

    return jax.lax.cond(
        is_empty(state.stack),
        lambda s: report_fault(s, Fault.STACK_UNDERFLOW, instruction),
        _return,
        state
    )
