"""Machine state structures."""

from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode

from chipcore.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)
from chipcore.errors import Fault


@dataclass(frozen=True)
class StackState:
    """Call stack of return addresses."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class MachineState(PyTreeNode):
    """Complete interpreter state.

    Every field is a JAX array so the whole state can be carried through
    ``jax.jit``, ``jax.lax.scan`` and ``jax.vmap``. Operations never mutate a
    state; they return a new one built with ``replace``.

    Attributes:
        rng: PRNG key consumed by the random instruction
        memory: 4096 bytes of addressable memory
        V: general registers V0..VF, VF doubling as the flag register
        I: index register
        pc: program counter
        stack: return address stack
        delay_timer: countdown timer readable by programs
        sound_timer: countdown timer driving the tone
        display: row-major framebuffer, ``display[y, x]``
        keypad: pressed state of the 16 keys
        draw_flag: framebuffer changed since it was last consumed
        fault: fault raised by the last executed instruction
        fault_opcode: instruction word that raised ``fault``
        fault_address: address of the instruction that raised ``fault``
        cycles: number of completed cycles
    """
    rng: jax.Array
    memory: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    pc: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    display: jnp.ndarray
    keypad: jnp.ndarray
    draw_flag: jnp.ndarray
    fault: jnp.ndarray
    fault_opcode: jnp.ndarray
    fault_address: jnp.ndarray
    cycles: jnp.ndarray


def create_stack() -> StackState:
    """Create an empty stack."""
    return StackState(
        data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
        pointer=jnp.zeros((), dtype=jnp.uint8),
    )


def create_state(rng: Optional[jax.Array] = None) -> MachineState:
    """Create initial machine state with font data loaded."""
    if rng is None:
        rng = jax.random.PRNGKey(0)
    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    return MachineState(
        rng=rng,
        memory=memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        stack=create_stack(),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        display=jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        draw_flag=jnp.zeros((), dtype=jnp.bool_),
        fault=jnp.asarray(Fault.NONE, dtype=jnp.uint8),
        fault_opcode=jnp.zeros((), dtype=jnp.uint16),
        fault_address=jnp.zeros((), dtype=jnp.uint16),
        cycles=jnp.zeros((), dtype=jnp.uint32),
    )
