"""Interfaces used by the collaborators around the interpreter.

ROM loading, key input, framebuffer output and sound polling. Everything here
works on ``MachineState`` values and returns new ones.
"""

import os
from typing import Union

import jax.numpy as jnp

from chipcore.state import MachineState
from chipcore.constants import PROGRAM_START, MAX_ROM_SIZE, NUM_KEYS
from chipcore.errors import RomLoadError


def load_program(state: MachineState, data: bytes) -> MachineState:
    """Copy a program image into memory starting at 0x200.

    Raises:
        RomLoadError: if the image does not fit between 0x200 and the end of memory
    """
    if len(data) > MAX_ROM_SIZE:
        raise RomLoadError(
            f"ROM is {len(data)} bytes, at most {MAX_ROM_SIZE} bytes fit in memory"
        )
    if len(data) == 0:
        return state
    rom_array = jnp.array(list(data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: MachineState, filename: Union[str, os.PathLike]) -> MachineState:
    """Load ROM file into memory starting at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise RomLoadError(f"Failed to open ROM '{filename}': {e}") from e
    return load_program(state, rom_data)


def set_key(state: MachineState, key: int, pressed: bool) -> MachineState:
    """Set the pressed state of one key. Keys outside 0..15 are ignored."""
    key = int(key)
    if not 0 <= key < NUM_KEYS:
        return state
    return state.replace(keypad=state.keypad.at[key].set(jnp.asarray(pressed, dtype=jnp.bool_)))


def consume_display(state: MachineState) -> tuple[MachineState, jnp.ndarray, jnp.ndarray]:
    """Hand the framebuffer to the renderer.

    Returns:
        Tuple of:
            - state: with the redraw flag cleared
            - display: (32, 64) boolean framebuffer
            - redraw: whether the framebuffer changed since the last call
    """
    return state.replace(draw_flag=jnp.zeros((), dtype=jnp.bool_)), state.display, state.draw_flag


def sound_active(state: MachineState) -> jnp.ndarray:
    """Whether a tone should be playing."""
    return state.sound_timer > 0
