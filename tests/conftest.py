"""Test configuration and fixtures for interpreter tests."""

import pytest
import jax.numpy as jnp
from chipcore import create_state, load_program


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=0x10, VF=1)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def program(*words):
    """Assemble instruction words into big-endian program bytes."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def load_words(state, *words):
    """Load instruction words at 0x200."""
    return load_program(state, program(*words))
