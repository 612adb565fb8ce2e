"""Sprite drawing (DXYN).

The origin wraps around the screen; sprite pixels that would land past the
right or bottom edge are clipped.
"""

import jax.numpy as jnp
from chipcore.state import MachineState
from chipcore.decode import DecodedInstruction
from chipcore.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, ADDRESS_MASK, FLAG_REGISTER

# Pre-computed coordinate grids, indexed [y, x] like the framebuffer
yy, xx = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def sprite_mask(state: MachineState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Boolean screen-sized mask of the pixels the sprite toggles."""
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    in_sprite = (
        (xx >= sprite_x) & (xx < sprite_x + SPRITE_WIDTH)
        & (yy >= sprite_y) & (yy < sprite_y + instruction.n)
    )

    row_offset = yy - sprite_y
    col_offset = xx - sprite_x
    addresses = (jnp.astype(state.I, jnp.int32) + row_offset) & ADDRESS_MASK
    sprite_bytes = state.memory[addresses]
    shift = jnp.clip(SPRITE_WIDTH - 1 - col_offset, 0, SPRITE_WIDTH - 1)
    return (((sprite_bytes >> shift) & 1) == 1) & in_sprite


def execute_display(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    sprite = sprite_mask(state, instruction)
    collision = jnp.any(state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
        draw_flag=jnp.ones((), dtype=jnp.bool_),
    )
