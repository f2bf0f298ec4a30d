"""Per-worker random number generation for Monte Carlo sampling.

Every tile worker owns a private generator whose whole state is a single
``ti.u32`` carried in a local variable. Sampling functions take the current
state and return the updated one alongside the drawn value, so no two
workers ever share (or contend on) generator state.

The generator is Marsaglia's xorshift32. Per-tile seeds are derived on the
Python side from one master seed with ``numpy.random.SeedSequence``, which
gives statistically independent streams while keeping renders reproducible.

Example:
    >>> seeds = derive_tile_seeds(master_seed=7, count=4)
    >>> # Inside a Taichi kernel:
    >>> # state = seeds_field[tile]
    >>> # u, state = next_float(state)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

# 2^-24: maps the top 24 bits of a state onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0

# xorshift32 is stuck at zero; any fixed non-zero word works as a stand-in
_ZERO_SEED_REPLACEMENT = 0x9E3779B9


@ti.func
def xorshift32(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step.

    Args:
        state: The current generator state (must be non-zero).

    Returns:
        The next generator state.
    """
    x = state
    x ^= x << 13
    x ^= x >> 17
    x ^= x << 5
    return x


@ti.func
def next_float(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current generator state.

    Returns:
        A tuple (value, new_state).
    """
    new_state = xorshift32(state)
    value = ti.cast(new_state >> 8, ti.f32) * _INV_2_24
    return value, new_state


@ti.func
def next_symmetric(state: ti.u32):
    """Draw a uniform float in [-1, 1).

    Args:
        state: The current generator state.

    Returns:
        A tuple (value, new_state).
    """
    u, new_state = next_float(state)
    return u * 2.0 - 1.0, new_state


def derive_tile_seeds(master_seed: int, count: int) -> npt.NDArray[np.uint32]:
    """Derive one independent, non-zero generator seed per tile.

    Each tile gets a child of ``SeedSequence(master_seed)``, so the same
    master seed always reproduces the same per-tile streams while different
    tiles never share a stream.

    Args:
        master_seed: Non-negative global seed for the render.
        count: Number of seeds (tiles) to derive.

    Returns:
        Array of ``count`` uint32 seeds.

    Raises:
        ValueError: If count is not positive or master_seed is negative.
    """
    if count <= 0:
        raise ValueError(f"Seed count must be positive, got {count}")
    if master_seed < 0:
        raise ValueError(f"Master seed must be non-negative, got {master_seed}")

    children = np.random.SeedSequence(master_seed).spawn(count)
    seeds = np.array(
        [child.generate_state(1, dtype=np.uint32)[0] for child in children],
        dtype=np.uint32,
    )
    seeds[seeds == 0] = _ZERO_SEED_REPLACEMENT
    return seeds


def seed_to_state(seed: int) -> int:
    """Turn an arbitrary integer seed into a usable xorshift32 state.

    Keeps the low 32 bits and replaces a zero result, which would never
    advance.
    """
    state = int(seed) & 0xFFFFFFFF
    if state == 0:
        state = _ZERO_SEED_REPLACEMENT
    return state
