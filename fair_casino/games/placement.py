"""Unique-subset placement: choose K distinct cells from a grid using provably fair draws."""

import logging

from config.settings import EngineConfig
from tools.fair_rng import DerivationParams, derive_int

logger = logging.getLogger("fair_casino.placement")


def place_unique(params: DerivationParams, cells: int, count: int,
                 lane: int = 0, stride: int = None) -> list[int]:
    """Pick `count` distinct cells in [0, cells).

    Lane `n` owns cursors n*stride .. n*stride + stride - 1. Each attempt draws
    one cell and keeps it if unseen. If the block runs dry the remaining cells
    are picked from the sorted list of free cells with negative cursors, so the
    whole placement stays reproducible from the seed triple.
    """
    if count < 0 or count > cells:
        raise ValueError(f"cannot place {count} unique cells on a {cells}-cell grid")
    stride = stride or EngineConfig.PLACEMENT_STRIDE
    base = lane * stride

    picked: list[int] = []
    seen = set()
    attempt = 0
    while len(picked) < count and attempt < stride:
        cell = derive_int(params.with_cursor(base + attempt), 0, cells - 1)
        attempt += 1
        if cell not in seen:
            seen.add(cell)
            picked.append(cell)

    if len(picked) < count:
        logger.warning(
            f"Placement lane {lane} exhausted {stride} draws with {len(picked)}/{count} "
            f"unique cells; completing from the free-cell list")
        k = 0
        while len(picked) < count:
            free = [c for c in range(cells) if c not in seen]
            idx = derive_int(params.with_cursor(-(base + k + 1)), 0, len(free) - 1)
            seen.add(free[idx])
            picked.append(free[idx])
            k += 1

    return picked
