"""
Mine placement.

Chooses which cells hold mines (uniformly, without replacement) and
computes the adjacent-mine count of every other cell.
"""
from typing import Iterable, Optional, Tuple

import numpy as np


# ============================================================================
# Sampling
# ============================================================================

def mine_count(rows: int, cols: int, probability: float) -> int:
    """
    Number of mines for a board, rounding half up.

    ``round()`` is not used because it rounds half to even.
    """
    return int(rows * cols * probability + 0.5)


def choose_mine_indices(
    total: int,
    count: int,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Pick ``count`` distinct flat indices out of ``range(total)``.

    Partial Fisher-Yates shuffle: for each i < count, swap position i with a
    position drawn uniformly from the unshuffled tail [i, total). The first
    ``count`` entries are then a uniformly random subset.

    Args:
        total: Number of cells on the board.
        count: Number of mines; ``0 <= count <= total``.
        rng: Random source (a fresh default generator when omitted).

    Returns:
        Array of ``count`` distinct indices, in draw order.
    """
    if not 0 <= count <= total:
        raise ValueError(f"Cannot place {count} mines on {total} cells")
    rng = rng if rng is not None else np.random.default_rng()

    pool = np.arange(total)
    for i in range(count):
        j = int(rng.integers(i, total))
        if j != i:
            pool[i], pool[j] = pool[j], pool[i]
    return pool[:count].copy()


# ============================================================================
# Layout
# ============================================================================

def mine_mask_from_indices(
    rows: int, cols: int, indices: Iterable[int]
) -> np.ndarray:
    """Boolean (rows, cols) grid with True at each flat index."""
    mask = np.zeros(rows * cols, dtype=bool)
    mask[np.fromiter(indices, dtype=np.int64)] = True
    return mask.reshape(rows, cols)


def mine_mask_from_positions(
    rows: int, cols: int, positions: Iterable[Tuple[int, int]]
) -> np.ndarray:
    """Boolean (rows, cols) grid with True at each (row, col)."""
    mask = np.zeros((rows, cols), dtype=bool)
    for row, col in positions:
        mask[row, col] = True
    return mask


def adjacent_counts(mask: np.ndarray) -> np.ndarray:
    """
    Count mines in the 8-neighborhood of every cell.

    Neighbors beyond the board edge are ignored and mine cells carry 0.

    Args:
        mask: Boolean (rows, cols) mine grid.

    Returns:
        int8 (rows, cols) array of counts in 0..8.
    """
    rows, cols = mask.shape
    padded = np.pad(mask.astype(np.int8), 1)
    counts = np.zeros((rows, cols), dtype=np.int8)
    for delta_row in (-1, 0, 1):
        for delta_col in (-1, 0, 1):
            if delta_row == 0 and delta_col == 0:
                continue
            counts += padded[
                1 + delta_row:1 + delta_row + rows,
                1 + delta_col:1 + delta_col + cols,
            ]
    counts[mask] = 0
    return counts
