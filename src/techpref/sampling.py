"""Distributed sampling: an evenly spread, order-preserving subset."""

from typing import Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def distributed_sample(items: Sequence[T], max_size: int) -> list[T]:
    """Pick up to ``max_size`` items spread evenly across ``items``.

    The first and last items are always kept when more than one is picked.
    Indices are ``round_half_up(i * step)`` with ``step = (n - 1) / (m - 1)``.

    >>> distributed_sample(list(range(7)), 4)
    [0, 2, 4, 6]
    >>> distributed_sample(["a", "b", "c"], 5)
    ['a', 'b', 'c']
    """
    if max_size < 1:
        raise ValueError("max_size must be at least 1")

    n = len(items)
    if n <= max_size:
        return list(items)
    if max_size == 1:
        return [items[0]]

    step = (n - 1) / (max_size - 1)
    # np.round rounds half to even; the index rule rounds half up
    indices = np.floor(np.arange(max_size) * step + 0.5).astype(int)
    return [items[i] for i in indices]
