# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

# This file includes some simple and useful function, part of them will be exposed to users.

import numpy as np
from datetime import datetime
from functools import wraps


def timer(function):
    """Decorators function for timing."""

    @wraps(function)
    def timer(*args, **kwargs):
        start = datetime.now()
        result = function(*args, **kwargs)
        end = datetime.now()
        print(f"\nFunction {function.__name__}() is finished. Time costs {end-start}.")
        return result

    return timer


def pad_neighbor_list(neighbor_list, max_neigh=None):
    """Convert a ragged neighbor list into the padded arrays used in chillpy.

    Args:
        neighbor_list (list[list[int]]): neighbor indices per particle, order is kept.
        max_neigh (int, optional): width of the padded array. Defaults to the largest neighbor number.

    Returns:
        tuple[np.ndarray, np.ndarray]: verlet_list (:math:`N_p, max\_neigh`) padded with -1 and neighbor_number (:math:`N_p`).
    """
    N = len(neighbor_list)
    neighbor_number = np.array([len(i) for i in neighbor_list], np.int32)
    if max_neigh is None:
        max_neigh = int(neighbor_number.max()) if N > 0 else 0
    assert (
        neighbor_number.max(initial=0) <= max_neigh
    ), "max_neigh is smaller than the largest neighbor number."
    # Keep at least one column so the kernels always get a 2-D array.
    verlet_list = np.full((N, max(max_neigh, 1)), -1, np.int32)
    for i, neigh in enumerate(neighbor_list):
        verlet_list[i, : len(neigh)] = neigh
    return verlet_list, neighbor_number


def _check_neighbor(verlet_list, neighbor_number, N):
    """Validate the padded neighbor list and return contiguous int32 copies."""
    verlet_list = np.ascontiguousarray(verlet_list, dtype=np.int32)
    neighbor_number = np.ascontiguousarray(neighbor_number, dtype=np.int32)
    assert verlet_list.ndim == 2, "verlet_list should be a 2-D array."
    assert verlet_list.shape[0] == N, "verlet_list should have one row per particle."
    assert neighbor_number.shape == (N,), "neighbor_number should have N elements."
    if N > 0:
        assert neighbor_number.min() >= 0, "neighbor_number should be non-negative."
        assert (
            neighbor_number.max() <= verlet_list.shape[1]
        ), "neighbor_number is larger than the width of verlet_list."
        mask = np.arange(verlet_list.shape[1])[None, :] < neighbor_number[:, None]
        used = verlet_list[mask]
        if used.size > 0:
            assert (
                used.min() >= 0 and used.max() < N
            ), "verlet_list contains out-of-range neighbor index."
    return verlet_list, neighbor_number


def _neighbor_mask(verlet_list, neighbor_number):
    """True for the slots of verlet_list which hold a real neighbor."""
    return np.arange(verlet_list.shape[1])[None, :] < neighbor_number[:, None]
