# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

import numpy as np
import taichi as ti


@ti.func
def _pbc_rec(rij, boundary, box_length):
    """This func is used to calculate the pair distance in rectangle box."""
    for m in ti.static(range(3)):
        if boundary[m] == 1:
            dx = rij[m]
            x_size = box_length[m]
            h_x_size = x_size * 0.5
            if dx > h_x_size:
                dx = dx - x_size
            if dx <= -h_x_size:
                dx = dx + x_size
            rij[m] = dx
    return rij


def init_box(box):
    """This function is used to obtain the rectangle box array.

    - case 1: a float/int number, such as 10, it will generate a cubic box with box length of 10 A.
    - case 2: a list/tuple/np.ndarray with three elements, such as [10, 20, 30], it is the box length along x, y and z.
    - case 3: a 2-D np.ndarray or nested list with shape of (3, 2) or (4, 3).

    The shape of (3, 2) indicates the first column is the lower bound and the second column is
    the upper bound of box. The shape of (4, 3) indicates the three box vectors and the fourth row is the
    lower bound. Only orthogonal boxes are supported. The final box is a np.ndarray with shape of (4, 3):

    - lx 0 0 (x axis)
    - 0 ly 0 (y axis)
    - 0 0 lz (z axis)
    - xlo ylo zlo (origin)

    Args:
        box (float | list | np.ndarray): The input box.

    Returns:
        np.ndarray: box (4, 3).
    """
    if isinstance(box, (int, float)):
        if box <= 0:
            raise ValueError("Box length must be a positive number.")
        box = np.r_[np.eye(3) * float(box), np.zeros((1, 3))]
    elif isinstance(box, (list, tuple, np.ndarray)):
        box = np.array(box, np.float64)
        if box.shape == (3,):
            box = np.r_[np.diag(box), np.zeros((1, 3))]
        elif box.shape == (3, 2):
            box = np.r_[np.diag(box[:, 1] - box[:, 0]), box[:, 0].reshape(1, -1)]
        elif box.shape == (4, 3):
            pass
        else:
            raise ValueError("Wrong box shape, support (3,), (3, 2) and (4, 3).")
    else:
        raise TypeError(f"Invalid box type: {type(box)}")

    for i in range(3):
        for j in range(3):
            if i != j and box[i, j] != 0:
                raise ValueError("Only rectangle box is supported.")
    if np.any(np.diag(box[:-1]) <= 0):
        raise ValueError("Box length must be positive along every direction.")
    return box


def box_length(box):
    """Box length along x, y and z of a (4, 3) box."""
    return np.diag(box[:-1]).copy()


def box_bounds(box):
    """Return a (3, 2) array of [lower, upper] bounds of a (4, 3) box."""
    low = box[-1]
    return np.c_[low, low + box_length(box)]


def minimum_image(rij, box, boundary=[1, 1, 1]):
    """Apply the minimum image convention to displacement vectors.

    Args:
        rij (np.ndarray): (:math:`3`) or (:math:`N, 3`) displacement vectors.
        box (np.ndarray): (:math:`4, 3`) system box.
        boundary (list, optional): boundary conditions, 1 is periodic and 0 is free boundary. Defaults to [1, 1, 1].

    Returns:
        np.ndarray: wrapped displacement vectors with the same shape as rij.
    """
    rij = np.array(rij, np.float64)
    length = box_length(box)
    for m in range(3):
        if boundary[m] == 1:
            dx = rij[..., m]
            half = length[m] * 0.5
            dx = np.where(dx > half, dx - length[m], dx)
            dx = np.where(dx <= -half, dx + length[m], dx)
            rij[..., m] = dx
    return rij


if __name__ == "__main__":
    for a in [
        10,
        5.0,
        (3, 2, 1),
        np.array([[-1, 10], [-2, 13.0], [0, 5]]),
        np.array([[10, 0, 0], [0, 11, 0], [0, 0, 15], [1, 2, 3]]),
    ]:
        box = init_box(a)
        print("a is :")
        print(a)
        print("box is :")
        print(box)
        print("bounds are :")
        print(box_bounds(box))
