import numpy as np
import pytest

import chillpy
from chillpy.box import init_box, minimum_image


@pytest.fixture(scope="session", autouse=True)
def taichi_init():
    chillpy.init()


def nearest_four(pos, box):
    """Brute force four nearest neighbors under periodic boundary."""
    rij = minimum_image(pos[:, None, :] - pos[None, :, :], box)
    distance = np.linalg.norm(rij, axis=-1)
    np.fill_diagonal(distance, np.inf)
    verlet_list = np.argsort(distance, axis=1, kind="stable")[:, :4]
    return verlet_list.astype(np.int32), np.full(pos.shape[0], 4, np.int32)


def build_cubic_ice(a=6.36, nx=2, ny=2, nz=2):
    """Oxygen sublattice of cubic ice, i.e. cubic diamond."""
    fcc = np.array(
        [[0.0, 0.0, 0.0], [0.0, 0.5, 0.5], [0.5, 0.0, 0.5], [0.5, 0.5, 0.0]]
    )
    basis = np.r_[fcc, fcc + 0.25]
    cells = np.array(
        [[i, j, k] for i in range(nx) for j in range(ny) for k in range(nz)], float
    )
    pos = (cells[:, None, :] + basis[None, :, :]).reshape(-1, 3) * a
    box = init_box([a * nx, a * ny, a * nz])
    return pos, box


def build_hexagonal_ice(a=4.5, nx=3, ny=2, nz=2):
    """Oxygen sublattice of hexagonal ice, i.e. lonsdaleite with ideal c/a and u = 3/8."""
    c = a * np.sqrt(8.0 / 3.0)
    uc = 3.0 / 8.0 * c
    b = a * np.sqrt(3.0)
    basis = []
    for offset in [[0.0, 0.0, 0.0], [a / 2, b / 2, 0.0]]:
        for site in [
            [0.0, 0.0, 0.0],
            [0.0, 0.0, uc],
            [0.0, a / np.sqrt(3.0), c / 2],
            [0.0, a / np.sqrt(3.0), c / 2 + uc],
        ]:
            basis.append(np.array(offset) + np.array(site))
    basis = np.array(basis)
    cells = np.array(
        [[i * a, j * b, k * c] for i in range(nx) for j in range(ny) for k in range(nz)]
    )
    pos = (cells[:, None, :] + basis[None, :, :]).reshape(-1, 3)
    box = init_box([a * nx, b * ny, c * nz])
    return pos, box


@pytest.fixture
def cubic_ice():
    pos, box = build_cubic_ice()
    verlet_list, neighbor_number = nearest_four(pos, box)
    return chillpy.Frame(pos, box, verlet_list, neighbor_number)


@pytest.fixture
def hexagonal_ice():
    pos, box = build_hexagonal_ice()
    verlet_list, neighbor_number = nearest_four(pos, box)
    return chillpy.Frame(pos, box, verlet_list, neighbor_number)


@pytest.fixture
def tetrahedron():
    """A particle surrounded by a perfect tetrahedron, the corners have no neighbor."""
    pos = np.array(
        [
            [5.0, 5.0, 5.0],
            [6.0, 6.0, 6.0],
            [4.0, 4.0, 6.0],
            [4.0, 6.0, 4.0],
            [6.0, 4.0, 4.0],
        ]
    )
    verlet_list = np.array([[1, 2, 3, 4]] + [[-1, -1, -1, -1]] * 4)
    neighbor_number = np.array([4, 0, 0, 0, 0])
    return pos, verlet_list, neighbor_number


@pytest.fixture
def five_particles():
    """Neighbor list of five particles where every particle sees the four others."""
    verlet_list = np.array(
        [[1, 2, 3, 4], [0, 2, 3, 4], [0, 1, 3, 4], [0, 1, 2, 4], [0, 1, 2, 3]]
    )
    neighbor_number = np.full(5, 4)
    return verlet_list, neighbor_number
