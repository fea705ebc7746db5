# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

import numpy as np
import taichi as ti

try:
    from box import init_box, box_length, _pbc_rec
    from spherical_harmonics import _ylm, _check_method
    from tool_function import _check_neighbor
except Exception:
    from .box import init_box, box_length, _pbc_rec
    from .spherical_harmonics import _ylm, _check_method
    from .tool_function import _check_neighbor


@ti.data_oriented
class OrderParameter:
    """This class is used to calculate the averaged spherical harmonics (bond-orientational order vector) of each particle:

    .. math:: Q_{\\ell m}(i) = \\frac{1}{N_b(i)}\\sum_{j = 1}^{N_b(i)} Y_{\\ell m}\\bigl( \\theta( {\\bf r}_{ij} ), \\phi( {\\bf r}_{ij} ) \\bigr),

    where the summation goes over the given neighbors of particle :math:`i`. The displacement :math:`{\\bf r}_{ij} = {\\bf r}_i - {\\bf r}_j`
    follows the minimum image convention, :math:`\\theta = \\arccos(r_z / r)` and :math:`\\phi = \\mathrm{atan2}(r_x, r_y)`.

    Particles without any neighbor get NaN in every component.

    Two evaluators of :math:`Y_{\\ell m}` can be selected by method:

    - "general": associated Legendre recursion with the Condon-Shortley phase, for any :math:`\\ell`.
    - "table": closed-form expressions for :math:`\\ell = 3` and :math:`\\ell = 6`.

    Args:
        pos (np.ndarray): (:math:`N_p, 3`) particles positions.
        box (np.ndarray): (:math:`3, 2`) or (:math:`4, 3`) system box, must be rectangle.
        boundary (list, optional): boundary conditions, 1 is periodic and 0 is free boundary. Defaults to [1, 1, 1].
        verlet_list (np.ndarray): (:math:`N_p, max\_neigh`) verlet_list[i, j] means j atom is a neighbor of i atom if j > -1.
        neighbor_number (np.ndarray): (:math:`N_p`) neighbor atoms number.
        l (int, optional): degree of the spherical harmonics. Defaults to 3.
        method (str, optional): evaluator of the spherical harmonics, choose in ['general', 'table']. Defaults to "table".

    Outputs:
        - **qlm_r** (np.ndarray) - (:math:`N_p, 2\\ell+1`) real part, column :math:`m+\\ell` holds :math:`m`.
        - **qlm_i** (np.ndarray) - (:math:`N_p, 2\\ell+1`) imaginary part.
        - **ql** (np.ndarray) - (:math:`N_p`) rotational invariant :math:`q_{\\ell}`.

    Examples:
        >>> import chillpy as cp

        >>> cp.init()

        >>> OP = cp.OrderParameter(pos, box, [1, 1, 1], verlet_list, neighbor_number, l=3) # Initialize OrderParameter class

        >>> OP.compute() # Do the computation.

        >>> OP.qlm_r, OP.qlm_i # Check results.
    """

    def __init__(
        self,
        pos,
        box,
        boundary=[1, 1, 1],
        verlet_list=None,
        neighbor_number=None,
        l=3,
        method="table",
    ):
        self.use_table = _check_method(l, method)
        self.l = int(l)
        self.method = method
        pos = np.ascontiguousarray(pos, dtype=np.float64)
        assert pos.ndim == 2 and pos.shape[1] == 3, "pos should be a (N, 3) array."
        self.pos = pos
        self.box = init_box(box)
        self.box_length = ti.Vector([float(i) for i in box_length(self.box)])
        self.boundary = ti.Vector([int(boundary[i]) for i in range(3)])
        assert (
            verlet_list is not None and neighbor_number is not None
        ), "verlet_list and neighbor_number are needed."
        self.verlet_list, self.neighbor_number = _check_neighbor(
            verlet_list, neighbor_number, self.pos.shape[0]
        )
        self.if_compute = False

    @ti.kernel
    def _compute(
        self,
        pos: ti.types.ndarray(dtype=ti.math.vec3),
        verlet_list: ti.types.ndarray(),
        neighbor_number: ti.types.ndarray(),
        qlm_r: ti.types.ndarray(),
        qlm_i: ti.types.ndarray(),
    ):
        for i in range(pos.shape[0]):
            n_neigh = neighbor_number[i]
            for jj in range(n_neigh):
                j = verlet_list[i, jj]
                rij = pos[i] - pos[j]
                rij = _pbc_rec(rij, self.boundary, self.box_length)
                rmag = rij.norm()
                costheta = ti.min(ti.max(rij[2] / rmag, -1.0), 1.0)
                theta = ti.acos(costheta)
                phi = ti.atan2(rij[0], rij[1])
                for k in range(2 * self.l + 1):
                    y = _ylm(self.l, k - self.l, theta, phi, self.use_table)
                    qlm_r[i, k] += y[0]
                    qlm_i[i, k] += y[1]
            if n_neigh > 0:
                for k in range(2 * self.l + 1):
                    qlm_r[i, k] /= n_neigh
                    qlm_i[i, k] /= n_neigh

    def compute(self):
        """Do the real order parameter calculation."""
        N = self.pos.shape[0]
        self.qlm_r = np.zeros((N, 2 * self.l + 1))
        self.qlm_i = np.zeros_like(self.qlm_r)
        if N > 0:
            self._compute(
                self.pos,
                self.verlet_list,
                self.neighbor_number,
                self.qlm_r,
                self.qlm_i,
            )
        isolated = self.neighbor_number == 0
        self.qlm_r[isolated] = np.nan
        self.qlm_i[isolated] = np.nan
        self.if_compute = True

    @property
    def qlm(self):
        """Complex order vector, (:math:`N_p, 2\\ell+1`)."""
        if not self.if_compute:
            self.compute()
        return self.qlm_r + 1j * self.qlm_i

    @property
    def ql(self):
        """Rotational invariant :math:`q_{\\ell} = \\sqrt{\\frac{4\\pi}{2\\ell+1}\\sum_m |Q_{\\ell m}|^2}`."""
        if not self.if_compute:
            self.compute()
        return np.sqrt(
            4 * np.pi / (2 * self.l + 1)
            * (self.qlm_r**2 + self.qlm_i**2).sum(axis=1)
        )


if __name__ == "__main__":
    from time import time

    ti.init(ti.cpu, default_fp=ti.f64)
    # A single particle in the center of a perfect tetrahedron.
    pos = np.array(
        [
            [5.0, 5.0, 5.0],
            [6.0, 6.0, 6.0],
            [4.0, 4.0, 6.0],
            [4.0, 6.0, 4.0],
            [6.0, 4.0, 4.0],
        ]
    )
    verlet_list = np.array([[1, 2, 3, 4]] + [[0, -1, -1, -1]] * 4)
    neighbor_number = np.array([4, 1, 1, 1, 1])
    for method in ["general", "table"]:
        start = time()
        OP = OrderParameter(
            pos, 10.0, [1, 1, 1], verlet_list, neighbor_number, 3, method
        )
        OP.compute()
        end = time()
        print(f"{method}: q3 = {OP.ql[0]}, time costs {end-start} s.")
