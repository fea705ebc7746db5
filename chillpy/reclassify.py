# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

import numpy as np

try:
    from order_parameter import OrderParameter
    from bond_correlation import BondCorrelation, averaged_correlation
    from ice_type import IceType
except Exception:
    from .order_parameter import OrderParameter
    from .bond_correlation import BondCorrelation, averaged_correlation
    from .ice_type import IceType


class AveragedQ6:
    """This class is used to calculate the averaged :math:`\\ell = 6` bond correlation of each particle:

    .. math:: \\bar{q}_6(i) = \\frac{1}{N_b(i)}\\sum_{j = 1}^{N_b(i)} c_6(i, j),

    where :math:`c_6(i, j)` is the normalized correlation of the :math:`Q_{6m}` vectors of the bonded particles.
    Particles without neighbor get NaN.

    Args:
        pos (np.ndarray): (:math:`N_p, 3`) particles positions.
        box (np.ndarray): (:math:`3, 2`) or (:math:`4, 3`) system box, must be rectangle.
        boundary (list, optional): boundary conditions, 1 is periodic and 0 is free boundary. Defaults to [1, 1, 1].
        verlet_list (np.ndarray): (:math:`N_p, max\_neigh`) verlet_list[i, j] means j atom is a neighbor of i atom if j > -1.
        neighbor_number (np.ndarray): (:math:`N_p`) neighbor atoms number.
        method (str, optional): evaluator of the spherical harmonics, choose in ['general', 'table']. Defaults to "table".

    Outputs:
        - **q6** (np.ndarray) - (:math:`N_p`) averaged :math:`\\ell = 6` correlation.
        - **c_value** (np.ndarray) - (:math:`N_p, max\_neigh`) :math:`\\ell = 6` bond correlation.
    """

    def __init__(
        self,
        pos,
        box,
        boundary=[1, 1, 1],
        verlet_list=None,
        neighbor_number=None,
        method="table",
    ):
        self.OP = OrderParameter(
            pos, box, boundary, verlet_list, neighbor_number, 6, method
        )

    def compute(self):
        """Do the real averaged q6 calculation."""
        self.OP.compute()
        BC = BondCorrelation(
            self.OP.qlm_r, self.OP.qlm_i, self.OP.verlet_list, self.OP.neighbor_number
        )
        BC.compute()
        self.c_value = BC.c_value
        self.q6 = averaged_correlation(self.c_value, self.OP.neighbor_number)


def reclassify_water(ice_type, q6, c_value, neighbor_number):
    """Second pass for particles tagged as water. A water particle with :math:`\\bar{q}_6 > 0.5`
    and an averaged :math:`\\ell = 3` correlation :math:`\\bar{c}_3 \\le -0.75` becomes cubic if
    :math:`\\bar{c}_3 < -0.85`, otherwise hexagonal. Other particles are kept.

    NaN :math:`\\bar{q}_6` or :math:`\\bar{c}_3` leaves the particle unchanged, and a second call
    on the result changes nothing.

    Args:
        ice_type (np.ndarray): (:math:`N_p`) ice type per particle.
        q6 (np.ndarray): (:math:`N_p`) averaged :math:`\\ell = 6` correlation.
        c_value (np.ndarray): (:math:`N_p, max\_neigh`) :math:`\\ell = 3` bond correlation.
        neighbor_number (np.ndarray): (:math:`N_p`) neighbor atoms number.

    Returns:
        np.ndarray: (:math:`N_p`) a new int32 ice type array.
    """
    ice_type = np.asarray(ice_type, dtype=np.int32)
    q6 = np.asarray(q6, dtype=np.float64)
    assert q6.shape == ice_type.shape, "q6 should have one value per particle."
    avg_q3 = averaged_correlation(c_value, neighbor_number)
    assert avg_q3.shape == ice_type.shape, "c_value should have one row per particle."

    with np.errstate(invalid="ignore"):
        candidate = (ice_type == IceType.water) & (q6 > 0.5) & (avg_q3 <= -0.75)
        cubic = candidate & (avg_q3 < -0.85)
    new_ice_type = ice_type.copy()
    new_ice_type[candidate] = IceType.hexagonal
    new_ice_type[cubic] = IceType.cubic
    return new_ice_type


if __name__ == "__main__":
    ice_type = np.array([1, 1, 1, 3, 1])
    q6 = np.array([0.6, 0.6, 0.4, 0.9, np.nan])
    c_value = np.array([[-0.9, -0.9], [-0.8, -0.8], [-0.9, -0.9], [-1, -1], [-1, -1]])
    neighbor_number = np.array([2, 2, 2, 2, 2])
    print(reclassify_water(ice_type, q6, c_value, neighbor_number))
