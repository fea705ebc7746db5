# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

from enum import Enum, IntEnum

import numpy as np
import taichi as ti

try:
    from tool_function import _check_neighbor, _neighbor_mask
except Exception:
    from .tool_function import _check_neighbor, _neighbor_mask


class Variant(Enum):
    """Classification rule set."""

    CHILL = "chill"
    CHILL_PLUS = "chill+"

    @classmethod
    def parse(cls, variant):
        """Accept a Variant or one of 'chill', 'chill+' and 'chillplus' (case insensitive)."""
        if isinstance(variant, cls):
            return variant
        if isinstance(variant, str):
            name = variant.strip().lower()
            if name == "chill":
                return cls.CHILL
            if name in ("chill+", "chillplus", "chill_plus"):
                return cls.CHILL_PLUS
            raise ValueError(
                f"Unrecognized variant {variant}, please choose in ['chill', 'chill+']."
            )
        raise TypeError(f"Invalid variant type: {type(variant)}")


class BondClass(IntEnum):
    """Bond tag, padding slots of a bond array are -1."""

    staggered = 0
    eclipsed = 1
    out_of_range = 2


@ti.data_oriented
class BondCorrelation:
    """This class is used to calculate the normalized correlation of the order vector between bonded particles:

    .. math:: c(i,j) = \\mathrm{Re}\\frac{\\sum_{m=-\\ell}^{\\ell} Q_{\\ell m}(i) Q_{\\ell m}^*(j)}{\\sqrt{\\sum_{m} |Q_{\\ell m}(i)|^2} \\sqrt{\\sum_{m} |Q_{\\ell m}(j)|^2}}.

    Every ordered pair (i, j) in the neighbor list is computed, so c(i, j) and c(j, i) are
    stored separately. If any side has no neighbor or a zero norm, c(i, j) is NaN.
    Padding slots of c_value are NaN too.

    Args:
        qlm_r (np.ndarray): (:math:`N_p, 2\\ell+1`) real part of the order vector.
        qlm_i (np.ndarray): (:math:`N_p, 2\\ell+1`) imaginary part of the order vector.
        verlet_list (np.ndarray): (:math:`N_p, max\_neigh`) verlet_list[i, j] means j atom is a neighbor of i atom if j > -1.
        neighbor_number (np.ndarray): (:math:`N_p`) neighbor atoms number.

    Outputs:
        - **c_value** (np.ndarray) - (:math:`N_p, max\_neigh`) bond correlation in neighbor-list order.
    """

    def __init__(self, qlm_r, qlm_i, verlet_list, neighbor_number):
        qlm_r = np.asarray(qlm_r, dtype=np.float64)
        qlm_i = np.asarray(qlm_i, dtype=np.float64)
        assert qlm_r.ndim == 2, "qlm_r should be a 2-D array."
        assert qlm_r.shape == qlm_i.shape, "qlm_r and qlm_i should have the same shape."
        # A NaN order vector gets a zero norm in the kernel and thus a NaN correlation.
        self.qlm_r = np.ascontiguousarray(np.nan_to_num(qlm_r, nan=0.0))
        self.qlm_i = np.ascontiguousarray(np.nan_to_num(qlm_i, nan=0.0))
        self.verlet_list, self.neighbor_number = _check_neighbor(
            verlet_list, neighbor_number, qlm_r.shape[0]
        )

    @ti.kernel
    def _compute(
        self,
        qlm_r: ti.types.ndarray(),
        qlm_i: ti.types.ndarray(),
        verlet_list: ti.types.ndarray(),
        neighbor_number: ti.types.ndarray(),
        c_value: ti.types.ndarray(),
    ):
        for i in range(verlet_list.shape[0]):
            for jj in range(neighbor_number[i]):
                j = verlet_list[i, jj]
                dot = ti.f64(0.0)
                norm_i = ti.f64(0.0)
                norm_j = ti.f64(0.0)
                for m in range(qlm_r.shape[1]):
                    dot += qlm_r[i, m] * qlm_r[j, m] + qlm_i[i, m] * qlm_i[j, m]
                    norm_i += qlm_r[i, m] * qlm_r[i, m] + qlm_i[i, m] * qlm_i[i, m]
                    norm_j += qlm_r[j, m] * qlm_r[j, m] + qlm_i[j, m] * qlm_i[j, m]
                denom = ti.sqrt(norm_i * norm_j)
                if denom > 0.0:
                    c_value[i, jj] = dot / denom

    def compute(self):
        """Do the real bond correlation calculation."""
        self.c_value = np.full(self.verlet_list.shape, np.nan)
        if self.verlet_list.shape[0] > 0:
            self._compute(
                self.qlm_r,
                self.qlm_i,
                self.verlet_list,
                self.neighbor_number,
                self.c_value,
            )


def classify_bonds(c_value, neighbor_number, variant="chill+"):
    """Assign a bond class to every bond from its correlation value.

    ========  ===================  ============================  ============
    variant   staggered            eclipsed                      out_of_range
    ========  ===================  ============================  ============
    CHILL     c < -0.8             -0.2 < c < -0.05              else
    CHILL+    c <= -0.8            -0.35 <= c <= 0.25            else
    ========  ===================  ============================  ============

    NaN correlations are out_of_range.

    Args:
        c_value (np.ndarray): (:math:`N_p, max\_neigh`) bond correlation.
        neighbor_number (np.ndarray): (:math:`N_p`) neighbor atoms number.
        variant (str | Variant, optional): classification rule. Defaults to "chill+".

    Returns:
        np.ndarray: (:math:`N_p, max\_neigh`) int32 bond class, padding slots are -1.
    """
    variant = Variant.parse(variant)
    c_value = np.asarray(c_value, dtype=np.float64)
    neighbor_number = np.asarray(neighbor_number, dtype=np.int32)
    assert c_value.ndim == 2, "c_value should be a 2-D array."
    assert neighbor_number.shape == (
        c_value.shape[0],
    ), "neighbor_number should have one element per row of c_value."

    with np.errstate(invalid="ignore"):
        if variant is Variant.CHILL:
            staggered = c_value < -0.8
            eclipsed = (c_value > -0.2) & (c_value < -0.05)
        elif variant is Variant.CHILL_PLUS:
            staggered = c_value <= -0.8
            eclipsed = (c_value >= -0.35) & (c_value <= 0.25)
        else:
            raise ValueError(f"Unrecognized variant {variant}.")

    bond_class = np.full(c_value.shape, BondClass.out_of_range, dtype=np.int32)
    bond_class[eclipsed] = BondClass.eclipsed
    bond_class[staggered] = BondClass.staggered
    bond_class[~_neighbor_mask(c_value, neighbor_number)] = -1
    return bond_class


def averaged_correlation(c_value, neighbor_number):
    """Mean of the bond correlation over all neighbors of each particle.

    Args:
        c_value (np.ndarray): (:math:`N_p, max\_neigh`) bond correlation.
        neighbor_number (np.ndarray): (:math:`N_p`) neighbor atoms number.

    Returns:
        np.ndarray: (:math:`N_p`) averaged correlation, NaN for particles without neighbor.
    """
    c_value = np.asarray(c_value, dtype=np.float64)
    neighbor_number = np.asarray(neighbor_number, dtype=np.int32)
    mask = _neighbor_mask(c_value, neighbor_number)
    total = np.where(mask, c_value, 0.0).sum(axis=1)
    average = np.full(c_value.shape[0], np.nan)
    has_neigh = neighbor_number > 0
    average[has_neigh] = total[has_neigh] / neighbor_number[has_neigh]
    return average


if __name__ == "__main__":
    c_value = np.array([[-0.9, -0.1, 0.1, np.nan], [-0.81, -0.3, 0.3, -0.8]])
    neighbor_number = np.array([3, 4])
    for variant in ["chill", "chill+"]:
        print(variant)
        print(classify_bonds(c_value, neighbor_number, variant))
    print(averaged_correlation(c_value, neighbor_number))
