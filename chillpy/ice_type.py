# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

from enum import IntEnum

import numpy as np
import polars as pl
import taichi as ti

try:
    from bond_correlation import Variant, BondClass
    from tool_function import _check_neighbor
except Exception:
    from .bond_correlation import Variant, BondClass
    from .tool_function import _check_neighbor


class IceType(IntEnum):
    """Per-particle structure tag, the integer is written as type into dump files."""

    unclassified = 0
    water = 1
    hexagonal = 2
    cubic = 3
    interfacial = 4
    clathrate = 5
    interClathrate = 6


_STAGGERED = int(BondClass.staggered)
_ECLIPSED = int(BondClass.eclipsed)

_UNCLASSIFIED = int(IceType.unclassified)
_WATER = int(IceType.water)
_HEXAGONAL = int(IceType.hexagonal)
_CUBIC = int(IceType.cubic)
_INTERFACIAL = int(IceType.interfacial)
_CLATHRATE = int(IceType.clathrate)
_INTERCLATHRATE = int(IceType.interClathrate)


@ti.data_oriented
class IceTypeClassifier:
    """This class is used to identify the ice polymorph of each particle from its bond classes,
    following the CHILL and CHILL+ algorithms.

    CHILL counts the staggered and eclipsed bonds among the first four bonds:

    - staggered >= 4: cubic,
    - eclipsed == 1 and staggered == 3: hexagonal,
    - interfacial test passes: interfacial,
    - otherwise: water.

    CHILL+ only identifies particles with exactly four neighbors, all others are water:

    - eclipsed == 0 and staggered == 4: cubic,
    - eclipsed == 1 and staggered == 3: hexagonal,
    - interfacial test passes: interfacial,
    - eclipsed == 4 and staggered == 0: clathrate,
    - eclipsed == 3: interClathrate,
    - otherwise: water.

    The interfacial test looks at the neighbors of particle :math:`i` (at most four). If :math:`i` has
    two staggered bonds, it is interfacial when any neighbor has more than two staggered bonds. If
    :math:`i` has three staggered bonds and no eclipsed bond, it is interfacial when any neighbor has
    exactly two staggered bonds.

    .. hint:: If you use this class in your publication, you should cite the original paper:

      `Nguyen A H, Molinero V. Identification of clathrate hydrates, hexagonal ice, cubic ice, and liquid water in simulations: the CHILL+ algorithm[J]. The Journal of Physical Chemistry B, 2015, 119(29): 9369-9376. <https://doi.org/10.1021/jp510289t>`_

    Args:
        bond_class (np.ndarray): (:math:`N_p, max\_neigh`) bond class from :func:`classify_bonds`.
        verlet_list (np.ndarray): (:math:`N_p, max\_neigh`) verlet_list[i, j] means j atom is a neighbor of i atom if j > -1.
        neighbor_number (np.ndarray): (:math:`N_p`) neighbor atoms number.
        variant (str | Variant, optional): classification rule, 'chill' or 'chill+'. Defaults to "chill+".
        in_slice (np.ndarray, optional): (:math:`N_p`) bool mask, particles outside are left unclassified. Defaults to None, all particles are considered.

    Outputs:
        - **ice_type** (np.ndarray) - (:math:`N_p`) int32 :class:`IceType` per particle.
    """

    def __init__(
        self,
        bond_class,
        verlet_list,
        neighbor_number,
        variant="chill+",
        in_slice=None,
    ):
        self.variant = Variant.parse(variant)
        if self.variant is Variant.CHILL:
            self.plus = False
        elif self.variant is Variant.CHILL_PLUS:
            self.plus = True
        else:
            raise ValueError(f"Unrecognized variant {self.variant}.")
        self.bond_class = np.ascontiguousarray(bond_class, dtype=np.int32)
        N = self.bond_class.shape[0]
        self.verlet_list, self.neighbor_number = _check_neighbor(
            verlet_list, neighbor_number, N
        )
        assert (
            self.bond_class.shape == self.verlet_list.shape
        ), "bond_class should have the same shape as verlet_list."
        if in_slice is None:
            self.in_slice = np.ones(N, np.int32)
        else:
            assert len(in_slice) == N, "in_slice should have N elements."
            self.in_slice = np.ascontiguousarray(in_slice, dtype=np.int32)

    @ti.func
    def _num_staggered(
        self, i: int, bond_class: ti.types.ndarray(), neighbor_number: ti.types.ndarray()
    ) -> int:
        count = 0
        for jj in range(ti.min(neighbor_number[i], 4)):
            if bond_class[i, jj] == _STAGGERED:
                count += 1
        return count

    @ti.func
    def _is_interfacial(
        self,
        i: int,
        n_staggered: int,
        n_eclipsed: int,
        bond_class: ti.types.ndarray(),
        verlet_list: ti.types.ndarray(),
        neighbor_number: ti.types.ndarray(),
    ) -> int:
        res = 0
        n = ti.min(neighbor_number[i], 4)
        if n_staggered == 2:
            for jj in range(n):
                j = verlet_list[i, jj]
                if self._num_staggered(j, bond_class, neighbor_number) > 2:
                    res = 1
        elif n_staggered == 3 and n_eclipsed == 0:
            for jj in range(n):
                j = verlet_list[i, jj]
                if self._num_staggered(j, bond_class, neighbor_number) == 2:
                    res = 1
        return res

    @ti.kernel
    def _compute(
        self,
        bond_class: ti.types.ndarray(),
        verlet_list: ti.types.ndarray(),
        neighbor_number: ti.types.ndarray(),
        in_slice: ti.types.ndarray(),
        ice_type: ti.types.ndarray(),
    ):
        for i in range(ice_type.shape[0]):
            if in_slice[i] == 1:
                n = neighbor_number[i]
                n_count = n
                if ti.static(not self.plus):
                    n_count = ti.min(n, 4)
                n_staggered = 0
                n_eclipsed = 0
                for jj in range(n_count):
                    if bond_class[i, jj] == _ECLIPSED:
                        n_eclipsed += 1
                    elif bond_class[i, jj] == _STAGGERED:
                        n_staggered += 1
                interfacial = self._is_interfacial(
                    i, n_staggered, n_eclipsed, bond_class, verlet_list, neighbor_number
                )
                res = _WATER
                if ti.static(self.plus):
                    if n == 4:
                        if n_eclipsed == 0 and n_staggered == 4:
                            res = _CUBIC
                        elif n_eclipsed == 1 and n_staggered == 3:
                            res = _HEXAGONAL
                        elif interfacial == 1:
                            res = _INTERFACIAL
                        elif n_eclipsed == 4 and n_staggered == 0:
                            res = _CLATHRATE
                        elif n_eclipsed == 3:
                            res = _INTERCLATHRATE
                else:
                    if n_staggered >= 4:
                        res = _CUBIC
                    elif n_eclipsed == 1 and n_staggered == 3:
                        res = _HEXAGONAL
                    elif interfacial == 1:
                        res = _INTERFACIAL
                ice_type[i] = res

    def compute(self):
        """Do the real ice type classification."""
        N = self.bond_class.shape[0]
        self.ice_type = np.full(N, _UNCLASSIFIED, dtype=np.int32)
        if N > 0:
            self._compute(
                self.bond_class,
                self.verlet_list,
                self.neighbor_number,
                self.in_slice,
                self.ice_type,
            )


class IceTypeCounts:
    """Number of particles per ice type in one frame.

    Args:
        frame (int): frame index.
        cubic (int): cubic ice number.
        hexagonal (int): hexagonal ice number.
        interfacial (int): interfacial ice number.
        clathrate (int): clathrate number.
        interClathrate (int): interfacial clathrate number.
        water (int): liquid water number.
        total (int): number of classified particles.
    """

    chill_columns = ["frame", "cubic", "hexagonal", "interfacial", "water", "total"]
    chill_plus_columns = [
        "frame",
        "cubic",
        "hexagonal",
        "interfacial",
        "clathrate",
        "interClathrate",
        "water",
        "total",
    ]

    def __init__(
        self,
        frame=0,
        cubic=0,
        hexagonal=0,
        interfacial=0,
        clathrate=0,
        interClathrate=0,
        water=0,
        total=0,
    ):
        self.frame = int(frame)
        self.cubic = int(cubic)
        self.hexagonal = int(hexagonal)
        self.interfacial = int(interfacial)
        self.clathrate = int(clathrate)
        self.interClathrate = int(interClathrate)
        self.water = int(water)
        self.total = int(total)

    def columns(self, variant="chill+"):
        """Column names of the report line for a variant."""
        variant = Variant.parse(variant)
        if variant is Variant.CHILL:
            return self.chill_columns
        elif variant is Variant.CHILL_PLUS:
            return self.chill_plus_columns
        raise ValueError(f"Unrecognized variant {variant}.")

    def to_frame(self, variant="chill+"):
        """One-row polars.DataFrame of the report line."""
        return pl.DataFrame(
            {name: [getattr(self, name)] for name in self.columns(variant)}
        )

    def to_line(self, variant="chill+"):
        """Space separated report line, without the line break."""
        return " ".join(str(getattr(self, name)) for name in self.columns(variant))

    def __eq__(self, other):
        if not isinstance(other, IceTypeCounts):
            return NotImplemented
        return all(
            getattr(self, name) == getattr(other, name)
            for name in self.chill_plus_columns
        )

    def __repr__(self):
        values = ", ".join(
            f"{name}={getattr(self, name)}" for name in self.chill_plus_columns
        )
        return f"IceTypeCounts({values})"


def count_ice_types(ice_type, in_slice=None, frame=0):
    """Count the particles of each ice type.

    Only particles in the slice are counted. Tags outside the known solid and water set
    (unclassified) only contribute to total.

    Args:
        ice_type (np.ndarray): (:math:`N_p`) ice type per particle.
        in_slice (np.ndarray, optional): (:math:`N_p`) bool mask. Defaults to None, all particles are counted.
        frame (int, optional): frame index. Defaults to 0.

    Returns:
        IceTypeCounts: number of particles per ice type.
    """
    ice_type = np.asarray(ice_type, dtype=np.int32)
    if in_slice is not None:
        assert len(in_slice) == ice_type.shape[0], "in_slice should have N elements."
        ice_type = ice_type[np.asarray(in_slice, dtype=bool)]
    number = np.bincount(ice_type, minlength=len(IceType))
    return IceTypeCounts(
        frame=frame,
        cubic=number[IceType.cubic],
        hexagonal=number[IceType.hexagonal],
        interfacial=number[IceType.interfacial],
        clathrate=number[IceType.clathrate],
        interClathrate=number[IceType.interClathrate],
        water=number[IceType.water],
        total=ice_type.shape[0],
    )


if __name__ == "__main__":
    ti.init(ti.cpu)
    # particle 0 has two staggered bonds and neighbor 1 has three.
    bond_class = np.array(
        [[0, 0, 2, 2], [0, 0, 0, 2], [2, 2, 2, 2], [2, 2, 2, 2], [2, 2, 2, 2]]
    )
    verlet_list = np.array(
        [[1, 2, 3, 4], [0, 2, 3, 4], [0, 1, 3, 4], [0, 1, 2, 4], [0, 1, 2, 3]]
    )
    neighbor_number = np.array([4, 4, 4, 4, 4])
    for variant in ["chill", "chill+"]:
        ICE = IceTypeClassifier(bond_class, verlet_list, neighbor_number, variant)
        ICE.compute()
        print(variant, [IceType(i).name for i in ICE.ice_type])
        print(count_ice_types(ICE.ice_type).to_line(variant))
