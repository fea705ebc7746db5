# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

import numpy as np
import polars as pl

try:
    from box import init_box, box_bounds
    from tool_function import _check_neighbor, pad_neighbor_list
    from order_parameter import OrderParameter
    from bond_correlation import BondCorrelation, classify_bonds, Variant
    from ice_type import IceTypeClassifier, count_ice_types
    from reclassify import AveragedQ6, reclassify_water
    from cluster_analysis import LargestIceCluster, ice_mask
    from report import SaveFile
except Exception:
    from .box import init_box, box_bounds
    from .tool_function import _check_neighbor, pad_neighbor_list
    from .order_parameter import OrderParameter
    from .bond_correlation import BondCorrelation, classify_bonds, Variant
    from .ice_type import IceTypeClassifier, count_ice_types
    from .reclassify import AveragedQ6, reclassify_water
    from .cluster_analysis import LargestIceCluster, ice_mask
    from .report import SaveFile


class Frame:
    """This class holds one snapshot of water oxygens with its neighbor list and provides a uniform API
    to the ice analysis in chillpy.

    Args:
        pos (np.ndarray): (:math:`N_p, 3`) particles positions.
        box (np.ndarray | list | float): system box, see :func:`chillpy.box.init_box`, must be rectangle.
        verlet_list (np.ndarray | list): (:math:`N_p, max\_neigh`) padded neighbor indices, or a ragged list of neighbor indices per particle.
        neighbor_number (np.ndarray, optional): (:math:`N_p`) neighbor atoms number. Needed if verlet_list is a padded array.
        boundary (list, optional): boundary conditions, 1 is periodic and 0 is free boundary. Defaults to [1, 1, 1].
        atom_id (np.ndarray, optional): (:math:`N_p`) atom id. Defaults to 1..N.
        mol_id (np.ndarray, optional): (:math:`N_p`) molecule id. Defaults to atom_id.
        timestep (int, optional): frame index. Defaults to 0.

    Examples:

        >>> import chillpy as cp

        >>> cp.init()

        >>> frame = cp.Frame(pos, box, verlet_list, neighbor_number)

        >>> frame.cal_bond_order("chill+") # bond correlation and bond class

        >>> frame.cal_ice_type("chill+") # ice type per particle

        >>> frame.reclassify_water() # second pass with the averaged q6

        >>> frame.cal_largest_ice_cluster(3.5) # largest ice cluster

        >>> frame.data # check the results

        >>> frame.write_dump("ice.dump")
    """

    def __init__(
        self,
        pos,
        box,
        verlet_list,
        neighbor_number=None,
        boundary=[1, 1, 1],
        atom_id=None,
        mol_id=None,
        timestep=0,
    ):
        pos = np.array(pos, dtype=np.float64)
        assert pos.ndim == 2 and pos.shape[1] == 3, "pos should be a (N, 3) array."
        N = pos.shape[0]
        self.__box = init_box(box)
        assert len(boundary) == 3, "boundary should have three elements."
        self.__boundary = [int(i) for i in boundary]
        self.__timestep = int(timestep)
        if neighbor_number is None:
            assert isinstance(
                verlet_list, (list, tuple)
            ), "neighbor_number is needed for a padded verlet_list."
            verlet_list, neighbor_number = pad_neighbor_list(verlet_list)
        self.__verlet_list, self.__neighbor_number = _check_neighbor(
            verlet_list, neighbor_number, N
        )
        if atom_id is None:
            atom_id = np.arange(1, N + 1)
        if mol_id is None:
            mol_id = atom_id
        assert len(atom_id) == N, "atom_id should have N elements."
        assert len(mol_id) == N, "mol_id should have N elements."
        self.__data = pl.DataFrame(
            {
                "id": np.asarray(atom_id, dtype=np.int64),
                "mol": np.asarray(mol_id, dtype=np.int64),
                "x": pos[:, 0],
                "y": pos[:, 1],
                "z": pos[:, 2],
            }
        )
        self.__pos = pos
        self.__in_slice = np.ones(N, dtype=bool)
        self.variant = None
        self.c_value = None
        self.bond_class = None

    @property
    def data(self):
        """check particles information.

        Returns:
            polars.Dataframe: particles information.
        """
        return self.__data

    @property
    def box(self):
        """box information.

        Returns:
            np.ndarray: (:math:`4, 3`) box information.
        """
        return self.__box

    @property
    def boundary(self):
        return self.__boundary

    @property
    def timestep(self):
        return self.__timestep

    @property
    def pos(self):
        """particle position information. Do not change it directly.

        Returns:
            np.ndarray: position information.
        """
        return self.__pos

    @property
    def N(self):
        """particle number.

        Returns:
            int: particle number.
        """
        return self.__data.shape[0]

    @property
    def verlet_list(self):
        return self.__verlet_list

    @property
    def neighbor_number(self):
        return self.__neighbor_number

    @property
    def in_slice(self):
        """bool mask of particles considered by the ice type classification."""
        return self.__in_slice

    @property
    def ice_type(self):
        """ice type per particle, only available after cal_ice_type."""
        assert "ice_type" in self.__data.columns, "Call cal_ice_type() first."
        return self.__data["ice_type"].to_numpy()

    def __repr__(self):
        return f"Atom Number: {self.N}\nSimulation Box:\n{self.box}\nTimeStep: {self.timestep}\nBoundary: {self.boundary}\nParticle Information:\n{self.__data}"

    def set_slice(self, low=None, high=None):
        """Only particles with low <= position <= high along every axis are classified.
        Call it with no argument to use the whole box.

        Args:
            low (list, optional): lower limit along x, y and z. Defaults to the box lower bound.
            high (list, optional): upper limit along x, y and z. Defaults to the box upper bound.
        """
        if low is None and high is None:
            self.__in_slice = np.ones(self.N, dtype=bool)
            return
        bounds = box_bounds(self.__box)
        low = bounds[:, 0] if low is None else np.asarray(low, dtype=np.float64)
        high = bounds[:, 1] if high is None else np.asarray(high, dtype=np.float64)
        assert low.shape == (3,) and high.shape == (3,), "low and high need three values."
        if np.any(low > high):
            raise ValueError("low should not be larger than high.")
        self.__in_slice = np.all((self.__pos >= low) & (self.__pos <= high), axis=1)

    def _add_column(self, name, values):
        self.__data = self.__data.with_columns(pl.lit(values).alias(name))

    def cal_order_parameter(self, l=3, method="table"):
        """Calculate the averaged spherical harmonics of degree l.

        Args:
            l (int, optional): degree. Defaults to 3.
            method (str, optional): evaluator, choose in ['general', 'table']. Defaults to "table".

        Returns:
            OrderParameter: the computed order parameter, check qlm_r, qlm_i and ql.

        Outputs:
            - **The result is added in self.data[f'q{l}']**.
        """
        OP = OrderParameter(
            self.__pos,
            self.__box,
            self.__boundary,
            self.__verlet_list,
            self.__neighbor_number,
            l,
            method,
        )
        OP.compute()
        self._add_column(f"q{l}", OP.ql)
        return OP

    def cal_bond_order(self, variant="chill+", method="table"):
        """Calculate the :math:`\\ell = 3` bond correlation and classify every bond.

        Args:
            variant (str, optional): classification rule, 'chill' or 'chill+'. Defaults to "chill+".
            method (str, optional): evaluator of the spherical harmonics. Defaults to "table".

        Outputs:
            - **c_value** (np.ndarray) - (:math:`N_p, max\_neigh`) bond correlation.
            - **bond_class** (np.ndarray) - (:math:`N_p, max\_neigh`) bond class.
        """
        self.variant = Variant.parse(variant)
        OP = self.cal_order_parameter(3, method)
        BC = BondCorrelation(
            OP.qlm_r, OP.qlm_i, self.__verlet_list, self.__neighbor_number
        )
        BC.compute()
        self.c_value = BC.c_value
        self.bond_class = classify_bonds(
            self.c_value, self.__neighbor_number, self.variant
        )

    def cal_ice_type(self, variant=None, method="table"):
        """Identify the ice type of each particle in the slice.

        Args:
            variant (str, optional): classification rule, 'chill' or 'chill+'. Defaults to the variant of cal_bond_order, or "chill+".
            method (str, optional): evaluator of the spherical harmonics, used only if the bonds are not classified yet. Defaults to "table".

        Returns:
            IceTypeCounts: number of particles per ice type.

        Outputs:
            - **The result is added in self.data['ice_type']**.
        """
        if variant is None:
            variant = "chill+" if self.variant is None else self.variant
        variant = Variant.parse(variant)
        if self.bond_class is None or self.variant is not variant:
            self.cal_bond_order(variant, method)
        ICE = IceTypeClassifier(
            self.bond_class,
            self.__verlet_list,
            self.__neighbor_number,
            variant,
            self.__in_slice,
        )
        ICE.compute()
        self._add_column("ice_type", ICE.ice_type)
        return count_ice_types(ICE.ice_type, self.__in_slice, self.__timestep)

    def cal_averaged_q6(self, method="table"):
        """Calculate the averaged :math:`\\ell = 6` bond correlation.

        Args:
            method (str, optional): evaluator of the spherical harmonics. Defaults to "table".

        Outputs:
            - **The result is added in self.data['q6_avg']**.
        """
        AQ = AveragedQ6(
            self.__pos,
            self.__box,
            self.__boundary,
            self.__verlet_list,
            self.__neighbor_number,
            method,
        )
        AQ.compute()
        self._add_column("q6_avg", AQ.q6)

    def reclassify_water(self, method="table"):
        """Give water particles with an ordered :math:`\\ell = 6` environment a second chance
        to be cubic or hexagonal.

        Returns:
            IceTypeCounts: number of particles per ice type after the reclassification.

        Outputs:
            - **self.data['ice_type'] is updated**.
        """
        assert "ice_type" in self.__data.columns, "Call cal_ice_type() first."
        if "q6_avg" not in self.__data.columns:
            self.cal_averaged_q6(method)
        new_ice_type = reclassify_water(
            self.ice_type,
            self.__data["q6_avg"].to_numpy(),
            self.c_value,
            self.__neighbor_number,
        )
        self._add_column("ice_type", new_ice_type)
        return count_ice_types(new_ice_type, self.__in_slice, self.__timestep)

    def cal_largest_ice_cluster(self, cutoff=3.5):
        """Find the largest cluster of ice particles, i.e. all particles not tagged as water.

        Args:
            cutoff (float, optional): cutoff distance. Defaults to 3.5.

        Returns:
            int: particle number of the largest ice cluster.

        Outputs:
            - **largest_cluster** (np.ndarray) - row indices of the particles in the largest cluster, in ring order.
            - **The result is added in self.data['largest_cluster']**, 1 for particles in the largest cluster.
        """
        ice = np.where(ice_mask(self.ice_type))[0]
        Clus = LargestIceCluster(
            self.__pos[ice], self.__box, self.__boundary, cutoff
        )
        Clus.compute()
        self.largest_cluster = ice[Clus.largest_cluster_members()]
        flag = np.zeros(self.N, dtype=np.int32)
        flag[self.largest_cluster] = 1
        self._add_column("largest_cluster", flag)
        return Clus.largest_cluster_size

    def write_dump(self, output_name, output_col=None):
        """Write particles into a DUMP file, ice_type is saved as type.

        Args:
            output_name (str): filename of generated DUMP file.
            output_col (list, optional): which columns should be saved. Defaults to ['id', 'mol', 'type', 'x', 'y', 'z'].
        """
        data = self.__data
        if "ice_type" in data.columns:
            data = data.with_columns(pl.col("ice_type").alias("type"))
        else:
            data = data.with_columns(pl.lit(0, dtype=pl.Int32).alias("type"))
        if output_col is None:
            output_col = ["id", "mol", "type", "x", "y", "z"]
        SaveFile.write_dump(
            output_name,
            self.__box,
            self.__boundary,
            data.select(output_col),
            self.__timestep,
        )

    def write_largest_cluster(self, output_name):
        """Append the largest ice cluster into a DUMP trajectory."""
        assert hasattr(self, "largest_cluster"), "Call cal_largest_ice_cluster() first."
        SaveFile.write_largest_cluster(
            output_name,
            self.__box,
            self.__data,
            self.largest_cluster,
            self.__timestep,
        )
