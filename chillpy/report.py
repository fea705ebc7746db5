# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

import numpy as np
import polars as pl

try:
    from box import init_box, box_bounds
    from ice_type import IceTypeCounts
except Exception:
    from .box import init_box, box_bounds
    from .ice_type import IceTypeCounts


class SaveFile:
    """Writers of the ice type reports and the LAMMPS dump files. Reports and the largest
    cluster snippets are appended, so one file collects all frames of a trajectory."""

    @staticmethod
    def write_ice_type_report(output_name, counts, variant="chill+"):
        """Append one line of ice type numbers.

        CHILL: ``frame cubic hexagonal interfacial water total``.

        CHILL+: ``frame cubic hexagonal interfacial clathrate interClathrate water total``.

        Args:
            output_name (str): filename of the report.
            counts (IceTypeCounts): number of particles per ice type.
            variant (str | Variant, optional): selects the line layout. Defaults to "chill+".
        """
        assert isinstance(output_name, str)
        assert isinstance(counts, IceTypeCounts)
        data = counts.to_frame(variant)
        with open(output_name, "ab") as op:
            data.write_csv(op, separator=" ", include_header=False)

    @staticmethod
    def _write_header(op, box, boundary, natoms, timestep):
        bounds = box_bounds(box)
        boundary2str = ["pp" if i == 1 else "ss" for i in boundary]
        op.write(f"ITEM: TIMESTEP\n{timestep}\n".encode())
        op.write("ITEM: NUMBER OF ATOMS\n".encode())
        op.write(f"{natoms}\n".encode())
        op.write(
            f"ITEM: BOX BOUNDS {boundary2str[0]} {boundary2str[1]} {boundary2str[2]}\n".encode()
        )
        for lo, hi in bounds:
            op.write(f"{lo} {hi}\n".encode())

    @staticmethod
    def write_dump(output_name, box, boundary, data, timestep=0, mode="wb"):
        """Write particles into a LAMMPS DUMP file.

        Args:
            output_name (str): filename of generated DUMP file.
            box (np.ndarray): (:math:`3, 2`) or (:math:`4, 3`) system box, must be rectangle.
            boundary (list): boundary conditions, 1 is periodic and 0 is free boundary.
            data (polars.DataFrame): particles information, every column is saved in order.
            timestep (int, optional): timestep. Defaults to 0.
            mode (str, optional): 'wb' to overwrite or 'ab' to append a frame. Defaults to "wb".
        """
        assert isinstance(output_name, str)
        assert isinstance(data, pl.DataFrame)
        assert len(boundary) == 3
        assert mode in ["wb", "ab"], "mode should be 'wb' or 'ab'."
        box = init_box(box)
        with open(output_name, mode) as op:
            SaveFile._write_header(op, box, boundary, data.shape[0], timestep)
            col_name = "ITEM: ATOMS " + " ".join(data.columns) + "\n"
            op.write(col_name.encode())
            if data.shape[0] > 0:
                data.write_csv(op, separator=" ", include_header=False)

    @staticmethod
    def write_largest_cluster(output_name, box, data, members, timestep=0):
        """Append the particles of the largest ice cluster as one LAMMPS DUMP frame
        with columns ``id mol type x y z``, where type is the ice type.
        The box bounds are always written as ``pp pp pp``.

        Args:
            output_name (str): filename of the trajectory.
            box (np.ndarray): (:math:`3, 2`) or (:math:`4, 3`) system box, must be rectangle.
            data (polars.DataFrame): particles information, must have id, mol, ice_type, x, y and z.
            members (np.ndarray): row indices of data in the largest cluster.
            timestep (int, optional): timestep. Defaults to 0.
        """
        for col in ["id", "mol", "ice_type", "x", "y", "z"]:
            assert col in data.columns, f"data should contain {col}."
        members = np.asarray(members, dtype=np.int64)
        cluster = data[members].select(
            "id", "mol", pl.col("ice_type").alias("type"), "x", "y", "z"
        )
        SaveFile.write_dump(output_name, box, [1, 1, 1], cluster, timestep, mode="ab")
