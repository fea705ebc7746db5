import numpy as np
import polars as pl

from chillpy import Frame, IceTypeCounts, SaveFile


def test_ice_type_report(tmp_path):
    output_name = str(tmp_path / "chill.txt")
    counts = IceTypeCounts(frame=5, cubic=1, hexagonal=2, interfacial=3, water=4, total=10)
    SaveFile.write_ice_type_report(output_name, counts, "chill")
    SaveFile.write_ice_type_report(output_name, counts, "chill")
    with open(output_name) as op:
        lines = op.readlines()
    assert lines == ["5 1 2 3 4 10\n", "5 1 2 3 4 10\n"]

    output_name = str(tmp_path / "chillPlus.txt")
    counts = IceTypeCounts(
        frame=0, cubic=1, hexagonal=2, interfacial=3, clathrate=4, interClathrate=5, water=6, total=21
    )
    SaveFile.write_ice_type_report(output_name, counts, "chill+")
    with open(output_name) as op:
        assert op.read() == "0 1 2 3 4 5 6 21\n"


def test_same_frame_same_report(tmp_path, cubic_ice):
    output_name = str(tmp_path / "chillPlus.txt")
    for _ in range(2):
        counts = cubic_ice.cal_ice_type("chill+")
        SaveFile.write_ice_type_report(output_name, counts, "chill+")
    with open(output_name) as op:
        lines = op.readlines()
    assert len(lines) == 2 and lines[0] == lines[1]
    assert lines[0] == f"0 {cubic_ice.N} 0 0 0 0 0 {cubic_ice.N}\n"


def test_largest_cluster_dump(tmp_path):
    output_name = str(tmp_path / "largestCluster.lammpstrj")
    data = pl.DataFrame(
        {
            "id": [1, 2, 3],
            "mol": [11, 12, 13],
            "ice_type": [3, 3, 1],
            "x": [0.0, 1.0, 2.0],
            "y": [0.5, 0.5, 0.5],
            "z": [0.25, 0.25, 0.25],
        }
    )
    for timestep in [0, 1]:
        SaveFile.write_largest_cluster(
            output_name, 10.0, data, np.array([1, 0]), timestep
        )
    with open(output_name) as op:
        lines = op.read().splitlines()
    assert len(lines) == 2 * 11
    assert lines[:10] == [
        "ITEM: TIMESTEP",
        "0",
        "ITEM: NUMBER OF ATOMS",
        "2",
        "ITEM: BOX BOUNDS pp pp pp",
        "0.0 10.0",
        "0.0 10.0",
        "0.0 10.0",
        "ITEM: ATOMS id mol type x y z",
        "2 12 3 1.0 0.5 0.25",
    ]
    assert lines[10] == "1 11 3 0.0 0.5 0.25"
    assert lines[12] == "1"


def test_frame_dump(tmp_path):
    pos = np.array([[1.0, 1.0, 1.0], [2.0, 1.0, 1.0], [9.0, 1.0, 1.0]])
    frame = Frame(pos, [[0, 10], [0, 10], [0, 10]], [[1], [0, 2], [1]], timestep=3)
    assert frame.neighbor_number.tolist() == [1, 2, 1]
    output_name = str(tmp_path / "frame.dump")
    frame.write_dump(output_name)
    with open(output_name) as op:
        lines = op.read().splitlines()
    assert lines[1] == "3"
    assert lines[8] == "ITEM: ATOMS id mol type x y z"
    assert lines[9] == "1 1 0 1.0 1.0 1.0"
    assert len(lines) == 12


def test_largest_cluster_dump_is_periodic(tmp_path, cubic_ice):
    output_name = str(tmp_path / "largestCluster.lammpstrj")
    data = pl.DataFrame(
        {"id": [1], "mol": [1], "ice_type": [3], "x": [0.0], "y": [0.0], "z": [0.0]}
    )
    SaveFile.write_largest_cluster(output_name, 10.0, data, np.array([0]))

    pos = cubic_ice.pos
    frame = Frame(
        pos, cubic_ice.box, cubic_ice.verlet_list, cubic_ice.neighbor_number, boundary=[0, 0, 0]
    )
    frame.cal_ice_type("chill+")
    frame.cal_largest_ice_cluster(3.0)
    frame.write_largest_cluster(output_name)
    frame.write_dump(str(tmp_path / "frame.dump"))

    with open(output_name) as op:
        lines = op.read().splitlines()
    headers = [line for line in lines if line.startswith("ITEM: BOX BOUNDS")]
    assert headers == ["ITEM: BOX BOUNDS pp pp pp"] * 2
    with open(tmp_path / "frame.dump") as op:
        assert op.read().splitlines()[4] == "ITEM: BOX BOUNDS ss ss ss"
