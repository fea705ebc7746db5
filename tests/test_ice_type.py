import numpy as np
import pytest

from chillpy import (
    Frame,
    IceType,
    IceTypeClassifier,
    IceTypeCounts,
    classify_bonds,
    count_ice_types,
)


def classify(bond_class, verlet_list, neighbor_number, variant, in_slice=None):
    ICE = IceTypeClassifier(bond_class, verlet_list, neighbor_number, variant, in_slice)
    ICE.compute()
    return ICE.ice_type


@pytest.mark.parametrize("variant", ["chill", "chill+"])
def test_cubic_ice(cubic_ice, variant):
    counts = cubic_ice.cal_ice_type(variant)
    assert np.all(cubic_ice.ice_type == IceType.cubic), "fail at cubic ice"
    assert counts.cubic == cubic_ice.N and counts.total == cubic_ice.N


@pytest.mark.parametrize("variant", ["chill", "chill+"])
def test_hexagonal_ice(hexagonal_ice, variant):
    counts = hexagonal_ice.cal_ice_type(variant)
    assert np.all(hexagonal_ice.ice_type == IceType.hexagonal), "fail at hexagonal ice"
    assert counts.hexagonal == hexagonal_ice.N


def test_interfacial(five_particles):
    verlet_list, neighbor_number = five_particles
    # particle 0 has two staggered bonds and its neighbor 1 has three.
    bond_class = np.array(
        [[0, 0, 2, 2], [0, 0, 0, 2], [2, 2, 2, 2], [2, 2, 2, 2], [2, 2, 2, 2]]
    )
    expected = [IceType.interfacial] * 2 + [IceType.water] * 3
    for variant in ["chill", "chill+"]:
        ice_type = classify(bond_class, verlet_list, neighbor_number, variant)
        assert ice_type.tolist() == expected, f"fail at {variant}"


def test_clathrate(five_particles):
    verlet_list, neighbor_number = five_particles
    bond_class = np.array(
        [[1, 1, 1, 1], [1, 1, 1, 2], [1, 1, 1, 0], [1, 1, 0, 0], [1, 1, 1, 1]]
    )
    ice_type = classify(bond_class, verlet_list, neighbor_number, "chill+")
    assert ice_type.tolist() == [
        IceType.clathrate,
        IceType.interClathrate,
        IceType.interClathrate,
        IceType.water,
        IceType.clathrate,
    ]
    # CHILL has no clathrate.
    ice_type = classify(bond_class, verlet_list, neighbor_number, "chill")
    assert np.all(ice_type == IceType.water)


def test_clathrate_from_c_value(five_particles):
    verlet_list, neighbor_number = five_particles
    c_value = np.full((5, 4), -0.1)
    c_value[0] = [-0.35, 0.25, 0.0, -0.1]
    bond_class = classify_bonds(c_value, neighbor_number, "chill+")
    assert np.all(bond_class == 1)
    ice_type = classify(bond_class, verlet_list, neighbor_number, "chill+")
    assert np.all(ice_type == IceType.clathrate), "fail at clathrate"


def test_neighbor_number():
    verlet_list = np.array(
        [[1, 2, 3, 4, 5]] + [[0, -1, -1, -1, -1]] * 5, dtype=np.int32
    )
    neighbor_number = np.array([5, 1, 1, 1, 1, 1])
    bond_class = np.full(verlet_list.shape, -1)
    bond_class[0] = [0, 0, 0, 0, 2]
    bond_class[1:, 0] = 0
    # CHILL counts the first four bonds only.
    ice_type = classify(bond_class, verlet_list, neighbor_number, "chill")
    assert ice_type[0] == IceType.cubic
    assert np.all(ice_type[1:] == IceType.water)
    # CHILL+ needs exactly four neighbors.
    ice_type = classify(bond_class, verlet_list, neighbor_number, "chill+")
    assert np.all(ice_type == IceType.water)


@pytest.mark.parametrize(
    "variant, line", [("chill", "0 0 0 0 3 3"), ("chill+", "0 0 0 0 0 0 3 3")]
)
def test_no_neighbor(variant, line):
    pos = np.array([[1.0, 1.0, 1.0], [2.0, 1.0, 1.0], [5.0, 5.0, 5.0]])
    frame = Frame(pos, 10.0, [[1], [0], []])
    counts = frame.cal_ice_type(variant)
    assert np.isnan(frame.c_value[2, 0])
    assert frame.bond_class[2, 0] == -1
    assert frame.ice_type[2] == IceType.water, "fail at particle without neighbor"
    assert np.all(frame.ice_type == IceType.water)
    assert counts.to_line(variant) == line


def test_slice(five_particles):
    verlet_list, neighbor_number = five_particles
    bond_class = np.zeros((5, 4), int)
    in_slice = np.array([True, True, False, True, False])
    ice_type = classify(bond_class, verlet_list, neighbor_number, "chill+", in_slice)
    assert ice_type.tolist() == [3, 3, 0, 3, 0]
    counts = count_ice_types(ice_type, in_slice, frame=7)
    assert counts == IceTypeCounts(frame=7, cubic=3, total=3)


def test_counts():
    ice_type = np.array([0, 1, 1, 2, 3, 3, 3, 4, 5, 6])
    counts = count_ice_types(ice_type, frame=2)
    assert counts.to_line("chill") == "2 3 1 1 2 10"
    assert counts.to_line("chill+") == "2 3 1 1 1 1 2 10"
    assert counts.to_frame("chill+").columns == IceTypeCounts.chill_plus_columns


def test_bad_variant(five_particles):
    verlet_list, neighbor_number = five_particles
    with pytest.raises(ValueError):
        IceTypeClassifier(np.zeros((5, 4)), verlet_list, neighbor_number, "chill++")
