import numpy as np
import pytest

from chillpy import (
    BondClass,
    BondCorrelation,
    OrderParameter,
    Variant,
    averaged_correlation,
    classify_bonds,
)


def lattice_c_value(frame, l=3):
    OP = OrderParameter(
        frame.pos, frame.box, frame.boundary, frame.verlet_list, frame.neighbor_number, l
    )
    OP.compute()
    BC = BondCorrelation(OP.qlm_r, OP.qlm_i, frame.verlet_list, frame.neighbor_number)
    BC.compute()
    return BC.c_value


def test_cubic_ice_correlation(cubic_ice):
    c_value = lattice_c_value(cubic_ice)
    assert np.allclose(c_value, -1.0), "all bonds in cubic ice should be staggered."


def test_hexagonal_ice_correlation(hexagonal_ice):
    c_value = np.sort(lattice_c_value(hexagonal_ice), axis=1)
    assert np.allclose(c_value[:, :3], -1.0), "three staggered bonds are expected."
    assert np.allclose(c_value[:, 3], -1.0 / 9.0), "one eclipsed bond is expected."


def test_nan_and_padding():
    qlm_r = np.array([[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0], [np.nan] * 3])
    qlm_i = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [np.nan] * 3])
    verlet_list = np.array([[1, 2], [0, -1], [-1, -1]])
    neighbor_number = np.array([2, 1, 0])
    BC = BondCorrelation(qlm_r, qlm_i, verlet_list, neighbor_number)
    BC.compute()
    assert np.isclose(BC.c_value[0, 0], -1.0)
    assert np.isclose(BC.c_value[1, 0], -1.0)
    assert np.isnan(BC.c_value[0, 1]), "bond to a particle without neighbor is NaN."
    assert np.all(np.isnan(BC.c_value[1:, 1])), "padding slots should be NaN."

    bond_class = classify_bonds(BC.c_value, neighbor_number, "chill+")
    assert bond_class.tolist() == [[0, 2], [0, -1], [-1, -1]]


def test_thresholds():
    c_value = np.array([[-0.9, -0.8, -0.35, -0.2, -0.1, -0.05, 0.25, 0.3, np.nan]])
    neighbor_number = np.array([9])
    S, E, O = BondClass.staggered, BondClass.eclipsed, BondClass.out_of_range
    chill = classify_bonds(c_value, neighbor_number, "chill")
    assert chill[0].tolist() == [S, O, O, O, E, O, O, O, O], "CHILL thresholds."
    chill_plus = classify_bonds(c_value, neighbor_number, Variant.CHILL_PLUS)
    assert chill_plus[0].tolist() == [S, S, E, E, E, E, E, O, O], "CHILL+ thresholds."


def test_variant_parse():
    assert Variant.parse("chill") is Variant.CHILL
    assert Variant.parse("CHILL+") is Variant.CHILL_PLUS
    assert Variant.parse("chillplus") is Variant.CHILL_PLUS
    with pytest.raises(ValueError):
        Variant.parse("chill++")
    with pytest.raises(TypeError):
        Variant.parse(1)


def test_averaged_correlation():
    c_value = np.array([[-1.0, -0.5, np.nan], [0.2, np.nan, np.nan], [np.nan] * 3])
    neighbor_number = np.array([2, 1, 0])
    average = averaged_correlation(c_value, neighbor_number)
    assert np.allclose(average[:2], [-0.75, 0.2])
    assert np.isnan(average[2])
