import numpy as np

from chillpy import AveragedQ6, IceType, reclassify_water


def test_reclassify_water():
    ice_type = np.array([1, 1, 1, 3, 1, 1, 1])
    q6 = np.array([0.6, 0.6, 0.4, 0.9, np.nan, 0.9, 0.9])
    c_value = np.array(
        [
            [-0.9, -0.9],
            [-0.8, -0.8],
            [-0.9, -0.9],
            [-1.0, -1.0],
            [-1.0, -1.0],
            [-0.7, -0.7],
            [np.nan, np.nan],
        ]
    )
    neighbor_number = np.array([2, 2, 2, 2, 2, 2, 0])
    new_ice_type = reclassify_water(ice_type, q6, c_value, neighbor_number)
    assert new_ice_type.tolist() == [
        IceType.cubic,
        IceType.hexagonal,
        IceType.water,
        IceType.cubic,
        IceType.water,
        IceType.water,
        IceType.water,
    ]
    assert ice_type.tolist() == [1, 1, 1, 3, 1, 1, 1], "input should not be modified."
    again = reclassify_water(new_ice_type, q6, c_value, neighbor_number)
    assert np.array_equal(again, new_ice_type), "reclassification is not idempotent."


def test_averaged_q6(cubic_ice):
    AQ = AveragedQ6(
        cubic_ice.pos,
        cubic_ice.box,
        cubic_ice.boundary,
        cubic_ice.verlet_list,
        cubic_ice.neighbor_number,
    )
    AQ.compute()
    assert np.allclose(AQ.q6, 1.0), "q6 of cubic ice should be 1."
    assert AQ.c_value.shape == cubic_ice.verlet_list.shape


def test_frame_reclassify(cubic_ice):
    cubic_ice.cal_ice_type("chill+")
    counts = cubic_ice.reclassify_water()
    assert counts.cubic == cubic_ice.N
    assert "q6_avg" in cubic_ice.data.columns
