"""Element data packer tests."""
import numpy as np
import pytest

from chargesim.config import SimulationConfig
from chargesim.errors import ConfigurationError
from chargesim.packing import NO_DATA, pack_element_data, pack_results
from chargesim.parallel import run_batch
from chargesim.simulator.column import ChargeColumn, Element, Primer


def _elements(values):
    return [Element(index=i, centre_depth=float(i), mass=1.0, det_time=t, em=em) for i, (em, t) in enumerate(values)]


def test_round_trip_with_padding():
    pairs = [(2.5, 0.1), (1.25, 0.35), (0.875, 0.6)]
    packed = pack_element_data([_elements(pairs)], max_elements=5)
    assert packed.hole_count == 1 and packed.max_elements == 5
    assert packed.hole(0) == pairs
    for m in range(3):
        assert packed.cell(0, m) == pairs[m]
    for m in range(3, 5):
        assert packed.cell(0, m) == NO_DATA


def test_row_major_layout():
    packed = pack_element_data([_elements([(1.0, 0.5)]), _elements([(3.0, 1.5), (4.0, 2.5)])], max_elements=2)
    assert packed.buffer.shape == (2 * 2 * 2,)
    assert list(packed.buffer) == [1.0, 0.5, 0.0, -1.0, 3.0, 1.5, 4.0, 2.5]


def test_missing_hole_is_all_sentinel():
    packed = pack_element_data([None, _elements([(1.0, 0.0)]), []], max_elements=3)
    grid = packed.as_grid()
    assert np.all(grid[0] == NO_DATA)
    assert np.all(grid[2] == NO_DATA)
    assert packed.hole(0) == []


def test_elements_are_stored_in_spatial_order():
    elements = _elements([(1.0, 0.3), (2.0, 0.2), (3.0, 0.1)])[::-1]
    packed = pack_element_data([elements])
    assert [em for em, _ in packed.hole(0)] == [1.0, 2.0, 3.0]


def test_default_width_is_longest_hole():
    packed = pack_element_data([_elements([(1.0, 0.0)] * 4), _elements([(1.0, 0.0)] * 7)])
    assert packed.max_elements == 7


def test_too_many_elements_raises():
    with pytest.raises(ConfigurationError):
        pack_element_data([_elements([(1.0, 0.0)] * 4)], max_elements=3)


def test_cell_out_of_range():
    packed = pack_element_data([_elements([(1.0, 0.0)])], max_elements=2)
    with pytest.raises(IndexError):
        packed.cell(1, 0)


def test_visible_mask_display_time():
    packed = pack_element_data([_elements([(1.0, 0.5), (1.0, 1.5), (1.0, 2.5)])], max_elements=4)
    assert packed.visible_mask().tolist() == [[True, True, True, False]]
    assert packed.visible_mask(1.5).tolist() == [[True, True, False, False]]
    assert packed.visible_mask(0.0).tolist() == [[False, False, False, False]]


def test_float32_output():
    packed = pack_element_data([_elements([(1.5, 0.25)])], dtype=np.float32)
    assert packed.buffer.dtype == np.float32
    assert packed.cell(0, 0) == (1.5, 0.25)


def test_pack_results_writes_sentinel_for_failed_holes():
    good = ChargeColumn(0.0, 10.0, 200.0, 4500.0, 10, (Primer(10.0, 0.0),), hole_id="good")
    bad = ChargeColumn(0.0, 10.0, 200.0, 4500.0, 10, (), hole_id="bad")
    results = run_batch([good, bad, good], SimulationConfig(charge_exponent=0.8), processes=1)
    packed = pack_results(results, max_elements=16)
    assert packed.hole_count == 3
    assert len(packed.hole(0)) == 10
    assert packed.hole(1) == []
    assert np.all(packed.as_grid()[1] == NO_DATA)
    assert packed.hole(2) == packed.hole(0)
    assert np.isclose(sum(em for em, _ in packed.hole(0)), 200.0 ** 0.8)


def test_oversize_hole_does_not_fail_the_batch():
    good = ChargeColumn(0.0, 10.0, 200.0, 4500.0, 10, (Primer(10.0, 0.0),), hole_id="good")
    big = ChargeColumn(0.0, 10.0, 200.0, 4500.0, 100, (Primer(10.0, 0.0),), hole_id="big")
    results = run_batch([good, big], SimulationConfig(charge_exponent=0.8, max_elements=64), processes=1)
    packed = pack_results(results, max_elements=64)
    assert packed.as_grid().shape == (2, 64, 2)
    assert len(packed.hole(0)) == 10
    assert np.all(packed.as_grid()[1] == NO_DATA)


def test_pack_results_sentinels_rows_wider_than_max_elements():
    column = ChargeColumn(0.0, 10.0, 200.0, 4500.0, 100, (Primer(10.0, 0.0),), hole_id="big")
    cfg = SimulationConfig(charge_exponent=0.8, max_elements=128)
    results = run_batch([column], cfg, processes=1)
    assert results[0].status.has_data
    packed = pack_results(results, max_elements=64)
    assert packed.hole(0) == []
