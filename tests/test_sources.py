"""Evaluator-facing element source tests."""
import numpy as np
import pytest

from chargesim.config import SimulationConfig
from chargesim.errors import ConfigurationError
from chargesim.packing import pack_results
from chargesim.parallel import run_batch
from chargesim.simulator.column import ChargeColumn, Primer
from chargesim.simulator.sources import HoleGeometry, element_sources, filter_by_display_time


def _packed():
    columns = [
        ChargeColumn(3.0, 13.0, 200.0, 4500.0, 10, (Primer(10.0, 0.0),)),
        ChargeColumn(2.0, 8.0, 60.0, 4500.0, 6, (Primer(0.0, 25.0),)),
    ]
    results = run_batch(columns, SimulationConfig(charge_exponent=0.8), processes=1)
    return pack_results(results, max_elements=12)


def _geometries():
    return [
        HoleGeometry(collar=(0.0, 0.0, 0.0), toe=(0.0, 0.0, -15.0), charge_top_depth=3.0, charge_base_depth=13.0),
        HoleGeometry(collar=(5.0, 0.0, 0.0), toe=(11.0, 0.0, -8.0), charge_top_depth=2.0, charge_base_depth=8.0),
    ]


def test_element_positions_follow_hole_axis():
    sources = list(element_sources(_packed(), _geometries()))
    assert len(sources) == 16
    first = sources[0]
    assert (first.hole, first.element) == (0, 0)
    assert np.allclose(first.position, [0.0, 0.0, -12.5])
    assert np.allclose(sources[9].position, [0.0, 0.0, -3.5])

    # Inclined hole: axis (0.6, 0, -0.8), top element centred 2.5 m from collar
    top_of_second = sources[-1]
    assert (top_of_second.hole, top_of_second.element) == (1, 5)
    assert np.allclose(top_of_second.position, [5.0 + 0.6 * 2.5, 0.0, -0.8 * 2.5])


def test_display_time_limits_sources():
    packed = _packed()
    early = list(element_sources(packed, _geometries(), display_time=1.0))
    assert early
    assert all(s.hole == 0 and s.det_time <= 1.0 for s in early)
    assert len(list(element_sources(packed, _geometries(), display_time=100.0))) == 16


def test_geometry_count_must_match():
    with pytest.raises(ConfigurationError):
        list(element_sources(_packed(), _geometries()[:1]))


def test_filter_by_display_time_drops_sentinels():
    pairs = [(1.0, 0.5), (2.0, 3.0), (0.0, -1.0)]
    assert filter_by_display_time(pairs) == [(1.0, 0.5), (2.0, 3.0)]
    assert filter_by_display_time(pairs, 1.0) == [(1.0, 0.5)]
