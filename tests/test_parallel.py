"""Batch fan-out tests."""
import numpy as np

from chargesim.config import SimulationConfig
from chargesim.parallel import run_batch
from chargesim.simulator.column import ChargeColumn, Primer
from chargesim.simulator.engine import HoleStatus


def _columns():
    return [
        ChargeColumn(0.0, 10.0, 200.0, 4500.0, 10, (Primer(10.0, 0.0),), hole_id="h0"),
        ChargeColumn(1.0, 9.0, 80.0, 5200.0, 16, (Primer(1.0, 25.0), Primer(7.0, 25.0)), hole_id="h1"),
        ChargeColumn(0.0, 10.0, 200.0, -1.0, 10, (Primer(5.0, 0.0),), hole_id="h2"),
        ChargeColumn(0.0, 12.0, 150.0, 4000.0, 30, (Primer(11.0, 42.0), Primer(3.0, 60.0)), hole_id="h3"),
    ]


def test_serial_batch_preserves_order_and_isolates_failures():
    results = run_batch(_columns(), SimulationConfig(charge_exponent=0.8), processes=1)
    assert [r.hole_index for r in results] == [0, 1, 2, 3]
    assert [r.hole_id for r in results] == ["h0", "h1", "h2", "h3"]
    assert [r.status for r in results] == [HoleStatus.OK, HoleStatus.OK, HoleStatus.INVALID, HoleStatus.OK]


def test_process_pool_matches_serial():
    cfg = SimulationConfig(charge_exponent=0.8)
    serial = run_batch(_columns(), cfg, processes=1)
    pooled = run_batch(_columns(), cfg, processes=2)
    assert [r.status for r in pooled] == [r.status for r in serial]
    for a, b in zip(serial, pooled):
        if a.elements is None:
            assert b.elements is None
            continue
        assert np.array_equal([e.em for e in a.elements], [e.em for e in b.elements])
        assert np.array_equal([e.det_time for e in a.elements], [e.det_time for e in b.elements])


def test_empty_batch():
    assert run_batch([], SimulationConfig(), processes=2) == []
