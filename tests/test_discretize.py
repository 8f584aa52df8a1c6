"""Column discretisation tests."""
import numpy as np
import pytest

from chargesim.errors import ConfigurationError
from chargesim.simulator.column import ChargeColumn, Primer
from chargesim.simulator.discretize import discretize_column


def _column(top=0.0, base=10.0, mass=200.0, n=10):
    return ChargeColumn(
        charge_top_depth=top,
        charge_base_depth=base,
        total_mass=mass,
        vod=4500.0,
        num_elements=n,
        primers=(Primer(depth=base - top, fire_time=0.0),),
    )


def test_element_zero_sits_at_the_toe():
    elements = discretize_column(_column())
    centres = [e.centre_depth for e in elements]
    assert np.allclose(centres, [9.5 - i for i in range(10)])
    assert [e.index for e in elements] == list(range(10))


def test_uniform_mass():
    elements = discretize_column(_column(mass=123.0, n=7))
    assert len(elements) == 7
    assert all(np.isclose(e.mass, 123.0 / 7) for e in elements)
    assert np.isclose(sum(e.mass for e in elements), 123.0)


def test_depths_are_relative_to_charge_top():
    # Column from 4 m to 10 m below collar: centres measured from the 4 m mark
    elements = discretize_column(_column(top=4.0, base=10.0, n=3))
    assert np.allclose([e.centre_depth for e in elements], [5.0, 3.0, 1.0])


def test_single_element_column():
    elements = discretize_column(_column(n=1))
    assert len(elements) == 1
    assert np.isclose(elements[0].centre_depth, 5.0)
    assert np.isclose(elements[0].mass, 200.0)


@pytest.mark.parametrize("top, base, n", [(0.0, 10.0, 0), (5.0, 5.0, 10), (6.0, 5.0, 10)])
def test_invalid_discretisation(top, base, n):
    column = ChargeColumn(
        charge_top_depth=top, charge_base_depth=base, total_mass=1.0, vod=4000.0, num_elements=n, primers=()
    )
    with pytest.raises(ConfigurationError):
        discretize_column(column)
