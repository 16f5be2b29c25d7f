import numpy as np
import pytest

from slbl_insar.section import SLBLConfig, TopographicProfile, generate


@pytest.fixture
def flat_topo():
    x = np.arange(0.0, 110.0, 10.0)
    return TopographicProfile(x, np.zeros_like(x))


@pytest.fixture
def slope_topo():
    # descends toward increasing x
    x = np.arange(0.0, 110.0, 10.0)
    return TopographicProfile(x, 100.0 - 0.5 * x)


@pytest.fixture
def slope_surface(slope_topo):
    return generate(slope_topo, SLBLConfig(first=2, last=8, tolerance=0.5))
