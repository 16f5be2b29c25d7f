import numpy as np
import pytest

from slbl_insar.errors import DimensionMismatch, MissingParameter, SingularSystem
from slbl_insar.section import (
    SLBLConfig,
    SLBLMethod,
    SurfaceArena,
    SurfaceProfile,
    TopographicProfile,
    finite_difference_slope,
    generate,
    run_slbl,
    solve_tridiagonal,
)


def _bumpy_topo():
    x = np.arange(0.0, 210.0, 10.0)
    z = 200.0 - 0.4 * x + 8.0 * np.sin(x / 17.0)
    return TopographicProfile(x, z)


# -------------------------
# Profiles
# -------------------------

def test_topography_validation():
    with pytest.raises(DimensionMismatch):
        TopographicProfile([0.0, 1.0, 2.0], [0.0, 1.0])
    with pytest.raises(ValueError):
        TopographicProfile([0.0, 2.0, 1.0], [0.0, 1.0, 2.0])
    with pytest.raises(ValueError):
        TopographicProfile([0.0], [0.0])


def test_main_direction(slope_topo, flat_topo):
    assert slope_topo.main_direction == 1.0
    assert flat_topo.main_direction == -1.0
    rising = TopographicProfile([0.0, 1.0], [0.0, 5.0])
    assert rising.main_direction == -1.0


def test_finite_difference_slope():
    x = np.arange(0.0, 700.0, 100.0)
    z = np.array([0.0, 10.0, 14.0, 22.0, 34.0, 50.0, 60.0])
    expected = [0.0996687, 0.069886, 0.0599282, 0.0996687, 0.1390959, 0.129275, 0.0996687]
    np.testing.assert_allclose(finite_difference_slope(x, z), expected, atol=1e-6)


def test_surface_slope_cache_is_dropped_on_update(slope_topo):
    surface = slope_topo.as_surface()
    assert not surface.has_slope
    np.testing.assert_allclose(surface.slope, np.arctan(-0.5))
    assert surface.has_slope

    surface.z = np.zeros(slope_topo.n_points)
    assert not surface.has_slope
    np.testing.assert_allclose(surface.slope, 0.0)

    with pytest.raises(DimensionMismatch):
        surface.z = np.zeros(3)
    with pytest.raises(ValueError):
        surface.z[0] = 1.0


def test_surface_minimum_maximum(flat_topo):
    a = SurfaceProfile(flat_topo.x, np.linspace(-5.0, 5.0, flat_topo.n_points), name="a")
    b = SurfaceProfile(flat_topo.x, np.zeros(flat_topo.n_points), name="b")
    low = SurfaceProfile.minimum(a, b)
    high = SurfaceProfile.maximum(a, b)
    assert low.name == "MIN_a_b" and high.name == "MAX_a_b"
    np.testing.assert_allclose(low.z, np.minimum(a.z, 0.0))
    np.testing.assert_allclose(high.z, np.maximum(a.z, 0.0))


def test_arena_handles_are_stable(flat_topo):
    arena = SurfaceArena(flat_topo)
    h0 = arena.add(flat_topo.as_surface())
    h1 = arena.add(SurfaceProfile(flat_topo.x, -np.ones(flat_topo.n_points), name="low"))
    assert (h0, h1) == (0, 1)

    arena.remove(h0)
    h2 = arena.add(flat_topo.as_surface())
    assert h2 == 2
    assert arena.handles() == [1, 2]
    assert h0 not in arena and len(arena) == 2

    h3 = arena.add_minimum(h1, h2)
    np.testing.assert_allclose(arena.get(h3).z, -1.0)

    with pytest.raises(KeyError):
        arena.get(h0)
    with pytest.raises(DimensionMismatch):
        arena.add(SurfaceProfile([0.0, 1.0], [0.0, 0.0]))


# -------------------------
# Tridiagonal solver
# -------------------------

def test_solve_tridiagonal_matches_dense():
    rng = np.random.default_rng(0)
    n = 8
    lower = rng.uniform(-1.0, 1.0, n - 1)
    upper = rng.uniform(-1.0, 1.0, n - 1)
    diag = 4.0 + rng.uniform(0.0, 1.0, n)
    rhs = rng.normal(size=n)

    dense = np.diag(diag) + np.diag(lower, -1) + np.diag(upper, 1)
    np.testing.assert_allclose(solve_tridiagonal(lower, diag, upper, rhs), np.linalg.solve(dense, rhs))


def test_solve_tridiagonal_errors():
    with pytest.raises(SingularSystem):
        solve_tridiagonal([1.0], [0.0, 1.0], [1.0], [1.0, 1.0])
    with pytest.raises(SingularSystem):
        solve_tridiagonal([], [], [], [])
    with pytest.raises(DimensionMismatch):
        solve_tridiagonal([1.0], [1.0, 1.0], [1.0], [1.0])


# -------------------------
# SLBL
# -------------------------

def test_exact_known_solution(flat_topo):
    surface = generate(flat_topo, SLBLConfig(first=0, last=4, tolerance=1.0))
    np.testing.assert_allclose(surface.z[:5], [0.0, -3.0, -4.0, -3.0, 0.0])
    np.testing.assert_allclose(surface.z[5:], 0.0)


@pytest.mark.parametrize("first, last", [(0, 2), (1, 9), (3, 17), (0, 20), (5, 12)])
def test_exact_keeps_endpoints_and_stays_below_ground(first, last):
    topo = _bumpy_topo()
    surface = generate(topo, SLBLConfig(first=first, last=last, tolerance=0.3))
    assert surface.z[first] == topo.z[first]
    assert surface.z[last] == topo.z[last]
    assert np.all(surface.z <= topo.z)
    np.testing.assert_array_equal(surface.z[:first], topo.z[:first])
    np.testing.assert_array_equal(surface.z[last + 1:], topo.z[last + 1:])


def test_exact_degenerate_range_is_singular(flat_topo):
    with pytest.raises(SingularSystem):
        generate(flat_topo, SLBLConfig(first=2, last=3, tolerance=1.0))


def test_iterative_is_monotone_in_iterations():
    topo = _bumpy_topo()
    previous = topo.z
    for n in range(1, 25):
        surface = generate(topo, SLBLConfig(method="iterative", first=1, last=18, tolerance=0.2, n_iterations=n))
        assert np.all(surface.z <= previous + 1e-12)
        previous = surface.z


def test_iterative_converges_to_exact(flat_topo):
    exact = generate(flat_topo, SLBLConfig(first=0, last=4, tolerance=1.0))
    iterative = generate(
        flat_topo, SLBLConfig(method=SLBLMethod.ITERATIVE, first=0, last=4, tolerance=1.0, n_iterations=2000)
    )
    np.testing.assert_allclose(iterative.z, exact.z, atol=1e-9)


def test_iterative_requires_iteration_count():
    with pytest.raises(MissingParameter):
        SLBLConfig(method="iterative", first=0, last=4, tolerance=1.0)
    with pytest.raises(ValueError):
        SLBLConfig(method="iterative_threshold", first=0, last=4, tolerance=1.0)


def test_config_validation(flat_topo):
    with pytest.raises(ValueError):
        SLBLConfig(first=4, last=4)
    with pytest.raises(ValueError):
        SLBLConfig(method="bogus")
    with pytest.raises(ValueError):
        SLBLConfig(first=0, last=4, slope_max_deg=95.0)
    with pytest.raises(ValueError):
        generate(flat_topo, SLBLConfig(first=0, last=11))


def test_threshold_elevation_floor_stops_early(flat_topo):
    cfg = SLBLConfig(
        method="iterative_threshold", first=0, last=10, tolerance=1.0, n_iterations=100, elevation_min=-5.0
    )
    result = run_slbl(flat_topo, cfg)
    assert result.stopped_early
    assert 0 < result.n_iterations < 100
    assert result.surface.z.min() >= -5.0


def test_threshold_slope_ceiling_reports_zero_iterations(flat_topo):
    cfg = SLBLConfig(
        method="iterative_threshold", first=0, last=10, tolerance=1.0, n_iterations=10, slope_max_deg=5.0
    )
    result = run_slbl(flat_topo, cfg)
    assert result.n_iterations == 0
    assert result.stopped_early
    np.testing.assert_array_equal(result.surface.z, flat_topo.z)


def test_threshold_without_limits_matches_iterative():
    topo = _bumpy_topo()
    plain = generate(topo, SLBLConfig(method="iterative", first=2, last=15, tolerance=0.2, n_iterations=40))
    result = run_slbl(topo, SLBLConfig(method="iterative_threshold", first=2, last=15, tolerance=0.2, n_iterations=40))
    assert result.n_iterations == 40 and not result.stopped_early
    np.testing.assert_allclose(result.surface.z, plain.z)


def test_default_surface_name(slope_topo):
    assert generate(slope_topo, SLBLConfig(first=1, last=9, tolerance=0.5)).name == "SLBL_E_1_9_0.5"


def test_config_accepts_integral_float_indices(slope_topo):
    cfg = SLBLConfig(first=2.0, last=8.0, tolerance=0.5)
    assert isinstance(cfg.first, int) and isinstance(cfg.last, int)
    reference = generate(slope_topo, SLBLConfig(first=2, last=8, tolerance=0.5))
    np.testing.assert_array_equal(generate(slope_topo, cfg).z, reference.z)
    assert generate(slope_topo, cfg).name == reference.name

    iterative = SLBLConfig(method="iterative", first=np.int64(1), last=9.0, tolerance=0.5, n_iterations=5.0)
    assert isinstance(iterative.n_iterations, int)
    assert run_slbl(slope_topo, iterative).n_iterations <= 5

    with pytest.raises(ValueError):
        SLBLConfig(first=2.5, last=8, tolerance=0.5)
    with pytest.raises(ValueError):
        SLBLConfig(method="iterative", first=0, last=4, tolerance=1.0, n_iterations=2.5)


def test_iterative_reports_sweeps_actually_applied(flat_topo):
    # a single interior point settles after one sweep
    cfg = SLBLConfig(method="iterative", first=0, last=2, tolerance=1.0, n_iterations=50)
    result = run_slbl(flat_topo, cfg)
    assert result.n_iterations == 1
    assert not result.stopped_early
    assert result.surface.z[1] == -1.0

    cfg = SLBLConfig(method="iterative", first=0, last=10, tolerance=1.0, n_iterations=3)
    assert run_slbl(flat_topo, cfg).n_iterations == 3

    cfg = SLBLConfig(method="iterative", first=0, last=10, tolerance=0.0, n_iterations=20)
    assert run_slbl(flat_topo, cfg).n_iterations == 0
