import logging
import math

import numpy as np
import pytest

from slbl_insar.errors import DimensionMismatch, NoIntersection
from slbl_insar.section import NoIntersectionPolicy, project_pillars
from slbl_insar.section.pillar import perpendicular_angle


X = np.arange(0.0, 110.0, 10.0)
FLAT = np.zeros_like(X)


def test_perpendicular_angle_sign_convention():
    assert perpendicular_angle(0.2) == pytest.approx(0.2 - math.pi / 2)
    assert perpendicular_angle(0.0) == pytest.approx(-math.pi / 2)
    assert perpendicular_angle(-0.2) == pytest.approx(-0.2 + math.pi / 2)


def test_horizontal_surface_projects_vertically():
    surface = np.full_like(X, -5.0)
    surface[[0, -1]] = 0.0
    x_proj, z_proj = project_pillars(0, X.size - 1, surface, np.zeros_like(X), X, FLAT)
    np.testing.assert_allclose(x_proj, X, atol=1e-9)
    np.testing.assert_allclose(z_proj, 0.0, atol=1e-9)


def test_tilted_surface_projects_along_normal():
    a = 0.1
    surface = np.full_like(X, -5.0)
    x_proj, z_proj = project_pillars(2, 8, surface, np.full_like(X, a), X, FLAT)
    np.testing.assert_allclose(x_proj[3:8], X[3:8] - 5.0 * math.tan(a))
    np.testing.assert_allclose(z_proj[3:8], 0.0, atol=1e-9)
    # outside the open range nothing moves
    np.testing.assert_array_equal(x_proj[:3], X[:3])
    np.testing.assert_array_equal(x_proj[8:], X[8:])


def test_points_on_the_ground_are_skipped():
    surface = FLAT.copy()
    surface[5] = -2.0
    x_proj, z_proj = project_pillars(0, X.size - 1, surface, np.full_like(X, 0.4), X, FLAT)
    np.testing.assert_array_equal(np.delete(x_proj, 5), np.delete(X, 5))
    assert z_proj[5] == pytest.approx(0.0, abs=1e-9)


def _no_hit_case():
    surface = FLAT.copy()
    surface[5] = -5.0
    # nearly vertical surface: the normal is almost horizontal and leaves the profile
    return surface, np.full_like(X, 1.5)


def test_no_intersection_raise_policy():
    surface, slope = _no_hit_case()
    with pytest.raises(NoIntersection) as exc:
        project_pillars(4, 6, surface, slope, X, FLAT, policy=NoIntersectionPolicy.RAISE)
    assert exc.value.index == 5


def test_no_intersection_substitute_policy_logs(caplog):
    surface, slope = _no_hit_case()
    with caplog.at_level(logging.WARNING, logger="slbl_insar"):
        x_proj, z_proj = project_pillars(4, 6, surface, slope, X, FLAT, policy="substitute")
    assert (x_proj[5], z_proj[5]) == (50.0, -5.0)
    assert any("point 5" in r.getMessage() for r in caplog.records)


def test_input_validation():
    with pytest.raises(DimensionMismatch):
        project_pillars(0, 3, FLAT[:5], FLAT, X, FLAT)
    with pytest.raises(ValueError):
        project_pillars(5, 5, FLAT, FLAT, X, FLAT)
