import logging

import numpy as np
import pytest

from slbl_insar.displacement import DispProfile
from slbl_insar.errors import DimensionMismatch
from slbl_insar.geometry import Orientation
from slbl_insar.io import (
    load_observation,
    load_profile,
    load_surface,
    load_topography,
    save_profile,
    save_surface,
    save_topography,
)
from slbl_insar.logging_config import setup_logging


def test_topography_and_surface_round_trip(tmp_path, slope_topo, slope_surface):
    save_topography(tmp_path / "dem.csv", slope_topo)
    save_surface(tmp_path / "surface.csv", slope_surface)

    topo = load_topography(tmp_path / "dem.csv")
    np.testing.assert_array_equal(topo.x, slope_topo.x)
    np.testing.assert_array_equal(topo.z, slope_topo.z)
    assert topo.name == "dem"

    surface = load_surface(tmp_path / "surface.csv", topo)
    np.testing.assert_array_equal(surface.z, slope_surface.z)


def test_profile_round_trip(tmp_path):
    profile = DispProfile([0.0, 1.5, 3.0], [10.0, 9.0, 8.0], [0.1, 1.0 / 3.0, 0.0], [-0.2, -2.0 / 3.0, 0.0])
    path = save_profile(tmp_path / "out" / "profile.csv", profile)
    assert path.read_text().splitlines()[0] == "x;z;vx;vz"

    loaded = load_profile(path)
    np.testing.assert_array_equal(loaded.origins, profile.origins)
    np.testing.assert_array_equal(loaded.vectors, profile.vectors)


def test_load_observation_by_header(tmp_path):
    path = tmp_path / "insar.csv"
    path.write_text("id;x;disp\n1;0;1.5\n2;10;2.5\n")
    los = Orientation.from_deg(100.0, 35.0)
    obs = load_observation(path, los)
    np.testing.assert_array_equal(obs.x, [0.0, 10.0])
    np.testing.assert_array_equal(obs.amplitude, [1.5, 2.5])
    assert obs.orientation is los


def test_load_errors(tmp_path, slope_topo):
    path = tmp_path / "bad.csv"
    path.write_text("x;elevation\n0;1\n1;2\n")
    with pytest.raises(ValueError):
        load_topography(path)

    short = tmp_path / "short.csv"
    short.write_text("x;z\n0;1\n10;2\n")
    with pytest.raises(DimensionMismatch):
        load_surface(short, slope_topo)


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logging(level=logging.DEBUG, log_file=str(log_file))
    try:
        logging.getLogger("slbl_insar.section.slbl").info("hello from the solver")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from the solver" in log_file.read_text()
        assert len(logger.handlers) == 2
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_setup_logging_accepts_level_names(tmp_path):
    logger = setup_logging(level="warning", log_file=tmp_path / "quiet.log")
    try:
        assert logger.level == logging.WARNING
        logging.getLogger("slbl_insar.calibration").info("not recorded")
        logging.getLogger("slbl_insar.calibration").warning("recorded")
        for handler in logger.handlers:
            handler.flush()
        text = (tmp_path / "quiet.log").read_text()
        assert "recorded" in text and "not recorded" not in text

        setup_logging(level="DEBUG")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        with pytest.raises(ValueError):
            setup_logging(level="chatty")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
