"""Pytest fixtures for the geodesy core tests."""
from pathlib import Path

import numpy as np
import pytest

from common.types import Point
from geospatial.geoid import GRID_BYTES, GeoidModel, NUM_COLS, NUM_ROWS


def _synthetic_undulations() -> np.ndarray:
    """Deterministic centimeter grid with distinct values per row and column."""
    rows = np.arange(NUM_ROWS, dtype=np.int32)[:, None]
    cols = np.arange(NUM_COLS, dtype=np.int32)[None, :]
    return ((rows - 360) * 10 + (cols % 37) * 3).astype('<i2')


@pytest.fixture(scope="session")
def undulations() -> np.ndarray:
    """The values stored in the synthetic geoid grid, in centimeters."""
    return _synthetic_undulations()


@pytest.fixture(scope="session")
def geoid_grid_path(tmp_path_factory, undulations) -> Path:
    """A full-size geoid grid file: one header byte, then int16 LE records."""
    path = tmp_path_factory.mktemp("geoid") / "egm96-15.bin"
    with open(path, "wb") as f:
        f.write(b"\x00")
        f.write(undulations.tobytes())
    assert path.stat().st_size == GRID_BYTES
    return path


@pytest.fixture
def geoid(geoid_grid_path):
    """An opened GeoidModel over the synthetic grid."""
    with GeoidModel(geoid_grid_path) as model:
        yield model


@pytest.fixture
def beijing() -> Point:
    return Point.wgs84(116.404, 39.915)


@pytest.fixture
def london() -> Point:
    return Point.wgs84(-0.1276, 51.5072)
