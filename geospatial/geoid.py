"""
EGM96 Geoid Undulation Model.

Interpolates the geoid height (mean sea level above the ellipsoid) from the
EGM96 15-arc-minute grid and converts heights between the ellipsoid and the
geoid.

Grid Format
-----------
- One leading header byte
- 721 rows (latitude +90° down to -90°) × 1440 columns (longitude 0° to
  359.75° east), row-major
- Each cell a signed 16-bit little-endian integer, undulation in centimeters

The grid is opened as a read-only ``numpy.memmap``, so one ``GeoidModel``
can be shared by concurrent readers without locking. The file is opened on
first use and released by ``close()`` or by leaving a ``with`` block.

Height Relations
----------------
    h = H + N

with ellipsoidal height h, orthometric height H and undulation N.
"""

import math
from pathlib import Path
import threading
from typing import Optional, Union
import numpy as np
from numpy.typing import NDArray

from common.constants import GeodeticConstants
from common.exceptions import CoordinateRangeError, ResourceError
from common.logging_config import get_logger
from common.types import Point

logger = get_logger(__name__)

DEFAULT_GRID_PATH = Path(__file__).parent / "data" / "egm96-15.bin"

NUM_ROWS = GeodeticConstants.EGM96_ROWS
NUM_COLS = GeodeticConstants.EGM96_COLUMNS
HEADER_BYTES = GeodeticConstants.EGM96_HEADER_BYTES
INTERVAL = GeodeticConstants.EGM96_INTERVAL.value
VALUE_SCALE = GeodeticConstants.EGM96_VALUE_SCALE.value

GRID_DTYPE = np.dtype('<i2')
GRID_BYTES = HEADER_BYTES + NUM_ROWS * NUM_COLS * GRID_DTYPE.itemsize


def normalize_radians(rads: float, center: float = 0.0) -> float:
    """Wrap an angle into [center - π, center + π)."""
    return rads - 2 * math.pi * math.floor((rads + math.pi - center) / (2 * math.pi))


def _lerp(a: float, b: float, prop: float) -> float:
    return a + (b - a) * prop


class GeoidModel:
    """EGM96 geoid grid with bilinear interpolation.

    Parameters
    ----------
    path : str or Path, optional
        Location of the grid file. Defaults to ``DEFAULT_GRID_PATH``.

    Examples
    --------
    >>> with GeoidModel("egm96-15.bin") as geoid:
    ...     msl = geoid.mean_sea_level(Point(116.404, 39.915))
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else DEFAULT_GRID_PATH
        self._grid: Optional[NDArray[np.int16]] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._grid is not None

    def open(self) -> 'GeoidModel':
        """Map the grid file into memory (no-op if already open).

        Raises
        ------
        ResourceError
            If the file is missing, unreadable or shorter than a full grid.
        """
        with self._lock:
            if self._grid is not None:
                return self
            try:
                size = self.path.stat().st_size
            except OSError as e:
                raise ResourceError(f"Cannot open geoid grid {self.path}: {e}") from e

            if size < GRID_BYTES:
                raise ResourceError(
                    f"Geoid grid {self.path} is truncated: "
                    f"{size} bytes, expected {GRID_BYTES}"
                )

            try:
                self._grid = np.memmap(
                    self.path,
                    dtype=GRID_DTYPE,
                    mode='r',
                    offset=HEADER_BYTES,
                    shape=(NUM_ROWS, NUM_COLS)
                )
            except (OSError, ValueError) as e:
                raise ResourceError(f"Cannot map geoid grid {self.path}: {e}") from e

        logger.debug(f"Opened geoid grid {self.path}")
        return self

    def close(self) -> None:
        """Release the memory map."""
        with self._lock:
            self._grid = None

    def __enter__(self) -> 'GeoidModel':
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _value(self, row: int, col: int) -> float:
        """Undulation in meters stored at a grid node."""
        if not (0 <= row < NUM_ROWS and 0 <= col < NUM_COLS):
            raise ResourceError(f"Grid index ({row}, {col}) out of bounds")
        grid = self._grid if self._grid is not None else self.open()._grid
        return float(grid[row, col]) * VALUE_SCALE

    def mean_sea_level(self, point: Point) -> float:
        """Geoid undulation in meters at a point.

        Raises
        ------
        CoordinateRangeError
            If the latitude (after normalization) lies outside ±90°, which
            is only possible for points built with ``no_autofix``.
        ResourceError
            If the grid cannot be read.
        """
        lat = normalize_radians(math.radians(point.latitude))
        if lat > math.pi / 2 or lat < -math.pi / 2:
            raise CoordinateRangeError(f"Invalid latitude {point.latitude}")
        lon = normalize_radians(math.radians(point.longitude))

        # Fractional grid coordinates: rows from the north pole, columns
        # eastwards from the prime meridian in [0, 2π)
        y = (math.pi / 2 - lat) / INTERVAL
        x = normalize_radians(lon, math.pi) / INTERVAL

        top_row = int(math.floor(y))
        # The south pole row has no row below it
        if top_row == NUM_ROWS - 1:
            top_row -= 1
        bottom_row = top_row + 1
        top_prop = y - top_row

        left_col = int(math.floor(x))
        left_prop = x - left_col
        left_col %= NUM_COLS
        right_col = (left_col + 1) % NUM_COLS

        top_left = self._value(top_row, left_col)
        bottom_left = self._value(bottom_row, left_col)
        bottom_right = self._value(bottom_row, right_col)
        top_right = self._value(top_row, right_col)

        top = _lerp(top_left, top_right, left_prop)
        bottom = _lerp(bottom_left, bottom_right, left_prop)
        return _lerp(top, bottom, top_prop)

    def ellipsoid_to_egm96(self, point: Point) -> float:
        """Orthometric height from the point's ellipsoidal altitude."""
        return point.altitude - self.mean_sea_level(point)

    def egm96_to_ellipsoid(self, point: Point) -> float:
        """Ellipsoidal height from the point's orthometric altitude."""
        return point.altitude + self.mean_sea_level(point)
