"""
Seven-Parameter Helmert Transformation.

A similarity transform between two Earth-fixed Cartesian frames:

    X' = T + (1 + s) · R · X

with translation T = (tx, ty, tz), uniform scale s and the small-angle
rotation matrix R built from (rx, ry, rz) in the position-vector
convention. Geodetic input is lifted to ECEF on the source ellipsoid,
transformed, and lowered back to geodetic on the target ellipsoid.

References
----------
- IOGP Guidance Note 7-2, method 9606 (Position Vector transformation)
- Torge, W. (2001). Geodesy (3rd ed.). Section 2.4.
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np
from numpy.typing import NDArray

from common.constants import SolverSettings, DEFAULT_SOLVER_SETTINGS
from common.logging_config import get_logger
from common.units import Q_
from geospatial.coordinate_models import (
    EllipsoidParameters,
    WGS84Ellipsoid,
    CGCS2000Ellipsoid,
    geodetic_to_ecef,
    ecef_to_geodetic,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class HelmertParameters:
    """Seven Helmert parameters in SI units.

    Attributes
    ----------
    tx, ty, tz : float
        Translation in METERS.
    scale : float
        Scale correction, dimensionless (1 ppm = 1e-6).
    rx, ry, rz : float
        Rotations in RADIANS (position-vector convention).
    """
    tx: float = 0.0
    ty: float = 0.0
    tz: float = 0.0
    scale: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0

    @classmethod
    def from_survey_units(
        cls,
        tx_m: float = 0.0,
        ty_m: float = 0.0,
        tz_m: float = 0.0,
        scale_ppm: float = 0.0,
        rx_arcsec: float = 0.0,
        ry_arcsec: float = 0.0,
        rz_arcsec: float = 0.0
    ) -> 'HelmertParameters':
        """Build from the units published in transformation registries.

        Parameters
        ----------
        tx_m, ty_m, tz_m : float
            Translations in meters.
        scale_ppm : float
            Scale correction in parts per million.
        rx_arcsec, ry_arcsec, rz_arcsec : float
            Rotations in arc-seconds.
        """
        def to_radians(arcsec: float) -> float:
            return float(Q_(arcsec, 'arcsecond').to('radian').magnitude)

        return cls(
            tx=tx_m,
            ty=ty_m,
            tz=tz_m,
            scale=float(Q_(scale_ppm, 'ppm').to('dimensionless').magnitude),
            rx=to_radians(rx_arcsec),
            ry=to_radians(ry_arcsec),
            rz=to_radians(rz_arcsec)
        )

    def inverse(self) -> 'HelmertParameters':
        """First-order inverse: every parameter negated."""
        return HelmertParameters(
            tx=-self.tx, ty=-self.ty, tz=-self.tz,
            scale=-self.scale,
            rx=-self.rx, ry=-self.ry, rz=-self.rz
        )

    @property
    def translation(self) -> NDArray[np.float64]:
        return np.array([self.tx, self.ty, self.tz])

    @property
    def rotation_matrix(self) -> NDArray[np.float64]:
        """Small-angle rotation matrix (position-vector convention)."""
        return np.array([
            [1.0, -self.rz, self.ry],
            [self.rz, 1.0, -self.rx],
            [-self.ry, self.rx, 1.0],
        ])


# WGS84 (G1762) and CGCS2000 coincide at the centimeter level, so the
# published transformation is the identity and only the ellipsoid changes.
WGS84_TO_CGCS2000 = HelmertParameters()


def helmert_ecef(
    X: float,
    Y: float,
    Z: float,
    params: HelmertParameters
) -> Tuple[float, float, float]:
    """Apply a Helmert transform to ECEF coordinates (meters)."""
    source = np.array([X, Y, Z])
    target = params.translation + (1.0 + params.scale) * (params.rotation_matrix @ source)
    return float(target[0]), float(target[1]), float(target[2])


def helmert_transform(
    latitude_rad: float,
    longitude_rad: float,
    altitude_m: float,
    params: HelmertParameters,
    source_ellipsoid: EllipsoidParameters = WGS84Ellipsoid,
    target_ellipsoid: EllipsoidParameters = CGCS2000Ellipsoid,
    settings: SolverSettings = DEFAULT_SOLVER_SETTINGS
) -> Tuple[float, float, float]:
    """Transform geodetic coordinates between two datums.

    Parameters
    ----------
    latitude_rad, longitude_rad : float
        Source geodetic coordinates in radians.
    altitude_m : float
        Source ellipsoidal height in meters.
    params : HelmertParameters
        Source -> target transformation parameters.
    source_ellipsoid, target_ellipsoid : EllipsoidParameters
        Reference ellipsoids of the two datums.
    settings : SolverSettings
        Controls the ECEF -> geodetic latitude solver.

    Returns
    -------
    Tuple[float, float, float]
        (latitude_rad, longitude_rad, altitude_m) on the target datum.
    """
    X, Y, Z = geodetic_to_ecef(latitude_rad, longitude_rad, altitude_m, source_ellipsoid)
    X2, Y2, Z2 = helmert_ecef(X, Y, Z, params)

    logger.debug(
        f"Helmert {source_ellipsoid.name} -> {target_ellipsoid.name}: "
        f"dX={X2 - X:.4f} dY={Y2 - Y:.4f} dZ={Z2 - Z:.4f} m"
    )

    return ecef_to_geodetic(X2, Y2, Z2, target_ellipsoid, settings)
