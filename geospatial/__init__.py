"""
Geospatial Module of the Geodesy Core.

All coordinate-system changes go through ``transform``; measurements are
pure functions over ``Point`` values.

This module provides:
- Reference ellipsoids, radii of curvature and ECEF conversions
- Datum transforms between WGS84, GCJ-02, BD-09 and CGCS2000
- Gauss-Krüger projection of CGCS2000 coordinates
- Spherical distance, bearing, area, range and translation routines
- EGM96 geoid undulations
"""

from geospatial.coordinate_models import (
    EllipsoidParameters,
    WGS84Ellipsoid,
    CGCS2000Ellipsoid,
    geodetic_to_ecef,
    ecef_to_geodetic,
    meridian_arc_length,
    footpoint_latitude,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)

from geospatial.helmert import (
    HelmertParameters,
    WGS84_TO_CGCS2000,
    helmert_transform,
)

from geospatial.projections import (
    ProjectionAdapter,
    GaussKruger,
    zone_for_longitude,
    central_meridian,
    cgcs2000_to_gk,
    gk_to_cgcs2000,
)

from geospatial.datum_transforms import (
    transform,
    supported_conversions,
    in_china,
    wgs84_to_gcj02,
    gcj02_to_wgs84,
    gcj02_to_bd09,
    bd09_to_gcj02,
    wgs84_to_bd09,
    bd09_to_wgs84,
    wgs84_to_cgcs2000,
    cgcs2000_to_wgs84,
)

from geospatial.distance_calculations import (
    EARTH_RADIUS,
    BD_EARTH_RADIUS,
    distance,
    bearing,
    closest_on_segment,
    closest_on_line,
    distance_to_line,
    line_distance,
    move,
    panning,
    geodesic_inverse,
    geodesic_distance,
)

from geospatial.range_calculations import (
    ring_area,
    point_range,
    point_location_range,
    point_panning,
)

from geospatial.geoid import GeoidModel, DEFAULT_GRID_PATH

__all__ = [
    # Coordinate models
    "EllipsoidParameters",
    "WGS84Ellipsoid",
    "CGCS2000Ellipsoid",
    "geodetic_to_ecef",
    "ecef_to_geodetic",
    "meridian_arc_length",
    "footpoint_latitude",
    "radius_of_curvature_meridian",
    "radius_of_curvature_prime_vertical",
    # Helmert
    "HelmertParameters",
    "WGS84_TO_CGCS2000",
    "helmert_transform",
    # Projections
    "ProjectionAdapter",
    "GaussKruger",
    "zone_for_longitude",
    "central_meridian",
    "cgcs2000_to_gk",
    "gk_to_cgcs2000",
    # Datum transforms
    "transform",
    "supported_conversions",
    "in_china",
    "wgs84_to_gcj02",
    "gcj02_to_wgs84",
    "gcj02_to_bd09",
    "bd09_to_gcj02",
    "wgs84_to_bd09",
    "bd09_to_wgs84",
    "wgs84_to_cgcs2000",
    "cgcs2000_to_wgs84",
    # Measurements
    "EARTH_RADIUS",
    "BD_EARTH_RADIUS",
    "distance",
    "bearing",
    "closest_on_segment",
    "closest_on_line",
    "distance_to_line",
    "line_distance",
    "move",
    "panning",
    "geodesic_inverse",
    "geodesic_distance",
    "ring_area",
    "point_range",
    "point_location_range",
    "point_panning",
    # Geoid
    "GeoidModel",
    "DEFAULT_GRID_PATH",
]
