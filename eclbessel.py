#!/usr/bin/env python

# Copyright 2025-2026 Martin Junius, Uwe Pilz (VdS)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# ChangeLog
# Version 0.1 / 2026-10-19
#       Besselian elements computed from Sun/Moon Earth-fixed positions
#       instead of published polynomial coefficients, central line
#       conversion with duration and width, generalized to arbitrary
#       points on the fundamental plane (vectorized), penumbra/limb
#       intersections for rise/set curves and contact points
#
# See [ESAA] Explanatory Supplement to the Astronomical Almanac, 3rd Edtion
# Chapter 11 - Eclipses of the Sun and Moon

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclbessel"
DESCRIPTION = "Besselian elements and fundamental plane geometry"

from typing import Tuple

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from verbose import verbose, warning, error
from astroutils import sin, cos, tan, atan2, asin, atan, sqrt, sq
from astroutils import R_EARTH_KM, R_SUN_KM, K_MOON, e2_earth
from eclclasses import BesselianState, CentralLinePoint, GeoPoint, normalize_lon



def elements(sun: np.ndarray, moon: np.ndarray) -> Tuple[np.ndarray, ...]:
    """
    Compute Besselian elements from geocentric Earth-fixed Sun and Moon positions

    Works on single vectors (shape (3,)) or arrays of vectors (shape (..., 3)).
    The fundamental plane is set up directly in the Earth-fixed frame, so
    mu is the Greenwich hour angle of the shadow axis.

    Parameters
    ----------
    sun : np.ndarray
        Sun position(s) in km
    moon : np.ndarray
        Moon position(s) in km

    Returns
    -------
    Tuple[np.ndarray, ...]
        x, y, z, d, mu, l1, l2, tan_f1, tan_f2
    """
    S = np.asarray(sun)  / R_EARTH_KM           # in earth radii
    M = np.asarray(moon) / R_EARTH_KM
    G = S - M
    g = np.linalg.norm(G, axis=-1)
    k = G / g[..., np.newaxis]                  # unit vector of shadow axis

    d  = asin(k[..., 2])
    a  = atan2(k[..., 1], k[..., 0])            # Earth-fixed longitude of shadow axis
    mu = (-a) % 360

    # Unit vectors of the fundamental plane, i to the east, j to the north
    i = np.stack([ -sin(a), cos(a), np.zeros_like(a) ], axis=-1)
    j = np.stack([ -sin(d) * cos(a), -sin(d) * sin(a), cos(d) ], axis=-1)
    x = np.sum(M * i, axis=-1)
    y = np.sum(M * j, axis=-1)
    z = np.sum(M * k, axis=-1)

    # Shadow cones [ESAA] (11.32-34)
    r_sun  = R_SUN_KM / R_EARTH_KM
    sin_f1 = (r_sun + K_MOON) / g
    sin_f2 = (r_sun - K_MOON) / g
    cos_f1 = sqrt(1 - sq(sin_f1))
    cos_f2 = sqrt(1 - sq(sin_f2))
    tan_f1 = sin_f1 / cos_f1
    tan_f2 = sin_f2 / cos_f2
    l1 = z * tan_f1 + K_MOON / cos_f1
    l2 = z * tan_f2 - K_MOON / cos_f2           # < 0 for total

    return x, y, z, d, mu, l1, l2, tan_f1, tan_f2



def auxiliary(d):
    """
    Auxiliary Besselians [ESAA] (11.61)

    Returns
    -------
    rho_1, rho_2, sin_d_1, cos_d_1, sin_d_1_d_2, cos_d_1_d_2
    """
    rho_1 = sqrt( 1 - e2_earth * sq(cos(d)) )
    rho_2 = sqrt( 1 - e2_earth * sq(sin(d)) )
    sin_d_1 = sin(d) / rho_1
    cos_d_1 = sqrt(1 - e2_earth) * cos(d) / rho_1
    sin_d_1_d_2 = e2_earth * sin(d) * cos(d) / rho_1
    cos_d_1_d_2 = sqrt(1 - e2_earth) / rho_1 / rho_2
    return rho_1, rho_2, sin_d_1, cos_d_1, sin_d_1_d_2, cos_d_1_d_2



def axis_distance(b: BesselianState) -> float:
    """
    Distance of the shadow axis from Earth's center, in units of the
    flattened Earth (y scaled by rho_1)
    """
    rho_1 = auxiliary(b.d)[0]
    return float(sqrt( sq(b.x) + sq(b.y / rho_1) ))


def penumbra_function(b: BesselianState) -> float:
    """< 0 while the penumbra touches the Earth limb"""
    return axis_distance(b) - (1 + b.l1)


def umbra_function(b: BesselianState) -> float:
    """<= 0 while the shadow axis hits the Earth (zeta defined)"""
    return sq(axis_distance(b)) - 1



def fundamental_to_geodetic(b: BesselianState, xi, eta, clip: bool=False) \
    -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert point(s) (xi, eta) on the fundamental plane to geodetic coordinates
    of the surface point below, [ESAA] 11.3.3.3

    Parameters
    ----------
    b : BesselianState
        Besselian elements
    xi : float | np.ndarray
        Coordinate(s) in the fundamental plane, earth radii
    eta : float | np.ndarray
        Coordinate(s) in the fundamental plane, earth radii
    clip : bool, optional
        Project points outside the Earth onto the limb (zeta=0), by default False

    Returns
    -------
    Tuple[np.ndarray, np.ndarray, np.ndarray]
        latitude, longitude in degrees, zeta; NaN where the point misses the Earth
    """
    xi  = np.asarray(xi, dtype=float)
    eta = np.asarray(eta, dtype=float)
    rho_1, rho_2, sin_d_1, cos_d_1, sin_d_1_d_2, cos_d_1_d_2 = auxiliary(b.d)

    eta_1 = eta / rho_1                                         # (11.55)
    r2 = sq(xi) + sq(eta_1)
    if clip:
        scale  = np.where(r2 > 1, 1 / sqrt(np.maximum(r2, 1)), 1.0)
        xi     = xi * scale
        eta_1  = eta_1 * scale
        zeta_1 = sqrt( np.maximum(1 - sq(xi) - sq(eta_1), 0) )
    else:
        with np.errstate(invalid="ignore"):
            zeta_1 = sqrt(1 - r2)                               # (11.56)

    with np.errstate(invalid="ignore"):
        phi_1 = asin( np.clip(eta_1 * cos_d_1 + zeta_1 * sin_d_1, -1, 1) )    # (11.59)
        theta = atan2(xi, -eta_1 * sin_d_1 + zeta_1 * cos_d_1)
        # theta = local hour angle, longitude = lambda
        longitude = normalize_lon(theta - b.mu)
        latitude  = atan( 1 / sqrt(1 - e2_earth) * tan(phi_1) )                 # (11.52)
        zeta = rho_2 * (zeta_1 * cos_d_1_d_2 - eta_1 * sin_d_1_d_2)             # (11.60)
    ic(latitude, longitude, zeta)

    return latitude, longitude, zeta


def fundamental_to_point(b: BesselianState, xi: float, eta: float, clip: bool=False) -> GeoPoint | None:
    """
    Single point version of fundamental_to_geodetic(), None if off the Earth
    """
    lat, lon, zeta = fundamental_to_geodetic(b, xi, eta, clip)
    if np.isnan(zeta):
        return None
    return GeoPoint(float(lat), float(lon))



def central_point(b: BesselianState) -> CentralLinePoint | None:
    """
    Calculation for central line on fundamental plane

    Parameters
    ----------
    b : BesselianState
        Besselian elements including derivatives

    Returns
    -------
    CentralLinePoint | None
        Point with moon/sun size ratio, duration of central eclipse in s,
        width of path in km, None if the shadow axis misses the Earth
    """
    x, y, d = b.x, b.y, b.d
    latitude, longitude, zeta = fundamental_to_geodetic(b, x, y)
    if np.isnan(zeta):
        return None
    zeta = float(zeta)

    L1  = b.l1 - zeta * b.tan_f1     # penumbra size at zeta
    L2  = b.l2 - zeta * b.tan_f2     # umbra size at zeta
    M_2 = (L1 - L2) / (L1 + L2)      # magnitude at central line = moon/sun size ratio
    ic(L1, L2, M_2)

    # [ESAA] 11.3.5.5
    # Central line, duration of central eclipse, and width of path
    x_dot    = b.x_p
    y_dot    = b.y_p
    d_dot    = np.deg2rad(b.d_p)                                # d, mu are in degree
    mu_dot   = np.deg2rad(b.mu_p)
    xi_dot   = mu_dot * ( -y*sin(d) + zeta*cos(d) )             # (11.99)
    eta_dot  = mu_dot * x * sin(d) - d_dot * zeta
    n2       = sq(x_dot - xi_dot) + sq(y_dot - eta_dot)
    n        = sqrt(n2)
    L2       = abs(L2)                                          # < 0 for TSE, > 0 for ASE
    duration = 2 * L2 / n * 3600                                # (11.100)

    # Width
    width = 2 * L2 / sqrt(sq(zeta) +                            # (11.101)
                          sq(x / n * (x_dot - xi_dot ) +
                             y / n * (y_dot - eta_dot)  ) ) * R_EARTH_KM
    ic(duration, width)

    return CentralLinePoint(jt=b.jt, point=GeoPoint(float(latitude), float(longitude)),
                            ratio=float(M_2), duration=float(duration), width=float(width))



def limb_intersections(b: BesselianState) -> list[Tuple[float, float]]:
    """
    Intersections of the penumbra circle with the Earth limb on the
    fundamental plane, the points where the eclipse is seen at sunrise/sunset

    Parameters
    ----------
    b : BesselianState
        Besselian elements

    Returns
    -------
    list[Tuple[float, float]]
        Empty or two (xi, eta) points
    """
    rho_1 = auxiliary(b.d)[0]
    cx = b.x
    cy = b.y / rho_1
    r  = float(sqrt(sq(cx) + sq(cy)))
    l1 = b.l1
    if r == 0 or r > 1 + l1 or r < abs(1 - l1):
        return []

    # Chord of the two circles, a = distance of chord from Earth center
    a = (1 + sq(r) - sq(l1)) / (2 * r)
    h = sqrt( max(1 - sq(a), 0) )
    ux, uy = cx / r, cy / r
    p1 = (a*ux - h*uy, (a*uy + h*ux) * rho_1)
    p2 = (a*ux + h*uy, (a*uy - h*ux) * rho_1)
    return [p1, p2]


def limb_points(b: BesselianState, angles) -> Tuple[np.ndarray, np.ndarray]:
    """
    Points (xi, eta) on the Earth limb at position angles (degrees)
    """
    rho_1 = auxiliary(b.d)[0]
    angles = np.asarray(angles, dtype=float)
    return cos(angles), sin(angles) * rho_1


def contact_point(b: BesselianState, penumbra: bool) -> GeoPoint:
    """
    Surface point for a contact: penumbra touching the limb, or shadow
    axis touching the limb, projected onto the limb
    """
    if penumbra:
        rho_1 = auxiliary(b.d)[0]
        angle = atan2(b.y / rho_1, b.x)
        xi, eta = limb_points(b, angle)
    else:
        xi, eta = b.x, b.y
    lat, lon, _ = fundamental_to_geodetic(b, xi, eta, clip=True)
    return GeoPoint(float(lat), float(lon))
