#!/usr/bin/env python

# Copyright 2025-2026 Martin Junius
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
#       Sun/Moon ephemeris for an eclipse event, polynomial fit of the
#       astropy get_body() positions, Earth-fixed via apparent sidereal
#       time, Besselian elements, greatest eclipse, catalog of known eclipses

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclephem"
DESCRIPTION = "Sun/Moon ephemeris and Besselian elements for solar eclipses"

import sys
import argparse
from functools import lru_cache
from typing import Tuple

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

# AstroPy
from astropy.coordinates import TETE, get_body, solar_system_ephemeris
from astropy.time        import Time
import astropy.units as u
import numpy as np
from numpy.polynomial    import Polynomial
import erfa

# SciPy
from scipy import optimize

# Local modules
from verbose import verbose, warning, error, message
from astroutils import jt_to_time, delta_t_for, jt_to_ut_string, rotate_z
from eclclasses import EclipseDescriptor, EclipseType, BesselianState
import eclbessel



# Polynomial fit of the Sun/Moon positions
FIT_WINDOW = 6.5 / 24           # +/- around greatest eclipse, days
FIT_STEP   = 10 / 1440          # sample interval, days
FIT_DEGREE = 9
DERIV_STEP = 1 / 1440           # central difference for hourly derivatives



class Ephemeris:
    """
    Sun and Moon geocentric positions for one eclipse event, Earth-fixed frame

    Positions are sampled with astropy get_body() in the true equator/true
    equinox frame (TETE) around greatest eclipse and fitted with numpy
    polynomials; the rotation to the Earth-fixed frame uses the Greenwich
    apparent sidereal time for UT1 = TT - Delta T.
    """

    def __init__(self, eclipse: EclipseDescriptor, window: float=FIT_WINDOW,
                 step: float=FIT_STEP, degree: int=FIT_DEGREE):
        self.eclipse = eclipse
        self.jt0     = eclipse.jt_max
        self.jt_min  = self.jt0 - window
        self.jt_max  = self.jt0 + window

        t0 = jt_to_time(self.jt0)
        self.delta_t = eclipse.delta_t if eclipse.delta_t is not None else delta_t_for(t0)
        verbose(f"ephemeris {eclipse}, Delta T={self.delta_t:.1f} s")

        jts   = self.jt0 + np.arange(-window, window + step/2, step)
        hours = (jts - self.jt0) * 24
        times = jt_to_time(jts)

        with solar_system_ephemeris.set("builtin"):
            sun  = get_body("sun",  times).transform_to(TETE(obstime=times))
            moon = get_body("moon", times).transform_to(TETE(obstime=times))
        sun_xyz  = sun.cartesian.xyz.to_value(u.km)
        moon_xyz = moon.cartesian.xyz.to_value(u.km)
        ic(sun_xyz.shape, moon_xyz.shape)

        self._sun  = [ Polynomial.fit(hours, sun_xyz[i],  degree) for i in range(3) ]
        self._moon = [ Polynomial.fit(hours, moon_xyz[i], degree) for i in range(3) ]

        # GAST in degrees, unwrapped, almost linear
        gast = np.unwrap( self._gast_rad(jts) )
        self._gast = Polynomial.fit(hours, np.rad2deg(gast), 3)


    def _gast_rad(self, jt) -> np.ndarray:
        tt  = np.asarray(jt, dtype=float)
        ut1 = tt - self.delta_t / 86400
        return erfa.gst06a(ut1, 0.0, tt, 0.0)


    def _hours(self, jt) -> np.ndarray:
        return (np.asarray(jt, dtype=float) - self.jt0) * 24


    def gast(self, jt) -> np.ndarray:
        """Greenwich apparent sidereal time in degrees"""
        return self._gast(self._hours(jt)) % 360


    def sun_moon_tete(self, jt) -> Tuple[np.ndarray, np.ndarray]:
        h = self._hours(jt)
        sun  = np.stack([ p(h) for p in self._sun ],  axis=-1)
        moon = np.stack([ p(h) for p in self._moon ], axis=-1)
        return sun, moon


    def sun_moon_efi(self, jt) -> Tuple[np.ndarray, np.ndarray]:
        """
        Geocentric Earth-fixed Sun and Moon positions

        Parameters
        ----------
        jt : float | np.ndarray
            Julian time (TT)

        Returns
        -------
        Tuple[np.ndarray, np.ndarray]
            Sun, Moon positions in km, shape jt.shape + (3,)
        """
        sun, moon = self.sun_moon_tete(jt)
        gast = self._gast(self._hours(jt))
        return rotate_z(sun, gast), rotate_z(moon, gast)


    def elements(self, jt) -> Tuple[np.ndarray, ...]:
        """
        Besselian elements x, y, z, d, mu, l1, l2, tan_f1, tan_f2 (vectorized, no derivatives)
        """
        sun, moon = self.sun_moon_efi(jt)
        return eclbessel.elements(sun, moon)


    def bessel(self, jt: float) -> BesselianState:
        """
        Besselian elements with hourly derivatives at time jt

        Parameters
        ----------
        jt : float
            Julian time (TT)

        Returns
        -------
        BesselianState
            Elements at jt
        """
        jts = np.array([ jt - DERIV_STEP, jt, jt + DERIV_STEP ])
        x, y, z, d, mu, l1, l2, tan_f1, tan_f2 = self.elements(jts)
        dh = 2 * DERIV_STEP * 24
        # mu wraps at 360
        dmu = (mu[2] - mu[0] + 180) % 360 - 180
        return BesselianState(jt=float(jt), x=float(x[1]), y=float(y[1]), z=float(z[1]),
                              d=float(d[1]), mu=float(mu[1]), l1=float(l1[1]), l2=float(l2[1]),
                              tan_f1=float(tan_f1[1]), tan_f2=float(tan_f2[1]),
                              x_p=float((x[2] - x[0]) / dh), y_p=float((y[2] - y[0]) / dh),
                              d_p=float((d[2] - d[0]) / dh), mu_p=float(dmu / dh))


    def ut_string(self, jt: float, subfmt: str="date_hms") -> str:
        return jt_to_ut_string(jt, self.delta_t, subfmt)



@lru_cache(maxsize=16)
def ephemeris_for(eclipse: EclipseDescriptor) -> Ephemeris:
    """
    Memoized ephemeris per eclipse descriptor
    """
    return Ephemeris(eclipse)



def fundamental_plane_xy(ephem: Ephemeris, jt: float) -> float:
    """
    Compute distance of shadow axis (x, y) from earth center
    """
    x, y, *_ = ephem.elements(jt)
    return float(np.sqrt(x*x + y*y))


def find_greatest_eclipse(ephem: Ephemeris, jt0: float=None, window: float=1/24) -> float:
    """
    Compute time of greatest eclipse

    Parameters
    ----------
    ephem : Ephemeris
        Ephemeris for the eclipse
    jt0 : float, optional
        Start value, by default the descriptor's time of greatest eclipse
    window : float, optional
        Search +/- window in days, by default 1 hour

    Returns
    -------
    float
        Julian time (TT) of greatest eclipse
    """
    jt0 = ephem.jt0 if jt0 is None else jt0
    # Find mininum of (x, y) distance, which is greatest eclipse,
    # minimize relative to jt0 in hours for a well-scaled problem
    func    = lambda h: fundamental_plane_xy(ephem, jt0 + h[0] / 24)
    sol_max = optimize.minimize(func, x0=(0), bounds=[(-window * 24, window * 24)])
    jt_max  = jt0 + sol_max.x[0] / 24
    ic(sol_max, jt_max)
    return float(jt_max)



def type_from_geometry(ephem: Ephemeris, jt: float) -> EclipseType:
    """
    Eclipse type at jt from the shadow geometry on the central line
    """
    b = ephem.bessel(jt)
    c = eclbessel.central_point(b)
    if c is None:
        return EclipseType.PARTIAL
    return EclipseType.TOTAL if c.ratio >= 1 else EclipseType.ANNULAR


def check_type(eclipse: EclipseDescriptor, ephem: Ephemeris=None) -> bool:
    """
    Compare descriptor type with the geometry at greatest eclipse, warn on mismatch.
    The descriptor type stays authoritative.
    """
    ephem = ephem or ephemeris_for(eclipse)
    geo_type = type_from_geometry(ephem, find_greatest_eclipse(ephem))
    ok = geo_type == eclipse.type or eclipse.type is EclipseType.HYBRID and geo_type.central
    if not ok:
        warning(f"eclipse {eclipse}: geometry indicates {geo_type.value}, keeping {eclipse.type.value}")
    return ok



def make_eclipse(time: str | Time, type: EclipseType, delta_t: float=None, name: str=None) -> EclipseDescriptor:
    """
    Create eclipse descriptor for time of greatest eclipse (TT if string)
    """
    if not isinstance(time, Time):
        time = Time(time, scale="tt")
    jt = time.tt.jd
    if not name:
        name = f"{time.tt.to_value('iso', subfmt='date')} ({type.value})"
    return EclipseDescriptor(name=name, jt_max=float(jt), type=type, delta_t=delta_t)


def eclipse_from_time(time: str | Time, type: EclipseType=None, delta_t: float=None) -> EclipseDescriptor:
    """
    Create eclipse descriptor from an approximate time of greatest eclipse,
    refining the time and, if not given, deriving the type from the geometry

    Parameters
    ----------
    time : str | Time
        Approximate time (within 1 hour), TT if string
    type : EclipseType, optional
        Eclipse type, by default from geometry
    delta_t : float, optional
        Delta T in s, by default from astropy

    Returns
    -------
    EclipseDescriptor
        Descriptor with refined time of greatest eclipse
    """
    approx = make_eclipse(time, type or EclipseType.PARTIAL, delta_t)
    ephem  = Ephemeris(approx)
    jt_max = find_greatest_eclipse(ephem)
    if type is None:
        type = type_from_geometry(ephem, jt_max)
    verbose(f"greatest eclipse {ephem.ut_string(jt_max)} UT, {type.value}")
    return make_eclipse(Time(jt_max, format="jd", scale="tt"), type, delta_t)



KNOWN_ECLIPSES = {
    "2019-12-26": make_eclipse("2019-12-26 05:18:53", EclipseType.ANNULAR, 69.2),
    "2020-06-21": make_eclipse("2020-06-21 06:41:15", EclipseType.ANNULAR, 69.4),
    "2020-12-14": make_eclipse("2020-12-14 16:14:39", EclipseType.TOTAL, 69.4),
    "2021-06-10": make_eclipse("2021-06-10 10:43:06", EclipseType.ANNULAR, 69.2),
    "2021-12-04": make_eclipse("2021-12-04 07:34:38", EclipseType.TOTAL, 69.3),
    "2022-10-25": make_eclipse("2022-10-25 11:01:20", EclipseType.PARTIAL, 69.3),
    "2023-04-20": make_eclipse("2023-04-20 04:17:56", EclipseType.HYBRID, 69.2),
    "2024-04-08": make_eclipse("2024-04-08 18:18:29", EclipseType.TOTAL, 69.2),
    "2026-08-12": make_eclipse("2026-08-12 17:46:06", EclipseType.TOTAL, 69.1),
}


def get_eclipse(name: str) -> EclipseDescriptor:
    """
    Eclipse from catalog by date "YYYY-MM-DD", otherwise from time of greatest eclipse
    """
    if name in KNOWN_ECLIPSES:
        return KNOWN_ECLIPSES[name]
    return eclipse_from_time(name)



def main():
    arg = argparse.ArgumentParser(
        prog        = NAME,
        description = DESCRIPTION,
        epilog      = "Version " + VERSION + " / " + AUTHOR)
    arg.add_argument("-v", "--verbose", action="store_true", help="verbose messages")
    arg.add_argument("-d", "--debug", action="store_true", help="more debug messages")
    arg.add_argument("eclipse", nargs="?", default="2026-08-12", help="eclipse date or time of greatest eclipse (TT)")

    args = arg.parse_args()

    if args.debug:
        ic.enable()
        ic(sys.version_info, sys.path, args)
    if args.verbose:
        verbose.set_prog(NAME)
        verbose.enable()

    eclipse = get_eclipse(args.eclipse)
    ephem   = ephemeris_for(eclipse)
    jt_max  = find_greatest_eclipse(ephem)
    b       = ephem.bessel(jt_max)
    check_type(eclipse, ephem)

    message(f"Eclipse {eclipse}")
    message(f"Greatest eclipse {ephem.ut_string(jt_max)} UT, Delta T={ephem.delta_t:.1f} s")
    message(f"x={b.x:.6f} y={b.y:.6f} d={b.d:.5f} mu={b.mu:.5f}")
    message(f"l1={b.l1:.6f} l2={b.l2:.6f} tan_f1={b.tan_f1:.7f} tan_f2={b.tan_f2:.7f}")
    message(f"gamma={b.gamma:.4f}")



if __name__ == "__main__":
    main()
