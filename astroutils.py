#!/usr/bin/env python

# Copyright 2024-2026 Martin Junius
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
# Version 0.1 / 2025-01-27
#       Utility functions moved to this module
# Version 0.2 / 2026-10-19
#       Reworked for the eclipse modules: Earth/Sun/Moon constants,
#       degree trigonometry, Delta T, JT time formatting, vectorized
#       geodetic to Earth-fixed conversion

import warnings

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

# AstroPy
from astropy.coordinates import EarthLocation
import astropy.units as u
from astropy.time        import Time
from astropy.utils       import iers
import numpy as np

# Local modules
from verbose import verbose, warning, error


VERSION = "0.2 / 2026-10-19"
AUTHOR  = "Martin Junius"
NAME    = "astroutils"


# No IERS downloads, computations must work offline
iers.conf.auto_download = False
iers.conf.iers_degraded_accuracy = "warn"


# Earth equatorial radius
R_earth = 6378.137 * u.km           # GRS 80/WGS 84 value (Wikipedia)
                                    # https://en.wikipedia.org/wiki/World_Geodetic_System
f_earth  = 1 / 298.257223563        # WGS 84 flattening
e2_earth = f_earth * (2 - f_earth)  # eccentricity squared
# Moon equatorial radius
R_moon = 0.272281  * R_earth        # smaller value from https://eclipse.gsfc.nasa.gov/SEpubs/20080801/TP214149b.pdf
# Sun radius, see SEML and https://iopscience.iop.org/article/10.3847/1538-4365/ac1279
S_sun2 = 959.95 * u.arcsec
R_sun2 = np.sin(S_sun2) * 1 * u.au

# Plain float values in km for the numpy computations
R_EARTH_KM = R_earth.to_value(u.km)
R_MOON_KM  = R_moon.to_value(u.km)
R_SUN_KM   = R_sun2.to_value(u.km)
K_MOON     = 0.272281               # Moon radius in Earth radii



# Trigonometry using degree, as in Meeus
def sin(w):         return np.sin( np.deg2rad(w) )
def cos(w):         return np.cos( np.deg2rad(w) )
def tan(w):         return np.tan( np.deg2rad(w) )
def atan2(y, x):    return np.rad2deg( np.atan2(y, x) )
def asin(x):        return np.rad2deg( np.asin(x) )
def acos(x):        return np.rad2deg( np.acos(x) )
def atan(x):        return np.rad2deg( np.atan(x) )
def sqrt(x):        return np.sqrt(x)
def sq(x):          return x*x



def jt_to_time(jt) -> Time:
    """
    Convert Julian time (JD, TT) to astropy Time object

    :param jt: Julian date(s) in TT
    :type jt: float | np.ndarray
    :return: time object
    :rtype: Time
    """
    return Time(jt, format="jd", scale="tt")


def delta_t_for(time: Time) -> float:
    """
    Get Delta T = TT - UT1 for time

    Uses astropy's IERS tables, outside the table range falls back
    to the polynomial approximation from https://de.wikipedia.org/wiki/Delta_T

    :param time: time object
    :type time: Time
    :return: Delta T in s
    :rtype: float
    """
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", iers.IERSDegradedAccuracyWarning)
            delta_t = (time.tt.jd - time.ut1.jd) * 86400
    except (iers.IERSRangeError, iers.IERSDegradedAccuracyWarning):
        ymd = time.tt.ymdhms
        y = ymd.year + (ymd.month - 0.5) / 12
        delta_t = 67.62 + 0.3645 * (y - 2015) + 0.0039755 * (y - 2015)**2
        warning(f"no IERS data for {time.iso}, approximated Delta T={delta_t:.1f} s")
    ic(time, delta_t)
    return float(delta_t)


def jt_to_ut_string(jt: float, delta_t: float, subfmt: str="date_hms") -> str:
    """
    Format Julian time (TT) as UT string

    :param jt: Julian date in TT
    :type jt: float
    :param delta_t: TT - UT1 in s
    :type delta_t: float
    :param subfmt: astropy iso sub-format, "date_hms", "date_hm", "date"
    :type subfmt: str
    :return: formatted time
    :rtype: str
    """
    t = Time(jt - delta_t / 86400, format="jd", scale="ut1")
    return t.to_value("iso", subfmt=subfmt)


def jt_to_hhmm(jt: float, delta_t: float) -> str:
    """Hours and minutes (UT) of Julian time"""
    return jt_to_ut_string(jt, delta_t, "date_hm")[-5:]


def jt_to_timestamp(jt: float) -> str:
    """ISO timestamp "YYYY-MM-DDTHH:MM:SS" of Julian time (TT)"""
    return jt_to_time(jt).to_value("isot", subfmt="date_hms")[:19]



def geodetic_to_efi(lat, lon, height=0.0) -> np.ndarray:
    """
    Convert geodetic WGS84 coordinates to Earth-centered Earth-fixed Cartesian

    :param lat: latitude(s) in degrees
    :type lat: float | np.ndarray
    :param lon: longitude(s) in degrees
    :type lon: float | np.ndarray
    :param height: height(s) in m, defaults to 0.0
    :type height: float | np.ndarray, optional
    :return: positions in km, shape lat.shape + (3,)
    :rtype: np.ndarray
    """
    loc = EarthLocation.from_geodetic(lon=np.asarray(lon) * u.deg,
                                      lat=np.asarray(lat) * u.deg,
                                      height=np.asarray(height) * u.m,
                                      ellipsoid="WGS84")
    return np.stack([ loc.x.to_value(u.km), loc.y.to_value(u.km), loc.z.to_value(u.km) ], axis=-1)


def geodetic_up(lat, lon) -> np.ndarray:
    """
    Local vertical (ellipsoid normal) as unit vector in the Earth-fixed frame

    :param lat: latitude(s) in degrees
    :param lon: longitude(s) in degrees
    :return: unit vectors, shape lat.shape + (3,)
    :rtype: np.ndarray
    """
    lat = np.asarray(lat, dtype=float)
    lon = np.asarray(lon, dtype=float)
    return np.stack([ cos(lat) * cos(lon), cos(lat) * sin(lon), sin(lat) ], axis=-1)


def rotate_z(v: np.ndarray, angle) -> np.ndarray:
    """
    Rotate vectors (last axis x, y, z) about the z axis by -angle,
    i.e. transform into a frame rotated by angle

    :param v: vectors, shape (..., 3)
    :param angle: rotation angle(s) in degrees
    :return: rotated vectors
    """
    c = cos(angle)
    s = sin(angle)
    x = v[..., 0]
    y = v[..., 1]
    return np.stack([ c*x + s*y, -s*x + c*y, v[..., 2] ], axis=-1)



if __name__ == "__main__":
    error("no main() function")
