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
#       Vectorized eclipse magnitude from topocentric Sun/Moon sizes and
#       separation, umbra membership, magnitude time derivative, grids
#       of maximum magnitude over a time range

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclsampler"
DESCRIPTION = "Scalar fields of solar eclipse magnitude"

import sys
import argparse
from typing import Tuple

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from verbose import verbose, warning, error, message
from astroutils import geodetic_to_efi, geodetic_up, R_SUN_KM, R_MOON_KM
from eclclasses import FieldQuantity
from eclephem import Ephemeris, get_eclipse, ephemeris_for


DERIVATIVE_STEP = 1 / 1440      # 1 min



class Observers:
    """
    Observer positions and local verticals for a set of geodetic points,
    computed once and reused for all time steps
    """

    def __init__(self, lat, lon, height=0.0):
        self.lat = np.asarray(lat, dtype=float)
        self.lon = np.asarray(lon, dtype=float)
        self.shape = np.broadcast_shapes(self.lat.shape, self.lon.shape)
        lat, lon = np.broadcast_arrays(self.lat, self.lon)
        self.pos = geodetic_to_efi(lat, lon, height)     # km
        self.up  = geodetic_up(lat, lon)

    @classmethod
    def grid(cls, lat_axis, lon_axis) -> "Observers":
        """Observers on a (lat rows, lon columns) grid"""
        lon, lat = np.meshgrid(np.asarray(lon_axis, dtype=float), np.asarray(lat_axis, dtype=float))
        return cls(lat, lon)



def magnitude_from_vectors(sun: np.ndarray, moon: np.ndarray, obs: Observers) -> Tuple[np.ndarray, np.ndarray]:
    """
    Eclipse magnitude and umbra flag for observers, from Earth-fixed Sun/Moon positions

    Parameters
    ----------
    sun : np.ndarray
        Sun position in km, shape (3,)
    moon : np.ndarray
        Moon position in km, shape (3,)
    obs : Observers
        Observer positions

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        magnitude, in_umbra (1.0/0.0), shape obs.shape
    """
    r_sun  = np.asarray(sun)  - obs.pos
    r_moon = np.asarray(moon) - obs.pos
    d_sun  = np.linalg.norm(r_sun,  axis=-1)
    d_moon = np.linalg.norm(r_moon, axis=-1)

    # Topocentric angular radii and separation
    s_sun  = np.asin(R_SUN_KM  / d_sun)
    s_moon = np.asin(R_MOON_KM / d_moon)
    sep    = np.atan2( np.linalg.norm(np.cross(r_sun, r_moon), axis=-1),
                       np.sum(r_sun * r_moon, axis=-1) )

    # Sun's altitude, must not be below minus its angular radius
    sin_alt = np.sum(r_sun * obs.up, axis=-1) / d_sun
    visible = sin_alt >= -np.sin(s_sun)

    inside  = sep <= np.abs(s_sun - s_moon)
    overlap = sep < s_sun + s_moon
    mag = np.where(inside, s_moon / s_sun, (s_sun + s_moon - sep) / (2 * s_sun))
    mag = np.where(visible & overlap, mag, 0.0)
    in_umbra = np.where(visible & inside, 1.0, 0.0)

    return mag, in_umbra


def sun_altitude(sun: np.ndarray, obs: Observers) -> np.ndarray:
    """Sun's geometric altitude in degrees"""
    r_sun = np.asarray(sun) - obs.pos
    sin_alt = np.sum(r_sun * obs.up, axis=-1) / np.linalg.norm(r_sun, axis=-1)
    return np.rad2deg(np.asin(np.clip(sin_alt, -1, 1)))



def magnitude_at(ephem: Ephemeris, obs: Observers, jt: float) -> Tuple[np.ndarray, np.ndarray]:
    sun, moon = ephem.sun_moon_efi(jt)
    return magnitude_from_vectors(sun, moon, obs)


def magnitude_derivative_at(ephem: Ephemeris, obs: Observers, jt: float,
                            epsilon: float=DERIVATIVE_STEP) -> np.ndarray:
    """
    Magnitude change over epsilon, NaN where the magnitude is zero at both times
    """
    mag, _      = magnitude_at(ephem, obs, jt)
    mag_plus, _ = magnitude_at(ephem, obs, jt + epsilon)
    der = mag_plus - mag
    return np.where((mag == 0) & (mag_plus == 0), np.nan, der)


def sample_observers(quantity: FieldQuantity, ephem: Ephemeris, obs: Observers, jt: float,
                     epsilon: float=DERIVATIVE_STEP) -> np.ndarray:
    quantity = FieldQuantity(quantity)
    if quantity is FieldQuantity.MAGNITUDE_DERIVATIVE:
        return magnitude_derivative_at(ephem, obs, jt, epsilon)
    mag, in_umbra = magnitude_at(ephem, obs, jt)
    return mag if quantity is FieldQuantity.MAGNITUDE else in_umbra


def sample(quantity: FieldQuantity, ephem: Ephemeris, lat, lon, jt: float,
           epsilon: float=DERIVATIVE_STEP):
    """
    Sample scalar field at geodetic point(s) and time

    Parameters
    ----------
    quantity : FieldQuantity
        MAGNITUDE, IN_UMBRA or MAGNITUDE_DERIVATIVE (or their string values)
    ephem : Ephemeris
        Ephemeris of the eclipse
    lat : float | np.ndarray
        Latitude(s) in degrees
    lon : float | np.ndarray
        Longitude(s) in degrees
    jt : float
        Julian time (TT)
    epsilon : float, optional
        Time step for the derivative, by default 1 min

    Returns
    -------
    float | np.ndarray
        Value(s), float for scalar input
    """
    obs = Observers(lat, lon)
    value = sample_observers(quantity, ephem, obs, jt, epsilon)
    return float(value) if np.ndim(value) == 0 else value



def grid_axes(lat_min: float, lat_max: float, lon_min: float, lon_max: float,
              res: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Latitude and longitude axes of a grid, both ends included
    """
    n_lat = int(np.floor((lat_max - lat_min) / res + 1e-9)) + 1
    n_lon = int(np.floor((lon_max - lon_min) / res + 1e-9)) + 1
    return lat_min + res * np.arange(n_lat), lon_min + res * np.arange(n_lon)


def max_magnitude_grid(ephem: Ephemeris, lat_axis: np.ndarray, lon_axis: np.ndarray,
                       jt_min: float, jt_max: float, step: float,
                       cancelled=None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Maximum magnitude and umbra flag over time range for all grid points

    Parameters
    ----------
    ephem : Ephemeris
        Ephemeris of the eclipse
    lat_axis : np.ndarray
        Latitudes (rows)
    lon_axis : np.ndarray
        Longitudes (columns)
    jt_min, jt_max : float
        Time range (TT), both included
    step : float
        Time step in days
    cancelled : callable, optional
        Polled once per time step, returns True to stop early

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        magnitude, in_umbra grids
    """
    obs = Observers.grid(lat_axis, lon_axis)
    mag_max   = np.zeros(obs.shape)
    umbra_max = np.zeros(obs.shape)
    n = int(np.floor((jt_max - jt_min) / step + 1e-9)) + 1
    for jt in jt_min + step * np.arange(n):
        if cancelled and cancelled():
            break
        mag, in_umbra = magnitude_at(ephem, obs, jt)
        np.maximum(mag_max, mag, out=mag_max)
        np.maximum(umbra_max, in_umbra, out=umbra_max)
    ic(mag_max.max(), umbra_max.max())
    return mag_max, umbra_max


def derivative_grid(ephem: Ephemeris, lat_axis: np.ndarray, lon_axis: np.ndarray, jt: float,
                    epsilon: float=DERIVATIVE_STEP) -> np.ndarray:
    """
    Magnitude time derivative grid at time jt
    """
    obs = Observers.grid(lat_axis, lon_axis)
    return magnitude_derivative_at(ephem, obs, jt, epsilon)



def main():
    arg = argparse.ArgumentParser(
        prog        = NAME,
        description = DESCRIPTION,
        epilog      = "Version " + VERSION + " / " + AUTHOR)
    arg.add_argument("-v", "--verbose", action="store_true", help="verbose messages")
    arg.add_argument("-d", "--debug", action="store_true", help="more debug messages")
    arg.add_argument("-e", "--eclipse", default="2026-08-12", help="eclipse date or time of greatest eclipse (TT)")
    arg.add_argument("lat", type=float, help="latitude in degrees")
    arg.add_argument("lon", type=float, help="longitude in degrees")

    args = arg.parse_args()

    if args.debug:
        ic.enable()
        ic(sys.version_info, sys.path, args)
    if args.verbose:
        verbose.set_prog(NAME)
        verbose.enable()

    eclipse = get_eclipse(args.eclipse)
    ephem   = ephemeris_for(eclipse)

    # Local circumstances at 1 min intervals, +/- 3 h
    message("Time (UT)                magnitude  umbra")
    for jt in eclipse.jt_max + np.linspace(-3/24, 3/24, 6*60+1):
        mag = sample(FieldQuantity.MAGNITUDE, ephem, args.lat, args.lon, jt)
        if mag > 0:
            umbra = sample(FieldQuantity.IN_UMBRA, ephem, args.lat, args.lon, jt)
            message(f"{ephem.ut_string(jt)}  {mag:.4f}     {'*' if umbra else ''}")



if __name__ == "__main__":
    main()
