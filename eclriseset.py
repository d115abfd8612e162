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
#       Penumbral limits at sunrise/sunset, maximum eclipse at sunrise/sunset

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclriseset"
DESCRIPTION = "Sunrise/sunset curves of a solar eclipse"

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from verbose import verbose, warning, error
from eclclasses import EclipseDescriptor, Limits, ContactPointSet, GeoPoint
from eclclasses import RiseSetCurves, MaxRiseSetCurves
from eclephem import ephemeris_for
from eclsampler import Observers, magnitude_from_vectors, sun_altitude, DERIVATIVE_STEP
from ecllines import time_range
import eclbessel


ANGLE_STEP  = 0.1               # degrees along the limb
MIN_MAG     = 0.005             # ignore maxima below this magnitude
LOOK_AHEAD  = 1 / 24            # classify rise/set by Sun's altitude 1 h later



def compute_rise_set(eclipse: EclipseDescriptor, limits: Limits, contacts: ContactPointSet,
                     time_step: float) -> RiseSetCurves:
    """
    Compute rise and set curves

    The intersections of the penumbra with the Earth limb are the points
    where the eclipse begins or ends at the horizon. A point belongs to the
    sunrise side if the Sun is above the horizon there 1 hour later.

    Parameters
    ----------
    eclipse : EclipseDescriptor
        The eclipse
    limits : Limits
        Time range
    contacts : ContactPointSet
        Contact points, if given only times between P1 and P4 are scanned
    time_step : float
        Time step in days

    Returns
    -------
    RiseSetCurves
        Sunrise and sunset sides, two branches each
    """
    ephem = ephemeris_for(eclipse)
    curves = RiseSetCurves()

    jts = time_range(limits, time_step)
    if contacts and contacts.first_penumbra.found and contacts.last_penumbra.found:
        jts = jts[(jts >= contacts.first_penumbra.jt - time_step) & (jts <= contacts.last_penumbra.jt + time_step)]

    for jt in jts:
        b = ephem.bessel(jt)
        points = eclbessel.limb_intersections(b)
        if not points:
            continue
        sun_plus, _ = ephem.sun_moon_efi(jt + LOOK_AHEAD)
        for branch, (xi, eta) in enumerate(points):
            lat, lon, _ = eclbessel.fundamental_to_geodetic(b, xi, eta, clip=True)
            p = GeoPoint(float(lat), float(lon))
            alt = sun_altitude(sun_plus, Observers(p.lat, p.lon))
            side = curves.rise if alt > 0 else curves.set
            side[branch].append(p)

    verbose(f"rise/set curves {sum(len(b) for b in curves.rise)} rise, "
            f"{sum(len(b) for b in curves.set)} set points")
    return curves



def compute_max_rise_set(eclipse: EclipseDescriptor, limits: Limits, time_step: float) -> MaxRiseSetCurves:
    """
    Compute curves of maximum eclipse at sunrise/sunset

    Along the Earth limb the magnitude time derivative changes its sign
    where the maximum happens at the horizon.

    Parameters
    ----------
    eclipse : EclipseDescriptor
        The eclipse
    limits : Limits
        Time range
    time_step : float
        Time step in days

    Returns
    -------
    MaxRiseSetCurves
        Rise and set points, ordered by latitude
    """
    ephem  = ephemeris_for(eclipse)
    angles = np.arange(0, 360 + ANGLE_STEP/2, ANGLE_STEP)
    rise   = []
    set_   = []

    for jt in time_range(limits, time_step):
        b = ephem.bessel(jt)
        xi, eta = eclbessel.limb_points(b, angles)
        lat, lon, _ = eclbessel.fundamental_to_geodetic(b, xi, eta, clip=True)
        obs = Observers(lat, lon)

        sun, moon           = ephem.sun_moon_efi(jt)
        sun_plus, moon_plus = ephem.sun_moon_efi(jt + DERIVATIVE_STEP)
        mag, _      = magnitude_from_vectors(sun, moon, obs)
        mag_plus, _ = magnitude_from_vectors(sun_plus, moon_plus, obs)
        der = mag_plus - mag

        flip = (np.sign(der[1:]) != np.sign(der[:-1])) & (mag[1:] > MIN_MAG)
        if not np.any(flip):
            continue
        idx = np.flatnonzero(flip) + 1
        rising = sun_altitude(sun_plus, obs)[idx] > sun_altitude(sun, obs)[idx]
        for i, r in zip(idx, rising):
            p = GeoPoint(float(lat[i]), float(lon[i]))
            (rise if r else set_).append(p)

    curves = MaxRiseSetCurves(rise=sorted(rise, key=lambda p: p.lat),
                              set=sorted(set_, key=lambda p: p.lat))
    verbose(f"max rise/set curves {len(curves.rise)} rise, {len(curves.set)} set points")
    return curves
