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
#       Central line, local umbra extent,
#       north/south limits of the umbral path

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "ecllines"
DESCRIPTION = "Central line and umbral path of a solar eclipse"

import sys
import argparse

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from verbose import verbose, warning, error, message
from astroutils import cos
from eclclasses import EclipseDescriptor, Limits, GeoPoint, CentralLinePoint
from eclclasses import ContactPointSet, UmbralEnvelope, UmbraExtent, ContourSet
from eclephem import ephemeris_for, get_eclipse
from eclsampler import Observers, magnitude_from_vectors
from eclcontour import extract
import eclbessel


UMBRA_STEP      = 0.025         # degrees
UMBRA_LAT_RANGE = 2.0           # +/- degrees
UMBRA_LON_RANGE = 6.0
UMBRA_MAX_SCALE = 10.0          # cap for 1/cos(lat) near the poles
SECOND          = 1 / 86400



def time_range(limits: Limits, time_step: float) -> np.ndarray:
    """
    Times from limits.jt_min - temporal_res up to (excluding) limits.jt_max + temporal_res
    """
    start = limits.jt_min - limits.temporal_res
    end   = limits.jt_max + limits.temporal_res
    n = int(np.ceil((end - start) / time_step))
    jts = start + time_step * np.arange(n)
    return jts[jts < end]



def compute_central_line(eclipse: EclipseDescriptor, limits: Limits, time_step: float) -> list[CentralLinePoint]:
    """
    Compute central line, points where the shadow axis misses the Earth are skipped

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
    list[CentralLinePoint]
        Points with moon/sun size ratio, duration and width, empty for partial eclipses
    """
    ephem = ephemeris_for(eclipse)
    line = []
    for jt in time_range(limits, time_step):
        c = eclbessel.central_point(ephem.bessel(jt))
        if c is not None:
            line.append(c)
    verbose(f"central line {len(line)} points")
    return line



def compute_umbra_extent(lat: float, lon: float, sun_efi: np.ndarray, moon_efi: np.ndarray,
                         spatial_step: float=UMBRA_STEP) -> UmbraExtent:
    """
    Umbra around a point at one instant

    The window is +/-2 deg latitude and +/-6 deg longitude, scaled by
    1/|cos(lat)| and clamped to +/-90 deg latitude.

    Parameters
    ----------
    lat, lon : float
        Center of the window, degrees
    sun_efi, moon_efi : np.ndarray
        Earth-fixed Sun and Moon positions in km
    spatial_step : float, optional
        Grid spacing before scaling, by default 0.025 deg

    Returns
    -------
    UmbraExtent
        Grid with 1.0 inside the umbra
    """
    scale = min(1.0 / max(abs(float(cos(lat))), 1e-6), UMBRA_MAX_SCALE)
    step  = spatial_step * scale

    n_lat = int(np.floor(2 * UMBRA_LAT_RANGE / spatial_step + 1e-9)) + 1
    n_lon = int(np.floor(2 * UMBRA_LON_RANGE / spatial_step + 1e-9)) + 1
    lat_axis = lat - UMBRA_LAT_RANGE * scale + step * np.arange(n_lat)
    lon_axis = lon - UMBRA_LON_RANGE * scale + step * np.arange(n_lon)
    lat_axis = lat_axis[(lat_axis >= -90) & (lat_axis <= 90)]

    if len(lat_axis) == 0:
        grid = np.zeros((0, n_lon))
        return UmbraExtent(grid, lat, lat, float(lon_axis[0]), float(lon_axis[-1]), step, step)

    obs = Observers.grid(lat_axis, lon_axis)
    _, in_umbra = magnitude_from_vectors(sun_efi, moon_efi, obs)
    return UmbraExtent(grid=in_umbra,
                       lat_min=float(lat_axis[0]), lat_max=float(lat_axis[-1]),
                       lon_min=float(lon_axis[0]), lon_max=float(lon_axis[-1]),
                       lat_step=step, lon_step=step)


def umbra_outline(extent: UmbraExtent) -> ContourSet:
    """
    Outline of the umbra extent, contour at level 1.0
    """
    if extent.grid.size == 0:
        return {1.0: []}
    return extract(extent.lat_min, extent.lat_max, extent.lon_min, extent.lon_max,
                   extent.lat_step, extent.grid, [1.0])



def envelope_times(eclipse: EclipseDescriptor, limits: Limits, contacts: ContactPointSet,
                   time_step: float) -> list[float]:
    """
    Sample times for the umbral envelope, adaptive step size depending on zeta
    """
    ephem = ephemeris_for(eclipse)
    p2 = contacts.first_umbra
    p3 = contacts.last_umbra
    if not p2.found:
        return []

    jts = [ p2.jt + 2*SECOND, p2.jt + 12*SECOND ]

    jt  = limits.jt_min - limits.temporal_res
    end = limits.jt_max + limits.temporal_res
    while jt < end:
        b = ephem.bessel(jt)
        _, _, zeta = eclbessel.fundamental_to_geodetic(b, b.x, b.y)
        if np.isnan(zeta):
            jt += time_step
        else:
            jts.append(jt)
            jt += time_step * 5 * float(zeta) + SECOND

    if p3.found:
        jts += [ p3.jt - 22*SECOND, p3.jt - 2*SECOND ]

    return sorted(set(jts))


def compute_umbral_envelope(eclipse: EclipseDescriptor, limits: Limits, contacts: ContactPointSet,
                            time_step: float, spatial_step: float=UMBRA_STEP) -> UmbralEnvelope:
    """
    Compute north and south limits of the umbral path

    At each sample time the umbra extent around the central line point is
    scanned for the extreme points across the direction of motion.

    Parameters
    ----------
    eclipse : EclipseDescriptor
        The eclipse
    limits : Limits
        Time range
    contacts : ContactPointSet
        Contacts, P2 absent gives an empty envelope
    time_step : float
        Base time step in days

    Returns
    -------
    UmbralEnvelope
        North and south polylines
    """
    ephem = ephemeris_for(eclipse)
    envelope = UmbralEnvelope()

    for jt in envelope_times(eclipse, limits, contacts, time_step):
        p      = axis_point(ephem, jt)
        p_plus = axis_point(ephem, jt + SECOND)
        if p is None or p_plus is None:
            continue

        # Direction of motion (lat, lon), orthogonal direction pointing north
        d_lat = p_plus.lat - p.lat
        d_lon = (p_plus.lon - p.lon + 180) % 360 - 180
        norm  = np.hypot(d_lat, d_lon)
        if norm == 0:
            continue
        orth = np.array([ d_lon, -d_lat ]) / norm
        if orth[0] < 0:
            orth = -orth

        sun, moon = ephem.sun_moon_efi(jt)
        extent = compute_umbra_extent(p.lat, p.lon, sun, moon, spatial_step)
        rows, cols = np.nonzero(extent.grid)
        if len(rows) == 0:
            continue
        lats = extent.lat_min + rows * extent.lat_step
        lons = extent.lon_min + cols * extent.lon_step
        dist = (lats - p.lat) * orth[0] + (lons - p.lon) * orth[1]
        i_max = int(np.argmax(dist))
        i_min = int(np.argmin(dist))
        envelope.north.append( GeoPoint(float(lats[i_max]), float(lons[i_max])).normalized() )
        envelope.south.append( GeoPoint(float(lats[i_min]), float(lons[i_min])).normalized() )

    verbose(f"umbral envelope {len(envelope.north)} points")
    return envelope


def axis_point(ephem, jt: float) -> GeoPoint | None:
    """Surface point of the shadow axis, None if it misses the Earth"""
    b = ephem.bessel(jt)
    return eclbessel.fundamental_to_point(b, b.x, b.y)



def main():
    arg = argparse.ArgumentParser(
        prog        = NAME,
        description = DESCRIPTION,
        epilog      = "Version " + VERSION + " / " + AUTHOR)
    arg.add_argument("-v", "--verbose", action="store_true", help="verbose messages")
    arg.add_argument("-d", "--debug", action="store_true", help="more debug messages")
    arg.add_argument("-e", "--eclipse", default="2026-08-12", help="eclipse date or time of greatest eclipse (TT)")

    args = arg.parse_args()

    if args.debug:
        ic.enable()
        ic(sys.version_info, sys.path, args)
    if args.verbose:
        verbose.set_prog(NAME)
        verbose.enable()

    eclipse = get_eclipse(args.eclipse)
    ephem   = ephemeris_for(eclipse)
    # +/- 2 h around greatest eclipse, 1 min intervals
    limits  = Limits(-90, 90, -180, 180, eclipse.jt_max - 2/24, eclipse.jt_max + 2/24, 1.0, 1/1440)

    message("===================================================================")
    message("Time (UT)                longitude  latitude  magnitude  duration  width")
    message("-----------------------  ---------  --------  ---------  --------  -----")
    for c in compute_central_line(eclipse, limits, 1/1440):
        message(f"{ephem.ut_string(c.jt)}  {c.point.lon:9.4f}  {c.point.lat:8.4f}  {c.ratio:.5f}    {c.duration:5.1f}   {c.width:5.1f}")



if __name__ == "__main__":
    main()
