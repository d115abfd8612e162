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
#       Spatial/temporal box of the visible eclipse from a coarse
#       full globe magnitude scan

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "ecllimits"
DESCRIPTION = "Limits of the visible solar eclipse"

from typing import Tuple

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from verbose import verbose, warning, error
from eclclasses import EclipseDescriptor, Limits, Settings, DegenerateEclipseError, normalize_lon
from eclephem import ephemeris_for
from eclsampler import Observers, magnitude_at, grid_axes



def longitude_range(columns: np.ndarray, lon_axis: np.ndarray, res: float) -> Tuple[float, float]:
    """
    Smallest longitude interval containing all nonempty columns of a
    full circle grid, i.e. the complement of the largest empty gap.
    The result is unwrapped, lon_max may exceed 180.

    Parameters
    ----------
    columns : np.ndarray
        Boolean flag per longitude column, True = nonempty
    lon_axis : np.ndarray
        Longitudes of the columns, equidistant over 360 degrees
    res : float
        Column spacing in degrees

    Returns
    -------
    Tuple[float, float]
        lon_min, lon_max
    """
    n = len(columns)
    idx = np.flatnonzero(columns)
    if len(idx) == n:
        return -180.0, 180.0 - res

    # Gaps between consecutive nonempty columns, circular
    nxt  = np.roll(idx, -1)
    gaps = (nxt - idx) % n
    if len(idx) == 1:
        gaps = np.array([n])
    k = int(np.argmax(gaps))
    first = nxt[k]                      # first column after the largest gap
    last  = idx[k]                      # last column before it
    lon_min = normalize_lon(lon_axis[first])
    width   = ((last - first) % n) * res
    return float(lon_min), float(lon_min + width)



def compute_limits(eclipse: EclipseDescriptor, spatial_res: float, temporal_res: float,
                   settings: Settings=None) -> Limits:
    """
    Compute limits for the penumbral path

    Samples the magnitude over the full globe within the search window
    around greatest eclipse and shrinks to the tightest box containing
    nonzero magnitude, plus margins.

    Parameters
    ----------
    eclipse : EclipseDescriptor
        The eclipse
    spatial_res : float
        Spatial resolution in degrees
    temporal_res : float
        Temporal resolution in days
    settings : Settings, optional
        Search window and margins, by default Settings()

    Returns
    -------
    Limits
        Spatial and temporal limits of the eclipse

    Raises
    ------
    DegenerateEclipseError
        No nonzero magnitude found
    """
    settings = settings or Settings()
    ephem = ephemeris_for(eclipse)

    lat_axis, lon_axis = grid_axes(-90, 90, -180, 180 - spatial_res, spatial_res)
    obs = Observers.grid(lat_axis, lon_axis)

    jt_start = eclipse.jt_max - settings.limits_window
    n_steps  = int(np.floor(2 * settings.limits_window / temporal_res + 1e-9)) + 1
    jts      = jt_start + temporal_res * np.arange(n_steps)

    visible = np.zeros(obs.shape, dtype=bool)
    times   = np.zeros(n_steps, dtype=bool)
    for k, jt in enumerate(jts):
        mag, _ = magnitude_at(ephem, obs, jt)
        nonzero = mag > 0
        if np.any(nonzero):
            times[k] = True
            visible |= nonzero

    if not np.any(times):
        raise DegenerateEclipseError(f"eclipse {eclipse}: no visible eclipse within "
                                     f"+/-{settings.limits_window * 24:.1f} h of maximum")

    rows = np.flatnonzero(visible.any(axis=1))
    t_idx = np.flatnonzero(times)
    lon_min, lon_max = longitude_range(visible.any(axis=0), lon_axis, spatial_res)

    m_deg  = settings.limits_margin_deg
    m_days = settings.limits_margin_days
    lon_min -= m_deg
    lon_max += m_deg
    if lon_max - lon_min >= 360:
        lon_min, lon_max = -180.0, 180.0

    limits = Limits(lat_min      = max(-90.0, float(lat_axis[rows[0]])  - m_deg),
                    lat_max      = min( 90.0, float(lat_axis[rows[-1]]) + m_deg),
                    lon_min      = lon_min,
                    lon_max      = lon_max,
                    jt_min       = float(jts[t_idx[0]])  - m_days,
                    jt_max       = float(jts[t_idx[-1]]) + m_days,
                    spatial_res  = spatial_res,
                    temporal_res = temporal_res)
    verbose(f"limits lat {limits.lat_min:.1f} .. {limits.lat_max:.1f}, "
            f"lon {limits.lon_min:.1f} .. {limits.lon_max:.1f}, "
            f"{(limits.jt_max - limits.jt_min) * 24:.2f} h")
    ic(limits)
    return limits
