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
#       Marching squares contours on lat/lon grids, linear interpolation,
#       saddle cells resolved by the cell mean, conversion to Cartesian points

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclcontour"
DESCRIPTION = "Contour extraction for eclipse scalar fields"

from typing import Iterable

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from verbose import verbose, warning, error
from eclclasses import GeoPoint, ContourSet, Segment, normalize_lon, segments_to_efi


# Cell corners: bit 0 = bottom left, 1 = bottom right, 2 = top right, 3 = top left
# Cell edges:   0 = bottom, 1 = right, 2 = top, 3 = left
EDGE_TABLE = {
     1: [(3, 0)],
     2: [(0, 1)],
     3: [(3, 1)],
     4: [(1, 2)],
     6: [(0, 2)],
     7: [(3, 2)],
     8: [(2, 3)],
     9: [(0, 2)],
    11: [(1, 2)],
    12: [(1, 3)],
    13: [(0, 1)],
    14: [(3, 0)],
}
# Saddles, (mean above, mean below)
SADDLE_TABLE = {
     5: ([(0, 1), (3, 2)], [(3, 0), (1, 2)]),
    10: ([(3, 0), (1, 2)], [(0, 1), (2, 3)]),
}

# Default height for Cartesian contour points
CONTOUR_HEIGHT = 10000.0        # m



def _interp(level: float, v0: np.ndarray, v1: np.ndarray) -> np.ndarray:
    # Fraction of the way from v0 to v1 where the level is crossed
    dv = v1 - v0
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(dv != 0, (level - v0) / np.where(dv != 0, dv, 1), 0.5)
    return np.clip(t, 0, 1)


def extract_level(lat_min: float, lon_min: float, spatial_res: float,
                  grid: np.ndarray, level: float) -> list[Segment]:
    """
    Marching squares for one threshold level

    Parameters
    ----------
    lat_min : float
        Latitude of grid row 0
    lon_min : float
        Longitude of grid column 0
    spatial_res : float
        Grid spacing in degrees
    grid : np.ndarray
        Samples, (lat rows, lon columns)
    level : float
        Threshold, values >= level count as above

    Returns
    -------
    list[Segment]
        Line segments in row-major cell order
    """
    grid = np.asarray(grid, dtype=float)
    if grid.ndim != 2 or grid.shape[0] < 2 or grid.shape[1] < 2:
        return []

    bl = grid[:-1, :-1]
    br = grid[:-1, 1:]
    tr = grid[1:, 1:]
    tl = grid[1:, :-1]

    case = ( (bl >= level) * 1 + (br >= level) * 2 +
             (tr >= level) * 4 + (tl >= level) * 8 )
    valid = ~(np.isnan(bl) | np.isnan(br) | np.isnan(tr) | np.isnan(tl))
    active = valid & (case != 0) & (case != 15)
    if not np.any(active):
        return []

    # Crossing points on all four edges, as fractions along the edge
    t_bottom = _interp(level, bl, br)
    t_right  = _interp(level, br, tr)
    t_top    = _interp(level, tl, tr)
    t_left   = _interp(level, bl, tl)
    center_above = (bl + br + tr + tl) / 4 >= level

    segments = []
    # np.nonzero() returns indices in row-major (C) order
    for i, j in zip(*np.nonzero(active)):
        lat0 = lat_min + i * spatial_res
        lon0 = lon_min + j * spatial_res

        def edge_point(edge: int) -> GeoPoint:
            if edge == 0:
                lat, lon = lat0, lon0 + t_bottom[i, j] * spatial_res
            elif edge == 1:
                lat, lon = lat0 + t_right[i, j] * spatial_res, lon0 + spatial_res
            elif edge == 2:
                lat, lon = lat0 + spatial_res, lon0 + t_top[i, j] * spatial_res
            else:
                lat, lon = lat0 + t_left[i, j] * spatial_res, lon0
            return GeoPoint(float(lat), float(normalize_lon(lon)))

        c = int(case[i, j])
        if c in SADDLE_TABLE:
            edges = SADDLE_TABLE[c][0 if center_above[i, j] else 1]
        else:
            edges = EDGE_TABLE[c]
        for e0, e1 in edges:
            segments.append( (edge_point(e0), edge_point(e1)) )

    return segments


def extract(lat_min: float, lat_max: float, lon_min: float, lon_max: float, spatial_res: float,
            grid: np.ndarray, levels: Iterable[float], scale=None) -> ContourSet:
    """
    Contours for several threshold levels

    Parameters
    ----------
    lat_min, lat_max : float
        Latitude range of the grid rows
    lon_min, lon_max : float
        Longitude range of the grid columns, may be unwrapped (> 180)
    spatial_res : float
        Grid spacing in degrees
    grid : np.ndarray
        Samples, (lat rows, lon columns)
    levels : Iterable[float]
        Threshold levels
    scale : float | Iterable[float], optional
        Multiplier(s) applied to the samples before comparison with each
        level, a single value is used for all levels, by default None

    Returns
    -------
    ContourSet
        Level -> list of segments
    """
    levels = [ float(l) for l in levels ]
    if scale is None:
        scales = [ 1.0 ] * len(levels)
    elif np.ndim(scale) == 0:
        scales = [ float(scale) ] * len(levels)
    else:
        scales = [ float(s) for s in scale ]
        if len(scales) == 1:
            scales = scales * len(levels)
        if len(scales) != len(levels):
            raise ValueError(f"{len(scales)} scale values for {len(levels)} levels")

    grid = np.asarray(grid, dtype=float)
    ic(lat_min, lat_max, lon_min, lon_max, spatial_res, grid.shape)
    contours = {}
    for level, s in zip(levels, scales):
        contours[level] = extract_level(lat_min, lon_min, spatial_res, grid * s, level)
        verbose(f"contour level {level}: {len(contours[level])} segments")
    return contours



def contour_to_points(contours: ContourSet, height: float=CONTOUR_HEIGHT) -> list[list[list[float]]]:
    """
    Convert ContourSet to lists of Cartesian point pairs (km), one list per level
    """
    return [ segments_to_efi(segs, height) for segs in contours.values() ]
