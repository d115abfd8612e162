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
#       Captions for maximum lines and magnitude levels

VERSION     = "0.1 / 2026-10-19"
AUTHOR      = "Martin Junius"
NAME        = "eclcaptions"
DESCRIPTION = "Captions for eclipse maps"

from typing import Iterable, Tuple

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np

# Local modules
from verbose import verbose, warning, error
from astroutils import jt_to_hhmm
from eclclasses import Caption, ContourSet
from eclephem import Ephemeris
from eclsampler import Observers, magnitude_from_vectors


CAPTION_LEVELS = (0.2, 0.4, 0.6, 0.8)
# Offsets of the label from the point it belongs to, degrees (lat, lon)
MAX_OFFSET = (-3.0, -2.0)
MAG_OFFSET = ( 0.5,  1.0)



def create_mag_captions(der_contours: ContourSet, ephem: Ephemeris,
                        levels: Iterable[float]=CAPTION_LEVELS) -> Tuple[list[Caption], list[Caption]]:
    """
    Create captions for the maximum lines and the magnitude levels

    Every maximum line (zero contour of the magnitude time derivative) with
    more than one segment gets a time caption at its first segment. The
    longest maximum line gets "0.0" at both ends and a caption at each
    magnitude level crossed along it.

    Parameters
    ----------
    der_contours : ContourSet
        Time (JT) -> segments of the maximum line
    ephem : Ephemeris
        Ephemeris for the magnitude along the longest line and Delta T
    levels : Iterable[float], optional
        Magnitude levels to label, by default 0.2, 0.4, 0.6, 0.8

    Returns
    -------
    Tuple[list[Caption], list[Caption]]
        magnitude captions, maximum line captions
    """
    mag_captions = []
    max_captions = []
    if not der_contours:
        return mag_captions, max_captions

    jt_longest = None
    n_longest  = 0
    for jt, lines in der_contours.items():
        if len(lines) > n_longest:
            n_longest  = len(lines)
            jt_longest = jt
        if len(lines) > 1:
            p = lines[0][0]
            max_captions.append(Caption(p.lat + MAX_OFFSET[0], p.lon + MAX_OFFSET[1],
                                        jt_to_hhmm(jt, ephem.delta_t)))

    if jt_longest is None:
        return mag_captions, max_captions

    lines = der_contours[jt_longest]
    first = lines[0][0]
    last  = lines[-1][1]
    mag_captions.append(Caption(first.lat + MAG_OFFSET[0], first.lon + MAG_OFFSET[1], "0.0"))
    mag_captions.append(Caption(last.lat  + MAG_OFFSET[0], last.lon  + MAG_OFFSET[1], "0.0"))

    # Magnitude at segment start and end points
    sun, moon = ephem.sun_moon_efi(jt_longest)
    start = Observers([ s[0].lat for s in lines ], [ s[0].lon for s in lines ])
    end   = Observers([ s[1].lat for s in lines ], [ s[1].lon for s in lines ])
    mag_start, _ = magnitude_from_vectors(sun, moon, start)
    mag_end, _   = magnitude_from_vectors(sun, moon, end)

    for (p, _), v0, v1 in zip(lines, mag_start, mag_end):
        for level in levels:
            if np.sign(v0 - level) != np.sign(v1 - level):
                mag_captions.append(Caption(p.lat + MAG_OFFSET[0], p.lon + MAG_OFFSET[1], str(level)))

    ic(mag_captions, max_captions)
    verbose(f"captions {len(mag_captions)} magnitude, {len(max_captions)} maximum lines")
    return mag_captions, max_captions
