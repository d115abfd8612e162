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
#       Quick-look map of an eclipse state,
#       plain lon/lat axes instead of Basemap

VERSION = "0.1 / 2026-10-19"
AUTHOR  = "Martin Junius"
NAME    = "eclplot"

# The following libs must be installed with pip
from icecream import ic
# Disable debugging
ic.disable()

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection

# Local modules
from verbose import verbose, warning, error
from eclclasses import StateBundle, Segment, GeoPoint



def _lines(segments: list[Segment]) -> list[list[tuple[float, float]]]:
    # (lon, lat) pairs, drop segments jumping across the date line
    return [ [ (a.lon, a.lat), (b.lon, b.lat) ] for a, b in segments if abs(a.lon - b.lon) < 180 ]


def _polyline(points: list[GeoPoint]) -> list[Segment]:
    return list(zip(points[:-1], points[1:]))



def plot_state(state: StateBundle, filename: str) -> None:
    """
    Plot eclipse map: magnitude contours, umbra, central line, rise/set
    curves, maximum lines, contacts, captions

    Parameters
    ----------
    state : StateBundle
        Computed eclipse state
    filename : str
        File name for generated PNG
    """
    verbose(f"plotting {state.title} to {filename}")
    fig = plt.figure(figsize=(16, 9), dpi=150)
    ax  = fig.add_subplot()

    for level, segs in state.contours.items():
        ax.add_collection(LineCollection(_lines(segs), colors="tab:orange", linewidths=0.8))
    for level, segs in state.umbra_contours.items():
        ax.add_collection(LineCollection(_lines(segs), colors="tab:red", linewidths=1.2))
    for jt, segs in state.der_contours.items():
        ax.add_collection(LineCollection(_lines(segs), colors="tab:gray", linewidths=0.5))

    ax.add_collection(LineCollection(_lines(state.rise_set.segments()), colors="tab:blue", linewidths=0.8))
    ax.add_collection(LineCollection(_lines(_polyline(state.max_rise_set.rise) + _polyline(state.max_rise_set.set)),
                                     colors="tab:cyan", linewidths=0.8, linestyles="dashed"))
    ax.add_collection(LineCollection(_lines(state.umbral_envelope.segments()), colors="darkred", linewidths=1.0))

    # Plot eclipse path
    central = [ c.point for c in state.central_line ]
    ax.add_collection(LineCollection(_lines(_polyline(central)), colors="red", linewidths=2))

    if state.contacts:
        for c in state.contacts:
            if c.found:
                ax.plot(c.point.lon, c.point.lat, "ko", markersize=4)
                ax.annotate(c.label, xy=(c.point.lon, c.point.lat), xytext=(4, 4),
                            textcoords="offset points", fontsize=8)

    for c in state.mag_captions + state.max_captions:
        ax.annotate(c.text, xy=(c.lon, c.lat), ha="center", va="center", color="black", fontsize=7)

    ax.set_xlim(-180, 180)
    ax.set_ylim(-90, 90)
    ax.set_aspect("equal")
    ax.set_xticks(np.linspace(-180, 180, 13))
    ax.set_yticks(np.linspace(-90, 90, 7))
    ax.grid(True, linewidth=0.3)
    ax.set_xlabel("longitude")
    ax.set_ylabel("latitude")
    ax.set_title(f"{state.eclipse.name} - {state.title}", fontsize=14)

    plt.savefig(filename, bbox_inches="tight")
    plt.close(fig)
