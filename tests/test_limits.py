# Copyright 2026 Martin Junius
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


import numpy as np
import pytest

from eclclasses import Limits, EclipseDescriptor, EclipseType, DegenerateEclipseError
from ecllimits import longitude_range, compute_limits


LON_AXIS = -180.0 + 2.0 * np.arange(180)


def columns(*ranges):
    cols = np.zeros(len(LON_AXIS), dtype=bool)
    for lo, hi in ranges:
        cols |= (LON_AXIS >= lo) & (LON_AXIS <= hi)
    return cols


def test_longitude_range_simple():
    assert longitude_range(columns((20, 60)), LON_AXIS, 2.0) == (20.0, 60.0)


def test_longitude_range_across_date_line():
    lon_min, lon_max = longitude_range(columns((170, 178), (-180, -170)), LON_AXIS, 2.0)
    assert lon_min == 170.0
    assert lon_max == 190.0


def test_longitude_range_largest_gap():
    # Two groups, the gap between -100 and 100 is the largest empty one
    lon_min, lon_max = longitude_range(columns((100, 120), (-120, -100)), LON_AXIS, 2.0)
    assert lon_min == 100.0
    assert lon_max == 260.0


def test_longitude_range_single_and_full():
    assert longitude_range(columns((40, 40)), LON_AXIS, 2.0) == (40.0, 40.0)
    assert longitude_range(np.ones(len(LON_AXIS), dtype=bool), LON_AXIS, 2.0) == (-180.0, 178.0)


def test_limits_widened_clamps_latitude():
    l = Limits(-88, 80, 10, 350, 0.0, 1.0, 2.0, 5/1440)
    w = l.widened(5.0, 1/24)
    assert w.lat_min == -90.0 and w.lat_max == 85.0
    assert w.lon_max - w.lon_min == 360.0
    assert w.jt_min == pytest.approx(-1/24)


def test_annular_limits(annular, annular_limits, settings):
    l = annular_limits
    assert l.jt_max - l.jt_min < 2 * settings.limits_window
    assert (l.jt_max - l.jt_min) * 24 < 10
    assert l.contains_time(annular.jt_max)
    assert l.lat_min < 0 < l.lat_max
    # Path from Saudi Arabia to Guam
    assert l.lon_min < 50 and l.lon_max > 145
    assert l.lon_max - l.lon_min < 360
    assert l.spatial_res == 2.0


def test_partial_limits(partial, partial_limits):
    l = partial_limits
    assert l.contains_time(partial.jt_max)
    # Europe, Africa and Asia
    assert l.lat_min > -20
    assert l.lat_max > 60


def test_no_eclipse_is_degenerate():
    # New moon without eclipse, 2023-03-21
    eclipse = EclipseDescriptor("2023-03-21 (none)", 2460025.22, EclipseType.PARTIAL, 69.2)
    with pytest.raises(DegenerateEclipseError):
        compute_limits(eclipse, 4.0, 10/1440)
