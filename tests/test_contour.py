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

from eclclasses import GeoPoint
from eclcontour import extract, extract_level, contour_to_points


def lat_grid(lat_min=-20.0, lat_max=40.0, lon_min=0.0, lon_max=10.0, res=1.0):
    lat = np.arange(lat_min, lat_max + res/2, res)
    lon = np.arange(lon_min, lon_max + res/2, res)
    lon2, lat2 = np.meshgrid(lon, lat)
    return lat2 - 10.0


def test_linear_field_contour_at_lat_10():
    grid = lat_grid()
    contours = extract(-20.0, 40.0, 0.0, 10.0, 1.0, grid, [0.0])
    segs = contours[0.0]
    assert len(segs) == 10
    for a, b in segs:
        assert abs(a.lat - 10.0) <= 1.0
        assert abs(b.lat - 10.0) <= 1.0
        assert 0.0 <= a.lon <= 10.0


def test_extraction_is_deterministic():
    rng = np.random.default_rng(42)
    grid = rng.random((20, 30))
    c1 = extract(0.0, 19.0, 100.0, 129.0, 1.0, grid, [0.25, 0.5, 0.75])
    c2 = extract(0.0, 19.0, 100.0, 129.0, 1.0, grid.copy(), [0.25, 0.5, 0.75])
    assert c1 == c2


def test_segments_in_row_major_cell_order():
    grid = lat_grid()
    segs = extract_level(-20.0, 0.0, 1.0, grid, 0.0)
    lons = [ min(a.lon, b.lon) for a, b in segs ]
    assert lons == sorted(lons)


def test_saddle_cell_gives_two_segments():
    # bottom left and top right above the level
    grid = np.array([[1.0, 0.0],
                     [0.0, 1.0]])
    segs = extract_level(0.0, 0.0, 1.0, grid, 0.5)
    assert len(segs) == 2
    segs_low = extract_level(0.0, 0.0, 1.0, grid, 0.6)
    assert len(segs_low) == 2
    assert segs != segs_low


def test_nan_cells_are_skipped():
    grid = np.array([[0.0, 1.0],
                     [np.nan, 1.0]])
    assert extract_level(0.0, 0.0, 1.0, grid, 0.5) == []


def test_flat_and_tiny_grids_give_no_segments():
    assert extract(0, 1, 0, 1, 1.0, np.zeros((2, 2)), [0.5]) == {0.5: []}
    assert extract_level(0, 0, 1.0, np.ones((1, 5)), 0.5) == []


def test_scale_per_level():
    grid = lat_grid() / 100         # -0.3 .. 0.3
    contours = extract(-20.0, 40.0, 0.0, 10.0, 1.0, grid, [0.0, 10.0], scale=[1.0, 100.0])
    # 10 after scaling by 100 is at lat 20
    for a, b in contours[10.0]:
        assert abs(a.lat - 20.0) <= 1.0
    assert len(contours[0.0]) == len(contours[10.0])


def test_scale_length_mismatch():
    with pytest.raises(ValueError):
        extract(0, 1, 0, 1, 1.0, np.zeros((2, 2)), [0.1, 0.2], scale=[1.0, 2.0, 3.0])


def test_longitudes_are_normalized():
    grid = lat_grid(lon_min=170.0, lon_max=190.0)
    segs = extract(-20.0, 40.0, 170.0, 190.0, 1.0, grid, [0.0])[0.0]
    assert len(segs) == 20
    for a, b in segs:
        assert -180.0 <= a.lon < 180.0
        assert -180.0 <= b.lon < 180.0


def test_contour_to_points():
    segs = [ (GeoPoint(0.0, 0.0), GeoPoint(0.0, 90.0)) ]
    points = contour_to_points({0.5: segs}, height=0.0)
    assert len(points) == 1
    assert len(points[0]) == 2
    assert points[0][0] == pytest.approx([6378.137, 0.0, 0.0], abs=1e-6)
    assert points[0][1] == pytest.approx([0.0, 6378.137, 0.0], abs=1e-6)
