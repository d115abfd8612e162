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

from astroutils import jt_to_hhmm
from eclclasses import GeoPoint
from eclcaptions import create_mag_captions, MAX_OFFSET, MAG_OFFSET


AU_KM   = 1.495978707e8
MOON_KM = 384400.0


class FixedEphemeris:
    """Sun overhead at lat 0, lon 0, Moon centered for all times"""
    delta_t = 69.0

    def sun_moon_efi(self, jt):
        return np.array([ AU_KM, 0.0, 0.0 ]), np.array([ MOON_KM, 0.0, 0.0 ])


def line(lat0, lon0, lat1, lon1, n):
    lats = np.linspace(lat0, lat1, n + 1)
    lons = np.linspace(lon0, lon1, n + 1)
    points = [ GeoPoint(float(a), float(b)) for a, b in zip(lats, lons) ]
    return list(zip(points[:-1], points[1:]))


JT1 = 2460000.5 + 9/24
JT2 = 2460000.5 + 9.5/24
JT3 = 2460000.5 + 10/24


def test_empty():
    assert create_mag_captions({}, FixedEphemeris()) == ([], [])


def test_max_line_captions():
    der = { JT1: line(-60, 0, 60, 0, 40), JT2: line(10, 10, 20, 10, 1), JT3: line(-5, 20, 5, 20, 4) }
    mag_captions, max_captions = create_mag_captions(der, FixedEphemeris())

    # Lines with a single segment get no caption
    assert len(max_captions) == 2
    c = max_captions[0]
    assert c.text == jt_to_hhmm(JT1, 69.0)
    assert c.lat == pytest.approx(-60 + MAX_OFFSET[0])
    assert c.lon == pytest.approx(0 + MAX_OFFSET[1])


def test_magnitude_level_captions_along_longest_line():
    der = { JT1: line(-60, 0, 60, 0, 40), JT3: line(-5, 20, 5, 20, 4) }
    mag_captions, _ = create_mag_captions(der, FixedEphemeris(), levels=(0.2, 0.4, 0.6, 0.8))

    texts = [ c.text for c in mag_captions ]
    assert texts[:2] == [ "0.0", "0.0" ]
    assert mag_captions[0].lat == pytest.approx(-60 + MAG_OFFSET[0])
    assert mag_captions[1].lat == pytest.approx(60 + MAG_OFFSET[0])
    # Magnitude rises towards the sub-solar point and falls again
    for level in ("0.2", "0.4", "0.6", "0.8"):
        assert texts.count(level) == 2
