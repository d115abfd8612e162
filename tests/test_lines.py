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

from eclclasses import UmbralEnvelope, RiseSetCurves
from eclcontacts import compute_contacts
from ecllines import compute_central_line, compute_umbra_extent, umbra_outline, compute_umbral_envelope
from ecllines import time_range
from eclriseset import compute_rise_set, compute_max_rise_set


STEP = 4 / 1440
AU_KM   = 1.495978707e8
MOON_KM = 384400.0


@pytest.fixture(scope="module")
def annular_fine(annular_limits):
    return annular_limits.with_times(temporal_res=1/1440)


@pytest.fixture(scope="module")
def partial_fine(partial_limits):
    return partial_limits.with_times(temporal_res=1/1440)


def test_time_range(annular_fine):
    jts = time_range(annular_fine, STEP)
    assert jts[0] == pytest.approx(annular_fine.jt_min - 1/1440)
    assert jts[-1] < annular_fine.jt_max + 1/1440
    assert np.allclose(np.diff(jts), STEP)


def test_annular_central_line(annular, annular_fine):
    line = compute_central_line(annular, annular_fine, STEP)
    assert len(line) > 10
    assert all(0.9 < c.ratio < 1.0 for c in line)
    assert all(c.width > 0 and c.duration > 0 for c in line)
    jts = [ c.jt for c in line ]
    assert jts == sorted(jts)
    # Greatest eclipse: about 3 min 40 s annularity, 118 km wide
    best = min(line, key=lambda c: abs(c.jt - annular.jt_max))
    assert 150 < best.duration < 260
    assert 80 < best.width < 160


def test_partial_has_no_central_line(partial, partial_fine):
    assert compute_central_line(partial, partial_fine, STEP) == []


def test_umbra_extent_and_outline():
    sun  = np.array([ AU_KM, 0.0, 0.0 ])
    moon = np.array([ MOON_KM, 0.0, 0.0 ])
    extent = compute_umbra_extent(0.0, 0.0, sun, moon)
    assert not extent.empty
    assert extent.lat_min == pytest.approx(-2.0)
    outline = umbra_outline(extent)
    assert len(outline[1.0]) > 0
    for a, b in outline[1.0]:
        assert abs(a.lat) < 1 and abs(a.lon) < 1


def test_umbra_extent_near_pole_is_clamped():
    sun  = np.array([ AU_KM, 0.0, 0.0 ])
    moon = np.array([ MOON_KM, 0.0, 0.0 ])
    extent = compute_umbra_extent(89.5, 0.0, sun, moon)
    assert extent.lat_max <= 90.0
    assert extent.empty


def test_partial_envelope_is_empty(partial, partial_fine):
    contacts = compute_contacts(partial, partial_fine)
    envelope = compute_umbral_envelope(partial, partial_fine, contacts, STEP)
    assert isinstance(envelope, UmbralEnvelope)
    assert not envelope
    assert envelope.segments() == []


def test_annular_envelope(annular, annular_fine):
    contacts = compute_contacts(annular, annular_fine)
    envelope = compute_umbral_envelope(annular, annular_fine, contacts, STEP)
    assert envelope
    assert len(envelope.north) == len(envelope.south)
    assert np.mean([ p.lat for p in envelope.north ]) > np.mean([ p.lat for p in envelope.south ])
    # Two closing segments at both ends
    n = len(envelope.north)
    assert len(envelope.segments()) == 2 * (n - 1) + 2


def test_annular_rise_set(annular, annular_fine):
    contacts = compute_contacts(annular, annular_fine)
    curves = compute_rise_set(annular, annular_fine, contacts, STEP)
    assert isinstance(curves, RiseSetCurves)
    n = sum(len(b) for b in curves.rise) + sum(len(b) for b in curves.set)
    assert n > 0
    for a, b in curves.segments():
        assert -90 <= a.lat <= 90 and -90 <= b.lat <= 90


def test_partial_rise_set_without_contacts(partial, partial_fine):
    curves = compute_rise_set(partial, partial_fine, None, STEP)
    assert isinstance(curves, RiseSetCurves)


def test_max_rise_set_sorted(annular, annular_fine):
    curves = compute_max_rise_set(annular, annular_fine, 10/1440)
    for side in (curves.rise, curves.set):
        lats = [ p.lat for p in side ]
        assert lats == sorted(lats)
    assert curves.rise or curves.set
