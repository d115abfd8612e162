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


import json
import threading

import numpy as np
import pytest

import eclstate
from eclplot import plot_state
from eclclasses import Limits, Tier, StateBundle, ComputationCancelled, EclipseDescriptor, EclipseType, SearchState
from eclstate import EclipseComputer, max_line_times, create_contours, create_state


JD0 = 2460000.5         # 0h UT
LIMITS = Limits(0, 10, 0, 10, JD0, JD0 + 0.1, 2.0, 1/1440)
ECLIPSE = EclipseDescriptor("test", JD0 + 0.05, EclipseType.TOTAL, 0.0)
OTHER   = EclipseDescriptor("other", JD0 + 30, EclipseType.ANNULAR, 0.0)
TIERS   = (Tier(4.0, 4/1440), Tier(2.0, 2/1440), Tier(1.0, 1/1440))


def fake_state(eclipse, grid_size, time_step, settings=None, cancelled=None):
    return StateBundle(eclipse=eclipse, title=eclipse.name, grid_size=grid_size, time_step=time_step,
                       limits=LIMITS, contours={}, umbra_contours={})


def test_max_line_times_whole_half_hours():
    limits = Limits(0, 10, 0, 10, JD0 + 8.25/24, JD0 + 12.5/24, 1.0, 1/1440)
    jts = max_line_times(limits, 30/1440, 0.0)
    hours = (jts - JD0) * 24
    assert hours == pytest.approx([ 9.0, 9.5, 10.0, 10.5, 11.0 ])


def test_max_line_times_delta_t():
    limits = Limits(0, 10, 0, 10, JD0 + 8.25/24, JD0 + 12.5/24, 1.0, 1/1440)
    jts = max_line_times(limits, 30/1440, 69.0)
    # Whole half hours in UT
    hours_ut = (jts - 69.0/86400 - JD0) * 24
    assert np.allclose(hours_ut * 2, np.round(hours_ut * 2))


def test_max_line_times_short_eclipse():
    limits = Limits(0, 10, 0, 10, JD0 + 8.25/24, JD0 + 9.5/24, 1.0, 1/1440)
    assert len(max_line_times(limits, 30/1440, 0.0)) == 0


def test_computer_delivers_all_tiers(monkeypatch):
    monkeypatch.setattr(eclstate, "create_state", fake_state)
    received = []
    with EclipseComputer() as computer:
        generation = computer.submit(ECLIPSE, TIERS, received.append)
        latest = computer.wait(10)
    assert generation == 1
    assert [ b.grid_size for b in received ] == [ 4.0, 2.0, 1.0 ]
    assert all(b.generation == 1 for b in received)
    assert latest.grid_size == 1.0


def test_computer_memoizes(monkeypatch):
    calls = []
    def counting_state(*args, **kwargs):
        calls.append(args[:3])
        return fake_state(*args, **kwargs)
    monkeypatch.setattr(eclstate, "create_state", counting_state)
    with EclipseComputer() as computer:
        computer.submit(ECLIPSE, TIERS[:1])
        computer.wait(10)
        computer.submit(ECLIPSE, TIERS[:1])
        latest = computer.wait(10)
    assert len(calls) == 1
    assert latest.generation == 2


def test_computer_memo_keeps_current_eclipse(monkeypatch):
    monkeypatch.setattr(eclstate, "create_state", fake_state)
    with EclipseComputer() as computer:
        computer.submit(ECLIPSE, TIERS[:2])
        computer.wait(10)
        assert len(computer._memo) == 2
        computer.submit(OTHER, TIERS[:1])
        computer.wait(10)
        assert [ k[0] for k in computer._memo ] == [ OTHER ]


def test_stale_bundle_dropped(monkeypatch):
    monkeypatch.setattr(eclstate, "create_state", fake_state)
    received = []
    with EclipseComputer() as computer:
        computer.submit(ECLIPSE, TIERS[:1])
        computer.wait(10)
        computer.submit(OTHER, TIERS[:1])
        computer.wait(10)
        assert computer.generation == 2
        stale = fake_state(ECLIPSE, 4.0, 4/1440)
        stale.generation = 1
        assert not computer._deliver(stale, received.append)
        assert received == []
        assert computer.latest.eclipse is OTHER


def test_new_request_cancels_running_work(monkeypatch):
    started = threading.Event()

    def slow_state(eclipse, grid_size, time_step, settings=None, cancelled=None):
        if eclipse is ECLIPSE:
            started.set()
            while not cancelled():
                threading.Event().wait(0.01)
            raise ComputationCancelled("cancelled")
        return fake_state(eclipse, grid_size, time_step)

    monkeypatch.setattr(eclstate, "create_state", slow_state)
    received = []
    with EclipseComputer() as computer:
        computer.submit(ECLIPSE, TIERS, received.append)
        assert started.wait(10)
        computer.submit(OTHER, TIERS[:1], received.append)
        latest = computer.wait(10)
    assert [ b.eclipse for b in received ] == [ OTHER ]
    assert latest.eclipse is OTHER
    assert latest.generation == 2


@pytest.mark.slow
def test_finer_grid_keeps_segments(annular_ephem, annular_limits, settings):
    coarse, _ = create_contours(annular_ephem, annular_limits, 4.0, 4/1440, settings)
    fine, _   = create_contours(annular_ephem, annular_limits, 0.25, 4/1440, settings)
    for level in settings.mag_levels:
        assert len(coarse[level]) > 0
        assert len(fine[level]) >= len(coarse[level])


@pytest.mark.slow
def test_create_state_partial(partial, settings, tmp_path):
    state = create_state(partial, 4.0, 4/1440, settings)
    c = state.contacts
    assert c.first_penumbra.state == SearchState.FOUND
    assert c.last_penumbra.state == SearchState.FOUND
    assert c.first_umbra.state == SearchState.ABSENT
    assert c.last_umbra.state == SearchState.ABSENT
    assert state.central_line == []
    assert not state.umbral_envelope
    assert len(state.der_contours) > 0
    d = state.to_dict()
    assert d["umbral_envelope"]["points"] == []
    assert d["central_line_points"] == []
    json.dumps(d)
    plot_state(state, str(tmp_path / "partial.png"))
    assert (tmp_path / "partial.png").exists()


@pytest.mark.slow
def test_create_state_annular(annular, settings):
    state = create_state(annular, 4.0, 4/1440, settings)
    assert state.contacts.central
    assert len(state.central_line) > 0
    assert state.umbral_envelope
    assert all(cl.ratio < 1 for cl in state.central_line)
    json.dumps(state.to_dict())
