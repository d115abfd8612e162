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


import csv
import io
import json
from dataclasses import replace

import pytest

from eclclasses import EclipseDescriptor, EclipseType, Limits, GeoPoint, Contact, ContactPointSet
from eclclasses import SearchState, CentralLinePoint, UmbralEnvelope, Caption, StateBundle
from astroutils import jt_to_ut_string
from eclephem import ephemeris_for
from eclexport import write_json, write_csv, central_table, contacts_table


JD0 = 2458843.5


@pytest.fixture
def bundle():
    eclipse = EclipseDescriptor("test (Annular)", JD0 + 0.22, EclipseType.ANNULAR, 69.2)
    limits  = Limits(-10, 40, 30, 160, JD0 + 0.05, JD0 + 0.35, 2.0, 1/1440)
    a, b, c = GeoPoint(10.0, 60.0), GeoPoint(11.0, 61.0), GeoPoint(12.0, 62.0)
    contacts = ContactPointSet(Contact("P1", SearchState.FOUND, JD0 + 0.1, a),
                               Contact("P2", SearchState.ABSENT),
                               Contact("P3", SearchState.ABSENT),
                               Contact("P4", SearchState.FOUND, JD0 + 0.3, c))
    central = [ CentralLinePoint(JD0 + 0.2, a, 0.97, 200.0, 110.0),
                CentralLinePoint(JD0 + 0.21, b, 0.97, 210.0, 115.0) ]
    return StateBundle(eclipse         = eclipse,
                       title           = "test",
                       grid_size       = 4.0,
                       time_step       = 4/1440,
                       limits          = limits,
                       contours        = { 0.2: [ (a, b), (b, c) ] },
                       umbra_contours  = { 0.99: [] },
                       der_contours    = { JD0 + 0.25: [ (a, c) ] },
                       contacts        = contacts,
                       central_line    = central,
                       umbral_envelope = UmbralEnvelope(north=[ b, c ], south=[ a, b ]),
                       mag_captions    = [ Caption(10.5, 61.0, "0.0") ],
                       generation      = 3)


def test_to_dict(bundle):
    d = bundle.to_dict()
    assert d["eclipse"]["type"] == "Annular"
    assert d["generation"] == 3
    assert d["contours"][0]["level"] == 0.2
    assert d["contours"][0]["segments"][0] == [ [ 10.0, 60.0 ], [ 11.0, 61.0 ] ]
    # 2 points per segment, km from Earth's center
    assert len(d["contours"][0]["points"]) == 4
    assert 6300 < sum(v*v for v in d["contours"][0]["points"][0]) ** 0.5 < 6400
    assert d["umbra_contours"][0]["points"] == []
    assert d["der_contours"][0]["jt"] == JD0 + 0.25
    assert [ c["state"] for c in d["contacts"] ] == [ "found", "absent", "absent", "found" ]
    assert d["contacts"][1]["point"] is None
    assert len(d["central_line_points"]) == 2
    assert len(d["umbral_envelope"]["points"]) == 2 * (1 + 1 + 2)
    assert d["rise_set"]["points"] == []
    # Plain lists only
    json.dumps(d)


def test_write_json(bundle, tmp_path):
    file = tmp_path / "state.json"
    write_json(bundle, str(file))
    data = json.loads(file.read_text(encoding="utf-8"))
    assert data["title"] == "test"
    assert len(data["central_line"]) == 2


def test_write_csv(bundle, tmp_path):
    file = tmp_path / "contacts.csv"
    write_csv(bundle, "contacts", str(file), set_locale=False)
    with open(file, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == [ "contact", "state", "jt", "time_ut", "lat", "lon" ]
    assert [ r[0] for r in rows[1:] ] == [ "P1", "P2", "P3", "P4" ]
    assert rows[2][2] == ""


def test_central_table(bundle):
    table = central_table(bundle)
    assert len(table.rows) == 2
    f = io.StringIO()
    table._write(f)
    assert f.getvalue().splitlines()[0].startswith("jt")


def test_unknown_table(bundle):
    with pytest.raises(ValueError):
        write_csv(bundle, "nonsense", None, set_locale=False)


def test_ut_times_use_resolved_delta_t(bundle):
    # Descriptor without Delta T, resolved from the IERS tables
    eclipse = EclipseDescriptor("2019-12-26 (Annular)", JD0 + 0.22, EclipseType.ANNULAR, None)
    state = replace(bundle, eclipse=eclipse)
    dt = ephemeris_for(eclipse).delta_t
    assert 60 < dt < 80
    p1 = state.contacts.first_penumbra
    assert contacts_table(state).rows[0][3] == jt_to_ut_string(p1.jt, dt)
    assert contacts_table(state).rows[0][3] != jt_to_ut_string(p1.jt, 0.0)
    c = state.central_line[0]
    assert central_table(state).rows[0][1] == jt_to_ut_string(c.jt, dt)
