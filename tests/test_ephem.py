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
from astropy.time import Time

from astroutils import delta_t_for, jt_to_timestamp, jt_to_hhmm, rotate_z, geodetic_to_efi
from eclclasses import EclipseType
from eclephem import KNOWN_ECLIPSES, get_eclipse, make_eclipse, find_greatest_eclipse
from eclephem import type_from_geometry, check_type
import eclbessel


def test_catalog():
    e = get_eclipse("2019-12-26")
    assert e is KNOWN_ECLIPSES["2019-12-26"]
    assert e.type is EclipseType.ANNULAR
    assert jt_to_timestamp(e.jt_max) == "2019-12-26T05:18:53"


def test_make_eclipse_name():
    e = make_eclipse("2024-04-08 18:18:29", EclipseType.TOTAL, 69.2)
    assert e.name == "2024-04-08 (Total)"
    assert e.delta_t == 69.2


def test_delta_t():
    assert delta_t_for(Time("2019-12-26", scale="tt")) == pytest.approx(69.3, abs=0.5)
    # Beyond the IERS tables, polynomial approximation
    assert 100 < delta_t_for(Time("2100-01-01", scale="tt")) < 160


def test_time_strings():
    jt = 2458843.5 + 5.5/24 + (69.2 + 10)/86400
    assert jt_to_hhmm(jt, 69.2) == "05:30"


def test_rotate_z():
    v = np.array([ 1.0, 0.0, 0.5 ])
    assert rotate_z(v, 90) == pytest.approx([ 0.0, -1.0, 0.5 ], abs=1e-12)


def test_geodetic_to_efi_shape():
    xyz = geodetic_to_efi(np.zeros((2, 3)), np.zeros((2, 3)))
    assert xyz.shape == (2, 3, 3)
    pole = geodetic_to_efi(90.0, 0.0)
    assert pole[2] == pytest.approx(6356.752, abs=0.01)


def test_greatest_eclipse(annular, annular_ephem):
    jt = find_greatest_eclipse(annular_ephem)
    assert abs(jt - annular.jt_max) * 1440 < 2
    b = annular_ephem.bessel(jt)
    assert b.gamma == pytest.approx(0.4135, abs=0.01)
    # Annular: umbra vertex beyond the Earth
    assert b.l2 > 0
    assert 0 <= b.mu < 360


def test_type_from_geometry(annular, annular_ephem, partial, partial_ephem):
    assert type_from_geometry(annular_ephem, annular.jt_max) is EclipseType.ANNULAR
    assert type_from_geometry(partial_ephem, partial.jt_max) is EclipseType.PARTIAL
    assert check_type(annular, annular_ephem)
    assert check_type(partial, partial_ephem)


def test_partial_gamma(partial, partial_ephem):
    b = partial_ephem.bessel(partial.jt_max)
    assert b.gamma == pytest.approx(1.07, abs=0.02)
    assert eclbessel.central_point(b) is None
    assert eclbessel.umbra_function(b) > 0


def test_gast_range(annular, annular_ephem):
    gast = annular_ephem.gast(annular.jt_max + np.linspace(-0.2, 0.2, 11))
    assert np.all((gast >= 0) & (gast < 360))
