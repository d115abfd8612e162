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

"""Shared fixtures: ephemerides and limits for an annular and a partial eclipse"""

import pytest

from eclclasses import Settings
from eclephem import get_eclipse, ephemeris_for
from ecllimits import compute_limits


@pytest.fixture(scope="session")
def annular():
    """2019-12-26 annular eclipse, Middle East to the Pacific"""
    return get_eclipse("2019-12-26")


@pytest.fixture(scope="session")
def partial():
    """2022-10-25 partial eclipse, Europe and Asia"""
    return get_eclipse("2022-10-25")


@pytest.fixture(scope="session")
def annular_ephem(annular):
    return ephemeris_for(annular)


@pytest.fixture(scope="session")
def partial_ephem(partial):
    return ephemeris_for(partial)


@pytest.fixture(scope="session")
def settings():
    return Settings()


@pytest.fixture(scope="session")
def annular_limits(annular, settings):
    return compute_limits(annular, settings.limits_res, settings.limits_step, settings)


@pytest.fixture(scope="session")
def partial_limits(partial, settings):
    return compute_limits(partial, settings.limits_res, settings.limits_step, settings)
